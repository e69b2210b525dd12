# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
In-memory storage backends.

Both backends are safe to share between the dispatching thread and
background execution workers. Records are immutable; every update
replaces the stored value under the store lock.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Collection, Iterable

from nisq_analyzer.models import (
    ExecutionResult,
    ExecutionResultStatus,
    Implementation,
    Qpu,
)
from nisq_analyzer.storage.errors import (
    ExecutionNotFoundError,
    ImplementationNotFoundError,
)
from nisq_analyzer.utils.common import utc_now_iso


logger = logging.getLogger(__name__)

# Fields callers may not change through compare_and_set
_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class InMemoryCatalog:
    """
    Catalog of implementations and QPUs held in insertion order.

    Parameters
    ----------
    implementations : iterable of Implementation, optional
        Initial implementations.
    qpus : iterable of Qpu, optional
        Initial QPUs.
    """

    def __init__(
        self,
        implementations: Iterable[Implementation] = (),
        qpus: Iterable[Qpu] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._implementations: dict[str, Implementation] = {}
        self._qpus: dict[str, Qpu] = {}
        for impl in implementations:
            self.add_implementation(impl)
        for qpu in qpus:
            self.add_qpu(qpu)

    def add_implementation(self, implementation: Implementation) -> None:
        """Insert or replace an implementation."""
        with self._lock:
            self._implementations[implementation.id] = implementation

    def add_qpu(self, qpu: Qpu) -> None:
        """Insert or replace a QPU."""
        with self._lock:
            self._qpus[qpu.id] = qpu

    def remove_qpu(self, qpu_id: str) -> None:
        """Remove a QPU if present."""
        with self._lock:
            self._qpus.pop(qpu_id, None)

    def find_implementations(self, algorithm_id: str) -> list[Implementation]:
        with self._lock:
            return [
                impl
                for impl in self._implementations.values()
                if impl.implemented_algorithm == algorithm_id
            ]

    def get_implementation(self, implementation_id: str) -> Implementation:
        with self._lock:
            impl = self._implementations.get(implementation_id)
        if impl is None:
            raise ImplementationNotFoundError(implementation_id)
        return impl

    def list_implementations(self) -> list[Implementation]:
        with self._lock:
            return list(self._implementations.values())

    def find_qpu(self, qpu_id: str) -> Qpu | None:
        with self._lock:
            return self._qpus.get(qpu_id)

    def list_qpus(self) -> list[Qpu]:
        with self._lock:
            return list(self._qpus.values())


class InMemoryExecutionStore:
    """Execution records keyed by id, with atomic status transitions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, ExecutionResult] = {}

    def save(self, result: ExecutionResult) -> ExecutionResult:
        with self._lock:
            self._records[result.id] = result
        logger.debug("Saved execution %s (%s)", result.id, result.status.value)
        return result

    def get(self, execution_id: str) -> ExecutionResult:
        with self._lock:
            record = self._records.get(execution_id)
        if record is None:
            raise ExecutionNotFoundError(execution_id)
        return record

    def list(self, implementation_id: str | None = None) -> list[ExecutionResult]:
        with self._lock:
            records = list(self._records.values())
        if implementation_id is None:
            return records
        return [r for r in records if r.implementation.id == implementation_id]

    def compare_and_set(
        self,
        execution_id: str,
        expected: ExecutionResultStatus | Collection[ExecutionResultStatus],
        **changes: Any,
    ) -> bool:
        forbidden = _IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))}")

        if isinstance(expected, ExecutionResultStatus):
            expected = (expected,)
        if "status" in changes:
            changes["status"] = ExecutionResultStatus(changes["status"])

        with self._lock:
            current = self._records.get(execution_id)
            if current is None:
                raise ExecutionNotFoundError(execution_id)
            if current.status not in expected:
                logger.debug(
                    "Rejected update of execution %s: status is %s",
                    execution_id,
                    current.status.value,
                )
                return False
            self._records[execution_id] = dataclasses.replace(
                current, updated_at=utc_now_iso(), **changes
            )

        if "status" in changes:
            logger.debug(
                "Execution %s: %s -> %s",
                execution_id,
                current.status.value,
                changes["status"].value,
            )
        return True
