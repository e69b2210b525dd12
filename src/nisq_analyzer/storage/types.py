# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Storage protocols.

The selection pipeline only reads the catalog. The execution store is
shared between the dispatcher, which creates records, and connectors,
which move them through their lifecycle.
"""

from __future__ import annotations

from typing import Any, Collection, Protocol, runtime_checkable

from nisq_analyzer.models import (
    ExecutionResult,
    ExecutionResultStatus,
    Implementation,
    Qpu,
)


@runtime_checkable
class CatalogProtocol(Protocol):
    """Read access to implementations and QPUs."""

    def find_implementations(self, algorithm_id: str) -> list[Implementation]:
        """Return implementations of an algorithm, in stable order."""
        ...

    def get_implementation(self, implementation_id: str) -> Implementation:
        """
        Return an implementation by id.

        Raises
        ------
        ImplementationNotFoundError
            If the id is unknown.
        """
        ...

    def list_implementations(self) -> list[Implementation]:
        """Return all implementations."""
        ...

    def find_qpu(self, qpu_id: str) -> Qpu | None:
        """Return a QPU by id, or None if it is unknown."""
        ...

    def list_qpus(self) -> list[Qpu]:
        """Return all QPUs, in stable order."""
        ...


@runtime_checkable
class ExecutionStoreProtocol(Protocol):
    """Shared store of execution records."""

    def save(self, result: ExecutionResult) -> ExecutionResult:
        """Insert or replace a record."""
        ...

    def get(self, execution_id: str) -> ExecutionResult:
        """
        Return the current state of a record.

        Raises
        ------
        ExecutionNotFoundError
            If the id is unknown.
        """
        ...

    def list(self, implementation_id: str | None = None) -> list[ExecutionResult]:
        """Return records, optionally filtered by implementation."""
        ...

    def compare_and_set(
        self,
        execution_id: str,
        expected: ExecutionResultStatus | Collection[ExecutionResultStatus],
        **changes: Any,
    ) -> bool:
        """
        Atomically update a record if its status is one of ``expected``.

        Parameters
        ----------
        execution_id : str
            Record to update.
        expected : ExecutionResultStatus or collection of them
            Statuses the record must currently have.
        **changes
            Field values to set (e.g. ``status``, ``status_code``,
            ``result``).

        Returns
        -------
        bool
            True if the record was updated, False if its status did not
            match.
        """
        ...
