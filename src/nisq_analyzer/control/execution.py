# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Asynchronous execution dispatch.

:class:`ExecutionDispatcher` hands an implementation to its SDK connector
on a bounded worker pool and returns immediately with an INITIALIZED
:class:`~nisq_analyzer.models.ExecutionResult`. The connector moves the
record through its lifecycle in the shared execution store; the
dispatcher only intervenes when the connector crashes, returns without
finishing the record, or the execution is cancelled before it starts.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Mapping

from nisq_analyzer.connectors.registry import (
    CancellationToken,
    ConnectorRegistry,
    SdkConnectorProtocol,
)
from nisq_analyzer.control.selection import required_parameters
from nisq_analyzer.models import (
    ACTIVE_STATUSES,
    ExecutionResult,
    ExecutionResultStatus,
    Implementation,
    ParameterValue,
    Qpu,
    convert_to_untyped,
    infer_typed_parameter_values,
)
from nisq_analyzer.rules import RuleOracleProtocol
from nisq_analyzer.storage.types import ExecutionStoreProtocol
from nisq_analyzer.utils.common import generate_ulid


logger = logging.getLogger(__name__)

HANDOFF_MESSAGE = "Passing execution to executor plugin."


class ExecutionDispatcher:
    """
    Dispatches executions to connectors on a bounded thread pool.

    Parameters
    ----------
    registry : ConnectorRegistry
        Connectors by SDK name.
    store : ExecutionStoreProtocol
        Shared store of execution records.
    oracle : RuleOracleProtocol, optional
        Oracle used to type parameters that only rules reference, as
        selection does. Without it only declared input parameters are
        typed.
    max_workers : int, optional
        Maximum number of concurrently running executions. Further
        executions queue until a worker is free. Default is 8.
    """

    def __init__(
        self,
        registry: ConnectorRegistry,
        store: ExecutionStoreProtocol,
        *,
        oracle: RuleOracleProtocol | None = None,
        max_workers: int = 8,
    ) -> None:
        self.registry = registry
        self.store = store
        self.oracle = oracle
        self.max_workers = max_workers
        self._closed = False
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="nisq-execution",
        )
        self._lock = threading.Lock()
        self._futures: dict[str, Future[None]] = {}
        self._tokens: dict[str, CancellationToken] = {}

    def execute(
        self,
        implementation: Implementation,
        qpu: Qpu,
        raw_params: Mapping[str, str],
        *,
        analysed_depth: int = 0,
        analysed_width: int = 0,
    ) -> ExecutionResult:
        """
        Start executing an implementation on a QPU.

        Parameters
        ----------
        implementation : Implementation
            Implementation to execute.
        qpu : Qpu
            Target QPU.
        raw_params : mapping of str to str
            Raw input parameters.
        analysed_depth, analysed_width : int, optional
            Figures from a previous selection, 0 if never analyzed.

        Returns
        -------
        ExecutionResult
            The persisted record in status INITIALIZED.

        Raises
        ------
        ConnectorNotFoundError
            If no connector handles the implementation's SDK. Nothing is
            persisted in that case.
        RuntimeError
            If the dispatcher has been shut down. A record saved while the
            shutdown raced this call is marked FAILED.
        """
        logger.debug(
            "Executing implementation %s (%s) on QPU %s",
            implementation.id,
            implementation.name,
            qpu.name,
        )

        connector = self.registry.get(implementation.sdk)
        with self._lock:
            if self._closed:
                raise RuntimeError("Execution dispatcher has been shut down")

        if self.oracle is not None:
            declared = required_parameters(implementation, self.oracle)
        else:
            declared = set(implementation.input_parameters)
        typed_params = infer_typed_parameter_values(declared, raw_params)
        record = self.store.save(
            ExecutionResult(
                id=generate_ulid(),
                status=ExecutionResultStatus.INITIALIZED,
                status_code=HANDOFF_MESSAGE,
                qpu=qpu,
                implementation=implementation,
                analysed_depth=analysed_depth,
                analysed_width=analysed_width,
                input_parameters=convert_to_untyped(typed_params),
            )
        )

        token = CancellationToken()
        future: Future[None] | None = None
        with self._lock:
            if not self._closed:
                self._tokens[record.id] = token
                future = self._pool.submit(
                    self._run, connector, implementation, qpu, typed_params, record, token
                )
                self._futures[record.id] = future
        if future is None:
            self.store.compare_and_set(
                record.id,
                ACTIVE_STATUSES,
                status=ExecutionResultStatus.FAILED,
                status_code="Execution dispatcher shut down before start.",
            )
            raise RuntimeError("Execution dispatcher has been shut down")
        future.add_done_callback(lambda _f, rid=record.id: self._forget(rid))

        logger.info(
            "Dispatched execution %s to connector %s", record.id, connector.name
        )
        return record

    def _run(
        self,
        connector: SdkConnectorProtocol,
        implementation: Implementation,
        qpu: Qpu,
        typed_params: Mapping[str, ParameterValue],
        record: ExecutionResult,
        token: CancellationToken,
    ) -> None:
        if token.cancelled:
            self.store.compare_and_set(
                record.id,
                ACTIVE_STATUSES,
                status=ExecutionResultStatus.CANCELLED,
                status_code="Execution cancelled before start.",
            )
            return

        try:
            connector.execute(
                implementation.file_location,
                qpu,
                typed_params,
                record,
                self.store,
                cancel_token=token,
            )
        except Exception as e:
            logger.warning(
                "Connector %s crashed during execution %s: %s",
                connector.name,
                record.id,
                e,
                exc_info=True,
            )
            self.store.compare_and_set(
                record.id,
                ACTIVE_STATUSES,
                status=ExecutionResultStatus.FAILED,
                status_code=f"Execution failed: {e}",
            )
            return

        if self.store.compare_and_set(
            record.id,
            ACTIVE_STATUSES,
            status=ExecutionResultStatus.FAILED,
            status_code=f"Connector {connector.name} returned without a final status.",
        ):
            logger.warning(
                "Connector %s left execution %s unfinished, marked as failed",
                connector.name,
                record.id,
            )

    def _forget(self, execution_id: str) -> None:
        with self._lock:
            self._futures.pop(execution_id, None)
            self._tokens.pop(execution_id, None)

    def get_execution_result(self, execution_id: str) -> ExecutionResult:
        """Return the current state of an execution."""
        return self.store.get(execution_id)

    def cancel(self, execution_id: str) -> bool:
        """
        Request cancellation of a running or queued execution.

        Returns
        -------
        bool
            True if the execution was still in flight and was signalled.
        """
        with self._lock:
            token = self._tokens.get(execution_id)
            future = self._futures.get(execution_id)
        if token is None:
            return False

        token.cancel()
        if future is not None and future.cancel():
            self.store.compare_and_set(
                execution_id,
                ACTIVE_STATUSES,
                status=ExecutionResultStatus.CANCELLED,
                status_code="Execution cancelled before start.",
            )
            self._forget(execution_id)
        logger.info("Cancellation requested for execution %s", execution_id)
        return True

    def active_executions(self) -> list[str]:
        """Return ids of executions queued or running on the pool."""
        with self._lock:
            return list(self._futures)

    def wait(self, execution_id: str, timeout: float | None = None) -> ExecutionResult:
        """
        Block until the background task of an execution returns.

        Returns the record as stored afterwards. Raises
        ``concurrent.futures.TimeoutError`` when ``timeout`` expires.
        """
        with self._lock:
            future = self._futures.get(execution_id)
        if future is not None and not future.cancelled():
            future.result(timeout=timeout)
        return self.store.get(execution_id)

    def shutdown(self, wait: bool = True, *, cancel_pending: bool = False) -> None:
        """
        Stop accepting executions and release the worker pool.

        Parameters
        ----------
        wait : bool, optional
            Block until running executions return. Default is True.
        cancel_pending : bool, optional
            Signal every in-flight execution to cancel. Default is False.
        """
        with self._lock:
            self._closed = True
        if cancel_pending:
            for execution_id in self.active_executions():
                self.cancel(execution_id)
        self._pool.shutdown(wait=wait)
        logger.debug("Execution dispatcher shut down")

    def __enter__(self) -> ExecutionDispatcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown(wait=True)
