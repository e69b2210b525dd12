# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Control service.

:class:`NisqAnalyzerService` is the single entry point used by the CLI
and by embedding applications. It wires the catalog, the rule oracle,
the connector registry and the execution store together.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from nisq_analyzer.config import Config, get_config
from nisq_analyzer.connectors.registry import ConnectorRegistry, SdkConnectorProtocol
from nisq_analyzer.control.execution import ExecutionDispatcher
from nisq_analyzer.control.selection import Selector, required_parameters
from nisq_analyzer.models import (
    AnalysisResult,
    ExecutionResult,
    Implementation,
    Parameter,
    Qpu,
)
from nisq_analyzer.rules import ExpressionRuleOracle, RuleOracleProtocol
from nisq_analyzer.storage.errors import QpuNotFoundError
from nisq_analyzer.storage.memory import InMemoryExecutionStore
from nisq_analyzer.storage.types import CatalogProtocol, ExecutionStoreProtocol


logger = logging.getLogger(__name__)

QISKIT_SDK = "Qiskit"
QISKIT_SERVICE_NAME = "qiskit-service"


def _register_qiskit_service(registry: ConnectorRegistry, cfg: Config) -> None:
    """Register the configured Qiskit service unless Qiskit is already served."""
    existing = registry.find(QISKIT_SDK)
    if existing is not None:
        logger.warning(
            "Ignoring Qiskit service at %s: Qiskit is handled by connector %s",
            cfg.qiskit_service_url,
            existing.name,
        )
        return

    from nisq_analyzer.connectors.remote import RemoteConnectorConfig, RemoteSdkConnector

    registry.register(
        RemoteSdkConnector(
            name=QISKIT_SERVICE_NAME,
            sdks=[QISKIT_SDK],
            config=RemoteConnectorConfig.from_config(
                cfg.qiskit_service_url,
                token=cfg.qiskit_service_token,
                config=cfg,
            ),
            providers=["IBMQ"],
        )
    )


class NisqAnalyzerService:
    """
    Selection and execution on behalf of callers.

    Parameters
    ----------
    catalog : CatalogProtocol
        Source of implementations and QPUs.
    oracle : RuleOracleProtocol, optional
        Rule oracle. Defaults to an :class:`ExpressionRuleOracle` over
        ``catalog``.
    registry : ConnectorRegistry, optional
        Connector registry. Defaults to an empty registry, extended from
        entry points when ``config.load_entry_points`` is set and with a
        remote Qiskit service when ``config.qiskit_service_url`` is set.
    connectors : iterable of SdkConnectorProtocol, optional
        Connectors to register in addition.
    store : ExecutionStoreProtocol, optional
        Execution store. Defaults to an in-memory store.
    config : Config, optional
        Configuration. Uses the global config if not provided.

    Examples
    --------
    >>> from nisq_analyzer import NisqAnalyzerService, load_catalog
    >>> service = NisqAnalyzerService(load_catalog("catalog.json"))
    >>> results = service.perform_selection("shor", {"N": "15"})
    """

    def __init__(
        self,
        catalog: CatalogProtocol,
        *,
        oracle: RuleOracleProtocol | None = None,
        registry: ConnectorRegistry | None = None,
        connectors: Iterable[SdkConnectorProtocol] = (),
        store: ExecutionStoreProtocol | None = None,
        config: Config | None = None,
    ) -> None:
        cfg = config if config is not None else get_config()
        self.config = cfg
        self.catalog = catalog
        self.oracle = oracle if oracle is not None else ExpressionRuleOracle(catalog)

        default_registry = registry is None
        if registry is None:
            registry = ConnectorRegistry()
            if cfg.load_entry_points:
                registry.load_entry_points()
        for connector in connectors:
            registry.register(connector)
        if default_registry and cfg.qiskit_service_url:
            _register_qiskit_service(registry, cfg)
        self.registry = registry

        self.store = store if store is not None else InMemoryExecutionStore()
        self.selector = Selector(catalog, self.oracle, registry)
        self.dispatcher = ExecutionDispatcher(
            registry, self.store, oracle=self.oracle, max_workers=cfg.max_workers
        )

    def perform_selection(
        self,
        algorithm_id: str,
        raw_params: Mapping[str, str],
    ) -> list[AnalysisResult]:
        """Select suitable implementations and QPUs for an algorithm."""
        return self.selector.perform_selection(algorithm_id, raw_params)

    def get_required_selection_parameters(self, algorithm_id: str) -> set[Parameter]:
        """
        Get the parameters a caller should supply to select for an algorithm.

        The union of the SDK-specific parameters of every registered
        connector and the required parameters of every implementation of
        the algorithm.
        """
        required: set[Parameter] = set()
        for connector in self.registry.connectors():
            required.update(connector.sdk_specific_parameters())
        for impl in self.catalog.find_implementations(algorithm_id):
            required.update(required_parameters(impl, self.oracle))
        return required

    def execute(
        self,
        implementation: Implementation,
        qpu: Qpu,
        raw_params: Mapping[str, str],
        *,
        analysed_depth: int = 0,
        analysed_width: int = 0,
    ) -> ExecutionResult:
        """Dispatch an execution; see :meth:`ExecutionDispatcher.execute`."""
        return self.dispatcher.execute(
            implementation,
            qpu,
            raw_params,
            analysed_depth=analysed_depth,
            analysed_width=analysed_width,
        )

    def execute_by_id(
        self,
        implementation_id: str,
        qpu_id: str,
        raw_params: Mapping[str, str],
        *,
        analysed_depth: int = 0,
        analysed_width: int = 0,
    ) -> ExecutionResult:
        """
        Dispatch an execution for catalog ids.

        Raises
        ------
        ImplementationNotFoundError
            If the implementation id is unknown.
        QpuNotFoundError
            If the QPU id is unknown.
        """
        implementation = self.catalog.get_implementation(implementation_id)
        qpu = self.catalog.find_qpu(qpu_id)
        if qpu is None:
            raise QpuNotFoundError(qpu_id)
        return self.execute(
            implementation,
            qpu,
            raw_params,
            analysed_depth=analysed_depth,
            analysed_width=analysed_width,
        )

    def get_execution_result(self, execution_id: str) -> ExecutionResult:
        """Return the current state of an execution."""
        return self.store.get(execution_id)

    def cancel_execution(self, execution_id: str) -> bool:
        """Request cancellation of an in-flight execution."""
        return self.dispatcher.cancel(execution_id)

    def close(self, wait: bool = True) -> None:
        """Shut down the execution worker pool."""
        self.dispatcher.shutdown(wait=wait)

    def __enter__(self) -> NisqAnalyzerService:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
