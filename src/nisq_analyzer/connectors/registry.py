# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
SDK connector interface and registry.

A connector integrates one or more quantum SDKs: it compiles an
implementation for a QPU to measure circuit width and depth, and it
executes implementations. The :class:`ConnectorRegistry` maps each SDK
name to exactly one connector and is built once at startup, either from
an explicit list or from Python entry points.

Entry Point Group
-----------------
``nisq_analyzer.connectors``
    Entry points should point to connector classes implementing
    :class:`SdkConnectorProtocol` that can be instantiated without
    arguments.
"""

from __future__ import annotations

import logging
import threading
import traceback
from dataclasses import dataclass
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from nisq_analyzer.errors import ConnectorNotFoundError
from nisq_analyzer.models import (
    CircuitInformation,
    ExecutionResult,
    Parameter,
    ParameterValue,
    Qpu,
)


logger = logging.getLogger(__name__)

# Entry point group name for connector discovery
CONNECTOR_ENTRY_POINT_GROUP = "nisq_analyzer.connectors"


class CancellationToken:
    """
    Cooperative cancellation flag handed to running executions.

    Connectors should check :attr:`cancelled` between steps of a
    long-running execution and stop when it is set.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)


@runtime_checkable
class SdkConnectorProtocol(Protocol):
    """
    Protocol defining the connector interface.

    Attributes
    ----------
    name : str
        Unique connector identifier.

    Methods
    -------
    supported_sdks()
        Names of the SDKs this connector handles.
    supported_providers()
        Names of the providers this connector can reach.
    sdk_specific_parameters()
        Parameters every execution through this connector needs.
    analyze(file_location, qpu, parameters)
        Compile an implementation for a QPU and report its size.
    execute(file_location, qpu, parameters, execution_result, store, cancel_token=...)
        Run an implementation and drive its execution record.
    """

    name: str

    def supported_sdks(self) -> list[str]:
        """Return the names of supported SDKs (case-sensitive)."""
        ...

    def supported_providers(self) -> list[str]:
        """Return the names of supported providers."""
        ...

    def sdk_specific_parameters(self) -> set[Parameter]:
        """
        Return parameters required by the SDK, independent of the problem.

        These are typically credentials such as an API token.
        """
        ...

    def analyze(
        self,
        file_location: str,
        qpu: Qpu,
        parameters: Mapping[str, ParameterValue],
    ) -> CircuitInformation | None:
        """
        Compile the implementation for a QPU.

        Parameters
        ----------
        file_location : str
            URL of the implementation.
        qpu : Qpu
            Target QPU.
        parameters : mapping of str to ParameterValue
            Typed input parameters.

        Returns
        -------
        CircuitInformation or None
            Measured width and depth, an unsuccessful transpilation with
            its reason, or None if the compiler produced no information.
        """
        ...

    def execute(
        self,
        file_location: str,
        qpu: Qpu,
        parameters: Mapping[str, ParameterValue],
        execution_result: ExecutionResult,
        store: Any,
        *,
        cancel_token: CancellationToken,
    ) -> None:
        """
        Execute the implementation on a QPU.

        Runs on a background worker. The connector is responsible for
        moving ``execution_result`` out of INITIALIZED through the shared
        ``store`` using compare-and-set updates.
        """
        ...


@dataclass(frozen=True)
class ConnectorLoadError:
    """
    Captures a connector load or instantiation failure for diagnostics.

    Parameters
    ----------
    entry_point : str
        Entry point specification that failed (name=value).
    exc_type : str
        Exception type name.
    message : str
        Exception message.
    traceback : str
        Full formatted traceback.
    """

    entry_point: str
    exc_type: str
    message: str
    traceback: str

    def __str__(self) -> str:
        """Format as a concise error string."""
        return f"{self.entry_point}: {self.exc_type}: {self.message}"


def _iter_connector_entry_points() -> list[EntryPoint]:
    """Get entry points registered under ``nisq_analyzer.connectors``."""
    return list(entry_points().select(group=CONNECTOR_ENTRY_POINT_GROUP))


class ConnectorRegistry:
    """
    Explicit mapping from SDK name to connector instance.

    Parameters
    ----------
    connectors : iterable of SdkConnectorProtocol, optional
        Connectors to register immediately.

    Examples
    --------
    >>> registry = ConnectorRegistry([QiskitServiceConnector()])
    >>> registry.find("Qiskit")
    <QiskitServiceConnector ...>
    >>> registry.find("Forest") is None
    True
    """

    def __init__(self, connectors: Iterable[SdkConnectorProtocol] = ()) -> None:
        self._lock = threading.RLock()
        self._by_sdk: dict[str, SdkConnectorProtocol] = {}
        self._connectors: list[SdkConnectorProtocol] = []
        self._errors: list[ConnectorLoadError] = []
        for connector in connectors:
            self.register(connector)

    def register(self, connector: SdkConnectorProtocol) -> None:
        """
        Register a connector for all SDKs it supports.

        Raises
        ------
        TypeError
            If the object does not implement the connector protocol.
        ValueError
            If the connector name or one of its SDKs is already taken.
        """
        name = getattr(connector, "name", None)
        if not name:
            raise TypeError(
                f"Connector {type(connector).__name__} has no 'name' attribute"
            )
        if not isinstance(connector, SdkConnectorProtocol):
            raise TypeError(f"Connector {name} does not implement SdkConnectorProtocol")

        sdks = list(connector.supported_sdks())
        with self._lock:
            if any(c.name == name for c in self._connectors):
                raise ValueError(f"Duplicate connector name detected: {name!r}")
            for sdk in sdks:
                existing = self._by_sdk.get(sdk)
                if existing is not None:
                    raise ValueError(
                        f"SDK {sdk!r} of connector {name!r} is already handled "
                        f"by connector {existing.name!r}"
                    )
            for sdk in sdks:
                self._by_sdk[sdk] = connector
            self._connectors.append(connector)

        logger.info("Registered connector %s for sdks: %s", name, ", ".join(sdks))

    def load_entry_points(self) -> list[SdkConnectorProtocol]:
        """
        Discover and register connectors from entry points.

        Load failures are captured and can be retrieved via
        :meth:`load_errors`, so one broken plugin does not prevent the
        others from loading.

        Returns
        -------
        list of SdkConnectorProtocol
            Connectors registered by this call.
        """
        loaded: list[SdkConnectorProtocol] = []

        for ep in _iter_connector_entry_points():
            ep_spec = f"{ep.name}={ep.value}"
            logger.debug("Loading connector: %s", ep_spec)

            try:
                connector = ep.load()()
                self.register(connector)
                if ep.name != connector.name:
                    logger.warning(
                        "Entry point name %r does not match connector.name %r",
                        ep.name,
                        connector.name,
                    )
                loaded.append(connector)
            except Exception as e:
                with self._lock:
                    self._errors.append(
                        ConnectorLoadError(
                            entry_point=ep_spec,
                            exc_type=type(e).__name__,
                            message=str(e),
                            traceback=traceback.format_exc(),
                        )
                    )
                logger.warning(
                    "Failed to load connector %s: %s", ep_spec, e, exc_info=True
                )

        logger.debug(
            "Connector loading complete: %d loaded, %d errors",
            len(loaded),
            len(self._errors),
        )
        return loaded

    def find(self, sdk: str) -> SdkConnectorProtocol | None:
        """Return the connector for an SDK, or None if there is none."""
        with self._lock:
            return self._by_sdk.get(sdk)

    def get(self, sdk: str) -> SdkConnectorProtocol:
        """
        Return the connector for an SDK.

        Raises
        ------
        ConnectorNotFoundError
            If no connector handles the SDK.
        """
        connector = self.find(sdk)
        if connector is None:
            raise ConnectorNotFoundError(sdk, self.sdks())
        return connector

    def connectors(self) -> list[SdkConnectorProtocol]:
        """Return registered connectors in registration order."""
        with self._lock:
            return list(self._connectors)

    def names(self) -> list[str]:
        """Return connector names, sorted alphabetically."""
        return sorted(c.name for c in self.connectors())

    def sdks(self) -> list[str]:
        """Return SDK names with a connector, sorted alphabetically."""
        with self._lock:
            return sorted(self._by_sdk)

    def load_errors(self) -> list[ConnectorLoadError]:
        """Return errors captured by :meth:`load_entry_points`."""
        with self._lock:
            return list(self._errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connectors)
