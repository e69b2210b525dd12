# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Connector for SDK services reachable over HTTP.

Compilation and execution are delegated to a service that wraps one SDK
(for example a Qiskit service). The service API is:

``POST /analyze``
    Body ``{"impl_url", "qpu_name", "provider", "input_params"}``.
    ``200`` with ``{"width", "depth", "transpiled_circuit"?,
    "transpiled_language"?}`` on success; ``400``/``422`` with
    ``{"error"}`` when the implementation cannot be transpiled for the
    QPU.
``POST /execute``
    Same body. ``202`` with ``{"result_location"}`` or a ``Location``
    header pointing at the result resource.
``GET <result_location>``
    ``{"complete": false}`` while running, ``{"complete": true,
    "result": ...}`` when finished, ``{"error": "..."}`` on failure.

Configuration
-------------
With these variables set, :class:`~nisq_analyzer.control.service.NisqAnalyzerService`
registers a ``qiskit-service`` connector for the Qiskit SDK:

.. code-block:: bash

    export NISQ_ANALYZER_QISKIT_SERVICE_URL=http://localhost:5013/qiskit-service/api/v1.0
    export NISQ_ANALYZER_QISKIT_SERVICE_TOKEN=xxxxxxxx   # optional

Examples
--------
>>> from nisq_analyzer.connectors.remote import RemoteConnectorConfig, RemoteSdkConnector
>>> connector = RemoteSdkConnector(
...     name="qiskit-service",
...     sdks=["Qiskit"],
...     config=RemoteConnectorConfig(service_url="http://localhost:5013/api/v1.0"),
...     providers=["IBMQ"],
... )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nisq_analyzer.config import Config, get_config
from nisq_analyzer.connectors.registry import CancellationToken
from nisq_analyzer.errors import ConnectorError
from nisq_analyzer.models import (
    ACTIVE_STATUSES,
    CircuitInformation,
    ExecutionResult,
    ExecutionResultStatus,
    Parameter,
    ParameterValue,
    Qpu,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF = 0.5  # seconds
DEFAULT_POLL_INTERVAL = 2.0  # seconds

# Status codes a service uses to reject a transpilation
_REJECTION_CODES = frozenset({400, 422})


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class RemoteConnectorConfig:
    """
    Configuration for an SDK service client.

    Parameters
    ----------
    service_url : str
        Base URL of the SDK service API.
    token : str or None, optional
        Bearer token sent with every request.
    timeout : float, optional
        Request timeout in seconds. Default is 30.0.
    retry_attempts : int, optional
        Number of retry attempts for transient failures. Default is 3.
    retry_backoff : float, optional
        Base backoff time between retries in seconds. Default is 0.5.
    poll_interval : float, optional
        Seconds between polls of a running execution. Default is 2.0.
    verify_ssl : bool, optional
        Whether to verify SSL certificates. Default is True.

    Raises
    ------
    ValueError
        If service_url is empty.
    """

    service_url: str
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    poll_interval: float = DEFAULT_POLL_INTERVAL
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        if not self.service_url:
            raise ValueError("service_url is required")

    @classmethod
    def from_config(
        cls,
        service_url: str,
        *,
        token: str | None = None,
        config: Config | None = None,
    ) -> RemoteConnectorConfig:
        """Create a client configuration using global timeout and polling."""
        cfg = config or get_config()
        return cls(
            service_url=service_url,
            token=token,
            timeout=cfg.connector_timeout,
            poll_interval=cfg.poll_interval,
        )


# =============================================================================
# Connector
# =============================================================================


class RemoteSdkConnector:
    """
    Connector delegating to an SDK service over HTTP.

    Parameters
    ----------
    name : str
        Unique connector name.
    sdks : iterable of str
        SDK names handled by the service.
    config : RemoteConnectorConfig
        Service client configuration.
    providers : iterable of str, optional
        Providers reachable through the service.
    sdk_parameters : iterable of Parameter, optional
        Parameters every execution through this service needs (for
        example a provider token).
    """

    def __init__(
        self,
        name: str,
        sdks: Iterable[str],
        config: RemoteConnectorConfig,
        *,
        providers: Iterable[str] = (),
        sdk_parameters: Iterable[Parameter] = (),
    ) -> None:
        self.name = name
        self.config = config
        self._sdks = list(sdks)
        self._providers = list(providers)
        self._sdk_parameters = set(sdk_parameters)
        self._api_base = config.service_url.rstrip("/") + "/"
        self.session = self._create_session()

        logger.debug("RemoteSdkConnector %s initialized: service=%s", name, self._api_base)

    # -------------------------------------------------------------------------
    # Connector metadata
    # -------------------------------------------------------------------------

    def supported_sdks(self) -> list[str]:
        return list(self._sdks)

    def supported_providers(self) -> list[str]:
        return list(self._providers)

    def sdk_specific_parameters(self) -> set[Parameter]:
        return set(self._sdk_parameters)

    # -------------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------------

    def _create_session(self) -> requests.Session:
        """Create HTTP session with default headers and retry logic."""
        session = requests.Session()

        session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": "nisq-analyzer/0.1",
            }
        )
        if self.config.token:
            session.headers["Authorization"] = f"Bearer {self.config.token}"

        # Only idempotent methods are retried; execute is a POST.
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            backoff_factor=self.config.retry_backoff,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
    ) -> requests.Response:
        """
        Make an HTTP request to the service.

        ``path`` is resolved against the service URL, so absolute URLs
        returned by the service are used as they are.

        Raises
        ------
        ConnectorError
            On timeouts, connection failures and other transport errors.
        """
        url = urljoin(self._api_base, path)

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.Timeout as e:
            raise ConnectorError(
                f"Request timeout after {self.config.timeout}s: {method} {url}"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ConnectorError(f"Connection error to {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ConnectorError(f"Request failed: {method} {url}: {e}") from e

        logger.debug("%s %s %s -> %d", self.name, method, url, response.status_code)
        return response

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body)
        return str(body)

    @staticmethod
    def _request_body(
        file_location: str,
        qpu: Qpu,
        parameters: Mapping[str, ParameterValue],
    ) -> dict[str, Any]:
        return {
            "impl_url": file_location,
            "qpu_name": qpu.name,
            "provider": qpu.provider,
            "input_params": {name: pv.to_dict() for name, pv in parameters.items()},
        }

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze(
        self,
        file_location: str,
        qpu: Qpu,
        parameters: Mapping[str, ParameterValue],
    ) -> CircuitInformation | None:
        """
        Ask the service to transpile the implementation for a QPU.

        Returns None when the service is unreachable, fails, or answers
        with a malformed body; the caller then falls back to estimates.
        """
        body = self._request_body(file_location, qpu, parameters)

        try:
            response = self._request("POST", "analyze", json=body)
        except ConnectorError as e:
            logger.error("Analysis request of %s failed: %s", self.name, e)
            return None

        if response.status_code in _REJECTION_CODES:
            return CircuitInformation.failure(self._error_detail(response))

        if not response.ok:
            logger.error(
                "Analysis by %s failed with HTTP %d: %s",
                self.name,
                response.status_code,
                self._error_detail(response),
            )
            return None

        try:
            payload = response.json()
            return CircuitInformation(
                success=True,
                circuit_width=int(payload["width"]),
                circuit_depth=int(payload["depth"]),
                transpiled_circuit=payload.get("transpiled_circuit"),
                transpiled_language=payload.get("transpiled_language"),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Malformed analysis response from %s: %s", self.name, e)
            return None

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

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
        Submit an execution and poll the service until it completes.

        The record moves INITIALIZED -> RUNNING on submission and then to
        FINISHED, FAILED or CANCELLED. Every transition is a
        compare-and-set; if another actor already finalized the record
        the connector stops.
        """
        execution_id = execution_result.id

        if not store.compare_and_set(
            execution_id,
            ExecutionResultStatus.INITIALIZED,
            status=ExecutionResultStatus.RUNNING,
            status_code=f"Submitting execution to {self.name}.",
        ):
            logger.info("Execution %s no longer pending, not submitting", execution_id)
            return

        body = self._request_body(file_location, qpu, parameters)
        try:
            response = self._request("POST", "execute", json=body)
        except ConnectorError as e:
            self._fail(store, execution_id, str(e))
            return

        if not response.ok:
            self._fail(
                store,
                execution_id,
                f"Execution request rejected (HTTP {response.status_code}): "
                f"{self._error_detail(response)}",
            )
            return

        location = self._result_location(response)
        if not location:
            self._fail(store, execution_id, "Service returned no result location.")
            return

        store.compare_and_set(
            execution_id,
            ExecutionResultStatus.RUNNING,
            status_code=f"Execution running on {qpu.name}.",
        )
        self._poll(location, execution_id, store, cancel_token)

    def _result_location(self, response: requests.Response) -> str | None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("result_location"):
            return str(payload["result_location"])
        return response.headers.get("Location")

    def _poll(
        self,
        location: str,
        execution_id: str,
        store: Any,
        cancel_token: CancellationToken,
    ) -> None:
        while True:
            if cancel_token.cancelled:
                store.compare_and_set(
                    execution_id,
                    ACTIVE_STATUSES,
                    status=ExecutionResultStatus.CANCELLED,
                    status_code="Execution cancelled.",
                )
                logger.info("Execution %s cancelled", execution_id)
                return

            try:
                response = self._request("GET", location)
            except ConnectorError as e:
                self._fail(store, execution_id, str(e))
                return

            if not response.ok:
                self._fail(
                    store,
                    execution_id,
                    f"Result polling failed (HTTP {response.status_code}): "
                    f"{self._error_detail(response)}",
                )
                return

            try:
                payload = response.json()
            except ValueError:
                payload = None
            if not isinstance(payload, dict):
                self._fail(store, execution_id, "Service returned a malformed result.")
                return

            if payload.get("error"):
                self._fail(store, execution_id, str(payload["error"]))
                return

            if payload.get("complete"):
                store.compare_and_set(
                    execution_id,
                    ACTIVE_STATUSES,
                    status=ExecutionResultStatus.FINISHED,
                    status_code="Execution finished.",
                    result=payload.get("result"),
                )
                logger.info("Execution %s finished", execution_id)
                return

            cancel_token.wait(self.config.poll_interval)

    def _fail(self, store: Any, execution_id: str, message: str) -> None:
        logger.warning("Execution %s failed: %s", execution_id, message)
        store.compare_and_set(
            execution_id,
            ACTIVE_STATUSES,
            status=ExecutionResultStatus.FAILED,
            status_code=message,
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> RemoteSdkConnector:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
