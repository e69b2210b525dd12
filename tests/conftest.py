# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Test fixtures for nisq-analyzer.

Provides an in-memory catalog, scriptable fake connectors and CLI helpers
for testing without external SDK services.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest
from click.testing import CliRunner
from nisq_analyzer.cli import cli
from nisq_analyzer.config import Config, reset_config
from nisq_analyzer.connectors.registry import CancellationToken, ConnectorRegistry
from nisq_analyzer.control.service import NisqAnalyzerService
from nisq_analyzer.models import (
    ACTIVE_STATUSES,
    CircuitInformation,
    ExecutionResult,
    ExecutionResultStatus,
    Implementation,
    Parameter,
    ParameterType,
    ParameterValue,
    Qpu,
)
from nisq_analyzer.rules import ExpressionRuleOracle
from nisq_analyzer.storage.memory import InMemoryCatalog, InMemoryExecutionStore


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Remove NISQ_ANALYZER_* variables and reset cached config."""
    for key in list(os.environ):
        if key.startswith("NISQ_ANALYZER_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config with a temp home and entry point discovery disabled."""
    return Config(root_dir=tmp_path / ".nisq-analyzer", load_entry_points=False)


# =============================================================================
# Fake connectors
# =============================================================================


class FakeConnector:
    """
    Scriptable connector.

    ``analysis`` is returned by :meth:`analyze` (or raised when it is an
    exception); a mapping from QPU id gives per-QPU answers. ``on_execute``
    runs in place of a real execution.
    """

    def __init__(
        self,
        name: str = "fake",
        sdks: tuple[str, ...] = ("Qiskit",),
        *,
        analysis: Any = None,
        on_execute: Callable[..., None] | None = None,
        sdk_parameters: tuple[Parameter, ...] = (),
        providers: tuple[str, ...] = (),
    ) -> None:
        self.name = name
        self._sdks = list(sdks)
        self._providers = list(providers)
        self._sdk_parameters = set(sdk_parameters)
        self.analysis = analysis
        self.on_execute = on_execute
        self.analyze_calls: list[tuple[str, str, dict[str, ParameterValue]]] = []
        self.execute_calls: list[str] = []
        self.execute_params: list[dict[str, ParameterValue]] = []

    def supported_sdks(self) -> list[str]:
        return list(self._sdks)

    def supported_providers(self) -> list[str]:
        return list(self._providers)

    def sdk_specific_parameters(self) -> set[Parameter]:
        return set(self._sdk_parameters)

    def analyze(
        self,
        file_location: str,
        qpu: Qpu,
        parameters: Mapping[str, ParameterValue],
    ) -> CircuitInformation | None:
        self.analyze_calls.append((file_location, qpu.id, dict(parameters)))
        answer = self.analysis
        if isinstance(answer, Mapping):
            answer = answer.get(qpu.id)
        if isinstance(answer, Exception):
            raise answer
        return answer

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
        self.execute_calls.append(execution_result.id)
        self.execute_params.append(dict(parameters))
        if self.on_execute is not None:
            self.on_execute(execution_result, store, cancel_token)
            return
        store.compare_and_set(
            execution_result.id,
            ExecutionResultStatus.INITIALIZED,
            status=ExecutionResultStatus.RUNNING,
            status_code="Running.",
        )
        store.compare_and_set(
            execution_result.id,
            ACTIVE_STATUSES,
            status=ExecutionResultStatus.FINISHED,
            status_code="Done.",
            result={"counts": {"00": 512, "11": 512}},
        )


@pytest.fixture
def fake_connector() -> FakeConnector:
    """Qiskit connector answering every analysis with None."""
    return FakeConnector()


@pytest.fixture
def blocking_connector() -> tuple[FakeConnector, threading.Event, threading.Event]:
    """
    Connector whose execution blocks until released.

    Returns the connector, a ``started`` event set once execution begins
    and a ``release`` event that lets it finish.
    """
    started = threading.Event()
    release = threading.Event()

    def _execute(record: ExecutionResult, store: Any, token: CancellationToken) -> None:
        store.compare_and_set(
            record.id,
            ExecutionResultStatus.INITIALIZED,
            status=ExecutionResultStatus.RUNNING,
            status_code="Running.",
        )
        started.set()
        while not release.wait(0.01):
            if token.cancelled:
                store.compare_and_set(
                    record.id,
                    ACTIVE_STATUSES,
                    status=ExecutionResultStatus.CANCELLED,
                    status_code="Cancelled.",
                )
                return
        store.compare_and_set(
            record.id,
            ACTIVE_STATUSES,
            status=ExecutionResultStatus.FINISHED,
            status_code="Done.",
        )

    return FakeConnector(on_execute=_execute), started, release


# =============================================================================
# Catalog
# =============================================================================


def make_qpu(
    qpu_id: str = "qpu",
    *,
    qubit_count: int = 6,
    t1: float = 12.0,
    max_gate_time: float = 1.0,
    sdks: tuple[str, ...] = ("Qiskit",),
    **kwargs: Any,
) -> Qpu:
    """Build a QPU; defaults give capacity 6 and max depth 12."""
    return Qpu(
        id=qpu_id,
        name=kwargs.pop("name", qpu_id),
        qubit_count=qubit_count,
        t1=t1,
        max_gate_time=max_gate_time,
        supported_sdks=sdks,
        **kwargs,
    )


def make_implementation(
    impl_id: str = "impl",
    *,
    algorithm: str = "shor",
    sdk: str = "Qiskit",
    params: tuple[Parameter, ...] = (),
    selection_rule: str | None = None,
    width_rule: str | None = "5",
    depth_rule: str | None = "10",
) -> Implementation:
    """Build an implementation; defaults estimate width 5 and depth 10."""
    return Implementation(
        id=impl_id,
        name=impl_id,
        implemented_algorithm=algorithm,
        sdk=sdk,
        file_location=f"https://example.com/{impl_id}.py",
        input_parameters=params,
        selection_rule=selection_rule,
        width_rule=width_rule,
        depth_rule=depth_rule,
    )


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """
    Catalog for algorithm ``shor``.

    - ``shor-n``: needs N (Integer), selection rule ``N % 2 == 1``, width
      ``2 * ceil(log2(N))``, depth ``N * 2``.
    - ``shor-fixed``: no parameters, width 5, depth 10.
    - QPUs ``small`` (6 qubits, depth 12), ``large`` (27 qubits, depth 100)
      and ``forest`` (16 qubits, Forest only).
    """
    return InMemoryCatalog(
        implementations=[
            make_implementation(
                "shor-n",
                params=(Parameter("N", ParameterType.INTEGER, "Number to factor"),),
                selection_rule="N % 2 == 1",
                width_rule="2 * ceil(log2(N))",
                depth_rule="N * 2",
            ),
            make_implementation("shor-fixed"),
            make_implementation("grover", algorithm="grover", width_rule="3"),
        ],
        qpus=[
            make_qpu("small"),
            make_qpu("large", qubit_count=27, t1=100.0),
            make_qpu("forest", qubit_count=16, t1=100.0, sdks=("Forest",)),
        ],
    )


@pytest.fixture
def oracle(catalog: InMemoryCatalog) -> ExpressionRuleOracle:
    """Expression oracle over the test catalog."""
    return ExpressionRuleOracle(catalog)


@pytest.fixture
def store() -> InMemoryExecutionStore:
    """Empty execution store."""
    return InMemoryExecutionStore()


@pytest.fixture
def make_service(
    catalog: InMemoryCatalog,
    store: InMemoryExecutionStore,
    config: Config,
) -> Callable[..., NisqAnalyzerService]:
    """Factory building services over the test catalog; closed on teardown."""
    services: list[NisqAnalyzerService] = []

    def _make(*connectors: Any, **kwargs: Any) -> NisqAnalyzerService:
        kwargs.setdefault("store", store)
        kwargs.setdefault("config", config)
        service = NisqAnalyzerService(
            catalog,
            registry=ConnectorRegistry(connectors),
            **kwargs,
        )
        services.append(service)
        return service

    yield _make

    for service in services:
        service.close(wait=False)


# =============================================================================
# CLI
# =============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def catalog_file(tmp_path: Path, catalog: InMemoryCatalog) -> Path:
    """The test catalog written as a JSON document."""
    path = tmp_path / "catalog.json"
    document = {
        "qpus": [q.to_dict() for q in catalog.list_qpus()],
        "implementations": [i.to_dict() for i in catalog.list_implementations()],
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def invoke(
    cli_runner: CliRunner,
    catalog_file: Path,
    clean_env: pytest.MonkeyPatch,
) -> Callable[..., Any]:
    """
    Invoke CLI commands against the test catalog.

    Pass ``service=`` to run commands against a prepared service.

    Usage:
        result = invoke("select", "shor", "-p", "N=15")
        result = invoke("qpus", "--format", "json")
    """
    clean_env.setenv("NISQ_ANALYZER_LOAD_ENTRY_POINTS", "false")

    def _invoke(*args: str, service: NisqAnalyzerService | None = None):
        obj = {"service": service} if service is not None else None
        return cli_runner.invoke(
            cli,
            ["--catalog", str(catalog_file), *args],
            obj=obj,
            catch_exceptions=False,
        )

    return _invoke
