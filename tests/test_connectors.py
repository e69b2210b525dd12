# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Tests for the connector registry and entry point discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import pytest
from nisq_analyzer.connectors import registry as registry_module
from nisq_analyzer.connectors.registry import (
    CancellationToken,
    ConnectorRegistry,
    SdkConnectorProtocol,
)
from nisq_analyzer.errors import ConfigurationError, ConnectorNotFoundError

from conftest import FakeConnector


@dataclass
class _EntryPoint:
    """Stand-in for importlib.metadata.EntryPoint."""

    name: str
    value: str
    target: Callable[[], Any]

    def load(self) -> Callable[[], Any]:
        return self.target


class TestCancellationToken:
    def test_initially_not_cancelled(self):
        token = CancellationToken()

        assert token.cancelled is False
        assert token.wait(0) is False

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()

        assert token.cancelled is True
        assert token.wait(10) is True


class TestConnectorRegistry:
    def test_fake_connector_implements_protocol(self, fake_connector):
        assert isinstance(fake_connector, SdkConnectorProtocol)

    def test_find_by_sdk(self):
        qiskit = FakeConnector("qiskit-service", ("Qiskit",))
        forest = FakeConnector("forest-service", ("Forest", "PyQuil"))
        registry = ConnectorRegistry([qiskit, forest])

        assert registry.find("Qiskit") is qiskit
        assert registry.find("PyQuil") is forest
        assert registry.find("Cirq") is None
        assert len(registry) == 2

    def test_sdk_lookup_is_case_sensitive(self):
        registry = ConnectorRegistry([FakeConnector()])

        assert registry.find("qiskit") is None

    def test_get_missing_raises_configuration_error(self):
        registry = ConnectorRegistry([FakeConnector()])

        with pytest.raises(ConnectorNotFoundError) as exc_info:
            registry.get("Forest")

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.sdk == "Forest"
        assert "Unable to find connector plugin for sdk name 'Forest'" in str(
            exc_info.value
        )
        assert "Qiskit" in str(exc_info.value)

    def test_duplicate_sdk_rejected(self):
        """An SDK is never served by two connectors."""
        registry = ConnectorRegistry([FakeConnector("a", ("Qiskit",))])

        with pytest.raises(ValueError, match="already handled"):
            registry.register(FakeConnector("b", ("Cirq", "Qiskit")))

        assert registry.find("Cirq") is None
        assert registry.names() == ["a"]

    def test_duplicate_name_rejected(self):
        registry = ConnectorRegistry([FakeConnector("a", ("Qiskit",))])

        with pytest.raises(ValueError, match="Duplicate connector name"):
            registry.register(FakeConnector("a", ("Cirq",)))

    def test_rejects_non_connectors(self):
        registry = ConnectorRegistry()

        with pytest.raises(TypeError, match="no 'name'"):
            registry.register(object())

        class _Named:
            name = "half"

        with pytest.raises(TypeError, match="does not implement"):
            registry.register(_Named())

    def test_listing(self):
        registry = ConnectorRegistry(
            [FakeConnector("z", ("Qiskit",)), FakeConnector("a", ("Forest",))]
        )

        assert registry.names() == ["a", "z"]
        assert registry.sdks() == ["Forest", "Qiskit"]
        assert [c.name for c in registry.connectors()] == ["z", "a"]


class TestEntryPointLoading:
    def test_loads_connectors(self, monkeypatch):
        monkeypatch.setattr(
            registry_module,
            "_iter_connector_entry_points",
            lambda: [
                _EntryPoint("fake", "tests:FakeConnector", FakeConnector),
            ],
        )
        registry = ConnectorRegistry()

        loaded = registry.load_entry_points()

        assert [c.name for c in loaded] == ["fake"]
        assert registry.find("Qiskit") is loaded[0]
        assert registry.load_errors() == []

    def test_broken_plugin_is_captured(self, monkeypatch):
        """One failing plugin does not prevent the others from loading."""

        def _broken() -> Any:
            raise RuntimeError("SDK not installed")

        monkeypatch.setattr(
            registry_module,
            "_iter_connector_entry_points",
            lambda: [
                _EntryPoint("broken", "pkg:Broken", _broken),
                _EntryPoint("forest", "pkg:Forest", lambda: FakeConnector("forest", ("Forest",))),
            ],
        )
        registry = ConnectorRegistry()

        loaded = registry.load_entry_points()

        assert [c.name for c in loaded] == ["forest"]
        errors = registry.load_errors()
        assert len(errors) == 1
        assert errors[0].entry_point == "broken=pkg:Broken"
        assert errors[0].exc_type == "RuntimeError"
        assert "SDK not installed" in str(errors[0])
        assert "Traceback" in errors[0].traceback

    def test_sdk_conflict_is_captured(self, monkeypatch):
        monkeypatch.setattr(
            registry_module,
            "_iter_connector_entry_points",
            lambda: [_EntryPoint("other", "pkg:Other", lambda: FakeConnector("other"))],
        )
        registry = ConnectorRegistry([FakeConnector()])

        assert registry.load_entry_points() == []
        assert registry.load_errors()[0].exc_type == "ValueError"
