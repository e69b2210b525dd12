# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Tests for data models and parameter typing."""

from __future__ import annotations

import pytest
from nisq_analyzer.models import (
    ExecutionResultStatus,
    Implementation,
    Parameter,
    ParameterType,
    Qpu,
    convert_to_untyped,
    infer_typed_parameter_values,
)

from conftest import make_implementation, make_qpu


class TestParameterType:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Integer", ParameterType.INTEGER),
            ("integer", ParameterType.INTEGER),
            (" FLOAT ", ParameterType.FLOAT),
            ("Boolean", ParameterType.BOOLEAN),
            ("", ParameterType.UNKNOWN),
            (None, ParameterType.UNKNOWN),
            ("Matrix", ParameterType.UNKNOWN),
        ],
    )
    def test_parse(self, raw, expected):
        assert ParameterType.parse(raw) is expected

    def test_description_not_part_of_equality(self):
        """Parameters with the same name and type are the same parameter."""
        a = Parameter("N", ParameterType.INTEGER, "Number to factor")
        b = Parameter("N", ParameterType.INTEGER, "")

        assert a == b
        assert len({a, b}) == 1


class TestInferTypedParameterValues:
    def test_converts_declared_types(self):
        declared = [
            Parameter("N", ParameterType.INTEGER),
            Parameter("p", ParameterType.FLOAT),
            Parameter("flag", ParameterType.BOOLEAN),
            Parameter("name", ParameterType.STRING),
        ]

        typed = infer_typed_parameter_values(
            declared, {"N": "15", "p": "0.5", "flag": "yes", "name": "bell"}
        )

        assert typed["N"].value == 15
        assert typed["N"].type is ParameterType.INTEGER
        assert typed["p"].value == 0.5
        assert typed["flag"].value is True
        assert typed["name"].value == "bell"

    def test_undeclared_values_kept_as_unknown(self):
        """Every supplied value survives, undeclared ones untyped."""
        typed = infer_typed_parameter_values([], {"token": "abc"})

        assert typed["token"].type is ParameterType.UNKNOWN
        assert typed["token"].value == "abc"

    def test_failed_conversion_falls_back_to_string(self):
        typed = infer_typed_parameter_values(
            [Parameter("N", ParameterType.INTEGER)], {"N": "fifteen"}
        )

        assert typed["N"].type is ParameterType.UNKNOWN
        assert typed["N"].value == "fifteen"
        assert typed["N"].raw == "fifteen"

    def test_untyped_round_trip_preserves_raw_strings(self):
        raw = {"N": " 15", "flag": "0"}
        declared = [
            Parameter("N", ParameterType.INTEGER),
            Parameter("flag", ParameterType.BOOLEAN),
        ]

        assert convert_to_untyped(infer_typed_parameter_values(declared, raw)) == raw

    def test_wire_form(self):
        typed = infer_typed_parameter_values([Parameter("N", ParameterType.INTEGER)], {"N": "7"})

        assert typed["N"].to_dict() == {"rawValue": "7", "type": "Integer"}


class TestQpu:
    def test_max_circuit_depth_floors(self):
        assert make_qpu(t1=12.9, max_gate_time=1.0).max_circuit_depth == 12
        assert make_qpu(t1=90000, max_gate_time=800).max_circuit_depth == 112

    @pytest.mark.parametrize("gate_time", [0.0, -1.0])
    def test_unknown_gate_time_means_no_depth_bound(self, gate_time):
        assert make_qpu(max_gate_time=gate_time).max_circuit_depth is None

    def test_from_dict_defaults(self):
        qpu = Qpu.from_dict({"id": "q", "qubit_count": "5"})

        assert qpu.name == "q"
        assert qpu.qubit_count == 5
        assert qpu.supported_sdks == ()
        assert qpu.max_circuit_depth is None

    def test_supports_sdk_is_case_sensitive(self):
        qpu = make_qpu(sdks=("Qiskit",))

        assert qpu.supports_sdk("Qiskit")
        assert not qpu.supports_sdk("qiskit")


class TestImplementation:
    def test_dict_round_trip(self):
        impl = make_implementation(
            "shor-n",
            params=(Parameter("N", ParameterType.INTEGER),),
            selection_rule="N > 2",
        )

        assert Implementation.from_dict(impl.to_dict()) == impl

    def test_empty_rules_become_none(self):
        impl = Implementation.from_dict(
            {
                "id": "x",
                "implemented_algorithm": "a",
                "sdk": "Qiskit",
                "selection_rule": "",
            }
        )

        assert impl.selection_rule is None
        assert impl.width_rule is None


class TestExecutionResultStatus:
    @pytest.mark.parametrize(
        "status,terminal",
        [
            (ExecutionResultStatus.INITIALIZED, False),
            (ExecutionResultStatus.RUNNING, False),
            (ExecutionResultStatus.FINISHED, True),
            (ExecutionResultStatus.FAILED, True),
            (ExecutionResultStatus.CANCELLED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal is terminal
