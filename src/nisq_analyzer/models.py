# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Core data models.

Catalog entities (:class:`Implementation`, :class:`Qpu`) are immutable
during a selection run. :class:`CircuitInformation` is produced by a
connector per analysis call, :class:`AnalysisResult` per accepted
(implementation, QPU) pair, and :class:`ExecutionResult` per execution
request.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from nisq_analyzer.utils.common import utc_now_iso


logger = logging.getLogger(__name__)


# =============================================================================
# Parameters
# =============================================================================


class ParameterType(str, Enum):
    """Semantic type of an input parameter."""

    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    BOOLEAN = "Boolean"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | ParameterType | None) -> ParameterType:
        """Resolve a type from its name, case-insensitively."""
        if isinstance(value, ParameterType):
            return value
        if not value:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class Parameter:
    """
    A named, typed input of an implementation.

    Parameters
    ----------
    name : str
        Parameter name as supplied by callers.
    type : ParameterType
        Declared semantic type.
    description : str
        Free-form description, not part of equality.
    """

    name: str
    type: ParameterType = ParameterType.UNKNOWN
    description: str = field(default="", compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Parameter:
        return cls(
            name=str(data["name"]),
            type=ParameterType.parse(data.get("type")),
            description=str(data.get("description", "")),
        )


_BOOL_VALUES = {
    "true": True,
    "1": True,
    "yes": True,
    "false": False,
    "0": False,
    "no": False,
}


def _convert(raw: str, type_: ParameterType) -> Any:
    if type_ is ParameterType.INTEGER:
        return int(raw.strip())
    if type_ is ParameterType.FLOAT:
        return float(raw.strip())
    if type_ is ParameterType.BOOLEAN:
        return _BOOL_VALUES[raw.strip().lower()]
    return raw


@dataclass(frozen=True)
class ParameterValue:
    """
    A runtime parameter value with its inferred type.

    Parameters
    ----------
    name : str
        Parameter name.
    type : ParameterType
        Type the value was converted to.
    raw : str
        Value exactly as supplied by the caller.
    value : Any
        Converted Python value.
    """

    name: str
    type: ParameterType
    raw: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"rawValue": self.raw, "type": self.type.value}


def infer_typed_parameter_values(
    parameters: Iterable[Parameter],
    raw_values: Mapping[str, str],
) -> dict[str, ParameterValue]:
    """
    Type raw parameter values using declared parameter types.

    Every supplied value is kept. Values whose name has no declaration, or
    which fail to convert to their declared type, are kept as strings typed
    :attr:`ParameterType.UNKNOWN`.

    Parameters
    ----------
    parameters : iterable of Parameter
        Declared parameters of an implementation.
    raw_values : mapping of str to str
        Raw values as supplied by the caller.

    Returns
    -------
    dict
        Mapping of parameter name to :class:`ParameterValue`, in the order
        of ``raw_values``.
    """
    declared = {p.name: p.type for p in parameters}
    typed: dict[str, ParameterValue] = {}

    for name, raw in raw_values.items():
        raw_str = str(raw)
        type_ = declared.get(name, ParameterType.UNKNOWN)
        try:
            value = _convert(raw_str, type_)
        except (ValueError, KeyError):
            logger.debug(
                "Unable to convert parameter %s=%r to %s, keeping it as string",
                name,
                raw_str,
                type_.value,
            )
            type_ = ParameterType.UNKNOWN
            value = raw_str
        typed[name] = ParameterValue(name=name, type=type_, raw=raw_str, value=value)

    return typed


def convert_to_untyped(values: Mapping[str, ParameterValue]) -> dict[str, str]:
    """Return the raw string form of typed parameter values."""
    return {name: pv.raw for name, pv in values.items()}


# =============================================================================
# Catalog entities
# =============================================================================


@dataclass(frozen=True)
class Implementation:
    """
    A concrete, runnable encoding of an algorithm for one SDK.

    Parameters
    ----------
    id : str
        Implementation identifier.
    name : str
        Display name.
    implemented_algorithm : str
        Identifier of the algorithm this implements.
    sdk : str
        Name of the SDK the implementation is written for (case-sensitive).
    file_location : str
        URL of the implementation source.
    input_parameters : tuple of Parameter
        Declared input parameters, in declaration order.
    selection_rule, width_rule, depth_rule : str or None
        Optional rules understood by the rule oracle.
    """

    id: str
    name: str
    implemented_algorithm: str
    sdk: str
    file_location: str
    input_parameters: tuple[Parameter, ...] = ()
    selection_rule: str | None = None
    width_rule: str | None = None
    depth_rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "implemented_algorithm": self.implemented_algorithm,
            "sdk": self.sdk,
            "file_location": self.file_location,
            "input_parameters": [p.to_dict() for p in self.input_parameters],
            "selection_rule": self.selection_rule,
            "width_rule": self.width_rule,
            "depth_rule": self.depth_rule,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Implementation:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            implemented_algorithm=str(data["implemented_algorithm"]),
            sdk=str(data["sdk"]),
            file_location=str(data.get("file_location", "")),
            input_parameters=tuple(
                Parameter.from_dict(p) for p in data.get("input_parameters", ())
            ),
            selection_rule=data.get("selection_rule") or None,
            width_rule=data.get("width_rule") or None,
            depth_rule=data.get("depth_rule") or None,
        )


@dataclass(frozen=True)
class Qpu:
    """
    An execution target with finite capacity.

    Parameters
    ----------
    id : str
        QPU identifier.
    name : str
        Backend name as known to the provider.
    qubit_count : int
        Maximum number of qubits.
    t1 : float
        Coherence time constant.
    max_gate_time : float
        Maximum duration of an elementary gate, same unit as ``t1``.
    supported_sdks : tuple of str
        Names of SDKs that can target this QPU.
    simulator : bool
        True for simulators.
    provider : str
        Provider name.
    """

    id: str
    name: str
    qubit_count: int
    t1: float
    max_gate_time: float
    supported_sdks: tuple[str, ...] = ()
    simulator: bool = False
    provider: str = ""

    @property
    def max_circuit_depth(self) -> int | None:
        """
        Number of gates that fit in the coherence window.

        ``floor(t1 / max_gate_time)``, or None when no positive gate time
        is known.
        """
        if self.max_gate_time <= 0:
            return None
        return math.floor(self.t1 / self.max_gate_time)

    def supports_sdk(self, sdk: str) -> bool:
        return sdk in self.supported_sdks

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "qubit_count": self.qubit_count,
            "t1": self.t1,
            "max_gate_time": self.max_gate_time,
            "supported_sdks": list(self.supported_sdks),
            "simulator": self.simulator,
            "provider": self.provider,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Qpu:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            qubit_count=int(data["qubit_count"]),
            t1=float(data.get("t1", 0.0)),
            max_gate_time=float(data.get("max_gate_time", 0.0)),
            supported_sdks=tuple(str(s) for s in data.get("supported_sdks", ())),
            simulator=bool(data.get("simulator", False)),
            provider=str(data.get("provider", "")),
        )


# =============================================================================
# Analysis
# =============================================================================


@dataclass(frozen=True)
class CircuitInformation:
    """
    Outcome of compiling an implementation for one QPU.

    Parameters
    ----------
    success : bool
        Whether transpilation succeeded.
    circuit_width : int
        Measured number of qubits.
    circuit_depth : int
        Measured circuit depth.
    error : str or None
        Reason for an unsuccessful transpilation.
    transpiled_circuit : str or None
        Transpiled circuit, if the compiler returns it.
    transpiled_language : str or None
        Language of ``transpiled_circuit`` (e.g. "OpenQASM").
    """

    success: bool
    circuit_width: int = 0
    circuit_depth: int = 0
    error: str | None = None
    transpiled_circuit: str | None = None
    transpiled_language: str | None = None

    @classmethod
    def failure(cls, error: str) -> CircuitInformation:
        """Create an unsuccessful transpilation result."""
        return cls(success=False, error=error)


@dataclass(frozen=True)
class AnalysisResult:
    """
    An accepted (implementation, QPU) pair.

    ``estimate`` is True when depth and width come from rules only, False
    when they were measured by compiling the implementation.
    """

    qpu: Qpu
    implementation: Implementation
    estimate: bool
    analysed_depth: int
    analysed_width: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "qpu": self.qpu.id,
            "qpu_name": self.qpu.name,
            "implementation": self.implementation.id,
            "implementation_name": self.implementation.name,
            "sdk": self.implementation.sdk,
            "estimate": self.estimate,
            "analysed_depth": self.analysed_depth,
            "analysed_width": self.analysed_width,
        }


# =============================================================================
# Execution
# =============================================================================


class ExecutionResultStatus(str, Enum):
    """Lifecycle states of an execution."""

    INITIALIZED = "INITIALIZED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {
        ExecutionResultStatus.FINISHED,
        ExecutionResultStatus.FAILED,
        ExecutionResultStatus.CANCELLED,
    }
)

#: Statuses from which an execution may still change.
ACTIVE_STATUSES: frozenset[ExecutionResultStatus] = frozenset(
    {ExecutionResultStatus.INITIALIZED, ExecutionResultStatus.RUNNING}
)


@dataclass(frozen=True)
class ExecutionResult:
    """
    Tracked state of one execution.

    Records are immutable values; the execution store replaces them
    atomically on every status change.

    Parameters
    ----------
    id : str
        Execution identifier (ULID).
    status : ExecutionResultStatus
        Current status.
    status_code : str
        Human-readable status message.
    qpu : Qpu
        Target QPU.
    implementation : Implementation
        Executed implementation.
    analysed_depth, analysed_width : int
        Depth and width known when the execution was requested (0 if
        never analyzed).
    input_parameters : dict of str to str
        Snapshot of the untyped input parameters.
    result : Any
        Opaque result payload, once available.
    created_at, updated_at : str
        ISO 8601 UTC timestamps.
    """

    id: str
    status: ExecutionResultStatus
    status_code: str
    qpu: Qpu
    implementation: Implementation
    analysed_depth: int = 0
    analysed_width: int = 0
    input_parameters: Mapping[str, str] = field(default_factory=dict)
    result: Any = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "status_code": self.status_code,
            "qpu": self.qpu.id,
            "implementation": self.implementation.id,
            "analysed_depth": self.analysed_depth,
            "analysed_width": self.analysed_width,
            "input_parameters": dict(self.input_parameters),
            "result": self.result,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
