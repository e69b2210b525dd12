"""
nisq_analyzer: Implementation and QPU selection for NISQ algorithms.

Quick Start
-----------
>>> from nisq_analyzer import NisqAnalyzerService, load_catalog
>>> service = NisqAnalyzerService(load_catalog("catalog.json"))
>>> for result in service.perform_selection("shor", {"N": "15"}):
...     print(result.implementation.name, result.qpu.name, result.estimate)

Execution
---------
>>> record = service.execute_by_id("shor-15-qiskit", "ibmq_lima", {"N": "15"})
>>> record.status
<ExecutionResultStatus.INITIALIZED: 'INITIALIZED'>
>>> service.get_execution_result(record.id).status
<ExecutionResultStatus.RUNNING: 'RUNNING'>

Submodules
----------
- nisq_analyzer.control: Selection pipeline and execution dispatch
- nisq_analyzer.connectors: SDK connector extension API
- nisq_analyzer.rules: Rule oracle interface and expression oracle
- nisq_analyzer.storage: Catalog and execution stores
- nisq_analyzer.config: Configuration management
- nisq_analyzer.dataframe: DataFrame export (requires pandas)
- nisq_analyzer.errors: Public exception types
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any


__all__ = [
    # Version
    "__version__",
    # Service
    "NisqAnalyzerService",
    "Selector",
    "ExecutionDispatcher",
    # Models
    "AnalysisResult",
    "CircuitInformation",
    "ExecutionResult",
    "ExecutionResultStatus",
    "Implementation",
    "Parameter",
    "ParameterType",
    "Qpu",
    # Connectors and rules
    "ConnectorRegistry",
    "ExpressionRuleOracle",
    # Storage
    "InMemoryCatalog",
    "InMemoryExecutionStore",
    "load_catalog",
    # Config
    "Config",
    "get_config",
    "set_config",
]


try:
    __version__ = version("nisq-analyzer")
except PackageNotFoundError:
    __version__ = "0.0.0"


if TYPE_CHECKING:
    from nisq_analyzer.config import Config, get_config, set_config
    from nisq_analyzer.connectors.registry import ConnectorRegistry
    from nisq_analyzer.control.execution import ExecutionDispatcher
    from nisq_analyzer.control.selection import Selector
    from nisq_analyzer.control.service import NisqAnalyzerService
    from nisq_analyzer.models import (
        AnalysisResult,
        CircuitInformation,
        ExecutionResult,
        ExecutionResultStatus,
        Implementation,
        Parameter,
        ParameterType,
        Qpu,
    )
    from nisq_analyzer.rules import ExpressionRuleOracle
    from nisq_analyzer.storage.catalog_file import load_catalog
    from nisq_analyzer.storage.memory import InMemoryCatalog, InMemoryExecutionStore


_LAZY_IMPORTS = {
    # Service
    "NisqAnalyzerService": ("nisq_analyzer.control.service", "NisqAnalyzerService"),
    "Selector": ("nisq_analyzer.control.selection", "Selector"),
    "ExecutionDispatcher": ("nisq_analyzer.control.execution", "ExecutionDispatcher"),
    # Models
    "AnalysisResult": ("nisq_analyzer.models", "AnalysisResult"),
    "CircuitInformation": ("nisq_analyzer.models", "CircuitInformation"),
    "ExecutionResult": ("nisq_analyzer.models", "ExecutionResult"),
    "ExecutionResultStatus": ("nisq_analyzer.models", "ExecutionResultStatus"),
    "Implementation": ("nisq_analyzer.models", "Implementation"),
    "Parameter": ("nisq_analyzer.models", "Parameter"),
    "ParameterType": ("nisq_analyzer.models", "ParameterType"),
    "Qpu": ("nisq_analyzer.models", "Qpu"),
    # Connectors and rules
    "ConnectorRegistry": ("nisq_analyzer.connectors.registry", "ConnectorRegistry"),
    "ExpressionRuleOracle": ("nisq_analyzer.rules", "ExpressionRuleOracle"),
    # Storage
    "InMemoryCatalog": ("nisq_analyzer.storage.memory", "InMemoryCatalog"),
    "InMemoryExecutionStore": ("nisq_analyzer.storage.memory", "InMemoryExecutionStore"),
    "load_catalog": ("nisq_analyzer.storage.catalog_file", "load_catalog"),
    # Config
    "Config": ("nisq_analyzer.config", "Config"),
    "get_config": ("nisq_analyzer.config", "get_config"),
    "set_config": ("nisq_analyzer.config", "set_config"),
}


def __getattr__(name: str) -> Any:
    """Lazy import handler for module-level attributes."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = __import__(module_path, fromlist=[attr_name])
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    """List available attributes for autocomplete."""
    return sorted(set(__all__) | set(_LAZY_IMPORTS.keys()))
