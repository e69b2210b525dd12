# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Convert selection results and executions to tabular DataFrames.

Examples
--------
>>> from nisq_analyzer.dataframe import results_to_dataframe
>>> df = results_to_dataframe(service.perform_selection("shor", {"N": "15"}))
>>> df[~df["estimate"]].sort_values("analysed_depth")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable


if TYPE_CHECKING:
    import pandas as pd
    from nisq_analyzer.models import AnalysisResult, ExecutionResult

logger = logging.getLogger(__name__)

# Column order for selection result DataFrames.
RESULT_COLUMNS: list[str] = [
    "implementation",
    "implementation_name",
    "sdk",
    "qpu",
    "qpu_name",
    "estimate",
    "analysed_width",
    "analysed_depth",
    "qubit_count",
    "max_depth",
]

# Column order for execution DataFrames.
EXECUTION_COLUMNS: list[str] = [
    "id",
    "status",
    "status_code",
    "implementation",
    "qpu",
    "analysed_width",
    "analysed_depth",
    "created_at",
    "updated_at",
]


def _require_pandas() -> Any:
    """Import pandas or raise a clear error."""
    try:
        import pandas

        return pandas
    except ImportError:
        raise ImportError(
            "pandas is required for DataFrame export. "
            "Install it with: pip install pandas"
        ) from None


def _result_row(result: AnalysisResult) -> dict[str, Any]:
    row = result.to_dict()
    row["qubit_count"] = result.qpu.qubit_count
    row["max_depth"] = result.qpu.max_circuit_depth
    return row


def _execution_row(execution: ExecutionResult) -> dict[str, Any]:
    """Flatten an execution; input parameters become ``param.*`` columns."""
    data = execution.to_dict()
    row = {column: data[column] for column in EXECUTION_COLUMNS}
    for key, value in execution.input_parameters.items():
        row[f"param.{key}"] = value
    return row


def results_to_dataframe(results: Iterable[AnalysisResult]) -> pd.DataFrame:
    """
    Build a DataFrame with one row per accepted (implementation, QPU) pair.

    Parameters
    ----------
    results : iterable of AnalysisResult
        Selection results, typically from ``perform_selection``.

    Returns
    -------
    pandas.DataFrame
        Columns as in :data:`RESULT_COLUMNS`, rows in input order.

    Raises
    ------
    ImportError
        If ``pandas`` is not installed.
    """
    pd = _require_pandas()

    rows = [_result_row(r) for r in results]
    if not rows:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def executions_to_dataframe(executions: Iterable[ExecutionResult]) -> pd.DataFrame:
    """
    Build a DataFrame with one row per execution.

    Standard fields come first, followed by the input parameters as
    ``param.*`` columns sorted alphabetically.

    Raises
    ------
    ImportError
        If ``pandas`` is not installed.
    """
    pd = _require_pandas()

    rows = [_execution_row(e) for e in executions]
    if not rows:
        return pd.DataFrame(columns=EXECUTION_COLUMNS)

    df = pd.DataFrame(rows)
    dynamic = sorted(c for c in df.columns if c not in EXECUTION_COLUMNS)
    return df[EXECUTION_COLUMNS + dynamic]
