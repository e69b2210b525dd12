# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Tests for DataFrame export."""

from __future__ import annotations

import pytest
from nisq_analyzer.dataframe import (
    EXECUTION_COLUMNS,
    RESULT_COLUMNS,
    executions_to_dataframe,
    results_to_dataframe,
)
from nisq_analyzer.models import ExecutionResult, ExecutionResultStatus

from conftest import make_implementation, make_qpu


pd = pytest.importorskip("pandas")


class TestResultsToDataFrame:
    def test_one_row_per_result(self, make_service):
        results = make_service().perform_selection("shor", {"N": "3"})

        df = results_to_dataframe(results)

        assert list(df.columns) == RESULT_COLUMNS
        assert len(df) == len(results)
        assert df["estimate"].all()
        assert set(df["qpu"]) == {"small", "large"}
        assert df.loc[df["qpu"] == "small", "max_depth"].iloc[0] == 12

    def test_empty(self):
        df = results_to_dataframe([])

        assert df.empty
        assert list(df.columns) == RESULT_COLUMNS


class TestExecutionsToDataFrame:
    def test_parameters_become_columns(self):
        record = ExecutionResult(
            id="exec-1",
            status=ExecutionResultStatus.FINISHED,
            status_code="Done.",
            qpu=make_qpu("small"),
            implementation=make_implementation("shor-n"),
            input_parameters={"N": "15", "A": "2"},
        )

        df = executions_to_dataframe([record])

        assert list(df.columns) == EXECUTION_COLUMNS + ["param.A", "param.N"]
        assert df.iloc[0]["status"] == "FINISHED"
        assert df.iloc[0]["param.N"] == "15"

    def test_empty(self):
        assert list(executions_to_dataframe([]).columns) == EXECUTION_COLUMNS
