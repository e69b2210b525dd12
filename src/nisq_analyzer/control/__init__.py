# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Selection pipeline, execution dispatch and the control service."""

from __future__ import annotations

from nisq_analyzer.control.execution import ExecutionDispatcher
from nisq_analyzer.control.selection import Selector
from nisq_analyzer.control.service import NisqAnalyzerService


__all__ = [
    "ExecutionDispatcher",
    "NisqAnalyzerService",
    "Selector",
]
