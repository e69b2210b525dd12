# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Storage and catalog exceptions."""

from __future__ import annotations

from nisq_analyzer.errors import NisqAnalyzerError


class StorageError(NisqAnalyzerError):
    """Base exception for storage operations."""


class CatalogError(StorageError):
    """Raised when a catalog document is malformed."""


class ImplementationNotFoundError(StorageError):
    """
    Raised when a requested implementation does not exist in the catalog.

    Parameters
    ----------
    implementation_id : str
        Identifier of the missing implementation.
    """

    def __init__(self, implementation_id: str) -> None:
        self.implementation_id = implementation_id
        super().__init__(f"Implementation not found: {implementation_id}")


class QpuNotFoundError(StorageError):
    """
    Raised when a requested QPU does not exist in the catalog.

    Parameters
    ----------
    qpu_id : str
        Identifier of the missing QPU.
    """

    def __init__(self, qpu_id: str) -> None:
        self.qpu_id = qpu_id
        super().__init__(f"QPU not found: {qpu_id}")


class ExecutionNotFoundError(StorageError):
    """
    Raised when a requested execution does not exist in the store.

    Parameters
    ----------
    execution_id : str
        Identifier of the missing execution.
    """

    def __init__(self, execution_id: str) -> None:
        self.execution_id = execution_id
        super().__init__(f"Execution not found: {execution_id}")
