# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Base exception hierarchy for nisq-analyzer.

All public exceptions raised by nisq-analyzer inherit from
:class:`NisqAnalyzerError`, enabling catch-all error handling at the
package boundary.

Hierarchy
---------
::

    NisqAnalyzerError
    ├── ConfigurationError
    │   └── ConnectorNotFoundError
    ├── RuleError
    ├── ConnectorError
    └── StorageError              (nisq_analyzer.storage.errors)
        ├── CatalogError
        ├── ImplementationNotFoundError
        ├── QpuNotFoundError
        └── ExecutionNotFoundError

Expected infeasibility (a rule rejecting parameters, a failed transpilation,
a capacity gate) is never signalled with an exception; selection simply
yields fewer results.

Examples
--------
>>> from nisq_analyzer.errors import ConnectorNotFoundError
>>> try:
...     service.execute(implementation, qpu, {"N": "15"})
... except ConnectorNotFoundError as exc:
...     print(f"no connector for sdk {exc.sdk}")
"""

from __future__ import annotations

from typing import Iterable


class NisqAnalyzerError(Exception):
    """
    Base exception for all nisq-analyzer operations.

    Every public exception in nisq-analyzer is a subclass of this
    type, so ``except NisqAnalyzerError`` intercepts any error
    originating from the library.
    """


class ConfigurationError(NisqAnalyzerError):
    """Raised when the runtime setup cannot serve a request."""


class ConnectorNotFoundError(ConfigurationError):
    """
    Raised when no connector is registered for an SDK.

    Parameters
    ----------
    sdk : str
        Name of the SDK without a connector.
    available : iterable of str, optional
        SDK names that do have a connector, for the error message.
    """

    def __init__(self, sdk: str, available: Iterable[str] = ()) -> None:
        self.sdk = sdk
        names = ", ".join(sorted(available)) or "(none registered)"
        super().__init__(
            f"Unable to find connector plugin for sdk name {sdk!r}. "
            f"Available: {names}."
        )


class RuleError(NisqAnalyzerError):
    """Raised when a rule cannot be parsed or evaluated."""


class ConnectorError(NisqAnalyzerError):
    """Raised when a connector cannot talk to its compiler or executor."""
