# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Catalog and execution storage.

- :class:`InMemoryCatalog` / :class:`InMemoryExecutionStore` - thread-safe
  in-process implementations of the storage protocols
- :func:`load_catalog` - build a catalog from a JSON document
"""

from __future__ import annotations

from nisq_analyzer.storage.catalog_file import load_catalog, parse_catalog
from nisq_analyzer.storage.memory import InMemoryCatalog, InMemoryExecutionStore
from nisq_analyzer.storage.types import CatalogProtocol, ExecutionStoreProtocol


__all__ = [
    "CatalogProtocol",
    "ExecutionStoreProtocol",
    "InMemoryCatalog",
    "InMemoryExecutionStore",
    "load_catalog",
    "parse_catalog",
]
