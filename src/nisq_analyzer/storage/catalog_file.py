# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
JSON catalog documents.

A catalog document lists QPUs and implementations::

    {
      "qpus": [
        {"id": "ibmq_lima", "name": "ibmq_lima", "qubit_count": 5,
         "t1": 90000, "max_gate_time": 800, "supported_sdks": ["Qiskit"]}
      ],
      "implementations": [
        {"id": "shor-15", "name": "Shor 15", "implemented_algorithm": "shor",
         "sdk": "Qiskit", "file_location": "https://...",
         "input_parameters": [{"name": "N", "type": "Integer"}],
         "selection_rule": "N == 15", "width_rule": "8", "depth_rule": "40"}
      ]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from nisq_analyzer.models import Implementation, Qpu
from nisq_analyzer.storage.errors import CatalogError
from nisq_analyzer.storage.memory import InMemoryCatalog


logger = logging.getLogger(__name__)


def parse_catalog(document: Mapping[str, Any]) -> InMemoryCatalog:
    """
    Build a catalog from a decoded catalog document.

    Parameters
    ----------
    document : mapping
        Decoded JSON object with ``qpus`` and ``implementations`` lists.

    Returns
    -------
    InMemoryCatalog
        Catalog holding the entries in document order.

    Raises
    ------
    CatalogError
        If the document or one of its entries is malformed.
    """
    if not isinstance(document, Mapping):
        raise CatalogError("Catalog document must be a JSON object")

    catalog = InMemoryCatalog()

    for index, entry in enumerate(document.get("qpus", [])):
        try:
            catalog.add_qpu(Qpu.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid qpu entry #{index}: {e}") from e

    for index, entry in enumerate(document.get("implementations", [])):
        try:
            catalog.add_implementation(Implementation.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid implementation entry #{index}: {e}") from e

    logger.debug(
        "Parsed catalog: %d qpus, %d implementations",
        len(catalog.list_qpus()),
        len(catalog.list_implementations()),
    )
    return catalog


def load_catalog(path: str | Path) -> InMemoryCatalog:
    """
    Load a catalog from a JSON file.

    Raises
    ------
    CatalogError
        If the file cannot be read or decoded, or is malformed.
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    return parse_catalog(document)
