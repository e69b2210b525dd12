# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Configuration management.

Configuration is read from environment variables on first use and cached
as a process-wide singleton. Explicit :class:`Config` instances can be
passed to the service and CLI instead of relying on the global one.

Environment Variables
---------------------
``NISQ_ANALYZER_HOME``
    Workspace root directory. Default ``~/.nisq-analyzer``. A
    ``catalog.json`` placed there is used when no catalog is configured.
``NISQ_ANALYZER_CATALOG``
    Path to a JSON catalog of QPUs and implementations.
``NISQ_ANALYZER_MAX_WORKERS``
    Upper bound on concurrently running executions. Default 8.
``NISQ_ANALYZER_LOAD_ENTRY_POINTS``
    Discover connectors from installed entry points. Default true.
``NISQ_ANALYZER_CONNECTOR_TIMEOUT``
    Request timeout for remote connectors in seconds. Default 30.
``NISQ_ANALYZER_POLL_INTERVAL``
    Seconds between result polls of remote executions. Default 2.
``NISQ_ANALYZER_QISKIT_SERVICE_URL``
    Base URL of a Qiskit service API. When set, a remote connector for
    the Qiskit SDK is registered.
``NISQ_ANALYZER_QISKIT_SERVICE_TOKEN``
    Bearer token for the Qiskit service (optional).

Examples
--------
>>> from nisq_analyzer.config import Config, set_config
>>> set_config(Config(max_workers=2))

>>> from nisq_analyzer.config import reset_config
>>> reset_config()  # next get_config() reloads from environment
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

ENV_HOME = "NISQ_ANALYZER_HOME"
ENV_CATALOG = "NISQ_ANALYZER_CATALOG"
ENV_MAX_WORKERS = "NISQ_ANALYZER_MAX_WORKERS"
ENV_LOAD_ENTRY_POINTS = "NISQ_ANALYZER_LOAD_ENTRY_POINTS"
ENV_CONNECTOR_TIMEOUT = "NISQ_ANALYZER_CONNECTOR_TIMEOUT"
ENV_POLL_INTERVAL = "NISQ_ANALYZER_POLL_INTERVAL"
ENV_QISKIT_SERVICE_URL = "NISQ_ANALYZER_QISKIT_SERVICE_URL"
ENV_QISKIT_SERVICE_TOKEN = "NISQ_ANALYZER_QISKIT_SERVICE_TOKEN"

CATALOG_FILENAME = "catalog.json"

DEFAULT_MAX_WORKERS = 8
DEFAULT_CONNECTOR_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 2.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _default_root() -> Path:
    return Path.home() / ".nisq-analyzer"


@dataclass(frozen=True)
class Config:
    """
    Runtime configuration.

    Parameters
    ----------
    root_dir : Path, optional
        Workspace root directory, searched for a default ``catalog.json``.
    catalog_path : Path or None, optional
        JSON catalog loaded by the CLI when no ``--catalog`` is given.
    max_workers : int, optional
        Size of the execution worker pool. Must be positive.
    load_entry_points : bool, optional
        Whether connectors are discovered from entry points.
    connector_timeout : float, optional
        Per-request timeout for remote connectors, in seconds.
    poll_interval : float, optional
        Polling period for remote execution results, in seconds.
    qiskit_service_url : str or None, optional
        Base URL of a Qiskit service registered as a remote connector.
    qiskit_service_token : str or None, optional
        Bearer token for the Qiskit service.
    """

    root_dir: Path = field(default_factory=_default_root)
    catalog_path: Path | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    load_entry_points: bool = True
    connector_timeout: float = DEFAULT_CONNECTOR_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    qiskit_service_url: str | None = None
    qiskit_service_token: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.connector_timeout <= 0:
            raise ValueError("connector_timeout must be positive")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must not be negative")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "root_dir": str(self.root_dir),
            "catalog_path": str(self.catalog_path) if self.catalog_path else None,
            "max_workers": self.max_workers,
            "load_entry_points": self.load_entry_points,
            "connector_timeout": self.connector_timeout,
            "poll_interval": self.poll_interval,
            "qiskit_service_url": self.qiskit_service_url,
            "qiskit_service_token": "***" if self.qiskit_service_token else None,
        }

    def resolve_catalog_path(self) -> Path | None:
        """
        Return the catalog to load when none is given explicitly.

        ``catalog_path`` if set, otherwise ``catalog.json`` in ``root_dir``
        if that file exists, otherwise None.
        """
        if self.catalog_path is not None:
            return self.catalog_path
        candidate = self.root_dir / CATALOG_FILENAME
        return candidate if candidate.is_file() else None


def _parse_bool(value: str | None, default: bool = True) -> bool:
    """Parse a boolean environment value; empty or missing gives default."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _parse_int(value: str | None, default: int) -> int:
    """Parse an integer environment value, falling back to default."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("Invalid integer %r in environment, using %d", value, default)
        return default


def _parse_float(value: str | None, default: float) -> float:
    """Parse a float environment value, falling back to default."""
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError:
        logger.warning("Invalid number %r in environment, using %s", value, default)
        return default


def load_config() -> Config:
    """
    Build a :class:`Config` from environment variables.

    Returns
    -------
    Config
        Fresh configuration; the cached singleton is not touched.
    """
    home = os.getenv(ENV_HOME)
    root_dir = Path(home).expanduser().resolve() if home else _default_root()

    catalog = os.getenv(ENV_CATALOG)
    catalog_path = Path(catalog).expanduser() if catalog else None

    max_workers = _parse_int(os.getenv(ENV_MAX_WORKERS), DEFAULT_MAX_WORKERS)
    if max_workers < 1:
        logger.warning(
            "%s must be >= 1 (got %d), using %d",
            ENV_MAX_WORKERS,
            max_workers,
            DEFAULT_MAX_WORKERS,
        )
        max_workers = DEFAULT_MAX_WORKERS

    return Config(
        root_dir=root_dir,
        catalog_path=catalog_path,
        max_workers=max_workers,
        load_entry_points=_parse_bool(os.getenv(ENV_LOAD_ENTRY_POINTS), True),
        connector_timeout=_parse_float(
            os.getenv(ENV_CONNECTOR_TIMEOUT), DEFAULT_CONNECTOR_TIMEOUT
        ),
        poll_interval=_parse_float(os.getenv(ENV_POLL_INTERVAL), DEFAULT_POLL_INTERVAL),
        qiskit_service_url=os.getenv(ENV_QISKIT_SERVICE_URL) or None,
        qiskit_service_token=os.getenv(ENV_QISKIT_SERVICE_TOKEN) or None,
    )


_config: Config | None = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Return the cached global configuration, loading it on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def set_config(config: Config) -> None:
    """Replace the global configuration."""
    global _config
    with _config_lock:
        _config = config


def reset_config() -> None:
    """Drop the cached configuration so the next access reloads it."""
    global _config
    with _config_lock:
        _config = None
