# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Shared CLI utilities.

This module provides common helper functions used across CLI commands
for consistent output formatting and context management.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Sequence

import click


if TYPE_CHECKING:
    from nisq_analyzer.control.service import NisqAnalyzerService


def echo(msg: str, *, err: bool = False) -> None:
    """
    Print message to stdout or stderr.

    Parameters
    ----------
    msg : str
        Message to print.
    err : bool, default=False
        If True, print to stderr instead of stdout.
    """
    click.echo(msg, err=err)


def print_json(obj: Any) -> None:
    """
    Print object as formatted JSON.

    Non-serializable objects are converted to strings.
    """
    click.echo(json.dumps(obj, indent=2, default=str))


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    title: str = "",
) -> None:
    """
    Print formatted ASCII table.

    Parameters
    ----------
    headers : sequence of str
        Column headers.
    rows : sequence of sequence
        Table rows. Each row should have same length as headers.
    title : str, optional
        Table title to display above the table.
    """
    if title:
        echo(f"\n{title}\n{'=' * len(title)}")

    if not rows:
        echo("(empty)")
        return

    widths = [len(str(h)) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            if i < len(widths):
                widths[i] = max(widths[i], len(str(cell)))

    fmt = "  ".join(f"{{:<{w}}}" for w in widths)

    echo(fmt.format(*headers))
    echo(fmt.format(*["-" * w for w in widths]))
    for row in rows:
        echo(fmt.format(*[str(c) for c in row]))


def parse_params(values: Sequence[str]) -> dict[str, str]:
    """
    Parse ``NAME=VALUE`` pairs given with ``-p``.

    Raises
    ------
    click.BadParameter
        If a pair has no ``=`` or an empty name.
    """
    params: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(
                f"Expected NAME=VALUE, got {item!r}", param_hint="'-p'"
            )
        params[name.strip()] = value
    return params


def service_from_ctx(ctx: click.Context) -> NisqAnalyzerService:
    """
    Get the analyzer service for this invocation.

    The service is built on first use from the ``--catalog`` option (or
    ``NISQ_ANALYZER_CATALOG``, or ``catalog.json`` in the workspace root)
    and shut down when the command finishes.
    A service already present in ``ctx.obj["service"]`` is reused.

    Raises
    ------
    click.ClickException
        If no catalog is configured or it cannot be loaded.
    """
    root = ctx.find_root()
    obj = root.ensure_object(dict)
    service = obj.get("service")
    if service is not None:
        return service

    from nisq_analyzer.config import get_config
    from nisq_analyzer.control.service import NisqAnalyzerService
    from nisq_analyzer.storage.catalog_file import load_catalog
    from nisq_analyzer.storage.errors import CatalogError

    config = get_config()
    catalog_path = obj.get("catalog") or config.resolve_catalog_path()
    if catalog_path is None:
        raise click.ClickException(
            "No catalog configured. Use --catalog, set NISQ_ANALYZER_CATALOG "
            f"or place catalog.json in {config.root_dir}."
        )

    try:
        catalog = load_catalog(catalog_path)
    except CatalogError as e:
        raise click.ClickException(str(e)) from e

    service = NisqAnalyzerService(catalog, config=config)
    obj["service"] = service
    root.call_on_close(service.close)
    return service
