# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Command-line interface.

This module is registered as a console script (``nisq-analyzer``).
Commands are grouped in submodules that each expose ``register(cli)``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from nisq_analyzer.cli import admin, selection


@click.group()
@click.option(
    "--catalog",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Catalog JSON file (default: $NISQ_ANALYZER_CATALOG).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="nisq-analyzer")
@click.pass_context
def cli(ctx: click.Context, catalog: Path | None, verbose: bool) -> None:
    """Select and execute quantum algorithm implementations on NISQ devices."""
    obj = ctx.ensure_object(dict)
    if catalog is not None:
        obj["catalog"] = catalog
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


selection.register(cli)
admin.register(cli)


def main() -> None:
    """Run the ``nisq-analyzer`` CLI."""
    cli()


if __name__ == "__main__":
    main()
