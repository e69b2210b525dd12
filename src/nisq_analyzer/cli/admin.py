# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Administrative CLI commands.

Commands
--------
connectors
    List registered SDK connectors and plugin load errors.
config
    Display current configuration.
"""

from __future__ import annotations

import click
from nisq_analyzer.cli._utils import echo, print_json, print_table, service_from_ctx


def register(cli: click.Group) -> None:
    """Register admin commands with CLI."""
    cli.add_command(connectors_command)
    cli.add_command(config_command)


@click.command("connectors")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["pretty", "json"]),
    default="pretty",
)
@click.pass_context
def connectors_command(ctx: click.Context, fmt: str) -> None:
    """List registered SDK connectors."""
    registry = service_from_ctx(ctx).registry
    connectors = registry.connectors()
    errors = registry.load_errors()

    if fmt == "json":
        print_json(
            {
                "connectors": [
                    {
                        "name": c.name,
                        "sdks": list(c.supported_sdks()),
                        "providers": list(c.supported_providers()),
                    }
                    for c in connectors
                ],
                "errors": [str(e) for e in errors],
            }
        )
        return

    print_table(
        ["Name", "SDKs", "Providers"],
        [
            [
                c.name,
                ", ".join(c.supported_sdks()),
                ", ".join(c.supported_providers()) or "-",
            ]
            for c in connectors
        ],
        title="Connectors",
    )

    if errors:
        echo(f"\nFailed to load {len(errors)} connector(s):", err=True)
        for err in errors:
            echo(f"  - {err}", err=True)


@click.command("config")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["pretty", "json"]),
    default="pretty",
)
@click.pass_context
def config_command(ctx: click.Context, fmt: str) -> None:
    """Show current configuration."""
    from dataclasses import replace

    from nisq_analyzer.config import load_config

    # Use load_config to respect environment variables
    config = load_config()

    cli_catalog = ctx.find_root().ensure_object(dict).get("catalog")
    if cli_catalog is not None:
        config = replace(config, catalog_path=cli_catalog)

    if fmt == "json":
        print_json(config.to_dict())
        return

    echo(f"Home:               {config.root_dir}")
    echo(f"Catalog:            {config.resolve_catalog_path() or '-'}")
    echo(f"Max workers:        {config.max_workers}")
    echo(f"Load entry points:  {config.load_entry_points}")
    echo(f"Connector timeout:  {config.connector_timeout}s")
    echo(f"Poll interval:      {config.poll_interval}s")
    echo(f"Qiskit service:     {config.qiskit_service_url or '-'}")
