# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Selection and execution CLI commands.

Commands
--------
select
    Select suitable implementations and QPUs for an algorithm.
selection-params
    Show the parameters selection needs for an algorithm.
execute
    Execute an implementation on a QPU.
qpus
    List QPUs in the catalog.
"""

from __future__ import annotations

import click
from nisq_analyzer.cli._utils import (
    echo,
    parse_params,
    print_json,
    print_table,
    service_from_ctx,
)


def register(cli: click.Group) -> None:
    """Register selection commands with CLI."""
    cli.add_command(select_command)
    cli.add_command(selection_params_command)
    cli.add_command(execute_command)
    cli.add_command(qpus_command)


_format_option = click.option(
    "--format",
    "fmt",
    type=click.Choice(["pretty", "json"]),
    default="pretty",
)

_param_option = click.option(
    "--param",
    "-p",
    "params",
    multiple=True,
    metavar="NAME=VALUE",
    help="Input parameter (repeatable).",
)


@click.command("select")
@click.argument("algorithm_id")
@_param_option
@_format_option
@click.pass_context
def select_command(
    ctx: click.Context,
    algorithm_id: str,
    params: tuple[str, ...],
    fmt: str,
) -> None:
    """Select implementations and QPUs for ALGORITHM_ID."""
    raw_params = parse_params(params)
    service = service_from_ctx(ctx)

    results = service.perform_selection(algorithm_id, raw_params)

    if fmt == "json":
        print_json([r.to_dict() for r in results])
        return

    if not results:
        echo(f"No suitable implementation and QPU found for {algorithm_id}.")
        return

    print_table(
        ["Implementation", "SDK", "QPU", "Width", "Depth", "Source"],
        [
            [
                r.implementation.name,
                r.implementation.sdk,
                r.qpu.name,
                r.analysed_width,
                r.analysed_depth,
                "estimate" if r.estimate else "compiled",
            ]
            for r in results
        ],
        title=f"Selection for {algorithm_id}",
    )


@click.command("selection-params")
@click.argument("algorithm_id")
@_format_option
@click.pass_context
def selection_params_command(ctx: click.Context, algorithm_id: str, fmt: str) -> None:
    """Show parameters needed to select for ALGORITHM_ID."""
    service = service_from_ctx(ctx)
    required = sorted(
        service.get_required_selection_parameters(algorithm_id),
        key=lambda p: p.name,
    )

    if fmt == "json":
        print_json([p.to_dict() for p in required])
        return

    print_table(
        ["Name", "Type", "Description"],
        [[p.name, p.type.value, p.description] for p in required],
        title=f"Selection parameters for {algorithm_id}",
    )


@click.command("execute")
@click.argument("implementation_id")
@click.argument("qpu_id")
@_param_option
@click.option(
    "--wait/--no-wait",
    default=False,
    help="Block until the execution reaches a final status.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait with --wait (default: no limit).",
)
@_format_option
@click.pass_context
def execute_command(
    ctx: click.Context,
    implementation_id: str,
    qpu_id: str,
    params: tuple[str, ...],
    wait: bool,
    timeout: float | None,
    fmt: str,
) -> None:
    """Execute IMPLEMENTATION_ID on QPU_ID."""
    from concurrent.futures import TimeoutError as FutureTimeoutError

    from nisq_analyzer.errors import NisqAnalyzerError

    raw_params = parse_params(params)
    service = service_from_ctx(ctx)

    try:
        record = service.execute_by_id(implementation_id, qpu_id, raw_params)
    except NisqAnalyzerError as e:
        raise click.ClickException(str(e)) from e

    if wait:
        try:
            record = service.dispatcher.wait(record.id, timeout=timeout)
        except FutureTimeoutError:
            record = service.get_execution_result(record.id)
            echo(f"Timed out waiting for execution {record.id}.", err=True)

    if fmt == "json":
        print_json(record.to_dict())
        return

    echo(f"Execution:       {record.id}")
    echo(f"Implementation:  {record.implementation.name}")
    echo(f"QPU:             {record.qpu.name}")
    echo(f"Status:          {record.status.value}")
    echo(f"Message:         {record.status_code}")
    if record.result is not None:
        echo(f"Result:          {record.result}")


@click.command("qpus")
@_format_option
@click.pass_context
def qpus_command(ctx: click.Context, fmt: str) -> None:
    """List QPUs in the catalog."""
    service = service_from_ctx(ctx)
    qpus = service.catalog.list_qpus()

    if fmt == "json":
        print_json([q.to_dict() for q in qpus])
        return

    print_table(
        ["ID", "Name", "Qubits", "Max depth", "Provider", "SDKs"],
        [
            [
                q.id,
                q.name,
                q.qubit_count,
                "-" if q.max_circuit_depth is None else q.max_circuit_depth,
                q.provider or "-",
                ", ".join(q.supported_sdks),
            ]
            for q in qpus
        ],
        title="QPUs",
    )
