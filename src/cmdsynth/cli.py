# src/cmdsynth/cli.py
"""cmdsynth Command Line Interface.

Entry point for the cmdsynth CLI tool. Every command reads a planner graph
(JSON or YAML, camelCase shape) and prints JSON to stdout; logs go to stderr.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError

from cmdsynth import __version__
from cmdsynth.contracts import CommandGraph, CommandSynthesisQuery, GraphContractError, parse_command_graph
from cmdsynth.core.config import LedgerConfig, load_settings
from cmdsynth.core.logging import configure_logging
from cmdsynth.core.topology import plan_waves
from cmdsynth.engine.audit import run_audit
from cmdsynth.engine.ledger import build_ledger, build_synthesis_plan
from cmdsynth.engine.synthesis import to_synthesis_result
from cmdsynth.testing import create_sample_graph

__all__ = ["app"]

app = typer.Typer(
    name="cmdsynth",
    help="cmdsynth: Command graph synthesis for recovery runs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"cmdsynth version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines."),
) -> None:
    """cmdsynth: Command graph synthesis for recovery runs."""
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    console.print(Panel(content, title=f"[red bold]{title}[/]", border_style="red", padding=(0, 1)))


def _load_graph(path: Path) -> CommandGraph:
    """Read and validate a planner graph, exiting with a readable error on failure."""
    if not path.exists():
        _format_validation_error(
            title="File Not Found",
            message=f"Graph file does not exist: {path}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        _format_validation_error(
            title="Parse Error",
            message=f"Failed to parse {path.name}",
            details=[str(e)],
            hint="Graph files are JSON or YAML documents.",
        )
        raise typer.Exit(1) from None

    if not isinstance(raw, dict):
        _format_validation_error(title="Invalid Graph", message=f"{path.name} must contain a mapping at the top level")
        raise typer.Exit(1)

    try:
        return parse_command_graph(raw)
    except ValidationError as e:
        # Must precede GraphContractError: ValidationError is also a ValueError
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_validation_error(
            title="Graph Validation Failed",
            message=f"Invalid graph in {path.name}",
            details=details,
            hint="Check field names, ranges, and timestamp formats.",
        )
        raise typer.Exit(1) from None
    except GraphContractError as e:
        _format_validation_error(title="Graph Contract Violation", message=str(e))
        raise typer.Exit(1) from None


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def synthesize(graph_file: Path = typer.Argument(..., help="Planner graph (JSON or YAML).")) -> None:
    """Print the go/no-go synthesis result for a graph."""
    graph = _load_graph(graph_file)
    _emit(to_synthesis_result(graph).to_payload())


@app.command()
def audit(graph_file: Path = typer.Argument(..., help="Planner graph (JSON or YAML).")) -> None:
    """Print structural audit findings with severities."""
    graph = _load_graph(graph_file)
    _emit(
        [
            {
                "graphId": finding.graph_id,
                "issue": finding.issue,
                "severity": finding.severity.value,
                **({"nodeId": finding.node_id} if finding.node_id is not None else {}),
            }
            for finding in run_audit(graph)
        ]
    )


@app.command()
def waves(graph_file: Path = typer.Argument(..., help="Planner graph (JSON or YAML).")) -> None:
    """Print the wave plan derived from the graph's topology."""
    graph = _load_graph(graph_file)
    _emit(
        [
            {
                "id": wave.id,
                "title": wave.title,
                "index": wave.index,
                "commands": [node.id for node in wave.commands],
                "dependsOn": list(wave.depends_on),
            }
            for wave in plan_waves(graph)
        ]
    )


@app.command()
def ledger(
    graph_file: Path = typer.Argument(..., help="Planner graph (JSON or YAML)."),
    settings: Path = typer.Option(..., "--settings", "-s", help="Path to settings YAML file."),
) -> None:
    """Build a ledger record for a graph using the ledger settings."""
    try:
        config: LedgerConfig = load_settings(settings.expanduser()).ledger
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings.name}",
            details=details,
            hint="The ledger section needs tenant and operator.",
        )
        raise typer.Exit(1) from None

    graph = _load_graph(graph_file)
    result = build_ledger(graph, config)
    if not result.is_success:
        _format_validation_error(title="Ledger Window Rejected", message=str(result.error))
        raise typer.Exit(1)
    _emit(result.unwrap().to_payload())


@app.command()
def plan(
    graph_file: Path = typer.Argument(..., help="Planner graph (JSON or YAML)."),
    limit: int | None = typer.Option(None, "--limit", help="Page size, clamped to [1, 2000]."),
    requested_by: str | None = typer.Option(None, "--requested-by", help="Requester (defaults to the graph's)."),
) -> None:
    """Print the synthesis plan binding a query to the graph."""
    graph = _load_graph(graph_file)
    _emit(build_synthesis_plan(graph, CommandSynthesisQuery(limit=limit), requested_by=requested_by).to_payload())


@app.command()
def sample(
    tenant: str = typer.Option("acme", "--tenant", help="Tenant for the sample graph."),
    run_id: str = typer.Option("run-0001", "--run-id", help="Run id for the sample graph."),
    size: int = typer.Option(4, "--size", min=1, help="Number of chained nodes (at least 4)."),
    operator: str | None = typer.Option(None, "--operator", help="Operator recorded on the graph and its edges."),
) -> None:
    """Print a sample planner graph."""
    _emit(create_sample_graph(tenant, run_id, operator=operator, wave_count=size).to_payload())


if __name__ == "__main__":
    app()
