"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dietlp.config.settings import Settings, default_config_path, reload_settings

app = typer.Typer(
    help="Cost-minimizing allocation with linear programming",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show and create configuration files")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def configure_logging(level: str) -> None:
    """Send library log records to a Rich handler on stderr."""
    root = logging.getLogger("dietlp")
    root.handlers.clear()
    root.addHandler(
        RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    )
    root.setLevel(level.upper())


def load_cli_settings(config_path: Optional[Path]) -> Settings:
    """Load settings and set up logging for a command."""
    settings = reload_settings(config_path)
    configure_logging(settings.logging.level)
    return settings


def _fail(command: str, message: str, json_output: bool) -> None:
    if json_output:
        output_json({
            "success": False,
            "command": command,
            "errors": [message],
        })
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _load_problem(command: str, problem_file: Path, json_output: bool):
    from dietlp.data.loader import load_problem_from_yaml
    from dietlp.optimizer.models import InvalidProblemError

    if not problem_file.exists():
        _fail(command, f"Problem file not found: {problem_file}", json_output)
    try:
        return load_problem_from_yaml(problem_file)
    except (InvalidProblemError, FileNotFoundError) as exc:
        _fail(command, f"Invalid problem file: {exc}", json_output)


def _output_format(
    command: str,
    requested: Optional[str],
    settings: Settings,
    json_output: bool,
) -> str:
    from dietlp.export.formatters import OUTPUT_FORMATS

    output_format = requested or settings.defaults.output_format
    if not json_output and output_format not in OUTPUT_FORMATS:
        _fail(
            command,
            f"Unknown output format: {output_format} "
            f"(use one of: {', '.join(OUTPUT_FORMATS)})",
            json_output,
        )
    return output_format


def _report(
    command: str,
    result,
    problem_name: str,
    json_output: bool,
    output_format: str,
) -> None:
    from dietlp.export.formatters import JSONFormatter, format_result

    if json_output:
        output_json({
            "success": result.success,
            "command": command,
            "data": JSONFormatter().to_dict(result, problem_name),
            "errors": [] if result.success else [result.message],
            "human_summary": (
                f"Optimal cost {result.total_cost:.4f}"
                if result.success
                else f"No solution: {result.status}"
            ),
        })
    else:
        text = format_result(result, output_format, problem_name, console)
        if text is not None:
            print(text)

    if not result.success:
        raise typer.Exit(1)


def _solve(problem, backend: Optional[str], settings: Settings, command: str, json_output: bool):
    from dietlp.optimizer.solver import solve_allocation

    if backend:
        settings.solver.backend = backend
    try:
        return solve_allocation(problem, settings=settings)
    except ValueError as exc:
        _fail(command, str(exc), json_output)


# ============================================================================
# Main Commands
# ============================================================================


@app.command()
def solve(
    problem_file: Path = typer.Argument(..., help="YAML problem file"),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="Solver backend: highs, clarabel"
    ),
    min_tolerance: Optional[float] = typer.Option(
        None, "--min-tolerance", help="Offset added to minimum guideline bounds"
    ),
    max_tolerance: Optional[float] = typer.Option(
        None, "--max-tolerance", help="Offset subtracted from maximum guideline bounds"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: table, json, markdown"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output as JSON with a response envelope"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Settings file (default ~/.dietlp/config.yaml)"
    ),
) -> None:
    """Solve an allocation problem from a YAML file."""
    settings = load_cli_settings(config_path)
    output_format = _output_format("solve", output, settings, json_output)
    problem = _load_problem("solve", problem_file, json_output)

    if min_tolerance is not None:
        settings.formulation.min_tolerance = min_tolerance
    if max_tolerance is not None:
        settings.formulation.max_tolerance = max_tolerance

    result = _solve(problem, backend, settings, "solve", json_output)
    _report(
        "solve",
        result,
        problem_file.stem,
        json_output,
        output_format,
    )


@app.command()
def example(
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="Solver backend: highs, clarabel"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: table, json, markdown"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
) -> None:
    """Solve the bundled fast-food diet example."""
    from dietlp.data.diet_table import reference_problem

    settings = load_cli_settings(config_path)
    output_format = _output_format("example", output, settings, json_output)
    result = _solve(reference_problem(), backend, settings, "example", json_output)
    _report(
        "example",
        result,
        "reference diet",
        json_output,
        output_format,
    )


@app.command()
def validate(
    problem_file: Path = typer.Argument(..., help="YAML problem file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
) -> None:
    """Load and formulate a problem without solving it."""
    from dietlp.optimizer.constraints import GuidelineTranslator
    from dietlp.optimizer.models import FormulationError
    from dietlp.optimizer.session import FormulationSession
    from dietlp.solvers import backend_from_config

    settings = load_cli_settings(config_path)
    problem = _load_problem("validate", problem_file, json_output)

    session = FormulationSession(
        backend_from_config(settings.solver),
        GuidelineTranslator(
            settings.formulation.min_tolerance,
            settings.formulation.max_tolerance,
        ),
    )
    try:
        session.register_items(problem.items)
        constraints = session.formulate(problem.guidelines, problem.categories)
    except FormulationError as exc:
        _fail("validate", str(exc), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "validate",
            "data": {
                "items": len(problem.items),
                "categories": session.categories,
                "guidelines": len(problem.guidelines),
                "constraints": [c.name for c in constraints],
            },
            "human_summary": (
                f"{len(problem.items)} items, {len(constraints)} constraints"
            ),
        })
        return

    table = Table(title=f"Formulation of {problem_file.name}")
    table.add_column("Constraint", style="cyan")
    table.add_column("Relation", justify="center")
    table.add_column("Bound", justify="right")
    for c in constraints:
        table.add_row(c.name, c.relation.value, f"{c.bound:g}")

    console.print(table)
    console.print(
        f"[green]OK[/green] {len(problem.items)} items, "
        f"{len(session.categories)} categories, {len(constraints)} constraints"
    )


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Settings file"),
) -> None:
    """Show the effective settings."""
    settings = reload_settings(config_path)
    output_json(settings.to_dict())


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(
        None, "--path", help="Where to write config.yaml"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config file with default settings."""
    target = path or default_config_path()
    if target.exists() and not force:
        console.print(f"[yellow]Config already exists: {target}[/yellow] (use --force)")
        raise typer.Exit(1)

    Settings().save(target)
    console.print(f"[green]Wrote default settings to {target}[/green]")


if __name__ == "__main__":
    app()
