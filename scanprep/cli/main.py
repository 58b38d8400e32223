"""Main CLI entry point for scanprep."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.engine import CoreEngine
from ..core.linters import choose_engine, engine_family, select_candidates
from ..models.exceptions import ScanprepError
from ..models.options import RunOptions
from ..utils.logger import configure_logging, get_logger

console = Console()

app = typer.Typer(
    name="scanprep",
    help="Detect project languages, pick an analysis engine and resolve its runtime options.",
    add_completion=False,
)


def _get_core_engine() -> CoreEngine:
    """Get a configured core engine instance."""
    return CoreEngine()


def _fail(error: ScanprepError, action: str, structured_output: bool) -> typer.Exit:
    logger = get_logger()
    logger.error(f"{action} failed: {error}", error=str(error), details=error.details)
    if not structured_output:
        console.print(f"[red]Error:[/red] {action} failed: {error}")
    return typer.Exit(error.exit_code)


def _project_dir(project_dir: Path | None) -> Path:
    return (project_dir or Path.cwd()).resolve()


@app.command()
def languages(
    project_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--project-dir",
        "-p",
        help="Path to the project directory",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    structured_output: bool = typer.Option(False, "--structured", help="Output structured JSON"),
) -> None:
    """Detect the programming languages used in a project."""
    configure_logging(verbose=verbose, structured_output=structured_output)
    project_path = _project_dir(project_dir)

    try:
        detected = _get_core_engine().detect_languages(project_path)
    except ScanprepError as e:
        raise _fail(e, "Language detection", structured_output) from e

    if structured_output:
        typer.echo(json.dumps({"project": str(project_path), "languages": detected}))
        return

    if not detected:
        console.print(f"[yellow]No programming languages detected in {project_path}[/yellow]")
        return

    table = Table(title="Detected Languages", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Language", style="cyan")
    for position, language in enumerate(detected, 1):
        table.add_row(str(position), language)
    console.print(table)


@app.command()
def linters(
    project_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--project-dir",
        "-p",
        help="Path to the project directory",
    ),
    native: bool = typer.Option(False, "--native", help="Prefer an engine that runs without containers"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    structured_output: bool = typer.Option(False, "--structured", help="Output structured JSON"),
) -> None:
    """Show the analysis engines suitable for a project."""
    configure_logging(verbose=verbose, structured_output=structured_output)
    project_path = _project_dir(project_dir)

    try:
        detected = _get_core_engine().detect_languages(project_path)
    except ScanprepError as e:
        raise _fail(e, "Language detection", structured_output) from e

    candidates = select_candidates(detected)
    chosen = choose_engine(candidates, native=native)

    if structured_output:
        typer.echo(json.dumps({"languages": detected, "candidates": candidates, "linter": chosen}))
        return

    console.print(f"[dim]Detected languages: {', '.join(detected) or 'none'}[/dim]\n")
    if not candidates:
        console.print("[yellow]No supported linter for the detected languages[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Linter Candidates", show_header=True, header_style="bold green")
    table.add_column("Linter", style="cyan")
    table.add_column("Family")
    table.add_column("Selected", justify="center")
    for linter in candidates:
        family = engine_family(linter)
        marker = "[green]✓[/green]" if linter == chosen else ""
        table.add_row(linter, family.value if family else "-", marker)
    console.print(table)


@app.command()
def properties(
    project_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--project-dir",
        "-p",
        help="Path to the project directory",
    ),
    cache_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--cache-dir",
        help="Directory for engine caches (default: <project>/.qodana/cache)",
    ),
    results_dir: Path | None = typer.Option(  # noqa: B008
        None,
        "--results-dir",
        "-o",
        help="Directory for run results (default: <project>/.qodana/results)",
    ),
    linter: str | None = typer.Option(None, "--linter", "-l", help="Engine image or product code to use"),
    property_: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--property",
        help="Engine property (key=value) or raw JVM flag, may be repeated",
    ),
    analysis_id: str | None = typer.Option(None, "--analysis-id", help="Unique identifier of this run"),
    coverage_dir: Path | None = typer.Option(None, "--coverage-dir", help="Coverage reports directory"),  # noqa: B008
    jvm_debug_port: int = typer.Option(0, "--jvm-debug-port", help="Enable JVM remote debugging"),
    native: bool = typer.Option(False, "--native", help="Prefer an engine that runs without containers"),
    no_statistics: bool = typer.Option(False, "--no-statistics", help="Disable usage statistics"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
    structured_output: bool = typer.Option(False, "--structured", help="Output structured JSON"),
) -> None:
    """Resolve engine options and write them to the options file."""
    configure_logging(verbose=verbose, structured_output=structured_output)
    project_path = _project_dir(project_dir)
    work_dir = project_path / ".qodana"

    options = RunOptions(
        project_dir=project_path,
        cache_dir=cache_dir or work_dir / "cache",
        results_dir=results_dir or work_dir / "results",
        linter=linter,
        properties=property_ or [],
        analysis_id=analysis_id,
        coverage_dir=coverage_dir,
        jvm_debug_port=jvm_debug_port,
        native=native,
        no_statistics=no_statistics,
    )

    engine = _get_core_engine()
    try:
        prepared = engine.prepare(options)
    except ScanprepError as e:
        raise _fail(e, "Options resolution", structured_output) from e

    engine.finish(prepared, options)
    env_name = prepared.context.engine_family.vm_options_env
    lines = prepared.options_file.read_text(encoding="utf-8").splitlines()

    if structured_output:
        typer.echo(
            json.dumps(
                {
                    "linter": prepared.linter,
                    "options_file": str(prepared.options_file),
                    "env": env_name,
                    "lines": lines,
                },
            ),
        )
        return

    console.print(f"[bold]Linter:[/bold] {prepared.linter}")
    if verbose:
        console.print(Panel("\n".join(lines), title="[bold blue]Resolved options[/bold blue]", border_style="blue"))
    console.print(f"[green]✓[/green] Options written to {prepared.options_file}")
    console.print(f"{env_name}={prepared.options_file}", markup=False, highlight=False)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
