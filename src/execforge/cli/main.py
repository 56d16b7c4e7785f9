"""CLI for execforge."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from execforge.config import ClientConfig
from execforge.executor.http_executor import ExecutionClient
from execforge.logging import setup_logging
from execforge.models.execution import DataResult
from execforge.workspace import Workspace

app = typer.Typer(
    name="ef",
    help="execforge - compile and execute visualization objects",
    no_args_is_help=True,
)
console = Console()

DirOption = Annotated[
    Path, typer.Option("--dir", "-d", help="Visualization definitions directory")
]
ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Client config YAML (default: env vars)")
]
OutputOption = Annotated[
    str, typer.Option("--output", "-o", help="Output format: table, json")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    setup_logging(verbose)


def load_config(config_path: Path | None) -> ClientConfig:
    if config_path is not None:
        return ClientConfig.from_yaml(config_path)
    return ClientConfig.from_env()


def get_workspace(definitions_dir: Path, config: ClientConfig | None = None) -> Workspace:
    return Workspace(definitions_dir, config)


@app.command("list")
def list_visualizations(definitions_dir: DirOption = Path("./visualizations")) -> None:
    """List visualization definitions."""
    try:
        workspace = get_workspace(definitions_dir)
    except Exception as e:
        console.print(f"[red]Error loading definitions: {e}[/red]")
        raise typer.Exit(1)

    visualizations = workspace.list_visualizations()
    if not visualizations:
        console.print("[yellow]No visualizations defined[/yellow]")
        return

    table = Table(title="Visualizations")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="green")
    table.add_column("Measures", justify="right")
    table.add_column("Categories", justify="right")
    table.add_column("Filters", justify="right")
    table.add_column("Title")

    for vis in visualizations:
        table.add_row(
            vis["name"],
            vis["type"] or "-",
            str(vis["measures"]),
            str(vis["categories"]),
            str(vis["filters"]),
            vis["title"] or "-",
        )

    console.print(table)


@app.command()
def validate(definitions_dir: DirOption = Path("./visualizations")) -> None:
    """Compile all visualization definitions and report problems."""
    try:
        workspace = get_workspace(definitions_dir)
    except Exception as e:
        console.print(f"[red]Error loading definitions: {e}[/red]")
        raise typer.Exit(1)

    errors = workspace.validate()

    if errors:
        console.print("[red]Validation failed:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    count = len(workspace.registry.visualizations)
    console.print(f"[green]Validated {count} visualizations successfully![/green]")


@app.command("show-config")
def show_config(
    name: Annotated[str, typer.Argument(help="Visualization name")],
    definitions_dir: DirOption = Path("./visualizations"),
) -> None:
    """Show the execution configuration without executing it."""
    try:
        workspace = get_workspace(definitions_dir)
        config = workspace.get_execution_configuration(name)
    except Exception as e:
        console.print(f"[red]Error compiling visualization: {e}[/red]")
        raise typer.Exit(1)

    payload = json.dumps(config.to_payload(), indent=2, ensure_ascii=False)
    console.print(Syntax(payload, "json", theme="monokai", line_numbers=True))


@app.command()
def query(
    name: Annotated[str, typer.Argument(help="Visualization name")],
    definitions_dir: DirOption = Path("./visualizations"),
    project: Annotated[
        str | None, typer.Option("--project", "-p", help="Project id (default: from config)")
    ] = None,
    config_path: ConfigOption = None,
    output: OutputOption = "table",
) -> None:
    """Compile and execute a visualization."""
    try:
        config = load_config(config_path)
        workspace = get_workspace(definitions_dir, config)
    except Exception as e:
        console.print(f"[red]Error loading definitions: {e}[/red]")
        raise typer.Exit(1)

    async def run() -> DataResult:
        async with workspace:
            if config.username:
                await workspace.client.login()
            return await workspace.query(name, project)

    try:
        result = asyncio.run(run())
    except Exception as e:
        console.print(f"[red]Query error: {e}[/red]")
        raise typer.Exit(1)

    _output_result(result, output)


@app.command("get-data")
def get_data(
    project: Annotated[str, typer.Argument(help="Project id")],
    elements: Annotated[list[str], typer.Argument(help="Attribute display form / metric ids")],
    config_path: ConfigOption = None,
    output: OutputOption = "table",
) -> None:
    """Execute a report for raw element identifiers."""
    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    async def run() -> DataResult:
        async with ExecutionClient(config) as client:
            if config.username:
                await client.login()
            return await client.get_data(project, elements)

    try:
        result = asyncio.run(run())
    except Exception as e:
        console.print(f"[red]Query error: {e}[/red]")
        raise typer.Exit(1)

    _output_result(result, output)


def _output_result(result: DataResult, output_format: str) -> None:
    """Output a data result in the specified format."""
    if output_format == "json":
        console.print(json.dumps(result.model_dump(by_alias=True), indent=2, default=str))
        return

    # a table without columns renders as nothing at all
    if not result.headers:
        console.print(f"[yellow]No data ({result.row_count} rows)[/yellow]")
        return

    table = Table(title=f"Query Results ({result.row_count} rows)")
    for header in result.headers:
        table.add_column(header.title or header.id)

    for row in result.raw_data:
        cells = row if isinstance(row, list) else [row]
        table.add_row(*(str(cell) for cell in cells))

    console.print(table)


if __name__ == "__main__":
    app()
