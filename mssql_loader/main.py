"""mssql-loader - Main entry point."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from typing_extensions import Annotated

from .config import get_settings
from .errors import LoaderError
from .loader import MsSqlLoader
from .schema import LoadedSchema, read_schema

app = typer.Typer(
    name="mssql-loader",
    help="Introspect a SQL Server database into a canonical schema model",
    add_completion=False,
)

console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def config():
    """Show current configuration."""
    settings = get_settings()
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Pool size: {settings.pool_min}-{settings.pool_max}")
    console.print(f"  Acquire timeout: {settings.acquire_timeout}s")
    console.print(f"  ODBC driver: {settings.odbc_driver}")
    console.print(f"  Encrypt: {'Yes' if settings.encrypt else 'No'}")
    console.print(f"  Application name: {settings.app_name}")


@app.command()
def inspect(
    server: Annotated[str, typer.Option(envvar="MSSQL_LOADER_SERVER", help="host, host:port, host,port or host\\instance")],
    database: Annotated[str, typer.Option(envvar="MSSQL_LOADER_DATABASE", help="Database name")],
    user: Annotated[str, typer.Option(envvar="MSSQL_LOADER_USER", help="User name, optionally DOMAIN\\user")],
    password: Annotated[str, typer.Option(envvar="MSSQL_LOADER_PASSWORD", prompt=True, hide_input=True)],
    model: Annotated[Optional[List[str]], typer.Option("--model", "-m", help="Only load these models")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the schema as JSON")] = False,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the schema as JSON to a file")] = None,
):
    """Load every model, property and reference from a database."""
    settings = get_settings()
    _configure_logging(settings.log_level)

    options = {
        "server": server,
        "databaseName": database,
        "userName": user,
        "password": password,
    }

    try:
        schema = asyncio.run(_load(options, model, quiet=as_json))
    except LoaderError as e:
        console.print(f"[red]{e.code}: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    if output:
        output.write_text(json.dumps(schema.to_dict(), indent=2))
        console.print(f"[green]Wrote {len(schema.models)} models to {output}[/green]")
    elif as_json:
        console.print_json(json.dumps(schema.to_dict()))
    else:
        _print_schema(schema)

    if schema.error_count:
        console.print(f"[yellow]{schema.error_count} properties have unsupported types[/yellow]")


async def _load(options: dict, models: Optional[List[str]], quiet: bool = False) -> LoadedSchema:
    async with MsSqlLoader() as loader:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
            disable=quiet,
        ) as progress:
            progress.add_task("Connecting...", total=None)
            await loader.prepare(options)
            progress.add_task("Reading catalog...", total=None)
            return await read_schema(loader, models)


def _print_schema(schema: LoadedSchema) -> None:
    for model in schema.models:
        table = Table(title=f"{model.metadata.get('schemaName', '')}.{model.name}", title_justify="left")
        table.add_column("Property", style="cyan")
        table.add_column("Type")
        table.add_column("Nullable")
        table.add_column("Key")
        table.add_column("Default")

        for name, prop in model.properties.items():
            table.add_row(
                name,
                prop.kind.value,
                "yes" if prop.nullable else "no",
                "PK" if prop.is_primary_key else "",
                "" if prop.default is None else str(prop.default),
            )
        for name, message in model.errors.items():
            table.add_row(name, f"[red]{escape(message)}[/red]", "", "", "")
        console.print(table)

        for ref in model.references.values():
            pairs = ", ".join(f"{local} -> {ref.target_model}.{target}" for local, target in ref.columns)
            console.print(f"  [bold]{ref.name}[/bold]: {pairs}")


@app.callback()
def main():
    """
    mssql-loader - Read a SQL Server schema into canonical models.

    Examples:

        mssql-loader inspect --server db01\\SQLEXPRESS --database Sales --user CORP\\alice

        mssql-loader inspect --server db01:1433 --database Sales --user sa --json

        mssql-loader config
    """
    pass


if __name__ == "__main__":
    app()
