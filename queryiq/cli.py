"""
QueryIQ CLI

Command-line interface for working with databases directly, without the API.

Usage:
    queryiq introspect URL --type postgresql       # Print the database summary
    queryiq export URL "SELECT ..." -o out.xlsx    # Export a SELECT to a workbook
    queryiq tools --type mongodb                   # List the tools for a database kind
    queryiq keygen                                 # Generate QUERYIQ_ENCRYPTION_KEY
    queryiq serve                                  # Run the API server
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from queryiq import __version__
from queryiq.config import get_settings
from queryiq.connectors.base import ConnectorError
from queryiq.export import ExportService, build_workbook
from queryiq.introspection import IntrospectionError, introspect_database
from queryiq.models.database import (
    SUPPORTED_DATABASE_TYPES,
    DatabaseTarget,
    UnsupportedDatabaseError,
    normalize_database_kind,
)
from queryiq.models.schema import TableSummary
from queryiq.query.validator import ValidationError as QueryValidationError
from queryiq.security.encryption import generate_key
from queryiq.tools import build_tool_registry

console = Console()

_DB_TYPE_OPTION = click.option(
    "--type",
    "db_type",
    required=True,
    type=click.Choice(SUPPORTED_DATABASE_TYPES, case_sensitive=False),
    help="Database type.",
)


def configure_cli_logging() -> None:
    logging.basicConfig(level=logging.WARNING)
    for logger_name in ("queryiq", "httpx", "openai", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="QueryIQ")
def cli():
    """QueryIQ - Natural language chat over PostgreSQL, MySQL and MongoDB."""
    configure_cli_logging()


@cli.command()
@click.argument("connection_string")
@_DB_TYPE_OPTION
def introspect(connection_string: str, db_type: str):
    """Connect to a database and print its table or collection summary."""
    settings = get_settings()
    try:
        summary = asyncio.run(introspect_database(connection_string, db_type, settings.query))
    except (IntrospectionError, UnsupportedDatabaseError) as e:
        console.print(f"[red]{e}[/red]")
        raise click.exceptions.Exit(1) from e

    if not summary.summary:
        console.print("[yellow]No tables or collections found.[/yellow]")
        return

    if isinstance(summary.summary[0], TableSummary):
        table = Table(title=f"{db_type} tables", show_header=True, header_style="bold cyan")
        table.add_column("Table", style="cyan")
        table.add_column("Columns")
        for entry in summary.summary:
            table.add_row(entry.table, ", ".join(f"{c.name} ({c.type})" for c in entry.columns))
    else:
        table = Table(title="mongodb collections", show_header=True, header_style="bold cyan")
        table.add_column("Collection", style="cyan")
        table.add_column("Documents", justify="right")
        table.add_column("Storage (bytes)", justify="right")
        for entry in summary.summary:
            table.add_row(entry.collection, str(entry.document_count), str(entry.storage_size))
    console.print(table)


@cli.command()
@click.argument("connection_string")
@click.argument("query")
@click.option("--type", "db_type", default="postgresql", show_default=True, help="Database type.")
@click.option(
    "--output",
    "-o",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("export.xlsx"),
    show_default=True,
    help="Workbook to write.",
)
@click.option("--sheet-name", default=None, help="Worksheet name (max 31 characters).")
def export(connection_string: str, query: str, db_type: str, output: Path, sheet_name: str | None):
    """Run a SELECT with the export row cap and write every row to an .xlsx file."""
    settings = get_settings()
    try:
        target = DatabaseTarget(connection_secret=connection_string, kind=normalize_database_kind(db_type))
        result = asyncio.run(ExportService(settings.query).run_export(target, query))
    except UnsupportedDatabaseError as e:
        console.print(f"[red]{e}[/red]")
        raise click.exceptions.Exit(1) from e
    except QueryValidationError as e:
        console.print(f"[red]{e.reason}[/red]")
        raise click.exceptions.Exit(1) from e
    except ConnectorError as e:
        console.print(f"[red]Export failed: {e}[/red]")
        raise click.exceptions.Exit(1) from e

    output.write_bytes(build_workbook(result.data, sheet_name))
    console.print(f"[green]Wrote {result.row_count} rows to {output}[/green]")
    if result.capped:
        console.print(
            f"[yellow]Result was capped at {settings.query.max_export_rows} rows.[/yellow]"
        )


@cli.command()
@_DB_TYPE_OPTION
def tools(db_type: str):
    """List the tools the model is offered for a database type."""
    settings = get_settings()
    # Placeholder URL: building the registry does not connect.
    target = DatabaseTarget(connection_secret="placeholder://", kind=db_type)
    registry = build_tool_registry(target, settings.pagination.to_config(), settings.query)

    table = Table(title=f"Tools for {db_type}", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Runs on server")
    for definition in registry.list_definitions():
        table.add_row(
            definition.name,
            definition.category.value,
            "yes" if definition.has_execute else "no (client)",
        )
    console.print(table)


@cli.command()
def keygen():
    """Print a fresh key for QUERYIQ_ENCRYPTION_KEY."""
    click.echo(generate_key())


@cli.command()
@click.option("--host", default=None, help="Bind host (default: API_HOST).")
@click.option("--port", default=None, type=int, help="Bind port (default: API_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the QueryIQ API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "queryiq.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
