#!/usr/bin/env python3
"""
CLI interface for the bank statement parser.
"""
import logging
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.loader import PDFLoader
from .core.runner import StatementParser, StatementDecodeError
from .core.settings import load_settings
from .core.detectors import get_file_type
from .tools.debug_overlay import create_debug_overlay

app = typer.Typer(help="Bank and credit card statement parser")
console = Console()


@app.command()
def parse(
    statement_path: Path = typer.Argument(..., help="Path to CSV or PDF statement"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON file path"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    debug_overlay: Optional[Path] = typer.Option(None, "--debug-overlay", help="Create debug overlay images"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Parse a statement file into structured JSON."""

    if not statement_path.exists():
        console.print(f"[red]Error: file not found: {statement_path}[/red]")
        raise typer.Exit(1)

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        settings = load_settings(config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Parsing statement...", total=None)

            result = StatementParser(settings).parse_file(statement_path)

            if output:
                progress.update(task, description="Writing output...")
                output.write_text(result.model_dump_json(by_alias=True, indent=2))
                console.print(f"[green]✓ Parsed successfully! Output written to: {output}[/green]")
            else:
                console.print(result.model_dump_json(by_alias=True, indent=2))

            if debug_overlay and get_file_type(statement_path.name) == "pdf":
                progress.update(task, description="Creating debug overlay...")
                create_debug_overlay(statement_path, debug_overlay, settings.line_tolerance)
                console.print(f"[blue]Debug overlay created in: {debug_overlay}[/blue]")

    except StatementDecodeError as e:
        console.print(f"[red]File unreadable: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error parsing statement: {e}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(1)


@app.command()
def diagnose(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file")
):
    """Show text-layer diagnostics and the readability classification of a PDF."""
    if not pdf_path.exists():
        console.print(f"[red]Error: PDF file not found: {pdf_path}[/red]")
        raise typer.Exit(1)

    loader = PDFLoader(pdf_path)
    try:
        document = loader.load_document()
    finally:
        loader.close()

    report = StatementParser(load_settings(config)).analyze_pdf(document)

    table = Table(title=f"Readability: {report.pdf_type.value}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in report.diagnostics.model_dump(by_alias=True).items():
        table.add_row(name, str(value))
    console.print(table)


@app.command()
def validate(
    json_path: Path = typer.Argument(..., help="Path to JSON file to validate")
):
    """Validate a JSON file against the schema."""
    from .models.schema import ParsedStatement

    try:
        data = ParsedStatement.model_validate_json(json_path.read_text())
        console.print("[green]✓ JSON is valid[/green]")
        console.print(f"Bank: {data.header.bank}")
        console.print(f"Statement Date: {data.header.statement_date}")
        console.print(f"Transactions: {len(data.transactions)}")
        console.print(f"Document Score: {data.document_score}")
    except Exception as e:
        console.print(f"[red]Validation failed: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
