# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .archive import read_json, write_json
from .config import load_settings
from .finalizer import format_date_from_version
from .models import Concept
from .pipeline import ConversionPipeline
from .validator import build_validation_report, validate_references

app = typer.Typer(
    name="tmt-codesystem",
    help="Convert a Thai Medicines Terminology (TMT) release into a FHIR CodeSystem document."
)
console = Console()


@app.command(name="convert", help="Build the CodeSystem document from a TMT release archive.")
def convert(
    config: Path = typer.Option(
        Path("config.json"),
        "--config",
        "-c",
        help="JSON configuration file. Missing or invalid files fall back to the defaults."
    ),
    version: Optional[str] = typer.Option(
        None,
        "--version",
        "-v",
        help="TMT release date (YYYYMMDD). Selects input/TMTRF<version>.zip."
    ),
    input_dir: Optional[str] = typer.Option(None, "--input-dir", help="Directory holding the archive and template."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Directory for the document and report."),
    temp_dir: Optional[str] = typer.Option(None, "--temp-dir", help="Scratch directory for the extracted archive."),
    no_cleanup: bool = typer.Option(
        False,
        "--no-cleanup",
        help="Keep parent/child references to codes missing from the document."
    ),
    no_report: bool = typer.Option(False, "--no-report", help="Do not write a validation report."),
):
    """
    Extracts the release, builds every concept in hierarchy order, removes
    duplicate codes, checks parent/child references and writes the document.
    """
    settings = load_settings(
        config,
        version=version,
        input_dir=input_dir,
        output_dir=output_dir,
        temp_dir=temp_dir,
        cleanup_invalid_references=False if no_cleanup else None,
        generate_report=False if no_report else None,
    )
    console.print(Panel(
        f"[bold cyan]Starting TMT to FHIR conversion for version: {settings.version}[/bold cyan]",
        border_style="cyan"
    ))

    try:
        result = ConversionPipeline(settings).run()
    except Exception as e:
        console.print_exception()
        console.print(Panel(f"[bold red]An error occurred during the conversion: {e}", title="[bold red]Error[/bold red]"))
        raise typer.Exit(code=1)

    table = Table(title="Concepts per kind")
    table.add_column("Kind")
    table.add_column("Concepts", justify="right")
    for kind, count in result.concept_counts.items():
        table.add_row(kind, str(count))
    console.print(table)

    stats = result.validation.stats
    summary = (
        f"Total concepts: {result.total_concepts}\n"
        f"Duplicates removed: {result.duplicates_removed}\n"
        f"Invalid parent references: {stats.invalidParentCount}\n"
        f"Invalid child references: {stats.invalidChildCount}\n"
        f"References removed: {stats.removedCount}"
    )
    if result.report_path:
        summary += f"\nValidation report: {result.report_path}"
    console.print(Panel(
        f"[bold green]Output saved to {result.output_path}[/bold green]\n{summary}",
        title="[bold green]Conversion Complete[/bold green]"
    ))


@app.command(name="validate", help="Check parent/child references of an existing CodeSystem document.")
def validate(
    document: Path = typer.Argument(..., help="CodeSystem JSON document to check."),
    cleanup: bool = typer.Option(False, "--cleanup", help="Remove invalid references and rewrite the document."),
    report: Optional[Path] = typer.Option(None, "--report", "-r", help="Write a validation report to this path."),
):
    """
    Runs the reference validator over a document produced by an earlier run.
    Exits with code 1 when invalid references remain in the document.
    """
    try:
        data = read_json(document)
        concepts = [Concept.model_validate(c) for c in data.get("concept", [])]
    except Exception as e:
        console.print(Panel(f"[bold red]Could not read {document}: {e}", title="[bold red]Error[/bold red]"))
        raise typer.Exit(code=1)

    result = validate_references(concepts, cleanup=cleanup)

    if cleanup and result.stats.removedCount:
        data["concept"] = [c.to_fhir() for c in concepts]
        write_json(document, data)

    if report is not None:
        version = str(data.get("version", ""))
        write_json(report, build_validation_report(result, version, format_date_from_version(version)))

    if result.valid:
        console.print(Panel(
            f"[bold green]All references in {result.stats.totalConcepts} concepts are valid.[/bold green]",
            title="[bold green]Valid[/bold green]"
        ))
        return

    stats = result.stats
    console.print(Panel(
        f"[bold yellow]Invalid parent references: {stats.invalidParentCount}\n"
        f"Invalid child references: {stats.invalidChildCount}\n"
        f"Removed: {stats.removedCount}[/bold yellow]",
        title="[bold yellow]Invalid References[/bold yellow]"
    ))
    if not cleanup:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
