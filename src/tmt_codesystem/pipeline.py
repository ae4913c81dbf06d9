# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel
from rich.console import Console

from .archive import extract_archive, read_json, scoped_temp_dir, write_json
from .assembler import build_concepts
from .config import Settings
from .finalizer import finalize_document, format_date_from_version
from .locator import MissingSourceFileError, find_tmt_directories, list_directory
from .models import ValidationResult
from .reader import RowReader, read_rows
from .validator import build_validation_report, deduplicate_concepts, validate_references

console = Console()


class ConversionResult(BaseModel):
    """Summary of a finished conversion run."""
    output_path: Path
    report_path: Optional[Path] = None
    concept_counts: Dict[str, int]
    total_concepts: int
    duplicates_removed: int
    validation: ValidationResult


class ConversionPipeline:
    """
    Orchestrates one full conversion of a TMT release archive into a
    CodeSystem document: extract, build, deduplicate, validate, finalize, write.
    """

    def __init__(self, settings: Settings, reader: RowReader = read_rows):
        self.settings = settings
        self.reader = reader

    def _check_inputs(self) -> None:
        missing = [p for p in (self.settings.zip_path, self.settings.template_path) if not p.is_file()]
        if missing:
            raise MissingSourceFileError(
                "Required input files not found:\n"
                + "\n".join(f"  {p}" for p in missing)
                + f"\n{list_directory(Path(self.settings.input_dir))}"
            )

    def _write_outputs(self, document: dict, report: Optional[dict]) -> None:
        """Writes the report and the document, or neither of them."""
        settings = self.settings
        targets = []
        if report is not None:
            targets.append((settings.report_path, report))
        targets.append((settings.output_path, document))

        written = []
        try:
            for path, data in targets:
                written.append(path)
                write_json(path, data)
        except Exception:
            for path in written:
                if path.exists():
                    path.unlink()
            raise

    def run(self) -> ConversionResult:
        settings = self.settings
        console.log(f"Using version: [bold cyan]{settings.version}[/bold cyan]")
        console.log(f"Using zip file: {settings.zip_path}")
        self._check_inputs()

        with scoped_temp_dir(Path(settings.temp_dir)) as extract_dir:
            extract_archive(settings.zip_path, extract_dir)
            template = read_json(settings.template_path)

            tmt_dir, bonus_dir = find_tmt_directories(extract_dir, settings.version)
            console.log(f"Processing data from {tmt_dir.name}...")

            concepts, counts = build_concepts(tmt_dir, bonus_dir, reader=self.reader)
            concepts, duplicates_removed = deduplicate_concepts(concepts)
            validation = validate_references(concepts, cleanup=settings.cleanup_invalid_references)

            document = finalize_document(
                template,
                settings.version,
                concepts,
                title_prefix=settings.title_prefix,
                date_offset=settings.date_offset,
            )

        report = None
        if settings.generate_report and not validation.valid:
            report = build_validation_report(
                validation,
                settings.version,
                format_date_from_version(settings.version, settings.date_offset),
            )

        # Nothing is written unless every stage above succeeded.
        self._write_outputs(document, report)
        report_path = settings.report_path if report is not None else None

        console.log(f"[green]Conversion completed. Output saved to: {settings.output_path}[/green]")

        return ConversionResult(
            output_path=settings.output_path,
            report_path=report_path,
            concept_counts=counts,
            total_concepts=len(concepts),
            duplicates_removed=duplicates_removed,
            validation=validation,
        )
