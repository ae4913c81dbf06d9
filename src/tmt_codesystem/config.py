# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

console = Console()

# Maps keys of the JSON config file (dotted for nested objects) to Settings fields.
CONFIG_FILE_KEYS = {
    "version": "version",
    "output.fileName": "output_file_name",
    "validation.cleanupInvalidReferences": "cleanup_invalid_references",
    "validation.generateReport": "generate_report",
    "validation.reportFileName": "report_file_name",
}


class Settings(BaseSettings):
    """
    Manages the converter's configuration settings.
    Utilizes Pydantic's BaseSettings to allow for environment variable overrides.
    The object is frozen: it is built once at the entry point and passed down.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="TMTCS_",
        frozen=True,
    )

    # --- Release ---
    version: str = Field("20250407", description="TMT release date (YYYYMMDD). Selects TMTRF<version>.zip.")

    # --- Output ---
    output_file_name: str = Field("TMT-CS.json", description="File name of the generated CodeSystem document.")
    report_file_name: str = Field("validation-report.json", description="File name of the validation report.")
    title_prefix: str = Field("Thai Medicines Terminology (TMT)", description="Prefix of the document title.")
    date_offset: str = Field("+07:00", description="UTC offset appended to the release date.")

    # --- Validation ---
    cleanup_invalid_references: bool = Field(
        True,
        description="Remove parent/child properties that point to codes missing from the document."
    )
    generate_report: bool = Field(
        True,
        description="Write a validation report when invalid references are found."
    )

    # --- File Paths ---
    input_dir: str = Field("./input", description="Directory holding the release archive and the template.")
    output_dir: str = Field("./output", description="Directory the document and report are written to.")
    temp_dir: str = Field("./temp", description="Scratch directory for the extracted archive. Removed after every run.")
    template_file_name: str = Field("TMT-CS-template.json", description="CodeSystem template inside input_dir.")

    @property
    def zip_path(self) -> Path:
        return Path(self.input_dir) / f"TMTRF{self.version}.zip"

    @property
    def template_path(self) -> Path:
        return Path(self.input_dir) / self.template_file_name

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir) / self.output_file_name

    @property
    def report_path(self) -> Path:
        return Path(self.output_dir) / self.report_file_name


def _flatten_config(data: Dict[str, Any]) -> Dict[str, Any]:
    """Picks the known keys out of the nested config file structure."""
    values = {}
    for dotted, field_name in CONFIG_FILE_KEYS.items():
        node: Any = data
        for part in dotted.split("."):
            if not isinstance(node, dict) or part not in node:
                node = None
                break
            node = node[part]
        if node is None:
            continue
        # A release date is often written as a bare number: "version": 20250407.
        if field_name == "version" and isinstance(node, int) and not isinstance(node, bool):
            node = str(node)
        values[field_name] = node
    return values


def load_settings(config_path: Optional[Path] = None, **overrides: Any) -> Settings:
    """
    Builds the Settings for one run.

    Values come from (highest priority first) the explicit overrides, the JSON
    config file, environment variables and finally the field defaults.
    A missing or broken config file is reported and ignored.
    """
    file_values: Dict[str, Any] = {}
    if config_path is not None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            file_values = _flatten_config(data)
            console.log(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            console.log(f"[yellow]Could not load configuration from {config_path}: {e}. Using default configuration.[/yellow]")

    explicit = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**{**file_values, **explicit})
    except ValidationError as e:
        if not file_values:
            raise
        console.log(f"[yellow]Invalid values in {config_path}: {e}. Using default configuration.[/yellow]")
        return Settings(**explicit)
