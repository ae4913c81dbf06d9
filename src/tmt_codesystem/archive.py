# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import json
import shutil
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console

from .locator import MissingSourceFileError, list_directory

console = Console()


def extract_archive(zip_path: Path, dest_dir: Path) -> Path:
    """Extracts a TMT release archive into dest_dir and returns dest_dir."""
    if not zip_path.is_file():
        raise MissingSourceFileError(
            f"Release archive not found: {zip_path}\n{list_directory(zip_path.parent)}"
        )

    console.log(f"Extracting {zip_path.name} to {dest_dir}...")
    dest_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path, "r") as zip_ref:
        zip_ref.extractall(dest_dir)
    console.log("[green]Extraction complete.[/green]")
    return dest_dir


@contextmanager
def scoped_temp_dir(base: Path) -> Iterator[Path]:
    """
    Creates a fresh scratch directory for one run inside base and removes it on
    every exit path, including failures inside the with-block.

    Existing content of base is never touched. base itself is removed again
    only when this run created it and it is left empty.
    """
    created_base = not base.exists()
    base.mkdir(parents=True, exist_ok=True)
    path = Path(tempfile.mkdtemp(prefix="run-", dir=base))
    try:
        yield path
    finally:
        console.log("Cleaning up temporary files...")
        shutil.rmtree(path, ignore_errors=True)
        if created_base and base.is_dir() and not any(base.iterdir()):
            base.rmdir()


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: Any) -> None:
    """Utility to write a JSON document, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    console.log(f"Wrote {path}")
