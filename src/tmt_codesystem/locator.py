# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import re
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Tuple, Union

from rich.console import Console

from .models import EntitySpec

console = Console()

TMT_DIR_PATTERN = re.compile(r"^TMTRF\d{8}$")
TMT_BONUS_DIR_PATTERN = re.compile(r"^TMTRF\d{8}_BONUS$")
SNAPSHOT_PATTERN = re.compile(r"_SNAPSHOT\.xls$", re.IGNORECASE)

CONCEPT_DIR_NAME = "Concept"
RELATIONSHIP_DIR_NAME = "Relationship"


class MissingSourceFileError(FileNotFoundError):
    """A required artifact of the TMT distribution could not be found."""


def explore_directory(root: Path) -> List[Path]:
    """Recursively lists every file and directory under root, sorted."""
    return sorted(root.rglob("*"))


def list_directory(directory: Path) -> str:
    """A one-line listing of a directory for error messages."""
    if not directory.is_dir():
        return f"{directory} does not exist"
    names = sorted(p.name + ("/" if p.is_dir() else "") for p in directory.iterdir())
    return f"Files in {directory}: {', '.join(names) if names else '(empty)'}"


def _require_dir(directory: Path) -> None:
    if not directory.is_dir():
        raise MissingSourceFileError(
            f"Required directory not found: {directory}\n{list_directory(directory.parent)}"
        )


def find_file(directory: Path, rule: Union[str, Pattern]) -> Optional[Path]:
    """
    Returns the first file in directory whose name matches rule, or None.

    A compiled regex is searched as-is; a plain string is a case-insensitive
    substring. Candidates are considered in sorted name order so the result is
    stable across filesystems.
    """
    if isinstance(rule, str):
        needle = rule.lower()
        matches = [p for p in sorted(directory.iterdir()) if p.is_file() and needle in p.name.lower()]
    else:
        matches = [p for p in sorted(directory.iterdir()) if p.is_file() and rule.search(p.name)]

    if not matches:
        return None
    if len(matches) > 1:
        console.log(
            f"[yellow]Warning: {len(matches)} files match '{getattr(rule, 'pattern', rule)}' in {directory}; "
            f"using {matches[0].name}[/yellow]"
        )
    return matches[0]


def find_tmt_directories(extract_dir: Path, version: Optional[str] = None) -> Tuple[Path, Path]:
    """
    Finds the TMTRF<date> and TMTRF<date>_BONUS directories in an extracted release.

    When version is given, TMTRF<version> and TMTRF<version>_BONUS are preferred.
    Any other release date is used only when those exact names are absent.
    """
    entries = explore_directory(extract_dir)
    dirs = [p for p in entries if p.is_dir()]

    tmt_dir = bonus_dir = None
    if version is not None:
        tmt_dir = next((p for p in dirs if p.name == f"TMTRF{version}"), None)
        bonus_dir = next((p for p in dirs if p.name == f"TMTRF{version}_BONUS"), None)
    if tmt_dir is None or bonus_dir is None:
        tmt_dir = next((p for p in dirs if TMT_DIR_PATTERN.match(p.name)), None)
        bonus_dir = next((p for p in dirs if TMT_BONUS_DIR_PATTERN.match(p.name)), None)
        if version is not None and tmt_dir is not None and bonus_dir is not None:
            console.log(
                f"[yellow]Warning: TMTRF{version} directories not found; "
                f"using {tmt_dir.name} and {bonus_dir.name}[/yellow]"
            )

    if tmt_dir is None or bonus_dir is None:
        structure = "\n".join(
            f"{p.relative_to(extract_dir)} ({'dir' if p.is_dir() else 'file'})" for p in entries
        )
        raise MissingSourceFileError(
            "Required TMT directories not found in the archive.\n"
            f"  TMTRF<date>: {'Found' if tmt_dir else 'Not found'}\n"
            f"  TMTRF<date>_BONUS: {'Found' if bonus_dir else 'Not found'}\n"
            f"Directory structure:\n{structure or '(empty)'}"
        )
    return tmt_dir, bonus_dir


def locate_entity_file(spec: EntitySpec, tmt_dir: Path, bonus_dir: Path) -> Path:
    """Resolves the source spreadsheet holding the concepts of one entity kind."""
    if spec.location == "snapshot":
        directory = tmt_dir
        rule = SNAPSHOT_PATTERN
        label = "Snapshot"
    else:
        directory = bonus_dir / CONCEPT_DIR_NAME
        rule = re.compile(rf"^{spec.kind.value}\d{{8}}\.xls$", re.IGNORECASE)
        label = spec.kind.value

    _require_dir(directory)
    found = find_file(directory, rule)
    if found is None:
        raise MissingSourceFileError(f"{label} file not found for {spec.kind.value}.\n{list_directory(directory)}")

    console.log(f"Found {label} file: {found}")
    return found


def locate_relationship_files(spec: EntitySpec, bonus_dir: Path) -> Dict[str, Path]:
    """
    Resolves every relationship file an entity kind needs, keyed by pattern.
    All roles are searched before failing so the error names each missing one.
    """
    directory = bonus_dir / RELATIONSHIP_DIR_NAME
    _require_dir(directory)

    found: Dict[str, Optional[Path]] = {}
    for source in spec.relationships:
        if source.pattern not in found:
            found[source.pattern] = find_file(directory, source.pattern)

    if any(path is None for path in found.values()):
        status = "\n".join(
            f"  {pattern}: {'Found' if path else 'Not found'}" for pattern, path in found.items()
        )
        raise MissingSourceFileError(
            f"One or more relationship files not found for {spec.kind.value}.\n{status}\n{list_directory(directory)}"
        )

    for pattern, path in found.items():
        console.log(f"Found relationship file for {spec.kind.value} ({pattern}): {path.name}")
    return found
