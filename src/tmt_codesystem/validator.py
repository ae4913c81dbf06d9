# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from typing import List, Sequence, Tuple

from rich.console import Console

from .models import (
    Concept,
    InvalidReference,
    InvalidReferences,
    ValidationReport,
    ValidationResult,
    ValidationStats,
)

console = Console()

REFERENCE_CODES = ("parent", "child")


def deduplicate_concepts(concepts: Sequence[Concept]) -> Tuple[List[Concept], int]:
    """
    Keeps the first concept seen for every code, preserving order.
    Returns the surviving concepts and the number removed.
    """
    seen = set()
    unique = []
    for concept in concepts:
        if concept.code in seen:
            continue
        seen.add(concept.code)
        unique.append(concept)

    removed = len(concepts) - len(unique)
    if removed:
        console.log(f"[yellow]Removed {removed} duplicate concepts.[/yellow]")
    else:
        console.log("No duplicate concepts found.")
    return unique, removed


def validate_references(concepts: Sequence[Concept], cleanup: bool = False) -> ValidationResult:
    """
    Checks that every parent/child property points at a code present in concepts.

    With cleanup, offending properties are removed from the concepts in place;
    otherwise the concepts are left untouched and the problems only reported.
    """
    valid_codes = {concept.code for concept in concepts}
    invalid = InvalidReferences()
    removed = 0

    for concept in concepts:
        kept = []
        for prop in concept.properties:
            if prop.code in REFERENCE_CODES and prop.valueCode not in valid_codes:
                entry = InvalidReference(conceptCode=concept.code, referencedCode=prop.valueCode or "")
                getattr(invalid, prop.code).append(entry)
                if cleanup:
                    console.log(
                        f"[yellow]Removing invalid {prop.code} reference {prop.valueCode} from {concept.code}[/yellow]"
                    )
                    removed += 1
                    continue
            kept.append(prop)
        if cleanup and len(kept) != len(concept.properties):
            concept.properties = kept

    stats = ValidationStats(
        totalConcepts=len(concepts),
        invalidParentCount=len(invalid.parent),
        invalidChildCount=len(invalid.child),
        removedCount=removed,
    )
    result = ValidationResult(
        valid=not invalid.parent and not invalid.child,
        invalidReferences=invalid,
        stats=stats,
    )

    if result.valid:
        console.log(f"[green]All references valid across {stats.totalConcepts} concepts.[/green]")
    else:
        console.log(
            f"[yellow]Found {stats.invalidParentCount} invalid parent and "
            f"{stats.invalidChildCount} invalid child references "
            f"({stats.removedCount} removed).[/yellow]"
        )
    return result


def build_validation_report(result: ValidationResult, version: str, date: str) -> dict:
    return ValidationReport(version=version, date=date, validation=result).model_dump()
