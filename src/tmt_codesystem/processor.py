# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from rich.console import Console

from .locator import locate_entity_file, locate_relationship_files
from .models import Concept, ConceptProperty, EntitySpec, RelationshipSource
from .reader import Row, RowReader, cell_to_str, read_rows

console = Console()

# Column indices of a relationship row: the "from" kind, then the "to" kind.
FROM_I, TO_I = 0, 1
# Column indices of an entity row.
CODE_I, DISPLAY_I = 0, 1

RelationshipIndex = Dict[str, List[str]]


def build_relationship_index(rows: Sequence[Row], source: RelationshipSource) -> RelationshipIndex:
    """
    Indexes a relationship file by the column the current concept is matched on.
    Values for one key keep the row order of the source file.
    """
    index: RelationshipIndex = defaultdict(list)
    for row in rows:
        if not row or len(row) <= max(FROM_I, TO_I):
            continue
        key = cell_to_str(row[source.match_column])
        value = cell_to_str(row[source.value_column])
        if key and value:
            index[key].append(value)
    return index


def has_header_row(rows: Sequence[Row], spec: EntitySpec) -> bool:
    return bool(rows) and bool(rows[0]) and cell_to_str(rows[0][CODE_I]) == spec.header_marker


def create_concept(spec: EntitySpec, code: str, display: str) -> Concept:
    """Builds a concept carrying the fixed class/status/abstract properties of its kind."""
    return Concept(
        code=code,
        display=display,
        property=[
            ConceptProperty(code="class", valueCode=spec.kind.value),
            ConceptProperty(code="status", valueCode="active"),
            ConceptProperty(code="abstract", valueBoolean=spec.abstract),
        ],
    )


def add_reference(concept: Concept, role: str, related_code: str, kind: str) -> bool:
    """
    Appends a parent or child property, refusing references to the concept itself.
    Returns False when the reference was skipped.
    """
    if related_code == concept.code:
        console.log(
            f"[yellow]Warning: Skipping self-reference {role} relationship for {kind} code {concept.code}[/yellow]"
        )
        return False
    concept.properties.append(ConceptProperty(code=role, valueCode=related_code))
    return True


class EntityProcessor:
    """
    Builds the concepts of any entity kind from its EntitySpec.

    One instance serves all kinds of a release: it knows where the extracted
    TMT and bonus directories are and how to read a spreadsheet.
    """

    def __init__(self, tmt_dir: Path, bonus_dir: Path, reader: RowReader = read_rows):
        self.tmt_dir = tmt_dir
        self.bonus_dir = bonus_dir
        self.reader = reader

    def _load_indexes(self, spec: EntitySpec) -> List[Tuple[RelationshipSource, RelationshipIndex]]:
        files = locate_relationship_files(spec, self.bonus_dir)
        rows_by_pattern: Dict[str, List[Row]] = {}
        for pattern, path in files.items():
            rows_by_pattern[pattern] = self.reader(path)
            console.log(f"Loaded {path.name}: {len(rows_by_pattern[pattern])} rows")
        return [
            (source, build_relationship_index(rows_by_pattern[source.pattern], source))
            for source in spec.relationships
        ]

    def build_concepts(self, spec: EntitySpec) -> List[Concept]:
        """Reads the entity file and relationship files of one kind and returns its concepts."""
        kind = spec.kind.value
        console.log(f"Processing {kind} data...")

        entity_file = locate_entity_file(spec, self.tmt_dir, self.bonus_dir)
        indexes = self._load_indexes(spec)
        rows = self.reader(entity_file)
        console.log(f"{kind} file loaded, {len(rows)} rows found")

        start_index = 0
        if has_header_row(rows, spec):
            console.log("Header row found, starting from row 1")
            start_index = 1

        concepts = []
        for row in rows[start_index:]:
            code = cell_to_str(row[CODE_I]) if row else ""
            if not code:
                continue
            display = cell_to_str(row[DISPLAY_I]) if len(row) > DISPLAY_I else ""

            concept = create_concept(spec, code, display)
            for source, index in indexes:
                for related_code in index.get(code, []):
                    add_reference(concept, source.role, related_code, kind)
            concepts.append(concept)

        return concepts

    def process(self, spec: EntitySpec, concepts: List[Concept]) -> int:
        """Appends the concepts of one kind to the shared collection. Returns how many were added."""
        built = self.build_concepts(spec)
        concepts.extend(built)
        console.log(f"Added {len(built)} {spec.kind.value} concepts")
        return len(built)
