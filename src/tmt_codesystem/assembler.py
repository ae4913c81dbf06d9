# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from .entities import ENTITY_SPECS, PROCESSING_ORDER
from .models import Concept, EntityKind
from .processor import EntityProcessor
from .reader import RowReader, read_rows

console = Console()


def build_concepts(
    tmt_dir: Path,
    bonus_dir: Path,
    reader: RowReader = read_rows,
    kinds: Optional[Sequence[EntityKind]] = None,
) -> Tuple[List[Concept], Dict[str, int]]:
    """
    Runs the entity processors in hierarchy order and collects every concept.

    Returns the concepts in emission order together with the number of
    concepts produced per kind. A missing source file for any kind aborts
    the whole build.
    """
    order = list(kinds) if kinds is not None else PROCESSING_ORDER
    processor = EntityProcessor(tmt_dir, bonus_dir, reader=reader)
    concepts: List[Concept] = []
    counts: Dict[str, int] = {}

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        "[progress.percentage]{task.percentage:>3.0f}%",
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Building concepts...", total=len(order))
        for kind in order:
            progress.update(task, description=f"Building {kind.value} concepts...")
            counts[kind.value] = processor.process(ENTITY_SPECS[kind], concepts)
            progress.update(task, advance=1)

    console.log(f"Built {len(concepts)} concepts across {len(order)} entity kinds.")
    return concepts, counts
