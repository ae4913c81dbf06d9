# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
import copy
from typing import Any, Dict, Sequence

from rich.console import Console

from .models import Concept

console = Console()

TEMPLATE_CONCEPT_CODE = "TEMPLATE"
DEFAULT_TITLE_PREFIX = "Thai Medicines Terminology (TMT)"
DEFAULT_DATE_OFFSET = "+07:00"


def format_date_from_version(version: str, offset: str = DEFAULT_DATE_OFFSET) -> str:
    """
    Turns a YYYYMMDD release version into an ISO-8601 date-time at a fixed offset.
    Anything that is not exactly eight digits yields an empty string.
    """
    if not version or len(version) != 8 or not version.isdigit():
        return ""
    return f"{version[0:4]}-{version[4:6]}-{version[6:8]}T00:00:00{offset}"


def finalize_document(
    template: Dict[str, Any],
    version: str,
    concepts: Sequence[Concept],
    title_prefix: str = DEFAULT_TITLE_PREFIX,
    date_offset: str = DEFAULT_DATE_OFFSET,
) -> Dict[str, Any]:
    """
    Returns a copy of the CodeSystem template with the release header filled in,
    the placeholder concept removed and the given concepts appended.
    """
    if not isinstance(template.get("concept"), list):
        raise ValueError("Template document has no 'concept' list.")

    document = copy.deepcopy(template)
    document["version"] = version
    document["date"] = format_date_from_version(version, date_offset)
    document["title"] = f"{title_prefix} {version}"

    kept = [c for c in document["concept"] if c.get("code") != TEMPLATE_CONCEPT_CODE]
    if len(kept) == len(document["concept"]):
        console.log(f"[yellow]Template has no '{TEMPLATE_CONCEPT_CODE}' concept to remove.[/yellow]")
    document["concept"] = kept + [concept.to_fhir() for concept in concepts]

    console.log(f"Document finalized with {len(document['concept'])} concepts.")
    return document
