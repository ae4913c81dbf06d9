# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
The TMT entity hierarchy as data.

Each EntitySpec lists the relationship files a kind consumes, in the order
their references are appended to the concept. Relationship patterns are
matched case-insensitively against file names in <bonus>/Relationship.
"""
from typing import Dict, List

from .models import EntityKind, EntitySpec, RelationshipSource


def _parent(pattern: str) -> RelationshipSource:
    return RelationshipSource(pattern=pattern, role="parent")


def _child(pattern: str) -> RelationshipSource:
    return RelationshipSource(pattern=pattern, role="child")


ENTITY_SPECS: Dict[EntityKind, EntitySpec] = {
    EntityKind.SUBS: EntitySpec(
        kind=EntityKind.SUBS,
        abstract=False,
        relationships=[_child("substovtm")],
    ),
    EntityKind.VTM: EntitySpec(
        kind=EntityKind.VTM,
        abstract=False,
        relationships=[_parent("substovtm"), _child("vtmtogp")],
    ),
    EntityKind.GP: EntitySpec(
        kind=EntityKind.GP,
        abstract=True,
        relationships=[_parent("vtmtogp"), _child("gptotp"), _child("gptogpu")],
    ),
    EntityKind.GPU: EntitySpec(
        kind=EntityKind.GPU,
        abstract=True,
        relationships=[_parent("gptogpu"), _child("gputotpu"), _child("gputogpp")],
    ),
    EntityKind.GPP: EntitySpec(
        kind=EntityKind.GPP,
        abstract=False,
        relationships=[
            _parent("gputogpp"),
            _parent("gpptogpp"),
            _child("gpptotpp"),
            _child("gpptogpp"),
        ],
    ),
    EntityKind.TP: EntitySpec(
        kind=EntityKind.TP,
        abstract=False,
        relationships=[_parent("gptotp"), _child("tptotpu")],
    ),
    # TPU rows come from the release snapshot, not from the bonus Concept folder.
    EntityKind.TPU: EntitySpec(
        kind=EntityKind.TPU,
        abstract=True,
        location="snapshot",
        relationships=[_parent("gputotpu"), _parent("tptotpu"), _child("tputotpp")],
    ),
    EntityKind.TPP: EntitySpec(
        kind=EntityKind.TPP,
        abstract=False,
        relationships=[
            _parent("tputotpp"),
            _parent("gpptotpp"),
            _parent("tpptotpp"),
            _child("tpptotpp"),
        ],
    ),
}

# Emission order of the concept list in the output document.
PROCESSING_ORDER: List[EntityKind] = [
    EntityKind.SUBS,
    EntityKind.VTM,
    EntityKind.GP,
    EntityKind.GPU,
    EntityKind.GPP,
    EntityKind.TPU,
    EntityKind.TP,
    EntityKind.TPP,
]
