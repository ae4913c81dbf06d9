from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """The eight TMT abstraction levels, from substance down to trade pack."""
    SUBS = "SUBS"
    VTM = "VTM"
    GP = "GP"
    GPU = "GPU"
    GPP = "GPP"
    TP = "TP"
    TPU = "TPU"
    TPP = "TPP"


class ConceptProperty(BaseModel):
    """
    A single CodeSystem concept property.
    Exactly one of valueCode / valueBoolean is set.
    """
    model_config = ConfigDict(extra="allow")

    code: str
    valueCode: Optional[str] = None
    valueBoolean: Optional[bool] = None


class Concept(BaseModel):
    """
    Represents a single TMT concept in the CodeSystem document.
    Properties keep insertion order: class, status, abstract, then the
    parent/child references in the order they were resolved.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    code: str
    display: str = ""
    properties: List[ConceptProperty] = Field(default_factory=list, alias="property")

    @property
    def kind(self) -> Optional[str]:
        return next((p.valueCode for p in self.properties if p.code == "class"), None)

    @property
    def parents(self) -> List[str]:
        return [p.valueCode for p in self.properties if p.code == "parent"]

    @property
    def children(self) -> List[str]:
        return [p.valueCode for p in self.properties if p.code == "child"]

    def to_fhir(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class RelationshipSource(BaseModel):
    """
    One relationship file consumed by an entity kind.

    A parent source matches the current code against column 1 and takes the
    related code from column 0; a child source does the reverse.
    """
    model_config = ConfigDict(frozen=True)

    pattern: str
    role: Literal["parent", "child"]

    @property
    def match_column(self) -> int:
        return 1 if self.role == "parent" else 0

    @property
    def value_column(self) -> int:
        return 0 if self.role == "parent" else 1


class EntitySpec(BaseModel):
    """Declarative description of how concepts of one kind are built."""
    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    abstract: bool
    # "concept_dir": <bonus>/Concept/<KIND>########.xls
    # "snapshot": <tmt>/*_SNAPSHOT.xls
    location: Literal["concept_dir", "snapshot"] = "concept_dir"
    relationships: List[RelationshipSource] = Field(default_factory=list)

    @property
    def header_marker(self) -> str:
        return f"TMTID({self.kind.value})"


class InvalidReference(BaseModel):
    """A parent or child property pointing at a code missing from the document."""
    conceptCode: str
    referencedCode: str


class InvalidReferences(BaseModel):
    parent: List[InvalidReference] = Field(default_factory=list)
    child: List[InvalidReference] = Field(default_factory=list)


class ValidationStats(BaseModel):
    totalConcepts: int = 0
    invalidParentCount: int = 0
    invalidChildCount: int = 0
    removedCount: int = 0


class ValidationResult(BaseModel):
    valid: bool
    invalidReferences: InvalidReferences = Field(default_factory=InvalidReferences)
    stats: ValidationStats = Field(default_factory=ValidationStats)


class ValidationReport(BaseModel):
    """The standalone report artifact written next to the output document."""
    version: str
    date: str
    validation: ValidationResult
