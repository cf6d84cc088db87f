"""
Security incident models.
"""
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import BaseModel, BeforeValidator, Field

from .common import (
    OptionalReference,
    RecordModel,
    Reference,
    Severity,
    UpdateModel,
    _lowercase,
)

IncidentTitle = Annotated[str, Field(min_length=1, max_length=200)]
IncidentDescription = Annotated[str, Field(min_length=1, max_length=2000)]
IncidentStatus = Annotated[
    Literal["new", "investigating", "contained", "resolved", "closed"],
    BeforeValidator(_lowercase),
]
ImpactLevel = Annotated[Literal["none", "low", "medium", "high"], BeforeValidator(_lowercase)]


class Impact(BaseModel):
    """CIA impact assessment."""
    confidentiality: ImpactLevel = "low"
    integrity: ImpactLevel = "low"
    availability: ImpactLevel = "low"


class IncidentCreate(RecordModel):
    """Fields accepted when creating an incident."""
    title: IncidentTitle
    description: IncidentDescription
    severity: Severity = "medium"
    status: IncidentStatus = "new"
    affected_systems: list[str] = Field(default_factory=list)
    threat_actor: OptionalReference = None
    attack_vector: Optional[str] = None
    indicators: list[Reference] = Field(default_factory=list)
    mitre_tactics: list[str] = Field(default_factory=list)
    mitre_techniques: list[str] = Field(default_factory=list)
    impact: Impact = Field(default_factory=Impact)
    analyst: Optional[str] = None
    organization: Optional[str] = None


class IncidentUpdate(UpdateModel):
    """
    Fields a client may change on an existing incident.

    ``timeline`` is not writable; ``timeline_event`` appends one entry to it.
    """
    required: ClassVar[tuple[str, ...]] = ("title", "description", "severity", "status")

    title: Optional[IncidentTitle] = None
    description: Optional[IncidentDescription] = None
    severity: Optional[Severity] = None
    status: Optional[IncidentStatus] = None
    affected_systems: Optional[list[str]] = None
    threat_actor: OptionalReference = None
    attack_vector: Optional[str] = None
    indicators: Optional[list[Reference]] = None
    mitre_tactics: Optional[list[str]] = None
    mitre_techniques: Optional[list[str]] = None
    impact: Optional[Impact] = None
    analyst: Optional[str] = None
    organization: Optional[str] = None
    timeline_event: Optional[Annotated[str, Field(min_length=1, max_length=500)]] = None
