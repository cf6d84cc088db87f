"""
Threat actor (APT group) models.
"""
from datetime import date
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import BeforeValidator, Field

from .common import NonEmptyStr, RecordModel, UpdateModel, _lowercase

ActorName = Annotated[str, Field(min_length=1, max_length=100)]
ActorDescription = Annotated[str, Field(min_length=1, max_length=1000)]
Sophistication = Annotated[
    Literal["beginner", "intermediate", "advanced", "expert"],
    BeforeValidator(_lowercase),
]
Motivation = Annotated[
    Literal["financial", "political", "hacktivist", "espionage", "unknown"],
    BeforeValidator(_lowercase),
]
ActorStatus = Annotated[Literal["active", "inactive"], BeforeValidator(_lowercase)]


class ActorCreate(RecordModel):
    """Fields accepted when creating a threat actor."""
    name: ActorName
    aliases: list[str] = Field(default_factory=list)
    origin: NonEmptyStr
    firstSeen: Optional[date] = None
    lastSeen: Optional[date] = None
    tactics: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    description: ActorDescription
    sophistication: Sophistication = "intermediate"
    motivation: Motivation = "unknown"
    targets: list[str] = Field(default_factory=list)
    status: ActorStatus = "active"


class ActorUpdate(UpdateModel):
    """Fields a client may change on an existing threat actor."""
    required: ClassVar[tuple[str, ...]] = ("name", "origin", "description")

    name: Optional[ActorName] = None
    aliases: Optional[list[str]] = None
    origin: Optional[NonEmptyStr] = None
    firstSeen: Optional[date] = None
    lastSeen: Optional[date] = None
    tactics: Optional[list[str]] = None
    techniques: Optional[list[str]] = None
    description: Optional[ActorDescription] = None
    sophistication: Optional[Sophistication] = None
    motivation: Optional[Motivation] = None
    targets: Optional[list[str]] = None
    status: Optional[ActorStatus] = None
