from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from threat_timeline.models.artifact import ArtifactType


class ArtifactEventRef(SQLModel):
    # snapshot taken at aggregation time
    id: str
    title: str
    timestamp: str


class ArtifactItem(SQLModel):
    value: str
    linked_value: Optional[str] = None
    names: list[str] = Field(default_factory=list)
    events: list[ArtifactEventRef] = Field(default_factory=list)


class ArtifactGroup(SQLModel):
    type: ArtifactType
    items: list[ArtifactItem] = Field(default_factory=list)


class EdgeKind(str, Enum):
    hierarchy = "hierarchy"  # parent -> child
    lateral = "lateral"  # lateral movement pivot


class NodePosition(SQLModel):
    x: float
    y: float


class LayoutEdge(SQLModel):
    id: str
    source: str
    target: str
    kind: EdgeKind


class LayoutResult(SQLModel):
    positions: dict[str, NodePosition] = Field(default_factory=dict)
    edges: list[LayoutEdge] = Field(default_factory=list)
