from threat_timeline.models.artifact import Artifact, ArtifactType
from threat_timeline.models.timeline import NetworkDetails, TimelineEvent, TimelineEventUpdate
from threat_timeline.models.views import (
    ArtifactEventRef,
    ArtifactGroup,
    ArtifactItem,
    EdgeKind,
    LayoutEdge,
    LayoutResult,
    NodePosition,
)

__all__ = [
    "Artifact",
    "ArtifactType",
    "NetworkDetails",
    "TimelineEvent",
    "TimelineEventUpdate",
    "ArtifactEventRef",
    "ArtifactGroup",
    "ArtifactItem",
    "EdgeKind",
    "LayoutEdge",
    "LayoutResult",
    "NodePosition",
]
