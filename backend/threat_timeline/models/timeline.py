from typing import Optional

from sqlmodel import Field, SQLModel

from threat_timeline.models.artifact import Artifact


class NetworkDetails(SQLModel):
    proxy_ip: Optional[str] = None
    port: Optional[str] = None
    destination_ip: Optional[str] = None


class TimelineEvent(SQLModel):
    id: str
    timestamp: str  # ISO-8601, "YYYY-MM-DDTHH:MM" as written by the editor
    title: str = ""
    description: str = ""

    tactic: Optional[str] = None
    technique: Optional[str] = None

    parent_id: Optional[str] = Field(default=None)  # causal tree edge
    lateral_movement_source: Optional[str] = None
    lateral_movement_target: Optional[str] = None

    artifacts: list[Artifact] = Field(default_factory=list)

    # free-form evidence, carried through untouched
    search_query: Optional[str] = None
    raw_log: Optional[str] = None
    attached_file: Optional[str] = None
    host: Optional[str] = None
    user: Optional[str] = None
    process: Optional[str] = None
    sha256: Optional[str] = None
    network_details: Optional[NetworkDetails] = None


class TimelineEventUpdate(SQLModel):
    """Partial update. Only fields explicitly set are applied."""

    id: str
    timestamp: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None

    tactic: Optional[str] = None
    technique: Optional[str] = None

    parent_id: Optional[str] = None
    lateral_movement_source: Optional[str] = None
    lateral_movement_target: Optional[str] = None

    artifacts: Optional[list[Artifact]] = None

    search_query: Optional[str] = None
    raw_log: Optional[str] = None
    attached_file: Optional[str] = None
    host: Optional[str] = None
    user: Optional[str] = None
    process: Optional[str] = None
    sha256: Optional[str] = None
    network_details: Optional[NetworkDetails] = None
