from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class ArtifactType(str, Enum):
    hostname = "hostname"
    domain = "domain"
    file = "file"
    ip = "ip"
    hash = "hash"
    custom = "custom"
    email = "email"
    command = "command"
    user = "user"


class Artifact(SQLModel):
    type: ArtifactType
    name: str = ""  # role the value played, e.g. "Source Host"
    value: str
    linked_value: Optional[str] = Field(default=None)  # e.g. IP paired with a hostname
