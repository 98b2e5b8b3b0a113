import re
from dataclasses import dataclass
from typing import Optional

# "WEB01 (10.0.0.5)" -> hostname + ip; anything else is a single value
HOST_WITH_IP_RE = re.compile(r"^(.*?)\s*\((.*?)\)$")


@dataclass(frozen=True)
class DestinationHost:
    hostname: Optional[str]
    ip: Optional[str]

    @property
    def value(self) -> str:
        return self.hostname or self.ip or ""

    @property
    def linked_value(self) -> Optional[str]:
        # only meaningful when both halves were given
        if self.hostname and self.ip:
            return self.ip
        return None


def parse_destination_host(text: str) -> DestinationHost:
    raw = (text or "").strip()
    m = HOST_WITH_IP_RE.match(raw)
    if not m:
        return DestinationHost(hostname=raw or None, ip=None)
    hostname = m.group(1).strip() or None
    ip = m.group(2).strip() or None
    return DestinationHost(hostname=hostname, ip=ip)
