from typing import Iterable, Optional

from threat_timeline.models.artifact import ArtifactType
from threat_timeline.models.timeline import TimelineEvent
from threat_timeline.models.views import ArtifactEventRef, ArtifactGroup, ArtifactItem


def aggregate_artifacts(events: Iterable[TimelineEvent]) -> list[ArtifactGroup]:
    """Group every artifact by type, deduplicated on (type, value).

    Groups appear in the order their type is first seen. Each item keeps the
    distinct names it was recorded under, the first linked value seen, and one
    reference per distinct event that carries it.
    """
    groups: dict[ArtifactType, ArtifactGroup] = {}
    items: dict[tuple[ArtifactType, str], ArtifactItem] = {}

    for ev in events:
        for artifact in ev.artifacts:
            group = groups.get(artifact.type)
            if group is None:
                group = ArtifactGroup(type=artifact.type)
                groups[artifact.type] = group

            key = (artifact.type, artifact.value)
            item = items.get(key)
            if item is None:
                item = ArtifactItem(value=artifact.value, linked_value=artifact.linked_value)
                items[key] = item
                group.items.append(item)

            if artifact.name not in item.names:
                item.names.append(artifact.name)

            if not any(ref.id == ev.id for ref in item.events):
                item.events.append(
                    ArtifactEventRef(id=ev.id, title=ev.title, timestamp=ev.timestamp)
                )

    return list(groups.values())


def filter_artifact_groups(groups: list[ArtifactGroup], query: Optional[str]) -> list[ArtifactGroup]:
    """Keep items whose value, linked value or any name contains ``query``."""
    if not query:
        return groups
    q = query.lower()

    def matches(item: ArtifactItem) -> bool:
        if q in item.value.lower():
            return True
        if item.linked_value and q in item.linked_value.lower():
            return True
        return any(q in name.lower() for name in item.names)

    out = []
    for group in groups:
        kept = [item for item in group.items if matches(item)]
        if kept:
            out.append(ArtifactGroup(type=group.type, items=kept))
    return out


def recent_artifact_values(
    events: Iterable[TimelineEvent],
) -> dict[ArtifactType, list[tuple[str, Optional[str]]]]:
    # suggestions for the artifact editor, one entry per distinct value
    out: dict[ArtifactType, list[tuple[str, Optional[str]]]] = {}
    seen: set[tuple[ArtifactType, str]] = set()
    for ev in events:
        for artifact in ev.artifacts:
            key = (artifact.type, artifact.value)
            if key in seen:
                continue
            seen.add(key)
            out.setdefault(artifact.type, []).append((artifact.value, artifact.linked_value))
    return out
