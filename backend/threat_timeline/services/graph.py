"""In-memory incident event graph.

Events are kept in one ordered collection. Two relations are read off their
fields: the causal tree (``parent_id``) and the lateral movement link
(``lateral_movement_source`` / ``lateral_movement_target``). There is no
separate edge table, so deleting an event cascades through the tree but leaves
lateral references to it dangling.

Every walk over the tree uses an explicit frontier and a visited set, so a
malformed parent chain (a cycle) cannot hang a traversal.
"""

import logging
import uuid
from collections import defaultdict, deque
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from threat_timeline.core.exceptions import CreationError, TimestampValidationError
from threat_timeline.core.timestamps import now_event_timestamp, parse_timestamp
from threat_timeline.models.artifact import Artifact, ArtifactType
from threat_timeline.models.timeline import TimelineEvent, TimelineEventUpdate
from threat_timeline.services.extraction import parse_destination_host

logger = logging.getLogger(__name__)

SOURCE_HOST = "Source Host"
DESTINATION_HOST = "Destination Host"

# an explicit None cannot clear these
_NON_NULLABLE = frozenset({"id", "timestamp", "title", "description", "artifacts"})

UpdateLike = Union[TimelineEventUpdate, TimelineEvent, Mapping[str, Any]]


def _new_id() -> str:
    return str(uuid.uuid4())


def _normalize_parent(parent_id: Any) -> Optional[str]:
    if isinstance(parent_id, str) and parent_id.strip():
        return parent_id
    return None


def _update_fields(update: UpdateLike) -> dict[str, Any]:
    if isinstance(update, Mapping):
        update = TimelineEventUpdate.model_validate(dict(update))
    return update.model_dump(exclude_unset=True)


def merge_event_update(stored: TimelineEvent, changes: Mapping[str, Any]) -> TimelineEvent:
    """Fold the explicitly set fields of an update over a stored event.

    Fields missing from ``changes`` keep their stored value. The stored event
    is not modified; a new record is returned.
    """
    merged = stored.model_dump()
    for name, value in changes.items():
        if name == "id":
            continue
        if value is None and name in _NON_NULLABLE:
            continue
        merged[name] = value
    return TimelineEvent.model_validate(merged)


class TimelineGraph:
    def __init__(
        self,
        events: Optional[Iterable[TimelineEvent]] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._events: dict[str, TimelineEvent] = {}
        self._id_factory = id_factory
        if events is not None:
            self.load_events(events)

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    # -- loading --------------------------------------------------------

    def load_events(self, events: Iterable[TimelineEvent]) -> None:
        """Replace the whole collection. Records are taken as given."""
        loaded: dict[str, TimelineEvent] = {}
        for ev in events:
            if ev.id in loaded:
                raise CreationError(f"Duplicate event id: {ev.id}")
            loaded[ev.id] = ev.model_copy(deep=True)
        self._events = loaded
        logger.info("loaded %d events", len(loaded))

    def clear(self) -> None:
        self._events = {}

    # -- queries --------------------------------------------------------

    def events(self) -> list[TimelineEvent]:
        return [ev.model_copy(deep=True) for ev in self._events.values()]

    def get_event(self, event_id: str) -> Optional[TimelineEvent]:
        ev = self._events.get(event_id)
        return ev.model_copy(deep=True) if ev else None

    def children_of(self, event_id: str) -> list[TimelineEvent]:
        return [
            ev.model_copy(deep=True)
            for ev in self._events.values()
            if ev.parent_id == event_id and ev.id != event_id
        ]

    def root_events(self) -> list[TimelineEvent]:
        """Events whose parent does not resolve to another event."""
        return [
            ev.model_copy(deep=True)
            for ev in self._events.values()
            if not self._has_resolvable_parent(ev)
        ]

    def descendants_of(self, event_id: str) -> list[TimelineEvent]:
        return [self._events[i].model_copy(deep=True) for i in self._descendant_ids(event_id)]

    def parent_candidates(self, event_id: str) -> list[TimelineEvent]:
        """Events that could become the parent of ``event_id`` without a cycle."""
        excluded = {event_id, *self._descendant_ids(event_id)}
        return [ev.model_copy(deep=True) for ev in self._events.values() if ev.id not in excluded]

    def depth_of(self, event_id: str) -> int:
        """Number of resolvable ancestors above ``event_id``."""
        ev = self._events.get(event_id)
        if ev is None:
            return 0
        seen = {event_id}
        depth = 0
        while self._has_resolvable_parent(ev):
            if ev.parent_id in seen:
                logger.warning("parent cycle detected while measuring depth of %s", event_id)
                break
            seen.add(ev.parent_id)
            ev = self._events[ev.parent_id]
            depth += 1
        return depth

    def _has_resolvable_parent(self, ev: TimelineEvent) -> bool:
        return bool(ev.parent_id) and ev.parent_id != ev.id and ev.parent_id in self._events

    def _children_index(self) -> dict[str, list[str]]:
        index: dict[str, list[str]] = defaultdict(list)
        for ev in self._events.values():
            if ev.parent_id and ev.parent_id != ev.id:
                index[ev.parent_id].append(ev.id)
        return index

    def _descendant_ids(self, event_id: str) -> list[str]:
        index = self._children_index()
        seen = {event_id}
        out: list[str] = []
        frontier = deque(index.get(event_id, ()))
        while frontier:
            current = frontier.popleft()
            if current in seen:
                logger.warning("parent cycle detected under %s at %s", event_id, current)
                continue
            seen.add(current)
            out.append(current)
            frontier.extend(index.get(current, ()))
        return out

    # -- mutations ------------------------------------------------------

    def add_event(self, parent_id: Any = None) -> str:
        event_id = self._id_factory()
        if event_id in self._events:
            raise CreationError(f"Generated event id already exists: {event_id}")

        ev = TimelineEvent(
            id=event_id,
            timestamp=now_event_timestamp(),
            parent_id=_normalize_parent(parent_id),
        )
        self._events[event_id] = ev
        logger.info("added event %s (parent=%s)", event_id, ev.parent_id)
        return event_id

    def update_event(self, update: UpdateLike) -> Optional[TimelineEvent]:
        """Merge a partial update into the stored event.

        Returns the merged event, or None when the id is unknown.
        """
        changes = _update_fields(update)
        event_id = changes.get("id")
        stored = self._events.get(event_id)
        if stored is None:
            logger.warning("update ignored, event not found: %s", event_id)
            return None

        merged = merge_event_update(stored, self._checked_changes(stored, changes))
        self._events[event_id] = merged
        logger.debug("updated event %s fields=%s", event_id, sorted(k for k in changes if k != "id"))
        return merged.model_copy(deep=True)

    def _checked_changes(self, stored: TimelineEvent, changes: dict[str, Any]) -> dict[str, Any]:
        """Replace a bad timestamp and drop a parent link that would close a cycle."""
        event_id = stored.id
        if "timestamp" in changes and changes["timestamp"] is not None:
            try:
                parse_timestamp(changes["timestamp"])
            except TimestampValidationError:
                logger.warning(
                    "event %s: invalid timestamp %r replaced with current time",
                    event_id,
                    changes["timestamp"],
                )
                changes["timestamp"] = now_event_timestamp()

        if "parent_id" in changes:
            changes["parent_id"] = _normalize_parent(changes["parent_id"])
            if not self._parent_allowed(event_id, changes["parent_id"]):
                logger.warning(
                    "event %s: parent %s would create a cycle, keeping %s",
                    event_id,
                    changes["parent_id"],
                    stored.parent_id,
                )
                del changes["parent_id"]
        return changes

    def _parent_allowed(self, event_id: str, parent_id: Optional[str]) -> bool:
        if parent_id is None:
            return True
        if parent_id == event_id:
            return False
        return parent_id not in self._descendant_ids(event_id)

    def delete_event(self, event_id: str) -> list[str]:
        """Remove an event and its whole subtree. Returns the removed ids."""
        if event_id not in self._events:
            logger.warning("delete ignored, event not found: %s", event_id)
            return []

        removed = [event_id, *self._descendant_ids(event_id)]
        doomed = set(removed)
        self._events = {k: v for k, v in self._events.items() if k not in doomed}
        logger.info("deleted event %s with %d descendants", event_id, len(removed) - 1)
        return removed

    def create_lateral_movement(
        self, source: Union[TimelineEvent, str], destination_host: str
    ) -> Optional[str]:
        """Record a pivot from ``source`` to a new initial-access root event.

        ``destination_host`` is either a bare hostname/IP or ``"name (ip)"``.
        When ``source`` is an event, its set fields are committed along with
        the pivot. Returns the id of the new event, or None when the source is
        unknown.
        """
        source_id = source if isinstance(source, str) else source.id
        stored = self._events.get(source_id)
        if stored is None:
            logger.warning("lateral movement ignored, source not found: %s", source_id)
            return None
        if not isinstance(source, str):
            stored = merge_event_update(stored, self._checked_changes(stored, _update_fields(source)))

        dest = parse_destination_host(destination_host)
        new_id = self._id_factory()
        if new_id in self._events:
            raise CreationError(f"Generated event id already exists: {new_id}")

        initial_access = TimelineEvent(
            id=new_id,
            timestamp=now_event_timestamp(),
            title=f"Initial Access on {dest.value}",
            tactic="Initial Access",
            technique="Valid Accounts",
            host=dest.value or None,
            lateral_movement_source=source_id,
            artifacts=[
                Artifact(
                    type=ArtifactType.hostname,
                    name=SOURCE_HOST,
                    value=dest.value,
                    linked_value=dest.linked_value,
                )
            ],
        )

        source_host = next((a for a in stored.artifacts if a.name == SOURCE_HOST), None)
        if source_host is None:
            source_host = Artifact(type=ArtifactType.hostname, name=SOURCE_HOST, value=stored.host or "")
        artifacts = [a for a in stored.artifacts if a.name not in (SOURCE_HOST, DESTINATION_HOST)]
        artifacts.append(source_host)
        artifacts.append(
            Artifact(
                type=ArtifactType.hostname,
                name=DESTINATION_HOST,
                value=dest.value,
                linked_value=dest.linked_value,
            )
        )
        updated_source = merge_event_update(
            stored,
            {
                "artifacts": [a.model_dump() for a in artifacts],
                "lateral_movement_target": new_id,
            },
        )

        staged = dict(self._events)
        previous = staged.get(staged[source_id].lateral_movement_target or "")
        if previous is not None and previous.lateral_movement_source == source_id:
            # a source holds a single outgoing pivot
            staged[previous.id] = merge_event_update(previous, {"lateral_movement_source": None})
        staged[source_id] = updated_source
        staged[new_id] = initial_access
        self._events = staged

        logger.info("lateral movement %s -> %s (%s)", source_id, new_id, destination_host)
        return new_id
