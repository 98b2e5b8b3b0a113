from threat_timeline.models.artifact import Artifact, ArtifactType
from threat_timeline.models.timeline import TimelineEvent
from threat_timeline.services.aggregation import (
    aggregate_artifacts,
    filter_artifact_groups,
    recent_artifact_values,
)


def _events():
    return [
        TimelineEvent(
            id="1",
            timestamp="2024-03-14T10:00",
            title="Phish",
            artifacts=[
                Artifact(type=ArtifactType.hostname, name="Source", value="WS1", linked_value="10.0.0.5"),
                Artifact(type=ArtifactType.email, name="From", value="bad@evil.test"),
            ],
        ),
        TimelineEvent(
            id="2",
            timestamp="2024-03-14T10:05",
            title="Recon",
            artifacts=[
                Artifact(type=ArtifactType.hostname, name="Target", value="WS1", linked_value="10.9.9.9"),
                Artifact(type=ArtifactType.hostname, name="Source", value="WS1"),
                Artifact(type=ArtifactType.command, name="Executed", value="net view"),
            ],
        ),
    ]


def _signature(groups):
    return {
        (g.type, item.value): frozenset(item.names)
        for g in groups
        for item in g.items
    }


def test_groups_and_deduplicates_by_type_and_value():
    groups = aggregate_artifacts(_events())

    assert [g.type for g in groups] == [ArtifactType.hostname, ArtifactType.email, ArtifactType.command]
    host = groups[0]
    assert len(host.items) == 1
    item = host.items[0]
    assert item.names == ["Source", "Target"]
    # first seen linked value wins
    assert item.linked_value == "10.0.0.5"
    assert [(ref.id, ref.title, ref.timestamp) for ref in item.events] == [
        ("1", "Phish", "2024-03-14T10:00"),
        ("2", "Recon", "2024-03-14T10:05"),
    ]


def test_same_value_in_different_types_stays_separate():
    ev = TimelineEvent(
        id="x",
        timestamp="2024-03-14T10:00",
        artifacts=[
            Artifact(type=ArtifactType.user, name="Account", value="admin"),
            Artifact(type=ArtifactType.custom, name="Tag", value="admin"),
        ],
    )
    groups = aggregate_artifacts([ev])
    assert {(g.type, g.items[0].value) for g in groups} == {
        (ArtifactType.user, "admin"),
        (ArtifactType.custom, "admin"),
    }


def test_grouping_is_order_independent():
    events = _events()
    forward = aggregate_artifacts(events)
    backward = aggregate_artifacts(list(reversed(events)))
    assert _signature(forward) == _signature(backward)
    assert _signature(aggregate_artifacts(events)) == _signature(forward)


def test_empty_input():
    assert aggregate_artifacts([]) == []


def test_does_not_mutate_input():
    events = _events()
    before = [ev.model_dump() for ev in events]
    aggregate_artifacts(events)
    assert [ev.model_dump() for ev in events] == before


def test_filter_matches_value_linked_value_and_names():
    groups = aggregate_artifacts(_events())

    assert _signature(filter_artifact_groups(groups, "10.0.0")) == {
        (ArtifactType.hostname, "WS1"): frozenset({"Source", "Target"})
    }
    assert [g.type for g in filter_artifact_groups(groups, "EXECUTED")] == [ArtifactType.command]
    assert filter_artifact_groups(groups, "nothing-matches") == []
    assert filter_artifact_groups(groups, "") is groups


def test_recent_values_are_distinct_per_type():
    recent = recent_artifact_values(_events())
    assert recent[ArtifactType.hostname] == [("WS1", "10.0.0.5")]
    assert recent[ArtifactType.command] == [("net view", None)]
