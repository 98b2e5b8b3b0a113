from threat_timeline.models.timeline import TimelineEvent
from threat_timeline.models.views import EdgeKind, NodePosition
from threat_timeline.services.demo import demo_events
from threat_timeline.services.layout import TreeLayout, compute_layout, overlay_positions

LAYOUT = TreeLayout(node_width=100, node_height=40, horizontal_gap=20, vertical_gap=30, cluster_gap=50)


def _ev(event_id, parent_id=None, **kw):
    return TimelineEvent(id=event_id, timestamp="2024-01-01T00:00", parent_id=parent_id, **kw)


def _overlaps(a: NodePosition, b: NodePosition, width=100, height=40) -> bool:
    return abs(a.x - b.x) < width and abs(a.y - b.y) < height


def test_empty_input():
    result = compute_layout([])
    assert result.positions == {}
    assert result.edges == []


def test_single_event():
    result = LAYOUT.compute([_ev("only")])
    assert result.positions["only"] == NodePosition(x=0, y=0)
    assert result.edges == []


def test_disconnected_roots_do_not_overlap_and_have_no_edges():
    result = LAYOUT.compute([_ev("a"), _ev("b")])
    assert set(result.positions) == {"a", "b"}
    assert not _overlaps(result.positions["a"], result.positions["b"])
    assert result.edges == []


def test_parent_centered_over_children_one_row_up():
    result = LAYOUT.compute([_ev("p"), _ev("c1", "p"), _ev("c2", "p")])
    p, c1, c2 = (result.positions[k] for k in ("p", "c1", "c2"))
    assert c1.y == c2.y == p.y + 70
    assert c1.x < c2.x
    assert p.x == (c1.x + c2.x) / 2
    assert [(e.source, e.target, e.kind) for e in result.edges] == [
        ("p", "c1", EdgeKind.hierarchy),
        ("p", "c2", EdgeKind.hierarchy),
    ]


def test_no_overlaps_in_demo_graph():
    result = LAYOUT.compute(demo_events())
    positions = list(result.positions.values())
    assert len(positions) == 7
    for i, a in enumerate(positions):
        for b in positions[i + 1:]:
            assert not _overlaps(a, b)


def test_lateral_edge_is_distinct_and_not_duplicated():
    result = LAYOUT.compute(demo_events())
    lateral = [e for e in result.edges if e.kind == EdgeKind.lateral]
    # recorded on both ends, emitted once
    assert [(e.source, e.target) for e in lateral] == [("6", "7")]
    assert len([e for e in result.edges if e.kind == EdgeKind.hierarchy]) == 5


def test_dangling_references_are_ignored():
    result = LAYOUT.compute([_ev("a", "missing", lateral_movement_target="gone")])
    assert result.positions["a"] == NodePosition(x=0, y=0)
    assert result.edges == []


def test_cycle_terminates_and_places_every_event():
    result = LAYOUT.compute([_ev("a", "b"), _ev("b", "a"), _ev("root")])
    assert set(result.positions) == {"a", "b", "root"}
    assert not _overlaps(result.positions["root"], result.positions["a"])


def test_event_hanging_off_a_cycle_sits_below_it():
    result = LAYOUT.compute([_ev("c", "a"), _ev("a", "b"), _ev("b", "a")])
    a, b, c = (result.positions[k] for k in ("a", "b", "c"))
    assert c.y == a.y + 70
    assert b.y == a.y + 70
    assert not _overlaps(b, c)


def test_overlay_positions_only_known_ids():
    result = LAYOUT.compute([_ev("a"), _ev("b")])
    overlaid = overlay_positions(result, {"a": {"x": 5, "y": 6}, "ghost": NodePosition(x=1, y=1)})
    assert overlaid.positions["a"] == NodePosition(x=5, y=6)
    assert overlaid.positions["b"] == result.positions["b"]
    assert "ghost" not in overlaid.positions
    # input untouched
    assert result.positions["a"] == NodePosition(x=0, y=0)
