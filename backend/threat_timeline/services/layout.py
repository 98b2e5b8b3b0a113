"""Layered tree layout for the event diagram.

Each root and its subtree form one cluster. Inside a cluster, leaves take
consecutive horizontal slots in tree order and every parent is centred over
its children; depth maps to the vertical axis. Clusters are placed left to
right with a fixed gap, so separate trees never overlap.

Positions depend only on the graph structure. Coordinates saved by the user are
applied afterwards with ``overlay_positions``.
"""

import logging
from collections import defaultdict
from typing import Iterable, Mapping, Optional, Union

from threat_timeline.core.config import settings
from threat_timeline.models.timeline import TimelineEvent
from threat_timeline.models.views import EdgeKind, LayoutEdge, LayoutResult, NodePosition

logger = logging.getLogger(__name__)


class TreeLayout:
    def __init__(
        self,
        node_width: Optional[float] = None,
        node_height: Optional[float] = None,
        horizontal_gap: Optional[float] = None,
        vertical_gap: Optional[float] = None,
        cluster_gap: Optional[float] = None,
    ):
        self.node_width = settings.layout_node_width if node_width is None else node_width
        self.node_height = settings.layout_node_height if node_height is None else node_height
        self.horizontal_gap = settings.layout_horizontal_gap if horizontal_gap is None else horizontal_gap
        self.vertical_gap = settings.layout_vertical_gap if vertical_gap is None else vertical_gap
        self.cluster_gap = settings.layout_cluster_gap if cluster_gap is None else cluster_gap

    @property
    def slot_width(self) -> float:
        return self.node_width + self.horizontal_gap

    @property
    def row_height(self) -> float:
        return self.node_height + self.vertical_gap

    def compute(self, events: Iterable[TimelineEvent]) -> LayoutResult:
        events = list(events)
        if not events:
            return LayoutResult()

        by_id = {ev.id: ev for ev in events}
        children: dict[str, list[str]] = defaultdict(list)
        roots: list[str] = []
        for ev in events:
            if ev.parent_id and ev.parent_id != ev.id and ev.parent_id in by_id:
                children[ev.parent_id].append(ev.id)
            else:
                roots.append(ev.id)

        positions: dict[str, NodePosition] = {}
        origin_x = 0.0
        # events on or below a parent cycle are unreachable from any root; the
        # cycle member reached first is laid out as if it were a root
        for start in [*roots, *by_id]:
            if start in positions:
                continue
            if start not in roots:
                start = self._cycle_entry(start, by_id)
                logger.warning("parent cycle detected, laying out %s as a cluster root", start)
            leaves = self._place_tree(start, children, positions, origin_x)
            origin_x += leaves * self.slot_width - self.horizontal_gap + self.cluster_gap

        return LayoutResult(positions=positions, edges=self._edges(events, by_id))

    @staticmethod
    def _cycle_entry(start: str, by_id: Mapping[str, TimelineEvent]) -> str:
        """Follow parent links up from ``start`` to the first repeated event."""
        seen = {start}
        node = start
        while True:
            parent = by_id[node].parent_id
            if parent in seen:
                return parent
            seen.add(parent)
            node = parent

    def _place_tree(
        self,
        root: str,
        children: Mapping[str, list[str]],
        positions: dict[str, NodePosition],
        origin_x: float,
    ) -> int:
        """Position one cluster. Returns the number of leaf slots it used."""
        order: list[str] = []
        depth: dict[str, int] = {root: 0}
        tree_children: dict[str, list[str]] = {}
        claimed = {root}

        stack = [root]
        while stack:
            node = stack.pop()
            order.append(node)
            kids = [c for c in children.get(node, ()) if c not in claimed and c not in positions]
            claimed.update(kids)
            tree_children[node] = kids
            for kid in kids:
                depth[kid] = depth[node] + 1
            stack.extend(reversed(kids))

        x: dict[str, float] = {}
        slot = 0
        for node in order:
            if not tree_children[node]:
                x[node] = origin_x + slot * self.slot_width
                slot += 1
        for node in reversed(order):
            kids = tree_children[node]
            if kids:
                x[node] = (x[kids[0]] + x[kids[-1]]) / 2

        for node in order:
            positions[node] = NodePosition(x=x[node], y=depth[node] * self.row_height)
        return slot

    def _edges(self, events: list[TimelineEvent], by_id: Mapping[str, TimelineEvent]) -> list[LayoutEdge]:
        edges: list[LayoutEdge] = []
        for ev in events:
            if ev.parent_id and ev.parent_id != ev.id and ev.parent_id in by_id:
                edges.append(
                    LayoutEdge(
                        id=f"{ev.parent_id}-{ev.id}",
                        source=ev.parent_id,
                        target=ev.id,
                        kind=EdgeKind.hierarchy,
                    )
                )

        # both ends may record the same pivot
        pivots: list[tuple[str, str]] = []
        for ev in events:
            if ev.lateral_movement_target and ev.lateral_movement_target != ev.id:
                pivots.append((ev.id, ev.lateral_movement_target))
            if ev.lateral_movement_source and ev.lateral_movement_source != ev.id:
                pivots.append((ev.lateral_movement_source, ev.id))

        seen: set[tuple[str, str]] = set()
        for source, target in pivots:
            if (source, target) in seen or source not in by_id or target not in by_id:
                continue
            seen.add((source, target))
            edges.append(
                LayoutEdge(
                    id=f"lateral-{source}-{target}",
                    source=source,
                    target=target,
                    kind=EdgeKind.lateral,
                )
            )
        return edges


def compute_layout(events: Iterable[TimelineEvent]) -> LayoutResult:
    return TreeLayout().compute(events)


def overlay_positions(
    result: LayoutResult,
    saved: Mapping[str, Union[NodePosition, Mapping[str, float]]],
) -> LayoutResult:
    """Replace computed positions with saved ones for ids still in the layout."""
    positions = dict(result.positions)
    for event_id, pos in saved.items():
        if event_id not in positions:
            continue
        positions[event_id] = pos if isinstance(pos, NodePosition) else NodePosition.model_validate(dict(pos))
    return LayoutResult(positions=positions, edges=list(result.edges))
