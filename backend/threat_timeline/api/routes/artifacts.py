from typing import Optional

from fastapi import APIRouter, Depends, Query

from threat_timeline.core.state import get_graph
from threat_timeline.services.aggregation import (
    aggregate_artifacts,
    filter_artifact_groups,
    recent_artifact_values,
)
from threat_timeline.services.graph import TimelineGraph

router = APIRouter(prefix="/artifacts", tags=["artifacts"])


@router.get("")
def list_artifacts(
    graph: TimelineGraph = Depends(get_graph),
    q: Optional[str] = Query(default=None),
):
    groups = filter_artifact_groups(aggregate_artifacts(graph.events()), q)
    return {
        "groups": [g.model_dump(mode="json") for g in groups],
        "counts": {g.type.value: len(g.items) for g in groups},
    }


@router.get("/recent")
def recent_artifacts(graph: TimelineGraph = Depends(get_graph)):
    recent = recent_artifact_values(graph.events())
    return {
        t.value: [{"value": v, "linked_value": lv} for v, lv in pairs]
        for t, pairs in recent.items()
    }
