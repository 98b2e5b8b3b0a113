from fastapi import APIRouter, Depends

from threat_timeline.core.state import get_graph, get_saved_positions
from threat_timeline.metrics.prometheus import layout_compute_seconds
from threat_timeline.models.views import NodePosition
from threat_timeline.services.graph import TimelineGraph
from threat_timeline.services.layout import compute_layout, overlay_positions

router = APIRouter(prefix="/layout", tags=["layout"])


@router.get("")
def get_layout(
    graph: TimelineGraph = Depends(get_graph),
    positions: dict = Depends(get_saved_positions),
):
    with layout_compute_seconds.time():
        result = compute_layout(graph.events())
    result = overlay_positions(result, positions)
    return result.model_dump(mode="json")


@router.put("/positions")
def save_positions(
    payload: dict[str, NodePosition],
    graph: TimelineGraph = Depends(get_graph),
    positions: dict = Depends(get_saved_positions),
):
    # positions for unknown events are dropped
    kept = {k: v for k, v in payload.items() if k in graph}
    positions.update(kept)
    return {"saved": sorted(kept)}


@router.delete("/positions")
def reset_positions(positions: dict = Depends(get_saved_positions)):
    positions.clear()
    return {"reset": True}
