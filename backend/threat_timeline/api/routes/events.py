from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from threat_timeline.core.exceptions import EventNotFoundError
from threat_timeline.core.state import get_graph, get_saved_positions
from threat_timeline.metrics.prometheus import event_mutations_total
from threat_timeline.models.timeline import TimelineEvent, TimelineEventUpdate
from threat_timeline.services.demo import demo_events
from threat_timeline.services.graph import TimelineGraph

router = APIRouter(prefix="/events", tags=["events"])


class AddEventRequest(BaseModel):
    parent_id: Optional[Any] = None


class LateralMovementRequest(BaseModel):
    destination_host: str


def _require_event(graph: TimelineGraph, event_id: str) -> TimelineEvent:
    ev = graph.get_event(event_id)
    if ev is None:
        raise HTTPException(status_code=404, detail=str(EventNotFoundError(event_id)))
    return ev


def _dump(events: list[TimelineEvent]) -> list[dict]:
    return [ev.model_dump(mode="json") for ev in events]


@router.get("")
def list_events(graph: TimelineGraph = Depends(get_graph)):
    events = graph.events()
    return {
        "events": _dump(events),
        "depths": {ev.id: graph.depth_of(ev.id) for ev in events},
    }


@router.post("", status_code=201)
def add_event(body: Optional[AddEventRequest] = None, graph: TimelineGraph = Depends(get_graph)):
    event_id = graph.add_event(body.parent_id if body else None)
    event_mutations_total.labels(operation="add", outcome="applied").inc()
    return {"event": graph.get_event(event_id).model_dump(mode="json")}


@router.delete("")
def clear_events(
    graph: TimelineGraph = Depends(get_graph),
    positions: dict = Depends(get_saved_positions),
):
    removed = len(graph)
    graph.clear()
    positions.clear()
    event_mutations_total.labels(operation="clear", outcome="applied").inc()
    return {"removed": removed}


@router.post("/demo")
def load_demo(
    graph: TimelineGraph = Depends(get_graph),
    positions: dict = Depends(get_saved_positions),
):
    graph.load_events(demo_events())
    positions.clear()
    event_mutations_total.labels(operation="load_demo", outcome="applied").inc()
    return {"events": _dump(graph.events())}


@router.get("/roots")
def root_events(graph: TimelineGraph = Depends(get_graph)):
    return {"events": _dump(graph.root_events())}


@router.get("/{event_id}")
def get_event(event_id: str, graph: TimelineGraph = Depends(get_graph)):
    ev = _require_event(graph, event_id)
    return {"event": ev.model_dump(mode="json"), "depth": graph.depth_of(event_id)}


@router.patch("/{event_id}")
def update_event(event_id: str, payload: dict, graph: TimelineGraph = Depends(get_graph)):
    try:
        update = TimelineEventUpdate.model_validate({**payload, "id": event_id})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False)) from e

    merged = graph.update_event(update)
    if merged is None:
        event_mutations_total.labels(operation="update", outcome="not_found").inc()
        raise HTTPException(status_code=404, detail=str(EventNotFoundError(event_id)))
    event_mutations_total.labels(operation="update", outcome="applied").inc()
    return {"event": merged.model_dump(mode="json")}


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    graph: TimelineGraph = Depends(get_graph),
    positions: dict = Depends(get_saved_positions),
):
    removed = graph.delete_event(event_id)
    if not removed:
        event_mutations_total.labels(operation="delete", outcome="not_found").inc()
        raise HTTPException(status_code=404, detail=str(EventNotFoundError(event_id)))
    for rid in removed:
        positions.pop(rid, None)
    event_mutations_total.labels(operation="delete", outcome="applied").inc()
    return {"deleted": removed}


@router.get("/{event_id}/children")
def children(event_id: str, graph: TimelineGraph = Depends(get_graph)):
    _require_event(graph, event_id)
    return {"events": _dump(graph.children_of(event_id))}


@router.get("/{event_id}/descendants")
def descendants(event_id: str, graph: TimelineGraph = Depends(get_graph)):
    _require_event(graph, event_id)
    return {"events": _dump(graph.descendants_of(event_id))}


@router.get("/{event_id}/parent-candidates")
def parent_candidates(event_id: str, graph: TimelineGraph = Depends(get_graph)):
    _require_event(graph, event_id)
    return {"events": _dump(graph.parent_candidates(event_id))}


@router.post("/{event_id}/lateral-movement", status_code=201)
def lateral_movement(
    event_id: str,
    body: LateralMovementRequest,
    graph: TimelineGraph = Depends(get_graph),
):
    new_id = graph.create_lateral_movement(event_id, body.destination_host)
    if new_id is None:
        event_mutations_total.labels(operation="lateral_movement", outcome="not_found").inc()
        raise HTTPException(status_code=404, detail=str(EventNotFoundError(event_id)))
    event_mutations_total.labels(operation="lateral_movement", outcome="applied").inc()
    return {
        "source": graph.get_event(event_id).model_dump(mode="json"),
        "event": graph.get_event(new_id).model_dump(mode="json"),
    }
