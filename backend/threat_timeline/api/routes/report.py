from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from threat_timeline.core.exceptions import DataError
from threat_timeline.core.state import get_graph
from threat_timeline.metrics.prometheus import reports_generated_total
from threat_timeline.services.graph import TimelineGraph
from threat_timeline.services.reporting import generate_report, write_report_files

router = APIRouter(prefix="/report", tags=["report"])


def _render(graph: TimelineGraph) -> str:
    try:
        return generate_report(graph.events())
    except DataError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("", response_class=PlainTextResponse)
def get_report(graph: TimelineGraph = Depends(get_graph)):
    markdown = _render(graph)
    reports_generated_total.labels(format="markdown").inc()
    return PlainTextResponse(markdown, media_type="text/markdown; charset=utf-8")


@router.post("/export")
def export_report(graph: TimelineGraph = Depends(get_graph)):
    markdown = _render(graph)
    paths = write_report_files(markdown)
    for fmt in ("markdown", "pdf"):
        if f"{fmt}_path" in paths:
            reports_generated_total.labels(format=fmt).inc()
    return {
        "report": {
            "markdown_path": paths.get("markdown_path"),
            "pdf_path": paths.get("pdf_path"),
        },
        "markdown_preview": markdown,
    }
