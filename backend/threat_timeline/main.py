import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from threat_timeline import __version__
from threat_timeline.api.routes.artifacts import router as artifacts_router
from threat_timeline.api.routes.events import router as events_router
from threat_timeline.api.routes.layout import router as layout_router
from threat_timeline.api.routes.metrics import router as metrics_router
from threat_timeline.api.routes.report import router as report_router
from threat_timeline.core.config import settings
from threat_timeline.core.logging_config import configure_logging
from threat_timeline.core.state import get_graph
from threat_timeline.metrics.prometheus import api_request_latency_seconds
from threat_timeline.services.demo import demo_events

app = FastAPI(
    title="Threat Timeline API",
    version=__version__,
    description="Incident timeline graph with artifact index, report and diagram layout",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    configure_logging(settings.log_level)
    if settings.load_demo_on_startup:
        get_graph().load_events(demo_events())


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    response: Response | None = None
    try:
        response = await call_next(request)
        return response
    finally:
        dt = time.perf_counter() - start
        status = str(getattr(response, "status_code", "unknown"))
        # path template, so event ids do not each open a new series
        route = getattr(request.scope.get("route"), "path", request.url.path)
        api_request_latency_seconds.labels(
            route=route, method=request.method, status=status
        ).observe(dt)


@app.get("/health")
def health():
    return {"status": "ok", "events": len(get_graph())}


app.include_router(events_router)
app.include_router(artifacts_router)
app.include_router(report_router)
app.include_router(layout_router)
app.include_router(metrics_router)
