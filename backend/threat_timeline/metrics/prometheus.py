from prometheus_client import Counter, Histogram

event_mutations_total = Counter(
    "event_mutations_total",
    "Graph mutations applied (or ignored) by operation",
    ["operation", "outcome"],
)

reports_generated_total = Counter(
    "reports_generated_total",
    "Incident reports rendered",
    ["format"],
)

layout_compute_seconds = Histogram(
    "layout_compute_seconds",
    "Time spent computing the diagram layout",
)

api_request_latency_seconds = Histogram(
    "api_request_latency_seconds",
    "API request latency in seconds",
    ["route", "method", "status"],
)
