from threat_timeline.models.views import NodePosition
from threat_timeline.services.graph import TimelineGraph

# one analyst session per process
graph = TimelineGraph()
saved_positions: dict[str, NodePosition] = {}


def get_graph() -> TimelineGraph:
    return graph


def get_saved_positions() -> dict[str, NodePosition]:
    return saved_positions
