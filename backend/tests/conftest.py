import pytest
from fastapi.testclient import TestClient

from threat_timeline.core.config import settings
from threat_timeline.core.state import get_graph, get_saved_positions
from threat_timeline.main import app
from threat_timeline.services.graph import TimelineGraph


@pytest.fixture()
def graph():
    return TimelineGraph()


@pytest.fixture()
def client(graph, monkeypatch, tmp_path):
    # fresh in-memory session per test
    positions = {}
    app.dependency_overrides[get_graph] = lambda: graph
    app.dependency_overrides[get_saved_positions] = lambda: positions
    monkeypatch.setattr(settings, "report_dir", str(tmp_path / "reports"))

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
