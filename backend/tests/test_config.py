import logging

from threat_timeline.core.config import Settings
from threat_timeline.core.logging_config import configure_logging


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("REPORT_GENERATE_PDF", "true")
    monkeypatch.setenv("LAYOUT_CLUSTER_GAP", "300")
    s = Settings()
    assert s.report_generate_pdf is True
    assert s.layout_cluster_gap == 300.0
    assert s.project_name == "threat-timeline"


def test_configure_logging_is_idempotent():
    logger = configure_logging("debug")
    configure_logging("info")
    assert logger.name == "threat_timeline"
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
