import logging
import textwrap
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from threat_timeline.core.config import settings
from threat_timeline.core.exceptions import DataError
from threat_timeline.core.timestamps import coerce_timestamp, format_timestamp, now_utc
from threat_timeline.models.timeline import TimelineEvent
from threat_timeline.models.views import ArtifactGroup
from threat_timeline.services.aggregation import aggregate_artifacts

logger = logging.getLogger(__name__)

REPORT_BASENAME = "incident-response-report"


def _ts(value: str) -> str:
    return format_timestamp(coerce_timestamp(value))


def sort_chronologically(events: Sequence[TimelineEvent]) -> list[TimelineEvent]:
    # equal timestamps keep their input order
    keyed = [(coerce_timestamp(ev.timestamp), i, ev) for i, ev in enumerate(events)]
    keyed.sort(key=lambda t: (t[0], t[1]))
    return [ev for _, _, ev in keyed]


def _timeline_section(events: list[TimelineEvent]) -> list[str]:
    md = ["## Timeline of Events", ""]
    for ev in events:
        md.append(f"### {_ts(ev.timestamp)} - {ev.title or 'Untitled Event'}")
        md.append("")
        if ev.description:
            md.append(ev.description)
            md.append("")

        if ev.tactic or ev.technique:
            md.append("**MITRE ATT&CK:**")
            if ev.tactic:
                md.append(f"- Tactic: {ev.tactic}")
            if ev.technique:
                md.append(f"- Technique: {ev.technique}")
            md.append("")

        if ev.host or ev.user or ev.process:
            md.append("**Context:**")
            if ev.host:
                md.append(f"- Host: {ev.host}")
            if ev.user:
                md.append(f"- User: {ev.user}")
            if ev.process:
                md.append(f"- Process: {ev.process}")
            md.append("")

        if ev.search_query:
            md.extend(["**Search Query:**", "```", ev.search_query, "```", ""])
        if ev.raw_log:
            md.extend(["**Raw Log:**", "```", ev.raw_log, "```", ""])

        md.append("---")
        md.append("")
    return md


def _artifacts_section(groups: list[ArtifactGroup]) -> list[str]:
    md = ["## Artifacts & Indicators of Compromise", ""]
    if not groups:
        md.append("_No artifacts recorded._")
        md.append("")
        return md

    for group in groups:
        label = group.type.value
        md.append(f"### {label[:1].upper() + label[1:]} Artifacts")
        md.append("")
        for item in group.items:
            md.append(f"#### {item.value}")
            md.append(f"- Observed as: {', '.join(item.names)}")
            if item.linked_value:
                md.append(f"- Related: `{item.linked_value}`")
            n = len(item.events)
            md.append(f"- Observed in {n} event{'' if n == 1 else 's'}:")
            for ref in item.events:
                md.append(f"  - {_ts(ref.timestamp)} - {ref.title or 'Untitled Event'}")
            md.append("")
    return md


def generate_report(
    events: Sequence[TimelineEvent],
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the incident as a markdown document.

    Raises DataError for an empty event list, since the summary needs a first
    and last timestamp.
    """
    if not events:
        raise DataError("Cannot generate a report without events")

    ordered = sort_chronologically(events)
    groups = aggregate_artifacts(ordered)

    md = []
    md.append("# Incident Response Report")
    md.append("")
    md.append(f"Generated on: {format_timestamp(generated_at or now_utc())}")
    md.append("")

    md.append("## Executive Summary")
    md.append("")
    md.append(
        f"This report documents a security incident containing {len(ordered)} events "
        f"spanning from {_ts(ordered[0].timestamp)} to {_ts(ordered[-1].timestamp)}."
    )
    md.append("")

    md.extend(_timeline_section(ordered))
    md.extend(_artifacts_section(groups))

    return "\n".join(md).strip() + "\n"


def write_report_files(markdown: str, stamp: Optional[datetime] = None) -> dict[str, str]:
    report_dir = Path(settings.report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)

    suffix = (stamp or now_utc()).strftime("%Y%m%dT%H%M%SZ")
    md_path = report_dir / f"{REPORT_BASENAME}-{suffix}.md"
    md_path.write_text(markdown, encoding="utf-8")

    out = {"markdown_path": str(md_path)}

    if settings.report_generate_pdf:
        pdf_path = report_dir / f"{REPORT_BASENAME}-{suffix}.pdf"
        _markdown_to_simple_pdf(markdown, pdf_path)
        out["pdf_path"] = str(pdf_path)

    logger.info("report written to %s", ", ".join(out.values()))
    return out


def _markdown_to_simple_pdf(markdown: str, pdf_path: Path) -> None:
    # plain wrapped text, no markdown rendering
    c = canvas.Canvas(str(pdf_path), pagesize=LETTER)
    _, height = LETTER

    left = 54
    top = height - 54
    line_height = 12
    y = top

    lines: list[str] = []
    for raw in markdown.replace("\t", "  ").splitlines():
        wrapped = textwrap.wrap(raw, width=95) if raw.strip() else []
        lines.extend(wrapped or [""])

    c.setFont("Helvetica", 10)
    for line in lines:
        if y <= 54:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = top
        c.drawString(left, y, line[:2000])
        y -= line_height

    c.save()
