"""Plain-text dashboard for a ``ResearchReport``."""

from typing import List

from artfinder.models import ResearchReport


def truncate(text: str, width: int) -> str:
    """Cut *text* to *width* characters, marking the cut with ``...``."""
    text = " ".join((text or "").split())
    if len(text) <= width:
        return text
    return text[:width] + "..."


def render_dashboard(report: ResearchReport, top_n: int = 5, width: int = 100) -> str:
    """Render the key insights and source metrics for *report*.

    Sections:
        Top Pain Points -- first *top_n* stored items' content.
        Recommended Solutions -- first *top_n* stored analyses.
        Data Sources Distribution -- item count per source.
    """
    lines: List[str] = [
        f"Research topic: {report.request.topic}",
        f"Sources: {', '.join(s.value for s in report.request.sources)}",
        "",
        "== Top Pain Points ==",
    ]
    if report.items:
        for index, item in enumerate(report.items[:top_n], start=1):
            lines.append(f"{index}. [{item.source.value}] {truncate(item.content, width)}")
    else:
        lines.append("(no items)")

    lines += ["", "== Recommended Solutions =="]
    if report.analyses:
        for index, analysis in enumerate(report.analyses[:top_n], start=1):
            lines.append(f"{index}. {truncate(analysis.raw_analysis, width)}")
    else:
        lines.append("(no analyses)")

    lines += ["", "== Data Sources Distribution =="]
    total = len(report.items)
    for source, count in report.source_counts().items():
        share = (count / total * 100) if total else 0.0
        lines.append(f"{source:<8} {count:>4}  ({share:.0f}%)")

    if report.latest_analysis is not None:
        lines += ["", "== Latest Analysis ==", report.latest_analysis.raw_analysis]

    return "\n".join(lines)
