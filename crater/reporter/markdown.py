"""Markdown and JSON rendering of reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from crater.models import ComparisonReport, CurrentReport, Report, ReportKind, format_date
from crater.utils.logging import get_logger

logger = get_logger("reporter.markdown")

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

TEMPLATE_BY_KIND = {
    ReportKind.CURRENT: "current.md.j2",
    ReportKind.COMPARISON: "comparison.md.j2",
    ReportKind.WEEKLY: "weekly.md.j2",
}


class MarkdownRenderer:
    """Renders report values to Markdown with Jinja2 templates."""

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        inspector_url: Optional[str] = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            templates_dir: Directory containing the report templates
            inspector_url: Inspector link template for regression entries
        """
        self.templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)
        self.inspector_url = inspector_url
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, report: Report) -> str:
        """Render any report variant."""
        template = self.env.get_template(TEMPLATE_BY_KIND[report.kind])
        context = {"report": report, "inspector_url": self.inspector_url}
        if not isinstance(report, ComparisonReport):
            context["date"] = format_date(report.date)

        output = template.render(**context)
        logger.debug("report_rendered", kind=report.kind.value, size=len(output))
        return output


def render_json(report: Report, inspector_url: Optional[str] = None) -> str:
    """Serialize a report as indented JSON."""
    if isinstance(report, CurrentReport):
        data = report.to_dict()
    else:
        data = report.to_dict(inspector_url)
    return json.dumps(data, indent=2, sort_keys=False)
