"""Reporter module for report assembly and rendering."""

from crater.reporter.assembler import ReportAssembler, build_report
from crater.reporter.markdown import MarkdownRenderer, render_json

__all__ = [
    # Assembly
    "ReportAssembler",
    "build_report",
    # Rendering
    "MarkdownRenderer",
    "render_json",
]
