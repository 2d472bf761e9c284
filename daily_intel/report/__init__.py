"""Report rendering, generation and publishing."""

from .pipeline import ReportPipeline
from .renderer import render_fallback, wrap_alert

__all__ = ["ReportPipeline", "render_fallback", "wrap_alert"]
