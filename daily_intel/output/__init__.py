"""Report archival and downstream index notification."""

from .archive import ReportArchive
from .index_sync import IndexNotifier, drop_report

__all__ = ["IndexNotifier", "ReportArchive", "drop_report"]
