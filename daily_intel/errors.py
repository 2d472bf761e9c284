"""Exception types raised across the Daily Intel pipeline."""

from __future__ import annotations


class DailyIntelError(Exception):
    """Base class for all pipeline errors."""


class SourceConfigError(DailyIntelError):
    """Source list could not be read or is malformed."""


class ProviderError(DailyIntelError):
    """Text-generation service returned an error or was unreachable."""


class IndexSyncError(DailyIntelError):
    """Downstream index service could not be notified."""


class ReportPublishError(DailyIntelError):
    """Report could not be written to the archive."""
