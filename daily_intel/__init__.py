"""
Daily Intel - feed monitor and daily intelligence report generator.

This package polls syndication feeds and a regulatory publication page,
deduplicates items against persisted history, and once a day turns the
buffered items into a report through a text-generation service. Regulatory
alerts are escalated immediately in an out-of-band report.

Main entry point is the CLI via the `daily-intel run` command.

Example:
    $ daily-intel run -c config.yaml
"""

__all__ = ["__version__", "IntelRunner", "Scheduler", "load_config"]
__version__ = "1.0.0"

from .config import load_config
from .runner import IntelRunner
from .scheduler import Scheduler
