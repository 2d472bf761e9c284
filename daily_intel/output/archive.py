"""
Write-once archive of generated reports.

Reports are Markdown files named ``<prefix>-<label>.md``. An existing report
is never overwritten: a second write for the same label lands in
``<prefix>-<label>-r2.md`` and so on.
"""

from __future__ import annotations

from pathlib import Path
import re


REVISION_RE = re.compile(r"^(?P<label>.+?)(?:-r(?P<revision>\d+))?$")


class ReportArchive:
    """Filesystem archive for report text.

    Attributes:
        reports_dir: Directory holding archived reports
        prefix: Filename prefix shared by all reports
    """

    def __init__(self, reports_dir: str | Path, prefix: str = "intel-brief"):
        self.reports_dir = Path(reports_dir)
        self.prefix = prefix

    def document_name(self, label: str) -> str:
        return f"{self.prefix}-{label}.md"

    def write(self, label: str, text: str) -> Path:
        """Archive a report and return the path actually written.

        A write that fails halfway removes the partial file.

        Raises:
            OSError: If the directory or file cannot be written
        """
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        revision = 1
        while True:
            suffix = "" if revision == 1 else f"-r{revision}"
            path = self.reports_dir / self.document_name(f"{label}{suffix}")
            try:
                handle = path.open("x", encoding="utf-8")
            except FileExistsError:
                revision += 1
                continue
            try:
                with handle:
                    handle.write(text)
            except BaseException:
                path.unlink(missing_ok=True)
                raise
            return path

    def _sort_key(self, path: Path) -> tuple[int, str, int]:
        stem = path.name[len(self.prefix) + 1 : -len(".md")]
        match = REVISION_RE.match(stem)
        revision = int(match.group("revision") or 1) if match else 1
        label = match.group("label") if match else stem
        return path.stat().st_mtime_ns, label, revision

    def list_reports(self) -> list[str]:
        """Return archived report filenames, most recently written first.

        Reports written within the same clock tick are ordered by label,
        then by numeric revision.
        """
        if not self.reports_dir.exists():
            return []
        paths = [
            path
            for path in self.reports_dir.glob(f"{self.prefix}-*.md")
            if path.is_file()
        ]
        return [path.name for path in sorted(paths, key=self._sort_key, reverse=True)]

    def count(self) -> int:
        return len(self.list_reports())

    def latest(self) -> str | None:
        """Return the text of the most recent report, or None if there is none."""
        for name in self.list_reports():
            try:
                return (self.reports_dir / name).read_text(encoding="utf-8")
            except OSError:
                continue
        return None
