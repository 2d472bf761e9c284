"""
Persistent deduplication state.

The StateStore is the only component that touches the state file. State
transitions themselves are pure functions that return a new State; the
caller persists the result explicitly.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Iterable

from ..utils.logging import log_event
from .types import IntelItem, State

logger = logging.getLogger(__name__)


def cap_seen_ids(
    seen_ids: list[str],
    cap: int,
    keep: int,
    pinned: Iterable[str] = (),
) -> list[str]:
    """Bound the seen set.

    Once ``len(seen_ids)`` exceeds ``cap`` only the most recent ``keep`` ids
    survive, plus any ``pinned`` ids (items still buffered) that the cut
    would have evicted. The result never exceeds ``cap`` entries.
    """
    if len(seen_ids) <= cap:
        return list(seen_ids)
    tail = seen_ids[-keep:] if keep > 0 else []
    tail_set = set(tail)
    pinned_set = set(pinned) - tail_set
    rescued = [item_id for item_id in seen_ids[: len(seen_ids) - len(tail)] if item_id in pinned_set]
    return (rescued + tail)[-cap:]


def merge_new_items(state: State, items: list[IntelItem], now: datetime) -> State:
    """Record a poll cycle: append unseen items and stamp the poll time."""
    seen = set(state.seen_ids)
    fresh: list[IntelItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        fresh.append(item)
    return replace(
        state,
        seen_ids=state.seen_ids + [item.id for item in fresh],
        item_buffer=state.item_buffer + fresh,
        last_poll_time=now.isoformat(),
    )


def mark_reported(state: State, items: list[IntelItem], report_date: str) -> State:
    """Remove reported items from the buffer and record the report date.

    Items buffered after the report snapshot was taken stay in the buffer.
    """
    reported = {item.id for item in items}
    return replace(
        state,
        item_buffer=[item for item in state.item_buffer if item.id not in reported],
        last_report_date=report_date,
    )


class StateStore:
    """JSON-file backed state persistence.

    Attributes:
        path: State file location
        seen_cap: Seen-set size that triggers eviction
        seen_keep: Number of most recent ids retained after eviction
    """

    def __init__(self, path: str | Path, seen_cap: int = 5000, seen_keep: int = 3000):
        if seen_keep > seen_cap:
            raise ValueError("seen_keep must not exceed seen_cap")
        self.path = Path(path)
        self.seen_cap = seen_cap
        self.seen_keep = seen_keep

    def load(self) -> State:
        """Return the persisted state, or a fresh one if missing or unreadable."""
        if not self.path.exists():
            return State()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("state root must be an object")
            return State.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log_event(
                logger,
                "State unreadable, starting fresh",
                level=logging.WARNING,
                event="state_load_failed",
                state_path=str(self.path),
                error=str(exc),
            )
            return State()

    def save(self, state: State) -> State:
        """Cap the seen set and atomically write the state file.

        Returns:
            The state as written (with the capped seen set)
        """
        capped = replace(
            state,
            seen_ids=cap_seen_ids(
                state.seen_ids,
                self.seen_cap,
                self.seen_keep,
                pinned=[item.id for item in state.item_buffer],
            ),
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(capped.to_dict(), ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        if len(capped.seen_ids) != len(state.seen_ids):
            log_event(
                logger,
                "Seen set trimmed",
                event="seen_trimmed",
                before=len(state.seen_ids),
                after=len(capped.seen_ids),
            )
        return capped
