"""Application state owned by a single dashboard controller.

The controller holds the loaded dataset, the active filters, the filtered
view derived from both, and the chart handles the UI draws into. Loads are
serialized: each load takes a generation token when it starts, and a load
that finishes after a newer one was started is discarded, so the most
recently requested file always wins. A load that fails gives its token back
and never supersedes an older one.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from roster import data
from roster.aggregates import distinct_values
from roster.filters import CLEARED, FilterState, apply_filters


logger = logging.getLogger(__name__)

# Selector name -> record column whose distinct values populate it.
OPTION_COLUMNS = {
    "state": "state",
    "board": "board",
    "gender": "gender",
    "category": "cat",
}


def _dispose(handle: Any) -> None:
    empty = getattr(handle, "empty", None)
    if callable(empty):
        empty()


class DashboardState:
    def __init__(self, dataset: Optional[pd.DataFrame] = None):
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: List[int] = []
        self.dataset: pd.DataFrame = dataset if dataset is not None else data.empty_dataset()
        self.filters: FilterState = CLEARED
        self.filtered: pd.DataFrame = self.dataset
        self.source: Optional[str] = None
        self.charts: Dict[str, Any] = {}
        self.apply(self.filters)

    # ---------------- Loading ----------------
    def begin_load(self) -> int:
        with self._lock:
            self._generation += 1
            self._pending.append(self._generation)
            return self._generation

    def abandon_load(self, token: int) -> None:
        with self._lock:
            if token in self._pending:
                self._pending.remove(token)

    def commit_load(self, token: int, dataset: pd.DataFrame, *, source: Optional[str] = None) -> bool:
        with self._lock:
            if token not in self._pending or token != max(self._pending):
                logger.debug("discarding stale load %d (pending %s)", token, self._pending)
                return False
            self._pending = [t for t in self._pending if t > token]
            self.dataset = dataset
            self.source = source
            self.filtered = apply_filters(self.dataset, self.filters)
            return True

    def load_upload(self, filename: str, content: bytes) -> bool:
        token = self.begin_load()
        try:
            dataset = data.load_upload(filename, content)
        except Exception:
            self.abandon_load(token)
            raise
        return self.commit_load(token, dataset, source=filename)

    def auto_load(self, path: Optional[Union[str, Path]] = None) -> bool:
        token = self.begin_load()
        dataset = data.auto_load(path)
        if dataset is None:
            self.abandon_load(token)
            return False
        return self.commit_load(token, dataset, source=str(data.resolve_default_source(path)))

    # ---------------- Filtering ----------------
    def apply(self, filters: Union[FilterState, Mapping[str, object], None] = None) -> pd.DataFrame:
        with self._lock:
            ctx = data.prepare_context(filters, self.dataset)
            self.filters = ctx["filters"]
            self.filtered = ctx["filtered"]
            return self.filtered

    def clear_filters(self) -> pd.DataFrame:
        return self.apply(CLEARED)

    def options(self) -> Dict[str, List[str]]:
        return {name: distinct_values(self.dataset, col) for name, col in OPTION_COLUMNS.items()}

    def context(self) -> Dict[str, object]:
        return {"filters": self.filters, "dataset": self.dataset, "filtered": self.filtered}

    # ---------------- Charts ----------------
    def set_chart(self, chart_id: str, handle: Any) -> None:
        previous = self.charts.pop(chart_id, None)
        if previous is not None and previous is not handle:
            _dispose(previous)
        self.charts[chart_id] = handle

    def dispose_charts(self) -> None:
        for handle in self.charts.values():
            _dispose(handle)
        self.charts.clear()
