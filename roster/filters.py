from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import pandas as pd


# Selector name -> record column it matches exactly.
EQUALITY_FILTERS = {
    "state": "state",
    "board": "board",
    "gender": "gender",
    "category": "cat",
}
QUERY_COLUMNS = ["name", "city", "district", "state"]


@dataclass(frozen=True)
class FilterState:
    state: str = ""
    board: str = ""
    gender: str = ""
    category: str = ""
    query: str = ""

    def is_empty(self) -> bool:
        return not any([self.state, self.board, self.gender, self.category, self.query])


CLEARED = FilterState()


def _as_choice(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_filters(raw: Optional[Mapping[str, object]]) -> FilterState:
    """Selector values are trimmed; the query is kept exactly as typed.

    The query predicate is inactive only when the query is empty, so
    surrounding spaces take part in the substring match.
    """
    raw = raw or {}
    return FilterState(
        state=_as_choice(raw.get("state")),
        board=_as_choice(raw.get("board")),
        gender=_as_choice(raw.get("gender")),
        category=_as_choice(raw.get("category")),
        query="" if raw.get("query") is None else str(raw.get("query")),
    )


def query_haystack(df: pd.DataFrame) -> pd.Series:
    parts = [df[c].astype(str) if c in df.columns else pd.Series("", index=df.index) for c in QUERY_COLUMNS]
    hay = parts[0]
    for p in parts[1:]:
        hay = hay + " " + p
    return hay.str.lower()


def apply_filters(dataset: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """Rows of ``dataset`` matching every active predicate in ``filters``.

    Equality selectors compare exactly against the record field; the query is
    a case-insensitive substring match over name, city, district and state.
    The dataset itself is never modified.
    """
    if dataset.empty:
        return dataset.copy()

    mask = pd.Series(True, index=dataset.index)
    for attr, col in EQUALITY_FILTERS.items():
        wanted = getattr(filters, attr)
        if wanted:
            if col not in dataset.columns:
                return dataset.iloc[0:0].copy()
            mask &= dataset[col] == wanted

    if filters.query:
        q = filters.query.lower()
        mask &= query_haystack(dataset).str.contains(q, regex=False, na=False)

    return dataset[mask].copy()
