from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from roster.age import estimate_ages
from roster.data import column_values


AGE_BUCKET_LABELS = ["≤10", "11–15", "16–20", "21–25", "26–30", "31–35", "36–40", "41–45", "46–50", "51–60", ">60"]
AGE_BUCKET_EDGES = [-np.inf, 10, 15, 20, 25, 30, 35, 40, 45, 50, 60, np.inf]


def distinct_values(df: pd.DataFrame, col: str) -> List[str]:
    """Sorted unique non-empty values of a column, for selector choices."""
    values = column_values(df, col).unique().tolist()
    return sorted(values, key=lambda s: (s.casefold(), s))


def count_values(df: pd.DataFrame, col: str) -> pd.Series:
    """Occurrences per non-empty value, most frequent first.

    Ties keep the order in which the values were first encountered.
    """
    values = column_values(df, col)
    if values.empty:
        return pd.Series(dtype="int64")
    counts = values.groupby(values, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable")


def top_n_counts(df: pd.DataFrame, col: str, n: int = 10) -> List[Tuple[str, int]]:
    counts = count_values(df, col).head(max(0, int(n)))
    return [(str(k), int(v)) for k, v in counts.items()]


def age_buckets(ages: pd.Series) -> pd.Series:
    known = pd.to_numeric(ages, errors="coerce").dropna()
    binned = pd.cut(known.astype(float), bins=AGE_BUCKET_EDGES, labels=AGE_BUCKET_LABELS, right=True)
    return binned.value_counts(sort=False).reindex(AGE_BUCKET_LABELS, fill_value=0).astype(int)


def age_histogram(df: pd.DataFrame, now: Optional[datetime] = None) -> List[Tuple[str, int]]:
    """Counts per fixed age bucket; records with an unknown age are skipped."""
    if df.empty:
        return [(label, 0) for label in AGE_BUCKET_LABELS]
    counts = age_buckets(estimate_ages(df, now=now))
    return [(label, int(counts[label])) for label in AGE_BUCKET_LABELS]
