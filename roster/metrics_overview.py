from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd

from roster.aggregates import age_histogram, distinct_values, top_n_counts
from roster.charts import bar_chart, pie_chart, to_vega_spec
from roster.data import round_half_up
from roster.filters import FilterState

# Chart id -> (record column, top-N, title). Age is handled separately.
COUNT_CHARTS = {
    "gender": ("gender", 5, "Gender distribution"),
    "category": ("cat", 10, "Category distribution"),
    "states": ("state", 10, "Top states"),
    "boards": ("board", 10, "Top boards"),
}
CHART_IDS = list(COUNT_CHARTS) + ["age"]


def female_percentage(view: pd.DataFrame) -> int:
    total = len(view)
    if not total or "gender" not in view.columns:
        return 0
    females = int((view["gender"] == "F").sum())
    return int(round_half_up(females / total * 100) or 0)


def compute_summary(view: pd.DataFrame) -> Dict[str, int]:
    return {
        "total": int(len(view)),
        "female_pct": female_percentage(view),
        "states": len(distinct_values(view, "state")),
        "boards": len(distinct_values(view, "board")),
    }


def compute_charts(view: pd.DataFrame, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    charts: Dict[str, Any] = {}
    for chart_id, (col, n, title) in COUNT_CHARTS.items():
        counts = top_n_counts(view, col, n)
        if chart_id == "gender":
            chart = pie_chart(counts, label=col, title=title)
        else:
            chart = bar_chart(counts, label=col, title=title)
        charts[chart_id] = to_vega_spec(chart)
    charts["age"] = to_vega_spec(bar_chart(age_histogram(view, now=now), label="age", title="Age distribution"))
    return charts


def compute_overview(filters: FilterState, ctx: Dict[str, Any], *, now: Optional[datetime] = None) -> Dict[str, Any]:
    view: pd.DataFrame = ctx.get("filtered", pd.DataFrame())
    return {
        "filters": asdict(filters),
        "kpis": compute_summary(view),
        "charts": compute_charts(view, now=now),
    }
