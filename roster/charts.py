from __future__ import annotations

from typing import Any, Dict, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _counts_frame(counts: Sequence[Tuple[str, int]], label: str) -> pd.DataFrame:
    return pd.DataFrame(list(counts), columns=[label, "count"])


def pie_chart(counts: Sequence[Tuple[str, int]], *, label: str, title: str) -> alt.Chart:
    df = _counts_frame(counts, label)
    df[label] = df[label].replace("", "Unknown")
    return (
        alt.Chart(df, title=title)
        .mark_arc()
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color(f"{label}:N", title=label.title(), sort=None),
            tooltip=[alt.Tooltip(f"{label}:N", title=label.title()), alt.Tooltip("count:Q", title="Students", format=",")],
        )
    )


def bar_chart(counts: Sequence[Tuple[str, int]], *, label: str, title: str) -> alt.Chart:
    df = _counts_frame(counts, label)
    order = df[label].tolist()
    return (
        alt.Chart(df, title=title)
        .mark_bar()
        .encode(
            x=alt.X(f"{label}:N", title=None, sort=order, axis=alt.Axis(labelAngle=-30)),
            y=alt.Y("count:Q", title="Students", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip(f"{label}:N", title=label.title()), alt.Tooltip("count:Q", title="Students", format=",")],
        )
    )
