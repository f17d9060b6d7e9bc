from __future__ import annotations

import io

import pandas as pd

from roster.data import empty_dataset, prepare_context
from roster.filters import FilterState
from roster.metrics_overview import CHART_IDS, compute_overview, compute_summary, female_percentage
from roster.metrics_table import TABLE_HEADERS, compute_table, export_csv


def _mark_type(spec):
    mark = spec["mark"]
    return mark["type"] if isinstance(mark, dict) else mark


def test_summary(students):
    assert compute_summary(students) == {"total": 4, "female_pct": 50, "states": 2, "boards": 3}


def test_female_percentage_rounds_half_up():
    df = pd.DataFrame({"gender": ["F"] + ["M"] * 7})
    assert female_percentage(df) == 13
    df = pd.DataFrame({"gender": ["F", "f", "M"]})
    assert female_percentage(df) == 33


def test_summary_of_empty_view_is_zero():
    assert compute_summary(empty_dataset()) == {"total": 0, "female_pct": 0, "states": 0, "boards": 0}


def test_overview_payload(students, now):
    ctx = prepare_context(FilterState(state="Maharashtra"), students)
    payload = compute_overview(ctx["filters"], ctx, now=now)
    assert payload["filters"]["state"] == "Maharashtra"
    assert payload["kpis"]["total"] == 3
    assert set(payload["charts"]) == set(CHART_IDS)
    assert _mark_type(payload["charts"]["gender"]) == "arc"
    assert _mark_type(payload["charts"]["age"]) == "bar"


def test_overview_of_empty_view_still_renders(now):
    ctx = prepare_context({}, empty_dataset())
    payload = compute_overview(ctx["filters"], ctx, now=now)
    assert payload["kpis"]["total"] == 0
    assert set(payload["charts"]) == set(CHART_IDS)


def test_table_pagination():
    view = pd.DataFrame({"name": [f"S{i}" for i in range(23)], "gender": "F"})
    first = compute_table({"filtered": view}, page=1, page_size=10)
    assert first["columns"] == TABLE_HEADERS
    assert first["page_count"] == 3
    assert first["total"] == 23
    assert [r[0] for r in first["rows"]] == [f"S{i}" for i in range(10)]
    assert all(len(r) == 9 for r in first["rows"])

    last = compute_table({"filtered": view}, page=99, page_size=10)
    assert last["page"] == 3
    assert [r[0] for r in last["rows"]] == ["S20", "S21", "S22"]


def test_table_of_empty_view():
    table = compute_table({"filtered": empty_dataset()})
    assert table["rows"] == []
    assert table["page"] == 1 and table["page_count"] == 1


def test_export_csv_uses_display_headers(students):
    out = pd.read_csv(io.BytesIO(export_csv(students)), dtype=str, keep_default_na=False)
    assert list(out.columns) == TABLE_HEADERS
    assert out["Name"].tolist() == ["Asha", "Ravi", "Meera", "Kiran"]
