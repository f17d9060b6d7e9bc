from __future__ import annotations

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = str(Path(__file__).resolve().parents[1] / "app.py")


@pytest.fixture
def app(tmp_path, monkeypatch):
    path = tmp_path / "students.csv"
    path.write_text(
        "name,gender,cat,board,city,district,state\n"
        "A,F,GEN,CBSE,Pune,Pune,All\n"
        "B,M,OBC,ICSE,Goa,Goa,<b>x</b>\n",
        encoding="utf-8",
    )
    monkeypatch.setattr("roster.data.DEFAULT_FILE", str(path))
    at = AppTest.from_file(APP)
    at.run(timeout=30)
    assert not at.exception
    return at


def _chip_row(at):
    return next(m.value for m in at.markdown if "chip-row" in m.value)


def test_state_named_all_is_selectable(app):
    assert app.session_state["dashboard"].filters.state == ""
    app.selectbox(key="filter_state").select("All").run(timeout=30)
    controller = app.session_state["dashboard"]
    assert controller.filters.state == "All"
    assert controller.filtered["name"].tolist() == ["A"]


def test_unset_selector_is_distinct_from_data_values(app):
    box = app.selectbox(key="filter_state")
    assert box.value is None
    assert box.options[0] == "(all)"
    assert "All" in box.options[1:]


def test_filter_chips_escape_values(app):
    app.selectbox(key="filter_state").select("<b>x</b>").run(timeout=30)
    app.text_input(key="filter_query").input("<i>q</i>").run(timeout=30)
    chips = _chip_row(app)
    assert "State: &lt;b&gt;x&lt;/b&gt;" in chips
    assert "Search: &lt;i&gt;q&lt;/i&gt;" in chips
    assert "<b>" not in chips
