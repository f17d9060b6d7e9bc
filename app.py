import html
import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from roster.data import DEFAULT_FILE, UPLOAD_TYPES
from roster.metrics_overview import CHART_IDS, compute_overview
from roster.metrics_table import DEFAULT_PAGE_SIZE, compute_table, export_csv
from roster.state import DashboardState

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

ALL_LABEL = "(all)"
FILTER_KEYS = {
    "state": "filter_state",
    "board": "filter_board",
    "gender": "filter_gender",
    "category": "filter_category",
    "query": "filter_query",
}
CHART_LAYOUT = [["gender", "category"], ["states", "boards"], ["age"]]


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def format_filter_summary(filters: Dict[str, str]) -> str:
    chips = []
    for label, key in [("State", "state"), ("Board", "board"), ("Gender", "gender"), ("Category", "category")]:
        chips.append(f"{label}: {filters.get(key) or ALL_LABEL}")
    if filters.get("query"):
        chips.append(f"Search: {filters['query']}")
    return "".join([f"<span class='chip'>{html.escape(txt)}</span>" for txt in chips])


def get_controller() -> DashboardState:
    if "dashboard" not in st.session_state:
        controller = DashboardState()
        controller.auto_load()
        st.session_state["dashboard"] = controller
    return st.session_state["dashboard"]


def clear_filter_inputs():
    for name, key in FILTER_KEYS.items():
        st.session_state[key] = "" if name == "query" else None
    st.session_state["table_page"] = 1


def selectbox_choice(label: str, options: List[str], key: str) -> str:
    # None is the unset choice, so a data value can never collide with it.
    choices: List[Optional[str]] = [None] + options
    if st.session_state.get(key) not in choices:
        st.session_state[key] = None
    value = st.selectbox(label, options=choices, key=key, format_func=lambda v: ALL_LABEL if v is None else v)
    return value or ""


def render_kpis(kpis: Dict[str, int]):
    cols = st.columns(4)
    cols[0].metric("Students", f"{kpis['total']:,}")
    cols[1].metric("Female", f"{kpis['female_pct']}%", help="Share of records with gender exactly 'F'.")
    cols[2].metric("States", f"{kpis['states']:,}")
    cols[3].metric("Boards", f"{kpis['boards']:,}")


def render_charts(controller: DashboardState, charts: Dict[str, dict]):
    controller.dispose_charts()
    for row in CHART_LAYOUT:
        cols = st.columns(len(row))
        for col, chart_id in zip(cols, row):
            with col:
                controller.set_chart(chart_id, charts[chart_id])
                st.vega_lite_chart(charts[chart_id], use_container_width=True)


def render_table(controller: DashboardState):
    ctx = controller.context()
    total = len(ctx["filtered"])
    page_count = max(1, -(-total // DEFAULT_PAGE_SIZE))
    c1, c2 = st.columns([2, 8])
    with c1:
        if not 1 <= int(st.session_state.get("table_page", 1)) <= page_count:
            st.session_state["table_page"] = 1
        page = st.number_input("Page", min_value=1, max_value=page_count, step=1, key="table_page")
    table = compute_table(ctx, page=int(page), page_size=DEFAULT_PAGE_SIZE)
    with c2:
        st.caption(f"Page {table['page']} of {table['page_count']} · {table['total']:,} students")
    st.dataframe(pd.DataFrame(table["rows"], columns=table["columns"]), use_container_width=True, hide_index=True)
    st.download_button(
        "Export CSV",
        data=export_csv(ctx["filtered"]),
        file_name="students_filtered.csv",
        mime="text/csv",
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Student Records Dashboard", layout="wide")
inject_base_styles()
st.title("Student Records Dashboard")

controller = get_controller()

with st.sidebar:
    st.markdown("### Data")
    upload = st.file_uploader("Load a spreadsheet or CSV", type=UPLOAD_TYPES)
    if upload is not None and st.session_state.get("_loaded_upload") != (upload.name, upload.size):
        try:
            controller.load_upload(upload.name, upload.getvalue())
            st.session_state["_loaded_upload"] = (upload.name, upload.size)
            clear_filter_inputs()
        except Exception as exc:
            logging.getLogger(__name__).exception("upload failed")
            st.error(f"Could not read {upload.name}: {exc}")
    if controller.source:
        st.caption(f"Loaded: {controller.source} ({len(controller.dataset):,} students)")
    else:
        st.caption(f"{DEFAULT_FILE} not found. Use the file picker.")

    st.markdown("---")
    st.markdown("### Filters")
    options = controller.options()
    raw_filters = {
        "state": selectbox_choice("State", options["state"], FILTER_KEYS["state"]),
        "board": selectbox_choice("Board", options["board"], FILTER_KEYS["board"]),
        "gender": selectbox_choice("Gender", options["gender"], FILTER_KEYS["gender"]),
        "category": selectbox_choice("Category", options["category"], FILTER_KEYS["category"]),
        "query": st.text_input("Search name, city, district or state", key=FILTER_KEYS["query"]),
    }
    st.button("Clear filters", on_click=clear_filter_inputs)

controller.apply(raw_filters)
overview = compute_overview(controller.filters, controller.context())

st.markdown(f"<div class='chip-row'>{format_filter_summary(overview['filters'])}</div>", unsafe_allow_html=True)
render_kpis(overview["kpis"])

with card("Charts"):
    render_charts(controller, {cid: overview["charts"][cid] for cid in CHART_IDS})

with card("Students"):
    render_table(controller)
