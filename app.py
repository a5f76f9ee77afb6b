import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Dict, Optional

from wastedash.data import clear_cache, load_waste_data, to_csv_bytes
from wastedash.errors import WasteDataError
from wastedash.metrics_debug import compute_debug
from wastedash.pipeline import CHART_NAMES, DashboardState, ResultSlot, run_pipeline
from wastedash.settings import TOP_N_DEFAULT, TOP_N_MAX, default_csv_source, normalize_settings

alt.data_transformers.disable_max_rows()

CHART_PLACEHOLDERS = {
    "category_weight": "Loading Category Weight...",
    "material_type_distribution": "Loading Material Type Distribution...",
    "yearly_trend": "Loading Yearly Trend...",
    "top_vendors": "Loading Top Vendors...",
    "category_trends_over_years": "Loading Category Trends...",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #3b0764;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #a78bfa;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #ffffff;}
        .card {border: 1px solid #3b0764;border-radius: 12px;padding: 16px;background: rgba(0,0,0,0.7);
               box-shadow: 0 4px 24px rgba(168,85,247,0.3); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #ffffff;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #1e1b4b;border: 1px solid #3b0764;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #e0e0e0;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_settings_summary(csv_source: str, top_n: int) -> str:
    chips = [f"Source: {csv_source.rsplit('/', 1)[-1]}", f"Top vendors: {top_n}"]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, summary_html: str, export_bytes: Optional[bytes] = None, export_name: str = "export.csv"):
    inject_base_styles()
    top = st.container()
    c1, c2 = top.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Reload"):
            clear_cache()
            st.rerun()
        if export_bytes:
            btn_cols[1].download_button("Export CSV", data=export_bytes, file_name=export_name, mime="text/csv")
    st.markdown(f"<div class='chip-row'>{summary_html}</div>", unsafe_allow_html=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Waste Data Dashboard", layout="wide")
inject_base_styles()
st.title("Waste Data Dashboard")
st.caption(
    "The charts below are interactive. Hover over data points for specific values and click on "
    "items in the legend to toggle their visibility in the chart."
)

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Dashboard", "Data Quality"], index=0)
    st.markdown("---")
    with st.expander("Data source", expanded=False):
        csv_source = st.text_input("CSV path or URL", default_csv_source())
        top_n = st.slider("Top N vendors", min_value=1, max_value=TOP_N_MAX, value=TOP_N_DEFAULT)

settings = normalize_settings({"csv_source": csv_source, "top_n": top_n})
summary_html = format_settings_summary(settings.csv_source, settings.top_n)


def render_slot(target, slot: ResultSlot):
    with target.container():
        if slot.payload is not None:
            st.vega_lite_chart(slot.payload["spec"], use_container_width=True)
        else:
            st.info(slot.error or CHART_PLACEHOLDERS[slot.name])


def render_dashboard_page():
    render_page_header("Waste Data Dashboard", "Home / Dashboard", summary_html)
    state = DashboardState()
    with st.spinner("Loading dashboard data..."):
        cols = st.columns(2)
        targets: Dict[str, object] = {}
        for i, name in enumerate(CHART_NAMES):
            column = cols[i % 2] if name != "category_trends_over_years" else st.container()
            targets[name] = column.empty()
            targets[name].info(CHART_PLACEHOLDERS[name])
        run_pipeline(settings, state, on_publish=lambda slot: render_slot(targets[slot.name], slot))

    if state.failure is not None:
        for target in targets.values():
            target.empty()
        st.error(state.error)
        st.stop()
    for name, slot in state.slots.items():
        if slot.payload is None:
            render_slot(targets[name], slot)


def render_data_quality_page():
    try:
        dataset = load_waste_data(settings)
    except WasteDataError as exc:
        render_page_header("Data Quality", "Home / Data Quality", summary_html)
        st.error(exc.message)
        st.stop()
    render_page_header(
        "Data Quality",
        "Home / Data Quality",
        summary_html,
        export_bytes=to_csv_bytes(dataset),
        export_name="normalized_wastedata.csv",
    )
    payload = compute_debug(settings, dataset)
    with card("Row counts"):
        st.write(payload["row_counts"])
    with card("Cleaning checks"):
        st.write(payload["cleaning_checks"])
        st.metric("Total weight", f"{payload['total_weight_lbs']:,.0f} lbs")
    with card("Year coverage"):
        st.dataframe(pd.DataFrame(payload["year_coverage"]), use_container_width=True, hide_index=True)
    if payload["noise_vendors"]:
        with card("Vendor labels excluded from ranking"):
            st.write(payload["noise_vendors"])
    st.caption("Rows with an unparsable year or weight are dropped before aggregation.")


if nav_choice == "Dashboard":
    render_dashboard_page()
else:
    render_data_quality_page()
