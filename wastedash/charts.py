"""Chart assembly: aggregated series -> chart-ready payloads.

A payload is a plain dict (labels, datasets with styles, display config)
plus the equivalent Altair chart as a Vega-Lite spec dict, so it can be
returned from the API as-is or rendered directly by the Streamlit app.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

import altair as alt
import pandas as pd

from wastedash.aggregations import AggregatedSeries, MultiSeries

alt.data_transformers.disable_max_rows()

LAVENDER = "rgb(230, 230, 250)"
WHITE = "#FFFFFF"


@dataclass(frozen=True)
class ColorPair:
    fill: str
    border: str


def _neon(r: int, g: int, b: int) -> ColorPair:
    return ColorPair(fill=f"rgba({r}, {g}, {b}, 0.7)", border=f"rgb({r}, {g}, {b})")


PINK = _neon(255, 0, 255)
GREEN = _neon(57, 255, 20)
BLUE = _neon(0, 200, 255)
YELLOW = _neon(255, 240, 31)
ORANGE = _neon(255, 172, 28)
PURPLE = _neon(191, 0, 255)
LIGHT_BLUE = _neon(0, 255, 255)

NEON_PALETTE: Tuple[ColorPair, ...] = (PINK, GREEN, BLUE, YELLOW, ORANGE, PURPLE, LIGHT_BLUE)


def color_for(position: int, palette: Sequence[ColorPair] = NEON_PALETTE) -> ColorPair:
    """Color for the item at ``position``, wrapping around the palette."""
    return palette[position % len(palette)]


@dataclass(frozen=True)
class ChartDisplay:
    orientation: Optional[str]
    interaction_mode: str
    intersect: bool = False
    # valid both as a Python format spec and a d3-format string
    tooltip_format: str = ",.0f"
    tooltip_suffix: str = " lbs"


CHART_DISPLAY: Dict[str, ChartDisplay] = {
    "bar": ChartDisplay(orientation="x", interaction_mode="index"),
    "bar_horizontal": ChartDisplay(orientation="y", interaction_mode="y"),
    "line": ChartDisplay(orientation="x", interaction_mode="index"),
    "pie": ChartDisplay(orientation=None, interaction_mode="point", intersect=True),
}


def round_half_up(value: float, ndigits: int = 0) -> float:
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_weight(value: float, display: ChartDisplay = CHART_DISPLAY["bar"]) -> str:
    """Tooltip text for a weight, e.g. ``1,235 lbs``."""
    return f"{round_half_up(value):{display.tooltip_format}}{display.tooltip_suffix}"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _tooltip_expr(display: ChartDisplay) -> str:
    return f"format(datum.value, '{display.tooltip_format}') + '{display.tooltip_suffix}'"


def _bar_style(color: ColorPair) -> Dict[str, Any]:
    return {
        "fill": color.fill,
        "border": color.border,
        "hover_fill": color.border,
        "hover_border": LAVENDER,
        "border_width": 2,
    }


def _line_style(color: ColorPair, *, border_width: int, point_radius: int, point_hover_radius: int) -> Dict[str, Any]:
    return {
        "fill": color.fill,
        "border": color.border,
        "point_border": color.border,
        "point_fill": "#fff",
        "point_hover_fill": color.border,
        "point_hover_border": "#fff",
        "tension": 0.2,
        "border_width": border_width,
        "point_radius": point_radius,
        "point_hover_radius": point_hover_radius,
    }


def _payload(
    name: str,
    title: str,
    kind: str,
    labels: Sequence[str],
    datasets: List[Dict[str, Any]],
    chart: alt.Chart,
) -> Dict[str, Any]:
    return {
        "name": name,
        "title": title,
        "kind": "bar" if kind == "bar_horizontal" else kind,
        "labels": list(labels),
        "datasets": datasets,
        "display": asdict(CHART_DISPLAY[kind]),
        "spec": to_vega_spec(chart),
    }


def bar_chart(
    name: str,
    title: str,
    series: AggregatedSeries,
    color: ColorPair,
    *,
    horizontal: bool = False,
    dataset_label: str = "Total Weight (lbs)",
) -> Dict[str, Any]:
    kind = "bar_horizontal" if horizontal else "bar"
    display = CHART_DISPLAY[kind]
    df = pd.DataFrame({"label": list(series.labels), "value": list(series.values)})
    label_enc = alt.X("label:N", sort=None, title=None) if not horizontal else alt.Y("label:N", sort=None, title=None)
    value_enc = alt.Y("value:Q", title=dataset_label) if not horizontal else alt.X("value:Q", title=dataset_label)
    hover = alt.selection_point(fields=["label"], on="mouseover", empty="all")
    chart = (
        alt.Chart(df, title=title)
        .transform_calculate(tooltip_value=_tooltip_expr(display))
        .mark_bar(color=color.fill, stroke=color.border, strokeWidth=2)
        .encode(
            x=label_enc if not horizontal else value_enc,
            y=value_enc if not horizontal else label_enc,
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[alt.Tooltip("label:N", title="Label"), alt.Tooltip("tooltip_value:N", title=dataset_label)],
        )
        .add_params(hover)
    )
    datasets = [{"label": dataset_label, "data": list(series.values), "style": _bar_style(color)}]
    return _payload(name, title, kind, series.labels, datasets, chart)


def pie_chart(
    name: str,
    title: str,
    series: AggregatedSeries,
    *,
    dataset_label: str = "Weight (lbs)",
    palette: Sequence[ColorPair] = NEON_PALETTE,
) -> Dict[str, Any]:
    display = CHART_DISPLAY["pie"]
    colors = [color_for(i, palette) for i in range(len(series.labels))]
    df = pd.DataFrame({"label": list(series.labels), "value": list(series.values)})
    hover = alt.selection_point(fields=["label"], on="mouseover", empty="all")
    chart = (
        alt.Chart(df, title=title)
        .transform_calculate(tooltip_value=_tooltip_expr(display))
        .mark_arc(stroke=WHITE)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "label:N",
                sort=None,
                scale=alt.Scale(domain=list(series.labels), range=[c.fill for c in colors]),
                title=None,
            ),
            strokeWidth=alt.condition(hover, alt.value(3), alt.value(2)),
            tooltip=[alt.Tooltip("label:N", title="Label"), alt.Tooltip("tooltip_value:N", title=dataset_label)],
        )
        .add_params(hover)
    )
    style = {
        "fill": [c.fill for c in colors],
        "border": [c.border for c in colors],
        "border_width": 2,
        "hover_offset": 15,
        "hover_border_width": 3,
        "hover_border": WHITE,
    }
    datasets = [{"label": dataset_label, "data": list(series.values), "style": style}]
    return _payload(name, title, "pie", series.labels, datasets, chart)


def line_chart(
    name: str,
    title: str,
    series: AggregatedSeries,
    color: ColorPair,
    *,
    dataset_label: str = "Total Weight (lbs)",
) -> Dict[str, Any]:
    display = CHART_DISPLAY["line"]
    df = pd.DataFrame({"label": list(series.labels), "value": list(series.values)})
    chart = (
        alt.Chart(df, title=title)
        .transform_calculate(tooltip_value=_tooltip_expr(display))
        .mark_line(color=color.border, strokeWidth=3, interpolate="monotone", point={"filled": True, "size": 80})
        .encode(
            x=alt.X("label:O", sort=None, title=None),
            y=alt.Y("value:Q", title=dataset_label),
            tooltip=[alt.Tooltip("label:O", title="Year"), alt.Tooltip("tooltip_value:N", title=dataset_label)],
        )
    )
    style = _line_style(color, border_width=3, point_radius=5, point_hover_radius=8)
    datasets = [{"label": dataset_label, "data": list(series.values), "style": style}]
    return _payload(name, title, "line", series.labels, datasets, chart)


def multi_line_chart(
    name: str,
    title: str,
    multi: MultiSeries,
    *,
    palette: Sequence[ColorPair] = NEON_PALETTE,
) -> Dict[str, Any]:
    display = CHART_DISPLAY["line"]
    names = [s.name for s in multi.series]
    colors = [color_for(i, palette) for i in range(len(names))]
    long_df = pd.DataFrame(
        [(s.name, label, value) for s in multi.series for label, value in zip(multi.labels, s.values)],
        columns=["series", "label", "value"],
    )
    legend = alt.selection_point(fields=["series"], bind="legend")
    chart = (
        alt.Chart(long_df, title=title)
        .transform_calculate(tooltip_value=_tooltip_expr(display))
        .mark_line(strokeWidth=2, interpolate="monotone", point={"filled": True, "size": 50})
        .encode(
            x=alt.X("label:O", sort=None, title=None),
            y=alt.Y("value:Q", title="Weight (lbs)"),
            color=alt.Color(
                "series:N",
                sort=None,
                scale=alt.Scale(domain=names, range=[c.border for c in colors]),
                title="Category",
            ),
            opacity=alt.condition(legend, alt.value(1), alt.value(0.1)),
            tooltip=[
                alt.Tooltip("label:O", title="Year"),
                alt.Tooltip("series:N", title="Category"),
                alt.Tooltip("tooltip_value:N", title="Weight"),
            ],
        )
        .add_params(legend)
    )
    datasets = [
        {
            "label": s.name,
            "data": list(s.values),
            "style": _line_style(color, border_width=2, point_radius=4, point_hover_radius=7),
        }
        for s, color in zip(multi.series, colors)
    ]
    return _payload(name, title, "line", multi.labels, datasets, chart)
