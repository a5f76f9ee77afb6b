from wastedash.aggregations import AggregatedSeries, MultiSeries, NamedSeries
from wastedash.charts import (
    BLUE,
    CHART_DISPLAY,
    GREEN,
    LIGHT_BLUE,
    NEON_PALETTE,
    PINK,
    bar_chart,
    color_for,
    format_weight,
    line_chart,
    multi_line_chart,
    pie_chart,
)


def test_color_for_wraps_around_palette():
    assert color_for(0) == PINK
    assert color_for(6) == LIGHT_BLUE
    assert color_for(7) == PINK
    assert color_for(8) == GREEN
    assert color_for(3, (BLUE,)) == BLUE


def test_neon_colors_have_fill_and_border():
    assert PINK.fill == "rgba(255, 0, 255, 0.7)"
    assert PINK.border == "rgb(255, 0, 255)"
    assert len(NEON_PALETTE) == 7


def test_format_weight_groups_thousands_and_rounds_half_up():
    assert format_weight(1234.5) == "1,235 lbs"
    assert format_weight(999.4) == "999 lbs"
    assert format_weight(0) == "0 lbs"


def test_display_config_per_chart_kind():
    assert CHART_DISPLAY["bar"].orientation == "x"
    assert CHART_DISPLAY["bar_horizontal"].orientation == "y"
    assert CHART_DISPLAY["bar_horizontal"].interaction_mode == "y"
    assert CHART_DISPLAY["line"].interaction_mode == "index"
    assert CHART_DISPLAY["pie"].interaction_mode == "point"
    assert CHART_DISPLAY["pie"].intersect is True


def test_bar_chart_payload_shape():
    series = AggregatedSeries(labels=("Recycle", "Landfill"), values=(150.0, 30.0))
    payload = bar_chart("category_weight", "Total Weight by Category", series, PINK)

    assert payload["kind"] == "bar"
    assert payload["labels"] == ["Recycle", "Landfill"]
    dataset = payload["datasets"][0]
    assert dataset["label"] == "Total Weight (lbs)"
    assert dataset["data"] == [150.0, 30.0]
    assert dataset["style"]["fill"] == PINK.fill
    assert dataset["style"]["hover_fill"] == PINK.border
    assert dataset["style"]["hover_border"] == "rgb(230, 230, 250)"
    assert payload["display"]["orientation"] == "x"
    assert "$schema" in payload["spec"]


def test_horizontal_bar_uses_y_orientation():
    series = AggregatedSeries(labels=("Green Co",), values=(10.0,))
    payload = bar_chart("top_vendors", "Top 10 Vendors by Weight", series, BLUE, horizontal=True)
    assert payload["kind"] == "bar"
    assert payload["display"]["orientation"] == "y"


def test_pie_chart_cycles_palette_per_slice():
    labels = tuple(f"Material {i}" for i in range(9))
    series = AggregatedSeries(labels=labels, values=tuple(float(i) for i in range(9)))
    payload = pie_chart("material_type_distribution", "Material Type Distribution", series)
    style = payload["datasets"][0]["style"]

    assert payload["datasets"][0]["label"] == "Weight (lbs)"
    assert len(style["fill"]) == 9
    assert style["fill"][7] == PINK.fill
    assert style["border"][8] == GREEN.border
    assert style["hover_offset"] == 15


def test_line_chart_style():
    series = AggregatedSeries(labels=("2019", "2020"), values=(1.0, 2.0))
    payload = line_chart("yearly_trend", "Total Waste Weight Trend Over Years", series, GREEN)
    style = payload["datasets"][0]["style"]
    assert payload["kind"] == "line"
    assert style["border"] == GREEN.border
    assert style["tension"] == 0.2
    assert style["point_radius"] == 5


def test_multi_line_chart_colors_by_category_position():
    names = [f"Category {i}" for i in range(8)]
    multi = MultiSeries(
        labels=("2019", "2020"),
        series=tuple(NamedSeries(name=n, values=(1.0, 0.0)) for n in names),
    )
    payload = multi_line_chart("category_trends_over_years", "Waste Category Trends Over Years (lbs)", multi)

    assert payload["labels"] == ["2019", "2020"]
    assert [d["label"] for d in payload["datasets"]] == names
    assert payload["datasets"][0]["style"]["border"] == PINK.border
    assert payload["datasets"][7]["style"]["border"] == PINK.border
    assert payload["datasets"][1]["style"]["border"] == GREEN.border
    assert payload["datasets"][0]["data"] == [1.0, 0.0]
