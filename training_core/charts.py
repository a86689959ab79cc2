from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from training_core.aggregation import AggregationBucket

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def buckets_frame(buckets: Sequence[AggregationBucket]) -> pd.DataFrame:
    return pd.DataFrame([b.to_dict() for b in buckets], columns=["key", "total", "completed", "rate"])


def completion_rate_chart(buckets: Sequence[AggregationBucket], *, title: str) -> Dict[str, Any]:
    df = buckets_frame(buckets)
    hover = alt.selection_point(fields=["key"], on="mouseover", empty=True)
    chart = (
        alt.Chart(df, title=title)
        .mark_bar()
        .encode(
            x=alt.X("key:N", title=title, sort=None, axis=alt.Axis(grid=False, labelAngle=-30)),
            y=alt.Y("rate:Q", title="Completion Rate (%)", scale=alt.Scale(domain=[0, 100]), axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("rate:Q", scale=alt.Scale(domain=[0, 60, 80, 100], range=["#ef4444", "#f59e0b", "#10b981", "#10b981"]), legend=None),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[
                alt.Tooltip("key", title=title),
                alt.Tooltip("rate", title="Completion Rate", format=".1f"),
                alt.Tooltip("completed", title="Completed"),
                alt.Tooltip("total", title="Total"),
            ],
        )
        .add_params(hover)
    )
    return to_vega_spec(chart)


def status_pie_chart(breakdown: List[Dict[str, Any]]) -> Dict[str, Any]:
    df = pd.DataFrame(breakdown, columns=["status", "count"])
    chart = (
        alt.Chart(df)
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color("status:N", scale=alt.Scale(range=["#14b8a6", "#ef4444"])),
            tooltip=[alt.Tooltip("status", title="Status"), alt.Tooltip("count", title="Enrollments")],
        )
    )
    return to_vega_spec(chart)
