from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.filters import SelectionState
from core.models import Catalog

alt.data_transformers.disable_max_rows()

INNER_RING = (60, 120)
OUTER_RING = (126, 170)
DIMMED_OPACITY = 0.35

SEGMENT_COLUMNS = ["kind", "ring", "id", "label", "color", "weight", "selected", "opacity", "order"]


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def donut_segments(catalog: Catalog, selection: SelectionState) -> List[Dict[str, Any]]:
    """Theme segments (inner ring) then barrier segments (outer ring); empty segments are skipped."""
    has_selection = selection.selected_theme is not None or selection.selected_barrier is not None
    segments: List[Dict[str, Any]] = []

    for order, t in enumerate(catalog.themes):
        if t.weight <= 0:
            continue
        selected = t.id == selection.selected_theme
        segments.append(
            {
                "kind": "theme",
                "ring": "inner",
                "id": t.id,
                "label": t.label,
                "color": t.color,
                "weight": t.weight,
                "selected": selected,
                "opacity": 1.0 if selected or not has_selection else DIMMED_OPACITY,
                "order": order,
            }
        )

    # Barriers are grouped under their parent theme so the outer ring lines up with the inner one.
    theme_order = {t.id: i for i, t in enumerate(catalog.themes)}
    ranked = sorted(
        enumerate(catalog.barriers),
        key=lambda item: (theme_order.get(item[1].parent_theme_id or "", len(theme_order)), item[0]),
    )
    for order, (_, b) in enumerate(ranked):
        if b.weight <= 0:
            continue
        selected = b.id == selection.selected_barrier
        segments.append(
            {
                "kind": "barrier",
                "ring": "outer",
                "id": b.id,
                "label": b.label,
                "color": b.color,
                "weight": b.weight,
                "selected": selected,
                "opacity": 1.0 if selected or not has_selection else DIMMED_OPACITY,
                "order": order,
            }
        )
    return segments


def _ring(df: pd.DataFrame, inner: int, outer: int, title: str) -> alt.Chart:
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=inner, outerRadius=outer, stroke="#ffffff", strokeWidth=1)
        .encode(
            theta=alt.Theta("weight:Q", stack=True),
            order=alt.Order("order:Q"),
            color=alt.Color("color:N", scale=None, legend=None),
            opacity=alt.Opacity("opacity:Q", scale=None, legend=None),
            tooltip=[
                alt.Tooltip("label:N", title=title),
                alt.Tooltip("weight:Q", title="Resources", format=","),
            ],
        )
    )


def donut_chart(segments: List[Dict[str, Any]]) -> alt.LayerChart:
    df = pd.DataFrame(segments, columns=SEGMENT_COLUMNS)
    themes = df[df["kind"] == "theme"]
    barriers = df[df["kind"] == "barrier"]
    return alt.layer(
        _ring(themes, *INNER_RING, title="Theme"),
        _ring(barriers, *OUTER_RING, title="Barrier"),
    ).properties(width=360, height=360)
