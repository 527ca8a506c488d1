from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.charts import donut_chart, donut_segments, to_vega_spec
from core.engine import active_filters, visible_counts, visible_resources
from core.filters import SelectionState
from core.models import Catalog
from core.urlstate import encode, share_url

EMPTY_MESSAGE = "No resources match the current filters. Try removing a filter or clearing the search."


def format_selection_chips(catalog: Catalog, selection: SelectionState) -> List[str]:
    theme = catalog.theme(selection.selected_theme)
    barrier = catalog.barrier(selection.selected_barrier)
    chips = []
    if theme is not None:
        chips.append(f"Theme: {theme.label}")
    elif barrier is not None:
        chips.append(f"Barrier: {barrier.label}")
    else:
        chips.append("Theme: All")
    chips.append(f"Personas: {', '.join(selection.sorted_personas())}" if selection.selected_personas else "Personas: All")
    if selection.search_query:
        chips.append(f"Search: {selection.search_text.strip()}")
    return chips


def compute_navigator(catalog: Catalog, selection: SelectionState, *, base_url: str = "") -> Dict[str, Any]:
    visible = visible_resources(catalog, selection)
    counts = visible_counts(catalog, visible)
    segments = donut_segments(catalog, selection)

    empty_message: Optional[str] = None
    if not visible:
        empty_message = EMPTY_MESSAGE if len(catalog) else "The resource catalog is empty."

    return {
        "selection": selection.to_dict(),
        "query": encode(selection),
        "share_url": share_url(base_url, selection),
        "summary": {
            "total": len(catalog),
            "visible": len(visible),
            "active_filters": active_filters(selection),
            "chips": format_selection_chips(catalog, selection),
        },
        "themes": [dict(t.to_dict(), visible=counts["themes"].get(t.id, 0)) for t in catalog.themes],
        "barriers": [dict(b.to_dict(), visible=counts["barriers"].get(b.id, 0)) for b in catalog.barriers],
        "personas": [{"id": p, "selected": p in selection.selected_personas} for p in catalog.personas],
        "chart": to_vega_spec(donut_chart(segments)),
        "resources": [r.to_dict() for r in visible],
        "empty_message": empty_message,
    }
