from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from core.filters import SelectionState
from core.models import Catalog, Resource


def active_filters(selection: SelectionState) -> List[str]:
    active = []
    if selection.selected_theme is not None:
        active.append("theme")
    if selection.selected_barrier is not None:
        active.append("barrier")
    if selection.selected_personas:
        active.append("personas")
    if selection.search_query:
        active.append("search")
    return active


def visible_mask(catalog: Catalog, selection: SelectionState) -> pd.Series:
    """Boolean mask over `catalog.frame`; AND across dimensions, OR within personas."""
    frame = catalog.frame
    mask = pd.Series(True, index=frame.index, dtype=bool)
    if frame.empty:
        return mask

    if selection.selected_theme is not None:
        mask &= frame["theme_id"].eq(selection.selected_theme).fillna(False).astype(bool)

    if selection.selected_barrier is not None:
        barrier = selection.selected_barrier
        mask &= frame["barrier_ids"].map(lambda ids: barrier in ids).astype(bool)

    if selection.selected_personas:
        wanted = selection.selected_personas
        mask &= frame["personas"].map(lambda ps: not ps.isdisjoint(wanted)).astype(bool)

    query = selection.search_query
    if query:
        mask &= frame["haystack"].str.contains(query, regex=False, na=False).astype(bool)

    return mask


def visible_resources(catalog: Catalog, selection: SelectionState) -> List[Resource]:
    mask = visible_mask(catalog, selection)
    return [r for r, keep in zip(catalog.resources, mask.tolist()) if keep]


def visible_counts(catalog: Catalog, visible: Sequence[Resource]) -> Dict[str, Dict[str, int]]:
    """Per-theme and per-barrier counts over an already filtered resource list."""
    themes: Dict[str, int] = {t.id: 0 for t in catalog.themes}
    barriers: Dict[str, int] = {b.id: 0 for b in catalog.barriers}
    for r in visible:
        if r.theme_id in themes:
            themes[r.theme_id] += 1
        for b in r.barrier_ids:
            if b in barriers:
                barriers[b] += 1
    return {"themes": themes, "barriers": barriers}
