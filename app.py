import html
from contextlib import contextmanager
from typing import List, Optional

import streamlit as st

from core.charts import donut_chart, donut_segments
from core.data import load_catalog
from core.engine import visible_resources
from core.filters import SelectionState
from core.models import Catalog, Resource
from core.navigator import EMPTY_MESSAGE, format_selection_chips
from core.urlstate import QueryParamSync, share_url

SEARCH_KEY = "search_box"
SELECTION_KEY = "selection"


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
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin: 6px 0 12px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .resource-title {font-weight: 600;font-size: 1.0rem;}
        .resource-desc {color: #4b5563;font-size: 0.9rem;margin-top: 4px;}
        .swatch {display: inline-block;width: 10px;height: 10px;border-radius: 2px;margin-right: 6px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{html.escape(title)}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def persona_key(persona: str) -> str:
    return f"persona::{persona}"


def format_chips(chips: List[str]) -> str:
    return "".join(f"<span class='chip'>{html.escape(txt)}</span>" for txt in chips)


# ---------- State wiring ----------
def current_selection() -> SelectionState:
    return st.session_state.get(SELECTION_KEY, SelectionState())


def sync_widgets(selection: SelectionState, catalog: Catalog):
    st.session_state[SEARCH_KEY] = selection.search_text
    for p in catalog.personas:
        st.session_state[persona_key(p)] = p in selection.selected_personas


def commit(selection: SelectionState):
    st.session_state[SELECTION_KEY] = selection
    QueryParamSync(st.query_params).push(selection)


def on_theme(theme_id: str):
    commit(current_selection().select_theme(theme_id))


def on_barrier(barrier_id: str):
    commit(current_selection().select_barrier(barrier_id))


def on_search():
    commit(current_selection().set_search_text(st.session_state.get(SEARCH_KEY, "")))


def on_persona(persona: str):
    commit(current_selection().toggle_persona(persona))


def on_clear(catalog: Catalog):
    cleared = current_selection().clear_all()
    commit(cleared)
    sync_widgets(cleared, catalog)


# ---------- Renderers ----------
def render_segment_buttons(items, selected_id: Optional[str], on_click, prefix: str):
    cols = st.columns(2)
    for idx, item in enumerate(items):
        if item.weight <= 0:
            continue
        cols[idx % 2].button(
            f"{item.label} ({item.weight})",
            key=f"{prefix}::{item.id}",
            type="primary" if item.id == selected_id else "secondary",
            on_click=on_click,
            args=(item.id,),
            use_container_width=True,
        )


def render_resource(resource: Resource, catalog: Catalog):
    theme = catalog.theme(resource.theme_id)
    swatch = f"<span class='swatch' style='background:{theme.color}'></span>" if theme else ""
    title = html.escape(resource.title or resource.url or resource.id or "Untitled")
    if resource.url:
        title = f"<a href='{html.escape(resource.url, quote=True)}' target='_blank'>{title}</a>"
    tags = [theme.label] if theme else []
    tags += [b.label for b in (catalog.barrier(b_id) for b_id in resource.barrier_ids) if b is not None]
    tags += list(resource.personas)
    st.markdown(
        f"""
        <div class='card'>
          <div class='resource-title'>{swatch}{title}</div>
          <div class='resource-desc'>{html.escape(resource.description)}</div>
          <div class='chip-row'>{format_chips(tags)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Resource Navigator", layout="wide")
inject_base_styles()
st.title("Resource Navigator")
st.caption("Explore resources by theme, barrier and persona. The address bar always reflects the current view.")

catalog = load_catalog()
if not len(catalog):
    st.error("No resources found. Place resources.json or resources.csv in the data directory.")
    st.stop()

if SELECTION_KEY not in st.session_state:
    initial = QueryParamSync(st.query_params, catalog).load()
    st.session_state[SELECTION_KEY] = initial
    sync_widgets(initial, catalog)
    QueryParamSync(st.query_params).push(initial)

selection = current_selection()

with st.sidebar:
    st.markdown("### Search")
    st.text_input("Search titles and descriptions", key=SEARCH_KEY, on_change=on_search)
    st.markdown("### Personas")
    for p in catalog.personas:
        st.checkbox(p, key=persona_key(p), on_change=on_persona, args=(p,))
    st.markdown("---")
    st.button("Clear all filters", on_click=on_clear, args=(catalog,), use_container_width=True)

visible = visible_resources(catalog, selection)
st.markdown(f"<div class='chip-row'>{format_chips(format_selection_chips(catalog, selection))}</div>", unsafe_allow_html=True)

left, right = st.columns([2, 3])
with left:
    with card("Themes & barriers"):
        st.altair_chart(donut_chart(donut_segments(catalog, selection)), use_container_width=True)
        st.markdown("**Themes**")
        render_segment_buttons(catalog.themes, selection.selected_theme, on_theme, "theme")
        st.markdown("**Barriers**")
        render_segment_buttons(catalog.barriers, selection.selected_barrier, on_barrier, "barrier")
    with card("Share this view"):
        st.code(share_url("", selection) or "(all resources)", language=None)

with right:
    st.markdown(f"**{len(visible)} of {len(catalog)} resources**")
    if not visible:
        st.info(EMPTY_MESSAGE)
    for resource in visible:
        render_resource(resource, catalog)
