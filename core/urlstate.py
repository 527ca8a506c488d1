"""Query-string codec for the navigator selection.

`encode` writes only non-default fields, `decode` reads them back and drops
anything the catalog does not recognise. Neither raises.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Union
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from core.data import as_id, to_list_field
from core.filters import SelectionState, resolve_selection
from core.models import Catalog

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
BARRIER_KEY = "barrier"
SEARCH_KEY = "q"
PERSONAS_KEY = "personas"
QUERY_KEYS = (THEME_KEY, BARRIER_KEY, SEARCH_KEY, PERSONAS_KEY)

PERSONA_DELIMITER = "|"
PERSONA_ALT_DELIMITER = ","

QueryInput = Union[str, Mapping[str, Any], None]


def to_params(selection: SelectionState) -> Dict[str, str]:
    """Non-default fields of `selection` as an ordered key -> value dict."""
    params: Dict[str, str] = {}
    if selection.selected_theme:
        params[THEME_KEY] = selection.selected_theme
    if selection.selected_barrier:
        params[BARRIER_KEY] = selection.selected_barrier
    if selection.search_text:
        params[SEARCH_KEY] = selection.search_text
    if selection.selected_personas:
        params[PERSONAS_KEY] = PERSONA_DELIMITER.join(selection.sorted_personas())
    return params


def encode(selection: SelectionState) -> str:
    return urlencode(to_params(selection), safe=PERSONA_DELIMITER + PERSONA_ALT_DELIMITER, errors="surrogatepass")


def _as_multidict(query: QueryInput) -> Dict[str, List[str]]:
    if query is None:
        return {}
    if isinstance(query, str):
        text = query.strip()
        if "://" in text.split("?", 1)[0]:
            text = urlsplit(text).query
        text = text.lstrip("?").split("#", 1)[0]
        return parse_qs(text, keep_blank_values=True, errors="surrogatepass")
    if isinstance(query, Mapping):
        out: Dict[str, List[str]] = {}
        get_all = getattr(query, "get_all", None)
        for key in query.keys():
            values = get_all(key) if callable(get_all) else query[key]
            if isinstance(values, (list, tuple)):
                out[str(key)] = [str(v) for v in values if v is not None]
            elif values is not None:
                out[str(key)] = [str(values)]
        return out
    return {}


def split_personas(value: str, catalog: Optional[Catalog] = None) -> List[str]:
    """Split a persona param; `|` takes priority, `,` is accepted for hand-written URLs.

    A lone value is kept whole only when `catalog` knows it as a persona, so
    personas containing `,` round-trip exactly only when a catalog is passed.
    Without one, `"Project, Lead"` comes back as `["Project", "Lead"]`.
    """
    if PERSONA_DELIMITER in value:
        return to_list_field(value)
    whole = value.strip()
    if catalog is not None and catalog.has_persona(whole):
        return [whole]
    return to_list_field(value.replace(PERSONA_ALT_DELIMITER, PERSONA_DELIMITER))


def _first(values: Iterable[str]) -> Optional[str]:
    for v in values:
        return v
    return None


def decode(query: QueryInput, catalog: Optional[Catalog] = None) -> SelectionState:
    """Read a selection from a query string or param mapping.

    Unknown ids are dropped. When both a valid theme and a valid barrier are
    present the barrier is kept.
    """
    try:
        params = _as_multidict(query)
    except (TypeError, ValueError, UnicodeError):
        logger.debug("Unparseable query %r, using default selection", query)
        return SelectionState()

    theme = as_id(_first(params.get(THEME_KEY, [])))
    barrier = as_id(_first(params.get(BARRIER_KEY, [])))
    search = _first(params.get(SEARCH_KEY, [])) or ""

    personas: List[str] = []
    for raw in params.get(PERSONAS_KEY, []):
        personas.extend(split_personas(raw, catalog))

    if catalog is not None:
        dropped = [
            *([f"theme={theme}"] if theme is not None and not catalog.has_theme(theme) else []),
            *([f"barrier={barrier}"] if barrier is not None and not catalog.has_barrier(barrier) else []),
            *[f"persona={p}" for p in personas if not catalog.has_persona(p)],
        ]
        if dropped:
            logger.debug("Ignoring unknown query values: %s", ", ".join(dropped))

    return resolve_selection(theme, barrier, search, personas, catalog)


def share_url(base_url: str, selection: SelectionState) -> str:
    """`base_url` with its query replaced by the encoded selection."""
    parts = urlsplit(base_url or "")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, encode(selection), parts.fragment))


class QueryParamSync:
    """Keeps a mutable query-param mapping (e.g. `st.query_params`) in step with a selection."""

    def __init__(self, params: MutableMapping[str, Any], catalog: Optional[Catalog] = None):
        self.params = params
        self.catalog = catalog

    def load(self) -> SelectionState:
        return decode(self.params, self.catalog)

    def push(self, selection: SelectionState) -> Dict[str, str]:
        wanted = to_params(selection)
        for key in QUERY_KEYS:
            if key not in wanted and key in self.params:
                del self.params[key]
        for key, value in wanted.items():
            if self.params.get(key) != value:
                self.params[key] = value
        return wanted
