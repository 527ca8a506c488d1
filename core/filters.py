from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Iterable, List, Optional

from core.data import as_id, as_text, to_list_field
from core.models import Catalog


@dataclass(frozen=True)
class SelectionState:
    """Current navigation choices.

    Transitions return a new state; theme and barrier are never both set.
    """

    selected_theme: Optional[str] = None
    selected_barrier: Optional[str] = None
    search_text: str = ""
    selected_personas: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.selected_theme is not None and self.selected_barrier is not None:
            # Same precedence as URL decoding: the barrier wins.
            object.__setattr__(self, "selected_theme", None)
        if not isinstance(self.selected_personas, frozenset):
            object.__setattr__(self, "selected_personas", frozenset(self.selected_personas))

    # ---------------- Transitions ----------------
    def select_theme(self, theme_id: Optional[str]) -> "SelectionState":
        if not theme_id:
            return replace(self, selected_theme=None)
        if theme_id == self.selected_theme:
            return replace(self, selected_theme=None)
        return replace(self, selected_theme=theme_id, selected_barrier=None)

    def select_barrier(self, barrier_id: Optional[str]) -> "SelectionState":
        if not barrier_id:
            return replace(self, selected_barrier=None)
        if barrier_id == self.selected_barrier:
            return replace(self, selected_barrier=None)
        return replace(self, selected_theme=None, selected_barrier=barrier_id)

    def set_search_text(self, text: Optional[str]) -> "SelectionState":
        return replace(self, search_text="" if text is None else str(text))

    def toggle_persona(self, persona: str) -> "SelectionState":
        if not persona:
            return self
        if persona in self.selected_personas:
            return replace(self, selected_personas=self.selected_personas - {persona})
        return replace(self, selected_personas=self.selected_personas | {persona})

    def clear_all(self) -> "SelectionState":
        return SelectionState()

    # ---------------- Queries ----------------
    @property
    def search_query(self) -> str:
        """Search text as the filter engine sees it (trimmed, lower-cased)."""
        return self.search_text.strip().lower()

    @property
    def is_default(self) -> bool:
        return self == SelectionState()

    def sorted_personas(self) -> List[str]:
        return sorted(self.selected_personas)

    def to_dict(self) -> dict:
        return {
            "selected_theme": self.selected_theme,
            "selected_barrier": self.selected_barrier,
            "search_text": self.search_text,
            "selected_personas": self.sorted_personas(),
        }


def resolve_selection(
    theme: Optional[str],
    barrier: Optional[str],
    search_text: str,
    personas: Iterable[str],
    catalog: Optional[Catalog] = None,
) -> SelectionState:
    """Drop ids the catalog does not know, then apply barrier-over-theme precedence."""
    if catalog is not None:
        theme = theme if catalog.has_theme(theme) else None
        barrier = barrier if catalog.has_barrier(barrier) else None
        personas = [p for p in personas if catalog.has_persona(p)]
    if barrier is not None:
        theme = None
    return SelectionState(
        selected_theme=theme,
        selected_barrier=barrier,
        search_text=search_text,
        selected_personas=frozenset(personas),
    )


def normalize_selection(raw: Optional[dict], *, catalog: Optional[Catalog] = None) -> SelectionState:
    """Build a state from a loose dict such as an API payload."""
    raw = raw or {}
    search = raw.get("search_text")
    if search is None:
        search = raw.get("q")
    personas: Any = raw.get("selected_personas")
    if personas is None:
        personas = raw.get("personas")
    return resolve_selection(
        as_id(raw.get("selected_theme", raw.get("theme"))),
        as_id(raw.get("selected_barrier", raw.get("barrier"))),
        search if isinstance(search, str) else as_text(search),
        to_list_field(personas),
        catalog,
    )
