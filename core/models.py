from __future__ import annotations

from dataclasses import asdict, dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class Resource:
    id: str = ""
    title: str = ""
    url: str = ""
    description: str = ""
    theme_id: Optional[str] = None
    barrier_ids: Tuple[str, ...] = ()
    personas: Tuple[str, ...] = ()

    @property
    def haystack(self) -> str:
        """Lower-cased text the search box matches against."""
        return f"{self.title}{self.description}".lower()

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["barrier_ids"] = list(self.barrier_ids)
        out["personas"] = list(self.personas)
        return out


@dataclass(frozen=True)
class Theme:
    id: str
    label: str
    color: str
    weight: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Barrier:
    id: str
    label: str
    color: str
    parent_theme_id: Optional[str] = None
    weight: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Catalog:
    """Read-only set of resources with their derived themes, barriers and personas."""

    resources: Tuple[Resource, ...] = ()
    themes: Tuple[Theme, ...] = ()
    barriers: Tuple[Barrier, ...] = ()
    personas: Tuple[str, ...] = ()
    files: Tuple[str, ...] = field(default=(), compare=False)

    @cached_property
    def _theme_index(self) -> Dict[str, Theme]:
        return {t.id: t for t in self.themes}

    @cached_property
    def _barrier_index(self) -> Dict[str, Barrier]:
        return {b.id: b for b in self.barriers}

    @cached_property
    def frame(self) -> pd.DataFrame:
        """One row per resource, positional index matching `resources`."""
        rows: List[Dict[str, Any]] = [
            {
                "theme_id": r.theme_id,
                "barrier_ids": frozenset(r.barrier_ids),
                "personas": frozenset(r.personas),
                "haystack": r.haystack,
            }
            for r in self.resources
        ]
        return pd.DataFrame(rows, columns=["theme_id", "barrier_ids", "personas", "haystack"])

    def theme(self, theme_id: Optional[str]) -> Optional[Theme]:
        if theme_id is None:
            return None
        return self._theme_index.get(theme_id)

    def barrier(self, barrier_id: Optional[str]) -> Optional[Barrier]:
        if barrier_id is None:
            return None
        return self._barrier_index.get(barrier_id)

    def has_theme(self, theme_id: Optional[str]) -> bool:
        return self.theme(theme_id) is not None

    def has_barrier(self, barrier_id: Optional[str]) -> bool:
        return self.barrier(barrier_id) is not None

    def has_persona(self, persona: Optional[str]) -> bool:
        return persona is not None and persona in self.personas

    def __len__(self) -> int:
        return len(self.resources)
