from __future__ import annotations

import logging
import math
import os
from collections import Counter
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from core.colors import BARRIER_LIGHTEN, NEUTRAL_GRAY, lighten, normalize_hex, palette_color
from core.models import Barrier, Catalog, Resource, Theme

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_DIR_ENV = "NAVIGATOR_DATA_DIR"

RESOURCES_STEM = "resources"
THEMES_STEM = "themes"
BARRIERS_STEM = "barriers"
TABLE_SUFFIXES = (".json", ".csv")

LIST_DELIMITER = "|"

RESOURCE_FIELDS = {
    "id": ("id", "resource_id", "resourceId"),
    "title": ("title", "name"),
    "url": ("url", "link", "href"),
    "description": ("description", "summary", "desc"),
    "theme_id": ("theme_id", "themeId", "theme"),
    "barrier_ids": ("barrier_ids", "barrierIds", "barriers", "barrier"),
    "personas": ("personas", "persona"),
}
THEME_FIELDS = {
    "id": ("id", "theme_id", "themeId"),
    "label": ("label", "name", "title"),
    "color": ("color", "colour", "hex"),
}
BARRIER_FIELDS = {
    "id": ("id", "barrier_id", "barrierId"),
    "label": ("label", "name", "title"),
    "parent_theme_id": ("parent_theme_id", "parentThemeId", "theme_id", "themeId", "theme", "parent"),
}


# ---------------- Normalizer ----------------
def is_missing(value: object) -> bool:
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def as_text(value: object) -> str:
    """Coerce a scalar cell to a trimmed string; missing values become ""."""
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple, dict, set)):
        return ""
    return str(value).strip()


def as_id(value: object) -> Optional[str]:
    text = as_text(value)
    return text or None


def to_list_field(value: object) -> List[str]:
    """Canonical list form of a field that may arrive as a list or a `|`-delimited string.

    Strings are split on `|`, trimmed and emptied of blank segments. List items
    get the same treatment, so no item of the result contains the delimiter.
    Anything else is an empty list.
    """
    if isinstance(value, (list, tuple)):
        texts = [as_text(v) for v in value]
    elif isinstance(value, str):
        texts = [value]
    else:
        return []
    items = (seg.strip() for text in texts for seg in text.split(LIST_DELIMITER))
    return [item for item in items if item]


def _pick(raw: Mapping[str, Any], keys: Sequence[str]) -> object:
    for key in keys:
        if key in raw and not is_missing(raw[key]):
            return raw[key]
    return None


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def normalize_resource(raw: object) -> Resource:
    if not isinstance(raw, Mapping):
        return Resource()
    return Resource(
        id=as_text(_pick(raw, RESOURCE_FIELDS["id"])),
        title=as_text(_pick(raw, RESOURCE_FIELDS["title"])),
        url=as_text(_pick(raw, RESOURCE_FIELDS["url"])),
        description=as_text(_pick(raw, RESOURCE_FIELDS["description"])),
        theme_id=as_id(_pick(raw, RESOURCE_FIELDS["theme_id"])),
        barrier_ids=_unique(to_list_field(_pick(raw, RESOURCE_FIELDS["barrier_ids"]))),
        personas=_unique(to_list_field(_pick(raw, RESOURCE_FIELDS["personas"]))),
    )


def normalize_theme(raw: object, index: int = 0) -> Optional[Theme]:
    if not isinstance(raw, Mapping):
        return None
    theme_id = as_id(_pick(raw, THEME_FIELDS["id"]))
    if theme_id is None:
        return None
    color = _pick(raw, THEME_FIELDS["color"])
    return Theme(
        id=theme_id,
        label=as_text(_pick(raw, THEME_FIELDS["label"])) or theme_id,
        color=normalize_hex(color) if color is not None else palette_color(index),
    )


def normalize_barrier(raw: object) -> Optional[Barrier]:
    if not isinstance(raw, Mapping):
        return None
    barrier_id = as_id(_pick(raw, BARRIER_FIELDS["id"]))
    if barrier_id is None:
        return None
    return Barrier(
        id=barrier_id,
        label=as_text(_pick(raw, BARRIER_FIELDS["label"])) or barrier_id,
        color=lighten(NEUTRAL_GRAY, BARRIER_LIGHTEN),
        parent_theme_id=as_id(_pick(raw, BARRIER_FIELDS["parent_theme_id"])),
    )


# ---------------- Catalog assembly ----------------
def _build_themes(theme_records: Iterable[object], resources: Sequence[Resource]) -> List[Theme]:
    themes: Dict[str, Theme] = {}
    for idx, raw in enumerate(theme_records):
        theme = normalize_theme(raw, idx)
        if theme is None:
            logger.debug("Skipping theme record without id: %r", raw)
            continue
        themes.setdefault(theme.id, theme)

    for r in resources:
        if r.theme_id and r.theme_id not in themes:
            logger.debug("Deriving theme %r from resource %r", r.theme_id, r.id)
            themes[r.theme_id] = Theme(id=r.theme_id, label=r.theme_id, color=palette_color(len(themes)))

    counts = Counter(r.theme_id for r in resources if r.theme_id)
    return [Theme(id=t.id, label=t.label, color=t.color, weight=counts.get(t.id, 0)) for t in themes.values()]


def _build_barriers(barrier_records: Iterable[object], resources: Sequence[Resource], themes: Sequence[Theme]) -> List[Barrier]:
    barriers: Dict[str, Barrier] = {}
    for raw in barrier_records:
        barrier = normalize_barrier(raw)
        if barrier is None:
            logger.debug("Skipping barrier record without id: %r", raw)
            continue
        barriers.setdefault(barrier.id, barrier)

    for r in resources:
        for barrier_id in r.barrier_ids:
            if barrier_id not in barriers:
                logger.debug("Deriving barrier %r from resource %r", barrier_id, r.id)
                barriers[barrier_id] = Barrier(id=barrier_id, label=barrier_id, color=NEUTRAL_GRAY)

    theme_colors = {t.id: t.color for t in themes}
    counts = Counter(b for r in resources for b in r.barrier_ids)
    out: List[Barrier] = []
    for b in barriers.values():
        base = theme_colors.get(b.parent_theme_id or "", NEUTRAL_GRAY)
        out.append(
            Barrier(
                id=b.id,
                label=b.label,
                color=lighten(base, BARRIER_LIGHTEN),
                parent_theme_id=b.parent_theme_id,
                weight=counts.get(b.id, 0),
            )
        )
    return out


def build_catalog(
    resources: Optional[Iterable[object]],
    themes: Optional[Iterable[object]] = None,
    barriers: Optional[Iterable[object]] = None,
    *,
    files: Sequence[str] = (),
) -> Catalog:
    """Normalize raw records and derive theme/barrier weights, colors and the persona list."""
    normalized = [normalize_resource(raw) for raw in (resources or [])]

    seen = Counter(r.id for r in normalized if r.id)
    dupes = sorted(k for k, n in seen.items() if n > 1)
    if dupes:
        logger.debug("Duplicate resource ids kept as-is: %s", dupes)

    theme_list = _build_themes(themes or [], normalized)
    barrier_list = _build_barriers(barriers or [], normalized, theme_list)
    personas = sorted({p for r in normalized for p in r.personas}, key=lambda p: (p.lower(), p))

    return Catalog(
        resources=tuple(normalized),
        themes=tuple(theme_list),
        barriers=tuple(barrier_list),
        personas=tuple(personas),
        files=tuple(files),
    )


# ---------------- Loaders ----------------
def get_data_dir() -> Path:
    override = os.environ.get(DATA_DIR_ENV)
    return Path(override) if override else DATA_DIR


def find_table(data_dir: Path, stem: str) -> Optional[Path]:
    for suffix in TABLE_SUFFIXES:
        path = data_dir / f"{stem}{suffix}"
        if path.exists():
            return path
    return None


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    data_dir = data_dir or get_data_dir()
    found = [find_table(data_dir, stem) for stem in (RESOURCES_STEM, THEMES_STEM, BARRIERS_STEM)]
    return [p for p in found if p is not None]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def read_records(path: Optional[Path]) -> List[Dict[str, Any]]:
    """Read a JSON (array of objects) or CSV table into a list of row dicts."""
    if path is None:
        return []
    if path.suffix == ".json":
        df = pd.read_json(path, orient="records", dtype=False)
    else:
        df = pd.read_csv(path, dtype=str, encoding="utf-8-sig")
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


@lru_cache(maxsize=4)
def _load_catalog_cached(files_sig: Tuple[Tuple[str, float], ...]) -> Catalog:
    paths = [Path(name) for name, _ in files_sig]
    by_stem = {p.stem: p for p in paths}
    catalog = build_catalog(
        read_records(by_stem.get(RESOURCES_STEM)),
        read_records(by_stem.get(THEMES_STEM)),
        read_records(by_stem.get(BARRIERS_STEM)),
        files=[p.name for p in paths],
    )
    logger.info(
        "Loaded catalog: %d resources, %d themes, %d barriers, %d personas",
        len(catalog.resources),
        len(catalog.themes),
        len(catalog.barriers),
        len(catalog.personas),
    )
    return catalog


def load_catalog(data_dir: Optional[Path] = None) -> Catalog:
    files = get_source_files(data_dir)
    if not any(p.stem == RESOURCES_STEM for p in files):
        logger.warning("No %s.json or %s.csv found in %s", RESOURCES_STEM, RESOURCES_STEM, data_dir or get_data_dir())
        return Catalog()
    return _load_catalog_cached(file_signature(files))
