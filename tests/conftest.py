"""
Shared fixtures for the resource navigator tests.

Provides raw theme/barrier/resource records in the mixed shapes the data
pipeline produces (pipe-delimited strings next to real lists, missing
fields), a normalized catalog built from them, and a temporary data
directory holding the same records as JSON files.
"""

import json
from pathlib import Path

import pytest

from core.data import build_catalog

THEME_RECORDS = [
    {"id": "T1", "label": "Governance", "color": "#336699"},
    {"id": "T2", "label": "Skills", "color": "abc"},
]

BARRIER_RECORDS = [
    {"id": "B1", "label": "Unclear ownership", "theme": "T1"},
    {"id": "B2", "label": "Inconsistent standards", "theme": "T1"},
    {"id": "B3", "label": "Lack of training", "theme": "T2"},
    {"id": "B4", "label": "Funding constraints"},
]

RESOURCE_RECORDS = [
    {
        "id": "r1",
        "title": "Data ownership playbook",
        "url": "https://example.org/r1",
        "description": "Stewardship roles for shared datasets",
        "theme": "T1",
        "barriers": "B1|B2",
        "personas": "Project|Policy",
    },
    {
        "id": "r2",
        "title": "Metadata primer",
        "url": "https://example.org/r2",
        "description": "Describing DATA consistently",
        "theme": "T1",
        "barriers": ["B2"],
        "personas": ["Analyst"],
    },
    {
        "id": "r3",
        "title": "Literacy curriculum",
        "url": "https://example.org/r3",
        "description": "Skills course outline",
        "theme": "T2",
        "barriers": "B3",
        "personas": "Project",
    },
    {
        "id": "r4",
        "title": "Funding templates",
        "url": "https://example.org/r4",
        "description": "Business case examples",
        "barriers": "B4",
        "personas": None,
    },
    {
        "id": "r5",
        "title": "Community guide",
        "url": "https://example.org/r5",
        "description": "Networks for analysts",
        "theme": "T2",
        "personas": "Analyst | Technical",
    },
]


@pytest.fixture
def catalog():
    return build_catalog(RESOURCE_RECORDS, THEME_RECORDS, BARRIER_RECORDS)


def _write_json(path: Path, records) -> Path:
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(tmp_path):
    """Temp directory with resources/themes/barriers as JSON."""
    _write_json(tmp_path / "resources.json", RESOURCE_RECORDS)
    _write_json(tmp_path / "themes.json", THEME_RECORDS)
    _write_json(tmp_path / "barriers.json", BARRIER_RECORDS)
    return tmp_path


@pytest.fixture
def csv_data_dir(tmp_path):
    """Temp directory with only a resources CSV (themes and barriers derived)."""
    (tmp_path / "resources.csv").write_text(
        "id,title,url,description,theme,barriers,personas\n"
        "7,Open data guide,https://example.org/7,Publishing data openly,T1,B1|B2,Project|Analyst\n"
        "8,Untitled draft,,,,,\n"
        "9,Skills matrix,https://example.org/9,Mapping skills,T2, B3 ,Leadership\n",
        encoding="utf-8",
    )
    return tmp_path
