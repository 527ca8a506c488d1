"""Tests for chart segments and the navigator payload (core/charts.py, core/navigator.py)."""

import json

from core.charts import DIMMED_OPACITY, donut_chart, donut_segments, to_vega_spec
from core.data import build_catalog
from core.filters import SelectionState
from core.navigator import EMPTY_MESSAGE, compute_navigator, format_selection_chips


class TestDonutSegments:
    def test_themes_then_barriers_grouped_by_parent(self, catalog):
        segments = donut_segments(catalog, SelectionState())
        assert [(s["kind"], s["id"]) for s in segments] == [
            ("theme", "T1"),
            ("theme", "T2"),
            ("barrier", "B1"),
            ("barrier", "B2"),
            ("barrier", "B3"),
            ("barrier", "B4"),
        ]
        assert all(s["opacity"] == 1.0 for s in segments)

    def test_selection_dims_other_segments(self, catalog):
        segments = donut_segments(catalog, SelectionState(selected_theme="T1"))
        by_id = {s["id"]: s for s in segments}
        assert by_id["T1"]["selected"] is True
        assert by_id["T1"]["opacity"] == 1.0
        assert by_id["T2"]["opacity"] == DIMMED_OPACITY
        assert by_id["B1"]["opacity"] == DIMMED_OPACITY

    def test_zero_weight_segments_skipped(self):
        cat = build_catalog([{"id": 1, "theme": "A"}], [{"id": "A"}, {"id": "Empty"}])
        ids = [s["id"] for s in donut_segments(cat, SelectionState())]
        assert ids == ["A"]

    def test_chart_spec_has_two_rings(self, catalog):
        spec = to_vega_spec(donut_chart(donut_segments(catalog, SelectionState())))
        assert len(spec["layer"]) == 2
        assert all(layer["mark"]["type"] == "arc" for layer in spec["layer"])

    def test_chart_for_empty_catalog(self):
        spec = to_vega_spec(donut_chart(donut_segments(build_catalog([]), SelectionState())))
        assert "layer" in spec


class TestComputeNavigator:
    def test_payload_shape(self, catalog):
        payload = compute_navigator(catalog, SelectionState(selected_barrier="B2"), base_url="https://x.org/nav")
        assert payload["query"] == "barrier=B2"
        assert payload["share_url"] == "https://x.org/nav?barrier=B2"
        assert payload["summary"]["total"] == 5
        assert payload["summary"]["visible"] == 2
        assert payload["summary"]["active_filters"] == ["barrier"]
        assert [r["id"] for r in payload["resources"]] == ["r1", "r2"]
        assert payload["empty_message"] is None
        json.dumps(payload)

    def test_visible_counts_on_themes(self, catalog):
        payload = compute_navigator(catalog, SelectionState(search_text="data"))
        visible = {t["id"]: t["visible"] for t in payload["themes"]}
        assert visible == {"T1": 2, "T2": 0}

    def test_personas_flagged(self, catalog):
        payload = compute_navigator(catalog, SelectionState(selected_personas=frozenset({"Policy"})))
        flags = {p["id"]: p["selected"] for p in payload["personas"]}
        assert flags == {"Analyst": False, "Policy": True, "Project": False, "Technical": False}
        assert payload["selection"]["selected_personas"] == ["Policy"]

    def test_empty_result_message(self, catalog):
        payload = compute_navigator(catalog, SelectionState(search_text="no such thing"))
        assert payload["resources"] == []
        assert payload["empty_message"] == EMPTY_MESSAGE

    def test_empty_catalog_message(self):
        payload = compute_navigator(build_catalog([]), SelectionState())
        assert payload["empty_message"] == "The resource catalog is empty."


class TestSelectionChips:
    def test_defaults(self, catalog):
        assert format_selection_chips(catalog, SelectionState()) == ["Theme: All", "Personas: All"]

    def test_barrier_and_search(self, catalog):
        state = SelectionState(selected_barrier="B3", search_text="  skills ", selected_personas=frozenset({"Project"}))
        assert format_selection_chips(catalog, state) == [
            "Barrier: Lack of training",
            "Personas: Project",
            "Search: skills",
        ]
