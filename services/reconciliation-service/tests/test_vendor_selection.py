"""Tests for vendor_selection.py - selecting, toggling and cleaning up vendor choices."""

import copy

import pytest
from store_adapter import normalize_selected_vendors
from vendor_selection import (
    cleanup_orphans,
    is_selected,
    select,
    selection_ids,
    selection_summary,
    toggle_selection,
    unselect,
    unselect_all,
    valid_selection,
)
from wedding_model import Vendor


def make_vendor(vendor_id: str, contract_price: float, service_type: str = "Catering") -> Vendor:
    return Vendor(id=vendor_id, service_type=service_type, name=f"Vendor {vendor_id}", contract_price=contract_price)


class TestSelectAndUnselect:
    def test_select_creates_unknown_service_type(self):
        assert select({}, "Florist", "v9") == {"Florist": ["v9"]}

    def test_select_is_a_noop_when_already_selected(self):
        selected = {"Catering": ["v1"]}

        assert select(selected, "Catering", "v1") == {"Catering": ["v1"]}

    def test_select_allows_several_vendors_per_type(self):
        selected = select(select({}, "Catering", "v1"), "Catering", "v2")

        assert selected == {"Catering": ["v1", "v2"]}

    def test_select_does_not_mutate_input(self):
        selected = {"Catering": ["v1"]}
        snapshot = copy.deepcopy(selected)

        select(selected, "Catering", "v2")

        assert selected == snapshot

    def test_select_with_blank_ids_is_a_noop(self):
        selected = {"Catering": ["v1"]}

        assert select(selected, "", "v2") == selected
        assert select(selected, "Catering", "") == selected

    def test_scenario_unselect_last_vendor_removes_service_type(self):
        result = unselect({"Catering": ["v1"]}, "Catering", "v1")

        assert result == {}
        assert "Catering" not in result

    def test_unselect_keeps_remaining_vendors(self):
        assert unselect({"Catering": ["v1", "v2"]}, "Catering", "v1") == {"Catering": ["v2"]}

    def test_unselect_unknown_vendor_is_a_noop(self):
        selected = {"Catering": ["v1"]}

        assert unselect(selected, "Catering", "v2") == selected
        assert unselect(selected, "Photo", "v1") == selected

    def test_unselect_all_drops_the_whole_service_type(self):
        selected = {"Catering": ["v1", "v2"], "Photo": ["v3"]}

        assert unselect_all(selected, "Catering") == {"Photo": ["v3"]}

    def test_is_selected_reads_legacy_single_id(self):
        assert is_selected({"Catering": "v1"}, "Catering", "v1") is True
        assert is_selected({"Catering": "v1"}, "Catering", "v2") is False
        assert is_selected(None, "Catering", "v1") is False


class TestToggleSelection:
    def test_toggle_selects_then_unselects(self):
        selected = toggle_selection({}, "Catering", "v1")
        assert selected == {"Catering": ["v1"]}

        assert toggle_selection(selected, "Catering", "v1") == {}

    @pytest.mark.parametrize(
        "start",
        [
            {},
            {"Catering": ["v1"]},
            {"Catering": ["v2", "v3"], "Photo": ["v4"]},
        ],
    )
    def test_toggling_an_unselected_vendor_twice_restores_the_mapping(self, start):
        assert toggle_selection(toggle_selection(start, "Catering", "v1-new"), "Catering", "v1-new") == start

    @pytest.mark.parametrize(
        "start",
        [
            {"Catering": ["v1", "v2"]},
            {"Catering": ["v1"], "Photo": ["v4"]},
        ],
    )
    def test_toggling_a_selected_vendor_twice_restores_the_mapping(self, start):
        assert toggle_selection(toggle_selection(start, "Catering", "v1"), "Catering", "v1") == start

    def test_selected_ids_stay_sorted_whatever_the_click_order(self):
        selected = select(select({}, "Catering", "v9"), "Catering", "v1")

        assert selected == {"Catering": ["v1", "v9"]}
        assert select({"Catering": ["v9", "v1"]}, "Catering", "v5") == {"Catering": ["v1", "v5", "v9"]}


class TestCleanupOrphans:
    def test_scenario_removes_deleted_vendor(self):
        result = cleanup_orphans({"Catering": ["v1", "v2"]}, {"v1"})

        assert result.selected == {"Catering": ["v1"]}
        assert result.removed_count == 1

    def test_drops_entries_left_empty(self):
        result = cleanup_orphans({"Catering": ["v1"], "Photo": ["gone-1", "gone-2"]}, {"v1"})

        assert result.selected == {"Catering": ["v1"]}
        assert result.removed_count == 2

    def test_is_idempotent(self):
        first = cleanup_orphans({"Catering": ["v1", "v2"], "Photo": ["v3"]}, {"v1"})
        second = cleanup_orphans(first.selected, {"v1"})

        assert second.selected == first.selected
        assert second.removed_count == 0

    def test_does_not_mutate_input(self):
        selected = {"Catering": ["v1", "v2"]}

        cleanup_orphans(selected, set())

        assert selected == {"Catering": ["v1", "v2"]}

    def test_reads_legacy_single_id_entries(self):
        result = cleanup_orphans({"Catering": "v1", "Photo": "gone"}, ["v1"])

        assert result.selected == {"Catering": ["v1"]}
        assert result.removed_count == 1


def test_valid_selection_filters_orphans_on_read():
    selected = {"Catering": ["v1", "ghost", "v2"]}

    assert valid_selection(selected, "Catering", {"v1", "v2"}) == ["v1", "v2"]
    assert selected == {"Catering": ["v1", "ghost", "v2"]}


def test_selection_ids_tolerates_both_shapes_and_garbage():
    assert selection_ids("v1") == ["v1"]
    assert selection_ids(["v2", "v1", "v2", None, 3, ""]) == ["v1", "v2"]
    assert selection_ids(None) == []
    assert selection_ids({"nested": "object"}) == []


def test_scenario_legacy_selection_round_trip():
    normalized = normalize_selected_vendors({"Catering": "v1"})
    assert normalized == {"Catering": ["v1"]}

    assert select(normalized, "Catering", "v2") == {"Catering": ["v1", "v2"]}


def test_selection_summary_totals_resolved_vendors_and_reports_orphans():
    vendors = [make_vendor("v1", 20000.0), make_vendor("v2", 15000.5, service_type="Photo")]
    selected = {"Catering": ["v1", "ghost"], "Photo": ["v2"]}

    summary = selection_summary(selected, vendors)

    assert [(line.service_type, line.vendor.id) for line in summary.lines] == [("Catering", "v1"), ("Photo", "v2")]
    assert summary.total_contract_price == pytest.approx(35000.5)
    assert summary.orphaned_ids == ["ghost"]


def test_selection_summary_of_nothing_is_empty():
    summary = selection_summary({}, [make_vendor("v1", 100.0)])

    assert summary.lines == []
    assert summary.total_contract_price == 0.0
