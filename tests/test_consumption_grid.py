"""Tests for energy_balance.consumption_grid module."""

import pytest

from energy_balance.config import DAY_NAMES, SLOTS_PER_WEEK
from energy_balance.consumption_grid import (
    ALL_KEYS,
    GridKey,
    completion_stats,
    copy_day_pattern,
    daily_totals,
    decode_key,
    default_week_pattern,
    empty_grid,
    encode_key,
    fill_hour_pattern,
    fill_range,
    get_value,
    grid_to_frame,
    grid_to_profile,
    parse_consumption_value,
    profile_stats,
    set_value,
    slots_to_grid,
    to_slot_list,
    weekly_total,
)
from energy_balance.models import ConsumptionSlot
from energy_balance.validation import ValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_week(value=1.0, location_id="loc-1"):
    """All 168 slots with the same consumption value."""
    return [ConsumptionSlot(location_id, d, h, value)
            for d in range(7) for h in range(24)]


# ---------------------------------------------------------------------------
# TestGridKeys
# ---------------------------------------------------------------------------

class TestGridKeys:
    def test_encode(self):
        assert encode_key(0, 12) == "0_12"
        assert encode_key(6, 23) == "6_23"

    @pytest.mark.parametrize("day, hour", [(-1, 0), (7, 0), (0, -1), (0, 24), (1.5, 2), (True, 3)])
    def test_encode_rejects_out_of_range(self, day, hour):
        with pytest.raises(ValidationError):
            encode_key(day, hour)

    def test_round_trip_all_cells(self):
        for day in range(7):
            for hour in range(24):
                assert decode_key(encode_key(day, hour)) == (day, hour)

    def test_decode_returns_grid_key(self):
        key = decode_key("3_14")
        assert isinstance(key, GridKey)
        assert key.day == 3
        assert key.hour == 14

    @pytest.mark.parametrize("key", [
        "7_0", "0_24", "abc_1", "1", "1_2_3", "", "_", "1_", "-1_3",
        "1.5_2", " 1_2", None, 12,
    ])
    def test_decode_malformed_returns_none(self, key):
        assert decode_key(key) is None

    def test_grid_key_str(self):
        assert str(GridKey(2, 7)) == "2_7"

    def test_grid_key_of_validates(self):
        with pytest.raises(ValidationError):
            GridKey.of(0, 24)

    def test_all_keys_complete(self):
        assert len(ALL_KEYS) == SLOTS_PER_WEEK
        assert len(set(ALL_KEYS)) == SLOTS_PER_WEEK


# ---------------------------------------------------------------------------
# TestToSlotList
# ---------------------------------------------------------------------------

class TestToSlotList:
    def test_nested_mapping_sparse(self):
        grid = {1: {8: 2.5, 9: 3.0}, 0: {0: 0.4}}
        slots = to_slot_list(grid, "loc-1")
        assert [(s.day_of_week, s.hour, s.consumption_kwh) for s in slots] == [
            (0, 0, 0.4), (1, 8, 2.5), (1, 9, 3.0),
        ]
        assert all(s.location_id == "loc-1" for s in slots)

    def test_missing_cells_not_zero_filled(self):
        slots = to_slot_list({2: {5: 1.0}})
        assert len(slots) == 1

    def test_none_values_omitted(self):
        slots = to_slot_list({2: {5: None, 6: 0.0}})
        assert [(s.hour, s.consumption_kwh) for s in slots] == [(6, 0.0)]

    def test_string_keyed_grid(self):
        slots = to_slot_list({"0_12": 1.5, "6_23": 2.0})
        assert [(s.day_of_week, s.hour) for s in slots] == [(0, 12), (6, 23)]

    def test_grid_key_keyed_grid(self):
        slots = to_slot_list({GridKey(4, 4): 0.7})
        assert slots[0].consumption_kwh == 0.7

    def test_invalid_string_key_raises(self):
        with pytest.raises(ValidationError):
            to_slot_list({"9_9": 1.0})

    def test_negative_value_raises(self):
        with pytest.raises(ValidationError):
            to_slot_list({0: {0: -1.0}})


# ---------------------------------------------------------------------------
# TestCompletionStats
# ---------------------------------------------------------------------------

class TestCompletionStats:
    def test_all_zero_week_not_complete(self):
        stats = completion_stats(_make_week(0.0))
        assert stats["actual_count"] == 168
        assert stats["values_present_count"] == 0
        assert stats["completion_percentage"] == 0.0
        assert stats["is_complete"] is False

    def test_full_week_with_values_complete(self):
        slots = _make_week(0.0)
        slots[:42] = [ConsumptionSlot("loc-1", s.day_of_week, s.hour, 1.2)
                      for s in slots[:42]]
        stats = completion_stats(slots)
        assert stats["is_complete"] is True
        assert stats["values_present_count"] == 42
        assert stats["completion_percentage"] == pytest.approx(100 * 42 / 168)

    def test_single_positive_value_completes(self):
        slots = _make_week(0.0)
        slots[100] = ConsumptionSlot("loc-1", slots[100].day_of_week,
                                     slots[100].hour, 0.1)
        assert completion_stats(slots)["is_complete"] is True

    def test_partial_week_not_complete(self):
        slots = _make_week(1.0)[:167]
        stats = completion_stats(slots)
        assert stats["is_complete"] is False
        assert stats["completion_percentage"] == pytest.approx(100 * 167 / 168)

    def test_empty(self):
        stats = completion_stats([])
        assert stats == {
            "actual_count": 0,
            "values_present_count": 0,
            "completion_percentage": 0.0,
            "is_complete": False,
        }

    def test_profile_stats_totals(self):
        stats = profile_stats(_make_week(0.5))
        assert stats["weekly_total"] == pytest.approx(84.0)
        assert stats["daily_average"] == pytest.approx(12.0)
        assert stats["hourly_peak"] == 0.5
        assert stats["is_complete"] is True

    def test_profile_stats_empty(self):
        stats = profile_stats([])
        assert stats["weekly_total"] == 0.0
        assert stats["hourly_peak"] == 0.0


# ---------------------------------------------------------------------------
# TestGridEditing
# ---------------------------------------------------------------------------

class TestGridEditing:
    def test_slots_to_grid_fills_zero(self):
        grid = slots_to_grid([ConsumptionSlot("x", 1, 2, 3.0)])
        assert len(grid) == 168
        assert grid[GridKey(1, 2)] == 3.0
        assert grid[GridKey(0, 0)] == 0.0

    def test_grid_to_profile_is_full_batch(self):
        slots = grid_to_profile({"1_2": 3.0}, "loc-9")
        assert len(slots) == 168
        assert all(s.location_id == "loc-9" for s in slots)
        assert sum(s.consumption_kwh for s in slots) == pytest.approx(3.0)

    def test_set_value_clamps_negative(self):
        grid = set_value(empty_grid(), 3, 4, -2.0)
        assert get_value(grid, 3, 4) == 0.0

    def test_set_value_returns_copy(self):
        original = empty_grid()
        updated = set_value(original, 0, 0, 1.5)
        assert original[GridKey(0, 0)] == 0.0
        assert updated[GridKey(0, 0)] == 1.5

    def test_copy_day_pattern(self):
        grid = default_week_pattern()
        copied = copy_day_pattern(grid, 0, 3)
        for hour in range(24):
            assert copied[GridKey(3, hour)] == grid[GridKey(0, hour)]

    def test_fill_hour_pattern(self):
        grid = fill_hour_pattern(empty_grid(), 18, 4.0)
        assert [grid[GridKey(d, 18)] for d in range(7)] == [4.0] * 7
        assert weekly_total(grid) == pytest.approx(28.0)

    def test_fill_range_spans_days(self):
        grid = fill_range(empty_grid(), 1, 22, 2, 1, 1.0)
        filled = sorted(k for k, v in grid.items() if v == 1.0)
        assert filled == [(1, 22), (1, 23), (2, 0), (2, 1)]

    def test_default_pattern_weekend_differs(self):
        grid = default_week_pattern()
        totals = daily_totals(grid)
        assert len(totals) == 7
        assert totals[0] == pytest.approx(totals[6])
        assert totals[1] == pytest.approx(totals[5])
        assert totals[0] != pytest.approx(totals[1])

    @pytest.mark.parametrize("text, expected", [
        ("1,5", 1.5), ("2.25", 2.25), ("abc", 0.0), ("-1", 0.0),
        ("150", 0.0), ("", 0.0),
    ])
    def test_parse_consumption_value(self, text, expected):
        assert parse_consumption_value(text) == pytest.approx(expected)

    def test_grid_to_frame_shape(self):
        frame = grid_to_frame(set_value(empty_grid(), 0, 7, 2.0))
        assert frame.shape == (24, 7)
        assert list(frame.columns) == DAY_NAMES
        assert frame.loc[7, "Sunday"] == 2.0
        assert frame.values.sum() == pytest.approx(2.0)
