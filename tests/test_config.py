"""Tests for config.py — defaults and validation."""

from dataclasses import replace

import pytest

from drill.config import AdaptiveParams, HistoryParams, RangeParams, SelectionParams


class TestDefaults:
    def test_selection_defaults(self) -> None:
        p = SelectionParams()
        assert p.selection_split == 0.8
        assert p.unsuccessful_threshold == 0.5
        assert p.failure_exponent == 2.0
        assert p.successful_floor == 0.01

    def test_range_defaults(self) -> None:
        p = RangeParams()
        assert (p.initial_range, p.window_size, p.success_threshold, p.expansion_amount) == (100, 10, 0.8, 10)

    def test_bundle(self) -> None:
        p = AdaptiveParams()
        assert p.history.max_history_entries == 100
        assert p.range == RangeParams()


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"selection_split": 1.2},
            {"unsuccessful_threshold": -0.1},
            {"successful_floor": 0.0},
            {"successful_floor": 2.0},
            {"successful_floor": 1.0},
            {"untested_weight": 0.5, "successful_floor": 0.5},
            {"min_attempts_for_adaptive": 0},
            {"attempt_penalty": -1.0},
        ],
    )
    def test_bad_selection_params(self, overrides) -> None:
        with pytest.raises(ValueError):
            replace(SelectionParams(), **overrides)

    @pytest.mark.parametrize("overrides", [{"window_size": 0}, {"initial_range": 0}, {"success_threshold": 1.5}])
    def test_bad_range_params(self, overrides) -> None:
        with pytest.raises(ValueError):
            RangeParams(**overrides)

    def test_bad_history_params(self) -> None:
        with pytest.raises(ValueError):
            HistoryParams(max_history_entries=0)
