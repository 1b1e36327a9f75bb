"""Tests for ledger.py and the PerformanceRecord model."""

import pytest

from drill.ledger import append_history, apply_attempt, record_attempt
from drill.models import AnswerRecord, PerformanceRecord, index_by_item


class TestPerformanceRecord:
    def test_untested_has_no_rate(self) -> None:
        assert PerformanceRecord(0).success_rate is None
        assert PerformanceRecord(0).is_untested

    def test_rate(self) -> None:
        assert PerformanceRecord(0, correct=3, total=4).success_rate == 0.75

    @pytest.mark.parametrize("correct,total", [(-1, 2), (3, 2), (0, -1)])
    def test_rejects_bad_counters(self, correct: int, total: int) -> None:
        with pytest.raises(ValueError):
            PerformanceRecord(0, correct=correct, total=total)


class TestRecordAttempt:
    def test_first_attempt_creates_record(self) -> None:
        assert apply_attempt(None, 5, True, ts_ms=9) == PerformanceRecord(5, 1, 1, 9)

    def test_wrong_attempt_only_bumps_total(self) -> None:
        rec = apply_attempt(PerformanceRecord(5, 2, 3, 1), 5, False, ts_ms=9)
        assert (rec.correct, rec.total, rec.last_seen_ms) == (2, 4, 9)

    def test_returns_new_snapshot(self) -> None:
        perf = {1: PerformanceRecord(1, 1, 1)}
        updated = record_attempt(perf, 2, True, ts_ms=1)
        assert set(updated) == {1, 2}
        assert set(perf) == {1}

    def test_index_by_item(self) -> None:
        recs = [PerformanceRecord(3, 1, 2), PerformanceRecord(1, 0, 1)]
        assert index_by_item(recs) == {3: recs[0], 1: recs[1]}


class TestAppendHistory:
    def test_drops_oldest(self) -> None:
        history = tuple(AnswerRecord(i, True, "", i) for i in range(3))
        new = append_history(history, AnswerRecord(9, False, "", 9), max_entries=3)
        assert [a.item_id for a in new] == [1, 2, 9]
