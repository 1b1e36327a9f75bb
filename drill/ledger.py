"""表现台账与答题历史的纯函数更新。

每次作答：总次数 +1；判定正确时答对次数 +1（空提交算作一次错误作答）。
返回新的快照，不修改传入的映射。
"""

import time
from typing import Dict, Optional, Sequence, Tuple

from .models import AnswerRecord, PerformanceRecord, PerformanceSnapshot


def now_ms() -> int:
    return int(time.time() * 1000)


def apply_attempt(
    record: Optional[PerformanceRecord],
    item_id: int,
    correct: bool,
    ts_ms: Optional[int] = None,
) -> PerformanceRecord:
    if ts_ms is None:
        ts_ms = now_ms()
    if record is None:
        return PerformanceRecord(item_id=item_id, correct=int(bool(correct)), total=1, last_seen_ms=ts_ms)
    return PerformanceRecord(
        item_id=item_id,
        correct=record.correct + (1 if correct else 0),
        total=record.total + 1,
        last_seen_ms=ts_ms,
    )


def record_attempt(
    performance: PerformanceSnapshot,
    item_id: int,
    correct: bool,
    ts_ms: Optional[int] = None,
) -> Dict[int, PerformanceRecord]:
    updated = dict(performance)
    updated[item_id] = apply_attempt(performance.get(item_id), item_id, correct, ts_ms)
    return updated


def append_history(
    history: Sequence[AnswerRecord],
    answer: AnswerRecord,
    max_entries: int,
) -> Tuple[AnswerRecord, ...]:
    """追加一条记录，只保留最近 max_entries 条。"""
    return (tuple(history) + (answer,))[-max_entries:]
