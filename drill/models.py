"""自适应练习流程所用的数据模型。

- PerformanceRecord：单个题目的累计表现（答对次数 / 总次数）
- AnswerRecord：一次提交的简记录（题号 + 正误 + 作答 + 时间戳）
- RangeState：可练习范围 + 最近答题正误窗口
- LearnerState：学习者的完整状态快照，每一轮作为值传入并返回
- RoundResult：一轮结束后交给界面层的结果

所有模型均为不可变数据类；状态变更通过生成新对象完成。
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class PerformanceRecord:
    item_id: int
    correct: int = 0
    total: int = 0
    last_seen_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.correct < 0 or self.total < 0 or self.correct > self.total:
            raise ValueError(
                f"invalid counters for item {self.item_id}: correct={self.correct} total={self.total}"
            )

    @property
    def is_untested(self) -> bool:
        return self.total == 0

    @property
    def success_rate(self) -> Optional[float]:
        """未测试的题目返回 None，调用方需走"未测试"分支。"""
        if self.total == 0:
            return None
        return self.correct / self.total


@dataclass(frozen=True)
class AnswerRecord:
    item_id: int
    is_correct: bool
    response: str
    ts_ms: int


@dataclass(frozen=True)
class RangeState:
    eligible_range: int
    window: Tuple[bool, ...] = ()

    @property
    def window_success_rate(self) -> Optional[float]:
        if not self.window:
            return None
        return sum(self.window) / len(self.window)


@dataclass(frozen=True)
class LearnerState:
    performance: Mapping[int, PerformanceRecord]
    range_state: RangeState
    history: Tuple[AnswerRecord, ...] = ()
    correct_answers: int = 0
    total_attempted: int = 0
    total_seen: int = 0
    current_item: Optional[int] = None

    @property
    def eligible_range(self) -> int:
        return self.range_state.eligible_range

    @property
    def incorrect_answers(self) -> Tuple[AnswerRecord, ...]:
        return tuple(a for a in self.history if not a.is_correct)

    @property
    def accuracy(self) -> float:
        if self.total_attempted == 0:
            return 0.0
        return self.correct_answers / self.total_attempted


@dataclass(frozen=True)
class RoundResult:
    answer: AnswerRecord
    next_item: int
    eligible_range: int
    expanded: bool
    state: LearnerState = field(repr=False)


PerformanceSnapshot = Mapping[int, PerformanceRecord]


def index_by_item(records) -> Dict[int, PerformanceRecord]:
    """把持久化的记录列表转换为以题号为键的快照（同一题号保留最后一条）。"""
    return {rec.item_id: rec for rec in records}
