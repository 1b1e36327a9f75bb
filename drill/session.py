"""练习会话：把一轮作答串成完整流程。

每一轮：
1. 记录作答（台账 +1，历史追加，计数器更新）
2. 正误进入最近窗口，必要时扩大可练习范围
3. 用最新台账在 [0, 范围) 上加权抽取下一题
4. 持久化全部状态

advance() 是纯函数：接收 LearnerState，返回包含新状态的 RoundResult；
PracticeSession 负责加载/保存，非线程安全，并发场景需由宿主层加锁。
"""

import logging
import random
from dataclasses import replace
from typing import Optional

from .config import AdaptiveParams
from .ledger import append_history, now_ms, record_attempt
from .models import AnswerRecord, LearnerState, RoundResult
from .range_controller import record_outcome, reset_range
from .selector import select_next

logger = logging.getLogger(__name__)


def new_state(catalog_size: int, params: AdaptiveParams = AdaptiveParams()) -> LearnerState:
    return LearnerState(performance={}, range_state=reset_range(catalog_size, params.range))


def _check_item(item_id: int, catalog_size: int) -> None:
    if not 0 <= item_id < catalog_size:
        raise ValueError(f"item {item_id} outside catalog of size {catalog_size}")


def present_next(
    state: LearnerState,
    params: AdaptiveParams = AdaptiveParams(),
    rng: Optional[random.Random] = None,
) -> LearnerState:
    """抽取下一题并计入"已展示"次数。"""
    item = select_next(range(state.eligible_range), state.performance, params.selection, rng)
    return replace(state, current_item=item, total_seen=state.total_seen + 1)


def advance(
    state: LearnerState,
    item_id: int,
    correct: bool,
    catalog_size: int,
    params: AdaptiveParams = AdaptiveParams(),
    rng: Optional[random.Random] = None,
    response: str = "",
    ts_ms: Optional[int] = None,
) -> RoundResult:
    """处理一次作答，返回下一题与新状态。

    空提交（response 为空）由调用方判为错误，这里照常计为一次作答。
    """
    _check_item(item_id, catalog_size)
    if ts_ms is None:
        ts_ms = now_ms()

    answer = AnswerRecord(item_id=item_id, is_correct=bool(correct), response=response, ts_ms=ts_ms)
    performance = record_attempt(state.performance, item_id, correct, ts_ms)
    outcome = record_outcome(state.range_state, correct, catalog_size, params.range)

    updated = replace(
        state,
        performance=performance,
        range_state=outcome.state,
        history=append_history(state.history, answer, params.history.max_history_entries),
        correct_answers=state.correct_answers + (1 if correct else 0),
        total_attempted=state.total_attempted + 1,
    )
    updated = present_next(updated, params, rng)
    return RoundResult(
        answer=answer,
        next_item=updated.current_item,
        eligible_range=outcome.new_range,
        expanded=outcome.expanded,
        state=updated,
    )


class PracticeSession:
    """有状态的会话包装：从存储恢复，每轮结束后整体保存。"""

    def __init__(
        self,
        store,
        catalog_size: int,
        params: AdaptiveParams = AdaptiveParams(),
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.catalog_size = catalog_size
        self.params = params
        self.rng = rng or random.Random()
        self.state = store.load_state(catalog_size, params)

    @property
    def current_item(self) -> Optional[int]:
        return self.state.current_item

    def start(self) -> int:
        """返回当前题目；若尚无当前题，先抽取一道。"""
        if self.state.current_item is None:
            self.state = present_next(self.state, self.params, self.rng)
            self.store.save_state(self.state)
        return self.state.current_item

    def submit(self, item_id: int, correct: bool, response: str = "") -> RoundResult:
        result = advance(
            self.state, item_id, correct, self.catalog_size, self.params, self.rng, response=response
        )
        self.state = result.state
        self.store.save_state(self.state)
        if result.expanded:
            logger.info("practice range expanded to %d items", result.eligible_range)
        return result

    def reset(self) -> int:
        """清空全部学习数据，范围回到初始值，并抽取新的第一题。"""
        self.store.reset_all()
        self.state = new_state(self.catalog_size, self.params)
        return self.start()
