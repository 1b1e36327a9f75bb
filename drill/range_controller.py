"""可练习范围控制器。

维护一个固定长度的最近答题正误窗口（先进先出），窗口填满且正确率达到阈值时，
把可练习范围 [0, R) 扩大固定数量（不超过题库大小）。扩展后清空窗口，
下一次扩展需要重新积累一整个窗口的答题结果。

窗口只记录正误，与具体题目无关。
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import RangeParams
from .models import RangeState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RangeOutcome:
    state: RangeState
    expanded: bool

    @property
    def new_range(self) -> int:
        return self.state.eligible_range


def _check_catalog(catalog_size: int) -> None:
    if catalog_size < 1:
        raise ValueError(f"catalog_size must be >= 1, got {catalog_size}")


def reset_range(catalog_size: int, params: RangeParams = RangeParams()) -> RangeState:
    _check_catalog(catalog_size)
    return RangeState(eligible_range=min(params.initial_range, catalog_size), window=())


def initial_range_state(
    saved_range: Optional[int],
    saved_window: Iterable[bool],
    catalog_size: int,
    params: RangeParams = RangeParams(),
) -> RangeState:
    """由持久化的值恢复状态；缺失的范围回落到初始值，过期的范围夹到 [1, catalog_size]。"""
    _check_catalog(catalog_size)
    if saved_range is None:
        eligible = min(params.initial_range, catalog_size)
    else:
        eligible = max(1, min(saved_range, catalog_size))
    window = tuple(bool(x) for x in saved_window)[-params.window_size:]
    return RangeState(eligible_range=eligible, window=window)


def record_outcome(
    state: RangeState,
    correct: bool,
    catalog_size: int,
    params: RangeParams = RangeParams(),
) -> RangeOutcome:
    _check_catalog(catalog_size)
    window = (state.window + (bool(correct),))[-params.window_size:]
    current = min(state.eligible_range, catalog_size)

    if len(window) < params.window_size:
        return RangeOutcome(RangeState(current, window), expanded=False)

    rate = sum(window) / len(window)
    if rate < params.success_threshold:
        return RangeOutcome(RangeState(current, window), expanded=False)

    grown = min(current + params.expansion_amount, catalog_size)
    logger.info("recent accuracy %.0f%%, eligible range %d -> %d", rate * 100, current, grown)
    return RangeOutcome(RangeState(grown, ()), expanded=True)


class RangeController:
    """把纯函数与持久化存储连接起来：每次评估后无条件保存范围与窗口。"""

    def __init__(self, store, catalog_size: int, params: RangeParams = RangeParams()):
        self.store = store
        self.catalog_size = catalog_size
        self.params = params
        self.state = initial_range_state(
            store.load_eligible_range(), store.load_recent_window(), catalog_size, params
        )

    @property
    def eligible_range(self) -> int:
        return self.state.eligible_range

    def record_outcome(self, correct: bool) -> RangeOutcome:
        outcome = record_outcome(self.state, correct, self.catalog_size, self.params)
        self.state = outcome.state
        self.store.save_eligible_range(outcome.new_range)
        self.store.save_recent_window(outcome.state.window)
        return outcome

    def reset_range(self, catalog_size: Optional[int] = None) -> RangeState:
        if catalog_size is not None:
            self.catalog_size = catalog_size
        self.state = reset_range(self.catalog_size, self.params)
        self.store.save_eligible_range(self.state.eligible_range)
        self.store.save_recent_window(self.state.window)
        logger.info("eligible range reset to %d", self.state.eligible_range)
        return self.state
