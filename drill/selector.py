"""加权选择器：按表现权重抽取下一道题。

- 数据不足时（没有题目达到最少作答次数，也没有恰好作答一次的题目）退化为均匀随机
- 否则调用 compute_weights 得到概率分布，做累积分布采样
- 随机源可注入（random.Random 实例），便于测试固定结果
"""

import logging
import random
from typing import Optional, Sequence

from .config import SelectionParams
from .models import PerformanceSnapshot
from .weights import compute_weights

logger = logging.getLogger(__name__)


def has_adaptive_signal(
    items: Sequence[int],
    performance: PerformanceSnapshot,
    params: SelectionParams,
) -> bool:
    for item in items:
        rec = performance.get(item)
        if rec is None:
            continue
        if rec.total >= params.min_attempts_for_adaptive or rec.total == 1:
            return True
    return False


def select_next(
    items: Sequence[int],
    performance: PerformanceSnapshot,
    params: SelectionParams = SelectionParams(),
    rng: Optional[random.Random] = None,
) -> int:
    """从 items 中抽取一个题号。

    Raises:
        ValueError: items 为空（调用方违约，不返回伪造的题号）
    """
    if not items:
        raise ValueError("cannot select from an empty item set")
    if rng is None:
        rng = random  # type: ignore[assignment]

    if not has_adaptive_signal(items, performance, params):
        logger.debug("no adaptive signal among %d items, falling back to uniform", len(items))
        return rng.choice(items)

    weights = compute_weights(items, performance, params)
    return _cumulative_draw(items, [weights[item] for item in items], rng.random())


def _cumulative_draw(items: Sequence[int], probs: Sequence[float], r: float) -> int:
    acc = 0.0
    for item, p in zip(items, probs):
        acc += p
        if p > 0 and acc >= r:
            return item
    # 浮点舍入导致累计值略小于 r 时，返回最后一项
    return items[-1]


class Selector:
    """绑定参数与随机源的选择器，供会话层重复调用。"""

    def __init__(self, params: SelectionParams = SelectionParams(), rng: Optional[random.Random] = None):
        self.params = params
        self.rng = rng or random.Random()

    def weights(self, items: Sequence[int], performance: PerformanceSnapshot):
        return compute_weights(items, performance, self.params)

    def choose(self, items: Sequence[int], performance: PerformanceSnapshot) -> int:
        return select_next(items, performance, self.params, self.rng)
