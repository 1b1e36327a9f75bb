"""抽题权重计算。

流程（纯函数管道，不修改输入）：
1. partition：按表现把可练习题目分为 U（未测试或正确率低于阈值）与 S（已掌握）
2. base_weight：未测试 → 固定最大权重；已测试 → (1 - 正确率)^指数 × 次数衰减，并设保底
3. 组内归一化：U 组总和为 selection_split，S 组总和为 1 - selection_split
4. 全局归一化：除以总和，保证结果之和为 1（空组的概率由另一组吸收）

保底权重保证已掌握的题目偶尔仍会出现，任何题目都不会被完全饿死。
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .config import SelectionParams
from .models import PerformanceRecord, PerformanceSnapshot


def is_unsuccessful(record: Optional[PerformanceRecord], params: SelectionParams) -> bool:
    """未测试的题目也算作"未掌握"。"""
    if record is None or record.is_untested:
        return True
    return record.correct / record.total < params.unsuccessful_threshold


def partition(
    items: Sequence[int],
    performance: PerformanceSnapshot,
    params: SelectionParams,
) -> Tuple[List[int], List[int]]:
    unsuccessful: List[int] = []
    successful: List[int] = []
    for item in items:
        if is_unsuccessful(performance.get(item), params):
            unsuccessful.append(item)
        else:
            successful.append(item)
    return unsuccessful, successful


def base_weight(record: Optional[PerformanceRecord], params: SelectionParams) -> float:
    """单题的原始权重（未归一化）。

    正确率越低、错得越"重"，权重越高；练习次数多时按 attempt_penalty 衰减，
    避免单个反复做错的题目长期霸占抽题。
    """
    if record is None or record.is_untested:
        return params.untested_weight

    rate = record.correct / record.total
    weight = params.untested_weight * (1.0 - rate) ** params.failure_exponent
    weight /= 1.0 + params.attempt_penalty * (record.total - 1)
    return max(weight, params.successful_floor)


def _scale_group(weights: Dict[int, float], mass: float) -> Dict[int, float]:
    total = sum(weights.values())
    if not weights or total <= 0:
        return {}
    return {item: w / total * mass for item, w in weights.items()}


def compute_weights(
    items: Sequence[int],
    performance: PerformanceSnapshot,
    params: SelectionParams = SelectionParams(),
) -> Dict[int, float]:
    """返回 {题号: 被抽中概率}，按 items 的顺序排列，概率之和为 1。

    Raises:
        ValueError: items 为空
    """
    if not items:
        raise ValueError("cannot compute weights for an empty item set")
    if len(items) == 1:
        return {items[0]: 1.0}

    unsuccessful, successful = partition(items, performance, params)
    grouped = {}
    grouped.update(
        _scale_group(
            {item: base_weight(performance.get(item), params) for item in unsuccessful},
            params.selection_split,
        )
    )
    grouped.update(
        _scale_group(
            {item: base_weight(performance.get(item), params) for item in successful},
            1.0 - params.selection_split,
        )
    )

    grand_total = sum(grouped.values())
    if grand_total <= 0:
        # selection_split 为 0 或 1 且另一组为空时退化为均匀分布
        return {item: 1.0 / len(items) for item in items}
    return {item: grouped.get(item, 0.0) / grand_total for item in items}
