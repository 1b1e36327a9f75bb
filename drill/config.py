"""自适应练习配置。

集中管理可调参数：
- SelectionParams：加权抽题（分组阈值、权重指数、保底权重、分组概率）
- RangeParams：可练习范围的初始值与扩展条件
- HistoryParams：答题历史的保留条数
- FilesConfig：状态文件默认路径

仅包含常量/数据类，应用可直接导入使用；覆盖参数请用 dataclasses.replace。
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SelectionParams:
    min_attempts_for_adaptive: int = 3
    unsuccessful_threshold: float = 0.5  # 正确率低于该值归入"未掌握"组
    untested_weight: float = 1.0
    failure_exponent: float = 2.0
    attempt_penalty: float = 0.05  # 做得越多，单题权重衰减越多
    successful_floor: float = 0.01
    selection_split: float = 0.8  # 未掌握/未测试组的总概率

    def __post_init__(self) -> None:
        if self.min_attempts_for_adaptive < 1:
            raise ValueError("min_attempts_for_adaptive must be >= 1")
        if not 0.0 <= self.unsuccessful_threshold <= 1.0:
            raise ValueError("unsuccessful_threshold must be within [0, 1]")
        if not 0.0 <= self.selection_split <= 1.0:
            raise ValueError("selection_split must be within [0, 1]")
        if self.untested_weight <= 0 or self.successful_floor <= 0:
            raise ValueError("untested_weight and successful_floor must be positive")
        if self.successful_floor >= self.untested_weight:
            raise ValueError("successful_floor must be below untested_weight")
        if self.failure_exponent <= 0 or self.attempt_penalty < 0:
            raise ValueError("failure_exponent must be positive and attempt_penalty non-negative")


@dataclass(frozen=True)
class RangeParams:
    initial_range: int = 100
    window_size: int = 10
    success_threshold: float = 0.8
    expansion_amount: int = 10

    def __post_init__(self) -> None:
        if self.initial_range < 1 or self.window_size < 1 or self.expansion_amount < 1:
            raise ValueError("initial_range, window_size and expansion_amount must be >= 1")
        if not 0.0 <= self.success_threshold <= 1.0:
            raise ValueError("success_threshold must be within [0, 1]")


@dataclass(frozen=True)
class HistoryParams:
    max_history_entries: int = 100

    def __post_init__(self) -> None:
        if self.max_history_entries < 1:
            raise ValueError("max_history_entries must be >= 1")


@dataclass(frozen=True)
class AdaptiveParams:
    selection: SelectionParams = field(default_factory=SelectionParams)
    range: RangeParams = field(default_factory=RangeParams)
    history: HistoryParams = field(default_factory=HistoryParams)


@dataclass(frozen=True)
class FilesConfig:
    state_path: str = "data/practice_state.json"
