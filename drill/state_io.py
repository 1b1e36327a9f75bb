"""学习状态的 JSON 持久化工具（orjson）。

一个状态文件保存全部学习数据：表现台账、可练习范围、最近正误窗口、答题历史与计数器。
本模块负责 Python 类型与 JSON 字典的互转，并实现会话层依赖的存储接口。

读取时，文件缺失、无法解析或字段格式错误一律视为"不存在"（空台账 / 无范围），
解析错误不会传到算法层；单条格式错误的记录被丢弃并记录告警。写入失败（OSError）直接抛出。
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import orjson

from .config import AdaptiveParams, FilesConfig, HistoryParams
from .ledger import apply_attempt, now_ms
from .models import AnswerRecord, LearnerState, PerformanceRecord, index_by_item
from .range_controller import initial_range_state

logger = logging.getLogger(__name__)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _read_raw(path: str) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            raw = orjson.loads(f.read())
    except FileNotFoundError:
        return {}
    except (OSError, orjson.JSONDecodeError) as e:
        logger.warning("state file %s unreadable, treating as empty: %s", path, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("state file %s has unexpected top-level type %s", path, type(raw).__name__)
        return {}
    return raw


def _write_raw(path: str, data: Dict[str, Any]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = path + ".tmp"
    try:
        with open(tmp_path, "wb") as f:
            f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def _performance_from_raw(raw: Any) -> List[PerformanceRecord]:
    if not isinstance(raw, list):
        return []
    records: List[PerformanceRecord] = []
    for v in raw:
        try:
            item_id, correct, total = v["item_id"], v["correct"], v["total"]
            last_seen = v.get("last_seen_ms")
            if not (_is_int(item_id) and _is_int(correct) and _is_int(total)):
                raise TypeError("counters must be integers")
            if item_id < 0:
                raise ValueError("negative item id")
            records.append(
                PerformanceRecord(
                    item_id=item_id,
                    correct=correct,
                    total=total,
                    last_seen_ms=last_seen if _is_int(last_seen) else None,
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("dropping malformed performance record %r: %s", v, e)
    return records


def _performance_to_raw(records) -> List[Dict[str, Any]]:
    return [
        {"item_id": r.item_id, "correct": r.correct, "total": r.total, "last_seen_ms": r.last_seen_ms}
        for r in sorted(records, key=lambda r: r.item_id)
    ]


def _range_from_raw(v: Any) -> Optional[int]:
    if _is_int(v) and v > 0:
        return v
    if v is not None:
        logger.warning("ignoring invalid eligible range %r", v)
    return None


def _window_from_raw(v: Any) -> List[bool]:
    if isinstance(v, list) and all(isinstance(x, bool) for x in v):
        return list(v)
    if v is not None:
        logger.warning("ignoring invalid recent outcome window %r", v)
    return []


def _history_from_raw(raw: Any) -> List[AnswerRecord]:
    if not isinstance(raw, list):
        return []
    history: List[AnswerRecord] = []
    for v in raw:
        try:
            if not (_is_int(v["item_id"]) and isinstance(v["is_correct"], bool)):
                raise TypeError("bad field types")
            history.append(
                AnswerRecord(
                    item_id=v["item_id"],
                    is_correct=v["is_correct"],
                    response=str(v.get("response") or ""),
                    ts_ms=int(v.get("ts_ms") or 0),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("dropping malformed history entry %r: %s", v, e)
    return history


def _history_to_raw(history) -> List[Dict[str, Any]]:
    return [
        {"item_id": a.item_id, "is_correct": a.is_correct, "response": a.response, "ts_ms": a.ts_ms}
        for a in history
    ]


def _counters_from_raw(v: Any) -> Dict[str, int]:
    counters = {"correct_answers": 0, "total_attempted": 0, "total_seen": 0}
    if not isinstance(v, dict):
        return counters
    for key in counters:
        if _is_int(v.get(key)) and v[key] >= 0:
            counters[key] = v[key]
    return counters


class JsonStateStore:
    """基于单个 JSON 文件的存储实现。

    每个方法独立地"读取—修改—写回"整个文件；不做跨进程加锁，
    并发写入需由宿主层串行化。
    """

    def __init__(
        self,
        path: str = FilesConfig().state_path,
        max_history_entries: int = HistoryParams().max_history_entries,
    ):
        self.path = path
        self.max_history_entries = max_history_entries

    def _update(self, **fields: Any) -> None:
        raw = _read_raw(self.path)
        raw.update(fields)
        _write_raw(self.path, raw)

    # --- 表现台账 ---
    def load_all_performance(self) -> List[PerformanceRecord]:
        return _performance_from_raw(_read_raw(self.path).get("performance"))

    def save_all_performance(self, records) -> None:
        self._update(performance=_performance_to_raw(records))

    def record_attempt(self, item_id: int, correct: bool, ts_ms: Optional[int] = None) -> PerformanceRecord:
        by_item = index_by_item(self.load_all_performance())
        updated = apply_attempt(by_item.get(item_id), item_id, correct, ts_ms)
        by_item[item_id] = updated
        self.save_all_performance(by_item.values())
        return updated

    # --- 可练习范围 ---
    def load_eligible_range(self) -> Optional[int]:
        return _range_from_raw(_read_raw(self.path).get("eligible_range"))

    def save_eligible_range(self, value: int) -> None:
        self._update(eligible_range=int(value))

    def load_recent_window(self) -> List[bool]:
        return _window_from_raw(_read_raw(self.path).get("recent_window"))

    def save_recent_window(self, window: Sequence[bool]) -> None:
        self._update(recent_window=[bool(x) for x in window])

    # --- 答题历史与计数器 ---
    def load_history(self) -> List[AnswerRecord]:
        return _history_from_raw(_read_raw(self.path).get("history"))[-self.max_history_entries:]

    def save_history(self, history: Sequence[AnswerRecord]) -> None:
        self._update(history=_history_to_raw(list(history)[-self.max_history_entries:]))

    def load_counters(self) -> Dict[str, int]:
        return _counters_from_raw(_read_raw(self.path).get("counters"))

    def save_counters(self, correct_answers: int, total_attempted: int, total_seen: int) -> None:
        self._update(
            counters={
                "correct_answers": correct_answers,
                "total_attempted": total_attempted,
                "total_seen": total_seen,
                "last_updated_ms": now_ms(),
            }
        )

    # --- 整体读写（会话层使用） ---
    def load_state(self, catalog_size: int, params: AdaptiveParams = AdaptiveParams()) -> LearnerState:
        return load_state(self.path, catalog_size, params)

    def save_state(self, state: LearnerState) -> None:
        save_state(self.path, state)

    def reset_all(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        logger.info("cleared learner state at %s", self.path)


def load_state(path: str, catalog_size: int, params: AdaptiveParams = AdaptiveParams()) -> LearnerState:
    """从 JSON 文件加载 LearnerState。

    若文件缺失或格式错误，返回默认初始化的状态（初始范围、空台账）。
    """
    raw = _read_raw(path)
    counters = _counters_from_raw(raw.get("counters"))
    current = raw.get("current_item")
    range_state = initial_range_state(
        _range_from_raw(raw.get("eligible_range")),
        _window_from_raw(raw.get("recent_window")),
        catalog_size,
        params.range,
    )
    if not (_is_int(current) and 0 <= current < range_state.eligible_range):
        current = None
    return LearnerState(
        performance=index_by_item(_performance_from_raw(raw.get("performance"))),
        range_state=range_state,
        history=tuple(_history_from_raw(raw.get("history"))[-params.history.max_history_entries:]),
        correct_answers=counters["correct_answers"],
        total_attempted=counters["total_attempted"],
        total_seen=counters["total_seen"],
        current_item=current,
    )


def save_state(path: str, state: LearnerState) -> None:
    """将 LearnerState 整体保存到 JSON 文件（UTF-8，带缩进）。"""
    data: Dict[str, Any] = {
        "performance": _performance_to_raw(state.performance.values()),
        "eligible_range": state.range_state.eligible_range,
        "recent_window": list(state.range_state.window),
        "history": _history_to_raw(state.history),
        "counters": {
            "correct_answers": state.correct_answers,
            "total_attempted": state.total_attempted,
            "total_seen": state.total_seen,
            "last_updated_ms": now_ms(),
        },
        "current_item": state.current_item,
    }
    _write_raw(path, data)
