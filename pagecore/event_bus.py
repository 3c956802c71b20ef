"""
Event Bus — 結構化紀錄的發佈/訂閱通道

LogManager 把每一筆紀錄都發佈成事件，外部可以訂閱後自行格式化或保存
（報告、JSON 檔、測試框架附件...）。框架本身不決定紀錄怎麼呈現。

內建事件：
    log.trace  追蹤紀錄（元素解析、trigger 執行）
    log.info / log.warn / log.error
    log.section.start  區段開始（一個動作）
    log.section.end  區段結束，data 含 elapsed / failed

每個 PageContext 預設有自己的 EventBus；
多個 context 可以共用同一個 bus 當共同的紀錄出口，所以內部有 lock。

用法：
    bus = EventBus()

    @bus.on("log.section.*")
    def on_section(event):
        print(event.name, event.data["message"])
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from utils.logger import logger


@dataclass
class Event:
    """事件物件"""
    name: str
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: str = ""


class EventBus:
    """
    事件匯流排

    支援：
    - 精確訂閱: bus.on("log.trace", handler)
    - 萬用字元: bus.on("log.*", handler)     → 符合 log.xxx
    - 全域監聽: bus.on("*", handler)
    - 優先序:   bus.on("xxx", handler, priority=1) → 數字小先執行，同優先序依註冊順序
    """

    def __init__(self, max_history: int = 500):
        self._handlers: dict[str, list[tuple[int, Callable]]] = {}
        self._history: deque[Event] = deque(maxlen=max_history)
        self._lock = threading.Lock()

    def on(self, pattern: str, handler: Callable | None = None,
           priority: int = 10) -> Callable:
        """訂閱事件。可當 decorator 或直接呼叫。"""
        def _register(fn: Callable) -> Callable:
            with self._lock:
                handlers = self._handlers.setdefault(pattern, [])
                handlers.append((priority, fn))
                handlers.sort(key=lambda x: x[0])
            return fn

        if handler is not None:
            return _register(handler)
        return _register

    def off(self, pattern: str, handler: Callable | None = None) -> None:
        """取消訂閱。不指定 handler 則移除該 pattern 所有 handler。"""
        with self._lock:
            if handler is None:
                self._handlers.pop(pattern, None)
            elif pattern in self._handlers:
                self._handlers[pattern] = [
                    (p, h) for p, h in self._handlers[pattern] if h is not handler
                ]

    def emit(self, name: str, data: dict | None = None, source: str = "") -> Event:
        """發佈事件，handler 的例外只記錄不外拋（紀錄出口不應中斷測試）"""
        event = Event(name=name, data=data or {}, source=source)

        with self._lock:
            self._history.append(event)
            to_call = [
                entry
                for pattern, handlers in self._handlers.items()
                if _matches(pattern, name)
                for entry in handlers
            ]

        to_call.sort(key=lambda x: x[0])
        for _, handler in to_call:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler 錯誤 [{name}]: {e}")

        return event

    def get_history(self, name: str = "", limit: int = 50) -> list[Event]:
        """查詢事件歷史（可用萬用字元）"""
        with self._lock:
            events = [e for e in self._history if not name or _matches(name, e.name)]
        return events[-limit:]

    def clear(self) -> None:
        """清除所有訂閱與歷史"""
        with self._lock:
            self._handlers.clear()
            self._history.clear()


def _matches(pattern: str, name: str) -> bool:
    if pattern in ("*", name):
        return True
    if pattern.endswith(".*"):
        return name.startswith(pattern[:-1])
    return False
