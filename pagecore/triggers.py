"""
Trigger Pipeline — 元件動作前後的宣告式行為

每個元件動作前後都會發出事件，掛在元件上的 trigger 依事件執行：
    BEFORE_GET / AFTER_GET       讀取 (get_text, get_value)
    BEFORE_SET / AFTER_SET       寫入 (set_value, clear, append)
    BEFORE_CLICK / AFTER_CLICK   點擊
    BEFORE_ACCESS / AFTER_ACCESS 以上任一種都會一起發出
    INIT / DEINIT                元件建立 / 拆除

執行規則：
- 先取元件自己的 trigger（宣告順序），再取祖先 target_children=True 的 trigger（近的先）
- 依 priority 穩定排序，數字小先執行，同 priority 維持宣告順序
- trigger 可以再呼叫其他元件的動作（重入），直接在同一個 call stack 上遞迴
- 同一元件的同一事件還在執行中又被觸發 → TriggerReentryError
- 框架例外 (找不到元件、驗證失敗) 與 AssertionError 原樣外拋；
  其他例外包成 TriggerError。兩者都會中止這次剩下的 trigger

用法：
    class LoginPage(PageObject):
        TRIGGERS = (
            VerifyH1("Sign In"),
            LogInfo("登入頁已載入", on=TriggerEvents.INIT, priority=5),
        )

        email = ComponentDescriptor(
            TextInput,
            triggers=(FunctionTrigger(lambda ctx: ..., on=TriggerEvents.AFTER_SET),),
        )
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntFlag
from typing import TYPE_CHECKING, Callable, Iterable

from pagecore.exceptions import PageCoreError, TriggerError, TriggerReentryError

if TYPE_CHECKING:
    from pagecore.component import Component
    from pagecore.context import PageContext
    from pagecore.log_manager import LogManager


class TriggerEvents(IntFlag):
    NONE = 0
    INIT = 1
    DEINIT = 2
    BEFORE_GET = 4
    AFTER_GET = 8
    BEFORE_SET = 16
    AFTER_SET = 32
    BEFORE_CLICK = 64
    AFTER_CLICK = 128
    BEFORE_ACCESS = 256
    AFTER_ACCESS = 512

    BEFORE_AND_AFTER_GET = BEFORE_GET | AFTER_GET
    BEFORE_AND_AFTER_SET = BEFORE_SET | AFTER_SET
    BEFORE_AND_AFTER_CLICK = BEFORE_CLICK | AFTER_CLICK
    BEFORE_AND_AFTER_ACCESS = BEFORE_ACCESS | AFTER_ACCESS

    @property
    def label(self) -> str:
        return "|".join(e.name for e in _SINGLE_EVENTS if e & self) or "NONE"


_SINGLE_EVENTS = [e for e in TriggerEvents if e.value and not e.value & (e.value - 1)]


@dataclass
class TriggerContext:
    """傳給 trigger 的執行上下文"""
    event: TriggerEvents
    component: "Component"

    @property
    def context(self) -> "PageContext":
        return self.component.context

    @property
    def owner(self):
        return self.component.owner

    @property
    def log(self) -> "LogManager":
        return self.component.context.log


class Trigger:
    """
    Trigger 基底

    Args:
        on: 觸發事件（可用 | 組合），預設使用類別的 DEFAULT_ON
        priority: 數字小先執行
        applies_to: 元件種類過濾，元素可以是 Component 子類別或 component_type_name 字串
        target_children: True → 套用到所有子孫元件而非自己
    """

    DEFAULT_ON = TriggerEvents.NONE

    def __init__(self, on: TriggerEvents | None = None, priority: int = 0,
                 applies_to: Iterable[type | str] = (),
                 target_children: bool = False):
        self.on = self.DEFAULT_ON if on is None else on
        self.priority = priority
        self.applies_to = tuple(applies_to)
        self.target_children = target_children

    @property
    def name(self) -> str:
        return type(self).__name__

    def handles(self, event: TriggerEvents) -> bool:
        return bool(self.on & event)

    def applies(self, component: "Component") -> bool:
        if not self.applies_to:
            return True
        for kind in self.applies_to:
            if isinstance(kind, str):
                if component.component_type_name == kind:
                    return True
            elif isinstance(component, kind):
                return True
        return False

    def execute(self, context: TriggerContext) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.name}(on={self.on.label}, priority={self.priority})"


class TriggerPipeline:
    """
    事件派送器（每個 PageContext 一個）

    只保存「執行中」的 (元件, 事件) 集合，離開時一定會清掉，
    所以某次派送失敗不會影響其他元件之後的派送。
    """

    def __init__(self, log: "LogManager"):
        self._log = log
        self._in_flight: set[tuple] = set()

    def collect(self, component: "Component",
                event: TriggerEvents) -> list[Trigger]:
        """依執行順序列出這次要跑的 trigger"""
        declared = [t for t in component.triggers if not t.target_children]
        ancestor = component.parent
        while ancestor is not None:
            declared.extend(t for t in ancestor.triggers if t.target_children)
            ancestor = ancestor.parent

        applicable = [
            t for t in declared if t.handles(event) and t.applies(component)
        ]
        return sorted(applicable, key=lambda t: t.priority)

    def fire(self, component: "Component", event: TriggerEvents) -> None:
        triggers = self.collect(component, event)
        if not triggers:
            return

        key = (component, event)
        if key in self._in_flight:
            raise TriggerReentryError(event.label, component.path_string)

        self._in_flight.add(key)
        try:
            context = TriggerContext(event=event, component=component)
            for trigger in triggers:
                self._log.trace(
                    f"Execute trigger {trigger.name} on {event.label} "
                    f"against {component.full_name}"
                )
                try:
                    trigger.execute(context)
                except (PageCoreError, AssertionError):
                    raise
                except Exception as e:
                    raise TriggerError(
                        trigger.name, event.label, component.path_string, e,
                    ) from e
        finally:
            self._in_flight.discard(key)


# ── 內建 trigger ──

class FunctionTrigger(Trigger):
    """執行任意 callable(TriggerContext)"""

    def __init__(self, action: Callable[[TriggerContext], object],
                 on: TriggerEvents | None = None, **kwargs):
        super().__init__(on, **kwargs)
        self.action = action

    @property
    def name(self) -> str:
        return f"FunctionTrigger[{getattr(self.action, '__name__', 'action')}]"

    def execute(self, context: TriggerContext) -> None:
        self.action(context)


class LogInfo(Trigger):
    """寫一筆 info 紀錄，message 可用 {name} / {component} 佔位"""

    DEFAULT_ON = TriggerEvents.INIT

    def __init__(self, message: str, on: TriggerEvents | None = None, **kwargs):
        super().__init__(on, **kwargs)
        self.message = message

    def execute(self, context: TriggerContext) -> None:
        component = context.component
        context.log.info(self.message.format(
            name=component.name, component=component.full_name,
        ))


class Wait(Trigger):
    """固定等待秒數（動畫、非同步載入）"""

    DEFAULT_ON = TriggerEvents.AFTER_CLICK

    def __init__(self, seconds: float, on: TriggerEvents | None = None, **kwargs):
        super().__init__(on, **kwargs)
        if seconds < 0:
            raise ValueError(f"等待秒數不可小於 0: {seconds}")
        self.seconds = seconds

    def execute(self, context: TriggerContext) -> None:
        context.log.trace(f"Wait {self.seconds:g}s")
        time.sleep(self.seconds)


class InvalidateCache(Trigger):
    """推進 epoch，讓所有快取的元素失效（例如動作造成頁面重繪）"""

    DEFAULT_ON = TriggerEvents.AFTER_CLICK

    def execute(self, context: TriggerContext) -> None:
        context.context.advance_epoch()
