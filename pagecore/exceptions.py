"""
自訂 Exception 體系

所有失敗都有明確分類，並附上元件的祖先路徑方便除錯。
上層可以 catch 大類別 (如 PageCoreError)，
也可以精準 catch 子類別 (如 ComponentNotFoundError)。

Exception 樹：
    PageCoreError
    ├── NotFoundError
    │   └── ComponentNotFoundError
    │       └── AmbiguousIndexError
    ├── VerificationError          (同時是 AssertionError)
    ├── TriggerError
    │   └── TriggerReentryError
    └── ConfigError
        └── InvalidConfigError

框架不做自動恢復：重試只發生在 RetryPolicy 內，
超時後的例外就是最終結果，直接往上拋。
"""

from __future__ import annotations


class PageCoreError(Exception):
    """框架所有例外的基底，catch 這個就能攔截一切框架錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── 查找相關 ──

class NotFoundError(PageCoreError):
    """重試耗盡仍找不到符合條件的候選"""

    def __init__(self, message: str = "", attempts: int = 0,
                 last_count: int = 0, index: int | None = None,
                 index_out_of_range: bool = False,
                 context: dict | None = None):
        self.attempts = attempts
        self.last_count = last_count
        self.index = index
        self.index_out_of_range = index_out_of_range
        ctx = {"attempts": attempts, "last_count": last_count, "index": index}
        ctx.update(context or {})
        super().__init__(message or f"找不到符合條件的候選 (嘗試 {attempts} 次)", ctx)


class ComponentNotFoundError(NotFoundError):
    """元件解析失敗，訊息包含完整祖先路徑 (Page > Section > Field)"""

    def __init__(self, path: str = "", locator=None, attempts: int = 0,
                 last_count: int = 0, index: int | None = None,
                 timeout: float = 0):
        self.path = path
        self.locator = locator
        msg = f"找不到元件: {path}"
        if locator is not None:
            msg += f" [{locator}]"
        msg += f" (嘗試 {attempts} 次，最後找到 {last_count} 個候選"
        if timeout:
            msg += f"，等待 {timeout}s"
        msg += ")"
        super().__init__(
            msg, attempts=attempts, last_count=last_count, index=index,
            context={"path": path, "locator": locator, "timeout": timeout},
        )

    @classmethod
    def from_search(cls, error: NotFoundError, path: str, locator=None,
                    timeout: float = 0) -> "ComponentNotFoundError":
        """由引擎的 NotFoundError 補上元件路徑"""
        target = AmbiguousIndexError if error.index_out_of_range else cls
        return target(
            path=path, locator=locator, attempts=error.attempts,
            last_count=error.last_count, index=error.index, timeout=timeout,
        )


class AmbiguousIndexError(ComponentNotFoundError):
    """宣告的 index 超出實際找到的候選數量"""

    def __init__(self, path: str = "", locator=None, attempts: int = 0,
                 last_count: int = 0, index: int | None = None,
                 timeout: float = 0):
        super().__init__(path, locator, attempts, last_count, index, timeout)
        self.index_out_of_range = True
        self.args = (
            f"元件 index 超出範圍: {path} (index={index}，只找到 {last_count} 個候選)",
        )


# ── 驗證相關 ──

class VerificationError(PageCoreError, AssertionError):
    """在 timeout 內條件始終不成立"""

    def __init__(self, path: str = "", expected: tuple | list = (),
                 last_observed: str | None = None, description: str = "",
                 timeout: float = 0):
        self.path = path
        self.expected = tuple(expected)
        self.last_observed = last_observed
        expected_text = ", ".join(self.expected)
        observed = "無" if last_observed is None else f"'{last_observed}'"
        msg = f"{path} 驗證失敗: 預期"
        if description:
            msg += f" {description}"
        msg += f" [{expected_text}]，實際 {observed}"
        if timeout:
            msg += f" (等待 {timeout}s)"
        super().__init__(msg, context={
            "path": path, "expected": self.expected,
            "last_observed": last_observed, "timeout": timeout,
        })


# ── Trigger 相關 ──

class TriggerError(PageCoreError):
    """Trigger 的動作拋出非框架例外"""

    def __init__(self, trigger_name: str = "", event: str = "",
                 path: str = "", original: BaseException | None = None):
        self.trigger_name = trigger_name
        self.event = event
        self.path = path
        self.original = original
        msg = f"Trigger 執行失敗 [{trigger_name}] {event} @ {path}"
        if original is not None:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={
            "trigger": trigger_name, "event": event, "path": path,
        })


class TriggerReentryError(TriggerError):
    """同一元件的同一事件在執行中又被觸發"""

    def __init__(self, event: str = "", path: str = ""):
        super().__init__(event=event, path=path)
        self.args = (f"Trigger 重入: {path} 的 {event} 仍在執行中",)


# ── Config 相關 ──

class ConfigError(PageCoreError):
    """設定相關錯誤"""


class InvalidConfigError(ConfigError):
    """設定值無效"""

    def __init__(self, key: str = "", value: str = "", reason: str = ""):
        msg = f"設定值無效: {key}={value}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"key": key, "value": value})
