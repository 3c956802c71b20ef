"""
Search / Retry Engine

反覆呼叫查詢函式，直到候選符合條件或超過 timeout。
元素解析與驗證等待都共用這個引擎。

流程：
    記錄開始時間 → 查詢 → 有符合就立即回傳
    → 沒有且經過時間 < timeout → sleep interval → 重新完整查詢
    → 否則拋出 NotFoundError（附最後一次看到的候選數）

最壞情況的嘗試次數是 floor(timeout / interval) + 1（查詢本身很慢時會更少）；
timeout=0 時只嘗試一次，不等待。

用法：
    from pagecore.retry import RetryPolicy, find

    element = find(
        lambda: driver.find_elements(By.CSS_SELECTOR, "div.card"),
        lambda el: el.text == "Total",
        RetryPolicy(timeout=5, interval=0.5),
        index=2,
        filter_fn=lambda el: el.is_displayed(),
    )
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
)

from pagecore.exceptions import InvalidConfigError, NotFoundError

T = TypeVar("T")

# 查詢中遇到這些例外視為「這次沒找到」，繼續重試
DEFAULT_IGNORED: tuple[type[BaseException], ...] = (
    StaleElementReferenceException,
    NoSuchElementException,
)


@dataclass(frozen=True)
class RetryPolicy:
    """timeout 與輪詢間隔 (秒)"""

    timeout: float = 5.0
    interval: float = 0.5

    def __post_init__(self):
        if self.timeout < 0:
            raise InvalidConfigError("timeout", str(self.timeout), "不可小於 0")
        if self.interval <= 0:
            raise InvalidConfigError("interval", str(self.interval), "必須大於 0")

    @classmethod
    def once(cls) -> "RetryPolicy":
        """只嘗試一次"""
        return cls(timeout=0, interval=0.5)

    @property
    def max_attempts(self) -> int:
        # 1.0 // 0.1 == 9.0，所以用除法再加容差
        return int(self.timeout / self.interval + 1e-9) + 1

    def __str__(self) -> str:
        return f"timeout={self.timeout:g}s, interval={self.interval:g}s"


def find(
    query_fn: Callable[[], Iterable[T] | None],
    satisfies_fn: Callable[[T], bool] | None = None,
    policy: RetryPolicy | None = None,
    *,
    index: int | None = None,
    filter_fn: Callable[[T], bool] | None = None,
    ignoring: tuple[type[BaseException], ...] = DEFAULT_IGNORED,
) -> T:
    """
    重試查詢直到找到符合條件的候選。

    Args:
        query_fn: 執行一次外部查詢，回傳候選序列（文件順序）
        satisfies_fn: 候選是否符合（None = 都符合）
        policy: 重試設定，預設 RetryPolicy()
        index: None → 回傳第一個符合的候選；
               int → 取過濾後第 index 個候選，該候選必須符合 satisfies_fn
        filter_fn: 取 index 之前的過濾條件（例如可見性）
        ignoring: 查詢時要忽略的例外類型

    Returns:
        符合條件的候選

    Raises:
        NotFoundError: 超過 timeout 仍未找到
    """
    policy = policy or RetryPolicy()
    if index is not None and index < 0:
        raise InvalidConfigError("index", str(index), "不可小於 0")

    start = time.monotonic()
    attempts = 0
    last_count = 0

    while True:
        attempts += 1
        try:
            candidates = [
                c for c in (query_fn() or ())
                if filter_fn is None or filter_fn(c)
            ]
        except ignoring:
            candidates = []
        last_count = len(candidates)

        try:
            found, value = _select(candidates, satisfies_fn, index)
        except ignoring:
            found, value = False, None
        if found:
            return value

        if (attempts >= policy.max_attempts
                or time.monotonic() - start >= policy.timeout):
            break
        time.sleep(policy.interval)

    out_of_range = index is not None and 0 < last_count <= index
    raise NotFoundError(
        attempts=attempts, last_count=last_count, index=index,
        index_out_of_range=out_of_range,
    )


def _select(candidates: list, satisfies_fn: Callable | None,
            index: int | None) -> tuple[bool, object]:
    if index is None:
        for candidate in candidates:
            if satisfies_fn is None or satisfies_fn(candidate):
                return True, candidate
        return False, None

    if index >= len(candidates):
        return False, None
    candidate = candidates[index]
    if satisfies_fn is None or satisfies_fn(candidate):
        return True, candidate
    return False, None


def wait_until(
    condition: Callable[[], object],
    policy: RetryPolicy | None = None,
    *,
    ignoring: tuple[type[BaseException], ...] = DEFAULT_IGNORED,
) -> bool:
    """
    等待 condition() 成立。

    與 find() 相同的迴圈，但超時回傳 False 而不是拋例外。
    """
    try:
        find(lambda: (True,), lambda _: bool(condition()), policy, ignoring=ignoring)
        return True
    except NotFoundError:
        return False
