"""
Log Manager — 動作區段與追蹤紀錄

每個元件動作 (click / set / get / verify) 都包在一個區段裡：
    > Click "Login" button
      - Find element: ...
    < Click "Login" button (0.132s)

所有訊息寫入 utils.logger，同時發佈到 EventBus 給外部訂閱。
訊息在輸出前會遮蔽登錄過的機密字串（密碼、token）。

用法：
    log = LogManager(EventBus())
    log.add_secret("p@ssw0rd")
    with log.section('Set "p@ssw0rd" to "Password" input'):
        ...
    # → > Set "{*****}" to "Password" input
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from pagecore.event_bus import EventBus
from utils.logger import TRACE, logger

DEFAULT_MASK = "{*****}"


@dataclass(frozen=True)
class SecretStringToMask:
    value: str
    mask: str = DEFAULT_MASK


class LogManager:
    """結構化紀錄出口：logging + EventBus"""

    def __init__(self, event_bus: EventBus | None = None,
                 secrets: list[SecretStringToMask] | None = None,
                 source: str = ""):
        self.event_bus = event_bus or EventBus()
        self._secrets: list[SecretStringToMask] = list(secrets or [])
        self._depth = 0
        self._source = source

    def add_secret(self, value: str, mask: str = DEFAULT_MASK) -> None:
        self._secrets.append(SecretStringToMask(value, mask))

    def mask(self, message: str) -> str:
        for secret in self._secrets:
            message = message.replace(secret.value, secret.mask)
        return message

    @property
    def depth(self) -> int:
        return self._depth

    # ── 單筆紀錄 ──

    def trace(self, message: str) -> None:
        self._write(TRACE, "log.trace", message)

    def info(self, message: str) -> None:
        self._write(logging.INFO, "log.info", message)

    def warn(self, message: str) -> None:
        self._write(logging.WARNING, "log.warn", message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        data = {"exception": repr(exc)} if exc is not None else None
        self._write(logging.ERROR, "log.error", message, data)

    # ── 區段 ──

    @contextmanager
    def section(self, message: str, level: int = logging.INFO) -> Iterator[None]:
        """
        區段：開始 / 結束各寫一筆，結束時附上耗時。

        區段內拋出的例外會標記 failed 後原樣往外拋。
        """
        message = self.mask(message)
        self._write(level, "log.section.start", f"> {message}", masked=True)
        self._depth += 1
        start = time.monotonic()
        failed = False
        try:
            yield
        except BaseException:
            failed = True
            raise
        finally:
            elapsed = time.monotonic() - start
            self._depth -= 1
            suffix = " [失敗]" if failed else ""
            self._write(
                level, "log.section.end",
                f"< {message} ({elapsed:.3f}s){suffix}",
                {"elapsed": round(elapsed, 3), "failed": failed},
                masked=True,
            )

    def _write(self, level: int, event: str, message: str,
               data: dict | None = None, masked: bool = False) -> None:
        if not masked:
            message = self.mask(message)
        indent = "  " * self._depth
        extra = {"event": event, "section_depth": self._depth}
        if data and "elapsed" in data:
            extra["elapsed"] = data["elapsed"]
        logger.log(level, f"{indent}{message}", extra=extra)
        payload = {"message": message, "depth": self._depth}
        payload.update(data or {})
        self.event_bus.emit(event, payload, source=self._source)
