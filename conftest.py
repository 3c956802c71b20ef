"""
pytest 全域 fixtures

提供：
- FakeElement / FakeDriver：不需要真實瀏覽器的 driver 替身（依文件順序回傳元素）
- fake_clock：取代 pagecore.retry 的 time，sleep 直接推進時間，重試測試不用真的等待
- context：已設定短 timeout 的 PageContext
"""

import pytest
from selenium.common.exceptions import StaleElementReferenceException

from pagecore.context import PageContext
from pagecore.event_bus import EventBus
from pagecore.log_manager import LogManager
from pagecore.retry import RetryPolicy


class FakeElement:
    """模擬 WebElement 的最小介面"""

    def __init__(self, text: str = "", displayed: bool = True, value: str = "",
                 children: dict | None = None, tag: str = "div"):
        self.text = text
        self.displayed = displayed
        self.value = value
        self.tag = tag
        self.stale = False
        self.clicks = 0
        self.children = children or {}

    def _check(self):
        if self.stale:
            raise StaleElementReferenceException("stale element")

    def is_displayed(self) -> bool:
        self._check()
        return self.displayed

    def is_enabled(self) -> bool:
        self._check()
        return True

    def get_attribute(self, name: str):
        self._check()
        return self.value if name == "value" else None

    def click(self) -> None:
        self._check()
        self.clicks += 1

    def clear(self) -> None:
        self._check()
        self.value = ""

    def send_keys(self, keys: str) -> None:
        self._check()
        self.value += keys

    def find_elements(self, by, value):
        self._check()
        return list(self.children.get((by, value), []))

    def __repr__(self):
        return f"<FakeElement {self.tag} {self.text!r}>"


class FakeDriver:
    """
    模擬 driver：elements 以 (by, value) 為 key。

    value 可以是 list，或每次查詢都會被呼叫的 callable（模擬畫面變化）。
    """

    def __init__(self, elements: dict | None = None, title: str = ""):
        self.elements = elements or {}
        self.title = title
        self.queries: list[tuple] = []
        self.visited: list[str] = []

    def find_elements(self, by, value):
        self.queries.append((by, value))
        found = self.elements.get((by, value), [])
        if callable(found):
            found = found()
        return list(found)

    def get(self, url: str) -> None:
        self.visited.append(url)


class FakeClock:
    """monotonic() / sleep() 替身，sleep 直接推進時間"""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock(monkeypatch):
    clock = FakeClock()
    monkeypatch.setattr("pagecore.retry.time", clock)
    return clock


@pytest.fixture
def make_element():
    """建立 FakeElement 的 factory"""
    return FakeElement


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def context(driver, event_bus, fake_clock):
    """短 timeout 的 PageContext（搭配 fake_clock，不會真的等待）"""
    return PageContext(
        driver,
        element_find_policy=RetryPolicy(timeout=1.0, interval=0.25),
        waiting_policy=RetryPolicy(timeout=1.0, interval=0.25),
        verification_policy=RetryPolicy(timeout=2.0, interval=0.5),
        log=LogManager(event_bus),
    )
