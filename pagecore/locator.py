"""
Scope Locator — 元件對應元素的查找規則

(策略, 查詢值, index, 可見性, term) 五元組，建立後不可變。

- index 是「通過可見性過濾後」的第 N 個 (0-based)，順序就是 driver 回傳的文件順序
- term 若有設定，第 index 個候選的文字必須符合 term 的 predicate
- 候選不足 index + 1 個 → 解析失敗 (AmbiguousIndexError)

用法：
    ScopeLocator.css("div.card", index=2, term=TermSpec(("Total",), match=TermMatch.EQUALS))
    ScopeLocator.accessibility_id("login_button")
    ScopeLocator(By.XPATH, "//h1", visibility=Visibility.ANY)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from appium.webdriver.common.appiumby import AppiumBy
from selenium.webdriver.common.by import By

from pagecore.terms import TermMatch, TermSpec


class Visibility(Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"
    ANY = "any"

    def accepts(self, element) -> bool:
        if self is Visibility.ANY:
            return True
        return element.is_displayed() == (self is Visibility.VISIBLE)


@dataclass(frozen=True)
class ScopeLocator:
    """元件的查找規則（不可變、可 hash）"""

    by: str
    value: str
    index: int = 0
    visibility: Visibility = Visibility.VISIBLE
    term: TermSpec | None = None

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"index 不可小於 0: {self.index}")

    # ── 常用策略 ──

    @classmethod
    def css(cls, selector: str, **kwargs) -> "ScopeLocator":
        return cls(By.CSS_SELECTOR, selector, **kwargs)

    @classmethod
    def xpath(cls, expression: str, **kwargs) -> "ScopeLocator":
        return cls(By.XPATH, expression, **kwargs)

    @classmethod
    def by_id(cls, element_id: str, **kwargs) -> "ScopeLocator":
        return cls(By.ID, element_id, **kwargs)

    @classmethod
    def tag(cls, tag_name: str, **kwargs) -> "ScopeLocator":
        return cls(By.TAG_NAME, tag_name, **kwargs)

    @classmethod
    def accessibility_id(cls, value: str, **kwargs) -> "ScopeLocator":
        return cls(AppiumBy.ACCESSIBILITY_ID, value, **kwargs)

    # ── 查詢 ──

    def query(self, search_context) -> list:
        """執行一次查詢（driver 或父元素）"""
        return list(search_context.find_elements(self.by, self.value))

    def accepts_visibility(self, element) -> bool:
        return self.visibility.accepts(element)

    def text_predicate(self, member_name: str | None = None,
                       default_match: TermMatch | None = None) -> Callable | None:
        """term 的文字 predicate，沒有 term 則回傳 None"""
        if self.term is None:
            return None
        predicate = self.term.predicate(member_name, default_match)
        return lambda element: predicate(element.text)

    def __str__(self) -> str:
        text = f"{self.by}={self.value!r}"
        if self.index:
            text += f" [{self.index}]"
        if self.visibility is not Visibility.VISIBLE:
            text += f" ({self.visibility.value})"
        if self.term is not None and self.term.values:
            text += f" term={'/'.join(self.term.values)}"
        return text
