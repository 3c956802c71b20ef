"""
Term Resolver — 名稱 / 格式 / 比對規則

把宣告的名稱轉成顯示字串與比對 predicate。

- 沒有明確 values 時，從成員名稱推導：依大小寫邊界切字 → 套用 TermCase → 套用 TermFormat
- 多個 values 時，predicate 是「符合任一個」
- TermMatch.INHERIT 不會被寫死在 TermSpec 裡，要在使用時才換成設定的預設值 (EQUALS)

用法：
    from pagecore.terms import TermSpec, TermMatch, TermCase

    TermSpec().display_values("FirstName")           # ("First Name",)
    TermSpec(case=TermCase.KEBAB).display_values("FirstName")   # ("first-name",)

    is_ok = TermSpec(("Home", "Dashboard")).predicate()
    is_ok("Dashboard")                               # True
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

DEFAULT_FORMAT = "{0}"

# 大寫縮寫 / 首字大寫單字 / 小寫單字 / 數字
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
_SPACES_RE = re.compile(r"\s+")


def split_words(name: str) -> list[str]:
    """
    依大小寫邊界、數字、底線、連字號、空白切字。

    "FirstName" → ["First", "Name"]
    "first_name" → ["first", "name"]
    "HTMLParser" → ["HTML", "Parser"]
    """
    return _WORD_RE.findall(name or "")


def _capitalize(word: str) -> str:
    if word.isupper() and len(word) > 1:
        return word  # 縮寫保持原樣
    return word[:1].upper() + word[1:].lower()


class TermCase(Enum):
    """名稱轉換方式"""

    INHERIT = "inherit"
    NONE = "none"
    TITLE = "title"               # First Name
    SENTENCE = "sentence"         # First name
    LOWER = "lower"               # first name
    UPPER = "upper"               # FIRST NAME
    CAMEL = "camel"               # firstName
    PASCAL = "pascal"             # FirstName
    KEBAB = "kebab"               # first-name
    SNAKE = "snake"               # first_name
    LOWER_MERGED = "lower_merged"  # firstname
    UPPER_MERGED = "upper_merged"  # FIRSTNAME

    def apply(self, name: str) -> str:
        case = TermCase.TITLE if self is TermCase.INHERIT else self
        if case is TermCase.NONE:
            return name

        words = split_words(name)
        if not words:
            return name

        if case is TermCase.TITLE:
            return " ".join(_capitalize(w) for w in words)
        if case is TermCase.SENTENCE:
            first = _capitalize(words[0])
            rest = [w if w.isupper() and len(w) > 1 else w.lower() for w in words[1:]]
            return " ".join([first, *rest])
        if case is TermCase.LOWER:
            return " ".join(w.lower() for w in words)
        if case is TermCase.UPPER:
            return " ".join(w.upper() for w in words)
        if case is TermCase.CAMEL:
            return words[0].lower() + "".join(_capitalize(w.lower()) for w in words[1:])
        if case is TermCase.PASCAL:
            return "".join(_capitalize(w.lower()) for w in words)
        if case is TermCase.KEBAB:
            return "-".join(w.lower() for w in words)
        if case is TermCase.SNAKE:
            return "_".join(w.lower() for w in words)
        if case is TermCase.LOWER_MERGED:
            return "".join(w.lower() for w in words)
        return "".join(w.upper() for w in words)


class TermMatch(Enum):
    """文字比對方式"""

    INHERIT = "inherit"
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EQUALS_IGNORE_CASE = "equals_ignore_case"
    CONTAINS_IGNORE_CASE = "contains_ignore_case"
    STARTS_WITH_IGNORE_CASE = "starts_with_ignore_case"
    ENDS_WITH_IGNORE_CASE = "ends_with_ignore_case"

    def resolve(self, default: "TermMatch | None" = None) -> "TermMatch":
        """INHERIT → 設定的預設值；沒有設定時用 EQUALS"""
        if self is not TermMatch.INHERIT:
            return self
        if default is None or default is TermMatch.INHERIT:
            return TermMatch.EQUALS
        return default

    @property
    def ignore_case(self) -> bool:
        return self.value.endswith("_ignore_case")

    def matches(self, text: str | None, value: str) -> bool:
        """text 是否符合 value（text 會先正規化空白）"""
        if self is TermMatch.INHERIT:
            raise ValueError("TermMatch.INHERIT 必須先 resolve() 才能比對")
        if text is None:
            return False

        text = _SPACES_RE.sub(" ", text).strip()
        if self.ignore_case:
            text, value = text.casefold(), value.casefold()

        kind = self.value.replace("_ignore_case", "")
        if kind == "equals":
            return text == value
        if kind == "contains":
            return value in text
        if kind == "starts_with":
            return text.startswith(value)
        return text.endswith(value)

    def describe(self) -> str:
        base = {
            "equals": "等於其一",
            "contains": "包含其一",
            "starts_with": "開頭符合其一",
            "ends_with": "結尾符合其一",
        }[self.value.replace("_ignore_case", "")]
        return base + ("（不分大小寫）" if self.ignore_case else "")

    @classmethod
    def parse(cls, value: "str | TermMatch") -> "TermMatch":
        """從設定字串解析，例如 'equals'、'contains_ignore_case'"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"未知的 TermMatch: {value}") from None


@dataclass(frozen=True)
class TermSpec:
    """
    Term 宣告（純值物件）

    Attributes:
        values: 明確指定的值；空的話從成員名稱推導
        case: 推導名稱時的大小寫轉換
        format: 含 {0} 的樣板
        match: 比對方式，INHERIT 在使用時才 resolve
    """

    values: tuple[str, ...] = ()
    case: TermCase = TermCase.INHERIT
    format: str | None = None
    match: TermMatch = TermMatch.INHERIT

    def __post_init__(self):
        if isinstance(self.values, str):
            object.__setattr__(self, "values", (self.values,))
        else:
            object.__setattr__(self, "values", tuple(self.values))

    def display_values(self, member_name: str | None = None) -> tuple[str, ...]:
        """顯示字串序列（保持宣告順序）"""
        fmt = self.format or DEFAULT_FORMAT
        if self.values:
            if self.format is None:
                return self.values
            return tuple(fmt.format(v) for v in self.values)
        if not member_name:
            return ()
        return (fmt.format(self.case.apply(member_name)),)

    def resolved_match(self, default: TermMatch | None = None) -> TermMatch:
        return self.match.resolve(default)

    def predicate(self, member_name: str | None = None,
                  default_match: TermMatch | None = None) -> Callable[[str | None], bool]:
        """回傳 predicate(text)：符合任一個 value 即成立"""
        return build_predicate(
            self.resolved_match(default_match), self.display_values(member_name),
        )


def build_predicate(match: TermMatch, values: Iterable[str]) -> Callable[[str | None], bool]:
    """多個 value 的 ANY predicate"""
    match = match.resolve()
    expected = tuple(values)

    def _predicate(text: str | None) -> bool:
        return any(match.matches(text, v) for v in expected)

    return _predicate


def to_display_string(values: Iterable[str]) -> str:
    """"A" 或 "A/B"，給 trigger 建立的子元件命名用"""
    return "/".join(values)


def describe_expectation(match: TermMatch, values: Iterable[str]) -> str:
    values = list(values)
    return f"{match.resolve().describe()} [{', '.join(values)}]"


def strip_name_endings(name: str, endings: str | Iterable[str]) -> str:
    """
    去除類別名稱的結尾，第一個符合的才去除。

    strip_name_endings("LoginPopupWindow", "PopupWindow,Window,Popup") → "Login"
    """
    if isinstance(endings, str):
        endings = [e.strip() for e in endings.split(",")]
    for ending in endings:
        if ending and name.endswith(ending) and len(name) > len(ending):
            return name[: -len(ending)]
    return name
