"""
常用控制項

只是薄薄一層：預設 LOCATOR、元件種類名稱、讀寫方式。
所有動作都走 Component 的 trigger / 解析流程。
"""

from __future__ import annotations

from selenium.webdriver.remote.webelement import WebElement

from pagecore.component import Component
from pagecore.locator import ScopeLocator


class Control(Component):
    COMPONENT_TYPE_NAME = "control"


class Text(Control):
    """任意顯示文字的元素"""
    COMPONENT_TYPE_NAME = "text"


class Button(Control):
    COMPONENT_TYPE_NAME = "button"
    LOCATOR = ScopeLocator.css(
        "button, input[type='button'], input[type='submit'], input[type='reset']"
    )


class Input(Control):
    """<input>，值從 value 屬性讀取"""

    COMPONENT_TYPE_NAME = "input"
    LOCATOR = ScopeLocator.css(
        "input:not([type='button']):not([type='submit']):not([type='reset'])"
    )

    def _read_value(self, element: WebElement) -> str:
        return element.get_attribute("value") or ""

    @property
    def value(self) -> str:
        return self.get_value()

    @value.setter
    def value(self, value) -> None:
        self.set_value(value)


class TextInput(Input):
    COMPONENT_TYPE_NAME = "text input"
    LOCATOR = ScopeLocator.css("input[type='text'], input:not([type])")


class PasswordInput(Input):
    COMPONENT_TYPE_NAME = "password input"
    LOCATOR = ScopeLocator.css("input[type='password']")


class Heading(Control):
    LEVEL = 1

    def __init__(self, parent, metadata=None):
        super().__init__(parent, metadata)
        if self.metadata.component_type_name is None:
            self.component_type_name = f"<h{self.LEVEL}> heading"


class H1(Heading):
    LEVEL = 1
    LOCATOR = ScopeLocator.tag("h1")


class H2(Heading):
    LEVEL = 2
    LOCATOR = ScopeLocator.tag("h2")


class H3(Heading):
    LEVEL = 3
    LOCATOR = ScopeLocator.tag("h3")


class H4(Heading):
    LEVEL = 4
    LOCATOR = ScopeLocator.tag("h4")


class H5(Heading):
    LEVEL = 5
    LOCATOR = ScopeLocator.tag("h5")


class H6(Heading):
    LEVEL = 6
    LOCATOR = ScopeLocator.tag("h6")


HEADINGS: dict[int, type[Heading]] = {1: H1, 2: H2, 3: H3, 4: H4, 5: H5, 6: H6}
