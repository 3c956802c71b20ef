"""
Component 樹 — 頁面上的元件節點

PageObject 是樹根；子元件用 ComponentDescriptor 宣告在類別上，
第一次存取時才建立（並觸發 INIT trigger）。

- 子元件只持有父節點的 weakref；樹根 page 則用強參照持有，
  元件還在使用時 page 不會被回收
- 元素 handle 延遲解析，並記住解析當下的 epoch；
  context 推進 epoch（導頁、手動 invalidate）後 handle 自動失效
- 兩個節點的 (parent, locator) 相同就是同一個邏輯元件

用法：
    class SignInPage(PageObject):
        URL = "/signin"
        TRIGGERS = (VerifyH1(),)

        email = ComponentDescriptor(TextInput, locator=ScopeLocator.by_id("email"))
        sign_in = ComponentDescriptor(Button, locator=ScopeLocator.css("button[type=submit]"))

    page = context.go_to(SignInPage)
    page.email.set_value("user@example.com")
    page.sign_in.click_and_go(HomePage)
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Iterable

from selenium.common.exceptions import StaleElementReferenceException
from selenium.webdriver.remote.webelement import WebElement

from pagecore import verification
from pagecore.exceptions import (
    ComponentNotFoundError,
    ConfigError,
    NotFoundError,
    PageCoreError,
)
from pagecore.locator import ScopeLocator
from pagecore.retry import RetryPolicy, find
from pagecore.terms import TermCase, TermMatch, TermSpec, strip_name_endings
from pagecore.triggers import Trigger, TriggerEvents

if TYPE_CHECKING:
    from pagecore.context import PageContext


@dataclass(frozen=True)
class ComponentMetadata:
    """
    元件宣告（建立樹時產生一次，之後不再變動）

    Attributes:
        name: 顯示名稱，None 則由成員名稱 / 類別名稱推導
        locator: 查找規則，None 則用類別的 LOCATOR
        triggers: 成員層級的 trigger（排在類別層級 TRIGGERS 之前）
        component_type_name: 覆寫類別的 COMPONENT_TYPE_NAME
        cache_element: False → 每次存取都重新解析元素
    """
    name: str | None = None
    locator: ScopeLocator | None = None
    triggers: tuple[Trigger, ...] = ()
    component_type_name: str | None = None
    cache_element: bool = True


@dataclass(frozen=True)
class ElementHandle:
    """解析出的元素 + 解析當下的 epoch"""
    element: WebElement
    epoch: int


class Component:
    """元件節點基底"""

    COMPONENT_TYPE_NAME = "component"
    IGNORE_NAME_ENDINGS = "Component,Control"
    LOCATOR: ScopeLocator | None = None
    TRIGGERS: tuple[Trigger, ...] = ()

    def __init__(self, parent: "Component | None",
                 metadata: ComponentMetadata | None = None):
        self.metadata = metadata or ComponentMetadata()
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._owner = parent.owner if parent is not None else None
        self._handle: ElementHandle | None = None
        self._children: dict[str, Component] = {}
        self.name = self.metadata.name or self._default_name()
        self.component_type_name = (
            self.metadata.component_type_name or self.COMPONENT_TYPE_NAME
        )
        self._triggers = tuple(self.metadata.triggers) + tuple(self.TRIGGERS)

    def _default_name(self) -> str:
        base = strip_name_endings(type(self).__name__, self.IGNORE_NAME_ENDINGS)
        return TermCase.TITLE.apply(base)

    # ── 樹結構 ──

    @property
    def parent(self) -> "Component | None":
        if self._parent_ref is None:
            return None
        parent = self._parent_ref()
        if parent is None:
            raise PageCoreError(f"元件 {self.name} 的父節點已被回收")
        return parent

    @property
    def owner(self) -> "PageObject":
        return self._owner if self._owner is not None else self

    @property
    def context(self) -> "PageContext":
        return self.owner.context

    @property
    def log(self):
        return self.context.log

    @property
    def locator(self) -> ScopeLocator | None:
        return self.metadata.locator or self.LOCATOR

    @property
    def triggers(self) -> tuple[Trigger, ...]:
        return self._triggers

    @property
    def children(self) -> list["Component"]:
        return list(self._children.values())

    @property
    def ancestors(self) -> list["Component"]:
        """從樹根到自己（含自己）"""
        chain = []
        node = self
        while node is not None:
            chain.append(node)
            node = node.parent
        return list(reversed(chain))

    @property
    def full_name(self) -> str:
        return f'"{self.name}" {self.component_type_name}'

    @property
    def path_string(self) -> str:
        """例如: "Sign In" page > "Email" text input"""
        return " > ".join(node.full_name for node in self.ancestors)

    def __eq__(self, other):
        if not isinstance(other, Component):
            return NotImplemented
        if self._parent_ref is None or other._parent_ref is None or self.locator is None:
            return self is other
        return self.parent is other.parent and self.locator == other.locator

    def __hash__(self):
        if self._parent_ref is None or self.locator is None:
            return id(self)
        return hash((id(self.parent), self.locator))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path_string}>"

    # ── 子元件 ──

    def _get_or_create_child(self, key: str, component_cls: type["Component"],
                             metadata: ComponentMetadata) -> "Component":
        child = self._children.get(key)
        if child is None:
            child = component_cls(self, metadata)
            # 先登記再 init，INIT trigger 內再存取自己時拿到同一個實例
            self._children[key] = child
            child.init()
        return child

    def create_control(self, control_cls: type["Component"], name: str | None = None,
                       locator: ScopeLocator | None = None, *,
                       triggers: Iterable[Trigger] = ()) -> "Component":
        """
        建立一個暫時的子元件（不登記在 children，每次呼叫都是新的）。

        trigger 需要臨時查找某個元素時使用，例如標題驗證。
        """
        metadata = ComponentMetadata(
            name=name, locator=locator, triggers=tuple(triggers),
        )
        control = control_cls(self, metadata)
        control.init()
        return control

    def find_control(self, name: str) -> "Component":
        """用顯示名稱或屬性名稱找宣告過的子元件"""
        for key, child in self._children.items():
            if name in (key, child.name):
                return child
        for cls in type(self).__mro__:
            for attr, value in vars(cls).items():
                if isinstance(value, ComponentDescriptor) and name in (attr, value.metadata.name):
                    return getattr(self, attr)
        raise KeyError(f"{self.path_string} 沒有名為 '{name}' 的子元件")

    # ── 元素解析 ──

    def _search_context(self, policy: RetryPolicy | None = None):
        """父元素用和自己相同的 policy 解析"""
        parent = self.parent
        if parent is None:
            return self.context.driver
        if parent.locator is None:
            return parent._search_context(policy)
        return parent.resolve(policy)

    def resolve(self, policy: RetryPolicy | None = None, *,
                use_cache: bool = True) -> WebElement:
        """
        取得此元件對應的元素。

        同一個 epoch 內且元素未 stale 時直接回傳快取；
        否則清掉快取，透過 Search/Retry Engine 重新查找。

        Raises:
            ComponentNotFoundError: timeout 內找不到（index 超出範圍時是 AmbiguousIndexError）
        """
        locator = self.locator
        if locator is None:
            raise ConfigError(f"{self.path_string} 沒有設定 locator，無法解析元素")

        context = self.context
        handle = self._handle
        if (use_cache and self.metadata.cache_element and handle is not None
                and handle.epoch == context.epoch and not _is_stale(handle.element)):
            return handle.element

        self._handle = None
        policy = policy or context.element_find_policy
        scope = self._search_context(policy)
        context.log.trace(f"Find element by {locator} for {self.full_name}")

        try:
            element = find(
                lambda: locator.query(scope),
                locator.text_predicate(self.name, context.default_term_match),
                policy,
                index=locator.index,
                filter_fn=locator.accepts_visibility,
            )
        except NotFoundError as e:
            raise ComponentNotFoundError.from_search(
                e, self.path_string, locator, policy.timeout,
            ) from e

        self._handle = ElementHandle(element, context.epoch)
        return element

    def exists(self, policy: RetryPolicy | None = None) -> bool:
        try:
            self.resolve(policy, use_cache=False)
            return True
        except ComponentNotFoundError:
            return False

    def is_visible(self) -> bool:
        """只查一次，不等待；找到後還要實際顯示在畫面上"""
        try:
            element = self.resolve(RetryPolicy.once(), use_cache=False)
            return element.is_displayed()
        except (ComponentNotFoundError, StaleElementReferenceException):
            return False

    # ── 動作（前後觸發 trigger）──

    def _run_action(self, before: TriggerEvents, after: TriggerEvents,
                    message: str, action: Callable, level: int = logging.INFO):
        pipeline = self.context.triggers
        pipeline.fire(self, before | TriggerEvents.BEFORE_ACCESS)
        with self.log.section(message, level):
            result = action()
        pipeline.fire(self, after | TriggerEvents.AFTER_ACCESS)
        return result

    def _read_value(self, element: WebElement) -> str:
        return element.text

    def _write_value(self, element: WebElement, value: str) -> None:
        element.clear()
        element.send_keys(value)

    def get_text(self) -> str:
        return self._run_action(
            TriggerEvents.BEFORE_GET, TriggerEvents.AFTER_GET,
            f"Get text of {self.full_name}",
            lambda: self.resolve().text,
            level=logging.DEBUG,
        )

    def get_value(self) -> str:
        return self._run_action(
            TriggerEvents.BEFORE_GET, TriggerEvents.AFTER_GET,
            f"Get value of {self.full_name}",
            lambda: self._read_value(self.resolve()),
            level=logging.DEBUG,
        )

    def set_value(self, value) -> None:
        value = "" if value is None else str(value)
        self._run_action(
            TriggerEvents.BEFORE_SET, TriggerEvents.AFTER_SET,
            f'Set "{value}" to {self.full_name}',
            lambda: self._write_value(self.resolve(), value),
        )

    def clear(self) -> None:
        self._run_action(
            TriggerEvents.BEFORE_SET, TriggerEvents.AFTER_SET,
            f"Clear {self.full_name}",
            lambda: self.resolve().clear(),
        )

    def append(self, value: str) -> None:
        self._run_action(
            TriggerEvents.BEFORE_SET, TriggerEvents.AFTER_SET,
            f"Append '{value}' to {self.full_name}",
            lambda: self.resolve().send_keys(value),
        )

    def click(self) -> None:
        self._run_action(
            TriggerEvents.BEFORE_CLICK, TriggerEvents.AFTER_CLICK,
            f"Click {self.full_name}",
            lambda: self.resolve().click(),
        )

    def click_and_go(self, page_cls: type["PageObject"]) -> "PageObject":
        """點擊後切換到下一個 page（推進 epoch）"""
        self.click()
        return self.context.go_to(page_cls, navigate=False)

    # ── 等待 / 驗證（委派給 verification）──

    def wait_until(self, predicate: Callable[["Component"], bool],
                   policy: RetryPolicy | None = None) -> bool:
        return verification.wait_until(self, predicate, policy)

    def wait_until_visible(self, policy: RetryPolicy | None = None) -> bool:
        return verification.wait_until_visible(self, policy)

    def wait_until_missing(self, policy: RetryPolicy | None = None) -> bool:
        return verification.wait_until_missing(self, policy)

    def verify_until_matches_any(self, match: TermMatch | str,
                                 values: Iterable[str],
                                 policy: RetryPolicy | None = None) -> str:
        return verification.verify_until_matches_any(self, match, values, policy)

    # ── 生命週期 ──

    def init(self) -> None:
        self.context.triggers.fire(self, TriggerEvents.INIT)

    def deinit(self) -> None:
        for child in reversed(list(self._children.values())):
            child.deinit()
        self.context.triggers.fire(self, TriggerEvents.DEINIT)
        self._children.clear()
        self._handle = None


class PageObject(Component):
    """
    Page 樹根

    沒有 locator，搜尋範圍就是 driver；owner 是自己；持有 PageContext。
    """

    COMPONENT_TYPE_NAME = "page"
    IGNORE_NAME_ENDINGS = "Page"
    URL: str | None = None

    def __init__(self, context: "PageContext",
                 metadata: ComponentMetadata | None = None):
        self._context = context
        super().__init__(None, metadata)

    @property
    def context(self) -> "PageContext":
        return self._context

    @property
    def owner(self) -> "PageObject":
        return self

    @property
    def title(self) -> str:
        return self._context.driver.title

    def invalidate(self) -> int:
        """推進 epoch，所有快取的元素 handle 失效"""
        return self._context.advance_epoch()

    def go_to(self, page_cls: type["PageObject"], url: str | None = None) -> "PageObject":
        return self._context.go_to(page_cls, url)


class ComponentDescriptor:
    """
    Descriptor，讓 Page / Component 用 class attribute 方式宣告子元件。

    名稱沒指定時由屬性名稱推導：first_name → "First Name"。

    用法：
        class MyPage(PageObject):
            first_name = ComponentDescriptor(TextInput)

        page.first_name.set_value("Ada")   # 第一次存取時建立並觸發 INIT
    """

    def __init__(self, component_cls: type[Component], *,
                 locator: ScopeLocator | None = None, name: str | None = None,
                 triggers: Iterable[Trigger] = (), term: TermSpec | None = None,
                 component_type_name: str | None = None,
                 cache_element: bool = True):
        self.component_cls = component_cls
        self._explicit_name = name
        self._term = term or TermSpec()
        self._attr_name = ""
        self.metadata = ComponentMetadata(
            name=name, locator=locator, triggers=tuple(triggers),
            component_type_name=component_type_name, cache_element=cache_element,
        )

    def __set_name__(self, owner, name):
        self._attr_name = name
        if self._explicit_name is None:
            derived = self._term.display_values(name)
            self.metadata = replace(
                self.metadata, name=derived[0] if derived else name,
            )

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._get_or_create_child(
            self._attr_name, self.component_cls, self.metadata,
        )


def _is_stale(element) -> bool:
    try:
        element.is_enabled()
        return False
    except StaleElementReferenceException:
        return True
