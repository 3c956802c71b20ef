"""
PageContext — 一次測試執行的上下文

持有 driver、重試設定、紀錄出口、epoch 與 trigger 派送器。
不使用全域的「目前 context」：page 建立時就帶入 context，
所有元件都從自己的 owner 取得它。

用法：
    context = (
        PageContext.configure()
        .use_driver(driver)
        .use_base_url("https://example.com")
        .use_element_find_timeout(10)
        .use_verification_timeout(15)
        .add_secret_string_to_mask("p@ssw0rd")
        .build()
    )

    page = context.go_to(SignInPage)
    ...
    context.clean_up()
"""

from __future__ import annotations

from typing import Callable
from urllib.parse import urljoin, urlparse

from config.config import Config
from pagecore.event_bus import EventBus
from pagecore.exceptions import ConfigError, InvalidConfigError
from pagecore.log_manager import DEFAULT_MASK, LogManager, SecretStringToMask
from pagecore.retry import RetryPolicy
from pagecore.terms import TermMatch
from pagecore.triggers import TriggerPipeline


class PageContext:
    """單一執行緒使用；不同的測試各自建立自己的 context"""

    def __init__(self, driver, *, base_url: str | None = None,
                 element_find_policy: RetryPolicy | None = None,
                 waiting_policy: RetryPolicy | None = None,
                 verification_policy: RetryPolicy | None = None,
                 default_term_match: TermMatch = TermMatch.EQUALS,
                 log: LogManager | None = None,
                 clean_up_actions: list[Callable[[], object]] | None = None):
        self.driver = driver
        self.base_url = base_url
        self.element_find_policy = element_find_policy or RetryPolicy()
        self.waiting_policy = waiting_policy or RetryPolicy()
        self.verification_policy = verification_policy or RetryPolicy()
        self.default_term_match = default_term_match.resolve()
        self.log = log or LogManager()
        self.clean_up_actions = list(clean_up_actions or [])
        self.triggers = TriggerPipeline(self.log)
        self.current_page = None
        self._epoch = 0

    @classmethod
    def configure(cls) -> "ContextBuilder":
        return ContextBuilder()

    # ── epoch ──

    @property
    def epoch(self) -> int:
        return self._epoch

    def advance_epoch(self) -> int:
        """之前解析的元素 handle 全部失效"""
        self._epoch += 1
        self.log.trace(f"Element handles invalidated (epoch={self._epoch})")
        return self._epoch

    # ── 導頁 ──

    def resolve_url(self, url: str) -> str:
        if self.base_url and not urlparse(url).scheme:
            return urljoin(self.base_url.rstrip("/") + "/", url.lstrip("/"))
        return url

    def go_to(self, page_cls, url: str | None = None, navigate: bool = True):
        """
        切換到 page_cls。

        Args:
            page_cls: PageObject 子類別
            url: 要開啟的網址；None 則用 page_cls.URL
            navigate: False → 不呼叫 driver.get（例如點擊後已經換頁）

        Returns:
            已初始化（INIT trigger 已執行）的 page
        """
        target = url or page_cls.URL
        page = page_cls(self)

        with self.log.section(f"Go to {page.full_name}"):
            if self.current_page is not None:
                previous, self.current_page = self.current_page, None
                previous.deinit()
            if navigate and target:
                full_url = self.resolve_url(target)
                self.log.info(f"Navigate to {full_url}")
                self.driver.get(full_url)
            self.advance_epoch()
            self.current_page = page
            page.init()

        return page

    def clean_up(self) -> None:
        """拆除目前的 page（DEINIT）並執行 clean-up 動作"""
        with self.log.section("Clean up context"):
            if self.current_page is not None:
                page, self.current_page = self.current_page, None
                page.deinit()
            for action in self.clean_up_actions:
                action()


class ContextBuilder:
    """
    PageContext 建構器

    預設值來自 config.Config（可用環境變數覆蓋）；
    分組設定未指定時沿用 base timeout / interval。
    環境變數的設定在建立時就先驗證，有錯一次列出全部。
    """

    def __init__(self):
        Config.validate_retry_settings()
        self._driver = None
        self._base_url: str | None = None
        self._base_timeout = Config.BASE_RETRY_TIMEOUT
        self._base_interval = Config.BASE_RETRY_INTERVAL
        self._groups: dict[str, list[float | None]] = {
            "element_find": [Config.ELEMENT_FIND_TIMEOUT, Config.ELEMENT_FIND_RETRY_INTERVAL],
            "waiting": [Config.WAITING_TIMEOUT, Config.WAITING_RETRY_INTERVAL],
            "verification": [Config.VERIFICATION_TIMEOUT, Config.VERIFICATION_RETRY_INTERVAL],
        }
        self._default_term_match = TermMatch.parse(Config.DEFAULT_TERM_MATCH)
        self._secrets: list[SecretStringToMask] = []
        self._event_bus: EventBus | None = None
        self._on_building: list[Callable[[], object]] = []
        self._on_built: list[Callable[[], object]] = []
        self._on_clean_up: list[Callable[[], object]] = []

    # ── driver / url ──

    def use_driver(self, driver) -> "ContextBuilder":
        """driver 實例，或回傳 driver 的 callable（build 時才建立）"""
        if driver is None:
            raise ConfigError("driver 不可為 None")
        self._driver = driver
        return self

    def use_base_url(self, base_url: str | None) -> "ContextBuilder":
        if base_url is not None:
            parsed = urlparse(base_url)
            if not parsed.scheme or not parsed.netloc:
                raise InvalidConfigError("base_url", base_url, "必須是絕對網址")
        self._base_url = base_url
        return self

    # ── 重試設定 ──

    def use_base_retry_timeout(self, seconds: float) -> "ContextBuilder":
        self._base_timeout = seconds
        return self

    def use_base_retry_interval(self, seconds: float) -> "ContextBuilder":
        self._base_interval = seconds
        return self

    def use_element_find_timeout(self, seconds: float) -> "ContextBuilder":
        self._groups["element_find"][0] = seconds
        return self

    def use_element_find_retry_interval(self, seconds: float) -> "ContextBuilder":
        self._groups["element_find"][1] = seconds
        return self

    def use_waiting_timeout(self, seconds: float) -> "ContextBuilder":
        self._groups["waiting"][0] = seconds
        return self

    def use_waiting_retry_interval(self, seconds: float) -> "ContextBuilder":
        self._groups["waiting"][1] = seconds
        return self

    def use_verification_timeout(self, seconds: float) -> "ContextBuilder":
        self._groups["verification"][0] = seconds
        return self

    def use_verification_retry_interval(self, seconds: float) -> "ContextBuilder":
        self._groups["verification"][1] = seconds
        return self

    def use_default_term_match(self, match: TermMatch | str) -> "ContextBuilder":
        match = TermMatch.parse(match)
        if match is TermMatch.INHERIT:
            raise InvalidConfigError("default_term_match", "inherit", "預設值不可為 INHERIT")
        self._default_term_match = match
        return self

    # ── 紀錄 ──

    def add_secret_string_to_mask(self, value: str, mask: str = DEFAULT_MASK) -> "ContextBuilder":
        if not value or not value.strip():
            raise InvalidConfigError("secret", repr(value), "不可為空白")
        if not mask or not mask.strip():
            raise InvalidConfigError("mask", repr(mask), "不可為空白")
        self._secrets.append(SecretStringToMask(value, mask))
        return self

    def use_event_bus(self, event_bus: EventBus) -> "ContextBuilder":
        """多個 context 共用同一個紀錄出口時使用"""
        self._event_bus = event_bus
        return self

    # ── hooks ──

    def on_building(self, action: Callable[[], object]) -> "ContextBuilder":
        self._on_building.append(action)
        return self

    def on_built(self, action: Callable[[], object]) -> "ContextBuilder":
        self._on_built.append(action)
        return self

    def on_clean_up(self, action: Callable[[], object]) -> "ContextBuilder":
        self._on_clean_up.append(action)
        return self

    # ── build ──

    def policy_for(self, group: str) -> RetryPolicy:
        timeout, interval = self._groups[group]
        return RetryPolicy(
            timeout=self._base_timeout if timeout is None else timeout,
            interval=self._base_interval if interval is None else interval,
        )

    def build(self) -> PageContext:
        if self._driver is None:
            raise ConfigError(
                "沒有指定 driver，無法建立 PageContext。"
                "請先呼叫 use_driver()，例如: PageContext.configure().use_driver(driver).build()"
            )

        policies = {group: self.policy_for(group) for group in self._groups}
        log = LogManager(self._event_bus, self._secrets)

        with log.section("Set up PageContext"):
            for action in self._on_building:
                action()

            driver = self._driver
            if callable(driver) and not hasattr(driver, "find_elements"):
                driver = driver()

            context = PageContext(
                driver,
                base_url=self._base_url,
                element_find_policy=policies["element_find"],
                waiting_policy=policies["waiting"],
                verification_policy=policies["verification"],
                default_term_match=self._default_term_match,
                log=log,
                clean_up_actions=self._on_clean_up,
            )

            if self._base_url:
                log.trace(f"Set: BaseUrl={self._base_url}")
            for group, policy in policies.items():
                log.trace(f"Set: {group} {policy}")
            log.trace(f"Set: DefaultTermMatch={self._default_term_match.value}")

            for action in self._on_built:
                action()

        return context
