"""
Verification / Waiting Façade

建立在 Search/Retry Engine 上的「等到條件成立」與「驗證直到符合」。

- wait_until: 逾時回傳 False（不拋例外），預設用 context 的 waiting policy
- verify_until_matches_any: 逾時拋 VerificationError，附預期值與最後看到的文字，
  預設用 context 的 verification policy
- 每次輪詢都重新解析元件，不沿用上一輪拿到的元素

用法：
    from pagecore import verification

    verification.verify_until_matches_any(page.heading, TermMatch.EQUALS, ["Home", "Dashboard"])
    verification.wait_until(page.spinner, lambda c: not c.is_visible())
"""

from __future__ import annotations

from typing import Callable, Iterable

from pagecore import retry
from pagecore.exceptions import NotFoundError, VerificationError
from pagecore.retry import RetryPolicy, find
from pagecore.terms import TermMatch, build_predicate, describe_expectation


def wait_until(component, predicate: Callable[[object], object],
               policy: RetryPolicy | None = None) -> bool:
    """
    等待 predicate(component) 成立。

    輪詢中找不到元件 (NotFoundError) 視為「尚未成立」。
    """
    policy = policy or component.context.waiting_policy

    def _condition():
        try:
            return predicate(component)
        except NotFoundError:
            return False

    return retry.wait_until(_condition, policy)


def wait_until_visible(component, policy: RetryPolicy | None = None) -> bool:
    with component.log.section(f"Wait until {component.full_name} is visible"):
        return wait_until(component, lambda c: c.is_visible(), policy)


def wait_until_missing(component, policy: RetryPolicy | None = None) -> bool:
    with component.log.section(f"Wait until {component.full_name} is missing"):
        return wait_until(component, lambda c: not c.is_visible(), policy)


def read_text(component) -> str:
    """重新解析元件（只查一次、不用快取）後讀取文字"""
    return component.resolve(RetryPolicy.once(), use_cache=False).text


def verify_until_matches_any(component, match: TermMatch | str,
                             values: Iterable[str],
                             policy: RetryPolicy | None = None, *,
                             read: Callable[[object], str] | None = None) -> str:
    """
    驗證元件文字直到符合任一個 value。

    Args:
        component: 要驗證的元件
        match: 比對方式，INHERIT 用 context 的預設值
        values: 預期值（符合其一即可）
        policy: 重試設定，None 用 context.verification_policy
        read: 取得觀察值的函式，預設讀取元素文字

    Returns:
        第一次符合時觀察到的文字

    Raises:
        VerificationError: timeout 內都不符合
    """
    context = component.context
    policy = policy or context.verification_policy
    match = TermMatch.parse(match).resolve(context.default_term_match)
    values = tuple(values)
    if not values:
        raise ValueError("verify_until_matches_any 至少需要一個預期值")

    read = read or read_text
    predicate = build_predicate(match, values)
    observed: dict[str, str | None] = {"text": None}

    def _query():
        try:
            text = read(component)
        except NotFoundError:
            observed["text"] = None
            return []
        observed["text"] = text
        return [text]

    message = f"Verify {component.full_name} {describe_expectation(match, values)}"
    with context.log.section(message):
        try:
            return find(_query, predicate, policy)
        except NotFoundError as e:
            raise VerificationError(
                component.path_string, values, observed["text"],
                match.describe(), policy.timeout,
            ) from e
