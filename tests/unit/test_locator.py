"""
pagecore/locator.py 單元測試

驗證 ScopeLocator 建構、相等性、查詢與可見性 / term 過濾。
"""

from unittest.mock import MagicMock

import pytest
from appium.webdriver.common.appiumby import AppiumBy
from selenium.webdriver.common.by import By

from pagecore.locator import ScopeLocator, Visibility
from pagecore.terms import TermMatch, TermSpec


@pytest.mark.unit
class TestScopeLocatorBuild:
    """常用策略與不可變性"""

    def test_css(self):
        locator = ScopeLocator.css("div.card", index=2)
        assert locator.by == By.CSS_SELECTOR
        assert locator.value == "div.card"
        assert locator.index == 2
        assert locator.visibility is Visibility.VISIBLE

    @pytest.mark.parametrize("factory, by", [
        (ScopeLocator.xpath, By.XPATH),
        (ScopeLocator.by_id, By.ID),
        (ScopeLocator.tag, By.TAG_NAME),
        (ScopeLocator.accessibility_id, AppiumBy.ACCESSIBILITY_ID),
    ])
    def test_strategies(self, factory, by):
        assert factory("x").by == by

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            ScopeLocator.css("a", index=-1)

    def test_equal_and_hashable(self):
        term = TermSpec(("Total",))
        a = ScopeLocator.css("div.card", index=1, term=term)
        b = ScopeLocator.css("div.card", index=1, term=TermSpec(("Total",)))
        assert a == b
        assert len({a, b}) == 1

    def test_index_distinguishes(self):
        assert ScopeLocator.css("li") != ScopeLocator.css("li", index=1)

    def test_frozen(self):
        locator = ScopeLocator.css("a")
        with pytest.raises(Exception):
            locator.value = "b"

    def test_str(self):
        locator = ScopeLocator.css("li", index=2, visibility=Visibility.HIDDEN,
                                   term=TermSpec(("A", "B")))
        assert str(locator) == "css selector='li' [2] (hidden) term=A/B"


@pytest.mark.unit
class TestScopeLocatorQuery:
    """查詢與過濾"""

    def test_query_uses_find_elements(self):
        scope = MagicMock()
        scope.find_elements.return_value = ("e1", "e2")
        result = ScopeLocator.by_id("email").query(scope)
        scope.find_elements.assert_called_once_with(By.ID, "email")
        assert result == ["e1", "e2"]

    def test_visibility_filters(self, make_element):
        shown = make_element(displayed=True)
        hidden = make_element(displayed=False)
        assert Visibility.VISIBLE.accepts(shown) is True
        assert Visibility.VISIBLE.accepts(hidden) is False
        assert Visibility.HIDDEN.accepts(hidden) is True
        assert Visibility.ANY.accepts(hidden) is True

    def test_accepts_visibility(self, make_element):
        locator = ScopeLocator.css("a", visibility=Visibility.HIDDEN)
        assert locator.accepts_visibility(make_element(displayed=False)) is True

    def test_no_term_no_predicate(self):
        assert ScopeLocator.css("a").text_predicate("Name") is None

    def test_term_predicate_reads_text(self, make_element):
        locator = ScopeLocator.css("a", term=TermSpec(("Total",)))
        predicate = locator.text_predicate()
        assert predicate(make_element("Total")) is True
        assert predicate(make_element("Sum")) is False

    def test_term_predicate_derives_from_member_name(self, make_element):
        locator = ScopeLocator.css("button", term=TermSpec())
        predicate = locator.text_predicate("Sign In")
        assert predicate(make_element("Sign In")) is True

    def test_term_predicate_uses_default_match(self, make_element):
        locator = ScopeLocator.css("a", term=TermSpec(("Total",)))
        predicate = locator.text_predicate(default_match=TermMatch.CONTAINS)
        assert predicate(make_element("Grand Total")) is True
