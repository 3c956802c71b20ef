"""
pagecore/terms.py 單元測試

驗證名稱切字、TermCase 轉換、TermMatch 比對與 INHERIT 解析、TermSpec 推導。
"""

import pytest

from pagecore.terms import (
    TermCase,
    TermMatch,
    TermSpec,
    build_predicate,
    describe_expectation,
    split_words,
    strip_name_endings,
    to_display_string,
)


@pytest.mark.unit
class TestSplitWords:
    """切字"""

    @pytest.mark.parametrize("name, expected", [
        ("FirstName", ["First", "Name"]),
        ("first_name", ["first", "name"]),
        ("HTMLParser", ["HTML", "Parser"]),
        ("step2Done", ["step", "2", "Done"]),
        ("sign-in", ["sign", "in"]),
        ("", []),
    ])
    def test_split(self, name, expected):
        assert split_words(name) == expected


@pytest.mark.unit
class TestTermCase:
    """名稱轉換"""

    @pytest.mark.parametrize("case, expected", [
        (TermCase.TITLE, "First Name"),
        (TermCase.SENTENCE, "First name"),
        (TermCase.LOWER, "first name"),
        (TermCase.UPPER, "FIRST NAME"),
        (TermCase.CAMEL, "firstName"),
        (TermCase.PASCAL, "FirstName"),
        (TermCase.KEBAB, "first-name"),
        (TermCase.SNAKE, "first_name"),
        (TermCase.LOWER_MERGED, "firstname"),
        (TermCase.UPPER_MERGED, "FIRSTNAME"),
    ])
    def test_apply(self, case, expected):
        assert case.apply("first_name") == expected

    def test_inherit_behaves_as_title(self):
        assert TermCase.INHERIT.apply("FirstName") == "First Name"

    def test_none_keeps_name(self):
        assert TermCase.NONE.apply("first_name") == "first_name"

    def test_title_keeps_acronym(self):
        assert TermCase.TITLE.apply("HTMLParser") == "HTML Parser"


@pytest.mark.unit
class TestTermMatch:
    """比對方式"""

    def test_inherit_resolves_to_equals_without_default(self):
        assert TermMatch.INHERIT.resolve() is TermMatch.EQUALS

    def test_inherit_resolves_to_default(self):
        assert TermMatch.INHERIT.resolve(TermMatch.CONTAINS) is TermMatch.CONTAINS

    def test_explicit_match_ignores_default(self):
        assert TermMatch.EQUALS.resolve(TermMatch.CONTAINS) is TermMatch.EQUALS

    def test_inherit_cannot_match_directly(self):
        with pytest.raises(ValueError):
            TermMatch.INHERIT.matches("Home", "Home")

    @pytest.mark.parametrize("match, text, value, expected", [
        (TermMatch.EQUALS, "Home", "Home", True),
        (TermMatch.EQUALS, "  Home\n ", "Home", True),
        (TermMatch.EQUALS, "home", "Home", False),
        (TermMatch.EQUALS_IGNORE_CASE, "home", "Home", True),
        (TermMatch.CONTAINS, "Welcome Home", "Home", True),
        (TermMatch.CONTAINS_IGNORE_CASE, "WELCOME HOME", "home", True),
        (TermMatch.STARTS_WITH, "Home - Site", "Home", True),
        (TermMatch.ENDS_WITH, "Home - Site", "Home", False),
        (TermMatch.ENDS_WITH_IGNORE_CASE, "My SITE", "site", True),
    ])
    def test_matches(self, match, text, value, expected):
        assert match.matches(text, value) is expected

    def test_none_text_never_matches(self):
        assert TermMatch.EQUALS.matches(None, "") is False

    def test_ignore_case_flag(self):
        assert TermMatch.CONTAINS_IGNORE_CASE.ignore_case is True
        assert TermMatch.CONTAINS.ignore_case is False

    def test_parse(self):
        assert TermMatch.parse("contains-ignore-case") is TermMatch.CONTAINS_IGNORE_CASE
        assert TermMatch.parse(" Equals ") is TermMatch.EQUALS
        assert TermMatch.parse(TermMatch.ENDS_WITH) is TermMatch.ENDS_WITH

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="未知的 TermMatch"):
            TermMatch.parse("fuzzy")

    def test_describe(self):
        assert TermMatch.EQUALS.describe() == "等於其一"
        assert TermMatch.CONTAINS_IGNORE_CASE.describe() == "包含其一（不分大小寫）"


@pytest.mark.unit
class TestTermSpec:
    """TermSpec 推導顯示值與 predicate"""

    def test_single_string_value(self):
        assert TermSpec("Home").values == ("Home",)

    def test_derived_from_member_name(self):
        assert TermSpec().display_values("first_name") == ("First Name",)

    def test_case_applied_to_member_name(self):
        spec = TermSpec(case=TermCase.KEBAB)
        assert spec.display_values("FirstName") == ("first-name",)

    def test_format_applied(self):
        spec = TermSpec(("Home", "Dashboard"), format="{0} Page")
        assert spec.display_values() == ("Home Page", "Dashboard Page")

    def test_explicit_values_ignore_member_name(self):
        assert TermSpec(("Sign In",)).display_values("login") == ("Sign In",)

    def test_no_values_no_name(self):
        assert TermSpec().display_values() == ()

    def test_predicate_any(self):
        predicate = TermSpec(("Home", "Dashboard")).predicate()
        assert predicate("Dashboard") is True
        assert predicate("Settings") is False

    def test_predicate_uses_default_match(self):
        predicate = TermSpec(("Home",)).predicate(default_match=TermMatch.CONTAINS)
        assert predicate("Welcome Home") is True

    def test_resolved_match_keeps_explicit(self):
        spec = TermSpec(match=TermMatch.STARTS_WITH)
        assert spec.resolved_match(TermMatch.CONTAINS) is TermMatch.STARTS_WITH

    def test_hashable(self):
        assert hash(TermSpec(("A",))) == hash(TermSpec(("A",)))


@pytest.mark.unit
class TestHelpers:
    """輔助函式"""

    def test_build_predicate_resolves_inherit(self):
        predicate = build_predicate(TermMatch.INHERIT, ["Home"])
        assert predicate("Home") is True
        assert predicate("Home Page") is False

    def test_to_display_string(self):
        assert to_display_string(["Home"]) == "Home"
        assert to_display_string(["Home", "Dashboard"]) == "Home/Dashboard"

    def test_describe_expectation(self):
        assert describe_expectation(TermMatch.INHERIT, ["A", "B"]) == "等於其一 [A, B]"

    def test_strip_first_matching_ending(self):
        endings = "PopupWindow,Window,Popup"
        assert strip_name_endings("LoginPopupWindow", endings) == "Login"
        assert strip_name_endings("HelpWindow", endings) == "Help"

    def test_strip_keeps_name_equal_to_ending(self):
        assert strip_name_endings("Page", "Page") == "Page"

    def test_strip_accepts_iterable(self):
        assert strip_name_endings("SignInPage", ["Page"]) == "SignIn"
