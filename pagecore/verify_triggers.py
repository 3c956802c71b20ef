"""
驗證 / 等待類 trigger

需要建立子元件或走 Verification Façade 的 trigger 放這裡，
避免 triggers.py 反過來依賴 component / controls。

- VerifyTitle: page 初始化後驗證視窗標題
- VerifyHeading / VerifyH1..H6: 在 owner 上建立臨時的標題元件再驗證文字
- WaitForElement: 動作後等某個元素出現或消失

沒有給 values 時，預期值由元件名稱推導（套用 case / format）。
"""

from __future__ import annotations

from pagecore import verification
from pagecore.controls import HEADINGS, Control
from pagecore.exceptions import VerificationError
from pagecore.locator import ScopeLocator
from pagecore.retry import RetryPolicy
from pagecore.terms import TermCase, TermMatch, TermSpec, to_display_string
from pagecore.triggers import Trigger, TriggerContext, TriggerEvents


class TermTrigger(Trigger):
    """帶 TermSpec 的 trigger 基底"""

    DEFAULT_ON = TriggerEvents.INIT

    def __init__(self, *values: str, match: TermMatch = TermMatch.INHERIT,
                 case: TermCase = TermCase.INHERIT, format: str | None = None,
                 policy: RetryPolicy | None = None,
                 on: TriggerEvents | None = None, **kwargs):
        super().__init__(on, **kwargs)
        self.term = TermSpec(values, case=case, format=format, match=match)
        self.policy = policy

    def expected_values(self, context: TriggerContext) -> tuple[str, ...]:
        values = self.term.display_values(context.component.name)
        if not values:
            raise ValueError(f"{self.name} 無法推導預期值: {context.component.full_name}")
        return values


class VerifyTitle(TermTrigger):
    """驗證 driver.title"""

    def execute(self, context: TriggerContext) -> None:
        page = context.owner
        verification.verify_until_matches_any(
            page, self.term.match, self.expected_values(context), self.policy,
            read=lambda p: p.context.driver.title,
        )


class VerifyHeading(TermTrigger):
    """
    驗證標題 <hN> 文字。

    在 owner（page）上建立新的標題元件，名稱是預期值本身，
    所以找不到時的錯誤訊息直接指向那個標題。
    """

    LEVEL = 1

    def __init__(self, *values: str, index: int = 0, **kwargs):
        super().__init__(*values, **kwargs)
        self.index = index

    def execute(self, context: TriggerContext) -> None:
        values = self.expected_values(context)
        heading_cls = HEADINGS[self.LEVEL]
        heading = context.owner.create_control(
            heading_cls,
            to_display_string(values),
            ScopeLocator.tag(f"h{self.LEVEL}", index=self.index),
        )
        heading.verify_until_matches_any(self.term.match, values, self.policy)


class VerifyH1(VerifyHeading):
    LEVEL = 1


class VerifyH2(VerifyHeading):
    LEVEL = 2


class VerifyH3(VerifyHeading):
    LEVEL = 3


class VerifyH4(VerifyHeading):
    LEVEL = 4


class VerifyH5(VerifyHeading):
    LEVEL = 5


class VerifyH6(VerifyHeading):
    LEVEL = 6


class WaitForElement(Trigger):
    """
    等待 locator 對應的元素出現 (until="visible") 或消失 (until="missing")。

    逾時預設拋 VerificationError；throw_on_timeout=False 時只記錄警告。
    """

    DEFAULT_ON = TriggerEvents.AFTER_CLICK

    def __init__(self, locator: ScopeLocator, until: str = "visible",
                 policy: RetryPolicy | None = None, throw_on_timeout: bool = True,
                 on: TriggerEvents | None = None, **kwargs):
        super().__init__(on, **kwargs)
        if until not in ("visible", "missing"):
            raise ValueError(f"until 只能是 visible 或 missing: {until}")
        self.locator = locator
        self.until = until
        self.policy = policy
        self.throw_on_timeout = throw_on_timeout

    def execute(self, context: TriggerContext) -> None:
        element = context.owner.create_control(Control, str(self.locator), self.locator)

        if self.until == "visible":
            ok = element.wait_until_visible(self.policy)
        else:
            ok = element.wait_until_missing(self.policy)

        if ok:
            return
        if self.throw_on_timeout:
            policy = self.policy or context.context.waiting_policy
            raise VerificationError(
                element.path_string, (self.until,), None, "元素狀態", policy.timeout,
            )
        context.log.warn(f"Wait for {element.full_name} to be {self.until} 逾時")
