"""
pagecore — page object 核心

統一匯出所有核心元件，方便外部 import。

用法：
    from pagecore import PageContext, PageObject, ComponentDescriptor, TextInput
    from pagecore import ScopeLocator, TermMatch, TriggerEvents, VerifyH1
    from pagecore import ComponentNotFoundError, VerificationError
"""

from pagecore.component import (
    Component,
    ComponentDescriptor,
    ComponentMetadata,
    ElementHandle,
    PageObject,
)
from pagecore.context import ContextBuilder, PageContext
from pagecore.controls import (
    H1, H2, H3, H4, H5, H6,
    Button,
    Control,
    Heading,
    Input,
    PasswordInput,
    Text,
    TextInput,
)
from pagecore.event_bus import Event, EventBus
from pagecore.exceptions import (
    AmbiguousIndexError,
    ComponentNotFoundError,
    ConfigError,
    InvalidConfigError,
    NotFoundError,
    PageCoreError,
    TriggerError,
    TriggerReentryError,
    VerificationError,
)
from pagecore.locator import ScopeLocator, Visibility
from pagecore.log_manager import LogManager
from pagecore.retry import RetryPolicy, find, wait_until
from pagecore.terms import TermCase, TermMatch, TermSpec
from pagecore.triggers import (
    FunctionTrigger,
    InvalidateCache,
    LogInfo,
    Trigger,
    TriggerContext,
    TriggerEvents,
    TriggerPipeline,
    Wait,
)
from pagecore.verify_triggers import (
    VerifyH1, VerifyH2, VerifyH3, VerifyH4, VerifyH5, VerifyH6,
    VerifyHeading,
    VerifyTitle,
    WaitForElement,
)

__all__ = [
    # Context / Tree
    "PageContext",
    "ContextBuilder",
    "PageObject",
    "Component",
    "ComponentDescriptor",
    "ComponentMetadata",
    "ElementHandle",
    # Controls
    "Control", "Text", "Button", "Input", "TextInput", "PasswordInput",
    "Heading", "H1", "H2", "H3", "H4", "H5", "H6",
    # Locator / Retry / Terms
    "ScopeLocator",
    "Visibility",
    "RetryPolicy",
    "find",
    "wait_until",
    "TermSpec",
    "TermCase",
    "TermMatch",
    # Triggers
    "Trigger",
    "TriggerContext",
    "TriggerEvents",
    "TriggerPipeline",
    "FunctionTrigger",
    "LogInfo",
    "Wait",
    "InvalidateCache",
    "VerifyTitle",
    "VerifyHeading",
    "VerifyH1", "VerifyH2", "VerifyH3", "VerifyH4", "VerifyH5", "VerifyH6",
    "WaitForElement",
    # Logging
    "LogManager",
    "EventBus",
    "Event",
    # Exceptions
    "PageCoreError",
    "NotFoundError",
    "ComponentNotFoundError",
    "AmbiguousIndexError",
    "VerificationError",
    "TriggerError",
    "TriggerReentryError",
    "ConfigError",
    "InvalidConfigError",
]
