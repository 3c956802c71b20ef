"""
pagecore/log_manager.py 單元測試
驗證區段開始 / 結束事件、巢狀深度、失敗標記與機密字串遮蔽。
"""

import logging
from unittest.mock import patch

import pytest

from pagecore.event_bus import EventBus
from pagecore.log_manager import DEFAULT_MASK, LogManager, SecretStringToMask
from utils.logger import TRACE


@pytest.mark.unit
class TestLogManagerEntries:
    """單筆紀錄"""

    def setup_method(self):
        self.bus = EventBus()
        self.log = LogManager(self.bus, source="test")

    @pytest.mark.parametrize("method, event", [
        ("trace", "log.trace"),
        ("info", "log.info"),
        ("warn", "log.warn"),
        ("error", "log.error"),
    ])
    def test_event_names(self, method, event):
        getattr(self.log, method)("message")
        emitted = self.bus.get_history(event)
        assert len(emitted) == 1
        assert emitted[0].data["message"] == "message"
        assert emitted[0].source == "test"

    def test_error_includes_exception(self):
        self.log.error("failed", ValueError("bad"))
        event = self.bus.get_history("log.error")[0]
        assert event.data["exception"] == "ValueError('bad')"

    def test_writes_to_logger(self):
        with patch("pagecore.log_manager.logger") as mock_logger:
            self.log.trace("resolving")
        mock_logger.log.assert_called_once_with(
            TRACE, "resolving", extra={"event": "log.trace", "section_depth": 0},
        )

    def test_section_end_logs_elapsed(self):
        with patch("pagecore.log_manager.logger") as mock_logger:
            with self.log.section("step", logging.DEBUG):
                pass
        levels = [c.args[0] for c in mock_logger.log.call_args_list]
        assert levels == [logging.DEBUG, logging.DEBUG]
        assert "elapsed" in mock_logger.log.call_args_list[1].kwargs["extra"]


@pytest.mark.unit
class TestLogManagerSection:
    """區段"""

    def setup_method(self):
        self.bus = EventBus()
        self.log = LogManager(self.bus)

    def test_start_and_end(self):
        with self.log.section('Click "Save" button'):
            pass
        start, end = self.bus.get_history("log.section.*")
        assert start.name == "log.section.start"
        assert start.data["message"] == '> Click "Save" button'
        assert end.name == "log.section.end"
        assert end.data["message"].startswith('< Click "Save" button (')
        assert end.data["failed"] is False
        assert end.data["elapsed"] >= 0

    def test_nested_depth(self):
        with self.log.section("outer"):
            assert self.log.depth == 1
            with self.log.section("inner"):
                self.log.trace("inside")
        assert self.log.depth == 0
        assert self.bus.get_history("log.trace")[0].data["depth"] == 2

    def test_failure_marked_and_reraised(self):
        with pytest.raises(RuntimeError):
            with self.log.section("Set value"):
                raise RuntimeError("boom")
        end = self.bus.get_history("log.section.end")[0]
        assert end.data["failed"] is True
        assert end.data["message"].endswith("[失敗]")
        assert self.log.depth == 0


@pytest.mark.unit
class TestSecretMasking:
    """機密字串遮蔽"""

    def test_default_mask(self):
        log = LogManager(secrets=[SecretStringToMask("hunter2")])
        assert log.mask("password=hunter2") == f"password={DEFAULT_MASK}"

    def test_add_secret(self):
        bus = EventBus()
        log = LogManager(bus)
        log.add_secret("tok", mask="###")
        with log.section('Set "tok" to "Token" input'):
            log.info("using tok")
        messages = [e.data["message"] for e in bus.get_history()]
        assert all("tok" not in m for m in messages)
        assert '> Set "###" to "Token" input' in messages
        assert "using ###" in messages

    def test_own_event_bus_by_default(self):
        assert isinstance(LogManager().event_bus, EventBus)
