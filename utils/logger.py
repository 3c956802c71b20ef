"""
日誌模組
統一的 logging 設定，同時輸出到 console 與檔案。

支援：
- TRACE 等級（比 DEBUG 更細，元素解析 / trigger 執行的追蹤紀錄）
- Console 輸出（人類可讀格式）
- 檔案輸出（純文字 + 可選 JSON 結構化格式）
- 環境變數控制:
    LOG_LEVEL: console 日誌等級 (預設 INFO，可設 TRACE)
    LOG_JSON: 設為 "1" 啟用 JSON 結構化日誌檔
    LOG_DIR: 日誌目錄 (預設專案下的 reports/)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_DIR = Path(
    os.getenv("LOG_DIR", "") or Path(__file__).resolve().parent.parent / "reports"
)


class JsonFormatter(logging.Formatter):
    """JSON 結構化日誌格式器，LogManager 帶入的 extra 欄位一併輸出"""

    EXTRA_FIELDS = ("event", "section_depth", "elapsed")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    if name == "TRACE":
        return TRACE
    return getattr(logging, name, logging.INFO)


def _create_logger() -> logging.Logger:
    _logger = logging.Logger("pagecore")
    _logger.setLevel(TRACE)

    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)-7s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler（人類可讀）
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(_level_from_env())
    console.setFormatter(fmt)
    _logger.addHandler(console)

    # File handler（純文字，含 TRACE）
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(LOG_DIR / "pagecore.log", encoding="utf-8")
    file_handler.setLevel(TRACE)
    file_handler.setFormatter(fmt)
    _logger.addHandler(file_handler)

    # JSON file handler（可選，設 LOG_JSON=1 啟用）
    if os.getenv("LOG_JSON", "").strip() == "1":
        json_handler = logging.FileHandler(
            LOG_DIR / "pagecore.json.log", encoding="utf-8"
        )
        json_handler.setLevel(TRACE)
        json_handler.setFormatter(JsonFormatter())
        _logger.addHandler(json_handler)

    return _logger


logger = _create_logger()
