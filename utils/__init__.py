from utils.logger import TRACE, JsonFormatter, logger

__all__ = [
    "logger",
    "TRACE",
    "JsonFormatter",
]
