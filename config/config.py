"""
設定管理模組
統一管理重試 (retry) 時間與 term 比對的預設值。
支援透過環境變數覆蓋預設值，方便 CI/CD 整合。
支援設定值驗證，提前發現設定錯誤。

時間設定分三組，未設定的組別沿用 BASE_*：
    ELEMENT_FIND_*   元素查找
    WAITING_*        等待
    VERIFICATION_*   驗證
"""

import os


class ConfigValidationError(Exception):
    """重試設定驗證失敗"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        msg = "重試設定驗證失敗:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(msg)


def _env_float(name: str, default: float | None = None) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return float(raw)


class Config:
    """框架全域設定"""

    # 基底重試設定 (秒)
    BASE_RETRY_TIMEOUT = _env_float("BASE_RETRY_TIMEOUT", 5.0)
    BASE_RETRY_INTERVAL = _env_float("BASE_RETRY_INTERVAL", 0.5)

    # 分組設定，None 表示沿用 BASE_*
    ELEMENT_FIND_TIMEOUT = _env_float("ELEMENT_FIND_TIMEOUT")
    ELEMENT_FIND_RETRY_INTERVAL = _env_float("ELEMENT_FIND_RETRY_INTERVAL")
    WAITING_TIMEOUT = _env_float("WAITING_TIMEOUT")
    WAITING_RETRY_INTERVAL = _env_float("WAITING_RETRY_INTERVAL")
    VERIFICATION_TIMEOUT = _env_float("VERIFICATION_TIMEOUT")
    VERIFICATION_RETRY_INTERVAL = _env_float("VERIFICATION_RETRY_INTERVAL")

    # TermMatch.INHERIT 的預設值
    DEFAULT_TERM_MATCH = os.getenv("DEFAULT_TERM_MATCH", "equals").lower()

    @classmethod
    def retry_settings(cls) -> dict[str, tuple[float, float]]:
        """
        取得各組別實際生效的 (timeout, interval)。

        Returns:
            {"element_find": (5.0, 0.5), "waiting": ..., "verification": ...}
        """
        base = (cls.BASE_RETRY_TIMEOUT, cls.BASE_RETRY_INTERVAL)
        groups = {
            "element_find": (cls.ELEMENT_FIND_TIMEOUT, cls.ELEMENT_FIND_RETRY_INTERVAL),
            "waiting": (cls.WAITING_TIMEOUT, cls.WAITING_RETRY_INTERVAL),
            "verification": (cls.VERIFICATION_TIMEOUT, cls.VERIFICATION_RETRY_INTERVAL),
        }
        return {
            name: (
                base[0] if timeout is None else timeout,
                base[1] if interval is None else interval,
            )
            for name, (timeout, interval) in groups.items()
        }

    @classmethod
    def validate_retry_settings(cls) -> dict[str, tuple[float, float]]:
        """
        驗證重試設定。

        Returns:
            實際生效的設定

        Raises:
            ConfigValidationError: timeout < 0 或 interval <= 0
        """
        errors: list[str] = []
        settings = cls.retry_settings()

        for name, (timeout, interval) in settings.items():
            if timeout < 0:
                errors.append(f"{name} timeout 不可小於 0: {timeout}")
            if interval <= 0:
                errors.append(f"{name} interval 必須大於 0: {interval}")

        if errors:
            raise ConfigValidationError(errors)

        return settings
