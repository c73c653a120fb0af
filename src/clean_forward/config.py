from datetime import timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clean_forward.services.quote_detector import DetectorLimits


def _load_zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    message_clean_timeout_seconds: float = 10.0
    forward_subject_prefix: str = "FWD:"
    forward_default_subject: str = "Forwarded Conversation"
    display_timezone: str = "UTC"

    quote_min_lines_before_signature: int = 5
    quote_min_lines_before_headers: int = 3
    quote_wrote_line_max_chars: int = 100
    reflow_short_line_max_chars: int = 40

    @field_validator("display_timezone")
    @classmethod
    def check_display_timezone(cls, value: str) -> str:
        try:
            _load_zone(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @property
    def display_tzinfo(self) -> tzinfo:
        return _load_zone(self.display_timezone)

    @property
    def detector_limits(self) -> DetectorLimits:
        return DetectorLimits(
            min_lines_before_signature=self.quote_min_lines_before_signature,
            min_lines_before_headers=self.quote_min_lines_before_headers,
            wrote_line_max_chars=self.quote_wrote_line_max_chars,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
