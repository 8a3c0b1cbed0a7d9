from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Literal, Sequence

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_PORT = 3000
VIEWPORT_WIDTH = 1800
VIEWPORT_HEIGHT = 900
DEBUG_ARGUMENT = "debug"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RENDER_PROXY_",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(
        default=DEFAULT_PORT,
        validation_alias=AliasChoices("RENDER_PROXY_PORT", "EXPRESS_PUPPETEER_PROXY_PORT"),
    )

    headless: bool = True
    browser_args: List[str] = Field(default_factory=list)
    navigation_timeout_ms: int = 30_000
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "load"

    @field_validator("port", mode="before")
    @classmethod
    def _empty_port_uses_default(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PORT
        return value

    @field_validator("navigation_timeout_ms")
    @classmethod
    def _positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("navigation_timeout_ms must be positive")
        return value

    @computed_field
    def viewport(self) -> Dict[str, int]:
        return {"width": VIEWPORT_WIDTH, "height": VIEWPORT_HEIGHT}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def is_debug_invocation(argv: Sequence[str]) -> bool:
    """True when the process was started with ``debug`` as its last argument."""
    return bool(argv) and argv[-1] == DEBUG_ARGUMENT
