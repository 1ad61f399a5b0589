"""Environment-driven settings for ddgproxy."""
from dataclasses import dataclass
from functools import lru_cache
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_STATUS_URL = "https://duckduckgo.com/duckchat/v1/status"
DEFAULT_CHAT_URL = "https://duckduckgo.com/duckchat/v1/chat"


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> tuple:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    log_level: str
    app_version: str
    log_dir: str
    log_to_file: bool
    upstream_timeout: float
    max_body_mb: float
    strict_config: bool
    api_keys: tuple
    config_path: str
    status_url: str
    chat_url: str

    @property
    def max_content_length(self) -> int:
        return int(self.max_body_mb * 1024 * 1024)


def load_settings() -> Settings:
    """Read settings from the current environment."""
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        app_version=os.getenv("APP_VERSION", "1.2.0"),
        log_dir=os.getenv("LOG_DIR", os.path.join(root, "logs")),
        log_to_file=_env_flag("LOG_TO_FILE", "False"),
        upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT", "60")),
        max_body_mb=float(os.getenv("MAX_BODY_MB", "4")),
        strict_config=_env_flag("STRICT_CONFIG"),
        api_keys=_env_list("API_KEYS"),
        config_path=os.getenv("CONFIG_PATH", os.path.join(root, "config.json")),
        status_url=os.getenv("DDG_STATUS_URL", DEFAULT_STATUS_URL),
        chat_url=os.getenv("DDG_CHAT_URL", DEFAULT_CHAT_URL),
    )


@lru_cache
def get_settings() -> Settings:
    """Return process-wide settings, loaded once."""
    return load_settings()
