import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL_NAME = "llama-3.3-70b-versatile"
DEFAULT_SEARCH_URL = "https://google-search74.p.rapidapi.com/"
DEFAULT_SEARCH_HOST = "google-search74.p.rapidapi.com"


def _bool_env(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _float_env(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return float(v)
    except ValueError:
        logger.warning("%s=%r is not a number; using %s", name, v, default)
        return default


def _int_env(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("%s=%r is not an integer; using %s", name, v, default)
        return default


def _credential(value: Optional[str]) -> Optional[str]:
    # Placeholders copied from sample env files count as "not configured".
    if value is None:
        return None
    value = value.strip()
    if not value or (value.startswith("your-") and value.endswith("-here")):
        return None
    return value


class Settings(BaseModel):
    completion_api_key: Optional[str] = None
    completion_base_url: str = DEFAULT_COMPLETION_BASE_URL
    model_name: str = DEFAULT_MODEL_NAME
    search_api_key: Optional[str] = None
    search_url: str = DEFAULT_SEARCH_URL
    search_host: str = DEFAULT_SEARCH_HOST
    search_cooldown_seconds: float = 2.0
    max_sessions: int = 1000
    allow_logging: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            completion_api_key=_credential(os.getenv("GROQ_API_KEY")),
            completion_base_url=os.getenv("COMPLETION_BASE_URL", DEFAULT_COMPLETION_BASE_URL),
            model_name=os.getenv("MODEL_NAME", DEFAULT_MODEL_NAME),
            search_api_key=_credential(os.getenv("RAPIDAPI_KEY")),
            search_url=os.getenv("SEARCH_URL", DEFAULT_SEARCH_URL),
            search_host=os.getenv("SEARCH_HOST", DEFAULT_SEARCH_HOST),
            search_cooldown_seconds=_float_env("SEARCH_COOLDOWN_SECONDS", 2.0),
            max_sessions=_int_env("MAX_SESSIONS", 1000),
            allow_logging=_bool_env("ALLOW_LOGGING", default=False),  # do NOT log user text by default
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def completion_configured(self) -> bool:
        return _credential(self.completion_api_key) is not None

    @property
    def search_configured(self) -> bool:
        return _credential(self.search_api_key) is not None

    def configuration_issues(self) -> List[str]:
        issues = []
        if not self.search_configured:
            issues.append("RapidAPI key is not configured for medical search")
        if not self.completion_configured:
            issues.append("Completion API key is not configured for medical AI responses")
        return issues
