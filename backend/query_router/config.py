import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_SETTINGS_FILE = Path("data/settings.json")
_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_RUNTIME_KEYS = frozenset({
    "max_query_length",
    "response_cache_size",
})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Contract Query Router API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3020"]

    # Lexicon files (directory relative to backend directory)
    lexicon_dir: str = "data/lexicon"
    spell_corrections_file: str = "spell_corrections.txt"
    parts_keywords_file: str = "parts_keywords.txt"
    create_keywords_file: str = "create_keywords.txt"
    contract_keywords_file: str = "contract_keywords.txt"
    display_fields_file: str = "display_fields.txt"

    # Query processing
    max_query_length: int = 1000
    response_cache_enabled: bool = True
    response_cache_size: int = 1000

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_pipeline: str = "WARNING"      # QueryPipeline stage trace
    log_level_lexicon: str = "INFO"          # Lexicon loading / reloads

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json into query limits."""
        if _SETTINGS_FILE.exists():
            try:
                overrides = json.loads(_SETTINGS_FILE.read_text("utf-8"))
                for key in _RUNTIME_KEYS:
                    value = overrides.get(key)
                    # JSON true/false parse as bool, a subclass of int
                    if isinstance(value, int) and not isinstance(value, bool):
                        object.__setattr__(self, key, value)
            except Exception as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)

    @property
    def lexicon_path(self) -> Path:
        """Absolute lexicon directory; relative values resolve against backend/."""
        path = Path(self.lexicon_dir)
        if path.is_absolute():
            return path
        return _BACKEND_DIR / path


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
