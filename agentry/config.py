"""Project-level configuration, path helpers and runtime defaults."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_DB_PATH = DATA_DIR / "agentry.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Dispatcher
DEFAULT_BATCH_SIZE = 5
DEFAULT_IDLE_DELAY_SECONDS = 0.1
DEFAULT_POLL_INTERVAL_SECONDS = 0.1

# Broker
DEFAULT_MAX_TOOL_ITERATIONS = 10

# Chat sessions
DEFAULT_MAX_CONTEXT_TOKENS = 32768
ESTIMATED_CHARS_PER_TOKEN = 4

# Gateways
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 1024
LLM_MAX_RETRIES = 3
LLM_RETRY_BASE_DELAY_SECONDS = 1.0
LLM_RETRY_MAX_DELAY_SECONDS = 15.0
LLM_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def llm_provider_name() -> str:
    """Provider selected by LLM_PROVIDER: "anthropic" (default) or "openai"."""
    return os.getenv("LLM_PROVIDER", "anthropic").strip().lower()


def llm_model_name(provider: str | None = None) -> str:
    """Model selected by LLM_MODEL, falling back to the provider default."""
    model = os.getenv("LLM_MODEL")
    if model:
        return model
    if (provider or llm_provider_name()) == "openai":
        return DEFAULT_OPENAI_MODEL
    return DEFAULT_ANTHROPIC_MODEL
