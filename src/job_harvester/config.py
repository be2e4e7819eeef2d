import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def get_config() -> dict[str, str]:
    """
    Load and validate configuration from environment variables.
    Called lazily to avoid crashing on import.
    """
    api_key = os.getenv("API_KEY", "")

    if not api_key:
        raise ValueError("API_KEY is not set in the environment variables.")

    return {
        "URLS": os.getenv("URLS", ""),
        "API_KEY": api_key,
        "MISTRAL_MODEL": os.getenv("MISTRAL_MODEL", "mistral-small-latest"),
        "DB_PATH": os.getenv("DB_PATH", "jobs.db"),
        "SOURCE_DELAY": os.getenv("SOURCE_DELAY", "1.0"),
    }


class _Config:
    """Lazy configuration that only validates when values are actually accessed."""

    def __init__(self) -> None:
        self._config: dict[str, str] | None = None

    def _get(self, key: str) -> str:
        if self._config is None:
            self._config = get_config()
        return self._config[key]

    @property
    def SOURCE_URLS(self) -> list[str]:
        """Comma-separated list of source endpoints to harvest."""
        urls = [url.strip() for url in self._get("URLS").split(",") if url.strip()]
        if not urls:
            raise ValueError("URLS is not set in the environment variables.")
        return urls

    @property
    def MISTRAL_API_KEY(self) -> str:
        return self._get("API_KEY")

    @property
    def MISTRAL_MODEL(self) -> str:
        return self._get("MISTRAL_MODEL")

    @property
    def DB_PATH(self) -> str:
        return self._get("DB_PATH")

    @property
    def SOURCE_DELAY(self) -> float:
        """Pause between sources in seconds. Must be a non-negative number."""
        raw = self._get("SOURCE_DELAY")
        try:
            delay = float(raw)
        except ValueError:
            raise ValueError(f"SOURCE_DELAY must be a non-negative number, got '{raw}'") from None
        if delay < 0:
            raise ValueError(f"SOURCE_DELAY must be a non-negative number, got {delay}")
        return delay


_cfg = _Config()

# Module-level type declarations for mypy.
# The actual values come from __getattr__ below.
SOURCE_URLS: list[str]
MISTRAL_API_KEY: str
MISTRAL_MODEL: str
DB_PATH: str
SOURCE_DELAY: float

_LAZY_NAMES = {"SOURCE_URLS", "MISTRAL_API_KEY", "MISTRAL_MODEL", "DB_PATH", "SOURCE_DELAY"}


# Module-level lazy access using __getattr__ (PEP 562).
# `from job_harvester.config import DB_PATH` resolves the value on first access.
def __getattr__(name: str) -> str | list[str] | float:
    if name in _LAZY_NAMES:
        return getattr(_cfg, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
