import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///data/jobly.db"


def load_env() -> None:
    """Load .env from project root if present. Existing variables win."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def get_database_url() -> str:
    return os.getenv("JOBLY_DATABASE_URL", DEFAULT_DATABASE_URL)


def get_log_level() -> str:
    return os.getenv("JOBLY_LOG_LEVEL", "INFO")


def get_log_dir() -> Path:
    return Path(os.getenv("JOBLY_LOG_DIR", "logs"))
