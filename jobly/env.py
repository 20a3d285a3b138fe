import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/jobly.db"


def load_env() -> None:
    """Load .env from the working directory if present.
    Variables already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def database_url() -> str:
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def log_level() -> str:
    return os.getenv("JOBLY_LOG_LEVEL", "INFO")


def log_dir() -> Optional[Path]:
    value = os.getenv("JOBLY_LOG_DIR")
    return Path(value) if value else None
