import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

REMINDER_BACKENDS = ("orm", "sql")


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings read from the environment."""

    database_url: str = "postgresql://postgres:postgres@db:5432/medtrack"
    database_echo: bool = False
    reminder_backend: str = "orm"
    early_reminder_minutes: int = 15
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=_get_bool("DATABASE_ECHO", cls.database_echo),
            reminder_backend=os.getenv("REMINDER_BACKEND", cls.reminder_backend).lower(),
            early_reminder_minutes=int(os.getenv("EARLY_REMINDER_MINUTES", cls.early_reminder_minutes)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
        if settings.reminder_backend not in REMINDER_BACKENDS:
            raise ValueError(
                f"REMINDER_BACKEND must be one of {', '.join(REMINDER_BACKENDS)}, got {settings.reminder_backend!r}"
            )
        return settings
