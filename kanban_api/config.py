"""Application settings resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Attributes:
        database_url: SQLAlchemy URL of the entity store
        log_level: Root logging level name
        sql_echo: Echo emitted SQL through the ``sqlalchemy.engine`` logger
        avatar_base_url: Base of the deterministic comment avatar URLs
        expose_errors: Include store error text in 500 responses
        host: Bind address used by the ``main.py`` runner
        port: Bind port used by the ``main.py`` runner
    """

    database_url: str = "sqlite:///./kanban.db"
    log_level: str = "INFO"
    sql_echo: bool = False
    avatar_base_url: str = "https://i.pravatar.cc/150"
    expose_errors: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            sql_echo=_env_flag("SQL_ECHO"),
            avatar_base_url=os.getenv("AVATAR_BASE_URL", cls.avatar_base_url),
            expose_errors=_env_flag("EXPOSE_ERRORS"),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
