"""Runtime configuration. Read once from environment variables, with defaults that work for local play."""

import logging
import os
from typing import Self

from pydantic import BaseModel

ENV_PREFIX = "CHESSLOG_"


class Settings(BaseModel):
    database_url: str = "sqlite:///chesslog.db"
    echo_sql: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        """Only the variables that are actually set override the defaults."""
        values = {
            field: os.environ[f"{ENV_PREFIX}{field.upper()}"]
            for field in cls.model_fields
            if f"{ENV_PREFIX}{field.upper()}" in os.environ
        }
        return cls.model_validate(values)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
