"""
Runtime configuration for the catalog API.

Values come from the process environment, with a local ``.env`` file
loaded first so development setups don't need exported variables.
"""

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings read once from the environment."""

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")
        self.database_echo = os.getenv("DATABASE_ECHO", "false").lower() == "true"
        self.env = os.getenv("ENV", "development").lower()
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.api_prefix = os.getenv("API_PREFIX", "/api/v1")
        self.cors_origins: List[str] = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ]

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
