from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_dotenv_if_present(path: str | Path = ".env") -> None:
    """Load environment variables from a .env file if it exists."""
    dotenv_path = Path(path)
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)


def configure_logging(default_level: str = "INFO") -> None:
    """Configure root logging level from LOG_LEVEL env (default INFO)."""
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level)


@dataclass
class CatalogConfig:
    photos_dir: Path
    database_url: str
    time_budget: Optional[float] = None

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        budget = os.getenv("INGEST_TIME_BUDGET")
        return cls(
            photos_dir=Path(os.getenv("PHOTOS_DIR", ".")),
            database_url=os.getenv("DATABASE_URL", "sqlite+pysqlite:///./photo_catalog.db"),
            time_budget=float(budget) if budget else None,
        )
