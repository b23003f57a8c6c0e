"""Environment-driven settings for the API server."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # load environment variables from .env file

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "orchestrator.db"
DB_PATH = Path(os.getenv("ORCHESTRATOR_DB_PATH", str(DEFAULT_DB_PATH)))

# comma-separated origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

MODEL_NAME = os.getenv("ORCHESTRATOR_MODEL", "gpt-4o")

# open editor sessions kept in memory; the oldest is closed beyond this
MAX_SESSIONS = int(os.getenv("ORCHESTRATOR_MAX_SESSIONS", "100"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
