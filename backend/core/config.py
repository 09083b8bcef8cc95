"""
Configuration management for the transcript search backend.
Loads configuration from environment variables and .env file.
"""
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env file in the backend directory or project root
BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Load .env file if it exists
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    # Also try loading from backend directory
    backend_env = BACKEND_DIR / ".env"
    if backend_env.exists():
        load_dotenv(backend_env)

# Base paths
BASE_DIR = PROJECT_ROOT
DATA_DIR = BASE_DIR / "data"
SCHEMA_FILE = BACKEND_DIR / "db" / "schema.sql"
DB_PATH = Path(os.getenv("TRANSCRIPT_DB_PATH", str(DATA_DIR / "transcripts.db")))

# Ensure directories exist
DATA_DIR.mkdir(exist_ok=True)

# Access control
# Stream type that is only visible to members of the owning streamer
RESTRICTED_STREAM_TYPE = os.getenv("RESTRICTED_STREAM_TYPE", "Members")

# Search settings
MAX_CONTEXT_LINES = int(os.getenv("MAX_CONTEXT_LINES", "20"))  # per transcript
SNIPPET_WORD_BUFFER = int(os.getenv("SNIPPET_WORD_BUFFER", "8"))
FTS_TOKENIZER = os.getenv("FTS_TOKENIZER", "porter unicode61 remove_diacritics 2")

# Database settings
DB_BUSY_TIMEOUT_SEC = float(os.getenv("DB_BUSY_TIMEOUT_SEC", "5.0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
