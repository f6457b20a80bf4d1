import os
import sys
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    """Reads a float setting, keeping ``default`` when the variable is unset or malformed."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}.")
        return default


# --- LLM Puzzle Provider ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
LOGIC_GRID_MODEL = os.getenv("LOGIC_GRID_MODEL", "gpt-4o-mini")
LOGIC_GRID_TEMPERATURE = _env_float("LOGIC_GRID_TEMPERATURE", 0.7)
LOGIC_GRID_TIMEOUT = _env_float("LOGIC_GRID_TIMEOUT", 60.0)

# --- Logging ---
LOG_LEVEL = os.getenv("LOGIC_GRID_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s'

# --- Paths ---
try:
    # PyInstaller creates a temp folder and stores path in _MEIPASS
    base_path = sys._MEIPASS
except AttributeError:
    base_path = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(base_path, "game_data")

SETTINGS_FILE_NAME = "logic_grid_mystery_settings.json"
SETTINGS_FILE_PATH = os.getenv("LOGIC_GRID_SETTINGS_PATH", os.path.join(os.path.abspath("."), SETTINGS_FILE_NAME))
