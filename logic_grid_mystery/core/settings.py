import json
import os
import logging
from typing import Optional

from .. import config
from ..puzzle.common import DEFAULT_THEME_PROMPT

logger = logging.getLogger(__name__)


class UserSettings:
    """Preferences kept between runs (currently the last theme prompt)."""
    SAVE_VERSION = 1

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.SETTINGS_FILE_PATH
        self.theme_prompt = DEFAULT_THEME_PROMPT
        self.save_version = self.SAVE_VERSION

    def save(self) -> None:
        state = {
            "save_version": self.save_version,
            "theme_prompt": self.theme_prompt,
        }
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(state, f, indent=4)
            logger.info(f"Settings saved to {self.path}")
        except IOError as e:
            logger.error(f"Could not save settings to {self.path}: {e}")
            raise IOError(f"Could not save settings: {e}")

    def load(self) -> None:
        """Loads settings, keeping defaults when the file is missing or unreadable."""
        if not os.path.exists(self.path):
            logger.info(f"Settings file '{self.path}' not found. Using defaults.")
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                state = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.error(f"Error reading or parsing settings file '{self.path}': {e}")
            return

        if not isinstance(state, dict):
            logger.warning(f"Settings file '{self.path}' does not hold an object. Using defaults.")
            return
        loaded_version = state.get("save_version", 0)
        if loaded_version > self.SAVE_VERSION:
            logger.warning(f"Settings version {loaded_version} is newer than supported ({self.SAVE_VERSION}). Using defaults.")
            return

        theme_prompt = state.get("theme_prompt")
        if isinstance(theme_prompt, str) and theme_prompt.strip():
            self.theme_prompt = theme_prompt.strip()
        logger.info(f"Loaded settings from {self.path}")
