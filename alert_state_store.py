# Filename: alert_state_store.py

import json
import logging
import os
from typing import Optional

from models import AlertDetectorState

logger = logging.getLogger("AlertStateStore")


class AlertStateStore:
    """Keeps the alert detector state on disk between restarts."""

    def __init__(self, state_file: str = "alert_state.json"):
        self.state_file = state_file

    def load(self) -> Optional[AlertDetectorState]:
        if not os.path.exists(self.state_file):
            return None
        try:
            with open(self.state_file, "r") as f:
                state = AlertDetectorState.from_dict(json.load(f))
            logger.info(f"[STATE] Loaded {len(state.known_addresses)} known tokens from disk.")
            return state
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"[STATE] Failed to load alert state: {e}")
            return None

    def save(self, state: AlertDetectorState) -> bool:
        tmp_file = f"{self.state_file}.tmp"
        try:
            with open(tmp_file, "w") as f:
                json.dump(state.to_dict(), f)
            os.replace(tmp_file, self.state_file)
            return True
        except OSError as e:
            logger.error(f"[STATE] Failed to save alert state: {e}")
            return False

    def clear(self):
        if os.path.exists(self.state_file):
            os.remove(self.state_file)
            logger.info(f"[STATE] Removed {self.state_file}")
