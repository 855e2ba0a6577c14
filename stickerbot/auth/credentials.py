"""Session credential persistence (separate from config)."""

import json
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from loguru import logger

CREDS_FILENAME = "creds.json"


class CredentialStore(ABC):
    """Abstract store for the session's login state."""

    @abstractmethod
    def load(self) -> dict[str, Any] | None:
        """Return stored credentials, or None when the bot has never logged in."""

    @abstractmethod
    def persist(self, credentials: dict[str, Any]) -> None:
        """Store updated credentials. Errors propagate to the caller."""


class FileCredentialStore(CredentialStore):
    """Credentials kept as JSON in the auth directory, written with 0o600."""

    def __init__(self, auth_dir: Path):
        self.auth_dir = Path(auth_dir)

    @property
    def path(self) -> Path:
        return self.auth_dir / CREDS_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load credentials from {self.path}: {e}")
            logger.warning("Starting without credentials; a new login will be required.")
            return None
        return data if isinstance(data, dict) else None

    def persist(self, credentials: dict[str, Any]) -> None:
        self.auth_dir.mkdir(parents=True, exist_ok=True)

        # Write to a sibling file first so a crash never leaves half a JSON document
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(credentials, f, indent=2)
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)
        logger.debug(f"Credentials saved to {self.path}")

    def clear(self) -> bool:
        """Remove the auth directory. Returns False if there was nothing to remove."""
        if not self.auth_dir.exists():
            return False
        shutil.rmtree(self.auth_dir)
        return True
