"""
Configuration persistence utilities for saving/loading the credential record.
"""
import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from .configuration import UserConfiguration
from .exceptions import NexecurConfigurationError

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.json"
SENSITIVE_FIELDS = ("token", "password", "pin")


class ConfigurationStore:
    """
    Handles saving and loading the user configuration to/from a JSON file.

    Supports optional encryption of sensitive fields (token, password, pin).
    Plaintext files written by older versions are still readable.

    Args:
        path: Configuration file (default: config.json)
        encryption_key: Optional Fernet key (32 bytes urlsafe base64).
                       If None, uses machine-specific key.
                       If "disabled", no encryption.
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_CONFIG_FILE,
        encryption_key: Optional[str] = None,
    ):
        self.path = Path(path)

        self._fernet = None
        if encryption_key != "disabled":
            if encryption_key:
                self._fernet = Fernet(encryption_key.encode())
            else:
                self._fernet = Fernet(self._get_machine_key())

    @property
    def encrypted(self) -> bool:
        return self._fernet is not None

    def get_config_file(self) -> str:
        """Get absolute path to the configuration file."""
        return str(self.path.absolute())

    def exists(self) -> bool:
        return self.path.exists()

    def _get_machine_key(self) -> bytes:
        """Generate a machine-specific encryption key."""
        import platform
        import uuid

        seed = f"{uuid.getnode()}-{platform.node()}-{self.path.absolute()}"
        key_bytes = hashlib.sha256(seed.encode()).digest()
        return base64.urlsafe_b64encode(key_bytes)

    def _encrypt(self, value: str) -> str:
        if not self._fernet or not value:
            return value
        return self._fernet.encrypt(value.encode()).decode()

    def _decrypt(self, value: str) -> str:
        if not self._fernet or not value:
            return value
        try:
            return self._fernet.decrypt(value.encode()).decode()
        except InvalidToken as e:
            raise NexecurConfigurationError(
                f"Cannot decrypt {self.path}: wrong encryption key"
            ) from e

    def load(self) -> UserConfiguration:
        """
        Load the configuration from disk and decrypt if needed.

        Raises:
            NexecurConfigurationError: If the file cannot be read or decrypted
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise NexecurConfigurationError(
                f"Failed to load configuration from {self.path}: {e}"
            ) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            _LOGGER.warning("Configuration file %s is not valid JSON, using an empty configuration", self.path)
            data = {}
        if not isinstance(data, dict):
            data = {}

        if data.get("_encrypted"):
            if self._fernet is None:
                raise NexecurConfigurationError(
                    f"{self.path} is encrypted but encryption is disabled"
                )
            for key in SENSITIVE_FIELDS:
                if data.get(key):
                    data[key] = self._decrypt(data[key])

        return UserConfiguration.from_dict(data)

    def save(self, config: UserConfiguration) -> None:
        """
        Replace the file content with the given configuration.

        Raises:
            NexecurConfigurationError: If the file cannot be written
        """
        data = config.to_dict()
        for key in SENSITIVE_FIELDS:
            data[key] = self._encrypt(data[key])
        data["_encrypted"] = self.encrypted

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise NexecurConfigurationError(
                f"Failed to save configuration to {self.path}: {e}"
            ) from e

    def create_default_if_missing(self) -> bool:
        """Write an empty configuration when no file exists. Returns True if created."""
        if self.exists():
            return False
        self.save(UserConfiguration())
        return True

    def clear(self) -> None:
        """Delete the configuration file."""
        if self.path.exists():
            self.path.unlink()
