"""
User configuration: site credentials and the registered device identity.
"""
from dataclasses import dataclass, fields, replace
from typing import Any

from .exceptions import NexecurConfigurationError

# persisted key -> alternative spellings accepted on load
_FIELD_ALIASES = {
    "token": ("token",),
    "id_site": ("id_site", "idSite"),
    "password": ("password",),
    "id_device": ("id_device", "idDevice"),
    "pin": ("pin",),
    "device_name": ("deviceName", "device_name"),
}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass
class UserConfiguration:
    """
    Credentials for one Nexecur site.

    password and pin hold the plaintext values until a device is registered,
    then the derived hashes. The object is mutated in place during
    registration and must not be shared between concurrent operations.
    """

    token: str = ""
    id_site: str = ""
    password: str = ""
    id_device: str = ""
    pin: str = ""
    device_name: str = ""

    # ---------- state helpers ----------

    @property
    def is_valid(self) -> bool:
        return bool(self.id_site and self.password)

    @property
    def is_device_registered(self) -> bool:
        return bool(self.token and self.id_device)

    def validate(self) -> None:
        if not self.is_valid:
            raise NexecurConfigurationError()

    def clone(self) -> "UserConfiguration":
        return replace(self)

    # ---------- serialization ----------

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "UserConfiguration":
        """Build from a persisted record (snake_case or camelCase keys)."""
        data = data or {}
        values = {}
        for field in fields(cls):
            for key in _FIELD_ALIASES[field.name]:
                if data.get(key) not in (None, ""):
                    values[field.name] = _as_text(data[key])
                    break
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        """Persisted record layout."""
        return {
            "token": self.token,
            "id_site": self.id_site,
            "password": self.password,
            "id_device": self.id_device,
            "pin": self.pin,
            "deviceName": self.device_name,
        }
