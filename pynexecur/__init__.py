"""
Nexecur Python Client Library
"""
from .client import NexecurClient
from .configuration import UserConfiguration
from .constants import AlarmCommand, AlarmStatus
from .keys import CredentialKeys, derive_keys
from .panel import Device, Event, SiteInfo, StreamResponse
from .persistence import ConfigurationStore
from .session import NexecurSession, TransportClient
from .exceptions import (
    NexecurError,
    NexecurConfigurationError,
    NexecurTransportError,
    SaltGenerationError,
    TokenGenerationError,
    RegisteringDeviceError,
    OrderAlarmError,
    UndefinedApiError,
    StillPendingError,
    OperationCancelledError,
)

__version__ = "0.1.0"
__all__ = [
    "NexecurClient",
    "NexecurSession",
    "TransportClient",
    "ConfigurationStore",
    "UserConfiguration",
    "AlarmCommand",
    "AlarmStatus",
    "CredentialKeys",
    "derive_keys",
    "Device",
    "Event",
    "SiteInfo",
    "StreamResponse",
    # Exceptions
    "NexecurError",
    "NexecurConfigurationError",
    "NexecurTransportError",
    "SaltGenerationError",
    "TokenGenerationError",
    "RegisteringDeviceError",
    "OrderAlarmError",
    "UndefinedApiError",
    "StillPendingError",
    "OperationCancelledError",
]
