from datetime import datetime, timezone


class NexecurError(Exception):
    """Base exception"""

    code = "NEXECUR_ERROR"
    default_message = "An error occurred while talking to Nexecur."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)


class NexecurConfigurationError(NexecurError):
    """Configuration is missing required fields or cannot be loaded"""

    code = "INVALID_CONFIGURATION"
    default_message = "Invalid configuration: id_site and password are required"


class NexecurTransportError(NexecurError):
    """Network error or unreadable response"""

    code = "TRANSPORT_ERROR"
    default_message = "HTTP request failed."


class SaltGenerationError(NexecurError):
    """Salt could not be obtained for a new device"""

    code = "SALT_GENERATION_ERROR"
    default_message = "Error while generating a new device. The script cannot get a new salt."


class TokenGenerationError(NexecurError):
    """Site authentication refused the derived credentials"""

    code = "TOKEN_GENERATION_ERROR"
    default_message = "Error while getting a token for a new device."


class RegisteringDeviceError(NexecurError):
    """Device registration failed"""

    code = "DEVICE_REGISTRATION_ERROR"
    default_message = "Error while registering a new device. The script cannot update the device ID value."


class OrderAlarmError(NexecurError):
    """Arm/disarm order refused or not delivered"""

    code = "ALARM_ORDER_ERROR"
    default_message = "Error while executing alarm operation."


class UndefinedApiError(NexecurError):
    """Unexpected API answer while reading panel data"""

    code = "UNDEFINED_API_ERROR"
    default_message = "An undefined API error occurred."


class StillPendingError(NexecurError):
    """Panel did not apply the order before the deadline"""

    code = "OPERATION_PENDING_ERROR"
    default_message = "The operation (enabling or disabling the alarm) does not seem to be applied correctly."

    def __init__(
        self,
        message: str | None = None,
        attempts: int = 0,
        max_wait_seconds: float | None = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.max_wait_seconds = max_wait_seconds


class OperationCancelledError(NexecurError):
    """Waiting for the panel was cancelled by the caller"""

    code = "OPERATION_CANCELLED"
    default_message = "The alarm operation was cancelled before the panel confirmed it."
