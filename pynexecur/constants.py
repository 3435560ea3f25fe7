from enum import IntEnum

DEFAULT_TIMEOUT = 20

# ========== BASE URLS ==========
BASE_URL = "https://monnexecur-prd.nexecur.fr"

# ========== WEBSERVICE ENDPOINTS ==========
CONFIG_URI = "/webservices/configuration"  # POST - app configuration
SALT_URI = "/webservices/salt"  # POST - salt for credential derivation
SITE_URI = "/webservices/site"  # POST - authenticate, returns token + site state
REGISTER_URI = "/webservices/register"  # POST - register this device
PANEL_STATUS_URI = "/webservices/panel-status"  # POST - arm/disarm or status only
PANEL_CHECK_STATUS_URI = "/webservices/check-panel-status"  # POST - poll pending order
STREAM_URI = "/webservices/stream"  # POST - camera stream URI

# ========== HEADERS ==========
HDR_CONTENT_TYPE = "Content-Type"
HDR_AUTH_TOKEN = "X-Auth-Token"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# ========== RESPONSE CONVENTIONS ==========
MESSAGE_OK = "OK"
MESSAGE_REGISTER_OK = ""  # register answers with an empty message on success
STATUS_OK = 0

# ========== DEVICE PROFILE ==========
DEFAULT_DEVICE_NAME = "Nexecur API Device"
DEVICE_PROFILE = {
    "alert": "enabled",
    "appname": "Mon+Nexecur",
    "nom": "",
    "badge": "enabled",
    "options": [1],
    "sound": "enabled",
    "actif": 1,
    "plateforme": "gcm",
    "app_version": "1.15 (30)",
    "device_model": "SM-G315F",
    "device_version": "7.0",
}

# ========== PANEL ORDERS ==========
# Maximum seconds to wait for the panel to apply an arm/disarm order
MAX_WAIT_SECONDS_FOR_ALARM_OPERATION = 60
# Backoff between check-panel-status polls: flat for the first attempts, then +1s each
PANEL_CHECK_BASE_DELAY = 2.0
PANEL_CHECK_FLAT_ATTEMPTS = 5
PANEL_CHECK_STEP_DELAY = 1.0


class AlarmCommand(IntEnum):
    """Order sent in the panel-status body."""

    DISARM = 0
    PARTIAL_ARM = 1  # SP1
    TOTAL_ARM = 2  # SP2


class AlarmStatus(IntEnum):
    """Value of panel_status in the site response."""

    DISABLED = 0
    PARTIAL_ALARM = 1
    TOTAL_ALARM = 2


# Wording used in error messages
COMMAND_ACTIONS = {
    AlarmCommand.DISARM: "disabling",
    AlarmCommand.PARTIAL_ARM: "enabling partial",
    AlarmCommand.TOTAL_ARM: "enabling total",
}

# Wording used in log messages
COMMAND_LOG_LABELS = {
    AlarmCommand.DISARM: "Disarming",
    AlarmCommand.PARTIAL_ARM: "Arming (Partial - SP1)",
    AlarmCommand.TOTAL_ARM: "Arming (Total - SP2)",
}
