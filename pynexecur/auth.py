"""
Device registration and site authentication.

A fresh configuration only holds the site id and plaintext password. Before
any other call the device has to be bootstrapped:

    salt -> derive hashes -> authenticate (token) -> register (id_device)

Every credential change is written back to the ConfigurationStore when one is
attached, as soon as it happens.
"""
import logging
from enum import Enum
from typing import Any

from .configuration import UserConfiguration
from .constants import (
    BASE_URL,
    CONFIG_URI,
    DEFAULT_DEVICE_NAME,
    DEVICE_PROFILE,
    REGISTER_URI,
    SALT_URI,
    SITE_URI,
)
from .exceptions import (
    RegisteringDeviceError,
    SaltGenerationError,
    TokenGenerationError,
)
from .keys import derive_keys
from .persistence import ConfigurationStore
from .session import TransportClient, build_headers, is_register_success, is_success

_LOGGER = logging.getLogger(__name__)


class RegistrationState(str, Enum):
    UNREGISTERED = "unregistered"
    SALT_REQUESTED = "salt_requested"
    CREDENTIALS_DERIVED = "credentials_derived"
    AUTHENTICATED = "authenticated"
    REGISTERED = "registered"


class NexecurAuth:
    def __init__(
        self,
        session: TransportClient,
        store: ConfigurationStore | None = None,
        base_url: str = BASE_URL,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self.store = store
        self.state = RegistrationState.UNREGISTERED

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _update(self, config: UserConfiguration, **changes: str) -> None:
        """Apply credential changes in place and persist the whole record."""
        for name, value in changes.items():
            setattr(config, name, value)
        if self.store is not None:
            self.store.save(config)

    @staticmethod
    def _credentials_body(config: UserConfiguration) -> dict[str, Any]:
        return {
            "id_site": config.id_site,
            "password": config.password,
            "id_device": config.id_device,
            "partage": "1",
            "pin": config.pin,
        }

    # ---------- raw requests ----------

    async def get_configuration(self) -> dict[str, Any]:
        """Fetch the public app configuration (no token needed)."""
        return await self._session.post(
            self._url(CONFIG_URI),
            build_headers(),
            {"os": "android"},
        )

    async def get_salt(self, config: UserConfiguration) -> dict[str, Any]:
        """Request the salt used to derive the hashed credentials."""
        return await self._session.post(
            self._url(SALT_URI),
            build_headers(),
            self._credentials_body(config),
        )

    async def authenticate_with_site(self, config: UserConfiguration) -> dict[str, Any]:
        """
        Authenticate with the site and get its current state.

        The response carries a fresh token which replaces the stored one.
        """
        response = await self._session.post(
            self._url(SITE_URI),
            build_headers(config.token),
            self._credentials_body(config),
        )
        token = response.get("token")
        if token:
            self._update(config, token=str(token))
        return response

    async def register_device(self, device_name: str, config: UserConfiguration) -> dict[str, Any]:
        body = dict(DEVICE_PROFILE)
        body["id_device"] = config.id_device
        body["device_name"] = device_name
        return await self._session.post(
            self._url(REGISTER_URI),
            build_headers(config.token),
            body,
        )

    # ---------- registration flow ----------

    async def ensure_registration(self, config: UserConfiguration) -> None:
        """Register a new device unless the configuration already has one."""
        if config.is_device_registered:
            self.state = RegistrationState.REGISTERED
            return
        await self.register_new_device(config)

    async def register_new_device(self, config: UserConfiguration) -> None:
        """
        Run the full bootstrap for this configuration.

        Raises:
            SaltGenerationError: If no salt is returned
            TokenGenerationError: If the derived credentials are refused
            RegisteringDeviceError: If registration fails for any other reason
        """
        self.state = RegistrationState.UNREGISTERED
        _LOGGER.info("Registering a new device for site %s", config.id_site)
        try:
            salt_response = await self.get_salt(config)
            self.state = RegistrationState.SALT_REQUESTED
            if not is_success(salt_response):
                raise SaltGenerationError()

            keys = derive_keys(config.password, str(salt_response.get("salt") or ""))
            # Hashes replace the plaintext values before authentication is
            # attempted; a failure below leaves them in the store.
            self._update(config, password=keys.password_hash)
            self._update(config, pin=keys.pin_hash)
            self.state = RegistrationState.CREDENTIALS_DERIVED

            site_response = await self.authenticate_with_site(config)
            if not is_success(site_response):
                _LOGGER.warning(
                    "Site authentication failed after hashed credentials were stored for site %s",
                    config.id_site,
                )
                raise TokenGenerationError()
            self.state = RegistrationState.AUTHENTICATED

            device_name = config.device_name or DEFAULT_DEVICE_NAME
            register_response = await self.register_device(device_name, config)
            if not is_register_success(register_response):
                raise RegisteringDeviceError()

            self._update(config, id_device=str(register_response.get("id_device") or ""))
            self.state = RegistrationState.REGISTERED
            _LOGGER.info("Device %s registered", config.id_device)

        except (SaltGenerationError, TokenGenerationError, RegisteringDeviceError):
            raise
        except Exception as e:
            raise RegisteringDeviceError(f"Device registration failed: {e}") from e
