"""
Nexecur Alarm System Client

Main public API for interacting with a Nexecur alarm panel.
"""
import asyncio
from pathlib import Path
from typing import Any

import aiohttp

from .auth import NexecurAuth
from .configuration import UserConfiguration
from .constants import BASE_URL, MAX_WAIT_SECONDS_FOR_ALARM_OPERATION, AlarmCommand, AlarmStatus
from .panel import Device, Event, NexecurPanel, SiteInfo, StreamResponse
from .persistence import ConfigurationStore
from .session import NexecurSession, TransportClient


class NexecurClient:
    """
    Main client for Nexecur API.

    The client owns its UserConfiguration: use one client per alarm panel and
    do not run overlapping operations on the same client.

    Usage:
        async with aiohttp.ClientSession() as session:
            client = NexecurClient.from_config_file(session, "config.json")

            # First call registers this device if needed
            status = await client.get_alarm_status()

            await client.enable_partial_alarm()
            await client.disable_alarm()

            events = await client.get_event_history()
    """

    def __init__(
        self,
        aiohttp_session: aiohttp.ClientSession | None,
        config: UserConfiguration,
        persistence: ConfigurationStore | None = None,
        transport: TransportClient | None = None,
        base_url: str = BASE_URL,
    ):
        if transport is None:
            if aiohttp_session is None:
                raise ValueError("Either an aiohttp session or a transport is required")
            transport = NexecurSession(aiohttp_session, base_url)
        self.config = config
        self.session = transport
        self.auth = NexecurAuth(self.session, persistence, base_url)
        self.panel = NexecurPanel(self.session, self.auth, base_url)

    @classmethod
    def from_config_file(
        cls,
        aiohttp_session: aiohttp.ClientSession,
        path: str | Path,
        encryption_key: str | None = None,
        base_url: str = BASE_URL,
    ) -> "NexecurClient":
        """
        Build a client from a configuration file; credential changes are saved back to it.

        Raises:
            NexecurConfigurationError: If the file cannot be read
        """
        persistence = ConfigurationStore(path, encryption_key)
        return cls(aiohttp_session, persistence.load(), persistence=persistence, base_url=base_url)

    # ---------- Session Management ----------

    @property
    def persistence(self) -> ConfigurationStore | None:
        return self.auth.store

    def set_persistence(self, persistence: ConfigurationStore | None) -> None:
        """Set persistence handler for credential changes."""
        self.auth.store = persistence

    def save_configuration(self) -> None:
        """Write the current configuration to the persistence handler.

        Raises:
            ValueError: If persistence is not configured
        """
        if not self.persistence:
            raise ValueError("Persistence not configured. Call set_persistence() first.")
        self.persistence.save(self.config)

    # ---------- Registration ----------

    async def ensure_registration(self) -> None:
        """Register this device with Nexecur if not done yet."""
        self.config.validate()
        await self.auth.ensure_registration(self.config)

    async def get_configuration(self) -> dict[str, Any]:
        """Public app configuration returned by Nexecur"""
        return await self.auth.get_configuration()

    # ---------- Orders ----------

    async def control_alarm_system(
        self,
        command: AlarmCommand,
        max_wait_seconds: float = MAX_WAIT_SECONDS_FOR_ALARM_OPERATION,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Send an order and wait until the panel applies it.

        Args:
            command: AlarmCommand to send
            max_wait_seconds: How long to wait for a pending order
            cancel_event: Set it to stop waiting early

        Raises:
            NexecurConfigurationError: If id_site or password is missing
            OrderAlarmError: If the order fails
            StillPendingError: If the panel did not apply it in time
        """
        await self.panel.control_alarm_system(
            self.config,
            command,
            max_wait_seconds=max_wait_seconds,
            cancel_event=cancel_event,
        )

    async def enable_partial_alarm(self, **kwargs) -> None:
        """Arm in partial mode (SP1)"""
        await self.control_alarm_system(AlarmCommand.PARTIAL_ARM, **kwargs)

    async def enable_total_alarm(self, **kwargs) -> None:
        """Arm in total mode (SP2)"""
        await self.control_alarm_system(AlarmCommand.TOTAL_ARM, **kwargs)

    async def enable_alarm(self, **kwargs) -> None:
        """Arm in partial mode. Kept for compatibility, prefer enable_partial_alarm()."""
        await self.control_alarm_system(AlarmCommand.PARTIAL_ARM, **kwargs)

    async def disable_alarm(self, **kwargs) -> None:
        await self.control_alarm_system(AlarmCommand.DISARM, **kwargs)

    # ---------- Status ----------

    async def get_alarm_status(self) -> AlarmStatus:
        return await self.panel.get_alarm_status(self.config)

    async def get_event_history(self) -> list[Event]:
        return await self.panel.get_event_history(self.config)

    async def get_site(self) -> SiteInfo:
        return await self.panel.get_site(self.config)

    async def get_devices(self) -> list[Device]:
        return await self.panel.get_devices(self.config)

    async def get_panel_status(self) -> dict[str, Any]:
        """Raw panel-status answer without sending an order"""
        return await self.panel.get_panel_status(self.config)

    async def get_stream(self, device_serial: str) -> StreamResponse:
        """
        Request a camera stream URI.

        Args:
            device_serial: Serial of a site device (see get_devices())
        """
        return await self.panel.get_stream(self.config, device_serial)
