"""
Alarm panel operations.
Handles arm/disarm orders, waiting for the panel to apply them, and reading
status, event history, devices and camera streams.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .auth import NexecurAuth
from .configuration import UserConfiguration
from .constants import (
    BASE_URL,
    COMMAND_ACTIONS,
    COMMAND_LOG_LABELS,
    MAX_WAIT_SECONDS_FOR_ALARM_OPERATION,
    PANEL_CHECK_BASE_DELAY,
    PANEL_CHECK_FLAT_ATTEMPTS,
    PANEL_CHECK_STATUS_URI,
    PANEL_CHECK_STEP_DELAY,
    PANEL_STATUS_URI,
    STREAM_URI,
    AlarmCommand,
    AlarmStatus,
)
from .exceptions import (
    OperationCancelledError,
    OrderAlarmError,
    StillPendingError,
    UndefinedApiError,
)
from .session import TransportClient, build_headers, is_stream_success, is_success

_LOGGER = logging.getLogger(__name__)


@dataclass
class Event:
    """Event history entry (evenement)"""
    id_evenement: int | None
    option_id: int | None
    device: str | None
    message: str | None
    picture: str | None
    date: int | None  # epoch seconds
    status: int | None
    badge: int | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        return cls(
            id_evenement=data.get("id_evenement"),
            option_id=data.get("option_id"),
            device=data.get("device"),
            message=data.get("message"),
            picture=data.get("picture"),
            date=data.get("date"),
            status=data.get("status"),
            badge=data.get("badge"),
            raw=data,
        )

    @property
    def timestamp(self) -> datetime | None:
        if not self.date:
            return None
        try:
            seconds = int(self.date)
        except (TypeError, ValueError):
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass
class Device:
    """Device (sensor, camera...) declared on the site"""
    serial: str | None
    device_id: int | None
    name: str | None
    picture: str | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Device":
        return cls(
            serial=data.get("serial"),
            device_id=data.get("device_id"),
            name=data.get("name"),
            picture=data.get("picture"),
            raw=data,
        )


@dataclass
class SiteInfo:
    id_site: int | None
    type: str | None
    panel_serial: str | None
    panel_status: AlarmStatus
    panel_streaming: bool
    panel_sp1_name: str | None
    panel_sp2_name: str | None
    devices: list[Device]
    events: list[Event]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteInfo":
        return cls(
            id_site=data.get("id_site"),
            type=data.get("type"),
            panel_serial=data.get("panel_serial"),
            panel_status=AlarmStatus(data.get("panel_status", AlarmStatus.DISABLED)),
            panel_streaming=bool(data.get("panel_streaming")),
            panel_sp1_name=data.get("panel_sp1_nom"),
            panel_sp2_name=data.get("panel_sp2_nom"),
            devices=[Device.from_dict(d) for d in data.get("devices") or [] if isinstance(d, dict)],
            events=[Event.from_dict(e) for e in data.get("evenements") or [] if isinstance(e, dict)],
            raw=data,
        )


@dataclass
class StreamResponse:
    message: str
    status: int
    uri: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreamResponse":
        return cls(
            message=data.get("message", ""),
            status=data.get("status", 0),
            uri=data.get("uri") or "",
            raw=data,
        )


class NexecurPanel:
    def __init__(
        self,
        session: TransportClient,
        auth: NexecurAuth,
        base_url: str = BASE_URL,
    ):
        self._session = session
        self._auth = auth
        self._base_url = base_url.rstrip("/")

        # Backoff between check-panel-status polls
        self._check_base_delay = PANEL_CHECK_BASE_DELAY
        self._check_flat_attempts = PANEL_CHECK_FLAT_ATTEMPTS
        self._check_step_delay = PANEL_CHECK_STEP_DELAY

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _prepare(self, config: UserConfiguration) -> None:
        """Validate the configuration, then make sure a device is registered."""
        config.validate()
        await self._auth.ensure_registration(config)

    # ---------- Orders ----------

    async def get_panel_status(self, config: UserConfiguration) -> dict[str, Any]:
        """Status-only call to panel-status (no order sent)."""
        await self._prepare(config)
        return await self._session.post(
            self._url(PANEL_STATUS_URI),
            build_headers(config.token),
            {},
        )

    async def send_command(self, config: UserConfiguration, command: AlarmCommand) -> dict[str, Any]:
        _LOGGER.info("%s alarm system", COMMAND_LOG_LABELS[command])
        return await self._session.post(
            self._url(PANEL_STATUS_URI),
            build_headers(config.token),
            {"status": int(command)},
        )

    async def check_panel_status(self, config: UserConfiguration) -> dict[str, Any]:
        return await self._session.post(
            self._url(PANEL_CHECK_STATUS_URI),
            build_headers(config.token),
            {},
        )

    def _check_delay(self, attempts: int) -> float:
        """Delay after the given number of polls: flat, then linear."""
        extra = max(0, attempts - self._check_flat_attempts) * self._check_step_delay
        return self._check_base_delay + extra

    async def wait_for_panel_status_change(
        self,
        config: UserConfiguration,
        max_wait_seconds: float = MAX_WAIT_SECONDS_FOR_ALARM_OPERATION,
        started_at: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> dict[str, Any]:
        """
        Poll check-panel-status until still_pending is 0.

        Args:
            max_wait_seconds: Deadline, counted from started_at
            started_at: Loop time the order was sent (default: now)
            cancel_event: Set it to stop waiting early

        Raises:
            StillPendingError: If the panel did not confirm before the deadline
            OperationCancelledError: If cancel_event was set
        """
        loop = asyncio.get_running_loop()
        if started_at is None:
            started_at = loop.time()
        deadline = started_at + max_wait_seconds
        attempts = 0

        while loop.time() < deadline:
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError()

            attempts += 1
            response = await self.check_panel_status(config)
            _LOGGER.debug("Panel check %d: still_pending=%s", attempts, response.get("still_pending"))
            if response.get("still_pending") == 0:
                return response

            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            delay = min(self._check_delay(attempts), remaining)
            if cancel_event is None:
                await asyncio.sleep(delay)
            else:
                try:
                    await asyncio.wait_for(cancel_event.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
                else:
                    raise OperationCancelledError()

        raise StillPendingError(
            f"The alarm operation did not complete within {max_wait_seconds} seconds after {attempts} attempts.",
            attempts=attempts,
            max_wait_seconds=max_wait_seconds,
        )

    async def control_alarm_system(
        self,
        config: UserConfiguration,
        command: AlarmCommand,
        max_wait_seconds: float = MAX_WAIT_SECONDS_FOR_ALARM_OPERATION,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """
        Send an arm/disarm order and wait until the panel applies it.

        Raises:
            NexecurConfigurationError: If id_site or password is missing
            OrderAlarmError: If the order is refused or cannot be delivered
            StillPendingError: If the panel keeps it pending past the deadline
            OperationCancelledError: If cancel_event was set while waiting
        """
        command = AlarmCommand(command)
        action = COMMAND_ACTIONS[command]
        await self._prepare(config)

        try:
            started_at = asyncio.get_running_loop().time()
            response = await self.send_command(config, command)
            if not is_success(response):
                raise OrderAlarmError(f"Error while {action} alarm system")

            if response.get("pending") == 0:
                return

            await self.wait_for_panel_status_change(
                config,
                max_wait_seconds=max_wait_seconds,
                started_at=started_at,
                cancel_event=cancel_event,
            )
        except (OrderAlarmError, StillPendingError, OperationCancelledError):
            raise
        except Exception as e:
            raise OrderAlarmError(f"Failed {action} alarm: {e}") from e

    # ---------- Status ----------

    async def _read_site(self, config: UserConfiguration, what: str) -> dict[str, Any]:
        response = await self._auth.authenticate_with_site(config)
        if not is_success(response):
            raise UndefinedApiError(f"Failed to retrieve {what} from API")
        return response

    async def get_alarm_status(self, config: UserConfiguration) -> AlarmStatus:
        await self._prepare(config)
        try:
            response = await self._read_site(config, "alarm status")
            return AlarmStatus(response.get("panel_status"))
        except UndefinedApiError:
            raise
        except Exception as e:
            raise UndefinedApiError(f"Failed to get alarm status: {e}") from e

    async def get_event_history(self, config: UserConfiguration) -> list[Event]:
        await self._prepare(config)
        try:
            response = await self._read_site(config, "event history")
            return [Event.from_dict(e) for e in response.get("evenements") or [] if isinstance(e, dict)]
        except UndefinedApiError:
            raise
        except Exception as e:
            raise UndefinedApiError(f"Failed to get event history: {e}") from e

    async def get_site(self, config: UserConfiguration) -> SiteInfo:
        await self._prepare(config)
        try:
            response = await self._read_site(config, "site information")
            return SiteInfo.from_dict(response)
        except UndefinedApiError:
            raise
        except Exception as e:
            raise UndefinedApiError(f"Failed to get site information: {e}") from e

    async def get_devices(self, config: UserConfiguration) -> list[Device]:
        """Devices declared on the site; their serials are accepted by get_stream()."""
        site = await self.get_site(config)
        return site.devices

    async def get_stream(self, config: UserConfiguration, device_serial: str) -> StreamResponse:
        await self._prepare(config)
        try:
            response = await self._session.post(
                self._url(STREAM_URI),
                build_headers(config.token),
                {"serial": device_serial},
            )
            if not is_stream_success(response):
                raise UndefinedApiError("Failed to retrieve stream data from API")
            return StreamResponse.from_dict(response)
        except UndefinedApiError:
            raise
        except Exception as e:
            raise UndefinedApiError(f"Failed to get stream data: {e}") from e
