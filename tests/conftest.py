"""Pytest configuration and fixtures for the Nexecur client tests."""

import copy
from typing import Any

import pytest

from pynexecur.configuration import UserConfiguration
from pynexecur.constants import BASE_URL, REGISTER_URI, SALT_URI, SITE_URI

TEST_SALT = "dGVzdFNhbHQ="  # base64 of "testSalt"


class FakeTransport:
    """TransportClient double answering per endpoint path.

    Each path maps to a response dict, an exception, or a list of those
    consumed in order (the last one is repeated once the list is exhausted).
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str], dict[str, Any]]] = []

    def paths(self) -> list[str]:
        return [path for path, _, _ in self.calls]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    async def post(
        self,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> dict[str, Any]:
        path = url.removeprefix(BASE_URL)
        self.calls.append((path, dict(headers), copy.deepcopy(body)))
        if path not in self.responses:
            error_message = f"Unexpected call to {path}"
            raise AssertionError(error_message)

        answer = self.responses[path]
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, BaseException):
            raise answer
        return copy.deepcopy(answer)


@pytest.fixture
def salt_response() -> dict:
    """Fixture providing a successful salt response."""
    return {"message": "OK", "status": 0, "salt": TEST_SALT}


@pytest.fixture
def site_response() -> dict:
    """Fixture providing a successful site response with one device and one event."""
    return {
        "message": "OK",
        "status": 0,
        "token": "test-token-123",
        "id_site": 12345,
        "type": "centrale_w",
        "panel_streaming": 1,
        "panel_serial": "PANEL123456",
        "panel_status": 0,
        "panel_sp1": 0,
        "panel_sp2": 0,
        "panel_sp1_nom": "SP1",
        "panel_sp2_nom": "SP2",
        "devices": [
            {"serial": "DEV123", "device_id": 1, "name": "Test Device", "picture": ""},
        ],
        "evenements": [
            {
                "id_evenement": 1,
                "option_id": 1,
                "device": "DEV123",
                "message": "alarm_disabled",
                "picture": "",
                "date": 1672574400,
                "status": 0,
                "badge": 1,
            },
        ],
    }


@pytest.fixture
def site_error_response() -> dict:
    """Fixture providing a refused site response."""
    return {"message": "ERROR", "status": 1, "token": "", "panel_status": 0, "evenements": []}


@pytest.fixture
def register_response() -> dict:
    """Fixture providing a successful register response (empty message)."""
    return {"message": "", "status": 0, "id_device": "device-123"}


@pytest.fixture
def registered_config() -> UserConfiguration:
    """Fixture providing a configuration with a registered device."""
    return UserConfiguration(
        token="test-token",
        id_site="test-site-123",
        password="test-password",
        id_device="test-device",
        pin="test-pin",
        device_name="Test Device",
    )


@pytest.fixture
def new_config() -> UserConfiguration:
    """Fixture providing a configuration that still needs registration."""
    return UserConfiguration(id_site="test-site-123", password="plain-password")


@pytest.fixture
def registration_transport(
    salt_response: dict,
    site_response: dict,
    register_response: dict,
) -> FakeTransport:
    """Fixture providing a transport where the whole registration succeeds."""
    return FakeTransport(
        {
            SALT_URI: salt_response,
            SITE_URI: site_response,
            REGISTER_URI: register_response,
        },
    )


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    """Fixture providing the FakeTransport class."""
    return FakeTransport
