import asyncio
import json
import logging
import os
from typing import Any, Protocol

import aiohttp

from .constants import (
    BASE_URL,
    DEFAULT_TIMEOUT,
    FORM_CONTENT_TYPE,
    HDR_AUTH_TOKEN,
    HDR_CONTENT_TYPE,
    MESSAGE_OK,
    MESSAGE_REGISTER_OK,
    STATUS_OK,
)
from .exceptions import NexecurTransportError

_LOGGER = logging.getLogger(__name__)

_MASKED_FIELDS = ("password", "pin")
_MASK = "***"


class TransportClient(Protocol):
    """Anything able to POST a JSON body and return the decoded JSON object."""

    async def post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> dict[str, Any]:
        ...


# ---------- request/response helpers ----------

def build_headers(token: str | None = None) -> dict[str, str]:
    """Headers sent on every webservice call (empty token when unauthenticated)."""
    return {
        HDR_CONTENT_TYPE: FORM_CONTENT_TYPE,
        HDR_AUTH_TOKEN: token or "",
    }


def is_success(data: dict[str, Any]) -> bool:
    """Success convention of every endpoint except register."""
    return data.get("message") == MESSAGE_OK and data.get("status") == STATUS_OK


def is_register_success(data: dict[str, Any]) -> bool:
    """Register answers with an empty message on success."""
    return data.get("message") == MESSAGE_REGISTER_OK and data.get("status") == STATUS_OK


def is_stream_success(data: dict[str, Any]) -> bool:
    """Stream only fails when both message and status are wrong."""
    return data.get("message") == MESSAGE_OK or data.get("status") == STATUS_OK


def _masked(body: dict[str, Any]) -> dict[str, Any]:
    return {k: (_MASK if k in _MASKED_FIELDS and v else v) for k, v in body.items()}


class _HttpLogger:
    """Wire log of requests and responses, enabled with NEXECUR_HTTP_LOG_FILE."""

    def __init__(self, log_file: str):
        self._logger = logging.getLogger("pynexecur.http")
        if not self._logger.handlers:
            handler = logging.FileHandler(log_file)
            formatter = logging.Formatter(
                "%(asctime)s %(levelname)s %(message)s"
            )
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.INFO)

        self._log_headers = os.getenv("NEXECUR_HTTP_LOG_HEADERS", "false").lower() == "true"
        self._log_body = os.getenv("NEXECUR_HTTP_LOG_BODY", "true").lower() == "true"

    def log_request(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> None:
        payload = json.dumps(_masked(body), ensure_ascii=False) if self._log_body else None
        if self._log_headers:
            shown = dict(headers)
            if shown.get(HDR_AUTH_TOKEN):
                shown[HDR_AUTH_TOKEN] = _MASK
            self._logger.info("REQUEST: POST %s headers=%s body=%s", url, shown, payload)
        else:
            self._logger.info("REQUEST: POST %s body=%s", url, payload)

    def log_response(self, url: str, status: int, text: str) -> None:
        body = None
        if self._log_body:
            body = text[:500] + ("..." if len(text) > 500 else "")
        self._logger.info("RESPONSE: POST %s status=%d body=%s", url, status, body)


class NexecurSession:
    """
    aiohttp implementation of TransportClient.

    Usage:
        async with aiohttp.ClientSession() as http_session:
            session = NexecurSession(http_session)
            data = await session.post(session.url(SITE_URI), build_headers(token), body)
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._session = session
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

        log_file = os.getenv("NEXECUR_HTTP_LOG_FILE")
        self._http_log = _HttpLogger(log_file) if log_file else None

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> dict[str, Any]:
        """
        POST a JSON-serialised body and decode the JSON answer.

        The vendor expects the form content type even though the body is JSON,
        so the body is serialised here instead of using aiohttp's json= argument.

        Raises:
            NexecurTransportError: On network errors, timeouts or unreadable answers
        """
        if self._http_log:
            self._http_log.log_request(url, headers, body)
        _LOGGER.debug("POST %s", url)

        try:
            async with self._session.post(
                url,
                data=json.dumps(body),
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except asyncio.TimeoutError as e:
            raise NexecurTransportError(f"HTTP request failed: timeout calling {url}") from e
        except aiohttp.ClientError as e:
            raise NexecurTransportError(f"HTTP request failed: {e}") from e

        if self._http_log:
            self._http_log.log_response(url, status, text)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise NexecurTransportError(
                f"HTTP request failed: invalid JSON from {url} (status {status})"
            ) from e
        if not isinstance(data, dict):
            raise NexecurTransportError(
                f"HTTP request failed: unexpected answer from {url} (status {status})"
            )
        return data
