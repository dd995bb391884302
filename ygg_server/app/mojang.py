"""Read-only client for the two Mojang lookups used by skin import."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote
from uuid import UUID

import requests

from .config import settings
from .errors import UpstreamError, UpstreamNoContent

logger = logging.getLogger(__name__)


class ExternalProfileClient(Protocol):
    """Capability the skin resolver depends on.

    Both lookups return the decoded JSON document. Implementations raise
    :class:`UpstreamNoContent` when the upstream answers 204 and
    :class:`UpstreamError` for any other failure.
    """

    def resolve_account(self, username: str) -> Dict[str, Any]:
        ...

    def resolve_profile(self, profile_id: UUID) -> Dict[str, Any]:
        ...


class MojangClient:
    """Client for api.mojang.com and the session server.

    Every lookup is a standalone ``requests.get``; no connection state is kept
    between calls, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        session_server_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = (api_url or settings.mojang_api_url).rstrip("/")
        self.session_server_url = (session_server_url or settings.session_server_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout

    def resolve_account(self, username: str) -> Dict[str, Any]:
        url = f"{self.api_url}/users/profiles/minecraft/{quote(username, safe='')}"
        return self._get_object(url)

    def resolve_profile(self, profile_id: UUID) -> Dict[str, Any]:
        # the session server only accepts the undashed form
        url = f"{self.session_server_url}/session/minecraft/profile/{profile_id.hex}"
        return self._get_object(url)

    def _get_object(self, url: str) -> Dict[str, Any]:
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise UpstreamError(f"request to {url} failed: {exc}") from exc

        if response.status_code == 204:
            raise UpstreamNoContent(f"{url} returned no content")
        if not 200 <= response.status_code < 300:
            logger.warning("GET %s returned status %s", url, response.status_code)
            raise UpstreamError(
                f"{url} returned status {response.status_code}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{url} returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise UpstreamError(f"{url} returned a non-object body")
        return payload


__all__ = ["ExternalProfileClient", "MojangClient"]
