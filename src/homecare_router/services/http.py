"""Shared HTTP plumbing for geocoding and routing backends."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import settings
from ..errors import TransportError

logger = logging.getLogger(__name__)


class HttpServiceClient:
    """Base for backends talking to one external HTTP service.

    A fresh ``httpx.Client`` is opened per call. ``transport`` is passed
    through to httpx, which lets tests plug in ``httpx.MockTransport``.
    """

    service_name = "external service"

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            transport=self._transport,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one request; network-level failures become ``TransportError``."""
        client = self._get_client()
        try:
            return client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{self.service_name} request timed out after {self.timeout}s: {e}")
            raise TransportError(self.service_name, str(e)) from e
        except httpx.HTTPError as e:
            logger.warning(f"{self.service_name} request failed: {e}")
            raise TransportError(self.service_name, str(e)) from e
        finally:
            client.close()

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(self.service_name, f"Invalid JSON in response: {e}") from e
