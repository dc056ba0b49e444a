"""Shared aiohttp plumbing for generation services running on the local machine."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Tuple

import aiohttp

from llmbatch.config.manager import BackendSettings
from llmbatch.core.errors import BackendError, BackendUnavailableError
from llmbatch.core.logger import setup_logger
from llmbatch.llm.backends.base import Backend

logger = setup_logger(__name__)


class LocalHttpBackend(Backend):
    """
    Base for on-device backends reached over a loopback HTTP API.

    Owns one ``aiohttp.ClientSession`` from ``open()`` to ``close()``. Busy
    responses are retried by the dispatch layer, so ``supports_retry`` is on.
    """

    health_path: str = "/"
    remediation: str = "Start the local generation service and retry."

    def __init__(self, settings: BackendSettings) -> None:
        if not settings.base_url:
            raise ValueError(f"{self.identifier}: base_url must be configured")
        if not settings.model:
            raise ValueError(f"{self.identifier}: model must be configured")
        self.settings = settings
        self.base_url: str = settings.base_url.rstrip("/")
        self.session: Optional[aiohttp.ClientSession] = None

    @property
    def supports_retry(self) -> bool:
        return True

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.timeout)
            )
        try:
            status, _ = await self._request("GET", self.health_path)
        except BackendError as e:
            await self.close()
            raise BackendUnavailableError(
                f"{self.identifier} is not reachable at {self.base_url}: {e}",
                remediation=self.remediation,
            ) from e
        if not self._is_reachable_status(status):
            await self.close()
            raise BackendUnavailableError(
                f"{self.identifier} health check at {self.base_url} returned HTTP {status}",
                remediation=self.remediation,
            )
        logger.info("%s backend ready at %s (model: %s)", self.identifier, self.base_url, self.settings.model)

    def _is_reachable_status(self, status: int) -> bool:
        return status == 200

    async def close(self) -> None:
        """
        Close the aiohttp session.
        """
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Any]:
        """
        Send one request and return ``(status, body)``.

        The body is decoded JSON when the server sent JSON, otherwise text.
        Transport failures and timeouts raise ``BackendError``.
        """
        if self.session is None or self.session.closed:
            raise BackendError(f"{self.identifier} session is not open")
        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(method, url, json=payload) as resp:
                if resp.content_type == "application/json":
                    body: Any = await resp.json()
                else:
                    body = await resp.text()
                return resp.status, body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BackendError(f"{type(e).__name__}: {e}" if str(e) else type(e).__name__) from e
