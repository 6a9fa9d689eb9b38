"""Base verifier interface and shared result types."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class LookupResult:
    provider: str
    handle: str
    status: LookupStatus
    detail: str = ""

    @property
    def verified(self) -> bool:
        return self.status is LookupStatus.FOUND


class BaseVerifier(ABC):
    """Checks one identity against one identity provider.

    The identity is passed as the provider-specific parts, already parsed:
    a bare username for Twitter, ``(username, discriminator)`` for Discord.

    ``check()`` never raises: provider failures and timeouts are logged and
    reported through ``LookupResult.status``. ``verify()`` collapses that to
    a boolean.
    """

    provider_name: str = "unknown"

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @abstractmethod
    async def lookup(self, *identity: str) -> LookupStatus:
        """Query the provider. May raise on transport or API errors."""
        ...

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def check(self, *identity: str) -> LookupResult:
        handle = "#".join(identity)
        try:
            status = await asyncio.wait_for(self.lookup(*identity), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s verification timed out after %.1fs", self.provider_name, self.timeout,
                           extra={"provider": self.provider_name, "handle": handle})
            return LookupResult(self.provider_name, handle, LookupStatus.TIMEOUT,
                                f"timed out after {self.timeout}s")
        except Exception as e:
            logger.warning("%s verification failed: %s", self.provider_name, e,
                           extra={"provider": self.provider_name, "handle": handle,
                                  "error": type(e).__name__})
            return LookupResult(self.provider_name, handle, LookupStatus.PROVIDER_ERROR,
                                f"{type(e).__name__}: {e}")
        return LookupResult(self.provider_name, handle, status)

    async def verify(self, *identity: str) -> bool:
        return (await self.check(*identity)).verified
