"""Twitter verifier — confirms a username resolves to a real account."""

from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from .base import BaseVerifier, LookupStatus, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

TWITTER_API_BASE = "https://api.twitter.com/2"

# Twitter usernames: 1-15 letters, digits or underscores
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{1,15}$")


class TwitterVerifier(BaseVerifier):
    provider_name = "twitter"

    def __init__(self, bearer_token: str = "", *,
                 timeout: float = DEFAULT_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None,
                 base_url: str = TWITTER_API_BASE):
        super().__init__(timeout=timeout, client=client)
        self.bearer_token = bearer_token
        self.base_url = base_url.rstrip("/")

    async def lookup(self, username: str) -> LookupStatus:
        """Look up a bare username (no ``@``).

        Anything that is not a well-formed username is NOT_FOUND without a
        request, so the looked-up account is always the one named in the claim.
        """
        if not USERNAME_RE.fullmatch(username):
            logger.info("Twitter username malformed: %r", username)
            return LookupStatus.NOT_FOUND

        headers = {}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        resp = await self.client.get(
            f"{self.base_url}/users/by/username/{quote(username, safe='')}", headers=headers)
        if resp.status_code == 404:
            return LookupStatus.NOT_FOUND
        resp.raise_for_status()

        # Unknown users come back as 200 with an "errors" array and no "data"
        if resp.json().get("data"):
            return LookupStatus.FOUND
        logger.info("Twitter user not found: %s", username)
        return LookupStatus.NOT_FOUND
