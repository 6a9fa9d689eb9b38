"""Discord verifier — confirms ``username#discriminator`` is a guild member.

Uses the member search endpoint when enabled, which is an indexed lookup on
the username prefix. If search is rejected by the API, falls back to paging
through the whole member list, as it also does when search returns a full
page without the member. Either way the match is exact on both the
username and the discriminator.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import httpx

from .base import BaseVerifier, LookupStatus, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"
PAGE_SIZE = 1000


def member_matches(member: dict, username: str, discriminator: str) -> bool:
    user = member.get("user") or {}
    return user.get("username") == username and user.get("discriminator") == discriminator


class DiscordVerifier(BaseVerifier):
    provider_name = "discord"

    def __init__(self, bot_token: str = "", guild_id: str = "", *,
                 use_search: bool = True,
                 timeout: float = DEFAULT_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None,
                 base_url: str = DISCORD_API_BASE):
        super().__init__(timeout=timeout, client=client)
        self.bot_token = bot_token
        self.guild_id = guild_id
        self.use_search = use_search
        self.base_url = base_url.rstrip("/")

    @property
    def _headers(self) -> dict:
        return {"Authorization": f"Bot {self.bot_token}"}

    async def lookup(self, username: str, discriminator: str) -> LookupStatus:
        if not self.bot_token or not self.guild_id:
            raise RuntimeError("Discord bot token or guild ID not configured")

        if self.use_search:
            try:
                members = await self._search_members(username)
            except httpx.HTTPStatusError as e:
                logger.info("Discord member search unavailable (%s), scanning member list",
                            e.response.status_code)
            else:
                if self._match(members, username, discriminator) is LookupStatus.FOUND:
                    return LookupStatus.FOUND
                # search is a capped prefix match; a full page may hide the member
                if len(members) < PAGE_SIZE:
                    return LookupStatus.NOT_FOUND
                logger.info("Discord member search returned a full page, scanning member list")

        return self._match(await self._list_members(), username, discriminator)

    @staticmethod
    def _match(members: Iterable[dict], username: str, discriminator: str) -> LookupStatus:
        if any(member_matches(m, username, discriminator) for m in members):
            return LookupStatus.FOUND
        return LookupStatus.NOT_FOUND

    async def _search_members(self, username: str) -> list[dict]:
        resp = await self.client.get(
            f"{self.base_url}/guilds/{self.guild_id}/members/search",
            params={"query": username, "limit": PAGE_SIZE},
            headers=self._headers,
        )
        resp.raise_for_status()
        return resp.json()

    async def _list_members(self) -> list[dict]:
        """Fetch every guild member, following the ``after`` cursor."""
        members: list[dict] = []
        after = "0"
        while True:
            resp = await self.client.get(
                f"{self.base_url}/guilds/{self.guild_id}/members",
                params={"limit": PAGE_SIZE, "after": after},
                headers=self._headers,
            )
            resp.raise_for_status()
            page = resp.json()
            members.extend(page)
            if len(page) < PAGE_SIZE:
                return members
            after = page[-1]["user"]["id"]
