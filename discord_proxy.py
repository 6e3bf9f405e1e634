import aiohttp
import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from cache import ResponseCache
from upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

class DiscordProxyError(Exception):
    """Raised when Discord could not provide the requested resource"""

@dataclass
class Avatar:
    content: bytes
    content_type: str

class DiscordProxy:
    """Server-side access to the guild widget and member avatars"""

    def __init__(
        self,
        client: UpstreamClient,
        widget_url: str,
        avatar_base_url: str,
        widget_cache: ResponseCache
    ):
        self.client = client
        self.widget_url = widget_url
        self.avatar_base_url = avatar_base_url.rstrip("/")
        self.widget_cache = widget_cache

    async def fetch_widget(self) -> Any:
        """
        Get the guild widget JSON, served from cache while it is fresh

        Raises:
            DiscordProxyError: Discord was unreachable or answered with an error
        """
        cached = self.widget_cache.get_fresh(self.widget_url)
        if cached is not None:
            return cached

        try:
            response = await self.client.get(self.widget_url)
            if not response.ok:
                raise DiscordProxyError(f"Discord API responded with status: {response.status}")
            data = response.json()
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as e:
            raise DiscordProxyError(f"Discord widget request failed: {e}") from e

        self.widget_cache.store(self.widget_url, data)
        return data

    async def fetch_avatar(self, discord_id: str) -> Avatar:
        """
        Get a member avatar image

        Raises:
            DiscordProxyError: the avatar could not be fetched
        """
        url = f"{self.avatar_base_url}/{discord_id}"
        try:
            response = await self.client.get(url)
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise DiscordProxyError(f"Avatar request failed: {e}") from e

        if not response.ok:
            raise DiscordProxyError(f"Failed to fetch Discord avatar: {response.status}")

        return Avatar(
            content=response.body,
            content_type=response.content_type or "image/png"
        )
