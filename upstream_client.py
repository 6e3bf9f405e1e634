import aiohttp
import json
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass

logger = logging.getLogger(__name__)

@dataclass
class UpstreamConfig:
    """Configuration for outbound HTTP calls"""
    timeout: float = 5.0  # Default request timeout in seconds
    user_agent: str = "pb-community-site/1.0"

@dataclass
class UpstreamResponse:
    """Status and raw body of a completed upstream request"""
    status: int
    body: bytes = b""
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON, raising ValueError when it is not"""
        return json.loads(self.body)

class UpstreamClient:
    """Shared HTTP client for the game server API and Discord"""

    def __init__(self, config: UpstreamConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.disconnect()

    async def connect(self):
        """Initialize HTTP session"""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.config.user_agent}
            )
            logger.info(f"Upstream HTTP session opened (timeout: {self.config.timeout}s)")

    async def disconnect(self):
        """Close HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("Upstream HTTP session closed")

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None
    ) -> UpstreamResponse:
        """
        Perform a GET request and read the whole body

        Args:
            url: Absolute URL to fetch
            headers: Extra request headers
            timeout: Total time allowed for this request, overrides the session default

        Returns:
            UpstreamResponse for any HTTP status

        Raises:
            asyncio.TimeoutError: the request did not complete in time
            aiohttp.ClientError: the transport failed
        """
        if not self.session:
            await self.connect()

        kwargs: Dict[str, Any] = {"headers": headers}
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        async with self.session.get(url, **kwargs) as response:
            body = await response.read()
            logger.debug(f"GET {url} -> {response.status} ({len(body)} bytes)")
            return UpstreamResponse(
                status=response.status,
                body=body,
                content_type=response.headers.get("Content-Type")
            )
