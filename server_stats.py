"""Live server stats: per-region polling of the game server API.

Regions are polled one at a time with a fixed pause between requests so the
upstream rate limiter is not tripped. Any region that cannot be fetched is
filled in from the mock table and flagged, so a response always carries one
entry per configured region.
"""
import aiohttp
import asyncio
import logging
import random
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cache import ResponseCache
from mock_data import mock_players
from models import OverallStatus, PlayerRecord, RegionResult, ResponseEnvelope
from upstream_client import UpstreamClient, UpstreamResponse

logger = logging.getLogger(__name__)

# Accepted forms of the crew tag in a display name
COMMUNITY_TAGS = ("P-B", "P-B |", "[P-B]")

PLAYER_LIST_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
}

CONNECTION_UNAVAILABLE = "Connection unavailable"

MOCK_MESSAGE = "Using mock data by default. Click 'Try Real Data' to attempt fetching live data."
ALL_MOCKED_MESSAGE = "Unable to connect to any servers. Using mock data for all servers."
FALLBACK_MESSAGE = "Unable to connect to server API. Using mock data for all servers."

def is_community_member(name: str) -> bool:
    return any(tag in name for tag in COMMUNITY_TAGS)

def synthesize_id(length: int = 7) -> str:
    """Random lowercase alphanumeric id for players the API returns without one"""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))

def synthesize_ping() -> int:
    # The player-list API exposes no latency
    return random.randint(20, 99)

def parse_players(data: Any) -> List[PlayerRecord]:
    """
    Turn a player-list payload into community PlayerRecords

    Entries look like {"Uid": "...", "Username": {"Username": "...", "Timestamp": "..."}}.
    Anything that is not a list is treated as an empty server.
    """
    if not isinstance(data, list):
        return []

    players = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        username = entry.get("Username")
        name = username.get("Username") if isinstance(username, dict) else None
        if not isinstance(name, str) or not is_community_member(name):
            continue
        uid = entry.get("Uid")
        players.append(PlayerRecord(
            name=name,
            id=str(uid) if uid else synthesize_id(),
            ping=synthesize_ping()
        ))
    return players

@dataclass
class PollOutcome:
    result: RegionResult
    responded: bool  # upstream answered with an HTTP status

class RegionPoller:
    """Fetches one region's player list and classifies the outcome.

    poll() never raises: every failure is folded into the returned RegionResult.
    """

    def __init__(self, client: UpstreamClient, cache: ResponseCache, timeout: float = 5.0):
        self.client = client
        self.cache = cache
        self.timeout = timeout

    async def poll(self, region_id: str, url: str) -> RegionResult:
        outcome = await self.poll_outcome(region_id, url)
        return outcome.result

    async def poll_outcome(self, region_id: str, url: str) -> PollOutcome:
        """Poll a region and report whether upstream answered at all"""
        try:
            response = await self.client.get(url, headers=PLAYER_LIST_HEADERS, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Region {region_id} request timed out after {self.timeout}s")
            return PollOutcome(self.unavailable(region_id), responded=False)
        except aiohttp.ClientError as e:
            logger.error(f"Region {region_id} request failed: {e}")
            return PollOutcome(self.unavailable(region_id), responded=False)
        except Exception as e:
            logger.error(f"Unexpected error polling region {region_id}: {e}")
            return PollOutcome(self.unavailable(region_id), responded=False)

        try:
            result = self._classify(region_id, response)
        except ValueError as e:
            logger.error(f"Region {region_id} returned an unreadable body: {e}")
            result = self.unavailable(region_id)
        except Exception as e:
            logger.error(f"Unexpected error reading region {region_id}: {e}")
            result = self.unavailable(region_id)
        return PollOutcome(result, responded=True)

    def _classify(self, region_id: str, response: UpstreamResponse) -> RegionResult:
        if response.status == 404:
            logger.warning(f"Region {region_id} not found upstream")
            return RegionResult(
                region_id=region_id,
                players=[],
                online=False,
                error=f"Server {region_id} not found"
            )

        if response.status == 429:
            logger.warning(f"Region {region_id} rate limited, serving mock data")
            return RegionResult(
                region_id=region_id,
                players=mock_players(region_id),
                online=True,
                rate_limited=True,
                using_mock_data=True
            )

        if not response.ok:
            logger.warning(f"Region {region_id} returned {response.status}, serving mock data")
            return RegionResult(
                region_id=region_id,
                players=mock_players(region_id),
                online=True,
                error=f"API error: {response.status}",
                using_mock_data=True
            )

        result = RegionResult(
            region_id=region_id,
            players=parse_players(response.json()),
            online=True
        )
        self.cache.store(region_id, result)
        logger.info(f"Region {region_id}: {len(result.players)} community player(s) online")
        return result

    @staticmethod
    def unavailable(region_id: str) -> RegionResult:
        return RegionResult(
            region_id=region_id,
            players=mock_players(region_id),
            online=True,
            fetch_failed=True,
            using_mock_data=True,
            error=CONNECTION_UNAVAILABLE
        )

class ServerStatsAggregator:
    """Builds the server stats envelope for every configured region"""

    def __init__(
        self,
        poller: RegionPoller,
        region_endpoints: Dict[str, str],
        inter_request_delay: float = 0.5,
        serve_cached: bool = False,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.poller = poller
        self.region_endpoints = dict(region_endpoints)
        self.inter_request_delay = inter_request_delay
        self.serve_cached = serve_cached
        self._sleep = sleep

    @property
    def region_ids(self) -> List[str]:
        return list(self.region_endpoints)

    async def collect(self, use_real_data: bool = False) -> ResponseEnvelope:
        """
        Build the envelope for one request

        Args:
            use_real_data: Poll the game server API instead of serving mock data

        Returns:
            ResponseEnvelope; unexpected errors produce a fully mocked envelope
        """
        try:
            if not use_real_data:
                return self.mock_envelope()
            return await self._collect_live()
        except Exception:
            logger.exception("Server stats aggregation failed, serving mock data for all regions")
            return self.fallback_envelope()

    async def _collect_live(self) -> ResponseEnvelope:
        results: List[RegionResult] = []
        api_reached = False
        fetch_fail_count = 0
        region_ids = self.region_ids

        for index, region_id in enumerate(region_ids):
            url = self.region_endpoints[region_id]
            if not url:
                logger.warning(f"No API endpoint defined for {region_id}")
                results.append(RegionResult(
                    region_id=region_id,
                    players=[],
                    online=False,
                    error=f"No API endpoint defined for {region_id}"
                ))
                continue

            cached = self._cached_result(region_id)
            if cached is not None:
                logger.info(f"Region {region_id} served from cache")
                results.append(cached)
                api_reached = True
                continue

            outcome = await self.poller.poll_outcome(region_id, url)
            results.append(outcome.result)
            if outcome.result.fetch_failed:
                fetch_fail_count += 1
            if outcome.responded:
                api_reached = True

            if index < len(region_ids) - 1:
                await self._sleep(self.inter_request_delay)

        return self._summarize(results, api_reached, fetch_fail_count)

    def _cached_result(self, region_id: str) -> Optional[RegionResult]:
        if not self.serve_cached:
            return None
        return self.poller.cache.get_fresh(region_id)

    def _summarize(
        self,
        results: List[RegionResult],
        api_reached: bool,
        fetch_fail_count: int
    ) -> ResponseEnvelope:
        total = len(self.region_endpoints)
        mock_count = sum(1 for r in results if r.using_mock_data)
        all_mocked = mock_count == total

        if all_mocked:
            status = OverallStatus.UNAVAILABLE
            message = ALL_MOCKED_MESSAGE
        elif mock_count > 0:
            status = OverallStatus.PARTIAL
            message = f"Using mock data for {mock_count} of {total} servers due to connectivity issues."
        else:
            status = OverallStatus.AVAILABLE
            message = None

        if message:
            logger.warning(message)

        return ResponseEnvelope(
            regions=results,
            generated_at=datetime.now(timezone.utc),
            overall_status=status,
            mock_count=mock_count,
            any_api_reachable=api_reached and not all_mocked,
            using_mock_data=mock_count > 0,
            fetch_fail_count=fetch_fail_count,
            message=message
        )

    def mock_envelope(self) -> ResponseEnvelope:
        """Envelope served when live data was not requested"""
        regions = [
            RegionResult(
                region_id=region_id,
                players=mock_players(region_id),
                online=True,
                using_mock_data=True
            )
            for region_id in self.region_ids
        ]
        return ResponseEnvelope(
            regions=regions,
            generated_at=datetime.now(timezone.utc),
            overall_status=OverallStatus.MOCK,
            mock_count=len(regions),
            any_api_reachable=False,
            using_mock_data=True,
            message=MOCK_MESSAGE
        )

    def fallback_envelope(self) -> ResponseEnvelope:
        """Envelope served when aggregation itself failed"""
        regions = [RegionPoller.unavailable(region_id) for region_id in self.region_ids]
        return ResponseEnvelope(
            regions=regions,
            generated_at=datetime.now(timezone.utc),
            overall_status=OverallStatus.UNAVAILABLE,
            mock_count=len(regions),
            any_api_reachable=False,
            using_mock_data=True,
            fetch_fail_count=len(regions),
            message=FALLBACK_MESSAGE,
            error="Failed to fetch server data"
        )
