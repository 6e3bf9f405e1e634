import asyncio
import json

import pytest

from cache import ResponseCache
from server_stats import RegionPoller, ServerStatsAggregator
from upstream_client import UpstreamResponse

REGION_ENDPOINTS = {
    "US1": "https://players.test/cnr/players?serverId=US1",
    "US2": "https://players.test/cnr/players?serverId=US2",
    "EU1": "https://players.test/cnr/players?serverId=EU1",
    "EU2": "https://players.test/cnr/players?serverId=EU2",
    "SEA": "https://players.test/cnr/players?serverId=SEA",
}

def json_response(payload, status=200):
    return UpstreamResponse(
        status=status,
        body=json.dumps(payload).encode("utf-8"),
        content_type="application/json"
    )

def api_player(name, uid=None):
    entry = {"Username": {"Username": name, "Timestamp": "2024-01-01T00:00:00Z"}}
    if uid is not None:
        entry["Uid"] = uid
    return entry

class FakeUpstreamClient:
    """Scripted stand-in for UpstreamClient.

    Each URL maps to an UpstreamResponse or to an exception to raise.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        outcome = self.responses.get(url)
        if outcome is None:
            raise AssertionError(f"Unexpected upstream call: {url}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)

@pytest.fixture
def region_endpoints():
    return dict(REGION_ENDPOINTS)

@pytest.fixture
def fake_client():
    return FakeUpstreamClient()

@pytest.fixture
def region_cache():
    return ResponseCache(ttl=300)

@pytest.fixture
def sleeper():
    return SleepRecorder()

@pytest.fixture
def poller(fake_client, region_cache):
    return RegionPoller(fake_client, region_cache, timeout=5.0)

@pytest.fixture
def aggregator(poller, region_endpoints, sleeper):
    return ServerStatsAggregator(
        poller,
        region_endpoints,
        inter_request_delay=0.5,
        sleep=sleeper
    )

@pytest.fixture
def timeout_error():
    return asyncio.TimeoutError()
