import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from cache import ResponseCache
from discord_proxy import DiscordProxy
from server_stats import RegionPoller
from upstream_client import UpstreamClient, UpstreamConfig

async def players(request):
    assert request.headers["Accept"] == "application/json"
    return web.json_response([
        {"Uid": "abc", "Username": {"Username": "P-B | Live", "Timestamp": "t"}},
        {"Uid": "def", "Username": {"Username": "Someone Else", "Timestamp": "t"}},
    ])

async def rate_limited(request):
    return web.json_response({"error": "slow down"}, status=429)

async def slow(request):
    await asyncio.sleep(1)
    return web.json_response([])

@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_get("/players", players)
    app.router.add_get("/limited", rate_limited)
    app.router.add_get("/slow", slow)
    async with test_utils.TestServer(app) as test_server:
        yield test_server

@pytest.fixture
async def client():
    async with UpstreamClient(UpstreamConfig(timeout=5.0)) as upstream:
        yield upstream

async def test_get_returns_status_and_body(server, client):
    response = await client.get(str(server.make_url("/limited")))

    assert response.status == 429
    assert not response.ok
    assert response.json() == {"error": "slow down"}
    assert response.content_type.startswith("application/json")

async def test_get_timeout_raises(server, client):
    with pytest.raises(asyncio.TimeoutError):
        await client.get(str(server.make_url("/slow")), timeout=0.1)

async def test_poller_against_live_server(server, client):
    poller = RegionPoller(client, ResponseCache(ttl=300), timeout=5.0)

    result = await poller.poll("US1", str(server.make_url("/players")))

    assert result.online is True
    assert [(p.name, p.id) for p in result.players] == [("P-B | Live", "abc")]

async def test_poller_times_out_per_request(server, client):
    poller = RegionPoller(client, ResponseCache(ttl=300), timeout=0.1)

    result = await poller.poll("US1", str(server.make_url("/slow")))

    assert result.fetch_failed is True
    assert result.using_mock_data is True

async def test_disconnect_closes_session():
    upstream = UpstreamClient(UpstreamConfig())
    await upstream.connect()
    session = upstream.session

    await upstream.disconnect()

    assert session.closed
    assert upstream.session is None

@pytest.fixture
async def bare_server():
    # Answers every request without a Content-Type header
    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 3\r\nConnection: close\r\n\r\nimg")
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    yield f"http://127.0.0.1:{port}"
    server.close()
    await server.wait_closed()

async def test_missing_content_type_is_none(bare_server, client):
    response = await client.get(f"{bare_server}/anything")

    assert response.status == 200
    assert response.body == b"img"
    assert response.content_type is None

async def test_avatar_without_content_type_defaults_to_png(bare_server, client):
    proxy = DiscordProxy(
        client,
        widget_url=f"{bare_server}/widget.json",
        avatar_base_url=f"{bare_server}/avatars",
        widget_cache=ResponseCache(ttl=60)
    )

    avatar = await proxy.fetch_avatar("42")

    assert avatar.content == b"img"
    assert avatar.content_type == "image/png"
