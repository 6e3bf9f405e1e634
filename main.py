from fastapi import FastAPI, Depends, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
import time
from contextlib import asynccontextmanager
from typing import Optional
import logging

from models import ResponseEnvelope, HealthResponse
from cache import ResponseCache
from discord_proxy import DiscordProxy, DiscordProxyError
from server_stats import RegionPoller, ServerStatsAggregator
from upstream_client import UpstreamClient, UpstreamConfig
from config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

NO_STORE = "no-store, max-age=0"

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting community site API...")
    client = UpstreamClient(UpstreamConfig(timeout=settings.request_timeout))
    await client.connect()

    region_cache = ResponseCache(ttl=settings.region_cache_ttl)
    poller = RegionPoller(client, region_cache, timeout=settings.request_timeout)
    app.state.aggregator = ServerStatsAggregator(
        poller,
        settings.region_endpoints,
        inter_request_delay=settings.inter_request_delay,
        serve_cached=settings.serve_cached_regions
    )
    app.state.discord = DiscordProxy(
        client,
        widget_url=settings.discord_widget_url,
        avatar_base_url=settings.discord_avatar_base_url,
        widget_cache=ResponseCache(ttl=settings.discord_widget_ttl)
    )

    logger.info(f"Community site API started on {settings.host}:{settings.port}")
    logger.info(f"Regions: {', '.join(settings.region_endpoints)}")
    logger.info(f"Request timeout: {settings.request_timeout}s, delay between regions: {settings.inter_request_delay}s")

    yield

    # Shutdown
    logger.info("Shutting down community site API...")
    await client.disconnect()

app = FastAPI(
    title="Community Site API",
    description="Live server stats and Discord proxies for the community website",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_aggregator(request: Request) -> ServerStatsAggregator:
    return request.app.state.aggregator

def get_discord(request: Request) -> DiscordProxy:
    return request.app.state.discord

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="ok",
        timestamp=time.time(),
        regions=len(settings.region_endpoints)
    )

@app.get(
    "/api/server-stats",
    response_model=ResponseEnvelope,
    response_model_exclude_none=True
)
async def server_stats(
    response: Response,
    real: Optional[str] = None,
    t: Optional[str] = None,
    aggregator: ServerStatsAggregator = Depends(get_aggregator)
):
    """Player lists for every region; always 200, degraded regions fall back to mock data"""
    envelope = await aggregator.collect(use_real_data=real == "true")
    response.headers["Cache-Control"] = NO_STORE
    return envelope

@app.get("/api/discord")
async def discord_widget(discord: DiscordProxy = Depends(get_discord)):
    """Guild widget JSON, passed through verbatim"""
    try:
        data = await discord.fetch_widget()
    except DiscordProxyError as e:
        logger.error(f"Error fetching Discord data: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch Discord data"})

    return JSONResponse(
        content=data,
        headers={"Cache-Control": f"public, max-age={settings.discord_widget_ttl}"}
    )

@app.get("/api/discord-avatar")
async def discord_avatar(
    id: Optional[str] = None,
    discord: DiscordProxy = Depends(get_discord)
):
    """Member avatar image, or a redirect to the placeholder when unavailable"""
    if not id:
        return JSONResponse(status_code=400, content={"error": "Discord ID is required"})

    try:
        avatar = await discord.fetch_avatar(id)
    except DiscordProxyError as e:
        logger.error(f"Error fetching Discord avatar: {e}")
        return RedirectResponse(settings.avatar_placeholder_url, status_code=302)

    return Response(
        content=avatar.content,
        media_type=avatar.content_type,
        headers={"Cache-Control": f"public, max-age={settings.avatar_cache_max_age}"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info"
    )
