from pydantic_settings import BaseSettings
from typing import Dict

class Settings(BaseSettings):
    # API server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # Game server player-list endpoints, polled in this order
    region_endpoints: Dict[str, str] = {
        "US1": "https://api.gtacnr.net/cnr/players?serverId=US1",
        "US2": "https://api.gtacnr.net/cnr/players?serverId=US2",
        "EU1": "https://api.gtacnr.net/cnr/players?serverId=EU1",
        "EU2": "https://api.gtacnr.net/cnr/players?serverId=EU2",
        "SEA": "https://sea.gtacnr.net/cnr/players?serverId=SEA",
    }

    # Polling
    request_timeout: float = 5.0      # Seconds before a region request is aborted
    inter_request_delay: float = 0.5  # Pause between region requests

    # Region cache
    region_cache_ttl: int = 300        # 5 minutes
    serve_cached_regions: bool = False  # Serve fresh cache entries instead of polling

    # Discord
    discord_widget_url: str = "https://discord.com/api/guilds/1206571308456878100/widget.json"
    discord_widget_ttl: int = 60
    discord_avatar_base_url: str = "https://cdn.discordapp.com/avatars"
    avatar_placeholder_url: str = "/placeholder.svg?height=96&width=96&query=gaming profile avatar"
    avatar_cache_max_age: int = 3600

    # CORS
    allowed_origins: list = ["*"]  # Restrict in production

    class Config:
        env_file = ".env"

settings = Settings()
