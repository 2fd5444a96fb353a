"""Configuration using pydantic-settings."""

from pydantic_settings import BaseSettings

from .core import DEFAULT_USER_AGENT


class CrawlerSettings(BaseSettings):
    """Crawler configuration."""

    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    use_proxy: bool = True
    proxy_url: str = "socks5://127.0.0.1:9150"

    listing_url: str = "https://thechive.com/category/sexy-girls"
    total_pages: int = 282
    gallery_marker: str = "CHIVE_GALLERY_ITEMS"

    auto_play: bool = False
    interval: float = 5.0

    log_level: str = "INFO"

    model_config = {"env_prefix": "GALLERY_"}

    @property
    def proxy(self) -> str | None:
        """Proxy URL to hand to the HTTP client, or None for direct connections."""
        return self.proxy_url if self.use_proxy else None


settings = CrawlerSettings()
