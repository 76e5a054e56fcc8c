"""
Scraper Settings
Environment-driven overrides for the site config, shared by the CLI and the API.
"""

from pydantic_settings import BaseSettings

from .config import Credentials, SiteConfig, Timeouts, resolve_site_config


class ScraperSettings(BaseSettings):
    """Scraper settings loaded from environment variables."""

    # Target site
    site_key: str = "haraj"
    site_base_url: str = "https://haraj.com.sa"

    # Login used for the contact reveal; empty disables the revealer
    haraj_username: str = ""
    haraj_password: str = ""

    # Scraper Configuration
    scraper_max_results: int = 1000
    scraper_headless: bool = True
    scraper_reveal_headless: bool = True
    scraper_reuse_session: bool = True
    scraper_render_wait: float = 20.0
    scraper_scroll_pause: float = 8.0
    scraper_max_scroll_iterations: int = 150
    scraper_reveal_timeout: float = 30.0
    scraper_timeout: float = 30.0
    scraper_max_retries: int = 3
    scraper_retry_delay: float = 2.0
    scraper_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
    )

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def site_config(self) -> SiteConfig:
        """Build the scraper's SiteConfig from these settings."""
        return resolve_site_config(
            self.site_key,
            base_url=self.site_base_url,
            credentials=Credentials(username=self.haraj_username, password=self.haraj_password),
            timeouts=Timeouts(
                render_wait=self.scraper_render_wait,
                scroll_pause=self.scraper_scroll_pause,
                max_scroll_iterations=self.scraper_max_scroll_iterations,
                reveal_wait=self.scraper_reveal_timeout,
                http_timeout=self.scraper_timeout,
                detail_retries=self.scraper_max_retries,
                detail_retry_delay=self.scraper_retry_delay,
            ),
            max_results=self.scraper_max_results,
            headless=self.scraper_headless,
            reveal_headless=self.scraper_reveal_headless,
            reuse_session=self.scraper_reuse_session,
            user_agent=self.scraper_user_agent,
        )

    class Config:
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if __import__("pathlib").Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables
