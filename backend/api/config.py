"""
Application Configuration
Loads settings from environment variables with sensible defaults.
"""

from typing import List
from pathlib import Path

from scrapers.settings import ScraperSettings


class Settings(ScraperSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # CORS Configuration
    cors_origins: List[str] = ["*"]

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "backend.log"


# Global settings instance
settings = Settings()
