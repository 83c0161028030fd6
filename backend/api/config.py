"""
Application Configuration
Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

from scrapers.base import CrawlOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_debug: bool = False

    # CORS Configuration
    cors_origins: List[str] = ["*"]

    # Scraper Configuration
    scraper_headless: bool = True
    scraper_navigation_timeout: float = 60.0  # seconds, every page load
    scraper_detail_concurrency: int = 1
    scraper_max_pages: int = 0  # 0 = until a page has no results
    scraper_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
    )

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "backend.log"

    def crawl_options(self) -> CrawlOptions:
        """Crawl tuning handed to the scraper core."""
        return CrawlOptions(
            detail_concurrency=self.scraper_detail_concurrency,
            max_pages=self.scraper_max_pages,
        )

    class Config:
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()
