"""
Streaming scraper for Studyportals program listings.

This package provides:
- Request validation and field selection
- Listing page and detail page extraction over a Playwright renderer
- The crawl orchestrator and its ordered event stream
"""

from .base import (
    CrawlOptions,
    FieldSelection,
    PortalConfig,
    ScrapeRequest,
    ScraperError,
    ScrapeValidationError,
    NavigationFailure,
    EventKind,
)
from .config import PORTALS, FIELD_WHITELIST, DETAIL_FIELDS, get_portal_config
from .events import StreamEvent, EventSink, ListSink, QueueSink
from .fields import select_fields
from .orchestrator import CrawlOrchestrator
from .manager import ScraperManager, run_scrape, stream_scrape, default_renderer_factory

__all__ = [
    'CrawlOptions',
    'FieldSelection',
    'PortalConfig',
    'ScrapeRequest',
    'ScraperError',
    'ScrapeValidationError',
    'NavigationFailure',
    'EventKind',
    'PORTALS',
    'FIELD_WHITELIST',
    'DETAIL_FIELDS',
    'get_portal_config',
    'StreamEvent',
    'EventSink',
    'ListSink',
    'QueueSink',
    'select_fields',
    'CrawlOrchestrator',
    'ScraperManager',
    'run_scrape',
    'stream_scrape',
    'default_renderer_factory',
]
