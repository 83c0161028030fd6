"""
Scraper Manager - entry points for running scrapes.

Provides the transport-independent interface to the crawl engine:
run a request to completion and collect its events, or consume the
events as they are produced.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional
import logging

from .base import CrawlOptions
from .config import DETAIL_FIELDS, FIELD_WHITELIST, list_portals
from .crawlers.renderer import RendererFactory
from .crawlers.stealth import StealthRenderer
from .events import ListSink, QueueSink, StreamEvent
from .orchestrator import CrawlOrchestrator

logger = logging.getLogger(__name__)


def default_renderer_factory(
    headless: bool = True,
    timeout: float = 60.0,
    user_agent: Optional[str] = None,
) -> RendererFactory:
    """Build a factory that launches a new stealth browser per request."""
    def factory():
        return StealthRenderer(headless=headless, timeout=timeout, user_agent=user_agent)
    return factory


class ScraperManager:
    """
    Runs scrape requests against a renderer factory.

    Usage:
        manager = ScraperManager(default_renderer_factory())

        # Collect everything
        events = await manager.run_scrape({'country': 'germany', 'degree': 'msc',
                                           'fields': ['programName']})

        # Stream
        async for event in manager.stream_scrape(payload):
            print(event.to_sse())
    """

    def __init__(self, renderer_factory: RendererFactory, options: Optional[CrawlOptions] = None):
        self.renderer_factory = renderer_factory
        self.options = options or CrawlOptions()

    def _orchestrator(self) -> CrawlOrchestrator:
        return CrawlOrchestrator(self.renderer_factory, self.options)

    async def run_scrape(self, payload: Dict[str, Any]) -> List[StreamEvent]:
        """
        Run one request to completion.

        Args:
            payload: Request values keyed `country`, `degree`, `fields`

        Returns:
            Every emitted event, in order
        """
        sink = ListSink()
        await self._orchestrator().run(
            payload.get('country'), payload.get('degree'), payload.get('fields'), sink
        )
        return sink.events

    async def stream_scrape(self, payload: Dict[str, Any]) -> AsyncIterator[StreamEvent]:
        """
        Yield events while the crawl runs in a background task.

        If the consumer stops early (client disconnect) the crawl task is
        cancelled and its browser released.
        """
        sink = QueueSink()

        async def produce():
            try:
                await self._orchestrator().run(
                    payload.get('country'), payload.get('degree'), payload.get('fields'), sink
                )
            finally:
                await sink.close()

        task = asyncio.ensure_future(produce())
        try:
            while True:
                event = await sink.queue.get()
                if event is None:
                    break
                yield event
        finally:
            if not task.done():
                logger.info("Stream consumer went away, cancelling scrape")
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    @staticmethod
    def list_portals() -> Dict[str, Any]:
        """Describe supported categories and fields."""
        return {
            'portals': list_portals(),
            'fields': list(FIELD_WHITELIST),
            'detail_fields': sorted(DETAIL_FIELDS),
        }


# Convenience functions for standalone usage

async def run_scrape(payload: Dict[str, Any], renderer_factory: Optional[RendererFactory] = None,
                     options: Optional[CrawlOptions] = None) -> List[StreamEvent]:
    """Run a single scrape and return its events."""
    manager = ScraperManager(renderer_factory or default_renderer_factory(), options)
    return await manager.run_scrape(payload)


async def stream_scrape(payload: Dict[str, Any], renderer_factory: Optional[RendererFactory] = None,
                        options: Optional[CrawlOptions] = None) -> AsyncIterator[StreamEvent]:
    """Stream the events of a single scrape."""
    manager = ScraperManager(renderer_factory or default_renderer_factory(), options)
    async for event in manager.stream_scrape(payload):
        yield event
