"""
Crawl orchestration.

Drives one scrape request from validation to its terminating event:

1. Validate the request (field selection)
2. Load listing pages one by one until a page has no cards
3. For each card, optionally enrich it from its detail page
4. Emit every merged entry as soon as it is ready
5. Emit a single `done` (or `error`) event
"""

import asyncio
import time
from typing import Any, Dict, List, Optional
import logging

from .base import (
    Colors,
    CrawlOptions,
    CrawlState,
    DetailRecord,
    FieldSelection,
    ListCard,
    ScrapeValidationError,
)
from .config import DETAIL_FIELDS, LIST_FIELD_RULES
from .crawlers.renderer import Renderer, RendererFactory, RenderingContext
from .detail import DetailEnricher
from .events import EventSink, StreamEvent
from .fields import select_fields
from .listing import ListExtractor
from .utils.extractors import extract_program_id

logger = logging.getLogger(__name__)


class CrawlOrchestrator:
    """
    Runs the page-by-page crawl for a single request.

    Usage:
        orchestrator = CrawlOrchestrator(lambda: StealthRenderer())
        sink = ListSink()
        await orchestrator.run('germany', 'msc', ['programName'], sink)
    """

    def __init__(self, renderer_factory: RendererFactory, options: Optional[CrawlOptions] = None):
        """
        Args:
            renderer_factory: Builds a fresh, unstarted Renderer per request
            options: Crawl tuning (timeouts, concurrency, page limit)
        """
        self.renderer_factory = renderer_factory
        self.options = options or CrawlOptions()

    async def run(
        self,
        target_region: Any,
        category_key: Any,
        requested_fields: Any,
        sink: EventSink,
    ) -> Optional[CrawlState]:
        """
        Run one scrape, writing its events to sink.

        Always ends the stream with exactly one `done` or `error` event,
        except when the task itself is cancelled.

        Returns:
            The final CrawlState, or None if the request was rejected
        """
        started = time.monotonic()

        try:
            selection = select_fields(target_region, category_key, requested_fields)
        except ScrapeValidationError as e:
            logger.warning(f"Rejected scrape request: {e}")
            await sink.emit(StreamEvent.error(str(e)))
            return None

        log = logging.getLogger(f"scraper.{selection.portal.slug}")
        request = selection.request
        await self._progress(
            log, sink, f"Scraping {category_key} programs in {request.target_region}..."
        )

        state = CrawlState()
        try:
            async with self.renderer_factory() as renderer:
                await self._crawl(selection, renderer, sink, state, log)
        except Exception as e:
            log.error(f"{Colors.red('[ERR]')} Scrape failed: {e}")
            await sink.emit(StreamEvent.error(str(e)))
            return state

        elapsed = round(time.monotonic() - started, 1)
        log.info(
            f"✅ Scrape complete in {elapsed:.1f}s: {state.count} entries, "
            f"{state.pages_loaded} pages, {state.detail_fetches} detail pages"
        )
        await sink.emit(StreamEvent.done(state.count, state.results, elapsed))
        return state

    async def _crawl(
        self,
        selection: FieldSelection,
        renderer: Renderer,
        sink: EventSink,
        state: CrawlState,
        log: logging.Logger,
    ):
        """Pagination loop. The primary context lives for the whole crawl."""
        extractor = ListExtractor(selection.portal, selection.request.target_region)
        enricher = None
        if selection.needs_detail:
            enricher = DetailEnricher(renderer, self.options.detail_concurrency)

        async with renderer.open_context() as primary:
            while True:
                max_pages = self.options.max_pages
                if max_pages and state.pages_loaded >= max_pages:
                    await self._warning(log, sink, f"Stopped after {max_pages} pages (page limit reached)")
                    break

                cards = await self._load_page(extractor, primary, state.page_index, sink, log)
                state.pages_loaded += 1

                if not cards:
                    await self._warning(log, sink, f"No more cards found on page {state.page_index}")
                    break

                await self._progress(log, sink, f"Found {len(cards)} programs on page {state.page_index}")
                await self._process_cards(selection, cards, enricher, sink, state, log)
                state.page_index += 1

    async def _load_page(
        self,
        extractor: ListExtractor,
        context: RenderingContext,
        page_index: int,
        sink: EventSink,
        log: logging.Logger,
    ) -> List[ListCard]:
        log.info(f"\n{Colors.cyan('❯❯❯')}")
        await self._progress(log, sink, f"Loading page {extractor.page_url(page_index)}")
        return await extractor.extract_page(context, page_index)

    async def _process_cards(
        self,
        selection: FieldSelection,
        cards: List[ListCard],
        enricher: Optional[DetailEnricher],
        sink: EventSink,
        state: CrawlState,
        log: logging.Logger,
    ):
        """
        Build, enrich and emit the entries of one page in card order.

        With detail concurrency above 1 all detail fetches of the page are
        started up front; entries are still emitted strictly in card order.
        """
        pending: List[Optional[asyncio.Task]] = []
        if enricher and self.options.detail_concurrency > 1:
            pending = [
                asyncio.ensure_future(enricher.enrich(card.detail_url, selection.fields))
                if card.detail_url else None
                for card in cards
            ]

        try:
            for idx, card in enumerate(cards):
                detail = None
                if enricher:
                    if card.detail_url:
                        await self._progress(log, sink, f"Loading program-detail page: {card.detail_url}")
                        if pending:
                            detail = await pending[idx]
                        else:
                            detail = await enricher.enrich(card.detail_url, selection.fields)
                        state.detail_fetches += 1
                    else:
                        log.warning(f"Card {idx + 1} has no detail link, detail fields left empty")
                        detail = DetailRecord()

                entry = self.build_entry(selection, card, detail)
                state.results.append(entry)
                log.info(
                    f"{Colors.bold(f'[{idx + 1}/{len(cards)}]')} {Colors.green('[NEW]')} "
                    f"{entry.get('programName') or card.detail_url}"
                )
                await sink.emit(StreamEvent.entry(entry))
        finally:
            leftover = [task for task in pending if task is not None]
            for task in leftover:
                if not task.done():
                    task.cancel()
            if leftover:
                await asyncio.gather(*leftover, return_exceptions=True)

    @staticmethod
    def build_entry(
        selection: FieldSelection,
        card: ListCard,
        detail: Optional[DetailRecord] = None,
    ) -> Dict[str, Any]:
        """
        Merge request context, card and detail data into one entry.

        Only requested fields are included, plus the target region as
        `country`.
        """
        entry: Dict[str, Any] = {'country': selection.request.target_region}
        for name in selection.fields:
            if name == 'id':
                entry['id'] = extract_program_id(card.detail_url)
            elif name in LIST_FIELD_RULES:
                entry[name] = card.get(name)
            elif name in DETAIL_FIELDS:
                entry[name] = detail.get(name) if detail else None
        return entry

    async def _progress(self, log: logging.Logger, sink: EventSink, message: str):
        log.info(message)
        await sink.emit(StreamEvent.progress(message))

    async def _warning(self, log: logging.Logger, sink: EventSink, message: str):
        log.warning(Colors.yellow(message))
        await sink.emit(StreamEvent.warning(message))
