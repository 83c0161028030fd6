"""
Program detail page enrichment.

Duration, tuition fee and application link only exist on the detail
page of a program. Each requested field is extracted on its own so a
missing node never suppresses the other fields.
"""

import asyncio
from typing import Iterable, Optional
import logging

from bs4 import BeautifulSoup

from .base import DetailRecord, ExtractionFieldFailure
from .config import DETAIL_FIELD_RULES
from .crawlers.renderer import Renderer
from .utils.extractors import extract_field

logger = logging.getLogger(__name__)


class DetailEnricher:
    """
    Visits detail pages in their own rendering context.

    A semaphore caps how many detail contexts may be open at once.
    """

    def __init__(self, renderer: Renderer, max_concurrency: int = 1):
        self.renderer = renderer
        self._slots = asyncio.Semaphore(max(1, max_concurrency))

    async def enrich(self, detail_url: str, fields: Iterable[str]) -> DetailRecord:
        """
        Fetch one detail page and extract the requested detail fields.

        Args:
            detail_url: Absolute URL of the program detail page
            fields: Requested output fields; non-detail names are ignored

        Returns:
            DetailRecord with unrequested or missing fields set to None

        Raises:
            NavigationFailure: If the detail page fails to load
        """
        wanted = [name for name in fields if name in DETAIL_FIELD_RULES]

        async with self._slots:
            async with self.renderer.open_context() as context:
                logger.debug(f"Loading program-detail page: {detail_url}")
                page = await context.render(detail_url)

        values = {name: self._extract(page.soup, name, page.url) for name in wanted}
        return DetailRecord(
            duration=values.get('duration'),
            tuition_fee=values.get('tuitionFee'),
            application_link=values.get('applicationLink'),
        )

    def _extract(self, soup: BeautifulSoup, name: str, page_url: str) -> Optional[str]:
        """Extract one field, isolating any failure to that field."""
        try:
            return extract_field(soup, DETAIL_FIELD_RULES[name], page_url)
        except ExtractionFieldFailure as e:
            logger.debug(f"Field '{name}' missing on {page_url}: {e}")
        except Exception as e:
            logger.warning(f"Field '{name}' extraction failed on {page_url}: {e}")
        return None
