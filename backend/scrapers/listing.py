"""
Listing page extraction.

A listing page shows result cards (`a.SearchStudyCard`), each linking to
one program detail page. A page without any card marks the end of
pagination.
"""

from typing import List
import logging

from bs4 import Tag

from .base import ListCard, PortalConfig
from .config import CARD_URL_RULE, LIST_FIELD_RULES
from .crawlers.renderer import RenderingContext
from .utils.extractors import extract_optional
from .utils.normalizers import normalize_region

logger = logging.getLogger(__name__)


class ListExtractor:
    """Extracts result cards from the listing pages of one portal and region."""

    def __init__(self, portal: PortalConfig, target_region: str):
        self.portal = portal
        self.target_region = target_region
        self._region_path = normalize_region(target_region)

    def page_url(self, page_index: int) -> str:
        """URL of a 1-based listing page."""
        return self.portal.listing_url(self._region_path, page_index)

    async def extract_page(self, context: RenderingContext, page_index: int) -> List[ListCard]:
        """
        Load one listing page and extract its cards.

        Args:
            context: Primary rendering context of the request
            page_index: 1-based page number

        Returns:
            Cards in document order, or an empty list when the page has none

        Raises:
            NavigationFailure: If the page fails to load
        """
        url = self.page_url(page_index)
        logger.debug(f"Loading list page: {url}")
        page = await context.render(url)

        card_nodes = page.soup.select(self.portal.card_selector)
        if not card_nodes:
            logger.debug(f"No cards found on page {page_index}")
            return []

        return [self._parse_card(node, page.url) for node in card_nodes]

    def _parse_card(self, node: Tag, page_url: str) -> ListCard:
        """Extract the detail URL and list-level attributes of one card."""
        return ListCard(
            detail_url=extract_optional(node, CARD_URL_RULE, page_url) or '',
            program_name=extract_optional(node, LIST_FIELD_RULES['programName'], page_url),
            university=extract_optional(node, LIST_FIELD_RULES['university'], page_url),
            city_country=extract_optional(node, LIST_FIELD_RULES['city_country'], page_url),
        )
