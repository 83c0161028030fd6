"""
Pytest configuration and fixtures for the portal scraper tests.

The browser is replaced by FakeRenderer, which serves HTML fixtures keyed
by URL and records every navigation and every rendering context it opens.
"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import pytest
from bs4 import BeautifulSoup
from fastapi.testclient import TestClient

from api.main import app, get_renderer_factory
from scrapers.base import NavigationFailure
from scrapers.crawlers.renderer import RenderedPage, Renderer, RenderingContext


BASE_URL = "https://www.mastersportal.com"


def listing_url(page: int, region: str = "germany", slug: str = "master") -> str:
    """Listing URL as built by the scraper for the masters portal."""
    return f"{BASE_URL}/search/{slug}/{region}?page={page}"


def detail_url(program_id) -> str:
    return f"{BASE_URL}/studies/{program_id}/program-{program_id}.html"


def card_html(program_id=None, name=None, university=None, location=None, href=None) -> str:
    """One result card. Omitted parts are left out of the markup."""
    if href is None:
        href = f"/studies/{program_id}/program-{program_id}.html"
    parts = [f'<a class="SearchStudyCard" href="{href}">']
    if name is not None:
        parts.append(f'<h2 class="StudyName"> {name} </h2>')
    if university is not None:
        parts.append(f'<span class="OrganisationName">{university}</span>')
    if location is not None:
        parts.append(f'<span class="OrganisationLocation">{location}</span>')
    parts.append('</a>')
    return ''.join(parts)


def listing_html(*cards: str) -> str:
    return f"<html><body><main><div class='SearchResults'>{''.join(cards)}</div></main></body></html>"


def detail_html(duration=None, fee=None, apply_href=None) -> str:
    """A program detail page. Omitted parts are left out of the markup."""
    parts = ['<html><body><article>']
    if duration is not None:
        parts.append(f'<span class="js-duration">{duration}</span>')
    if fee is not None:
        parts.append(f'<div class="Title" data-original-amount="{fee}">{fee} EUR</div>')
    if apply_href is not None:
        parts.append(f'<a class="ChampionButton StudyLink" href="{apply_href}">Visit programme website</a>')
    parts.append('</article></body></html>')
    return ''.join(parts)


EMPTY_LISTING = listing_html()


class FakeContext(RenderingContext):
    """Rendering context backed by the fake renderer's page map."""

    def __init__(self, renderer: 'FakeRenderer'):
        self.renderer = renderer

    async def render(self, url: str) -> RenderedPage:
        self.renderer.navigations.append(url)
        if url in self.renderer.failures:
            raise NavigationFailure(url, self.renderer.failures[url])
        html = self.renderer.pages.get(url, EMPTY_LISTING)
        return RenderedPage(url=url, soup=BeautifulSoup(html, 'html.parser'))


class FakeRenderer(Renderer):
    """In-memory renderer; unknown URLs render as a page without cards."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, failures: Optional[Dict[str, str]] = None):
        self.pages = dict(pages or {})
        self.failures = dict(failures or {})
        self.navigations: List[str] = []
        self.started = False
        self.closed = False
        self.contexts_opened = 0
        self.open_contexts = 0
        self.max_open_contexts = 0

    async def start(self):
        self.started = True

    async def close(self):
        self.closed = True

    @asynccontextmanager
    async def open_context(self):
        self.contexts_opened += 1
        self.open_contexts += 1
        self.max_open_contexts = max(self.max_open_contexts, self.open_contexts)
        try:
            yield FakeContext(self)
        finally:
            self.open_contexts -= 1

    def detail_navigations(self) -> List[str]:
        return [url for url in self.navigations if '/studies/' in url]


@pytest.fixture
def two_page_site() -> Dict[str, str]:
    """Germany masters listing: 3 cards on page 1, 2 on page 2, page 3 empty."""
    return {
        listing_url(1): listing_html(
            card_html(1001, "Data Science", "TU Munich", "Munich, Germany"),
            card_html(1002, "Robotics", "RWTH Aachen", "Aachen, Germany"),
            card_html(1003, "Economics", "University of Mannheim", "Mannheim, Germany"),
        ),
        listing_url(2): listing_html(
            card_html(1004, "Physics", "LMU Munich", "Munich, Germany"),
            card_html(1005, "Philosophy", "Humboldt University", "Berlin, Germany"),
        ),
        detail_url(1001): detail_html("2 years", "1500", "https://apply.example/1001"),
        detail_url(1002): detail_html("2 years", "0", "https://apply.example/1002"),
        # No fee node on this detail page
        detail_url(1003): detail_html("18 months", None, "https://apply.example/1003"),
        detail_url(1004): detail_html("2 years", "3000", "/apply/1004"),
        detail_url(1005): detail_html("1 year", "12000", None),
    }


@pytest.fixture
def fake_renderer(two_page_site) -> FakeRenderer:
    return FakeRenderer(two_page_site)


@pytest.fixture
def client(fake_renderer):
    """Test client whose scrape requests use the fake renderer."""
    app.dependency_overrides[get_renderer_factory] = lambda: (lambda: fake_renderer)

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
