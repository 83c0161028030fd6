"""
Base classes and data structures for the portal scraper.

This module defines the request/record dataclasses, the portal
configuration shape, the stream event kinds and the error taxonomy
shared by every stage of a crawl.
"""

from typing import Dict, List, Optional, Tuple, Any
from dataclasses import dataclass, field
from enum import Enum


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


# ============================================================
# ERRORS
# ============================================================

class ScraperError(Exception):
    """Base class for all scraper errors."""


class ScrapeValidationError(ScraperError, ValueError):
    """The request was rejected before any crawling started."""


class MissingParameter(ScrapeValidationError):
    """Target region or category key is absent."""


class InvalidFieldList(ScrapeValidationError):
    """Requested fields is not a non-empty sequence."""


class UnsupportedCategory(ScrapeValidationError):
    """Category key does not map to a known portal."""


class NoValidFields(ScrapeValidationError):
    """No requested field survived the whitelist."""


class NavigationFailure(ScraperError):
    """A page failed to load (timeout, network or browser error)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")


class ExtractionFieldFailure(ScraperError):
    """A single DOM field could not be extracted. Always recovered as None."""


# ============================================================
# CONFIGURATION / REQUEST MODEL
# ============================================================

@dataclass(frozen=True)
class PortalConfig:
    """Configuration for one Studyportals listing portal."""
    key: str                            # Category key, e.g. 'msc'
    slug: str                           # Portal slug, e.g. 'master'
    name: str                           # Display name
    base_url: str                       # https://www.mastersportal.com
    card_selector: str = 'a.SearchStudyCard'

    def listing_url(self, region_path: str, page_index: int) -> str:
        """Build the listing URL for a 1-based page index."""
        return f"{self.base_url}/search/{self.slug}/{region_path}?page={page_index}"


@dataclass(frozen=True)
class ScrapeRequest:
    """A validated scrape request. Immutable once built."""
    category_key: str
    target_region: str
    requested_fields: Tuple[str, ...]


@dataclass(frozen=True)
class FieldSelection:
    """Outcome of request validation."""
    request: ScrapeRequest
    portal: PortalConfig
    fields: Tuple[str, ...]
    needs_detail: bool


@dataclass(frozen=True)
class CrawlOptions:
    """Per-request crawl tuning, built from application settings."""
    detail_concurrency: int = 1         # Max simultaneously open detail contexts
    max_pages: int = 0                  # 0 = follow pagination to the end


# ============================================================
# EXTRACTED RECORDS
# ============================================================

@dataclass
class ListCard:
    """List-level data for one result card on a listing page."""
    detail_url: str
    program_name: Optional[str] = None
    university: Optional[str] = None
    city_country: Optional[str] = None

    def get(self, output_field: str) -> Optional[str]:
        """Return the value for an output field name."""
        return {
            'programName': self.program_name,
            'university': self.university,
            'city_country': self.city_country,
        }.get(output_field)


@dataclass
class DetailRecord:
    """Detail-page data. Each field is independently nullable."""
    duration: Optional[str] = None
    tuition_fee: Optional[str] = None
    application_link: Optional[str] = None

    def get(self, output_field: str) -> Optional[str]:
        """Return the value for an output field name."""
        return {
            'duration': self.duration,
            'tuitionFee': self.tuition_fee,
            'applicationLink': self.application_link,
        }.get(output_field)


@dataclass
class CrawlState:
    """Mutable bookkeeping for one running crawl."""
    page_index: int = 1
    pages_loaded: int = 0
    detail_fetches: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.results)


class EventKind(Enum):
    """Kinds of frames written to the event stream."""
    PROGRESS = "progress"
    WARNING = "warning"
    ENTRY = "entry"
    ERROR = "error"
    DONE = "done"

    @property
    def terminal(self) -> bool:
        return self in (EventKind.ERROR, EventKind.DONE)
