"""
Data normalization utilities for scrapers.

These functions standardize scraped text into consistent formats.
"""

import re
from typing import Optional
from urllib.parse import quote


def clean_text(text: Optional[str]) -> Optional[str]:
    """
    Collapse whitespace and trim rendered text.

    Blank text is treated as absent.

    Examples:
        '  Data Science\\n ' -> 'Data Science'
        '   ' -> None
    """
    if text is None:
        return None
    text = re.sub(r'\s+', ' ', text).strip()
    return text or None


def normalize_attribute(value: Optional[str]) -> Optional[str]:
    """Trim an attribute value, keeping its content otherwise untouched."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_region(region: str) -> str:
    """
    Turn a target region into the path segment used by the portals.

    Examples:
        Germany -> germany
        United Kingdom -> united%20kingdom
    """
    return quote(region.strip().lower(), safe='')


def normalize_category(category: str) -> str:
    """Category keys are matched case-insensitively."""
    return category.strip().lower()
