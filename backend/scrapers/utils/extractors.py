"""
Data extraction utilities for scrapers.

Fields are described declaratively with a FieldRule (selector, attribute
and post-processing) and evaluated against a BeautifulSoup snapshot of
the rendered DOM.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin

from bs4 import Tag

from ..base import ExtractionFieldFailure
from .normalizers import clean_text, normalize_attribute

PROGRAM_ID_PATTERN = re.compile(r'studies/(\d+)')


@dataclass(frozen=True)
class FieldRule:
    """
    How to pull one output field out of a DOM node.

    Attributes:
        selector: CSS selector relative to the root node. None means the
            root node itself.
        attribute: Attribute to read. None means the node's visible text.
        resolve_url: Resolve the attribute value against the page URL.
        post_process: Clean-up applied to the raw string.
    """
    selector: Optional[str]
    attribute: Optional[str] = None
    resolve_url: bool = False
    post_process: Optional[Callable[[Optional[str]], Optional[str]]] = None


def extract_field(root: Tag, rule: FieldRule, base_url: str = '') -> str:
    """
    Evaluate a FieldRule against a node.

    Args:
        root: Node to evaluate against (a card or a whole document)
        rule: Extraction rule
        base_url: URL used to resolve relative links

    Returns:
        The extracted, post-processed value

    Raises:
        ExtractionFieldFailure: If the node or attribute is absent or the
            value is blank after post-processing
    """
    node = root if rule.selector is None else root.select_one(rule.selector)
    if node is None:
        raise ExtractionFieldFailure(f"No node matches '{rule.selector}'")

    if rule.attribute is None:
        raw = node.get_text(separator=' ')
        post_process = rule.post_process or clean_text
    else:
        raw = node.get(rule.attribute)
        if isinstance(raw, list):
            # bs4 returns multi-valued attributes (class, rel) as lists
            raw = ' '.join(raw)
        post_process = rule.post_process or normalize_attribute

    value = post_process(raw)
    if value is None:
        raise ExtractionFieldFailure(
            f"'{rule.selector}' has no {rule.attribute or 'text'}"
        )

    if rule.resolve_url:
        value = urljoin(base_url, value)
    return value


def extract_optional(root: Tag, rule: FieldRule, base_url: str = '') -> Optional[str]:
    """Like extract_field, but an absent field becomes None."""
    try:
        return extract_field(root, rule, base_url)
    except ExtractionFieldFailure:
        return None


def extract_program_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the numeric program id from a detail URL.

    Examples:
        https://www.mastersportal.com/studies/12345/data-science.html -> '12345'
        https://www.mastersportal.com/universities/42/x.html -> None
    """
    if not url:
        return None
    match = PROGRAM_ID_PATTERN.search(url)
    return match.group(1) if match else None
