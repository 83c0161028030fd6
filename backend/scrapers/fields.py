"""
Request validation and field selection.

Turns the loosely-typed values of an inbound request into a FieldSelection:
the resolved portal, the whitelisted output fields and whether detail
pages have to be visited at all.
"""

from typing import Any, List

from .base import (
    FieldSelection,
    InvalidFieldList,
    MissingParameter,
    NoValidFields,
    ScrapeRequest,
    UnsupportedCategory,
)
from .config import DETAIL_FIELDS, FIELD_WHITELIST, get_portal_config
from .utils.normalizers import normalize_category


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def filter_fields(requested: List[Any]) -> tuple:
    """
    Keep whitelisted field names in the caller's order, without duplicates.

    Unknown names and non-string items are dropped silently.
    """
    allowed = set(FIELD_WHITELIST)
    selected = []
    for name in requested:
        if isinstance(name, str) and name in allowed and name not in selected:
            selected.append(name)
    return tuple(selected)


def select_fields(target_region: Any, category_key: Any, requested_fields: Any) -> FieldSelection:
    """
    Validate a scrape request.

    Checks run in a fixed order: required parameters, shape of the field
    list, category mapping, whitelist filtering.

    Args:
        target_region: Country/region to search in (e.g. 'germany')
        category_key: Degree category (e.g. 'msc')
        requested_fields: Output field names requested by the caller

    Returns:
        FieldSelection for the request

    Raises:
        MissingParameter: Region or category is absent
        InvalidFieldList: Fields is not a non-empty list
        UnsupportedCategory: Category is not mapped to a portal
        NoValidFields: No requested field is in the whitelist
    """
    if not _is_present(target_region) or not _is_present(category_key):
        raise MissingParameter("country and degree are required")

    if not isinstance(requested_fields, (list, tuple)) or len(requested_fields) == 0:
        raise InvalidFieldList("fields must be a non-empty array")

    category = normalize_category(category_key)
    try:
        portal = get_portal_config(category)
    except KeyError:
        raise UnsupportedCategory(f"unsupported degree: {category_key}") from None

    fields = filter_fields(requested_fields)
    if not fields:
        raise NoValidFields("no valid fields requested")

    request = ScrapeRequest(
        category_key=category,
        target_region=target_region.strip(),
        requested_fields=fields,
    )
    return FieldSelection(
        request=request,
        portal=portal,
        fields=fields,
        needs_detail=any(name in DETAIL_FIELDS for name in fields),
    )
