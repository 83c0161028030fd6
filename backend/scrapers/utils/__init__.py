"""Shared utilities for scrapers."""

from .normalizers import (
    clean_text,
    normalize_attribute,
    normalize_region,
    normalize_category,
)
from .extractors import (
    FieldRule,
    extract_field,
    extract_optional,
    extract_program_id,
)

__all__ = [
    'clean_text',
    'normalize_attribute',
    'normalize_region',
    'normalize_category',
    'FieldRule',
    'extract_field',
    'extract_optional',
    'extract_program_id',
]
