"""
Portal configurations and field definitions.

Each supported degree category maps to one Studyportals listing portal:
- msc -> mastersportal.com
- bsc -> bachelorsportal.com
- phd -> phdportal.com

All portals share the same card markup, so the extraction rules are
defined once for list-level and detail-level fields.
"""

from typing import Dict, List

from .base import PortalConfig
from .utils.extractors import FieldRule


# ============================================================
# PORTALS
# ============================================================

PORTALS: Dict[str, PortalConfig] = {
    'msc': PortalConfig(
        key='msc',
        slug='master',
        name='MastersPortal',
        base_url='https://www.mastersportal.com',
    ),
    'bsc': PortalConfig(
        key='bsc',
        slug='bachelor',
        name='BachelorsPortal',
        base_url='https://www.bachelorsportal.com',
    ),
    'phd': PortalConfig(
        key='phd',
        slug='phd',
        name='PhDPortal',
        base_url='https://www.phdportal.com',
    ),
}


# ============================================================
# FIELDS
# ============================================================

# Output fields a caller may request, in canonical order
FIELD_WHITELIST = (
    'id',
    'programName',
    'university',
    'city_country',
    'duration',
    'tuitionFee',
    'applicationLink',
)

# Fields that only exist on the program detail page
DETAIL_FIELDS = frozenset({'duration', 'tuitionFee', 'applicationLink'})

# Card-level rules, evaluated relative to each result card
CARD_URL_RULE = FieldRule(selector=None, attribute='href', resolve_url=True)

LIST_FIELD_RULES: Dict[str, FieldRule] = {
    'programName': FieldRule(selector='h2.StudyName'),
    'university': FieldRule(selector='.OrganisationName'),
    'city_country': FieldRule(selector='.OrganisationLocation'),
}

# Detail-page rules, evaluated against the whole document
DETAIL_FIELD_RULES: Dict[str, FieldRule] = {
    'duration': FieldRule(selector='.js-duration'),
    'tuitionFee': FieldRule(selector='.Title', attribute='data-original-amount'),
    'applicationLink': FieldRule(
        selector='a.ChampionButton.StudyLink',
        attribute='href',
        resolve_url=True,
    ),
}


def get_portal_config(category_key: str) -> PortalConfig:
    """
    Get the portal for a category key.

    Args:
        category_key: Degree category (e.g., 'msc', 'phd'), already normalized

    Returns:
        PortalConfig for the category

    Raises:
        KeyError: If category_key is not mapped
    """
    return PORTALS[category_key]


def list_portals() -> List[dict]:
    """Get a summary of all portals for display."""
    return [
        {
            'key': key,
            'name': portal.name,
            'portal': portal.slug,
            'url': portal.base_url,
        }
        for key, portal in PORTALS.items()
    ]
