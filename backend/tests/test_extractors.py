"""
Tests for extraction rules and normalizers.
"""

import pytest
from bs4 import BeautifulSoup

from scrapers.base import ExtractionFieldFailure
from scrapers.utils.extractors import (
    FieldRule,
    extract_field,
    extract_optional,
    extract_program_id,
)
from scrapers.utils.normalizers import clean_text, normalize_region


SOUP = BeautifulSoup(
    """
    <div class="card">
      <h2 class="StudyName">
        Data
        Science
      </h2>
      <span class="Empty">   </span>
      <div class="Title" data-original-amount=" 1500 ">1,500 EUR</div>
      <a class="Link" href="/studies/42/x.html">more</a>
    </div>
    """,
    'html.parser',
)


class TestExtractField:
    """Test FieldRule evaluation."""

    def test_text_is_cleaned(self):
        assert extract_field(SOUP, FieldRule(selector='h2.StudyName')) == 'Data Science'

    def test_attribute_is_trimmed(self):
        rule = FieldRule(selector='.Title', attribute='data-original-amount')
        assert extract_field(SOUP, rule) == '1500'

    def test_url_is_resolved(self):
        rule = FieldRule(selector='a.Link', attribute='href', resolve_url=True)
        value = extract_field(SOUP, rule, 'https://www.mastersportal.com/search/master/germany?page=1')
        assert value == 'https://www.mastersportal.com/studies/42/x.html'

    def test_missing_node_raises(self):
        with pytest.raises(ExtractionFieldFailure):
            extract_field(SOUP, FieldRule(selector='.js-duration'))

    def test_missing_attribute_raises(self):
        with pytest.raises(ExtractionFieldFailure):
            extract_field(SOUP, FieldRule(selector='h2.StudyName', attribute='data-original-amount'))

    def test_blank_text_raises(self):
        with pytest.raises(ExtractionFieldFailure):
            extract_field(SOUP, FieldRule(selector='.Empty'))

    def test_root_node_rule(self):
        link = SOUP.select_one('a.Link')
        assert extract_field(link, FieldRule(selector=None, attribute='href')) == '/studies/42/x.html'

    def test_custom_post_process(self):
        rule = FieldRule(selector='.Title', post_process=lambda s: s.split()[0] if s else None)
        assert extract_field(SOUP, rule) == '1,500'

    def test_extract_optional_returns_none(self):
        assert extract_optional(SOUP, FieldRule(selector='.missing')) is None


class TestProgramId:
    """Test program id parsing from detail URLs."""

    @pytest.mark.parametrize("url,expected", [
        ("https://www.mastersportal.com/studies/12345/data-science.html", "12345"),
        ("/studies/7/x", "7"),
        ("https://www.mastersportal.com/universities/42/tum.html", None),
        ("https://www.mastersportal.com/studies/abc/x.html", None),
        ("", None),
        (None, None),
    ])
    def test_extract_program_id(self, url, expected):
        assert extract_program_id(url) == expected


class TestNormalizers:
    """Test text normalizers."""

    def test_clean_text(self):
        assert clean_text("  a \n  b ") == "a b"
        assert clean_text("   ") is None
        assert clean_text(None) is None

    def test_normalize_region(self):
        assert normalize_region("Germany") == "germany"
        assert normalize_region(" United Kingdom ") == "united%20kingdom"
