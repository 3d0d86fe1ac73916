"""Tests for URL and alias validation."""

import pytest

from link_shortener.core.validators import normalize_url, validate_alias, validate_url
from link_shortener.services.exceptions import InvalidAliasError, InvalidURLError


@pytest.mark.parametrize("raw,expected", [
    ("example.com", "https://example.com"),
    ("  example.com/path?q=1  ", "https://example.com/path?q=1"),
    ("http://example.com", "http://example.com"),
    ("HTTPS://Example.com", "HTTPS://Example.com"),
])
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["example.com", " http://a.org ", "https://b.net/x"])
def test_normalize_url_is_idempotent(raw):
    once = normalize_url(raw)
    assert normalize_url(once) == once


def test_validate_url_returns_normalized_form():
    assert validate_url(" example.com/page ") == "https://example.com/page"


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "https://exa mple.com",
    "https://",
    "ftp://files.example.com",
    "javascript://alert(1)",
])
def test_validate_url_rejects_invalid(raw):
    with pytest.raises(InvalidURLError):
        validate_url(raw)


def test_validate_url_rejects_overlong():
    with pytest.raises(InvalidURLError):
        validate_url("https://example.com/" + "a" * 2048)


@pytest.mark.parametrize("alias", ["abc", "my-link", "A1-b2", "x" * 20])
def test_validate_alias_accepts(alias):
    assert validate_alias(alias) == alias


@pytest.mark.parametrize("alias", [
    "ab", "x" * 21, "has space", "under_score", "slash/es", "ümlaut", "abc\n", "my-link\n"
])
def test_validate_alias_rejects(alias):
    with pytest.raises(InvalidAliasError):
        validate_alias(alias)
