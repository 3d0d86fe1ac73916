"""
Input validators and normalizers for link data.

URLs are normalized before validation so the stored form is the same
whether a link is created or updated.
"""

import re
from urllib.parse import urlsplit

from link_shortener.core.config import settings
from link_shortener.services.exceptions import InvalidAliasError, InvalidURLError

ALIAS_PATTERN = re.compile(r"[A-Za-z0-9-]+")
HTTP_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")
WHITESPACE_PATTERN = re.compile(r"\s")


def normalize_url(url: str) -> str:
    """
    Trim whitespace and default the scheme to https.

    ``"example.com"`` becomes ``"https://example.com"``; URLs that already
    start with ``http://`` or ``https://`` (any case) are only trimmed.
    Normalizing twice gives the same result as normalizing once.
    """
    url = url.strip()
    if not HTTP_SCHEME_PATTERN.match(url):
        url = f"https://{url}"
    return url


def validate_url(url: str, max_length: int = settings.URL_MAX_LENGTH) -> str:
    """
    Normalize a URL and check it is an absolute http(s) URL.

    Args:
        url: Raw URL from the request
        max_length: Maximum allowed length after normalization

    Returns:
        The normalized URL

    Raises:
        InvalidURLError: If the URL is empty, too long, contains whitespace,
            names a scheme other than http(s) or has no host
    """
    if not url or not url.strip():
        raise InvalidURLError("URL must not be empty")

    explicit_scheme = SCHEME_PATTERN.match(url.strip())
    if explicit_scheme and explicit_scheme.group(1).lower() not in ("http", "https"):
        raise InvalidURLError(f"Unsupported URL scheme: {explicit_scheme.group(1)}")

    url = normalize_url(url)

    if len(url) > max_length:
        raise InvalidURLError(f"URL must be at most {max_length} characters")
    if WHITESPACE_PATTERN.search(url):
        raise InvalidURLError("URL must not contain whitespace")

    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL format: {e}") from e

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise InvalidURLError(f"Invalid URL format: {url}")

    return url


def validate_alias(
    alias: str,
    min_length: int = settings.ALIAS_MIN_LENGTH,
    max_length: int = settings.ALIAS_MAX_LENGTH
) -> str:
    """
    Check a caller-chosen alias.

    Aliases are 3 to 20 characters from ``[A-Za-z0-9-]``.

    Raises:
        InvalidAliasError: If the alias breaks the length or character rules
    """
    if not min_length <= len(alias) <= max_length:
        raise InvalidAliasError(
            f"Alias must be between {min_length} and {max_length} characters"
        )
    if not ALIAS_PATTERN.fullmatch(alias):
        raise InvalidAliasError("Alias may only contain letters, numbers and hyphens")
    return alias
