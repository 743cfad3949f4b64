"""
experiment_sdk.tier1_runtime.url
─────────────────────────────────
URL targeting helpers. A targeting pattern is a regular expression tested
against the full URL first and then against the path-only form, so both
``^/checkout`` and ``https://shop\\.example\\.com/checkout`` work.
"""
from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

from experiment_sdk.tier0_core.logging import get_logger

logger = get_logger("experiment_sdk.url")

_SCHEME = re.compile(r"^https?://")
_HOST = re.compile(r"^[^/]*/")


def path_only(url: str) -> str:
    """Strip scheme and host: ``http://a.com/p?q=1`` → ``/p?q=1``."""
    without_scheme = _SCHEME.sub("", url)
    if "/" not in without_scheme:
        return "/"
    return _HOST.sub("/", without_scheme)


def url_matches(pattern: str, url: str | None) -> bool:
    """
    True if *pattern* matches *url* or its path. No URL never matches; an
    invalid pattern is logged and does not restrict targeting.
    """
    if not url:
        return False
    try:
        regex = re.compile(pattern)
    except re.error as exc:
        logger.error("url.invalid_pattern", pattern=pattern, error=str(exc))
        return True
    return bool(regex.search(url) or regex.search(path_only(url)))


def query_param(url: str | None, name: str) -> str | None:
    """First value of query parameter *name*, or None. Fragments are ignored."""
    if not url:
        return None
    query = urlsplit(url).query
    if not query:
        return None
    values = parse_qs(query).get(name)
    return values[0] if values else None


__all__ = ["path_only", "url_matches", "query_param"]
