"""
URL helpers used when naming and filtering captured resources.
"""

from __future__ import annotations

from urllib import parse


def extract_domain(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except Exception:
        return "unknown"


def is_absolute_http_url(url: str) -> bool:
    """Return True for ``http``/``https`` URLs with a host."""
    try:
        parsed = parse.urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def file_name_from_url(url: str, default: str = "unknown") -> str:
    """Return the last path segment of *url*, ignoring query and fragment.

    ``https://cdn.example.com/js/app.js?v=3`` gives ``"app.js"``; a URL
    ending in ``/`` or with no path gives *default*.
    """
    try:
        path = parse.urlparse(url).path
    except ValueError:
        return default
    name = path.rsplit("/", 1)[-1]
    return parse.unquote(name) or default


def file_extension(file_name: str) -> str:
    """Return the lower-cased extension of *file_name* without the dot, or ``""``."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def is_source_map(url: str) -> bool:
    """True when *url* points at a JavaScript/CSS source map."""
    try:
        path = parse.urlparse(url).path
    except ValueError:
        return False
    return path.lower().endswith(".map")
