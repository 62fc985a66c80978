"""Utility functions for traffic analysis."""

import json
import logging
from typing import Any, Optional
from urllib.parse import urlparse


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Configure logging for trafficspec.

    Args:
        verbose: Enable debug logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    logger.setLevel(level)


logger = logging.getLogger("trafficspec")


def try_parse_json(text: Optional[str]) -> Any:
    """Decode a JSON body, returning the raw text when it is not JSON.

    Empty or missing bodies decode to ``None``.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return text


def url_path(url: str) -> str:
    """Return the path component of a URL, ``/`` for an empty path."""
    return urlparse(url).path or "/"


def sanitize_url(url: str) -> str:
    """Make a captured URL safe to log.

    Userinfo is masked and a query string is replaced with ``...``.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        port = parsed.port
    except ValueError:
        return "<unparseable url>"

    netloc = parsed.netloc
    if parsed.username or parsed.password:
        netloc = f"****@{host}"
        if port:
            netloc = f"{netloc}:{port}"

    query = "..." if parsed.query else ""
    return parsed._replace(netloc=netloc, query=query, fragment="").geturl()
