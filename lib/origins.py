# =============================================================================
# lib/origins.py - Base Path & Origin Normalization
# =============================================================================
# Canonicalizes deployment-supplied strings before they are used for routing
# or CORS decisions:
# - normalize_base_path: BASE_PATH -> "" or "/prefix" (never a trailing "/")
# - normalize_origin: one origin entry or Origin header -> comparable form
# - build_allowlist: FRONTEND_ORIGIN -> frozenset of normalized origins
#
# All functions are pure and never raise on bad input.
# =============================================================================

import logging
import re
from typing import Iterable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_URL_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_base_path(raw: str | None) -> str:
    """
    Normalize a configured base path.

    Rules, applied in order:
    1. Trim whitespace.
    2. A full http(s) URL is reduced to its path ("" if it cannot be parsed).
    3. Trailing slashes are stripped.
    4. A leading slash is added if missing.
    5. A lone "/" becomes "".

    Args:
        raw: Value of BASE_PATH (may be None or empty)

    Returns:
        "" or a string starting with "/" that never ends with "/"

    Example:
        normalize_base_path("/api/")                        # "/api"
        normalize_base_path("api")                          # "/api"
        normalize_base_path("https://example.com/api/v1/")  # "/api/v1"
        normalize_base_path("/")                            # ""
    """
    value = str(raw or "").strip()

    if value and _URL_SCHEME.match(value):
        try:
            value = urlsplit(value).path or ""
        except ValueError:
            logger.warning(f"Could not parse BASE_PATH as URL, using root: {raw!r}")
            value = ""

    value = value.rstrip("/")

    if value and not value.startswith("/"):
        value = "/" + value

    if value == "/":
        value = ""

    return value


def normalize_origin(raw: str | None) -> str:
    """Trim an origin and strip its trailing slashes ("https://a.com/" -> "https://a.com")."""
    return str(raw or "").strip().rstrip("/")


def build_allowlist(raw: str | None, fallback: Iterable[str] = ()) -> frozenset[str]:
    """
    Build the immutable set of origins accepted by the CORS gate.

    Args:
        raw: Comma-separated origins, e.g. "https://app.com, http://localhost:5173/"
        fallback: Extra origins to include regardless of configuration

    Returns:
        frozenset of normalized, non-empty origins (exact-match only)
    """
    entries = list(str(raw or "").split(",")) + list(fallback)
    return frozenset(
        origin
        for origin in (normalize_origin(entry) for entry in entries)
        if origin
    )
