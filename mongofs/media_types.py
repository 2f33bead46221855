"""Compressible media type table."""

from typing import Optional

from mongofs import config
from mongofs.utils import parse_csv

COMPRESSIBLE_MEDIA_TYPES = frozenset({
    "application/javascript",
    "application/json",
    "application/ld+json",
    "application/postscript",
    "application/rtf",
    "application/sql",
    "application/x-sh",
    "application/x-tex",
    "application/x-yaml",
    "application/xhtml+xml",
    "application/xml",
    "image/bmp",
    "image/svg+xml",
    "image/tiff",
    "image/x-icon",
})

# Media types with this prefix always compress well
COMPRESSIBLE_PREFIXES = ("text/",)


def _normalize(media_type: str) -> str:
    # drop parameters such as "; charset=utf-8"
    return media_type.split(";", 1)[0].strip().lower()


def is_compressible(media_type: Optional[str]) -> bool:
    """
    Whether content of the given media type benefits from compression.

    Args:
        media_type: MIME type string, may be None

    Returns:
        True if the type is in the compressible table or configured extras
    """
    if not media_type:
        return False

    normalized = _normalize(media_type)
    if normalized.startswith(COMPRESSIBLE_PREFIXES):
        return True

    extras = {_normalize(item) for item in parse_csv(config.COMPRESSIBLE_TYPES)}
    return normalized in COMPRESSIBLE_MEDIA_TYPES or normalized in extras
