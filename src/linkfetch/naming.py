"""Turn link paths and folder entries into filesystem-safe names."""

import re
from urllib.parse import unquote

# Characters rejected by at least one common filesystem
UNSAFE_CHARS = '/<>:"\\|?*'

_UNSAFE_TABLE = str.maketrans({char: "_" for char in UNSAFE_CHARS})
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class FilenameError(ValueError):
    """Raised when a name holds malformed percent-encoding."""


def safe_filename(name: str) -> str:
    """Replace characters that are not allowed in filenames with '_'.

    Args:
        name: Arbitrary string, usually a decoded URL path segment

    Returns:
        The same string with each of / < > : " \\ | ? * replaced
    """
    return name.translate(_UNSAFE_TABLE)


def unquote_strict(name: str) -> str:
    """Percent-decode a path segment, failing on malformed escapes.

    '+' is kept as-is (path semantics, not form semantics).

    Args:
        name: Possibly percent-encoded string

    Returns:
        Decoded string

    Raises:
        FilenameError: If an escape is truncated, not hex, or not valid UTF-8
    """
    match = _BAD_ESCAPE.search(name)
    if match:
        bad = name[match.start() : match.start() + 3]
        raise FilenameError(f"Invalid escape {bad!r} in {name!r}")

    try:
        return unquote(name, errors="strict")
    except UnicodeDecodeError as e:
        raise FilenameError(f"Escapes in {name!r} are not valid UTF-8") from e


def last_segment(href: str) -> str:
    """Return everything after the final '/' of an href."""
    return href.rsplit("/", 1)[-1]


def filename_for(href: str) -> str:
    """Build the download filename for an (unresolved) href.

    Args:
        href: Raw href value

    Returns:
        Sanitized, decoded last path segment

    Raises:
        FilenameError: If the segment has malformed percent-encoding
    """
    return safe_filename(unquote_strict(last_segment(href)))
