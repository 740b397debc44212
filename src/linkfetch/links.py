"""Extract anchor hrefs from HTML and filter them by extension."""

from collections.abc import Iterable, Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup


class LinkError(Exception):
    """Raised when the seed page cannot be parsed."""


def extract_links(html: bytes) -> list[str]:
    """Return every anchor href in document order.

    html.parser lower-cases attribute names, so HREF and Href are found too.
    Values are returned verbatim.

    Args:
        html: Raw HTML bytes

    Returns:
        List of href values

    Raises:
        LinkError: If the markup is rejected by the parser
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise LinkError(f"Failed to parse HTML: {e}") from e

    return [str(anchor["href"]) for anchor in soup.select("a[href]")]


def matches_extension(href: str, extensions: Sequence[str]) -> str | None:
    """Return the first configured suffix the lower-cased href ends with."""
    href_lower = href.lower()
    for ext in extensions:
        if href_lower.endswith(ext):
            return ext
    return None


def filter_links(hrefs: Iterable[str], extensions: Sequence[str]) -> list[str]:
    """Keep hrefs matching any extension, preserving order."""
    return [href for href in hrefs if matches_extension(href, extensions) is not None]
