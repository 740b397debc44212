"""Tests for link extraction and extension filtering."""

from linkfetch.links import extract_links, filter_links, matches_extension


def test_extract_links_in_document_order():
    html = b'<p><a href="b.pdf">B</a></p><div><a href="a.txt">A</a><a href="c.pdf">C</a></div>'
    assert extract_links(html) == ["b.pdf", "a.txt", "c.pdf"]


def test_extract_links_ignores_anchors_without_href():
    html = b'<a name="top">top</a><a href="x.pdf">x</a><link href="style.css">'
    assert extract_links(html) == ["x.pdf"]


def test_extract_links_attribute_name_is_case_insensitive():
    html = b'<A HREF="one.pdf">1</A><a Href="two.pdf">2</a>'
    assert extract_links(html) == ["one.pdf", "two.pdf"]


def test_extract_links_returns_values_verbatim():
    html = b'<a href=" spaced%20name.PDF ">x</a>'
    assert extract_links(html) == [" spaced%20name.PDF "]


def test_matches_extension_is_case_insensitive_on_href():
    assert matches_extension("REPORT.PDF", [".pdf"]) == ".pdf"
    assert matches_extension("report.pdf", [".PDF"]) is None


def test_matches_extension_returns_first_configured_match():
    assert matches_extension("archive.tar.gz", [".gz", ".tar.gz"]) == ".gz"
    assert matches_extension("notes.txt", [".pdf", ".zip"]) is None


def test_filter_links_keeps_order():
    hrefs = ["a.pdf", "b.txt", "c.ZIP", "d.pdf?x=1", "e.Pdf"]
    assert filter_links(hrefs, [".pdf", ".zip"]) == ["a.pdf", "c.ZIP", "e.Pdf"]
