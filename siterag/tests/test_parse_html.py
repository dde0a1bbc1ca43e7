"""Tests for HTML content extraction."""

from siterag.ingestion.models import ContentType
from siterag.ingestion.parse_html import parse_page

PAGE_URL = "https://www.example-site.ca/recipe/choc-chip"

HTML = """
<html>
<head><script>var noise = "should never be extracted as text";</script></head>
<body>
  <h1>Chocolate Chip Cookies</h1>
  <h2>Tiny</h2>
  <p>Preheat the oven to 350F and line a baking sheet.</p>
  <ul><li>2 cups of semi-sweet chocolate chips</li></ul>
  <span>Prep time: 15 minutes</span>
  <img src="/images/cookie.jpg" alt="A stack of cookies">
  <img data-src="https://cdn.example.com/lazy.jpg" alt="Lazy loaded">
  <img src="/images/no-alt.jpg">
  <a href="/recipe/brownies">Brownies</a>
  <a href="https://www.facebook.com/share"></a>
  <a href="mailto:hello@example.com">Mail us</a>
</body>
</html>
"""


def test_extracts_text_items_longer_than_ten_chars():
    items, _ = parse_page(HTML, PAGE_URL)
    text_items = [(i.type, i.text) for i in items if i.type not in (ContentType.IMAGE, ContentType.LINK)]

    assert (ContentType.HEADING1, "Chocolate Chip Cookies") in text_items
    assert (ContentType.PARAGRAPH, "Preheat the oven to 350F and line a baking sheet.") in text_items
    assert (ContentType.LIST_ITEM, "2 cups of semi-sweet chocolate chips") in text_items
    assert (ContentType.SPAN, "Prep time: 15 minutes") in text_items
    assert all(len(text) > 10 for _, text in text_items)
    assert not any("noise" in text for _, text in text_items)
    assert all(i.source_url == PAGE_URL for i in items if i.type not in (ContentType.IMAGE, ContentType.LINK))


def test_extracts_images_with_absolute_urls():
    items, _ = parse_page(HTML, PAGE_URL)
    images = {i.text: i.source_url for i in items if i.type == ContentType.IMAGE}

    assert images == {
        "A stack of cookies": "https://www.example-site.ca/images/cookie.jpg",
        "Lazy loaded": "https://cdn.example.com/lazy.jpg",
    }


def test_link_items_fall_back_to_url_label():
    items, _ = parse_page(HTML, PAGE_URL)
    links = {i.source_url: i.text for i in items if i.type == ContentType.LINK}

    assert links["https://www.example-site.ca/recipe/brownies"] == "Brownies"
    assert links["https://www.facebook.com/share"] == "https://www.facebook.com/share"
    assert not any(url.startswith("mailto") for url in links)


def test_outbound_links_are_resolved_in_document_order():
    _, links = parse_page(HTML, PAGE_URL)

    assert links == [
        "https://www.example-site.ca/recipe/brownies",
        "https://www.facebook.com/share",
    ]


def test_malformed_hrefs_are_skipped():
    html = '<html><body><a href="http://[broken">Broken</a><a href="/recipe/ok">Fine recipe</a></body></html>'

    items, links = parse_page(html, PAGE_URL)

    assert links == ["https://www.example-site.ca/recipe/ok"]
    assert [i.source_url for i in items if i.type == ContentType.LINK] == links


def test_text_items_keep_document_order():
    """Test that headings and body text come out in the order they appear on the page."""
    html = """
    <html><body>
      <p>An introduction paragraph first.</p>
      <h2>Then a section heading</h2>
      <li>And a list item after it</li>
      <h1>A late top-level heading</h1>
    </body></html>
    """

    items, _ = parse_page(html, PAGE_URL)

    assert [i.type for i in items] == [
        ContentType.PARAGRAPH,
        ContentType.HEADING2,
        ContentType.LIST_ITEM,
        ContentType.HEADING1,
    ]
