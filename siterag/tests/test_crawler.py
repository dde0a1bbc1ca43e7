"""Tests for the crawl scheduler."""

from conftest import BASE_URL, FakeExtractor

from siterag.core.errors import FetchError
from siterag.ingestion.crawler import CrawlScheduler, prioritize_links
from siterag.ingestion.models import ContentType


def make_scheduler(extractor, **kwargs):
    kwargs.setdefault("delay_seconds", 0)
    return CrawlScheduler(lambda: extractor, base_url=BASE_URL, **kwargs)


def link_page(*paths, text="A paragraph long enough to be kept."):
    anchors = "".join(f'<a href="{p}">{p}</a>' for p in paths)
    return f"<html><body><p>{text}</p>{anchors}</body></html>"


def test_prioritize_links_is_stable_partial_order():
    links = ["/a", "/recipe/1", "/b", "/recipe/2", "/c"]
    assert prioritize_links(links, "/recipe/") == ["/recipe/1", "/recipe/2", "/a", "/b", "/c"]


def test_crawls_two_page_site(two_page_site):
    """Test crawling a small site from the seed page."""
    extractor = FakeExtractor(two_page_site)
    result = make_scheduler(extractor).crawl()

    assert extractor.calls == [BASE_URL, f"{BASE_URL}/recipe/choc-chip"]
    assert result.summary.pages_visited == 2
    assert result.summary.pages_failed == 0
    assert extractor.closed
    assert any(i.type == ContentType.HEADING2 for i in result.items)


def test_run_returns_only_graph_eligible_content(two_page_site):
    content = make_scheduler(FakeExtractor(two_page_site)).run()

    assert [c.type for c in content] == [ContentType.HEADING2, ContentType.PARAGRAPH]
    assert all(len(c.text) > 10 for c in content)


def test_timed_out_page_is_skipped_and_crawl_continues():
    """Test that a navigation timeout is recorded and the next URL is processed."""
    pages = {
        BASE_URL: link_page("/slow", "/fast"),
        f"{BASE_URL}/slow": FetchError(f"{BASE_URL}/slow", "navigation timed out after 30000ms"),
        f"{BASE_URL}/fast": link_page(text="The fast page still gets crawled."),
    }
    extractor = FakeExtractor(pages)
    result = make_scheduler(extractor).crawl()

    assert extractor.calls == [BASE_URL, f"{BASE_URL}/slow", f"{BASE_URL}/fast"]
    assert result.summary.pages_failed == 1
    assert result.summary.failed_urls == [f"{BASE_URL}/slow"]
    assert any("fast page" in i.text for i in result.items)


def test_visited_count_never_exceeds_ceiling():
    paths = [f"/page/{n}" for n in range(20)]
    pages = {BASE_URL: link_page(*paths)}
    pages.update({f"{BASE_URL}{p}": link_page(*paths) for p in paths})
    extractor = FakeExtractor(pages)

    result = make_scheduler(extractor, max_pages=5).crawl()

    assert result.summary.pages_visited == 5
    assert len(extractor.calls) == 5
    assert len(set(extractor.calls)) == 5


def test_high_value_links_are_visited_first():
    pages = {
        BASE_URL: link_page("/about", "/recipe/cake"),
        f"{BASE_URL}/about": link_page(),
        f"{BASE_URL}/recipe/cake": link_page(),
    }
    extractor = FakeExtractor(pages)
    make_scheduler(extractor).crawl()

    assert extractor.calls[1] == f"{BASE_URL}/recipe/cake"


def test_delay_is_applied_between_pages(two_page_site):
    delays = []
    make_scheduler(FakeExtractor(two_page_site), delay_seconds=1.0, sleep=delays.append).crawl()

    assert delays == [1.0]


def test_empty_site_is_successful_but_empty():
    extractor = FakeExtractor({BASE_URL: "<html><body><p>short</p></body></html>"})
    result = make_scheduler(extractor).crawl()

    assert result.items == []
    assert result.summary.pages_visited == 1
    assert result.summary.pages_failed == 0


def test_malformed_link_does_not_abort_the_crawl():
    """Test that a broken href is skipped and the rest of the site is still crawled."""
    pages = {
        BASE_URL: link_page("/bad", "/good"),
        f"{BASE_URL}/bad": link_page('http://[broken', text="A page with one malformed link."),
        f"{BASE_URL}/good": link_page(text="The good page is still visited."),
    }
    extractor = FakeExtractor(pages)

    result = make_scheduler(extractor).crawl()

    assert extractor.calls == [BASE_URL, f"{BASE_URL}/bad", f"{BASE_URL}/good"]
    assert result.summary.pages_failed == 0
    assert any("malformed link" in i.text for i in result.items)


def test_unexpected_extractor_error_is_recorded_as_page_failure():
    pages = {
        BASE_URL: link_page("/broken", "/next"),
        f"{BASE_URL}/broken": ValueError("Invalid IPv6 URL"),
        f"{BASE_URL}/next": link_page(text="The next page still gets crawled."),
    }
    scheduler = make_scheduler(FakeExtractor(pages))

    result = scheduler.crawl()

    assert result.summary.failed_urls == [f"{BASE_URL}/broken"]
    [failed] = [page for page in scheduler.pages if not page.ok]
    assert isinstance(failed.error, FetchError)
    assert "Invalid IPv6 URL" in failed.error.reason
    assert any("next page" in i.text for i in result.items)
