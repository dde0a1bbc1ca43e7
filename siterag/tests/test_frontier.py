"""Tests for the crawl frontier."""

import pytest

from siterag.ingestion.frontier import FrontierTracker

BASE = "https://www.example-site.ca"


@pytest.fixture
def frontier():
    return FrontierTracker(
        BASE,
        max_pages=3,
        blocked_patterns=["recipes?f%5B", "recipe_tags_filter"],
        social_domains=["facebook.com", "twitter.com"],
    )


def test_admits_same_origin_page(frontier):
    assert frontier.admit(f"{BASE}/recipe/choc-chip")


@pytest.mark.parametrize(
    "url",
    [
        "https://other-site.com/recipe/x",
        f"{BASE}/recipes#top",
        f"{BASE}/recipes?f%5B0%5D=tag:1",
        f"{BASE}/recipes/recipe_tags_filter/baking",
        "https://www.facebook.com/sharer?u=https://www.example-site.ca",
        "",
    ],
)
def test_rejects_inadmissible_urls(frontier, url):
    assert not frontier.admit(url)


def test_visited_url_is_never_admitted_again(frontier):
    url = f"{BASE}/recipe/a"
    assert frontier.admit(url)
    frontier.mark_visited(url)
    assert not frontier.admit(url)
    assert not frontier.enqueue(url)


def test_enqueue_skips_already_queued(frontier):
    assert frontier.enqueue(f"{BASE}/a")
    assert not frontier.enqueue(f"{BASE}/a")
    assert len(frontier) == 1


def test_dequeue_is_fifo_and_empty_returns_none(frontier):
    frontier.enqueue(f"{BASE}/a")
    frontier.enqueue(f"{BASE}/b")
    assert frontier.dequeue() == f"{BASE}/a"
    assert frontier.dequeue() == f"{BASE}/b"
    assert frontier.dequeue() is None


def test_ceiling_stops_work_even_with_queued_urls(frontier):
    """Test that the visited ceiling wins over a non-empty queue."""
    for name in "abcde":
        frontier.enqueue(f"{BASE}/{name}")
    visited = 0
    while frontier.has_next():
        frontier.mark_visited(frontier.dequeue())
        visited += 1
    assert visited == 3
    assert frontier.visited_count == 3
    assert len(frontier) == 2
    with pytest.raises(RuntimeError):
        frontier.mark_visited(f"{BASE}/z")


def test_reset_clears_state_and_seeds(frontier):
    frontier.mark_visited(f"{BASE}/a")
    frontier.reset(seed=BASE)
    assert frontier.visited_count == 0
    assert frontier.dequeue() == BASE
