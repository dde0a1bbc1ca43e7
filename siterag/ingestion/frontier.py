"""Crawl frontier: visited set, FIFO queue and admission rules."""

import logging
from collections import deque
from typing import Iterable, Optional

from siterag.core.config import settings
from siterag.core.utils import is_same_origin, registered_domain

logger = logging.getLogger(__name__)


class FrontierTracker:
    """Tracks URLs to visit for one crawl run.

    The visited set only grows and a URL is never handed out twice by
    ``dequeue`` once it has been marked visited. ``max_pages`` is a hard
    ceiling on ``visited_count``.
    """

    def __init__(
        self,
        base_url: str,
        max_pages: Optional[int] = None,
        blocked_patterns: Optional[Iterable[str]] = None,
        social_domains: Optional[Iterable[str]] = None,
    ):
        self.base_url = base_url
        self.max_pages = settings.max_pages if max_pages is None else max_pages
        self.blocked_patterns = list(
            settings.blocked_url_patterns if blocked_patterns is None else blocked_patterns
        )
        self.social_domains = {
            d.lower() for d in (settings.social_domains if social_domains is None else social_domains)
        }
        self._visited: set[str] = set()
        self._queued: set[str] = set()
        self._queue: deque[str] = deque()

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    @property
    def at_capacity(self) -> bool:
        return len(self._visited) >= self.max_pages

    def __len__(self) -> int:
        return len(self._queue)

    def _is_filter_page(self, url: str) -> bool:
        return any(pattern in url for pattern in self.blocked_patterns)

    def _is_social(self, url: str) -> bool:
        if not self.social_domains:
            return False
        if registered_domain(url).lower() in self.social_domains:
            return True
        return any(domain in url for domain in self.social_domains)

    def admit(self, url: str) -> bool:
        """Return True iff ``url`` passes the crawl-admission rules and was not visited."""
        if not url or not isinstance(url, str):
            return False
        if url in self._visited:
            return False
        if not is_same_origin(url, self.base_url):
            return False
        if "#" in url:
            return False
        if self._is_filter_page(url):
            return False
        if self._is_social(url):
            return False
        return True

    def enqueue(self, url: str) -> bool:
        """Queue ``url`` unless it is inadmissible or already queued."""
        if url in self._queued or not self.admit(url):
            return False
        self._queued.add(url)
        self._queue.append(url)
        return True

    def dequeue(self) -> Optional[str]:
        """Pop the next queued URL, or None when the queue is empty."""
        if not self._queue:
            return None
        url = self._queue.popleft()
        self._queued.discard(url)
        return url

    def mark_visited(self, url: str) -> None:
        if self.at_capacity:
            raise RuntimeError(f"Visited ceiling of {self.max_pages} pages reached")
        self._visited.add(url)

    def has_next(self) -> bool:
        """True while there is queued work and the visited ceiling is not reached."""
        return bool(self._queue) and not self.at_capacity

    def reset(self, seed: Optional[str] = None) -> None:
        """Clear all state for a new run, optionally seeding the queue."""
        self._visited.clear()
        self._queued.clear()
        self._queue.clear()
        if seed:
            # The seed bypasses the queued check but not admission
            self.enqueue(seed)
