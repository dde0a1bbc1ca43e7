"""Shared fixtures and fakes for the test suite."""

import pytest

from siterag.core.errors import FetchError
from siterag.ingestion.models import ContentType, NormalizedContent
from siterag.ingestion.normalizer import content_id
from siterag.ingestion.parse_html import parse_page

BASE_URL = "https://www.example-site.ca"


class FakeExtractor:
    """Serves canned HTML per URL; URLs mapped to an exception raise it."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.calls: list[str] = []
        self.entered = False
        self.closed = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def extract(self, url):
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "net::ERR_NAME_NOT_RESOLVED")
        if isinstance(page, Exception):
            raise page
        return parse_page(page, url)


class FakeResult:
    def __init__(self, written: int = 0):
        self.written = written

    def single(self):
        return {"written": self.written}

    def consume(self):
        return None


class FakeGraph:
    """In-memory stand-in applying MERGE-by-key semantics for the ingestion statements."""

    def __init__(self):
        self.nodes: dict[str, dict] = {}
        self.edges: set[tuple[str, str, str]] = set()
        self.statements: list[tuple[str, dict]] = []
        self.fail_batches: set[int] = set()
        self.write_count = 0

    def apply(self, query: str, params: dict) -> int:
        self.statements.append((query, params))
        if "UNWIND $batch" in query:
            for row in params["batch"]:
                self.nodes[row["id"]] = dict(row)
            return len(params["batch"])
        if "UNWIND $pairs" in query:
            written = 0
            for pair in params["pairs"]:
                source = self.nodes.get(pair["source"])
                target = self.nodes.get(pair["target"])
                if source and target and source["url"] == target["url"]:
                    self.edges.add((pair["source"], pair["target"], params["context"]))
                    written += 1
            return written
        return 0


class FakeTx:
    def __init__(self, graph: FakeGraph):
        self.graph = graph

    def run(self, query, params=None):
        return FakeResult(self.graph.apply(query, params or {}))


class FakeSession:
    def __init__(self, graph: FakeGraph, **kwargs):
        self.graph = graph
        self.kwargs = kwargs
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def run(self, query, params=None):
        self.graph.statements.append((str(query), params or {}))
        return FakeResult()

    def execute_write(self, fn, *args):
        self.graph.write_count += 1
        if self.graph.write_count in self.graph.fail_batches:
            from neo4j.exceptions import ServiceUnavailable

            raise ServiceUnavailable("connection reset")
        return fn(FakeTx(self.graph), *args)


class FakeDriver:
    def __init__(self, graph: FakeGraph = None):
        self.graph = graph or FakeGraph()
        self.sessions: list[FakeSession] = []

    def session(self, **kwargs):
        session = FakeSession(self.graph, **kwargs)
        self.sessions.append(session)
        return session


def make_content(url: str, type_: ContentType, text: str) -> NormalizedContent:
    return NormalizedContent(id=content_id(url, text), text=text, type=type_, url=url)


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def two_page_site():
    """Page 1 has a heading quoted by a paragraph and links to page 2."""
    page1 = f"""
    <html><body>
      <h2>Fun Facts About Cocoa</h2>
      <p>Here are our Fun Facts About Cocoa that every baker should know.</p>
      <a href="/recipe/choc-chip">Cookies</a>
    </body></html>
    """
    page2 = """
    <html><body>
      <h1>Short</h1>
      <a href="/">Home</a>
    </body></html>
    """
    return {
        BASE_URL: page1,
        f"{BASE_URL}/recipe/choc-chip": page2,
    }
