"""Tests for snapshot storage."""

from datetime import datetime, timezone

from conftest import make_content

from siterag.ingestion.models import BatchReport, ContentType, CrawlSnapshot, CrawlSummary
from siterag.ingestion.storage import StorageManager

PAGE = "https://www.example-site.ca/about"


def snapshot(version):
    items = [make_content(PAGE, ContentType.HEADING2, "Fun Facts About Cocoa")]
    return CrawlSnapshot(
        version=version,
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        pages_visited=1,
        item_count=len(items),
        items=items,
        crawl=CrawlSummary(pages_visited=1, items_extracted=3),
        index=BatchReport(total_batches=1, succeeded_batches=1, written=1),
    )


def test_save_and_load_snapshot(tmp_path):
    storage = StorageManager(base_dir=str(tmp_path))

    path = storage.save_snapshot(snapshot("20240501T120000000000Z-abcd1234"))
    loaded = storage.load_snapshot("20240501T120000000000Z-abcd1234")

    assert path.endswith("20240501T120000000000Z-abcd1234.json")
    assert loaded.items[0].type == ContentType.HEADING2
    assert loaded.items[0].id == f"{PAGE}-Fun_Facts_About_Cocoa"
    assert loaded.crawl.items_extracted == 3
    assert loaded.index.written == 1


def test_missing_snapshot_is_none(tmp_path):
    storage = StorageManager(base_dir=str(tmp_path))

    assert storage.load_snapshot("nope") is None
    assert storage.load_latest() is None


def test_latest_is_newest_version(tmp_path):
    storage = StorageManager(base_dir=str(tmp_path))
    storage.save_snapshot(snapshot("20240501T120000000000Z-aaaa0000"))
    storage.save_snapshot(snapshot("20240601T120000000000Z-bbbb0000"))

    assert storage.list_versions() == ["20240501T120000000000Z-aaaa0000", "20240601T120000000000Z-bbbb0000"]
    assert storage.load_latest().version == "20240601T120000000000Z-bbbb0000"
