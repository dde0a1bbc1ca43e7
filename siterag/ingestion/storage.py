"""Storage of crawl snapshots."""

import logging
from pathlib import Path
from typing import Optional

import orjson

from siterag.core.config import settings
from siterag.ingestion.models import CrawlSnapshot

logger = logging.getLogger(__name__)


class StorageManager:
    """Persists crawl snapshots as JSON files, one per version."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.snapshot_dir)
        self.snapshots_dir = self.base_dir / "snapshots"
        self.snapshots_dir.mkdir(parents=True, exist_ok=True)

    def snapshot_path(self, version: str) -> Path:
        return self.snapshots_dir / f"{version}.json"

    def save_snapshot(self, snapshot: CrawlSnapshot) -> str:
        """Save a snapshot and return its path."""
        filepath = self.snapshot_path(snapshot.version)
        filepath.write_bytes(orjson.dumps(snapshot.model_dump(mode="json")))
        logger.info(f"Saved snapshot {snapshot.version} ({snapshot.item_count} items) to {filepath}")
        return str(filepath)

    def load_snapshot(self, version: str) -> Optional[CrawlSnapshot]:
        filepath = self.snapshot_path(version)
        if not filepath.exists():
            return None
        return CrawlSnapshot.model_validate(orjson.loads(filepath.read_bytes()))

    def list_versions(self) -> list[str]:
        """Stored snapshot versions, oldest first."""
        return sorted(p.stem for p in self.snapshots_dir.glob("*.json"))

    def load_latest(self) -> Optional[CrawlSnapshot]:
        versions = self.list_versions()
        if not versions:
            return None
        return self.load_snapshot(versions[-1])
