"""Rebuild index CLI script."""

import logging
from typing import Optional

import typer

from siterag.core.config import settings
from siterag.core.logging import setup_logging
from siterag.ingestion.storage import StorageManager
from siterag.search.publisher import IndexPublisher
from siterag.search.qdrant_client import delete_index, ensure_index, get_client, get_index_info

setup_logging()
logger = logging.getLogger(__name__)

app = typer.Typer()


@app.command()
def main(
    force: bool = typer.Option(False, help="Drop and recreate the index before publishing"),
    index_name: str = typer.Option(settings.index_name, help="Search index name"),
    version: Optional[str] = typer.Option(None, help="Snapshot version (defaults to the latest)"),
    snapshot_dir: Optional[str] = typer.Option(None, help="Snapshot directory (defaults to SNAPSHOT_DIR)"),
):
    """Republish a stored crawl snapshot to the search index without re-crawling."""
    storage = StorageManager(snapshot_dir)
    snapshot = storage.load_snapshot(version) if version else storage.load_latest()
    if snapshot is None:
        logger.warning("No stored snapshot found. Run: python -m siterag.scripts.ingest")
        raise typer.Exit(code=1)

    logger.info(f"Rebuilding index {index_name} from snapshot {snapshot.version} (force={force})")
    client = get_client()
    if force:
        collections = [c.name for c in client.get_collections().collections]
        if index_name in collections:
            delete_index(client, index_name)
    ensure_index(client, index_name)

    report = IndexPublisher(client, collection=index_name).publish(snapshot.index_items or snapshot.items)
    typer.echo(f"Published {report.written} documents ({report.failed_batches} failed batches)")

    info = get_index_info(client, index_name)
    if info:
        typer.echo(f"Index {info['name']} now holds {info['points_count']} documents")


if __name__ == "__main__":
    app()
