"""Ingestion CLI script."""

import logging
from typing import Optional

import typer

from siterag.core.config import settings
from siterag.core.errors import FatalInitError
from siterag.core.logging import describe_error, setup_logging
from siterag.graph.neo4j_client import close_driver
from siterag.ingestion.pipeline import ingest_full_site
from siterag.ingestion.storage import StorageManager

setup_logging()
logger = logging.getLogger(__name__)

app = typer.Typer()


@app.command()
def main(
    base_url: str = typer.Option(settings.crawl_base, help="Site to crawl"),
    max_pages: int = typer.Option(settings.max_pages, help="Maximum number of pages to visit"),
    delay: float = typer.Option(settings.crawl_delay_seconds, help="Seconds to wait between pages"),
    save: bool = typer.Option(True, help="Store the resulting snapshot on disk"),
    snapshot_dir: Optional[str] = typer.Option(None, help="Snapshot directory (defaults to SNAPSHOT_DIR)"),
):
    """Crawl the site, load the knowledge graph and the search index."""
    logger.info(f"Starting ingestion: base_url={base_url}, max_pages={max_pages}")
    storage = StorageManager(snapshot_dir) if save else None

    try:
        snapshot = ingest_full_site(base_url=base_url, max_pages=max_pages, delay_seconds=delay, storage=storage)
    except FatalInitError as e:
        logger.error(f"Ingestion could not start: {e}")
        typer.echo(describe_error(e), err=True)
        raise typer.Exit(code=1)
    finally:
        close_driver()

    crawl = snapshot.crawl
    typer.echo(
        f"{snapshot.item_count} items from {crawl.pages_visited} pages "
        f"({crawl.pages_failed} failed) - version {snapshot.version}"
    )
    if snapshot.graph is not None:
        typer.echo(
            f"graph: {snapshot.graph.nodes.written} nodes, {snapshot.graph.edges.written} edges, "
            f"{snapshot.graph.nodes.failed_batches + snapshot.graph.edges.failed_batches} failed batches"
        )
    if snapshot.index is not None:
        typer.echo(f"index: {snapshot.index.written} documents, {snapshot.index.failed_batches} failed batches")


if __name__ == "__main__":
    app()
