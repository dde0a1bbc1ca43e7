"""Retrieval CLI script."""

import logging

import orjson
import typer

from siterag.core.logging import setup_logging
from siterag.graph.neo4j_client import close_driver
from siterag.retrieval.orchestrator import retrieve

setup_logging()
logger = logging.getLogger(__name__)

app = typer.Typer()


@app.command()
def main(
    question: str = typer.Argument(..., help="Question to retrieve context for"),
    as_json: bool = typer.Option(False, "--json", help="Print the bundle as JSON"),
):
    """Print the hybrid retrieval context for a question."""
    try:
        bundle = retrieve(question)
    finally:
        close_driver()

    if as_json:
        typer.echo(orjson.dumps(bundle.model_dump(by_alias=True), option=orjson.OPT_INDENT_2).decode("utf-8"))
        return
    if bundle.is_empty:
        typer.echo("No matching content found.")
        return
    typer.echo(bundle.to_context())


if __name__ == "__main__":
    app()
