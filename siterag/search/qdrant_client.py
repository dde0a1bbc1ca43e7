"""Qdrant client and full-text index management."""

import logging
from typing import Optional

from qdrant_client import QdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import (
    Modifier,
    PayloadSchemaType,
    SparseVectorParams,
    TextIndexParams,
    TextIndexType,
    TokenizerType,
)

from siterag.core.config import settings
from siterag.core.constants import BM25_VECTOR
from siterag.core.errors import FatalInitError

logger = logging.getLogger(__name__)


def get_client(url: Optional[str] = None, api_key: Optional[str] = None) -> QdrantClient:
    """Get Qdrant client instance."""
    url = url or settings.qdrant_url
    api_key = api_key or settings.qdrant_api_key or None

    return QdrantClient(url=url, api_key=api_key)


def create_index(client: QdrantClient, collection: str) -> None:
    """Create the collection with a BM25 sparse vector and payload indexes."""
    client.create_collection(
        collection_name=collection,
        vectors_config={},
        sparse_vectors_config={BM25_VECTOR: SparseVectorParams(modifier=Modifier.IDF)},
    )
    client.create_payload_index(
        collection_name=collection,
        field_name="text",
        field_schema=TextIndexParams(
            type=TextIndexType.TEXT,
            tokenizer=TokenizerType.WORD,
            lowercase=True,
        ),
    )
    client.create_payload_index(collection_name=collection, field_name="category", field_schema=PayloadSchemaType.KEYWORD)
    client.create_payload_index(collection_name=collection, field_name="url", field_schema=PayloadSchemaType.KEYWORD)
    logger.info(f"Search index {collection} created")


def ensure_index(client: QdrantClient, collection: Optional[str] = None) -> bool:
    """Ensure the search index exists. Returns True when it had to be created.

    A 404 on the existence check means "create it"; any other failure means
    the index service is unreachable and raises FatalInitError.
    """
    collection = collection or settings.index_name
    try:
        client.get_collection(collection)
        logger.info(f"Search index {collection} already exists - using existing index")
        return False
    except UnexpectedResponse as e:
        if e.status_code != 404:
            raise FatalInitError(f"Error ensuring search index: {e}", cause=e) from e
    except ResponseHandlingException as e:
        raise FatalInitError(f"Search index service is unreachable: {e}", cause=e) from e

    try:
        create_index(client, collection)
    except (UnexpectedResponse, ResponseHandlingException) as e:
        raise FatalInitError(f"Error creating search index {collection}: {e}", cause=e) from e
    return True


def get_index_info(client: QdrantClient, collection: Optional[str] = None) -> dict:
    """Get index information."""
    collection = collection or settings.index_name
    try:
        info = client.get_collection(collection)
        return {
            "name": collection,
            "points_count": info.points_count,
            "status": info.status,
        }
    except (UnexpectedResponse, ResponseHandlingException) as e:
        logger.error(f"Error getting index info: {e}")
        return {}


def delete_index(client: QdrantClient, collection: Optional[str] = None) -> None:
    """Delete the index."""
    collection = collection or settings.index_name
    try:
        client.delete_collection(collection)
        logger.info(f"Deleted index: {collection}")
    except Exception as e:
        logger.error(f"Error deleting index: {e}")
        raise
