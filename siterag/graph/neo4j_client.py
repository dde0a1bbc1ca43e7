"""Neo4j driver management."""

import logging
from typing import Optional

from neo4j import Driver, GraphDatabase
from neo4j.exceptions import AuthError, ServiceUnavailable

from siterag.core.config import settings
from siterag.core.errors import FatalInitError

logger = logging.getLogger(__name__)

_driver: Optional[Driver] = None


def get_driver(
    uri: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> Driver:
    """Get the process-wide Neo4j driver, creating it on first use."""
    global _driver
    if _driver is None:
        uri = uri or settings.neo4j_uri
        _driver = GraphDatabase.driver(
            uri,
            auth=(user or settings.neo4j_user, password or settings.neo4j_password),
        )
        logger.info(f"Created Neo4j driver for {uri}")
    return _driver


def verify_connectivity(driver: Driver) -> None:
    """Raise FatalInitError when the graph store cannot be reached at all."""
    try:
        driver.verify_connectivity()
    except (ServiceUnavailable, AuthError, OSError) as e:
        raise FatalInitError(f"Neo4j is unreachable: {e}", cause=e) from e


def close_driver() -> None:
    """Close the process-wide driver, if any."""
    global _driver
    if _driver is not None:
        _driver.close()
        _driver = None
        logger.info("Closed Neo4j driver")
