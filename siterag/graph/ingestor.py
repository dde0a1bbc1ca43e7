"""Knowledge-graph ingestion: idempotent content nodes and RELATED_TO edges."""

import logging
import re
import time
from typing import Any, Optional, Sequence

from neo4j import Driver, ManagedTransaction
from neo4j.exceptions import DriverError, Neo4jError

from siterag.core.config import settings
from siterag.core.constants import CONTENT_LABEL, RELATED_TO, USER_DEFINED_LABEL, USER_LABEL
from siterag.core.errors import GraphWriteError, SchemaError
from siterag.core.utils import chunked
from siterag.graph.relations import ContainmentRule, RelationRule, infer_pairs
from siterag.ingestion.models import BatchReport, GraphReport, NormalizedContent

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    f"CREATE CONSTRAINT content_id_unique IF NOT EXISTS FOR (n:{CONTENT_LABEL}) REQUIRE n.id IS UNIQUE",
    f"CREATE INDEX content_type_idx IF NOT EXISTS FOR (n:{CONTENT_LABEL}) ON (n.type)",
    f"CREATE INDEX content_url_idx IF NOT EXISTS FOR (n:{CONTENT_LABEL}) ON (n.url)",
)

MERGE_NODES = f"""
UNWIND $batch AS item
MERGE (n:{CONTENT_LABEL} {{id: item.id}})
SET n.text = item.text,
    n.type = item.type,
    n.url = item.url
RETURN count(n) AS written
"""

MERGE_EDGES = f"""
UNWIND $pairs AS pair
MATCH (h:{CONTENT_LABEL} {{id: pair.source}})
MATCH (b:{CONTENT_LABEL} {{id: pair.target}})
WHERE h.url = b.url
MERGE (h)-[r:{RELATED_TO} {{context: $context}}]->(b)
RETURN count(r) AS written
"""

RELATIONSHIP_TYPE = re.compile(r"^[A-Z][A-Z0-9_]*$")


def _write(tx: ManagedTransaction, query: str, params: dict[str, Any]) -> int:
    record = tx.run(query, params).single()
    return record["written"] if record else 0


class GraphIngestor:
    """Writes normalized content into Neo4j in batches.

    Every public call opens its own session and closes it on every exit path.
    Each batch is one transaction; a failed batch is logged, recorded in the
    returned report and the remaining batches still run.
    """

    def __init__(
        self,
        driver: Driver,
        database: Optional[str] = None,
        node_batch_size: Optional[int] = None,
        edge_batch_size: Optional[int] = None,
        relation_context: Optional[str] = None,
        rule: Optional[RelationRule] = None,
    ):
        self.driver = driver
        self.database = database or settings.neo4j_database
        self.node_batch_size = node_batch_size or settings.node_batch_size
        self.edge_batch_size = edge_batch_size or settings.edge_batch_size
        self.relation_context = relation_context or settings.relation_context
        self.rule = rule or ContainmentRule(min_heading_chars=settings.min_heading_chars)

    def _session(self):
        return self.driver.session(database=self.database)

    def ensure_schema(self) -> list[SchemaError]:
        """Create the id constraint and type/url indexes. Safe to call on every start."""
        errors: list[SchemaError] = []
        with self._session() as session:
            for statement in SCHEMA_STATEMENTS:
                try:
                    session.run(statement).consume()
                except (Neo4jError, DriverError) as e:
                    error = SchemaError(statement, str(e))
                    logger.warning(str(error))
                    errors.append(error)
        if not errors:
            logger.info("Graph schema initialized with constraints and indexes")
        return errors

    def _run_batches(
        self,
        session,
        batches: Sequence[Sequence[Any]],
        query: str,
        param_name: str,
        phase: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> BatchReport:
        report = BatchReport(total_batches=len(batches))
        for number, batch in enumerate(batches, start=1):
            params = {param_name: list(batch), **(extra or {})}
            try:
                report.written += session.execute_write(_write, query, params)
                report.succeeded_batches += 1
                logger.info(f"Processed {phase} batch {number}/{len(batches)}")
            except (Neo4jError, DriverError) as e:
                error = GraphWriteError(number, str(e), phase=phase)
                logger.error(str(error))
                report.errors.append(error)
        return report

    def ingest(self, content: Sequence[NormalizedContent]) -> GraphReport:
        """Upsert nodes by id, then merge heading -> body RELATED_TO edges."""
        rows = [item.to_row() for item in content]
        node_batches = list(chunked(rows, self.node_batch_size))

        headings = [item for item in content if item.type.is_heading]
        heading_batches = list(chunked(headings, self.edge_batch_size))
        edge_batches = []
        for batch in heading_batches:
            pairs = infer_pairs(batch, content, self.rule)
            edge_batches.append([{"source": s, "target": t} for s, t in pairs])

        logger.info(
            f"Ingesting {len(rows)} items in {len(node_batches)} node batches, "
            f"{len(headings)} headings in {len(edge_batches)} edge batches"
        )
        with self._session() as session:
            nodes = self._run_batches(session, node_batches, MERGE_NODES, "batch", "node")
            edges = self._run_batches(
                session,
                edge_batches,
                MERGE_EDGES,
                "pairs",
                "edge",
                extra={"context": self.relation_context},
            )

        logger.info(
            f"Graph ingestion done: {nodes.written} nodes, {edges.written} edges, "
            f"{nodes.failed_batches + edges.failed_batches} failed batches"
        )
        return GraphReport(nodes=nodes, edges=edges)

    def add_user_node(
        self,
        user_id: str,
        text: str,
        relationships: Optional[Sequence[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Create a user-authored content node linked to its author and to existing content.

        Each relationship is ``{"type": "MENTIONS", "target_id": "...", "weight": 1.0}``.
        """
        relationships = list(relationships or [])
        for rel in relationships:
            if not RELATIONSHIP_TYPE.match(str(rel.get("type", ""))):
                return {"success": False, "error": f"Invalid relationship type: {rel.get('type')!r}"}

        node_id = f"user-{user_id}-{int(time.time() * 1000)}"
        create_node = f"""
        MERGE (u:{USER_LABEL} {{id: $user_id}})
        CREATE (n:{CONTENT_LABEL}:{USER_DEFINED_LABEL} {{
            id: $node_id,
            text: $text,
            type: 'user_defined',
            createdBy: $user_id,
            createdAt: datetime()
        }})
        CREATE (u)-[:CREATED]->(n)
        RETURN n.id AS written
        """

        def _create(tx: ManagedTransaction) -> None:
            tx.run(create_node, {"user_id": user_id, "node_id": node_id, "text": text}).consume()
            for rel in relationships:
                tx.run(
                    f"""
                    MATCH (source:{CONTENT_LABEL} {{id: $node_id}})
                    MATCH (target:{CONTENT_LABEL} {{id: $target_id}})
                    CREATE (source)-[:{rel["type"]} {{weight: $weight}}]->(target)
                    """,
                    {"node_id": node_id, "target_id": rel["target_id"], "weight": rel.get("weight", 1.0)},
                ).consume()

        try:
            with self._session() as session:
                session.execute_write(_create)
        except (Neo4jError, DriverError) as e:
            logger.error(f"Error adding user node: {e}")
            return {"success": False, "error": str(e)}
        return {"success": True, "node_id": node_id}
