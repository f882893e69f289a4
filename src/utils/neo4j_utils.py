from typing import Optional, Tuple
from neo4j import Driver
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from utils.custom_logger import get_logger

logger = get_logger(__name__)

DOCUMENT_LABELS = (
    "Document", "Section", "Paragraph", "List", "ListItem", "Table", "TableRow", "TableCell",
)


def get_graph_stats(driver: Driver) -> Tuple[int, int]:
    """Return (node_count, relationship_count) for the connected Neo4j DB.

    Parameters
    ----------
    driver : neo4j.Driver
        An active Neo4j driver instance.

    Returns
    -------
    (int, int)
        Total number of nodes and relationships respectively.  If the
        database is unreachable we log it and return (0, 0).
    """
    try:
        with driver.session() as session:
            node_count = session.run("MATCH (n) RETURN count(n) AS c").single()["c"]
            rel_count = session.run("MATCH ()-[r]->() RETURN count(r) AS c").single()["c"]
        return int(node_count), int(rel_count)
    except ServiceUnavailable as exc:
        logger.warning("Neo4j unavailable while reading stats: %s", exc)
        return 0, 0


def clear_database(driver: Driver, document: Optional[str] = None) -> None:
    """Detach-delete nodes, either all of them or only one document's.

    Meant for test/ingestion resets.
    """
    with driver.session() as session:
        if document is None:
            session.run("MATCH (n) DETACH DELETE n")
        else:
            session.run("MATCH (n {document: $document}) DETACH DELETE n", document=document)


def create_basic_indexes(driver: Driver, labels: Tuple[str, ...] = DOCUMENT_LABELS) -> None:
    """Create the id/document/level/text/title indexes used by GraphRAG.

    The Cypher clauses use the `IF NOT EXISTS` guard so the helper is safe
    to call multiple times.
    """
    with driver.session() as session:
        for label in labels:
            name = label.lower()
            try:
                session.run(f"CREATE INDEX {name}_id_index IF NOT EXISTS FOR (s:{label}) ON (s.id, s.document)")
                session.run(f"CREATE INDEX {name}_level_index IF NOT EXISTS FOR (s:{label}) ON (s.level)")
                session.run(f"CREATE TEXT INDEX {name}_text_index IF NOT EXISTS FOR (s:{label}) ON (s.text)")
                session.run(f"CREATE TEXT INDEX {name}_title_index IF NOT EXISTS FOR (s:{label}) ON (s.title)")
            except Neo4jError as exc:
                logger.error("Could not create indexes for %s: %s", label, exc)
                raise
