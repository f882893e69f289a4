"""
Document graph to Neo4j writer.

Node Creation:
--------------
One node per graph node, labelled by its type (Document, Section, Paragraph,
List, ListItem, Table, TableRow, TableCell) with id, document, title, text,
level, page span, bounding box, word and character counts.

Relationship Creation:
----------------------
HAS_CHILD: Parent to child relationship (with the child's position)
PARENT: Child to parent relationship (inverse of HAS_CHILD)
NEXT: Sequential relationship between consecutive siblings
"""
from typing import Dict, List, Optional, Tuple

from neo4j import Driver, GraphDatabase
from tqdm import tqdm

from graph_rag.graph import DocumentGraph, DocumentNode
from utils.custom_logger import get_logger

logger = get_logger(__name__)


def node_properties(node: DocumentNode, document: str) -> Dict:
    bbox = node.bbox.to_dict() if node.bbox else {}
    page_start, page_end = node.page_span if node.page_span else (None, None)
    return {
        'id': node.id,
        'document': document,
        'title': node.title,
        'text': node.text,
        'level': node.level,
        'page_start': page_start,
        'page_end': page_end,
        'left': bbox.get('left'),
        'top': bbox.get('top'),
        'right': bbox.get('right'),
        'bottom': bbox.get('bottom'),
        'word_count': len(node.text.split()),
        'char_count': len(node.text),
    }


class Neo4jGraphWriter:
    def __init__(self, uri: str = "bolt://localhost:7687", username: str = "neo4j",
                 password: str = "password", driver: Optional[Driver] = None):
        """Initialize Neo4j connection (or reuse an existing driver)."""
        self.driver = driver or GraphDatabase.driver(uri, auth=(username, password))

    def close(self):
        """Close Neo4j connection."""
        self.driver.close()

    def create_nodes(self, graph: DocumentGraph, document: str) -> int:
        nodes = graph.nodes()
        with self.driver.session() as session:
            for node in tqdm(nodes, desc="Creating document nodes"):
                session.run(f"""
                    CREATE (n:{node.type.value} {{
                        id: $id,
                        document: $document,
                        title: $title,
                        text: $text,
                        level: $level,
                        page_start: $page_start,
                        page_end: $page_end,
                        left: $left,
                        top: $top,
                        right: $right,
                        bottom: $bottom,
                        word_count: $word_count,
                        char_count: $char_count
                    }})
                """, **node_properties(node, document))
        return len(nodes)

    def create_relationships(self, graph: DocumentGraph, document: str) -> Tuple[int, int]:
        """Create HAS_CHILD/PARENT pairs and NEXT links between siblings.

        Returns:
            (parent-child relationship count, sibling relationship count)
        """
        parent_pairs: List[Tuple[str, str, int]] = []
        sibling_pairs: List[Tuple[str, str]] = []
        for node, _ in graph.root.walk():
            for position, child in enumerate(node.children):
                parent_pairs.append((node.id, child.id, position))
            for current, following in zip(node.children, node.children[1:]):
                sibling_pairs.append((current.id, following.id))

        with self.driver.session() as session:
            for parent_id, child_id, position in tqdm(parent_pairs, desc="Creating hierarchy"):
                session.run("""
                    MATCH (parent {id: $parent_id, document: $document})
                    MATCH (child {id: $child_id, document: $document})
                    CREATE (parent)-[:HAS_CHILD {position: $position}]->(child)
                    CREATE (child)-[:PARENT]->(parent)
                """, parent_id=parent_id, child_id=child_id, position=position, document=document)

            for current_id, next_id in sibling_pairs:
                session.run("""
                    MATCH (current {id: $current_id, document: $document})
                    MATCH (next {id: $next_id, document: $document})
                    CREATE (current)-[:NEXT]->(next)
                """, current_id=current_id, next_id=next_id, document=document)

        return len(parent_pairs), len(sibling_pairs)

    def write_graph(self, graph: DocumentGraph, document: Optional[str] = None) -> Dict[str, int]:
        """Write every node and relationship of ``graph``.

        Args:
            graph: Assembled document graph
            document: Key stored on every node to keep documents apart; defaults to the title

        Returns:
            Counts of created nodes and relationships
        """
        document = document or graph.document_info.title
        node_count = self.create_nodes(graph, document)
        hierarchy_count, sibling_count = self.create_relationships(graph, document)
        logger.info("Wrote '%s' to Neo4j: %d nodes, %d hierarchy and %d sibling links",
                    document, node_count, hierarchy_count, sibling_count)
        return {
            'nodes': node_count,
            'hierarchy_relationships': hierarchy_count,
            'sibling_relationships': sibling_count,
        }
