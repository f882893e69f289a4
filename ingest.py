#!/usr/bin/env python3
"""
GraphRAG Ingestion Pipeline - Load a structured document graph into Neo4j

Reads the JSON written by parse_pdf.py (graph or sequential format) and
writes every node with HAS_CHILD / PARENT / NEXT relationships through
graph_rag.neo4j_export.Neo4jGraphWriter.

Configuration (environment or .env):
    GRAPH_PATH, NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD, CLEAR_DOCUMENT
"""

import json
import os
import sys

from dotenv import load_dotenv
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from graph_rag.graph import DocumentGraph
from graph_rag.neo4j_export import Neo4jGraphWriter
from graph_rag.output_utils import print_document_summary, print_section_preview
from utils.neo4j_utils import clear_database, create_basic_indexes, get_graph_stats

load_dotenv()

GRAPH_PATH = os.getenv("GRAPH_PATH", "data/document_graph.json")
NEO4J_URI = os.getenv("NEO4J_URI", "bolt://localhost:7687")
NEO4J_USERNAME = os.getenv("NEO4J_USERNAME", "neo4j")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD", "password")
CLEAR_DOCUMENT = os.getenv("CLEAR_DOCUMENT", "true").lower() == "true"

def load_graph(path: str) -> DocumentGraph:
    """Load a graph from the JSON written by parse_pdf.py."""
    with open(path, 'r', encoding='utf-8') as f:
        return DocumentGraph.from_dict(json.load(f))

def main() -> int:
    print("🚀 Starting GraphRAG ingestion...")
    print(f"📁 Graph file: {GRAPH_PATH}")

    try:
        graph = load_graph(GRAPH_PATH)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ Could not load graph: {e}")
        return 1
    print_document_summary(graph)
    print_section_preview(graph)

    writer = Neo4jGraphWriter(NEO4J_URI, NEO4J_USERNAME, NEO4J_PASSWORD)
    print("✓ Connected to Neo4j")
    try:
        if CLEAR_DOCUMENT:
            print("🧹 Removing previous copy of this document...")
            clear_database(writer.driver, document=graph.document_info.title)

        print("🔍 Creating indexes...")
        create_basic_indexes(writer.driver)

        counts = writer.write_graph(graph)
        print(f"✓ Created {counts['nodes']} nodes, {counts['hierarchy_relationships']} hierarchy "
              f"and {counts['sibling_relationships']} sibling relationships")

        nodes, relationships = get_graph_stats(writer.driver)
        print(f"\n📊 Database now holds {nodes} nodes and {relationships} relationships")
    except (Neo4jError, ServiceUnavailable) as e:
        print(f"❌ Ingestion failed: {e}")
        return 1
    finally:
        writer.close()
        print("✓ Connection closed")

    print("\n✅ Ingestion complete!")
    return 0

if __name__ == "__main__":
    sys.exit(main())
