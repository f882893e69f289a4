from unittest.mock import MagicMock

import pytest
from neo4j.exceptions import ServiceUnavailable

from graph_rag.neo4j_export import Neo4jGraphWriter, node_properties
from graph_rag.processor import DocumentProcessor
from utils.neo4j_utils import clear_database, get_graph_stats

from helpers import BODY_TEXT, config_with, make_element


@pytest.fixture
def graph():
    return DocumentProcessor(config_with()).process_elements([
        make_element("INTRODUCTION", size=18, bold=True, top=80),
        make_element(BODY_TEXT, top=110),
        make_element("SCOPE", size=18, bold=True, top=200),
        make_element(BODY_TEXT, top=230),
    ])


@pytest.fixture
def driver():
    driver = MagicMock()
    session = driver.session.return_value.__enter__.return_value
    return driver, session


class TestNeo4jGraphWriter:
    def test_writes_every_node_and_relationship(self, graph, driver):
        mock_driver, session = driver
        writer = Neo4jGraphWriter(driver=mock_driver)

        counts = writer.write_graph(graph)

        # root + 2 sections + 2 paragraphs
        assert counts == {'nodes': 5, 'hierarchy_relationships': 4, 'sibling_relationships': 1}
        assert session.run.call_count == 5 + 4 + 1

    def test_node_labels_follow_types(self, graph, driver):
        mock_driver, session = driver
        Neo4jGraphWriter(driver=mock_driver).create_nodes(graph, "doc")
        queries = [call.args[0] for call in session.run.call_args_list]
        assert any("CREATE (n:Document" in q for q in queries)
        assert sum("CREATE (n:Section" in q for q in queries) == 2
        assert sum("CREATE (n:Paragraph" in q for q in queries) == 2

    def test_node_properties(self, graph):
        section = graph.root.children[0]
        props = node_properties(section, "doc")
        assert props['id'] == "1"
        assert props['document'] == "doc"
        assert props['title'] == "INTRODUCTION"
        assert props['page_start'] == 1
        assert props['char_count'] == len("INTRODUCTION")

    def test_close(self, driver):
        mock_driver, _ = driver
        Neo4jGraphWriter(driver=mock_driver).close()
        mock_driver.close.assert_called_once()


class TestNeo4jUtils:
    def test_stats_when_unavailable(self):
        mock_driver = MagicMock()
        mock_driver.session.side_effect = ServiceUnavailable("down")
        assert get_graph_stats(mock_driver) == (0, 0)

    def test_clear_single_document(self, driver):
        mock_driver, session = driver
        clear_database(mock_driver, document="doc")
        query = session.run.call_args.args[0]
        assert "document: $document" in query
        assert session.run.call_args.kwargs == {'document': "doc"}
