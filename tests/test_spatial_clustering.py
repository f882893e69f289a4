import pytest

from graph_rag.config import SegmentBounds
from graph_rag.pipeline import to_parsed_elements
from graph_rag.rules.spatial_clustering import (
    SpatialClusteringRule,
    joined_length,
    measure,
    sentence_pieces,
    split_by_size,
)
from pdf_reader.models import ElementType

from helpers import config_with, make_element, make_parsed

NO_SIZE_LIMITS = {
    'sections': SegmentBounds(0, 10000),
    'paragraphs': SegmentBounds(0, 10000),
}


def cluster(text_elements, clustering=None):
    config = config_with(clustering=clustering or NO_SIZE_LIMITS)
    return SpatialClusteringRule().apply(to_parsed_elements(text_elements), config)


class TestProximity:
    def test_consecutive_aligned_lines_join(self):
        result = cluster([
            make_element("The first line of a paragraph", top=100),
            make_element("continues on the second line.", top=114),
        ])
        assert len(result) == 1
        assert result[0].text == "The first line of a paragraph continues on the second line."
        assert len(result[0].fragments) == 2

    def test_large_vertical_gap_splits(self):
        result = cluster([
            make_element("First paragraph.", top=100),
            make_element("Second paragraph.", top=140),
        ])
        assert len(result) == 2

    def test_page_change_splits(self):
        result = cluster([
            make_element("End of page one.", page=1, top=700),
            make_element("Start of page two.", page=2, top=60),
        ])
        assert len(result) == 2

    def test_misaligned_left_edge_splits(self):
        result = cluster([
            make_element("Left column text", left=72, top=100),
            make_element("Indented far away", left=200, top=114),
        ])
        assert len(result) == 2

    def test_same_line_continuation_joins(self):
        result = cluster([
            make_element("Hello", left=72, top=100, width=25),
            make_element("world", left=100, top=100, width=25),
        ])
        assert len(result) == 1
        assert result[0].text == "Hello world"

    def test_header_never_absorbs_body(self):
        elements = [
            make_parsed("INTRODUCTION", ElementType.SECTION, level=1, top=100, size=10),
            make_parsed("Body text right below the heading.", level=2, top=114),
        ]
        result = SpatialClusteringRule().apply(elements, config_with(clustering=NO_SIZE_LIMITS))
        assert [e.element_type for e in result] == [ElementType.SECTION, ElementType.PARAGRAPH]

    def test_multi_line_heading_becomes_one_section(self):
        elements = [
            make_parsed("A VERY LONG HEADING", ElementType.SECTION, level=1, top=100),
            make_parsed("THAT WRAPS", ElementType.SECTION, level=1, top=114),
        ]
        result = SpatialClusteringRule().apply(elements, config_with(clustering=NO_SIZE_LIMITS))
        assert len(result) == 1
        assert result[0].element_type == ElementType.SECTION
        assert result[0].level == 1

    def test_list_items_stay_separate(self):
        result = cluster([
            make_element("• first item", top=100),
            make_element("• second item", top=114),
        ])
        assert len(result) == 2

    def test_bbox_is_union_of_members(self):
        result = cluster([
            make_element("Short", top=100, left=72, width=40),
            make_element("A much longer second line", top=114, left=72, width=200),
        ])
        assert result[0].bbox.left == 72
        assert result[0].bbox.top == 100
        assert result[0].bbox.right == 272
        assert result[0].bbox.bottom == pytest.approx(126)


class TestSizeEnforcement:
    def test_undersized_clusters_merge_forward(self):
        clustering = {'paragraphs': SegmentBounds(100, 8000)}
        result = cluster([
            make_element("Short one.", top=100),
            make_element("Short two.", top=160),
            make_element("Short three.", top=220),
        ], clustering)
        assert len(result) == 1
        assert result[0].text == "Short one. Short two. Short three."

    def test_undersized_cluster_not_merged_into_other_type(self):
        elements = [
            make_parsed("Tiny note.", level=1, top=100),
            make_parsed("NEXT HEADING", ElementType.SECTION, level=1, top=160),
            make_parsed("Body after the heading that is long enough to stand alone. " * 2, level=2, top=200),
        ]
        config = config_with(clustering={'paragraphs': SegmentBounds(100, 8000),
                                         'sections': SegmentBounds(0, 300)})
        result = SpatialClusteringRule().apply(elements, config)
        assert [e.text for e in result][0] == "Tiny note."
        assert len(result) == 3

    def test_row_cells_are_not_merged(self):
        clustering = {'paragraphs': SegmentBounds(100, 8000)}
        result = cluster([
            make_element("Name", left=72, top=100),
            make_element("Age", left=300, top=100),
            make_element("Alice", left=72, top=130),
            make_element("30", left=300, top=130),
        ], clustering)
        assert [e.text for e in result] == ["Name", "Age", "Alice", "30"]

    def test_oversized_cluster_split_at_element_boundary(self):
        lines = [f"Line number {i:02d} of the long paragraph" for i in range(12)]
        assert all(len(line) == 36 for line in lines)
        clustering = {'paragraphs': SegmentBounds(0, 100)}
        result = cluster([make_element(line, top=100 + 14 * i) for i, line in enumerate(lines)], clustering)

        assert all(e.char_count <= 100 for e in result)
        assert [len(e.fragments) for e in result] == [2] * 6
        # Order preserved across chunks
        assert [f.text for e in result for f in e.fragments] == lines

    def test_split_at_fragment_edge_when_limit_is_crossed(self):
        lines = [f"Fragment {i:02d} of the long text." for i in range(10)] + ["final bits"]
        assert all(len(line) == 29 for line in lines[:-1])
        fragments = [make_element(line, top=100 + 14 * i) for i, line in enumerate(lines)]
        # Ten fragments join to 299 characters; the eleventh would reach 310
        assert len(" ".join(lines)) == 310

        result = cluster(fragments, {'paragraphs': SegmentBounds(100, 300)})

        assert [e.element_type for e in result] == [ElementType.PARAGRAPH] * 2
        assert [e.char_count for e in result] == [299, 10]
        assert result[1].fragments == (fragments[-1],)
        assert result[0].reading_key < result[1].reading_key

    def test_single_oversized_element_kept_whole(self):
        text = "x" * 150
        result = cluster([make_element(text, top=100)], {'paragraphs': SegmentBounds(0, 100)})
        assert len(result) == 1
        assert result[0].text == text

    def test_word_unit_bounds(self):
        lines = ["one two three four five"] * 6
        clustering = {'paragraphs': SegmentBounds(0, 10), 'size_unit': "words"}
        result = cluster([make_element(line, top=100 + 14 * i) for i, line in enumerate(lines)], clustering)
        assert [len(e.fragments) for e in result] == [2, 2, 2]
        assert all(measure(e.text, "words") == 10 for e in result)

    def test_sentence_split_of_single_oversized_fragment(self):
        text = "First sentence is here. Second one follows it. Third closes the paragraph."
        original = make_element(text, top=100, height=30)
        clustering = {'paragraphs': SegmentBounds(0, 50), 'preserve_sentences': True}

        result = cluster([original], clustering)

        assert [e.text for e in result] == [
            "First sentence is here. Second one follows it.",
            "Third closes the paragraph.",
        ]
        assert result[0].bbox.top == original.bbox.top
        assert result[0].bbox.bottom == pytest.approx(result[1].bbox.top)
        assert result[1].bbox.bottom == pytest.approx(original.bbox.bottom)
        assert all(original.bbox.contains(e.bbox) for e in result)
        assert result[0].reading_key < result[1].reading_key

    def test_fragment_edges_split_before_sentences(self):
        lines = ["Short opening line here.", "Another short line. It has two sentences in it."]
        clustering = {'paragraphs': SegmentBounds(0, 50), 'preserve_sentences': True}
        result = cluster([make_element(line, top=100 + 14 * i) for i, line in enumerate(lines)], clustering)
        assert [e.text for e in result] == lines

    def test_sentence_longer_than_limit_kept_whole(self):
        text = "x" * 80 + ". Tail."
        result = cluster([make_element(text, top=100)],
                         {'paragraphs': SegmentBounds(0, 50), 'preserve_sentences': True})
        assert [e.text for e in result] == ["x" * 80 + ".", "Tail."]


class TestHelpers:
    def test_split_by_size_keeps_chunks_within_limit(self):
        members = [make_parsed("a" * 30, top=100 + i) for i in range(10)]
        chunks = split_by_size(members, 100)
        assert all(joined_length(chunk) <= 100 for chunk in chunks)
        assert sum(len(chunk) for chunk in chunks) == 10
        assert [len(chunk) for chunk in chunks] == [3, 3, 3, 1]

    def test_empty_input(self):
        assert cluster([]) == []

    @pytest.mark.parametrize("unit, expected", [("characters", 9), ("words", 2), ("bytes", 10)])
    def test_measure_units(self, unit, expected):
        assert measure("café noir", unit) == expected

    def test_words_join_without_separator(self):
        members = [make_parsed("alpha beta", top=100 + i) for i in range(4)]
        assert joined_length(members, "words") == 8
        assert [len(chunk) for chunk in split_by_size(members, 4, "words")] == [2, 2]

    def test_sentence_pieces_leave_multi_fragment_elements(self):
        element = make_parsed("One. Two.").merged_with(make_parsed("Three. Four.", top=114))
        assert sentence_pieces(element, 5) == [element]
