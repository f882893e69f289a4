import re

from graph_rag.pipeline import to_parsed_elements
from graph_rag.rules.pattern_detection import PatternBasedSectionDetectionRule, first_matching_pattern
from graph_rag.rules.section_detection import SectionDetectionRule
from pdf_reader.models import ElementType

from helpers import BODY_TEXT, config_with, make_element


def promote(text_elements, config):
    return PatternBasedSectionDetectionRule().apply(to_parsed_elements(text_elements), config)


class TestFirstMatchingPattern:
    def test_earliest_pattern_wins(self):
        patterns = (re.compile(r"^Chapter"), re.compile(r"^Chapter\s+\d+"))
        assert first_matching_pattern("Chapter 1", patterns) == 0

    def test_no_match(self):
        assert first_matching_pattern("plain words", (re.compile(r"^\d+"),)) is None


class TestPatternBasedSectionDetection:
    def test_promotes_without_font_constraint(self):
        config = config_with(patterns={'respect_font_constraints': False})
        result = promote([
            make_element("Chapter 1", size=10, top=80),
            make_element(BODY_TEXT, size=10, top=110),
        ], config)
        assert result[0].element_type == ElementType.SECTION
        assert result[0].header_tier == "pattern"
        assert result[1].element_type == ElementType.PARAGRAPH
        # No font-derived levels: content sits below the pattern section
        assert [e.level for e in result] == [1, 2]

    def test_font_floor_blocks_promotion(self):
        config = config_with(section={'min_header_size': 12.0}, patterns={'respect_font_constraints': True})
        result = promote([make_element("Chapter 1", size=10, top=80)], config)
        assert result[0].element_type == ElementType.PARAGRAPH

    def test_missing_font_size_blocks_promotion_under_constraints(self):
        config = config_with(patterns={'respect_font_constraints': True})
        result = promote([make_element("Chapter 1", size=0, top=80)], config)
        assert result[0].element_type == ElementType.PARAGRAPH

    def test_level_from_section_number(self):
        config = config_with(patterns={'patterns': (r"^\d+(?:\.\d+)+\s",), 'respect_font_constraints': False})
        result = promote([
            make_element("2.3.1 Scope", size=10, top=80),
            make_element(BODY_TEXT, size=10, top=110),
        ], config)
        assert result[0].element_type == ElementType.SECTION
        assert [e.level for e in result] == [3, 4]

    def test_promoted_element_keeps_font_level(self):
        config = config_with()
        elements = SectionDetectionRule().apply(to_parsed_elements([
            make_element("INTRODUCTION TO THE SYSTEM", size=18, bold=True, top=50),
            make_element("Chapter 1", size=10, top=90),
            make_element(BODY_TEXT * 2, size=10, top=120),
        ]), config)
        assert [e.level for e in elements] == [1, 2, 2]

        result = PatternBasedSectionDetectionRule().apply(elements, config)
        assert result[1].element_type == ElementType.SECTION
        assert [e.level for e in result] == [1, 2, 2]

    def test_existing_sections_untouched(self):
        config = config_with()
        elements = SectionDetectionRule().apply(to_parsed_elements([
            make_element("INTRODUCTION", size=18, bold=True, top=50),
            make_element(BODY_TEXT, size=10, top=90),
        ]), config)
        assert PatternBasedSectionDetectionRule().apply(elements, config) == elements
