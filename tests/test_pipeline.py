from typing import List

import pytest

from graph_rag.config import RuleConfig
from graph_rag.errors import ConfigurationError, OrderingViolationError
from graph_rag.pipeline import BASE_STAGE, PipelineExecutor, to_parsed_elements
from graph_rag.rules import RULES, ParseRule, ValidationRule
from graph_rag.config import KNOWN_RULE_NAMES
from pdf_reader.models import ElementType, ParsedElement

from helpers import BODY_TEXT, config_with, make_element


class ReversingRule(ParseRule):
    name = "Reverse"

    def apply(self, elements, config) -> List[ParsedElement]:
        return list(reversed(elements))


class TestRegistry:
    def test_registry_matches_known_names(self):
        assert set(RULES) == set(KNOWN_RULE_NAMES)


class TestPipelineExecutor:
    def test_unknown_rule_rejected_at_construction(self):
        config = config_with(pipeline=(RuleConfig("SectionDetection"), RuleConfig("Sharpen")))
        with pytest.raises(ConfigurationError, match="Sharpen"):
            PipelineExecutor(config)

    def test_disabled_rules_are_skipped(self):
        config = config_with(pipeline=(
            RuleConfig("SectionDetection"),
            RuleConfig("SpatialClustering", enabled=False),
            RuleConfig("Validation"),
        ))
        assert PipelineExecutor(config).rule_names == ["SectionDetection", "Validation"]

    def test_base_conversion_sorts_by_reading_order(self):
        elements = to_parsed_elements([
            make_element("second", page=1, top=200),
            make_element("third", page=2, top=50),
            make_element("first", page=1, top=100),
        ])
        assert [e.text for e in elements] == ["first", "second", "third"]
        assert all(e.element_type == ElementType.PARAGRAPH and e.level == 1 for e in elements)

    def test_minimal_parse_keeps_one_paragraph_per_fragment(self):
        config = config_with(pipeline=(RuleConfig("MinimalParse"),))
        fragments = [
            make_element("INTRODUCTION", size=18, bold=True, top=80),
            make_element(BODY_TEXT, top=110),
        ]
        result = PipelineExecutor(config).run(fragments)
        assert [e.element_type for e in result] == [ElementType.PARAGRAPH, ElementType.PARAGRAPH]
        assert [e.fragments for e in result] == [(fragments[0],), (fragments[1],)]

    def test_default_pipeline_heading_and_body(self):
        result = PipelineExecutor(config_with()).run([
            make_element("INTRODUCTION", size=18, bold=True, top=80),
            make_element(BODY_TEXT, top=110),
        ])
        assert [(e.element_type, e.level) for e in result] == [
            (ElementType.SECTION, 1),
            (ElementType.PARAGRAPH, 2),
        ]

    def test_rule_failure_names_rule_and_upstream(self):
        executor = PipelineExecutor(config_with(pipeline=(RuleConfig("Validation"),)))
        executor.rules = [ReversingRule(), ValidationRule()]
        with pytest.raises(OrderingViolationError) as exc_info:
            executor.run([
                make_element("Text on page one", page=1),
                make_element("Text on page two", page=2),
            ])
        error = exc_info.value
        assert error.rule_name == "Validation"
        assert error.upstream_rule == "Reverse"
        assert error.element_index == 1
        assert "Validation at element 1" in str(error)

    def test_every_fragment_accounted_for(self):
        fragments = [
            make_element("CHAPTER ONE", size=18, bold=True, top=60),
            make_element("First line of the chapter body text", top=100),
            make_element("second line of the chapter body text", top=114),
            make_element("Another paragraph after a gap in the layout", top=160),
            make_element("CHAPTER TWO", size=18, bold=True, page=2, top=60),
            make_element("Closing words of the document body text", page=2, top=100),
        ]
        result = PipelineExecutor(config_with()).run(fragments)
        seen = [f for e in result for f in e.fragments]
        assert sorted(seen, key=lambda f: f.reading_key) == sorted(fragments, key=lambda f: f.reading_key)
        assert len(seen) == len(fragments)

    def test_stage_capture(self):
        executor = PipelineExecutor(config_with())
        stages = executor.run_with_stages([make_element(BODY_TEXT)])
        assert list(stages) == [BASE_STAGE, "SectionDetection", "PatternBasedSectionDetection",
                                "SpatialClustering", "Validation"]

    def test_empty_input(self):
        assert PipelineExecutor(config_with()).run([]) == []
