from typing import Dict, List, Type

from graph_rag.config import ParsingConfig
from graph_rag.errors import ConfigurationError
from graph_rag.rules.base import ParseRule
from graph_rag.rules.minimal_parse import MinimalParseRule
from graph_rag.rules.pattern_detection import PatternBasedSectionDetectionRule
from graph_rag.rules.section_detection import SectionDetectionRule
from graph_rag.rules.spatial_clustering import SpatialClusteringRule
from graph_rag.rules.validation import ValidationRule

RULES: Dict[str, Type[ParseRule]] = {
    rule.name: rule
    for rule in (
        SectionDetectionRule,
        PatternBasedSectionDetectionRule,
        SpatialClusteringRule,
        MinimalParseRule,
        ValidationRule,
    )
}


def build_rules(config: ParsingConfig) -> List[ParseRule]:
    """Instantiate the enabled rules in pipeline order."""
    rules = []
    for rule_config in config.pipeline:
        if rule_config.name not in RULES:
            raise ConfigurationError(f"Unknown rule '{rule_config.name}'")
        if rule_config.enabled:
            rules.append(RULES[rule_config.name]())
    return rules


__all__ = [
    'RULES',
    'build_rules',
    'ParseRule',
    'SectionDetectionRule',
    'PatternBasedSectionDetectionRule',
    'SpatialClusteringRule',
    'MinimalParseRule',
    'ValidationRule',
]
