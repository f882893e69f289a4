import time
from typing import Dict, List, Sequence

from graph_rag.config import ParsingConfig, validate_config
from graph_rag.errors import RuleError
from graph_rag.rules import build_rules
from pdf_reader.models import ParsedElement, TextElement
from utils.custom_logger import get_logger

logger = get_logger(__name__)

BASE_STAGE = "BaseConversion"


def to_parsed_elements(text_elements: Sequence[TextElement]) -> List[ParsedElement]:
    """One level-1 paragraph per fragment, stably sorted by (page, top, left)."""
    ordered = sorted(text_elements, key=lambda e: e.reading_key)
    return [ParsedElement.from_text_element(e) for e in ordered]


class PipelineExecutor:
    """Run the configured rules in order, each consuming the previous rule's output.

    The configuration is validated and the rules are built when the
    executor is created, so an unknown rule name fails before any document
    is touched.
    """

    def __init__(self, config: ParsingConfig):
        validate_config(config)
        self.config = config
        self.rules = build_rules(config)
        self.timings: Dict[str, float] = {}

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def _apply(self, rule, elements: List[ParsedElement], previous: str) -> List[ParsedElement]:
        try:
            return list(rule.apply(elements, self.config))
        except RuleError as exc:
            if exc.upstream_rule is None:
                exc.upstream_rule = previous
            logger.error("Pipeline aborted: %s", exc)
            raise

    def run(self, text_elements: Sequence[TextElement]) -> List[ParsedElement]:
        """Structure ``text_elements`` into a leveled flat element sequence.

        Args:
            text_elements: Extracted fragments in any order

        Returns:
            Output of the last enabled rule
        """
        elements = to_parsed_elements(text_elements)
        previous = BASE_STAGE
        self.timings = {}
        logger.info("Pipeline: %d fragments through %s", len(elements), " -> ".join(self.rule_names) or "no rules")

        for rule in self.rules:
            start = time.perf_counter()
            elements = self._apply(rule, elements, previous)
            self.timings[rule.name] = time.perf_counter() - start
            logger.debug("%s finished in %.4fs with %d elements", rule.name, self.timings[rule.name], len(elements))
            previous = rule.name

        return elements

    def run_with_stages(self, text_elements: Sequence[TextElement]) -> Dict[str, List[ParsedElement]]:
        """Like ``run`` but keep every stage's output, keyed by stage name, for snapshot inspection."""
        stages = {BASE_STAGE: to_parsed_elements(text_elements)}
        elements = stages[BASE_STAGE]
        previous = BASE_STAGE
        for rule in self.rules:
            elements = self._apply(rule, elements, previous)
            stages[rule.name] = elements
            previous = rule.name
        return stages
