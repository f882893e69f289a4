from typing import List, Sequence

from graph_rag.config import ParsingConfig
from graph_rag.rules.base import ParseRule
from pdf_reader.models import ParsedElement


class MinimalParseRule(ParseRule):
    """Pass elements through untouched (fast path: one paragraph per fragment)."""

    name = "MinimalParse"

    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        return list(elements)
