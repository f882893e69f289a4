from abc import ABC, abstractmethod
from typing import List, Sequence

from graph_rag.config import ParsingConfig
from pdf_reader.models import ParsedElement


class ParseRule(ABC):
    """One stage of the structuring pipeline.

    A rule receives the previous stage's elements and returns a new list.
    It must not mutate its input and must keep reading order.
    """

    name: str = ""

    @abstractmethod
    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        """Transform ``elements`` under ``config``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def clamp_level(level: int, config: ParsingConfig) -> int:
    """Clamp to max_depth when depth enforcement is on; levels never drop below 1."""
    settings = config.section_and_hierarchy
    if settings.enforce_max_depth:
        level = min(level, settings.max_depth)
    return max(level, 1)
