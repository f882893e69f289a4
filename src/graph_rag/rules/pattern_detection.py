from typing import List, Optional, Pattern, Sequence, Tuple

from graph_rag.config import ParsingConfig
from graph_rag.rules.base import ParseRule, clamp_level
from pdf_reader.models import ElementType, ParsedElement
from pdf_reader.text_utils import extract_section_number, get_section_level
from utils.custom_logger import get_logger

logger = get_logger(__name__)


def first_matching_pattern(text: str, patterns: Tuple[Pattern, ...]) -> Optional[int]:
    """Index of the first pattern found in ``text``; earlier patterns win."""
    for index, pattern in enumerate(patterns):
        if pattern.search(text):
            return index
    return None


class PatternBasedSectionDetectionRule(ParseRule):
    """Promote paragraphs whose text looks like a heading.

    A promoted element keeps the level SectionDetection derived from its
    font. Without font-derived levels (the rule running alone, or fragments
    lacking a size) the level comes from the leading section number, and
    the content that follows is placed one level below it.
    """

    name = "PatternBasedSectionDetection"

    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        settings = config.pattern_detection
        patterns = settings.compiled()
        min_header_size = config.section_and_hierarchy.min_header_size
        starting_level = config.section_and_hierarchy.starting_section_level

        result = []
        promoted = 0
        pattern_level = None
        for element in elements:
            has_font_level = element.font_leveled and element.font_size is not None

            if element.element_type == ElementType.SECTION:
                if not has_font_level:
                    pattern_level = element.level
                result.append(element)
                continue

            match = None
            if element.element_type == ElementType.PARAGRAPH:
                match = first_matching_pattern(element.text.strip(), patterns)
            if match is not None and settings.respect_font_constraints:
                if element.font_size is None or element.font_size < min_header_size:
                    match = None

            if match is not None:
                promoted += 1
                section = element.with_type(ElementType.SECTION, header_tier=element.header_tier or "pattern")
                if not has_font_level:
                    number = extract_section_number(element.text)
                    level = get_section_level(number) + starting_level - 1 if number else starting_level
                    level = clamp_level(level, config)
                    pattern_level = level
                    section = section.with_level(level)
                logger.debug("Pattern %d promoted: %s", match, element.text[:60])
                result.append(section)
            elif not has_font_level and pattern_level is not None:
                result.append(element.with_level(clamp_level(pattern_level + 1, config)))
            else:
                result.append(element)

        logger.info("PatternBasedSectionDetection: %d elements promoted", promoted)
        return result
