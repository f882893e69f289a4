"""Font-based header detection.

Headers are found relative to one document-wide body font size: the
character-weighted median of every fragment's size, so long runs of body text
outweigh short headings. Header levels follow the order in which distinct
header sizes appear.
"""
from typing import List, Optional, Sequence

import numpy as np

from graph_rag.config import ParsingConfig, SectionConfig
from graph_rag.rules.base import ParseRule, clamp_level
from pdf_reader.models import ElementType, ParsedElement
from utils.custom_logger import get_logger

logger = get_logger(__name__)


def body_font_size(elements: Sequence[ParsedElement]) -> Optional[float]:
    """Character-weighted median font size, or None when no fragment carries a size."""
    sizes = []
    weights = []
    for element in elements:
        for fragment in element.fragments:
            chars = len(fragment.text.strip())
            if fragment.font_size > 0 and chars:
                sizes.append(fragment.font_size)
                weights.append(chars)
    if not sizes:
        return None
    return float(np.median(np.repeat(np.array(sizes), np.array(weights))))


def header_tier(font_size: float, median: float, settings: SectionConfig) -> Optional[str]:
    """Size tier of a font relative to the body median, or None when not larger."""
    ratio = (font_size - median) / median
    if ratio <= 0:
        return None
    if ratio >= settings.large_header_threshold:
        return "large"
    if ratio >= settings.medium_header_threshold:
        return "medium"
    if ratio >= settings.small_header_threshold:
        return "small"
    return None


class HeaderLevelTracker:
    """Assigns levels from the distinct header sizes seen so far.

    Sizes within ``tolerance`` points of each other count as one tier. A
    header's level is the starting level plus the number of distinct larger
    tiers already observed.
    """

    def __init__(self, tolerance: float, starting_level: int = 1):
        self.tolerance = tolerance
        self.starting_level = starting_level
        self.tiers: List[float] = []

    def level_for(self, font_size: float) -> int:
        if not any(abs(font_size - tier) <= self.tolerance for tier in self.tiers):
            self.tiers.append(font_size)
        larger = sum(1 for tier in self.tiers if tier - font_size > self.tolerance)
        return self.starting_level + larger


class SectionDetectionRule(ParseRule):
    name = "SectionDetection"

    def _is_header(self, element: ParsedElement, median: float, settings: SectionConfig) -> Optional[str]:
        size = element.font_size
        if size is None or size < settings.min_header_size:
            return None
        tier = header_tier(size, median, settings)
        if tier:
            return tier
        if settings.use_bold_indicator and element.is_bold:
            if settings.bold_mode == "loose" or size > median:
                return "bold"
        return None

    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        settings = config.section_and_hierarchy
        median = body_font_size(elements)
        if median is None:
            logger.info("SectionDetection: no font data, leaving %d elements untouched", len(elements))
            return list(elements)
        logger.info("SectionDetection: body font size %.2f over %d elements", median, len(elements))

        tracker = HeaderLevelTracker(settings.font_size_tolerance, settings.starting_section_level)
        current_header_level = None
        result = []
        headers = 0
        for element in elements:
            if element.font_size is None:
                result.append(element)
                continue

            tier = self._is_header(element, median, settings)
            if tier:
                level = clamp_level(tracker.level_for(element.font_size), config)
                current_header_level = level
                headers += 1
                result.append(element.with_type(ElementType.SECTION, header_tier=tier)
                              .with_level(level, font_leveled=True))
                logger.debug("Header (%s, level %d): %s", tier, level, element.text[:60])
            else:
                if current_header_level is None:
                    level = settings.starting_section_level
                else:
                    level = clamp_level(current_header_level + 1, config)
                result.append(element.with_level(level, font_leveled=True))

        logger.info("SectionDetection: %d headers found", headers)
        return result
