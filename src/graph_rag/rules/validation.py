"""Final repair and consistency pass over the flat element sequence.

Repairs are applied in a fixed order (drop blanks, renumber levels, merge
fragments that are too short) and then reading order is checked. Running the
rule twice gives the same result as running it once.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from graph_rag.config import ParsingConfig
from graph_rag.errors import OrderingViolationError
from graph_rag.layout import row_members, shares_row
from graph_rag.rules.base import ParseRule
from pdf_reader.models import ElementType, ParsedElement
from utils.custom_logger import get_logger

logger = get_logger(__name__)

LONG_HEADING_CHARS = 200


@dataclass
class ValidationReport:
    element_count: int
    issues: List[str] = field(default_factory=list)

    @property
    def quality_score(self) -> float:
        if not self.element_count:
            return 1.0
        return max(0.0, 1.0 - len(self.issues) / self.element_count)


def collect_issues(elements: Sequence[ParsedElement]) -> ValidationReport:
    """Report suspicious structure without changing anything."""
    report = ValidationReport(element_count=len(elements))
    previous_page = None
    for index, element in enumerate(elements):
        if element.element_type == ElementType.SECTION and element.char_count > LONG_HEADING_CHARS:
            report.issues.append(f"element {index}: heading is {element.char_count} characters long")
        if element.bbox.width < 0 or element.bbox.height < 0:
            report.issues.append(f"element {index}: invalid bounding box {element.bbox}")
        first_page, last_page = element.page_span
        if previous_page is not None and first_page > previous_page + 1:
            report.issues.append(f"element {index}: jumps from page {previous_page} to page {first_page}")
        previous_page = last_page
    return report


def renumber_levels(elements: Sequence[ParsedElement]) -> List[ParsedElement]:
    """Close level gaps so each element sits exactly one level below its structural parent."""
    stack: List[Tuple[int, int]] = []  # (original level, new level)
    result = []
    for element in elements:
        while stack and stack[-1][0] >= element.level:
            stack.pop()
        new_level = stack[-1][1] + 1 if stack else 1
        stack.append((element.level, new_level))
        result.append(element if new_level == element.level else element.with_level(new_level))
    return result


def first_order_violation(elements: Sequence[ParsedElement]) -> Optional[int]:
    for index in range(1, len(elements)):
        if elements[index].reading_key < elements[index - 1].reading_key:
            return index
    return None


class ValidationRule(ParseRule):
    name = "Validation"

    @staticmethod
    def _compatible(a: ParsedElement, b: ParsedElement) -> bool:
        return a.element_type == b.element_type and a.level == b.level

    def _merge_target(self, elements: List[ParsedElement], rows: List[bool], i: int,
                      min_length: int) -> Optional[int]:
        """Index ``j`` such that element ``i`` should merge as part of the pair j, j+1, or None."""
        element = elements[i]
        if element.char_count >= min_length or rows[i]:
            return None
        if i > 0 and not rows[i - 1] and self._compatible(elements[i - 1], element):
            return i - 1
        if i + 1 < len(elements) and not rows[i + 1] and self._compatible(element, elements[i + 1]):
            return i
        return None

    def _merge_short(self, elements: List[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        min_length = config.validation.min_text_length
        clustering = config.spatial_clustering

        def row_flag(items: List[ParsedElement], k: int) -> bool:
            return any(
                shares_row(items[a], items[a + 1], clustering.min_line_height, clustering.line_grouping_tolerance)
                for a in (k - 1, k)
                if 0 <= a and a + 1 < len(items)
            )

        elements = list(elements)
        rows = row_members(elements, clustering.min_line_height, clustering.line_grouping_tolerance)
        merges = 0
        i = 0
        while i < len(elements):
            j = self._merge_target(elements, rows, i, min_length)
            if j is None:
                i += 1
                continue
            elements[j:j + 2] = [elements[j].merged_with(elements[j + 1])]
            rows[j:j + 2] = [False]
            # Only the merged element and its direct neighbours can change row membership
            for k in range(max(j - 1, 0), min(j + 2, len(elements))):
                rows[k] = row_flag(elements, k)
            merges += 1
            i = max(j - 2, 0)
        if merges:
            logger.info("Validation: merged %d undersized elements into neighbours", merges)
        return elements

    def apply(self, elements: Sequence[ParsedElement], config: ParsingConfig) -> List[ParsedElement]:
        # Step 1: drop blank elements
        kept = [e for e in elements if e.text.strip()]
        dropped = len(elements) - len(kept)
        if dropped:
            logger.warning("Validation: dropped %d empty elements", dropped)

        # Step 2: close level gaps, so merge neighbours are judged on final levels
        kept = renumber_levels(kept)

        # Step 3: merge undersized elements, then renumber what the merges exposed
        kept = renumber_levels(self._merge_short(kept, config))

        # Step 4: reading order must never go backwards
        index = first_order_violation(kept)
        if index is not None:
            raise OrderingViolationError(
                f"reading order decreases from {kept[index - 1].reading_key} to {kept[index].reading_key}",
                rule_name=self.name,
                element_index=index,
            )

        report = collect_issues(kept)
        for issue in report.issues:
            logger.warning("Validation: %s", issue)
        logger.info("Validation: %d elements, quality score %.2f", len(kept), report.quality_score)
        return kept
