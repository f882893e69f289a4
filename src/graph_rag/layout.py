"""Geometry helpers shared by clustering, validation and grouping."""
from typing import List, Sequence

from pdf_reader.models import ParsedElement, TextElement


def effective_line_height(a: TextElement, b: TextElement, min_line_height: float) -> float:
    """Larger of the two fragment heights, floored by ``min_line_height``."""
    return max(a.line_height, b.line_height, min_line_height)


def vertical_gap(upper: TextElement, lower: TextElement) -> float:
    """Distance from the bottom of ``upper`` to the top of ``lower`` (negative when they overlap)."""
    return lower.bbox.top - upper.bbox.bottom


def on_same_line(a: TextElement, b: TextElement, line_height: float, tolerance_ratio: float) -> bool:
    return a.page == b.page and abs(a.bbox.top - b.bbox.top) <= tolerance_ratio * line_height


def shares_row(a: ParsedElement, b: ParsedElement, min_line_height: float, tolerance_ratio: float) -> bool:
    """True when two elements sit side by side on one text row without overlapping horizontally."""
    first_a, first_b = a.first_fragment, b.first_fragment
    if first_a.page != first_b.page:
        return False
    line_height = effective_line_height(first_a, first_b, min_line_height)
    if not on_same_line(first_a, first_b, line_height, tolerance_ratio):
        return False
    return a.bbox.right <= b.bbox.left or b.bbox.right <= a.bbox.left


def row_members(elements: Sequence[ParsedElement], min_line_height: float,
                tolerance_ratio: float) -> List[bool]:
    """Flag elements that share a text row with a neighbour in reading order."""
    flags = [False] * len(elements)
    for i in range(len(elements) - 1):
        if shares_row(elements[i], elements[i + 1], min_line_height, tolerance_ratio):
            flags[i] = True
            flags[i + 1] = True
    return flags
