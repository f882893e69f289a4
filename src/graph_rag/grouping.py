"""Group validated paragraphs into synthesized List and Table containers.

Grouping only gathers runs of consecutive elements, so reading order is
untouched and every element stays in exactly one container.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from graph_rag.config import ParsingConfig
from graph_rag.layout import shares_row
from graph_rag.list_validation import is_valid_list
from pdf_reader.models import ElementType, ParsedElement
from pdf_reader.text_utils import list_marker_style
from utils.custom_logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ElementGroup:
    element_type: ElementType
    level: int
    children: Tuple[Union[ParsedElement, "ElementGroup"], ...]

    @property
    def reading_key(self):
        return self.children[0].reading_key


Item = Union[ParsedElement, ElementGroup]


def _fits_depth(level: int, extra: int, config: ParsingConfig) -> bool:
    settings = config.section_and_hierarchy
    return not settings.enforce_max_depth or level + extra <= settings.max_depth


def _row_at(elements: Sequence[Item], start: int, config: ParsingConfig) -> List[ParsedElement]:
    """Paragraphs from ``start`` that sit side by side on one text row."""
    first = elements[start]
    if not isinstance(first, ParsedElement) or first.element_type != ElementType.PARAGRAPH:
        return []
    clustering = config.spatial_clustering
    row = [first]
    for candidate in elements[start + 1:]:
        if (not isinstance(candidate, ParsedElement)
                or candidate.element_type != ElementType.PARAGRAPH
                or candidate.level != first.level
                or not shares_row(row[-1], candidate, clustering.min_line_height,
                                  clustering.line_grouping_tolerance)):
            break
        row.append(candidate)
    return row


def _same_columns(row: List[ParsedElement], template: List[ParsedElement], tolerance: float) -> bool:
    if len(row) != len(template) or row[0].page_span != template[0].page_span:
        return False
    return all(abs(a.bbox.left - b.bbox.left) <= tolerance for a, b in zip(row, template))


def group_tables(elements: Sequence[Item], config: ParsingConfig) -> List[Item]:
    settings = config.table_detection
    result: List[Item] = []
    i = 0
    while i < len(elements):
        first_row = _row_at(elements, i, config)
        if len(first_row) < settings.min_columns:
            result.append(elements[i])
            i += 1
            continue

        rows = [first_row]
        j = i + len(first_row)
        while j < len(elements):
            row = _row_at(elements, j, config)
            if row and row[0].level == first_row[0].level and _same_columns(row, first_row, settings.column_tolerance):
                rows.append(row)
                j += len(row)
            else:
                break

        level = first_row[0].level
        if len(rows) < settings.min_rows or not _fits_depth(level, 2, config):
            result.append(elements[i])
            i += 1
            continue

        table_rows = tuple(
            ElementGroup(
                ElementType.TABLE_ROW,
                level + 1,
                tuple(cell.with_type(ElementType.TABLE_CELL).with_level(level + 2) for cell in row),
            )
            for row in rows
        )
        result.append(ElementGroup(ElementType.TABLE, level, table_rows))
        logger.info("Grouped a %dx%d table on page %d", len(rows), len(first_row), first_row[0].page_span[0])
        i = j
    return result


def group_lists(elements: Sequence[Item], config: ParsingConfig) -> List[Item]:
    settings = config.list_detection
    result: List[Item] = []
    i = 0
    while i < len(elements):
        first = elements[i]
        style = None
        if isinstance(first, ParsedElement) and first.element_type == ElementType.PARAGRAPH:
            style = list_marker_style(first.text, settings.bullet_markers, settings.numbered_patterns)
        if style is None:
            result.append(first)
            i += 1
            continue

        run = [first]
        for candidate in elements[i + 1:]:
            if (not isinstance(candidate, ParsedElement)
                    or candidate.element_type != ElementType.PARAGRAPH
                    or candidate.level != first.level
                    or abs(candidate.bbox.left - first.bbox.left) > settings.indent_tolerance
                    or list_marker_style(candidate.text, settings.bullet_markers,
                                         settings.numbered_patterns) != style):
                break
            run.append(candidate)

        if (len(run) < settings.min_items
                or not _fits_depth(first.level, 1, config)
                or not is_valid_list(run, settings.validation)):
            result.append(first)
            i += 1
            continue

        items = tuple(item.with_type(ElementType.LIST_ITEM).with_level(first.level + 1) for item in run)
        result.append(ElementGroup(ElementType.LIST, first.level, items))
        i += len(run)
    return result


def group_elements(elements: Sequence[ParsedElement], config: ParsingConfig) -> List[Item]:
    """Apply table then list grouping as enabled in ``config``."""
    items: List[Item] = list(elements)
    if config.table_detection.enabled:
        items = group_tables(items, config)
    if config.list_detection.enabled:
        items = group_lists(items, config)
    return items
