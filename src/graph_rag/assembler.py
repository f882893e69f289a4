from typing import Optional, Sequence

from graph_rag.builder import HierarchyBuilder
from graph_rag.config import ParsingConfig
from graph_rag.graph import UNTITLED, DocumentGraph, DocumentInfo
from graph_rag.grouping import group_elements
from pdf_reader.models import ElementType, ParsedElement
from utils.custom_logger import get_logger

logger = get_logger(__name__)


def infer_title(elements: Sequence[ParsedElement]) -> str:
    """First large header, else first section, else a placeholder."""
    sections = [e for e in elements if e.element_type == ElementType.SECTION and e.text.strip()]
    for element in sections:
        if element.header_tier == "large":
            return element.text.strip()
    if sections:
        return sections[0].text.strip()
    return UNTITLED


class GraphAssembler:
    """Turn the validated element sequence into a frozen DocumentGraph."""

    def __init__(self, config: ParsingConfig):
        self.config = config

    def assemble(self, elements: Sequence[ParsedElement], title: Optional[str] = None,
                 page_count: Optional[int] = None) -> DocumentGraph:
        """Group, nest and freeze ``elements``.

        Args:
            elements: Output of the rule pipeline, in reading order
            title: Title from document metadata; inferred when missing
            page_count: Page count of the source; derived from fragments when missing

        Returns:
            The document graph rooted at a level-0 Document node
        """
        if not title or not title.strip():
            title = infer_title(elements)
        if page_count is None:
            page_count = max((e.page_span[1] for e in elements), default=0)

        settings = self.config.section_and_hierarchy
        builder = HierarchyBuilder(settings.max_depth if settings.enforce_max_depth else None)
        items = group_elements(elements, self.config)
        root = builder.build(items, title.strip())

        graph = DocumentGraph(DocumentInfo(title=title.strip(), page_count=page_count), root)
        logger.info("Assembled graph '%s': %d nodes over %d pages", graph.document_info.title,
                    len(graph.nodes()), page_count)
        return graph
