"""Stack-based hierarchy construction.

Nodes are collected into mutable ``_OpenNode`` objects while the stack is
live and frozen into ``DocumentNode`` trees once every item is placed. Node
boxes and page spans are computed bottom-up at freeze time so every parent
contains its children.
"""
from typing import List, Optional, Sequence, Tuple

from graph_rag.errors import GraphAssemblyError
from graph_rag.graph import DocumentNode
from graph_rag.grouping import ElementGroup, Item
from pdf_reader.models import BoundingBox, ElementType, ParsedElement

LEAF_TYPES = (
    ElementType.SECTION,
    ElementType.PARAGRAPH,
    ElementType.LIST_ITEM,
    ElementType.TABLE_CELL,
)
GROUP_TYPES = (ElementType.LIST, ElementType.TABLE, ElementType.TABLE_ROW)


class _OpenNode:
    def __init__(self, node_type: ElementType, level: int, text: str = "",
                 bbox: Optional[BoundingBox] = None, page_span: Optional[Tuple[int, int]] = None):
        self.type = node_type
        self.level = level
        self.text = text
        self.bbox = bbox
        self.page_span = page_span
        self.children: List["_OpenNode"] = []

    def freeze(self, node_id: str) -> DocumentNode:
        children = tuple(
            child.freeze(f"{node_id}.{i}" if node_id != "0" else str(i))
            for i, child in enumerate(self.children, start=1)
        )
        boxes = ([self.bbox] if self.bbox else []) + [c.bbox for c in children if c.bbox]
        spans = ([self.page_span] if self.page_span else []) + [c.page_span for c in children if c.page_span]
        page_span = (min(s[0] for s in spans), max(s[1] for s in spans)) if spans else None
        return DocumentNode(
            id=node_id,
            type=self.type,
            level=self.level,
            text=self.text,
            bbox=BoundingBox.union_all(boxes),
            page_span=page_span,
            children=children,
        )


class HierarchyBuilder:
    """Attach each item under the nearest preceding item with a lower level.

    Args:
        max_depth: When set, levels above it are clamped
    """

    def __init__(self, max_depth: Optional[int] = None):
        self.max_depth = max_depth

    def _level(self, level: int, index: int) -> int:
        if not isinstance(level, int) or level < 1:
            raise GraphAssemblyError(f"item {index} has invalid level {level!r}")
        if self.max_depth is not None:
            level = min(level, self.max_depth)
        return level

    def _open(self, item: Item, index: int) -> _OpenNode:
        if isinstance(item, ElementGroup):
            if item.element_type not in GROUP_TYPES or not item.children:
                raise GraphAssemblyError(f"item {index} is an invalid {item.element_type} group")
            node = _OpenNode(item.element_type, self._level(item.level, index))
            for child in item.children:
                child_node = self._open(child, index)
                if child_node.level <= node.level:
                    raise GraphAssemblyError(f"item {index}: group child level does not exceed its container")
                node.children.append(child_node)
            return node
        if isinstance(item, ParsedElement) and item.element_type in LEAF_TYPES:
            return _OpenNode(item.element_type, self._level(item.level, index),
                             text=item.text, bbox=item.bbox, page_span=item.page_span)
        found = getattr(item, 'element_type', type(item).__name__)
        raise GraphAssemblyError(f"item {index} has unrecognized element type {found!r}")

    def build(self, items: Sequence[Item], title: str) -> DocumentNode:
        root = _OpenNode(ElementType.DOCUMENT, 0, text=title)
        stack = [root]
        for index, item in enumerate(items):
            node = self._open(item, index)
            while stack[-1].level >= node.level:
                stack.pop()
            stack[-1].children.append(node)
            stack.append(node)
        return root.freeze("0")
