"""Immutable document graph and its two serialized views.

The graph view nests children under their parents. The sequential view lists
the same nodes in document order, each with breadcrumbs naming its
ancestors, so a consumer can rebuild the nesting without the tree.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pdf_reader.models import BoundingBox, ElementType

SCHEMA_VERSION = "1.0.0"
UNTITLED = "Untitled Document"


@dataclass(frozen=True)
class DocumentInfo:
    title: str = UNTITLED
    page_count: int = 0
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'page_count': self.page_count,
            'schema_version': self.schema_version,
        }


@dataclass(frozen=True)
class DocumentNode:
    id: str
    type: ElementType
    level: int
    text: str
    bbox: Optional[BoundingBox]
    page_span: Optional[Tuple[int, int]]
    children: Tuple["DocumentNode", ...] = ()

    @property
    def title(self) -> str:
        """Label used in breadcrumbs: the node text, or its type for text-less containers."""
        return self.text if self.text.strip() else self.type.value

    def walk(self) -> Iterator[Tuple["DocumentNode", Tuple["DocumentNode", ...]]]:
        """Pre-order traversal yielding (node, ancestors)."""
        stack = [(self, ())]
        while stack:
            node, ancestors = stack.pop()
            yield node, ancestors
            for child in reversed(node.children):
                stack.append((child, ancestors + (node,)))

    def to_dict(self, include_children: bool = True) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type.value,
            'level': self.level,
            'bounding_box': self.bbox.to_dict() if self.bbox else None,
            'page_span': list(self.page_span) if self.page_span else None,
            'text': self.text,
        }
        if include_children:
            data['children'] = [child.to_dict() for child in self.children]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentNode":
        return cls(
            id=data['id'],
            type=ElementType(data['type']),
            level=int(data['level']),
            text=data.get('text', ''),
            bbox=BoundingBox.from_dict(data['bounding_box']) if data.get('bounding_box') else None,
            page_span=tuple(data['page_span']) if data.get('page_span') else None,
            children=tuple(cls.from_dict(child) for child in data.get('children', [])),
        )


@dataclass(frozen=True)
class DocumentGraph:
    document_info: DocumentInfo
    root: DocumentNode

    def nodes(self) -> List[DocumentNode]:
        return [node for node, _ in self.root.walk()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schema_version': self.document_info.schema_version,
            'document_info': self.document_info.to_dict(),
            'root': self.root.to_dict(),
        }

    def to_sequential(self) -> Dict[str, Any]:
        records = []
        for node, ancestors in self.root.walk():
            record = node.to_dict(include_children=False)
            record['breadcrumbs'] = [{'title': a.title, 'level': a.level} for a in ancestors]
            records.append(record)
        return {
            'schema_version': self.document_info.schema_version,
            'document_info': self.document_info.to_dict(),
            'format': 'sequential',
            'nodes': records,
        }

    def to_json(self, output_format: str = "graph") -> str:
        """Serialize deterministically: identical graphs give identical strings."""
        if output_format == "graph":
            payload = self.to_dict()
        elif output_format == "sequential":
            payload = self.to_sequential()
        else:
            raise ValueError(f"Unknown output format '{output_format}' (expected 'graph' or 'sequential')")
        return json.dumps(payload, indent=2, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentGraph":
        if data.get('format') == 'sequential':
            data = {
                'document_info': data['document_info'],
                'root': tree_from_sequential(data['nodes']),
            }
        info = data['document_info']
        return cls(
            document_info=DocumentInfo(
                title=info['title'],
                page_count=int(info['page_count']),
                schema_version=info.get('schema_version', SCHEMA_VERSION),
            ),
            root=DocumentNode.from_dict(data['root']),
        )


def tree_from_sequential(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Rebuild the nested root dict from sequential records.

    Records are in pre-order, so a record with ``n`` breadcrumbs is a child
    of the most recent record that had ``n - 1``.
    """
    if not records:
        raise ValueError("sequential view has no root record")
    path: List[Dict[str, Any]] = []
    root = None
    for record in records:
        node = {k: v for k, v in record.items() if k != 'breadcrumbs'}
        node['children'] = []
        depth = len(record.get('breadcrumbs', []))
        if depth == 0:
            root = node
            path = [node]
            continue
        del path[depth:]
        path[-1]['children'].append(node)
        path.append(node)
    return root
