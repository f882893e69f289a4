from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in document points, origin top-left, y grows downward."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            left=min(self.left, other.left),
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )

    def contains(self, other: "BoundingBox", tolerance: float = 1e-6) -> bool:
        return (
            self.left <= other.left + tolerance
            and self.top <= other.top + tolerance
            and self.right >= other.right - tolerance
            and self.bottom >= other.bottom - tolerance
        )

    @classmethod
    def union_all(cls, boxes: Iterable["BoundingBox"]) -> Optional["BoundingBox"]:
        """Union of every box, or None for an empty iterable."""
        result = None
        for box in boxes:
            result = box if result is None else result.union(box)
        return result

    def to_dict(self) -> Dict[str, float]:
        return {
            'left': round(float(self.left), 2),
            'top': round(float(self.top), 2),
            'right': round(float(self.right), 2),
            'bottom': round(float(self.bottom), 2),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "BoundingBox":
        return cls(
            left=float(data['left']),
            top=float(data['top']),
            right=float(data['right']),
            bottom=float(data['bottom']),
        )


@dataclass(frozen=True)
class TextElement:
    """A positioned run of text as produced by the extractor.

    ``page`` is 1-based. Elements are read-only once extracted.
    """
    text: str
    page: int
    bbox: BoundingBox
    font_name: str = ""
    font_size: float = 0.0
    is_bold: bool = False
    is_italic: bool = False

    @property
    def reading_key(self) -> Tuple[int, float, float]:
        return (self.page, self.bbox.top, self.bbox.left)

    @property
    def line_height(self) -> float:
        return self.bbox.height

    def to_dict(self) -> Dict:
        return {
            'text': self.text,
            'page': self.page,
            'bbox': self.bbox.to_dict(),
            'font_name': self.font_name,
            'font_size': float(self.font_size),
            'is_bold': self.is_bold,
            'is_italic': self.is_italic,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "TextElement":
        return cls(
            text=data['text'],
            page=int(data['page']),
            bbox=BoundingBox.from_dict(data['bbox']),
            font_name=data.get('font_name', ''),
            font_size=float(data.get('font_size') or 0.0),
            is_bold=bool(data.get('is_bold', False)),
            is_italic=bool(data.get('is_italic', False)),
        )


class ElementType(str, Enum):
    DOCUMENT = "Document"
    SECTION = "Section"
    PARAGRAPH = "Paragraph"
    LIST = "List"
    LIST_ITEM = "ListItem"
    TABLE = "Table"
    TABLE_ROW = "TableRow"
    TABLE_CELL = "TableCell"


@dataclass(frozen=True)
class ParsedElement:
    """A typed, leveled group of fragments flowing between pipeline rules.

    Instances are never mutated: every rule builds new ones. The reading
    order key is the key of the first constituent fragment.
    """
    element_type: ElementType
    level: int
    fragments: Tuple[TextElement, ...]
    text: str
    bbox: BoundingBox
    font_leveled: bool = False
    header_tier: Optional[str] = None

    def __post_init__(self):
        if not self.fragments:
            raise ValueError("ParsedElement requires at least one fragment")

    @classmethod
    def from_text_element(cls, element: TextElement,
                          element_type: ElementType = ElementType.PARAGRAPH,
                          level: int = 1) -> "ParsedElement":
        return cls(
            element_type=element_type,
            level=level,
            fragments=(element,),
            text=element.text,
            bbox=element.bbox,
        )

    @classmethod
    def combine(cls, parts: List["ParsedElement"], element_type: ElementType,
                level: int, header_tier: Optional[str] = None) -> "ParsedElement":
        """Build one element out of ordered parts, joining their text with spaces."""
        fragments = tuple(f for part in parts for f in part.fragments)
        text = ' '.join(part.text.strip() for part in parts if part.text.strip())
        return cls(
            element_type=element_type,
            level=level,
            fragments=fragments,
            text=text,
            bbox=BoundingBox.union_all(part.bbox for part in parts),
            font_leveled=all(part.font_leveled for part in parts),
            header_tier=header_tier,
        )

    def merged_with(self, other: "ParsedElement") -> "ParsedElement":
        """Absorb ``other`` (which follows this element) keeping this element's type and level."""
        return ParsedElement.combine([self, other], self.element_type, self.level,
                                     header_tier=self.header_tier or other.header_tier)

    def with_type(self, element_type: ElementType, header_tier: Optional[str] = None) -> "ParsedElement":
        return replace(self, element_type=element_type,
                       header_tier=header_tier if header_tier is not None else self.header_tier)

    def with_level(self, level: int, font_leveled: Optional[bool] = None) -> "ParsedElement":
        if font_leveled is None:
            font_leveled = self.font_leveled
        return replace(self, level=level, font_leveled=font_leveled)

    @property
    def reading_key(self) -> Tuple[int, float, float]:
        return self.fragments[0].reading_key

    @property
    def first_fragment(self) -> TextElement:
        return self.fragments[0]

    @property
    def last_fragment(self) -> TextElement:
        return self.fragments[-1]

    @property
    def page_span(self) -> Tuple[int, int]:
        pages = [f.page for f in self.fragments]
        return (min(pages), max(pages))

    @property
    def font_size(self) -> Optional[float]:
        size = self.fragments[0].font_size
        return size if size and size > 0 else None

    @property
    def is_bold(self) -> bool:
        return self.fragments[0].is_bold

    @property
    def char_count(self) -> int:
        return len(self.text.strip())
