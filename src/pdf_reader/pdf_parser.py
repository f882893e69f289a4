import json
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import fitz

from .header_detection import identify_headers_footers, should_skip_element
from .models import BoundingBox, TextElement
from .text_utils import clean_text

BOLD_FLAG = 1 << 4
ITALIC_FLAG = 1 << 1


@dataclass
class ExtractionResult:
    elements: List[TextElement] = field(default_factory=list)
    title: Optional[str] = None
    page_count: int = 0


def _line_to_element(line: dict, page_number: int) -> Optional[TextElement]:
    """Build one TextElement from a PyMuPDF line dict, typed by its dominant span.

    Args:
        line: Line dict from ``page.get_text("dict")``
        page_number: 1-based page number

    Returns:
        The element, or None when the line holds no visible text
    """
    spans = [s for s in line.get("spans", []) if s.get("text", "").strip()]
    if not spans:
        return None

    text = clean_text("".join(s["text"] for s in line["spans"]))
    dominant = max(spans, key=lambda s: len(s["text"].strip()))
    font_name = dominant.get("font", "")
    flags = dominant.get("flags", 0)
    x0, y0, x1, y1 = line["bbox"]

    return TextElement(
        text=text,
        page=page_number,
        bbox=BoundingBox(left=x0, top=y0, right=x1, bottom=y1),
        font_name=font_name,
        font_size=round(float(dominant.get("size", 0.0)), 2),
        is_bold=bool(flags & BOLD_FLAG) or "bold" in font_name.lower(),
        is_italic=bool(flags & ITALIC_FLAG) or "italic" in font_name.lower(),
    )

def _extract_page(page: fitz.Page, page_number: int) -> List[TextElement]:
    elements = []
    for block in page.get_text("dict").get("blocks", []):
        if block.get("type", 0) != 0:  # Skip image blocks
            continue
        for line in block.get("lines", []):
            element = _line_to_element(line, page_number)
            if element:
                elements.append(element)
    return sorted(elements, key=lambda e: e.reading_key)

def extract_text_elements(pdf_path: Union[str, Path], skip_running_text: bool = True) -> ExtractionResult:
    """Extract positioned text lines from a PDF.

    Args:
        pdf_path: Path to the PDF file
        skip_running_text: Drop repeated headers/footers and standalone page numbers

    Returns:
        ExtractionResult with elements in reading order, metadata title and page count
    """
    with fitz.open(str(pdf_path)) as doc:
        # Step 1: Collect lines page by page
        pages: Dict[int, List[TextElement]] = defaultdict(list)
        for page in doc:
            pages[page.number + 1] = _extract_page(page, page.number + 1)

        # Step 2: Filter page furniture
        headers_footers = identify_headers_footers(pages) if skip_running_text else set()
        elements = []
        for page_number in sorted(pages):
            for element in pages[page_number]:
                if skip_running_text and should_skip_element(element, headers_footers):
                    continue
                elements.append(element)

        metadata_title = (doc.metadata or {}).get("title") or None
        return ExtractionResult(
            elements=elements,
            title=metadata_title.strip() if metadata_title else None,
            page_count=doc.page_count,
        )

def save_text_elements(elements: List[TextElement], output_path: Union[str, Path]) -> None:
    """Save extracted elements as a JSON snapshot."""
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump([e.to_dict() for e in elements], f, indent=2, ensure_ascii=False)

def load_text_elements(input_path: Union[str, Path]) -> List[TextElement]:
    """Load elements from a JSON snapshot written by ``save_text_elements``."""
    with open(input_path, 'r', encoding='utf-8') as f:
        return [TextElement.from_dict(item) for item in json.load(f)]
