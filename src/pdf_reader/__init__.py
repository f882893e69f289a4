"""
PDF Reader Package

Extracts positioned, typographically annotated text elements from PDF
documents. Structuring them into a graph is done by ``graph_rag``.

Simple Usage:
    from pdf_reader import extract_text_elements

    result = extract_text_elements("input.pdf")
"""

from .models import BoundingBox, ElementType, ParsedElement, TextElement
from .pdf_parser import ExtractionResult, extract_text_elements, load_text_elements, save_text_elements

__all__ = [
    "BoundingBox",
    "ElementType",
    "ParsedElement",
    "TextElement",
    "ExtractionResult",
    "extract_text_elements",
    "load_text_elements",
    "save_text_elements",
]
