"""Builders for positioned text used across the test modules."""
import dataclasses

from graph_rag.config import get_config
from pdf_reader.models import BoundingBox, ElementType, ParsedElement, TextElement


def make_element(text, page=1, top=100.0, left=72.0, size=10.0, bold=False, width=None, height=None):
    height = size * 1.2 if height is None else height
    width = max(len(text) * size * 0.5, 1.0) if width is None else width
    return TextElement(
        text=text,
        page=page,
        bbox=BoundingBox(left, top, left + width, top + height),
        font_name="Helvetica-Bold" if bold else "Helvetica",
        font_size=size,
        is_bold=bold,
    )


def make_parsed(text, element_type=ElementType.PARAGRAPH, level=1, **kwargs):
    element = ParsedElement.from_text_element(make_element(text, **kwargs))
    return element.with_type(element_type).with_level(level)


def config_with(section=None, patterns=None, clustering=None, validation=None, pipeline=None, **top):
    """Generic preset with selected sub-settings replaced."""
    config = get_config("Generic")
    changes = dict(top)
    if section:
        changes['section_and_hierarchy'] = dataclasses.replace(config.section_and_hierarchy, **section)
    if patterns:
        changes['pattern_detection'] = dataclasses.replace(config.pattern_detection, **patterns)
    if clustering:
        changes['spatial_clustering'] = dataclasses.replace(config.spatial_clustering, **clustering)
    if validation:
        changes['validation'] = dataclasses.replace(config.validation, **validation)
    if pipeline is not None:
        changes['pipeline'] = pipeline
    return dataclasses.replace(config, **changes)


BODY_TEXT = "This is body text for the introduction section of the document."
