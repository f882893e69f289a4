import re
from typing import Optional, Sequence

def extract_section_number(text: str) -> Optional[str]:
    """Extract section number from text if it exists.

    Args:
        text: Input text line

    Returns:
        Section number (e.g., "1.3.1") or None if not found
    """
    text = text.strip()

    # "1)" style markers are list items, not sections
    if re.match(r'^\d+\)', text):
        return None

    # Match "1 Title", "1. Title", "1.2 Title", "1.2.3 Title"
    match = re.match(r'^(\d+(?:\.\d+)*)\.?\s', text)
    if match:
        return match.group(1)

    # Entire line is just a section number (multi-line headers): "1", "1.2"
    match = re.match(r'^(\d+(?:\.\d+)*)$', text)
    if match:
        return match.group(1)

    return None

def get_section_level(section_id: str) -> int:
    """Determine the hierarchical level of a section based on its ID.

    Args:
        section_id: Section identifier (e.g., "1.3.1")

    Returns:
        Level depth (e.g., 3 for "1.3.1")
    """
    return len(section_id.split('.'))

def clean_text(text: str) -> str:
    """Collapse whitespace runs into single spaces and trim."""
    return re.sub(r'\s+', ' ', text).strip()

def is_page_number(line: str) -> bool:
    """Standalone page numbers such as "12", "- 12 -" or "Page 3 of 10"."""
    line = line.strip()
    return bool(
        re.match(r'^\d+$', line)
        or re.match(r'^[-–]\s*\d+\s*[-–]$', line)
        or re.match(r'^[Pp]age\s+\d+(\s+of\s+\d+)?$', line)
    )

def list_marker_style(text: str, bullet_markers: Sequence[str],
                      numbered_patterns: Sequence[str]) -> Optional[str]:
    """Return the marker style of a list item ("bullet:•", "numbered:0"), or None.

    Args:
        text: Element text
        bullet_markers: Glyphs that open a bulleted item
        numbered_patterns: Regexes recognising numbered items, checked in order

    Returns:
        A style key shared by items of the same list, or None if the text is not a list item
    """
    text = text.strip()
    if not text:
        return None

    for marker in bullet_markers:
        # Require content after the marker so a lone dash is not a list
        if text.startswith(marker) and len(text) > len(marker) and text[len(marker)].isspace():
            return f"bullet:{marker}"

    for index, pattern in enumerate(numbered_patterns):
        if re.match(pattern, text):
            return f"numbered:{index}"

    return None
