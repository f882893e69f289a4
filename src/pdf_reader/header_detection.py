from collections import Counter
from typing import Dict, List, Set

from .models import TextElement
from .text_utils import clean_text, is_page_number

def identify_headers_footers(pages: Dict[int, List[TextElement]]) -> Set[str]:
    """Identify repeated text that appears on multiple pages (headers/footers).

    Args:
        pages: Text elements per page number, each list in reading order

    Returns:
        Set of text strings that appear to be headers or footers
    """
    text_frequency = Counter()

    # Collect text from top and bottom of each page
    for page_num in sorted(pages)[:10]:  # Sample first 10 pages
        lines = [clean_text(e.text) for e in pages[page_num] if e.text.strip()]

        # Count each candidate once per page
        candidates = set(lines[:3] + lines[-3:])
        for line in candidates:
            if len(line) > 10:  # Only consider substantial text
                text_frequency[line] += 1

    # Find text that appears on multiple pages (likely headers/footers)
    return {text for text, count in text_frequency.items() if count >= 3}

def should_skip_element(element: TextElement, headers_footers: Set[str]) -> bool:
    """Check if an element is page furniture (running header/footer or page number).

    Args:
        element: Extracted text element
        headers_footers: Set of identified headers/footers

    Returns:
        True if the element should be left out of the document
    """
    line = clean_text(element.text)
    if not line:
        return False
    return line in headers_footers or is_page_number(line)
