"""Reject marker runs that only look like lists.

A run of paragraphs sharing a marker style is a list candidate. The checks
below catch the usual false positives: numbering that does not start at one
or jumps, minus signs and arrows inside formulas, and hyphens that belong to
the text rather than mark an item.
"""
import re
from typing import List, Optional, Sequence

from graph_rag.config import ListValidationConfig
from pdf_reader.models import ParsedElement
from utils.custom_logger import get_logger

logger = get_logger(__name__)

NUMBER_MARKER = re.compile(r'^(\d+)[.)]')
PARENTHESIZED_NUMBER = re.compile(r'^\((\d+)\)')
LETTER_MARKER = re.compile(r'^([a-zA-Z])[.)]')
ROMAN_MARKER = re.compile(r'^([ivxIVX]+)[.)]')
MINUS_BEFORE_DIGIT = re.compile(r'-\s*\d')

FIRST_VALUES = (
    (NUMBER_MARKER, {"1"}),
    (PARENTHESIZED_NUMBER, {"1"}),
    # A lone "i" opens a roman list as well as a letter list
    (LETTER_MARKER, {"a", "A", "i", "I"}),
    (ROMAN_MARKER, {"i", "I"}),
)

MATH_NOTATION = (
    re.compile(r'\w+\^\w+'),
    re.compile(r'\w+_\w+'),
    re.compile(r'[α-ω]'),
    re.compile(r'\b[xy]\s*='),
    re.compile(r'\d+\s*='),
)


def starts_at_first_value(text: str) -> bool:
    """True unless ``text`` opens with an ordinal marker other than the first one (1, a, i)."""
    text = text.strip()
    for pattern, first_values in FIRST_VALUES:
        match = pattern.match(text)
        if match:
            return match.group(1) in first_values
    return True


def marker_number(text: str, allow_letters: bool = True) -> Optional[int]:
    """Ordinal of a numbered marker ("3." -> 3, "(2)" -> 2, "c)" -> 3), or None."""
    text = text.strip()
    for pattern in (NUMBER_MARKER, PARENTHESIZED_NUMBER):
        match = pattern.match(text)
        if match:
            return int(match.group(1))
    if allow_letters:
        match = LETTER_MARKER.match(text)
        if match:
            return ord(match.group(1).lower()) - ord('a') + 1
    return None


def is_sequential(numbers: Sequence[int], max_gap: int = 0) -> bool:
    """Numbers start at one and never skip more than ``max_gap`` values."""
    if len(numbers) <= 1:
        return True
    if numbers[0] != 1:
        return False
    return all(current - (previous + 1) <= max_gap for previous, current in zip(numbers, numbers[1:]))


def parenthetical_starts_at_one(texts: Sequence[str]) -> bool:
    if not any(PARENTHESIZED_NUMBER.match(t.strip()) for t in texts):
        return True
    match = PARENTHESIZED_NUMBER.match(texts[0].strip())
    return bool(match) and match.group(1) == "1"


def in_math_context(texts: Sequence[str], settings: ListValidationConfig) -> bool:
    """Arrow or quantifier symbols used next to formulas or mathematical vocabulary."""
    if not any(symbol in text for text in texts for symbol in settings.math_symbols):
        return False
    for text in texts:
        lowered = text.lower()
        if any(term in lowered for term in settings.math_terms):
            return True
        if any(pattern.search(lowered) for pattern in MATH_NOTATION):
            return True
    return False


def continues_word(text: str) -> bool:
    """Letters on both sides of the first hyphen, as in "well-known"."""
    before, hyphen, after = text.partition('-')
    if not hyphen:
        return False
    return any(c.isalpha() for c in before) and any(c.isalpha() for c in after)


def valid_hyphen_items(texts: Sequence[str], settings: ListValidationConfig) -> bool:
    if not any(t.strip().startswith('-') for t in texts):
        return True

    strategy = settings.hyphen_strategy
    if strategy == "reject":
        return False
    if strategy == "strict":
        marker = "- " if settings.require_space_after_hyphen else "-"
        return all(
            t.strip().startswith(marker) and not continues_word(t) and not MINUS_BEFORE_DIGIT.search(t)
            for t in texts
        )
    if strategy == "context_aware":
        return not any(continues_word(t) or MINUS_BEFORE_DIGIT.search(t) for t in texts)
    return True


def list_rejection(items: Sequence[ParsedElement], settings: ListValidationConfig) -> Optional[str]:
    """Name of the first failed check for a candidate list, or None when it passes."""
    if not settings.enabled:
        return None
    texts: List[str] = [item.text for item in items]

    if settings.first_item_validation and not starts_at_first_value(texts[0]):
        return "first item"
    if settings.parenthetical_context_check and not parenthetical_starts_at_one(texts):
        return "parenthetical numbering"
    if settings.sequential_numbering_check:
        numbers = [n for n in (marker_number(t, settings.allow_letter_sequences) for t in texts) if n is not None]
        if not is_sequential(numbers, settings.max_gap_tolerance):
            return "sequential numbering"
    if settings.mathematical_context_check and in_math_context(texts, settings):
        return "mathematical context"
    if settings.hyphen_context_check and not valid_hyphen_items(texts, settings):
        return "hyphen context"
    return None


def is_valid_list(items: Sequence[ParsedElement], settings: ListValidationConfig) -> bool:
    reason = list_rejection(items, settings)
    if reason:
        logger.debug("List candidate starting '%s' rejected: %s", items[0].text[:40], reason)
    return reason is None
