import pytest

from pdf_reader.text_utils import (
    clean_text,
    extract_section_number,
    get_section_level,
    is_page_number,
    list_marker_style,
)

BULLETS = ("•", "-", "*")
NUMBERED = (r'^\d+[.)]\s', r'^[a-z]\)\s')


class TestSectionNumbers:
    @pytest.mark.parametrize("text, expected", [
        ("1 Introduction", "1"),
        ("2. Scope", "2"),
        ("1.3.1 Definitions", "1.3.1"),
        ("4.2", "4.2"),
        ("1) first item", None),
        ("Introduction", None),
    ])
    def test_extract(self, text, expected):
        assert extract_section_number(text) == expected

    def test_level_is_depth(self):
        assert get_section_level("1") == 1
        assert get_section_level("1.3.1") == 3


class TestLineHelpers:
    def test_clean_text(self):
        assert clean_text("  two\t words \n") == "two words"

    @pytest.mark.parametrize("line", ["12", "- 4 -", "Page 3", "page 3 of 10"])
    def test_page_numbers(self, line):
        assert is_page_number(line)

    def test_not_page_number(self):
        assert not is_page_number("12 Angry Men")

    def test_list_marker_styles(self):
        assert list_marker_style("• First", BULLETS, NUMBERED) == "bullet:•"
        assert list_marker_style("2) Second", BULLETS, NUMBERED) == "numbered:0"
        assert list_marker_style("b) Third", BULLETS, NUMBERED) == "numbered:1"
        assert list_marker_style("-", BULLETS, NUMBERED) is None
        assert list_marker_style("Plain sentence", BULLETS, NUMBERED) is None
