"""
Tests for the scanned-document classifier.
"""

import pytest

from packslip.extraction import coerce_text, looks_scanned


def test_empty_text_is_scanned():
    assert looks_scanned("")
    assert looks_scanned(None)
    assert looks_scanned("   \n\t ")


def test_short_text_without_keywords_is_scanned():
    """Under 50 characters and no order-document words"""
    assert looks_scanned("Page 1 of 1\nABC-123")


def test_long_text_is_never_scanned():
    text = "x" * 101

    assert not looks_scanned(text)


def test_medium_text_with_keyword_is_not_scanned():
    text = "Customer PO 4471 ship date 03/02 qty 12 pc"

    assert not looks_scanned(text)


def test_medium_text_without_keyword_is_scanned():
    """Between 30 and 50 characters but nothing that looks like an order"""
    text = "zzzz " * 9

    assert looks_scanned(text)


def test_threshold_counts_non_whitespace_only():
    """Whitespace padding cannot push thin text over the threshold"""
    text = "qty" + " " * 500 + "12"

    assert looks_scanned(text)


def test_between_fifty_and_hundred_is_not_scanned():
    text = "z" * 60

    assert not looks_scanned(text)


@pytest.mark.parametrize("value, expected", [
    (None, ""),
    ("plain", "plain"),
    (b"bytes", "bytes"),
    ({"text": "from dict"}, "from dict"),
    (["line one", "line two"], "line one\nline two"),
])
def test_coerce_text_shapes(value, expected):
    assert coerce_text(value) == expected


def test_coerce_text_reads_text_attribute():
    class Page:
        text = "page text"

    assert coerce_text(Page()) == "page text"
    assert looks_scanned({"text": "x" * 120}) is False
