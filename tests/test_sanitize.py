# tests/test_sanitize.py

from cleancloak.utils.sanitize import (
    BIO_MAX_LENGTH, clean_bio, clean_short_text, sanitize_bio, sanitize_text,
)


def test_script_block_removed_with_body():
    assert sanitize_bio("<script>alert(1)</script>hello") == "hello"


def test_tags_and_event_handlers_removed():
    assert sanitize_text('<b onclick="steal()">bold</b> text') == "bold text"
    assert sanitize_text('click onmouseover="x()" here') == "click here"


def test_javascript_uri_and_null_bytes_removed():
    assert sanitize_text("JavaScript:alert(1)") == "alert(1)"
    assert sanitize_text("a\0b") == "ab"


def test_bio_truncated_to_max_length():
    assert len(sanitize_bio("x" * 800)) == BIO_MAX_LENGTH == 500
    assert clean_bio("  keeps spacing ") == "  keeps spacing "


def test_short_text_trimmed_and_non_strings_untouched():
    assert clean_short_text("  <i>Jane</i> ") == "Jane"
    assert clean_short_text(" Nairobi\0 ") == "Nairobi"
    assert clean_short_text(None) is None
    assert clean_short_text(["home-cleaning"]) == ["home-cleaning"]
