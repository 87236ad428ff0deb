# cleancloak/utils/sanitize.py

import re
from typing import Any

BIO_MAX_LENGTH = 500

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")
_EVENT_HANDLER = re.compile(r"""\s*on\w+\s*=\s*["'][^"']*["']""", re.IGNORECASE)
_JS_URI = re.compile(r"javascript:", re.IGNORECASE)


def sanitize_text(value: str) -> str:
    # Script blocks go before generic tags so their body is dropped too.
    value = _SCRIPT_BLOCK.sub("", value)
    value = _HTML_TAG.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    value = _JS_URI.sub("", value)
    return value.replace("\0", "")


def sanitize_bio(bio: str) -> str:
    return sanitize_text(bio)[:BIO_MAX_LENGTH]


def clean_short_text(value: Any) -> Any:
    """
    Sanitize and trim a short profile field (names, address, city, email).
    Non-string values pass through for the field's own type check.
    """
    if isinstance(value, str):
        return sanitize_text(value).strip()
    return value


def clean_bio(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_bio(value)
    return value
