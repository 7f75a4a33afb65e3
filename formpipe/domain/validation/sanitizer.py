"""Output sanitization for vetted submission fields.

Pure string transforms with no failure modes. `sanitize_field` is not
idempotent: each pass escapes the ampersands produced by the previous one
(`&` -> `&amp;` -> `&amp;amp;`), so apply it exactly once, at the hand-off to
HTML output.
"""

import re
from typing import Dict, Mapping

HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

_RESERVED = re.compile(r"[&<>\"']")
_NEWLINE = re.compile(r"\r\n|\n\r|\r|\n")


def escape_html(value: str) -> str:
    """Replace the five HTML-reserved characters with named entities."""
    return _RESERVED.sub(lambda match: HTML_ENTITIES[match.group(0)], value)


def sanitize_field(value: str) -> str:
    """Trim surrounding whitespace, then HTML-escape.

    >>> sanitize_field("  <b>hi</b>  ")
    '&lt;b&gt;hi&lt;/b&gt;'
    """
    return escape_html(value.strip())


def sanitize_all(fields: Mapping[str, str]) -> Dict[str, str]:
    """Apply `sanitize_field` to every value, keeping keys and order."""
    return {key: sanitize_field(value) for key, value in fields.items()}


def nl2br(value: str) -> str:
    """Insert `<br />` before every line break, for display in HTML bodies."""
    return _NEWLINE.sub(lambda match: "<br />" + match.group(0), value)
