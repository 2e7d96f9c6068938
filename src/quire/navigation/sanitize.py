"""
HTML sanitization for document-supplied markup.

Labels, descriptions, attribution and metadata values are authored by third
parties and may contain HTML. Only a small fixed vocabulary survives; every
other tag is stripped (its text kept), every other attribute removed, and
links are limited to http and https.
"""

from __future__ import annotations

import bleach


ALLOWED_TAGS = frozenset({"a", "b", "br", "img", "p", "i", "span"})

ALLOWED_ATTRIBUTES = {
    "a": ["href"],
    "img": ["src", "alt"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https"})


def sanitize(html: str | None) -> str:
    """
    Clean untrusted HTML.

    Example:
        >>> sanitize('<a href="javascript:alert(1)" onclick="x()">hi</a>')
        '<a>hi</a>'
    """
    if not html:
        return ""
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
