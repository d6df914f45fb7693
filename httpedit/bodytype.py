"""httpedit body type detection."""

from __future__ import annotations

import json
from collections.abc import Mapping

# (substring of content-type, body type); first hit wins
_CONTENT_TYPE_RULES = (
    ("application/json", "json"),
    ("application/x-www-form-urlencoded", "urlencoded"),
    ("xml", "xml"),
    ("html", "html"),
    ("javascript", "javascript"),
)


def content_type_of(headers: Mapping[str, str] | None) -> str:
    """Lower-cased Content-Type header value, or '' if absent."""
    for k, v in (headers or {}).items():
        if k.lower() == "content-type":
            return (v or "").lower()
    return ""


def detect_body_type(headers: Mapping[str, str] | None, body: str | None) -> str:
    """Classify a body as json, urlencoded, xml, html, javascript or text.

    The Content-Type header decides when present; otherwise the trimmed body
    is sniffed.
    """
    ct = content_type_of(headers)
    if ct:
        for needle, body_type in _CONTENT_TYPE_RULES:
            if needle in ct:
                return body_type

    text = (body or "").strip()
    if not text:
        return "text"
    if text.startswith(("{", "[")):
        try:
            json.loads(text)
            return "json"
        except ValueError:
            pass
    if text.startswith("<"):
        return "xml"
    if "=" in text and "&" in text:
        return "urlencoded"
    return "text"
