"""httpedit redaction - keep login secrets out of saved documents."""

from __future__ import annotations

import re

CREDENTIAL_KEYS = ("email", "login", "username", "user", "password", "pass")

USERNAME_KEYS = ("email", "login", "username", "user")
PASSWORD_KEYS = ("password", "pass")

_KEYS_ALT = "|".join(CREDENTIAL_KEYS)

# "key": "value"  /  'key': 'value'  /  key=value; quoted values may hold escapes like \"
_DOUBLE_QUOTED_RE = re.compile(
    r'("(' + _KEYS_ALT + r')"\s*:\s*")((?:[^"\\]|\\.)*)(")', re.IGNORECASE
)
_SINGLE_QUOTED_RE = re.compile(
    r"('(" + _KEYS_ALT + r")'\s*:\s*')((?:[^'\\]|\\.)*)(')", re.IGNORECASE
)
_FORM_RE = re.compile(r"\b(" + _KEYS_ALT + r")=([^&\s]*)", re.IGNORECASE)


def _rewrite(body: str, value_for) -> str:
    body = _DOUBLE_QUOTED_RE.sub(lambda m: m.group(1) + value_for(m.group(2)) + m.group(4), body)
    body = _SINGLE_QUOTED_RE.sub(lambda m: m.group(1) + value_for(m.group(2)) + m.group(4), body)
    return _FORM_RE.sub(lambda m: m.group(1) + "=" + value_for(m.group(1)), body)


def redact(body: str | None) -> str | None:
    """Blank the values of credential fields, leaving the keys in place.

    Covers JSON-style double and single quoted pairs and form-style
    ``key=value`` pairs. Idempotent.
    """
    if not body:
        return body
    return _rewrite(body, lambda key: "")


def template_credentials(body: str | None) -> str | None:
    """Swap credential values for {{username}} / {{password}} placeholders."""
    if not body:
        return body

    def _placeholder(key: str) -> str:
        if key.lower() in PASSWORD_KEYS:
            return "{{password}}"
        return "{{username}}"

    return _rewrite(body, _placeholder)


def has_credentials(body: str | None) -> bool:
    """True if any credential field in body carries a non-empty value."""
    if not body:
        return False
    for pattern, group in ((_DOUBLE_QUOTED_RE, 3), (_SINGLE_QUOTED_RE, 3), (_FORM_RE, 2)):
        if any(m.group(group) for m in pattern.finditer(body)):
            return True
    return False
