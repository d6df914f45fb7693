"""httpedit templating - {{name}} placeholders, smart encoding, URL helpers."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Mapping
from urllib.parse import quote, unquote

from httpedit.models import QueryParam, Request

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

# Characters encodeURIComponent leaves alone.
_UNRESERVED = "-_.!~*'()"


def _placeholder_for(name: str) -> re.Pattern:
    return re.compile(r"\{\{\s*" + re.escape(name) + r"\s*\}\}")


def extract_variables(text: str | None) -> list[str]:
    """Return placeholder names in order of appearance (duplicates kept)."""
    if not text:
        return []
    return PLACEHOLDER_RE.findall(text)


def substitute(text: str | None, variables: Mapping[str, str] | None) -> str | None:
    """Replace {{name}} placeholders with values from variables.

    Placeholders without a matching variable are left untouched.
    """
    if not text or not variables:
        return text

    def _replace(m: re.Match) -> str:
        name = m.group(1)
        if name in variables:
            value = variables[name]
            return "" if value is None else str(value)
        return m.group(0)

    return PLACEHOLDER_RE.sub(_replace, text)


def count_usages(request: Request, variable_name: str) -> int:
    """Count {{variable_name}} occurrences in the URL, header values and body."""
    pattern = _placeholder_for(variable_name)
    count = len(pattern.findall(request.full_url or ""))
    for value in request.headers.values():
        if value:
            count += len(pattern.findall(value))
    if request.body:
        count += len(pattern.findall(request.body))
    return count


def smart_encode(text: str | None) -> str:
    """Percent-encode text, copying {{name}} placeholders through verbatim."""
    if not text:
        return ""
    out: list[str] = []
    last = 0
    for m in PLACEHOLDER_RE.finditer(text):
        if m.start() > last:
            out.append(quote(text[last : m.start()], safe=_UNRESERVED))
        out.append(m.group(0))
        last = m.end()
    if last < len(text):
        out.append(quote(text[last:], safe=_UNRESERVED))
    return "".join(out)


def parse_query_string(query: str) -> list[QueryParam]:
    """Decode a raw query string into enabled QueryParam entries."""
    params: list[QueryParam] = []
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        if not key:
            continue
        params.append(QueryParam(key=unquote(key), value=unquote(value), enabled=True))
    return params


def split_url(target: str) -> tuple[str, list[QueryParam]]:
    """Split a request target at the first ``?`` into base URL and params."""
    base, sep, query = target.partition("?")
    if not sep:
        return target, []
    return base, parse_query_string(query)


def compose_url(base: str, params: Iterable[QueryParam] | None) -> str:
    pairs = [
        f"{smart_encode(p.key)}={smart_encode(p.value)}"
        for p in params or []
        if p.enabled and p.key
    ]
    if not pairs:
        return base
    return f"{base}?{'&'.join(pairs)}"


def resolve_request(request: Request, variables: Mapping[str, str] | None = None) -> Request:
    """Return a copy of request with placeholders substituted.

    The copy carries the full URL (query params folded in) so it can be
    handed straight to the transport. The original request is not touched.
    """
    if variables is None:
        variables = request.variables
    return dataclasses.replace(
        request,
        url=substitute(request.full_url, variables) or "",
        query_params=[],
        headers={k: substitute(v, variables) or "" for k, v in request.headers.items()},
        body=substitute(request.body, variables) or "",
        variables=dict(variables),
    )
