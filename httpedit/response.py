"""httpedit response - value extraction and CLI rendering of responses."""

from __future__ import annotations

import json
import re
from typing import Any

from httpedit.models import HttpResponse

# data.items[0].token  ->  ["data", "items", 0, "token"]
_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(-?\d+)\]")


def parse_path(path: str) -> list[str | int]:
    """Split a response path into dict keys (str) and list indices (int).

    Bare numeric dot segments (``items.0``) are indices too.
    """
    segments: list[str | int] = []
    for key, index in _SEGMENT_RE.findall(path.strip()):
        if index:
            segments.append(int(index))
        elif key.strip().lstrip("-").isdigit():
            segments.append(int(key))
        elif key.strip():
            segments.append(key.strip())
    return segments


def _ci_get(d: dict[str, Any], key: str) -> tuple[bool, Any]:
    if key in d:
        return True, d[key]
    lower = key.lower()
    for k, v in d.items():
        if str(k).lower() == lower:
            return True, v
    return False, None


def extract_value(data: Any, path: str) -> Any:
    """Return the value at path inside a decoded JSON body, or None.

    Keys match case-insensitively; a leading ``body.`` is ignored. A JSON
    string body is decoded first.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None

    path = path.strip()
    if path.lower().startswith("body."):
        path = path[5:]

    current = data
    for seg in parse_path(path):
        if isinstance(seg, int) and isinstance(current, list):
            try:
                current = current[seg]
            except IndexError:
                return None
        elif isinstance(current, dict):
            found, current = _ci_get(current, str(seg))
            if not found:
                return None
        else:
            return None
    return current


def format_response(
    response: HttpResponse,
    verbose: bool = False,
    raw: bool = False,
) -> str:
    """Render a response for the terminal.

    Default:
        STATUS: 200 OK
        TIME: 45ms
        BODY:
        {...}
    verbose adds a HEADERS section; raw prints only the body.
    """
    if response.error:
        return f"ERROR: {response.error}"

    body = response.data
    if raw:
        if isinstance(body, dict | list):
            return json.dumps(body, indent=2)
        return str(body) if body is not None else ""

    status = f"{response.status} {response.status_text}".strip()
    lines = [f"STATUS: {status}", f"TIME: {int(response.duration_ms)}ms"]

    if verbose and response.headers:
        lines.append("HEADERS:")
        for key, value in response.headers.items():
            lines.append(f"  {key}: {value}")

    if body is not None and body != "":
        lines.append("BODY:")
        if isinstance(body, dict | list):
            lines.append(json.dumps(body, indent=2))
        else:
            lines.append(str(body))

    return "\n".join(lines)
