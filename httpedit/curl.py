"""httpedit curl - convert between requests and curl command lines."""

from __future__ import annotations

import logging
import re
import shlex

from httpedit.bodytype import content_type_of, detect_body_type
from httpedit.models import Request
from httpedit.redaction import template_credentials
from httpedit.templating import smart_encode, split_url

logger = logging.getLogger(__name__)

POSIX = "posix"
WINDOWS = "windows"
DIALECTS = (POSIX, WINDOWS)

IMPORTED_NAME = "Imported from cURL"

_DATA_FLAGS = ("-d", "--data", "--data-raw", "--data-binary", "--data-urlencode", "--json")
# http(s) URLs and {{host}}/... templates
_URL_RE = re.compile(r"^(https?://|\{\{)", re.IGNORECASE)


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _tokenize(cmd: str) -> list[str]:
    try:
        return shlex.split(cmd)
    except ValueError as e:
        logger.warning("Could not tokenize curl command (%s), splitting on whitespace", e)
        return cmd.split()


def _encode_form_segment(value: str) -> str:
    value = value.strip()
    if "=" in value:
        key, _, raw = value.partition("=")
        return f"{smart_encode(key)}={smart_encode(raw)}"
    return smart_encode(value)


def parse_curl(curl_command: str) -> Request:
    """Parse a curl command string into a Request.

    Handles -X/--request, -H/--header, the -d/--data family, --json,
    -L/--location, quoted strings and line continuations. Never raises:
    anything it can't make sense of is left at its default (GET, empty URL,
    no headers, empty body).
    """
    request = Request(name=IMPORTED_NAME, body_type="text")

    # Normalize line continuations (POSIX backslash, PowerShell backtick)
    cmd = re.sub(r"[\\`][ \t]*\r?\n", " ", curl_command or "").strip()

    tokens = _tokenize(cmd)
    if tokens and tokens[0].lower() == "curl":
        tokens = tokens[1:]

    method = None
    url_after_method = None
    bare_url = None
    location_url = None
    segments: list[tuple[str, str]] = []

    i = 0
    while i < len(tokens):
        tok = tokens[i]
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None

        if tok in ("-X", "--request") and nxt is not None:
            if method is None:
                method = nxt.upper()
                after = tokens[i + 2] if i + 2 < len(tokens) else None
                if after is not None and _URL_RE.match(_strip_quotes(after)):
                    url_after_method = after
            i += 2
        elif tok in ("-H", "--header") and nxt is not None:
            key, colon, value = nxt.partition(":")
            key, value = key.strip(), _strip_quotes(value)
            if colon and key and value:
                request.headers[key] = value
            i += 2
        elif tok in _DATA_FLAGS and nxt is not None:
            segments.append((tok, nxt))
            if tok == "--json":
                request.headers.setdefault("Content-Type", "application/json")
                request.headers.setdefault("Accept", "application/json")
            i += 2
        elif tok in ("-L", "--location"):
            if nxt is not None and not nxt.startswith("-"):
                if location_url is None:
                    location_url = nxt
                i += 2
            else:
                i += 1
        elif tok.startswith("-"):
            # Unknown flag: consume its value unless that looks like the URL
            if nxt is not None and not nxt.startswith("-") and not _URL_RE.match(nxt):
                i += 2
            else:
                i += 1
        else:
            if bare_url is None and _URL_RE.match(_strip_quotes(tok)):
                bare_url = tok
            i += 1

    if method:
        request.method = method

    target = url_after_method or bare_url or location_url
    if target:
        request.url, request.query_params = split_url(target.strip().strip("'\""))

    if segments:
        form = any(flag == "--data-urlencode" for flag, _ in segments) or (
            "application/x-www-form-urlencoded" in content_type_of(request.headers)
        )
        if form:
            parts = [
                _encode_form_segment(value) if flag == "--data-urlencode" else value.strip()
                for flag, value in segments
            ]
            request.body = "&".join(parts)
        else:
            request.body = "\n".join(value for _, value in segments)

    request.body_type = detect_body_type(request.headers, request.body)
    return request


# ── Building ─────────────────────────────────────────────────────────────


def _posix_quote(s: str) -> str:
    return "'" + s.replace("'", "'\\''") + "'"


def _windows_quote(s: str, body: bool = False) -> str:
    if body:
        s = s.replace("\\", "\\\\").replace('"', '\\"').replace("\r", "").replace("\n", "\\n")
    else:
        s = s.replace('"', '\\"')
    return f'"{s}"'


def build_curl(request: Request, dialect: str = POSIX, for_pre_auth: bool = False) -> str:
    """Render a request as a curl command line.

    posix quotes with single quotes and joins flag groups with backslash
    continuations; windows uses double quotes and PowerShell backticks.
    With for_pre_auth the body's credential values become {{username}} /
    {{password}} placeholders, whitespace is collapsed and the whole
    command stays on one line.
    """
    windows = dialect == WINDOWS
    quote = _windows_quote if windows else _posix_quote

    parts = [f"curl -X {request.method} {quote(request.full_url)}"]

    for key, value in request.headers.items():
        if key and value:
            parts.append(f"-H {quote(f'{key}: {value}')}")

    body = request.body or ""
    if body.strip():
        if for_pre_auth:
            body = re.sub(r"\s+", " ", template_credentials(body) or "").strip()
        if windows:
            parts.append(f"-d {_windows_quote(body, body=True)}")
        else:
            parts.append(f"-d {_posix_quote(body)}")

    if for_pre_auth:
        return " ".join(parts)
    return (" `\n  " if windows else " \\\n  ").join(parts)
