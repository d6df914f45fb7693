"""httpedit document - parse and serialize .http request documents.

Grammar, one line at a time:

    @name = value            variable declaration (anywhere, document-global)
    ### title                request separator; "### @PRE-AUTH" marks the
                             auth bootstrap request
    # text / ## text         comment; before the first request it names it,
                             inside the bootstrap request "# @responsePath p"
                             sets the response path, otherwise ignored
    METHOD target            method line; opens a request if none is open
    Key: Value               header (until the first blank line)
    <blank>                  header/body separator
    ...                      body, verbatim, until the next ###
"""

from __future__ import annotations

import enum
import logging
import re
from urllib.parse import urlparse

from httpedit.bodytype import detect_body_type
from httpedit.models import (
    METHODS,
    PRE_AUTH_MARKER,
    Document,
    PreAuthConfig,
    Request,
    is_pre_auth_name,
)
from httpedit.redaction import redact
from httpedit.templating import compose_url, split_url

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.example.com"
DEFAULT_NAME = "New Request"
UNNAMED = "Unnamed Request"

_VARIABLE_RE = re.compile(r"^@([^\s=]+)\s*=(.*)$")
_METHOD_RE = re.compile(r"^(" + "|".join(METHODS) + r")\s+(\S+)", re.IGNORECASE)
_RESPONSE_PATH_RE = re.compile(r"^@responsePath\s+(\S+)", re.IGNORECASE)


class State(enum.Enum):
    BETWEEN = "between"  # no request open, or open without a URL yet
    HEADERS = "headers"
    BODY = "body"


def parse_variable(line: str) -> tuple[str, str] | None:
    """Parse an ``@name = value`` line; surrounding quotes are stripped."""
    m = _VARIABLE_RE.match(line)
    if not m:
        return None
    value = m.group(2).strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return m.group(1), value


def route_name(url: str, method: str | None = None) -> str:
    """Display name derived from a URL: 'METHOD /path', or the URL itself."""
    if not url:
        return ""
    route = url
    if "{{" not in url:
        try:
            parsed = urlparse(url)
        except ValueError:
            parsed = None
        if parsed is not None and parsed.scheme and parsed.netloc:
            route = parsed.path or "/"
            if parsed.query:
                route += "?" + parsed.query
    return f"{method} {route}" if method else route


class DocumentParser:
    """Line-driven state machine for the document grammar.

    Feed lines with step(); finish() flushes the last request and returns
    the Document. Every flushed request shares ``self.variables``.
    """

    def __init__(self):
        self.state = State.BETWEEN
        self.current: Request | None = None
        self.pending_comments: list[str] = []
        self.body_lines: list[str] = []
        self.variables: dict[str, str] = {}
        self.requests: list[Request] = []

    def step(self, raw_line: str) -> State:
        line = raw_line.rstrip("\r")
        stripped = line.strip()

        var = parse_variable(stripped) if stripped.startswith("@") else None
        if var:
            name, value = var
            self.variables[name] = value
            return self.state

        if stripped.startswith("###"):
            self._separator(stripped)
            return self.state

        if self.state is State.BODY:
            self.body_lines.append(line)
            return self.state

        if stripped.startswith("#"):
            self._comment(stripped)
            return self.state

        m = _METHOD_RE.match(stripped)
        if m:
            self._method_line(m.group(1), m.group(2))
            return self.state

        if self.current is None or not self.current.url:
            return self.state

        if not stripped:
            self.state = State.BODY
            return self.state

        if ":" in stripped and not stripped.startswith("//"):
            key, _, value = stripped.partition(":")
            key, value = key.strip(), value.strip()
            if key and value:
                self.current.headers[key] = value
        return self.state

    def feed(self, text: str) -> DocumentParser:
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        for line in lines:
            self.step(line)
        return self

    def finish(self) -> Document:
        self._flush()
        requests = self.requests
        if not requests:
            requests = [
                Request(name=DEFAULT_NAME, method="GET", url=DEFAULT_URL, body="", body_type="text"),
            ]
        doc = Document(requests=requests, variables=self.variables)
        logger.debug("Parsed %d request(s), %d variable(s)", len(requests), len(self.variables))
        return doc

    # ── transitions ──────────────────────────────────────────────────────

    def _separator(self, stripped: str):
        self._flush()
        title = stripped.lstrip("#").strip()
        req = Request(name=title or " ".join(self.pending_comments))
        if is_pre_auth_name(title):
            req.name = PRE_AUTH_MARKER
            req.is_pre_auth_request = True
            req.pre_auth = PreAuthConfig(enabled=True)
        self.current = req
        self.pending_comments = []
        self.body_lines = []
        self.state = State.BETWEEN

    def _comment(self, stripped: str):
        text = stripped.lstrip("#").strip()
        if self.current is None:
            if text:
                self.pending_comments.append(text)
            return
        if self.current.is_pre_auth_request:
            m = _RESPONSE_PATH_RE.match(text)
            if m:
                if self.current.pre_auth is None:
                    self.current.pre_auth = PreAuthConfig(enabled=True)
                self.current.pre_auth.response_path = m.group(1)

    def _method_line(self, method: str, target: str):
        if self.current is None:
            self.current = Request(name=" ".join(self.pending_comments))
            self.pending_comments = []
        if self.current.url:
            return
        url, params = split_url(target)
        self.current.method = method.upper()
        self.current.url = url
        self.current.query_params = params
        self.state = State.HEADERS

    def _flush(self):
        req = self.current
        self.current = None
        if req is None or not req.url:
            return
        lines = self.body_lines
        while lines and not lines[-1].strip():
            lines = lines[:-1]
        req.body = "\n".join(lines)
        if not req.name:
            req.name = route_name(req.url, req.method) or UNNAMED
        if req.body_type is None:
            req.body_type = detect_body_type(req.headers, req.body)
        req.variables = self.variables
        self.requests.append(req)


def parse_document(text: str | None) -> Document:
    """Parse document text. Never raises; an empty document yields one default request."""
    return DocumentParser().feed(text or "").finish()


def parse(text: str | None) -> list[Request]:
    return parse_document(text).requests


# ── Serialization ────────────────────────────────────────────────────────


def serialize(requests: list[Request]) -> str:
    """Render requests back to document text.

    Bootstrap (@PRE-AUTH) bodies are redacted, so credentials typed into
    them never reach disk.
    """
    variables: dict[str, str] = {}
    for req in requests:
        if req.variables:
            variables.update(req.variables)

    out: list[str] = []
    if variables:
        for name, value in variables.items():
            out.append(f"@{name} = {value}\n")
        out.append("\n")

    for req in requests:
        if req.is_bootstrap:
            out.append(f"### {PRE_AUTH_MARKER}\n")
            if req.pre_auth and req.pre_auth.response_path:
                out.append(f"# @responsePath {req.pre_auth.response_path}\n")
        else:
            out.append(f"### {req.name}\n")

        out.append(f"{req.method} {compose_url(req.url, req.query_params)}\n")

        for key, value in req.headers.items():
            if key and value:
                out.append(f"{key}: {value}\n")

        body = req.body or ""
        if req.is_bootstrap:
            body = redact(body) or ""
        if body.strip():
            out.append(f"\n{body}\n")
        out.append("\n")

    logger.debug("Serialized %d request(s)", len(requests))
    return "".join(out)


def serialize_document(doc: Document) -> str:
    return serialize(doc.requests)
