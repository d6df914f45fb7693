"""httpedit models - requests, documents and responses."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
BODY_TYPES = ("json", "text", "urlencoded", "xml", "html", "javascript")

PRE_AUTH_MARKER = "@PRE-AUTH"


def new_id() -> str:
    return uuid.uuid4().hex


def is_pre_auth_name(name: str | None) -> bool:
    """True if a request name is the @PRE-AUTH marker (case/whitespace-insensitive)."""
    if not name:
        return False
    return "".join(name.split()).upper() == PRE_AUTH_MARKER


@dataclass
class QueryParam:
    key: str
    value: str = ""
    enabled: bool = True


@dataclass
class PreAuthConfig:
    """How to obtain a token before the real request runs.

    curl_command may contain {{username}}, {{password}} or any other
    document placeholder. response_path is a dot path into the JSON
    response. username/password, when set, override the document
    variables of the same name.
    """

    enabled: bool = True
    curl_command: str = ""
    response_path: str = ""
    username: str | None = None
    password: str | None = None


@dataclass
class Request:
    """One saved HTTP call."""

    name: str = ""
    method: str = "GET"
    url: str = ""
    query_params: list[QueryParam] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    body_type: str | None = None
    variables: dict[str, str] = field(default_factory=dict)
    pre_auth: PreAuthConfig | None = None
    is_pre_auth_request: bool = False
    id: str = field(default_factory=new_id)

    @property
    def is_bootstrap(self) -> bool:
        return self.is_pre_auth_request or is_pre_auth_name(self.name)

    @property
    def full_url(self) -> str:
        """Base URL with the enabled query params re-attached."""
        from httpedit.templating import compose_url

        return compose_url(self.url, self.query_params)

    def get_header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        if name in self.headers:
            return self.headers[name]
        lower = name.lower()
        for k, v in self.headers.items():
            if k.lower() == lower:
                return v
        return None


@dataclass
class Document:
    """An ordered list of requests plus the one document-global variable map.

    Every request in ``requests`` holds a reference to ``variables``, never
    a copy.
    """

    requests: list[Request] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)
    pre_auth: PreAuthConfig | None = None

    def __post_init__(self):
        for req in self.requests:
            req.variables = self.variables

    def add(self, request: Request) -> Request:
        request.variables = self.variables
        self.requests.append(request)
        return request

    def find(self, selector: str) -> Request | None:
        """Find a request by list index or by name (case-insensitive)."""
        selector = selector.strip()
        if selector.lstrip("-").isdigit():
            idx = int(selector)
            if -len(self.requests) <= idx < len(self.requests):
                return self.requests[idx]
            return None
        lower = selector.lower()
        for req in self.requests:
            if req.name.lower() == lower:
                return req
        return None


@dataclass
class HttpResponse:
    """Result of sending a request."""

    status: int = 0
    status_text: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None  # parsed JSON or raw text
    duration_ms: float = 0
    is_error: bool = False
    error: str | None = None
