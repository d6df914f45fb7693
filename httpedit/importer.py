"""httpedit importer - Postman collections and curl commands."""

from __future__ import annotations

import json
import logging
from typing import Any

from httpedit.bodytype import detect_body_type
from httpedit.curl import parse_curl
from httpedit.models import METHODS, Request
from httpedit.templating import split_url, smart_encode

logger = logging.getLogger(__name__)


class UnsupportedImportFormat(ValueError):
    """Import payload is neither a Postman collection nor a curl command."""


def parse_import(content: str) -> list[Request]:
    """Auto-detect the payload format and return the requests it holds.

    Raises UnsupportedImportFormat; never returns a partial result.
    """
    text = (content or "").strip()

    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError as e:
            raise UnsupportedImportFormat(f"Invalid JSON format: {e}") from e
        if not isinstance(data, dict):
            raise UnsupportedImportFormat("Invalid JSON format: expected an object")
        requests = parse_postman_collection(data)
        logger.debug("Imported %d request(s) from Postman collection", len(requests))
        return requests

    if text.lower().startswith("curl"):
        return [parse_curl(text)]

    raise UnsupportedImportFormat(
        "Unsupported format. Please provide a Postman collection (JSON) or cURL command.",
    )


def parse_postman_collection(collection: dict) -> list[Request]:
    requests: list[Request] = []
    _walk_items(collection.get("item") or [], requests, "")
    return requests


def _walk_items(items: list, requests: list[Request], prefix: str) -> None:
    """Depth-first walk; folders become ' / '-joined name prefixes."""
    for item in items:
        if not isinstance(item, dict):
            continue
        if "item" in item:
            folder = item.get("name") or "Folder"
            _walk_items(item.get("item") or [], requests, f"{prefix} / {folder}" if prefix else folder)
        elif item.get("request") is not None:
            requests.append(_postman_request(item, prefix))


def _postman_request(item: dict, prefix: str) -> Request:
    req = item.get("request") or {}
    if isinstance(req, str):
        # Shorthand: "request": "https://..."
        req = {"url": req}

    if prefix:
        name = f"{prefix} / {item.get('name') or 'Request'}"
    else:
        name = item.get("name") or "Imported Request"

    method = str(req.get("method") or "GET").upper()
    if method not in METHODS:
        logger.warning("Unsupported method %r in '%s', using GET", method, name)
        method = "GET"

    raw_url = req.get("url")
    if isinstance(raw_url, dict):
        raw_url = raw_url.get("raw") or _url_from_parts(raw_url)
    url, params = split_url(raw_url or "")

    headers: dict[str, str] = {}
    for h in req.get("header") or []:
        if isinstance(h, dict) and h.get("key") and h.get("value") and not h.get("disabled"):
            headers[h["key"]] = h["value"]

    body = ""
    body_type = "text"
    body_def = req.get("body") or {}
    mode = body_def.get("mode")
    if mode == "raw" and body_def.get("raw"):
        body = body_def["raw"]
        body_type = detect_body_type(headers, body)
    elif mode == "urlencoded" and body_def.get("urlencoded"):
        body = _encode_pairs(body_def["urlencoded"])
        body_type = "urlencoded"

    return Request(
        name=name,
        method=method,
        url=url,
        query_params=params,
        headers=headers,
        body=body,
        body_type=body_type,
    )


def _encode_pairs(pairs: list[Any]) -> str:
    return "&".join(
        f"{smart_encode(p.get('key', ''))}={smart_encode(p.get('value') or '')}"
        for p in pairs
        if isinstance(p, dict) and not p.get("disabled")
    )


def _url_from_parts(url: dict) -> str:
    """Rebuild a URL from Postman's structured url object."""
    out = ""
    if url.get("protocol"):
        out += f"{url['protocol']}://"
    host = url.get("host")
    if host:
        out += ".".join(host) if isinstance(host, list) else str(host)
    if url.get("port"):
        out += f":{url['port']}"
    path = url.get("path")
    if path:
        out += "/" + ("/".join(path) if isinstance(path, list) else str(path).lstrip("/"))
    query = _encode_pairs(url.get("query") or [])
    if query:
        out += f"?{query}"
    return out
