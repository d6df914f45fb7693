"""httpedit executor - send a fully resolved request over HTTP."""

import json
import logging
import time
from typing import Any

import requests

from httpedit.models import HttpResponse, Request

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


def execute_request(
    request: Request,
    timeout: int = 30,
    verify: bool = True,
) -> HttpResponse:
    """Send a request and return a structured response.

    The request is expected to be resolved already (placeholders
    substituted, query params folded into ``full_url``).

    - Body attached only for POST/PUT/PATCH
    - JSON response bodies are decoded, anything else kept as text
    - Never raises: transport failures come back with is_error and error set
    """
    response = HttpResponse()
    method = request.method.upper()

    kwargs: dict[str, Any] = {
        "method": method,
        "url": request.full_url,
        "headers": dict(request.headers),
        "timeout": timeout,
        "allow_redirects": True,
        "verify": verify,
    }
    if request.body and method in BODY_METHODS:
        kwargs["data"] = request.body.encode("utf-8")

    start = time.monotonic()
    try:
        resp = requests.request(**kwargs)
    except requests.exceptions.Timeout:
        response.error = f"Request timed out after {timeout}s"
    except requests.exceptions.ConnectionError as e:
        response.error = f"Connection error: {e}"
    except requests.exceptions.RequestException as e:
        response.error = f"Request failed: {e}"
    except Exception as e:
        response.error = f"Unexpected error: {e}"
    response.duration_ms = (time.monotonic() - start) * 1000

    if response.error:
        logger.warning("%s %s failed: %s", method, kwargs["url"], response.error)
        response.is_error = True
        response.status_text = response.error
        response.data = {"error": response.error}
        return response

    response.status = resp.status_code
    response.status_text = resp.reason or ""
    response.headers = dict(resp.headers)
    response.is_error = resp.status_code >= 400

    try:
        response.data = resp.json()
    except (json.JSONDecodeError, ValueError):
        response.data = resp.text

    logger.debug("%s %s -> %d (%dms)", method, kwargs["url"], response.status, response.duration_ms)
    return response
