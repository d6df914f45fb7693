"""httpedit preauth - run the @PRE-AUTH bootstrap request and capture its token."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from httpedit.curl import build_curl, parse_curl
from httpedit.executor import execute_request
from httpedit.models import HttpResponse, PreAuthConfig, Request
from httpedit.response import extract_value
from httpedit.templating import resolve_request, substitute

logger = logging.getLogger(__name__)

# Session-only variable the captured token is exposed as.
TOKEN_VARIABLE = "auth"


class PreAuthError(RuntimeError):
    """The bootstrap request could not produce a token."""


def find_bootstrap(requests: list[Request]) -> Request | None:
    for req in requests:
        if req.is_bootstrap:
            return req
    return None


def hydrate_pre_auth(requests: list[Request]) -> PreAuthConfig | None:
    """Build the live pre-auth config from the document's bootstrap request.

    Credentials in the bootstrap body are turned into {{username}} /
    {{password}} placeholders; literal username/password start out empty.
    """
    bootstrap = find_bootstrap(requests)
    if bootstrap is None:
        return None
    return PreAuthConfig(
        enabled=True,
        curl_command=build_curl(bootstrap, for_pre_auth=True),
        response_path=bootstrap.pre_auth.response_path if bootstrap.pre_auth else "",
    )


def credential_variables(
    config: PreAuthConfig,
    variables: Mapping[str, str] | None,
) -> dict[str, str]:
    """Document/config variables with the config's literal credentials on top."""
    merged = dict(variables or {})
    if config.username:
        merged["username"] = config.username
    if config.password:
        merged["password"] = config.password
    return merged


def render_pre_auth_command(config: PreAuthConfig, variables: Mapping[str, str] | None) -> str:
    """The pre-auth curl command with real values substituted. Not for persistence."""
    return substitute(config.curl_command, credential_variables(config, variables)) or ""


def execute_pre_auth(
    config: PreAuthConfig,
    variables: Mapping[str, str] | None,
    send: Callable[..., HttpResponse] = execute_request,
    timeout: int = 30,
    verify: bool = True,
) -> str:
    """Execute the bootstrap command and return the value at response_path.

    The command is parsed before substitution so credential values never
    have to survive shell quoting.

    Raises PreAuthError when the config is incomplete, the request fails,
    or nothing is found at the response path.
    """
    if not config.curl_command or not config.response_path:
        raise PreAuthError("Pre-auth configuration is incomplete")

    template = parse_curl(config.curl_command)
    if not template.url:
        raise PreAuthError("Pre-auth command has no URL")

    request = resolve_request(template, credential_variables(config, variables))
    logger.debug("Running pre-auth %s %s", request.method, request.url)
    response = send(request, timeout=timeout, verify=verify)

    if response.error:
        logger.warning("Pre-auth request failed: %s", response.error)
        raise PreAuthError(f"Pre-auth request failed: {response.error}")
    if response.is_error:
        logger.warning("Pre-auth request returned HTTP %s", response.status)
        status = f"{response.status} {response.status_text}".strip()
        raise PreAuthError(f"Pre-auth request returned HTTP {status}")

    value = extract_value(response.data, config.response_path)
    if value is None or value == "":
        raise PreAuthError(f"Could not extract a value at response path '{config.response_path}'")
    if isinstance(value, dict | list):
        raise PreAuthError(f"Value at response path '{config.response_path}' is not a scalar")
    return str(value)
