"""Shared fixtures for httpedit tests."""

import logging

import pytest
from click.testing import CliRunner

from httpedit import core
from httpedit.models import HttpResponse

SAMPLE_DOCUMENT = """\
@host = https://api.example.com
@token = "abc123"

# Users API
### Get users
GET {{host}}/users?page=1&q={{search}}%20x
Authorization: Bearer {{token}}
Accept: application/json

### Create user
POST {{host}}/users
Content-Type: application/json

{
  "name": "test",
  "tags": ["a", "b"]
}

### @PRE-AUTH
# @responsePath data.token
POST {{host}}/login
Content-Type: application/json

{"username": "bob", "password": "secret"}
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def global_httpedit_dir(tmp_path, monkeypatch):
    """Override the global ~/.httpedit directory to a temp location."""
    fake_global = tmp_path / "fake_home" / ".httpedit"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    return fake_global


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "api.http"
    path.write_text(SAMPLE_DOCUMENT)
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI installs a stderr handler bound to CliRunner's stream; drop it."""
    yield
    logger = logging.getLogger("httpedit")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


def make_response(
    status=200,
    data=None,
    headers=None,
    duration_ms=42.0,
    error=None,
    status_text="OK",
):
    """Factory for HttpResponse objects returned by a mocked transport."""
    return HttpResponse(
        status=0 if error else status,
        status_text=error or status_text,
        headers=headers or {},
        data=data,
        duration_ms=duration_ms,
        is_error=bool(error) or status >= 400,
        error=error,
    )
