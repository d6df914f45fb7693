"""Tests for response path extraction and terminal rendering."""

import pytest

from httpedit.response import extract_value, format_response, parse_path
from tests.conftest import make_response

DATA = {"data": {"items": [{"token": "first"}, {"token": "second"}], "Count": 2}}


class TestParsePath:
    def test_mixed_segments(self):
        assert parse_path("a.b[2].3") == ["a", "b", 2, 3]

    def test_negative_index(self):
        assert parse_path("items[-1]") == ["items", -1]

    def test_empty(self):
        assert parse_path("") == []


class TestExtractValue:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("data.items[0].token", "first"),
            ("data.items.1.token", "second"),
            ("data.items[-1].token", "second"),
            ("body.data.count", 2),
            ("DATA.ITEMS[0].Token", "first"),
        ],
    )
    def test_found(self, path, expected):
        assert extract_value(DATA, path) == expected

    @pytest.mark.parametrize("path", ["data.missing", "data.items[5].token", "data.count.deeper"])
    def test_missing(self, path):
        assert extract_value(DATA, path) is None

    def test_json_string_decoded(self):
        assert extract_value('{"token": "t"}', "token") == "t"

    def test_non_json_string(self):
        assert extract_value("<html>", "token") is None


class TestFormatResponse:
    def test_default(self):
        out = format_response(make_response(data={"a": 1}))
        assert out == 'STATUS: 200 OK\nTIME: 42ms\nBODY:\n{\n  "a": 1\n}'

    def test_verbose_headers(self):
        resp = make_response(data="hi", headers={"Content-Type": "text/plain"})
        out = format_response(resp, verbose=True)
        assert "HEADERS:\n  Content-Type: text/plain\nBODY:\nhi" in out

    def test_headers_hidden_by_default(self):
        resp = make_response(data="hi", headers={"Content-Type": "text/plain"})
        assert "HEADERS" not in format_response(resp)

    def test_raw(self):
        assert format_response(make_response(data=[1]), raw=True) == "[\n  1\n]"
        assert format_response(make_response(data="text"), raw=True) == "text"
        assert format_response(make_response(data=None), raw=True) == ""

    def test_empty_body_omitted(self):
        assert format_response(make_response(data="")) == "STATUS: 200 OK\nTIME: 42ms"

    def test_error(self):
        assert format_response(make_response(error="Request timed out after 5s")) == (
            "ERROR: Request timed out after 5s"
        )
