"""Tests for the HTTP transport."""

from unittest.mock import MagicMock, patch

import requests

from httpedit.executor import execute_request
from httpedit.models import QueryParam, Request


def _fake_response(status=200, reason="OK", json_data=None, text="", headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.reason = reason
    resp.headers = headers or {"Content-Type": "application/json"}
    resp.text = text
    if json_data is None:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = json_data
    return resp


class TestExecuteRequest:
    @patch("httpedit.executor.requests.request")
    def test_json_response(self, mock_request):
        mock_request.return_value = _fake_response(json_data={"ok": True})
        req = Request(method="get", url="https://x.test/a", query_params=[QueryParam("q", "a b")])
        result = execute_request(req, timeout=7)

        assert result.status == 200
        assert result.status_text == "OK"
        assert result.data == {"ok": True}
        assert not result.is_error
        assert result.error is None
        assert result.duration_ms >= 0

        kwargs = mock_request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://x.test/a?q=a%20b"
        assert kwargs["timeout"] == 7
        assert kwargs["verify"] is True
        assert "data" not in kwargs

    @patch("httpedit.executor.requests.request")
    def test_text_response(self, mock_request):
        mock_request.return_value = _fake_response(text="plain", headers={"Content-Type": "text/plain"})
        result = execute_request(Request(url="https://x.test"))
        assert result.data == "plain"
        assert result.headers == {"Content-Type": "text/plain"}

    @patch("httpedit.executor.requests.request")
    def test_body_sent_for_post(self, mock_request):
        mock_request.return_value = _fake_response(json_data={})
        req = Request(method="POST", url="https://x.test", headers={"A": "1"}, body="héllo")
        execute_request(req, verify=False)
        kwargs = mock_request.call_args.kwargs
        assert kwargs["data"] == "héllo".encode()
        assert kwargs["headers"] == {"A": "1"}
        assert kwargs["verify"] is False

    @patch("httpedit.executor.requests.request")
    def test_body_not_sent_for_get(self, mock_request):
        mock_request.return_value = _fake_response(json_data={})
        execute_request(Request(method="GET", url="https://x.test", body="ignored"))
        assert "data" not in mock_request.call_args.kwargs

    @patch("httpedit.executor.requests.request")
    def test_http_error_status(self, mock_request):
        mock_request.return_value = _fake_response(status=404, reason="Not Found", json_data={"e": 1})
        result = execute_request(Request(url="https://x.test"))
        assert result.is_error
        assert result.error is None
        assert result.status == 404

    @patch("httpedit.executor.requests.request")
    def test_timeout(self, mock_request):
        mock_request.side_effect = requests.exceptions.Timeout()
        result = execute_request(Request(url="https://x.test"), timeout=3)
        assert result.is_error
        assert result.error == "Request timed out after 3s"
        assert result.data == {"error": "Request timed out after 3s"}
        assert result.status == 0

    @patch("httpedit.executor.requests.request")
    def test_connection_error(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        result = execute_request(Request(url="https://x.test"))
        assert result.error.startswith("Connection error:")

    @patch("httpedit.executor.requests.request")
    def test_other_request_exception(self, mock_request):
        mock_request.side_effect = requests.exceptions.InvalidURL("bad")
        result = execute_request(Request(url="https://x.test"))
        assert result.error.startswith("Request failed:")

    @patch("httpedit.executor.requests.request")
    def test_unexpected_exception_captured(self, mock_request):
        # e.g. a non-latin-1 header value rejected by http.client
        mock_request.side_effect = UnicodeEncodeError("latin-1", "Привет", 0, 1, "ordinal not in range(256)")
        result = execute_request(Request(url="https://x.test", headers={"X-Name": "Привет"}))
        assert result.is_error
        assert result.error.startswith("Unexpected error:")
        assert result.status == 0
        assert result.data == {"error": result.error}
