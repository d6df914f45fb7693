"""Tests for Postman collection and curl import."""

import json

import pytest

from httpedit.curl import IMPORTED_NAME
from httpedit.importer import UnsupportedImportFormat, parse_import, parse_postman_collection
from httpedit.models import QueryParam

COLLECTION = {
    "info": {"name": "Shop"},
    "item": [
        {
            "name": "Health",
            "request": {"method": "GET", "url": "https://shop.test/health"},
        },
        {
            "name": "Users",
            "item": [
                {
                    "name": "List",
                    "request": {
                        "method": "get",
                        "header": [
                            {"key": "Accept", "value": "application/json"},
                            {"key": "X-Off", "value": "1", "disabled": True},
                        ],
                        "url": {
                            "raw": "{{base}}/users?page=2",
                            "host": ["{{base}}"],
                            "path": ["users"],
                        },
                    },
                },
                {
                    "name": "Admin",
                    "item": [
                        {
                            "name": "Login",
                            "request": {
                                "method": "POST",
                                "body": {
                                    "mode": "urlencoded",
                                    "urlencoded": [
                                        {"key": "user", "value": "a b"},
                                        {"key": "pass", "value": "{{pw}}"},
                                        {"key": "skip", "value": "x", "disabled": True},
                                    ],
                                },
                                "url": {
                                    "protocol": "https",
                                    "host": ["shop", "test"],
                                    "port": "8443",
                                    "path": ["auth", "login"],
                                    "query": [{"key": "v", "value": "1"}],
                                },
                            },
                        }
                    ],
                },
            ],
        },
        {
            "name": "Create",
            "request": {
                "method": "POST",
                "header": [{"key": "Content-Type", "value": "application/json"}],
                "body": {"mode": "raw", "raw": '{"name": "x"}'},
                "url": "https://shop.test/items",
            },
        },
    ],
}

# ── Postman ──────────────────────────────────────────────────────────────


class TestPostman:
    def test_flattened_in_order_with_folder_prefixes(self):
        requests = parse_postman_collection(COLLECTION)
        assert [r.name for r in requests] == [
            "Health",
            "Users / List",
            "Users / Admin / Login",
            "Create",
        ]

    def test_string_url(self):
        health = parse_postman_collection(COLLECTION)[0]
        assert health.method == "GET"
        assert health.url == "https://shop.test/health"
        assert health.body == ""

    def test_raw_url_object_and_headers(self):
        listing = parse_postman_collection(COLLECTION)[1]
        assert listing.method == "GET"
        assert listing.url == "{{base}}/users"
        assert listing.query_params == [QueryParam("page", "2")]
        assert listing.headers == {"Accept": "application/json"}

    def test_url_rebuilt_from_parts(self):
        login = parse_postman_collection(COLLECTION)[2]
        assert login.url == "https://shop.test:8443/auth/login"
        assert login.query_params == [QueryParam("v", "1")]

    def test_urlencoded_body(self):
        login = parse_postman_collection(COLLECTION)[2]
        assert login.body == "user=a%20b&pass={{pw}}"
        assert login.body_type == "urlencoded"

    def test_raw_body(self):
        create = parse_postman_collection(COLLECTION)[3]
        assert create.body == '{"name": "x"}'
        assert create.body_type == "json"

    def test_shorthand_request_and_unknown_method(self):
        collection = {
            "item": [
                {"name": "Short", "request": "https://x.test/a"},
                {"name": "Odd", "request": {"method": "PURGE", "url": "https://x.test/b"}},
            ]
        }
        short, odd = parse_postman_collection(collection)
        assert (short.method, short.url) == ("GET", "https://x.test/a")
        assert odd.method == "GET"

    def test_items_without_request_skipped(self):
        assert parse_postman_collection({"item": [{"name": "Empty"}, "junk"]}) == []

    def test_empty_collection(self):
        assert parse_import("{}") == []


# ── Format detection ─────────────────────────────────────────────────────


class TestParseImport:
    def test_json_dispatches_to_postman(self):
        requests = parse_import("  " + json.dumps(COLLECTION))
        assert len(requests) == 4

    def test_curl_dispatch(self):
        requests = parse_import("curl -X DELETE https://x.test/items/1")
        assert len(requests) == 1
        assert requests[0].name == IMPORTED_NAME
        assert requests[0].method == "DELETE"

    def test_invalid_json(self):
        with pytest.raises(UnsupportedImportFormat, match="Invalid JSON"):
            parse_import("{not json")

    @pytest.mark.parametrize("content", ["", "wget https://x.test", "[1, 2]", "GET https://x.test"])
    def test_unsupported(self, content):
        with pytest.raises(UnsupportedImportFormat, match="Unsupported format"):
            parse_import(content)

    def test_is_a_value_error(self):
        assert issubclass(UnsupportedImportFormat, ValueError)
