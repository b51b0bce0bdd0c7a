"""Tests for the JSON vulnerability prefix."""

import json

from fastapi.responses import JSONResponse

from lemon.presentation.api.responses import (
    JSON_PREFIX,
    PrefixedJSONResponse,
    apply_json_prefix,
    json_response_class,
    strip_json_prefix,
)


class TestJsonPrefix:
    def test_prefix_literal(self):
        assert JSON_PREFIX == ")]}',\n"

    def test_apply_when_enabled(self):
        assert apply_json_prefix(b"[1,2]", enabled=True) == b")]}',\n[1,2]"

    def test_apply_when_disabled(self):
        assert apply_json_prefix(b"[1,2]", enabled=False) == b"[1,2]"

    def test_strip_removes_prefix(self):
        assert strip_json_prefix(b")]}',\n{\"a\":1}") == b'{"a":1}'

    def test_strip_leaves_other_bodies_alone(self):
        assert strip_json_prefix(b'{"a":1}') == b'{"a":1}'
        assert strip_json_prefix(b")]}'{}") == b")]}'{}"

    def test_prefixed_response_body(self):
        response = PrefixedJSONResponse(content=[{"id": 1}])

        assert response.body.startswith(b")]}',\n")
        assert json.loads(strip_json_prefix(response.body)) == [{"id": 1}]

    def test_response_class_selection(self):
        assert json_response_class(True) is PrefixedJSONResponse
        assert json_response_class(False) is JSONResponse
