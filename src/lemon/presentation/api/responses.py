"""JSON vulnerability prefix.

With prefixing enabled every JSON body ``B`` goes out as ``)]}',\\n`` + ``B``,
so a JSON array response cannot run as a script when a page includes it
through a ``<script>`` tag. Clients strip the exact prefix before parsing.

The OpenAPI document (``/openapi.json``, only served with ``api_debug``) is
left unprefixed because the bundled docs UI fetches and parses it directly.
"""

from typing import Any

from fastapi.responses import JSONResponse

JSON_PREFIX = ")]}',\n"
JSON_PREFIX_BYTES = JSON_PREFIX.encode("utf-8")


def apply_json_prefix(body: bytes, enabled: bool) -> bytes:
    """Return ``body`` with the prefix in front when ``enabled``."""
    if not enabled:
        return body
    return JSON_PREFIX_BYTES + body


def strip_json_prefix(body: bytes) -> bytes:
    """Remove the prefix if (and only if) ``body`` starts with it."""
    if body.startswith(JSON_PREFIX_BYTES):
        return body[len(JSON_PREFIX_BYTES):]
    return body


class PrefixedJSONResponse(JSONResponse):
    """JSONResponse whose body carries the vulnerability prefix."""

    def render(self, content: Any) -> bytes:
        return apply_json_prefix(super().render(content), enabled=True)


def json_response_class(enabled: bool) -> type[JSONResponse]:
    return PrefixedJSONResponse if enabled else JSONResponse
