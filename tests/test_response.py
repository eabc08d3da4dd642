"""
Unit tests for response classification and decoding.
"""

from typing import Any

import httpx
import pytest

from pgrest import DecodeError, ErrorKind, RemoteError, decode_response, is_success
from pgrest.response import adecode_response

from conftest import TEST_OBJECT, Person


def _response(status: int, content: bytes = b"", method: str = "GET") -> httpx.Response:
    request = httpx.Request(method, "http://slave.test/test_table")
    return httpx.Response(status, content=content, request=request)


@pytest.mark.parametrize("status, expected", [(199, False), (200, True), (299, True), (300, False)])
def test_status_classification(status, expected):
    assert is_success(status) is expected


class TestDecodeResponse:

    def test_remote_error_carries_request_line(self):
        response = _response(404, b"test")
        with pytest.raises(RemoteError) as exc_info:
            decode_response(response, dict)

        error = exc_info.value
        assert error.kind is ErrorKind.REMOTE
        assert (error.method, error.url, error.status_code) == (
            "GET",
            "http://slave.test/test_table",
            404,
        )
        assert str(error) == "postgrest error (GET http://slave.test/test_table): 404 Not Found"
        assert response.is_closed

    def test_remote_error_without_request(self):
        response = httpx.Response(404, content=b"test")
        with pytest.raises(RemoteError, match=r"^postgrest error \( \): 404 Not Found$"):
            decode_response(response)

    def test_success_without_target(self):
        response = _response(201, b"Created", method="POST")
        assert decode_response(response) == (201, None)
        assert response.is_closed

    def test_decode_into_dict(self):
        response = httpx.Response(200, json=TEST_OBJECT)
        assert decode_response(response, dict) == (200, TEST_OBJECT)

    def test_decode_into_dataclass(self):
        status, person = decode_response(httpx.Response(200, json=TEST_OBJECT), Person)
        assert status == 200
        assert person == Person(**TEST_OBJECT)

    def test_decode_any(self):
        assert decode_response(httpx.Response(200, json=[1, 2]), Any) == (200, [1, 2])

    def test_invalid_json_is_decode_error(self):
        response = _response(200, b"test")
        with pytest.raises(DecodeError) as exc_info:
            decode_response(response, dict)

        assert exc_info.value.status_code == 500
        assert exc_info.value.kind is ErrorKind.DECODE
        assert not isinstance(exc_info.value, RemoteError)
        assert response.is_closed

    def test_shape_mismatch_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_response(httpx.Response(200, json=TEST_OBJECT), list[int])

    def test_unsupported_target_type_is_decode_error(self):
        class Plain:
            def __init__(self, a):
                self.a = a

        response = httpx.Response(200, json={"a": 1})
        with pytest.raises(DecodeError, match="unsupported decode target") as exc_info:
            decode_response(response, Plain)

        assert exc_info.value.status_code == 500
        assert response.is_closed

    def test_unhashable_target_is_decode_error(self):
        response = httpx.Response(200, json={"a": 1})
        with pytest.raises(DecodeError, match="unsupported decode target") as exc_info:
            decode_response(response, {})

        assert exc_info.value.status_code == 500
        assert response.is_closed


class TestAsyncDecodeResponse:

    @pytest.mark.asyncio
    async def test_success(self):
        assert await adecode_response(httpx.Response(200, json=TEST_OBJECT), dict) == (
            200,
            TEST_OBJECT,
        )

    @pytest.mark.asyncio
    async def test_remote_error(self):
        with pytest.raises(RemoteError):
            await adecode_response(_response(500, b"boom"))
