"""
Response normalization: status classification and JSON decoding.

A decode target is any type pydantic can validate against: `dict`,
`list[dict]`, a dataclass, a BaseModel subclass, or `typing.Any` for the
raw JSON value. Anything else (a plain class, or an instance such as `{}`)
is reported as a DecodeError.
"""

import functools
import logging
from typing import Any, Optional, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from pgrest.errors import DecodeError, RemoteError

logger = logging.getLogger(__name__)

# Status reported when a successful response cannot be decoded locally
DECODE_FAILURE_STATUS = httpx.codes.INTERNAL_SERVER_ERROR


def is_success(status_code: int) -> bool:
    """Return True if the status code is within [200, 300)."""
    return 200 <= status_code < 300


@functools.lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _request_line(response: httpx.Response) -> Tuple[str, str]:
    try:
        request = response.request
    except RuntimeError:
        # responses built by hand may have no request attached
        return "", ""
    return request.method, str(request.url)


def _interpret(response: httpx.Response, target: Optional[Any]) -> Tuple[int, Any]:
    status = response.status_code
    if not is_success(status):
        method, url = _request_line(response)
        raise RemoteError(method, url, status, response.reason_phrase)

    if target is None:
        return status, None

    try:
        # unhashable targets fail the cache lookup with TypeError
        adapter = _adapter(target)
        return status, adapter.validate_json(response.content)
    except (PydanticSchemaGenerationError, TypeError) as e:
        logger.debug(f"Unsupported decode target {target!r}: {e}")
        raise DecodeError(f"postgrest error: unsupported decode target {target!r}: {e}") from e
    except ValidationError as e:
        logger.debug(f"Failed to decode response body: {e}")
        raise DecodeError(f"postgrest error: invalid response body: {e}") from e


def decode_response(response: httpx.Response, target: Optional[Any] = None) -> Tuple[int, Any]:
    """
    Classify a response and optionally decode its JSON body.

    The body is read and the response closed on every path.

    Args:
        response: The response returned by the transport.
        target: Type to decode the body into; None skips decoding.

    Returns:
        Tuple of (status_code, decoded value or None)

    Raises:
        RemoteError: If the status is outside [200, 300).
        DecodeError: If the body does not match target (status 500).
    """
    try:
        response.read()
        return _interpret(response, target)
    finally:
        response.close()


async def adecode_response(
    response: httpx.Response, target: Optional[Any] = None
) -> Tuple[int, Any]:
    """Async counterpart of decode_response()."""
    try:
        await response.aread()
        return _interpret(response, target)
    finally:
        await response.aclose()
