"""
URL construction for PostgREST resources.

PostgREST addresses a table or view by path (`/users`) and filters it with
query parameters in the `column=operator.value` form (`id=eq.5`,
`select=id,name`, `limit=10`). Those parameters are forwarded verbatim; this
module never interprets them.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import SplitResult, quote, urlencode, urlsplit, urlunsplit

from pgrest.errors import MalformedURLError, MissingPathError

QueryParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

# Characters left unescaped in resource paths (RFC 3986 pchar plus "/")
_PATH_SAFE = "/:@!$&'()*+,;="


def parse_url(url: str) -> SplitResult:
    """
    Parse an absolute or relative URL, rejecting input that cannot be a URL.

    Raises:
        MalformedURLError: On a missing scheme before ':', control
            characters, or an invalid port.
    """
    if url.startswith(":"):
        raise MalformedURLError(url, "missing protocol scheme")
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in url):
        raise MalformedURLError(url, "invalid control character in URL")

    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
    except ValueError as e:
        raise MalformedURLError(url, str(e)) from e
    return parts


def encode_query(query: Optional[QueryParams]) -> str:
    """
    Form-encode query parameters, sorted by key.

    Sequence values expand into repeated keys in their given order:
        >>> encode_query({"select": "id,name", "id": ["gte.1", "lte.9"]})
        'id=gte.1&id=lte.9&select=id%2Cname'
    """
    if not query:
        return ""

    items = query.items() if isinstance(query, Mapping) else query
    pairs: List[Tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(item)) for item in value)
        else:
            pairs.append((key, str(value)))

    # sort is stable, so repeated keys keep their relative order
    pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs)


def build_url(base_url: str, path: str, query: Optional[QueryParams] = None) -> str:
    """
    Point `base_url` at the resource `path` with the given query.

    The base's own path and query are replaced, not joined.

    Args:
        base_url: Service root, e.g. "http://db-master:3000".
        path: Resource name, e.g. "users" or "rpc/search".
        query: Optional query parameters.

    Returns:
        The request URL string.

    Raises:
        MissingPathError: If path is empty.
        MalformedURLError: If base_url cannot be parsed.
    """
    if not path:
        raise MissingPathError()

    parts = parse_url(base_url)
    return urlunsplit(
        (parts.scheme, parts.netloc, quote(path, safe=_PATH_SAFE), encode_query(query), parts.fragment)
    )
