"""
Daemon request description

Building a request does no I/O: the endpoint template, path parameters and
query parameters are turned into a URL and the body into bytes (or a stream)
plus headers. http_client sends the result.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union
from urllib.parse import quote

JSON_CONTENT_TYPE = 'application/json'
TAR_CONTENT_TYPE = 'application/tar'

_PLACEHOLDER = re.compile(r'\{(\w+)\}')

Body = Union[bytes, BinaryIO, None]


def expand_path(endpoint: str, path_params: Optional[Dict[str, Any]] = None) -> str:
    """
    Substitute ``{name}`` placeholders in an endpoint template

    >>> expand_path('/containers/{id}/start', {'id': 'abc'})
    '/containers/abc/start'
    """
    path_params = path_params or {}

    def substitute(match):
        name = match.group(1)
        if path_params.get(name) is None:
            raise ValueError(f"Missing path parameter '{name}' for {endpoint}")
        return quote(str(path_params[name]), safe='/:@')

    return _PLACEHOLDER.sub(substitute, endpoint)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def encode_query(params: Optional[Dict[str, Any]] = None) -> str:
    """Encode query parameters, leaving out the ones set to None"""
    if not params:
        return ''
    return '&'.join(
        f"{quote(str(key))}={quote(_query_value(value))}"
        for key, value in params.items()
        if value is not None
    )


def _stream_length(stream) -> Optional[int]:
    try:
        position = stream.tell()
        end = stream.seek(0, 2)
        stream.seek(position)
        return end - position
    except (AttributeError, OSError, ValueError):
        return None


@dataclass
class DaemonRequest:
    """One HTTP exchange with the daemon"""
    method: str
    endpoint: str
    path_params: Dict[str, Any] = field(default_factory=dict)
    query_params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return expand_path(self.endpoint, self.path_params)

    @property
    def url(self) -> str:
        query = encode_query(self.query_params)
        return f"{self.path}?{query}" if query else self.path

    def encode_body(self) -> Tuple[Body, Dict[str, str]]:
        """
        Prepare the body for sending

        Returns:
            (body, headers) where body is bytes, a binary stream or None.
            Raw bytes and streams are sent as a tar archive, anything else
            is serialised to JSON.
        """
        headers = dict(self.headers)

        if self.body is None:
            return None, headers

        if isinstance(self.body, (bytes, bytearray)):
            body = bytes(self.body)
            headers.setdefault('Content-Type', TAR_CONTENT_TYPE)
            headers['Content-Length'] = str(len(body))
            return body, headers

        if hasattr(self.body, 'read'):
            headers.setdefault('Content-Type', TAR_CONTENT_TYPE)
            length = _stream_length(self.body)
            if length is not None:
                headers['Content-Length'] = str(length)
            return self.body, headers

        body = json.dumps(self.body).encode('utf-8')
        headers['Content-Type'] = JSON_CONTENT_TYPE
        headers['Content-Length'] = str(len(body))
        return body, headers


def prepare(method: str, endpoint: str, path_params: Optional[Dict[str, Any]] = None,
            params: Optional[Dict[str, Any]] = None, data: Any = None,
            headers: Optional[Dict[str, str]] = None) -> DaemonRequest:
    """Build a DaemonRequest from keyword-style arguments"""
    return DaemonRequest(
        method=method.upper(),
        endpoint=endpoint,
        path_params=dict(path_params or {}),
        query_params=dict(params or {}),
        body=data,
        headers=dict(headers or {})
    )
