"""
HTTP client for the Docker daemon
Pure Python implementation using http.client and socket
"""

import http.client
import json
import logging
import os
import platform
import socket
from typing import Any, Callable, Dict, Iterator, Optional
from urllib.parse import urlparse

from .exceptions import DockerException, TransportError
from .request import DaemonRequest, prepare
from .response_handler import classify, decode_json

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_PATH = '/var/run/docker.sock'
DEFAULT_TCP_PORT = 2375
CHUNK_SIZE = 8192

ConnectionFactory = Callable[[], http.client.HTTPConnection]


class UnixHTTPConnection(http.client.HTTPConnection):
    """HTTP connection over Unix socket"""

    def __init__(self, socket_path: str, timeout: int = 60):
        super().__init__('localhost', timeout=timeout)
        self.socket_path = socket_path

    def connect(self):
        """Connect to Unix socket"""
        self.sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.sock.settimeout(self.timeout)
        self.sock.connect(self.socket_path)


def default_socket_path() -> str:
    """Auto-detect the Docker socket"""
    if platform.system() == "Darwin":
        socket_path = os.path.expanduser('~/.docker/run/docker.sock')
        if os.path.exists(socket_path):
            return socket_path
    return DEFAULT_SOCKET_PATH


def make_connection_factory(base_url: Optional[str] = None, timeout: int = 60) -> ConnectionFactory:
    """
    Create a factory of fresh connections for a daemon address

    Args:
        base_url: unix:///path, /path, tcp://host:port or http://host:port
                  (default: auto-detected Unix socket)
        timeout: Socket timeout in seconds

    Returns:
        Callable returning a new, unconnected HTTPConnection
    """
    if not base_url:
        socket_path = default_socket_path()
        return lambda: UnixHTTPConnection(socket_path, timeout=timeout)

    parsed = urlparse(base_url)

    if parsed.scheme in ('', 'unix'):
        socket_path = base_url.replace('unix://', '', 1)
        return lambda: UnixHTTPConnection(socket_path, timeout=timeout)

    if parsed.scheme in ('tcp', 'http'):
        host = parsed.hostname or 'localhost'
        port = parsed.port or DEFAULT_TCP_PORT
        return lambda: http.client.HTTPConnection(host, port, timeout=timeout)

    if parsed.scheme == 'https':
        raise ValueError("TLS connections are not supported, inject a connection_factory instead")

    raise ValueError(f"Unsupported Docker daemon address: {base_url}")


class DaemonResponse:
    """
    Response from the daemon

    Holds the connection open until the body is read or the response is
    closed. Use ``read()`` for a one-shot read, or ``iter_chunks()`` /
    ``iter_lines()`` to pull an open-ended stream (attach, build output).
    """

    def __init__(self, connection, response, context: str = ''):
        self._connection = connection
        self._response = response
        self._data: Optional[bytes] = None
        self.closed = False
        self.status: int = response.status
        self.context = context

        getheaders = getattr(response, 'getheaders', None)
        self.headers: Dict[str, str] = dict(getheaders()) if getheaders else {}

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_lines()

    def _transport_error(self, e: Exception) -> TransportError:
        return TransportError(f"Connection to Docker daemon lost ({self.context}): {e}")

    def read(self) -> bytes:
        """Read the whole body and release the connection"""
        if self._data is None:
            try:
                self._data = self._response.read()
            except (OSError, http.client.HTTPException) as e:
                raise self._transport_error(e) from e
            finally:
                self.close()
        return self._data

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Yield body chunks as they arrive; the connection closes when done"""
        read = getattr(self._response, 'read1', self._response.read)
        try:
            while True:
                try:
                    chunk = read(chunk_size)
                except (OSError, http.client.HTTPException) as e:
                    raise self._transport_error(e) from e
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def iter_lines(self) -> Iterator[bytes]:
        """
        Yield body lines as they arrive; the connection closes when done

        Lines longer than CHUNK_SIZE come out in CHUNK_SIZE pieces.
        """
        try:
            while True:
                try:
                    line = self._response.readline(CHUNK_SIZE)
                except (OSError, http.client.HTTPException) as e:
                    raise self._transport_error(e) from e
                if not line:
                    break
                yield line
        finally:
            self.close()

    def json(self) -> Any:
        """Read the body and decode it as JSON"""
        return decode_json(self.read(), self.context)

    def text(self) -> str:
        return self.read().decode('utf-8', errors='replace')

    def close(self):
        """Release the underlying connection"""
        if self.closed:
            return
        self.closed = True
        self._response.close()
        self._connection.close()


class DockerHTTPClient:
    """HTTP client for Docker daemon"""

    def __init__(self, base_url: Optional[str] = None, timeout: int = 60,
                 connection_factory: Optional[ConnectionFactory] = None):
        """
        Initialize Docker HTTP client

        Args:
            base_url: Docker daemon address (default: auto-detect socket)
            timeout: Request timeout in seconds
            connection_factory: Callable creating connections; overrides base_url
        """
        self.base_url = base_url
        self.timeout = timeout
        if connection_factory is None:
            connection_factory = make_connection_factory(base_url, timeout)
        self._connect = connection_factory

    def send(self, request: DaemonRequest, stream: bool = False) -> DaemonResponse:
        """
        Perform one HTTP exchange

        Args:
            request: Request to send
            stream: Keep the connection open and let the caller pull the body

        Returns:
            Classified response; its body is already read unless stream=True

        Raises:
            TransportError: Connection, timeout or protocol failure
            DaemonError: Unsuccessful status
        """
        url = request.url
        body, headers = request.encode_body()
        context = f"{request.method} {url}"
        logger.debug(context)

        connection = self._connect()
        try:
            connection.request(request.method, url, body=body, headers=headers)
            raw_response = connection.getresponse()
        except (OSError, http.client.HTTPException) as e:
            connection.close()
            raise TransportError(f"Cannot reach Docker daemon ({context}): {e}") from e

        response = DaemonResponse(connection, raw_response, context)
        try:
            classify(response, context)
            if not stream:
                response.read()
        except DockerException:
            response.close()
            raise

        return response

    def request(self, method: str, path: str, data: Any = None,
                params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
                stream: bool = False, path_params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Make HTTP request to Docker daemon

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            path: API path, may contain {name} placeholders
            data: JSON data for request body, or raw bytes / binary stream
            params: URL query parameters (None values are left out)
            headers: HTTP headers
            stream: If True, return the DaemonResponse for streaming
            path_params: Values for the path placeholders

        Returns:
            Parsed JSON response, text for non-JSON bodies, None for empty
            bodies, or the DaemonResponse if stream=True
        """
        response = self.send(prepare(method, path, path_params, params, data, headers), stream=stream)
        if stream:
            return response

        response_data = response.read()
        if not response_data:
            return None
        try:
            return json.loads(response_data.decode('utf-8'))
        except (ValueError, UnicodeDecodeError):
            return response_data.decode('utf-8', errors='replace')

    def request_json(self, method: str, path: str, data: Any = None,
                     params: Optional[Dict[str, Any]] = None,
                     path_params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a request whose body must be JSON (Malformed otherwise)"""
        return self.send(prepare(method, path, path_params, params, data)).json()

    def get(self, path: str, **kwargs) -> Any:
        """Make GET request"""
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        """Make POST request"""
        return self.request('POST', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        """Make DELETE request"""
        return self.request('DELETE', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        """Make PUT request"""
        return self.request('PUT', path, **kwargs)
