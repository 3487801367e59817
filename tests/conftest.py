"""
Shared fixtures: an in-memory daemon standing in for the HTTP transport
"""

import io
import json

import pytest

from docker_client import DockerClient


class FakeResponse:
    """Minimal http.client.HTTPResponse stand-in"""

    def __init__(self, status=200, body=b'', headers=None):
        self.status = status
        self._body = io.BytesIO(body)
        self._headers = headers or {}
        self.closed = False
        self.read_calls = 0

    def read(self, amt=None):
        self.read_calls += 1
        return self._body.read() if amt is None else self._body.read(amt)

    def readline(self, limit=-1):
        return self._body.readline(limit)

    def getheaders(self):
        return list(self._headers.items())

    def close(self):
        self.closed = True


class FakeConnection:
    """Records the request and replays a canned response"""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.method = None
        self.url = None
        self.headers = {}
        self.body = None
        self.closed = False

    def request(self, method, url, body=None, headers=None):
        if self.error is not None:
            raise self.error
        self.method = method
        self.url = url
        self.headers = dict(headers or {})
        self.body = body.read() if hasattr(body, 'read') else body

    def getresponse(self):
        return self.response

    def close(self):
        self.closed = True


class FakeDaemon:
    """Queue of canned responses, one per connection"""

    def __init__(self):
        self.pending = []
        self.connections = []

    def respond(self, status=200, body=b'', headers=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            body = body.encode('utf-8')
        self.pending.append(FakeConnection(FakeResponse(status, body, headers)))

    def fail(self, error):
        self.pending.append(FakeConnection(error=error))

    def connect(self):
        connection = self.pending.pop(0)
        self.connections.append(connection)
        return connection

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]


@pytest.fixture
def daemon():
    return FakeDaemon()


@pytest.fixture
def client(daemon):
    return DockerClient(connection_factory=daemon.connect)


@pytest.fixture
def build_dir(tmp_path):
    """Context with a Dockerfile adding app.jar, plus a file nobody adds"""
    (tmp_path / 'Dockerfile').write_text("FROM busybox\nADD app.jar /app.jar\n")
    (tmp_path / 'app.jar').write_bytes(b'PK\x03\x04jar-content')
    (tmp_path / 'notes.txt').write_text("not part of the build\n")
    return tmp_path
