"""
Docker client exceptions

Every exception carries a ``kind`` so callers can branch on the error kind
without walking the class hierarchy:

    try:
        client.images.build('./app')
    except DockerException as e:
        if e.retryable:
            ...
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failure surfaced by the client"""
    PARSE = 'parse'
    CONTEXT = 'context'
    RESOLUTION = 'resolution'
    ARCHIVE = 'archive'
    TRANSPORT = 'transport'
    NOT_FOUND = 'not_found'
    SERVER_FAULT = 'server_fault'
    MALFORMED = 'malformed'
    API = 'api'
    BUILD = 'build'


class DockerException(Exception):
    """Base Docker exception"""

    kind = ErrorKind.API

    @property
    def retryable(self) -> bool:
        """True when repeating the same call may succeed"""
        return self.kind in (ErrorKind.TRANSPORT, ErrorKind.SERVER_FAULT)


# Build context errors

class ParseError(DockerException):
    """Dockerfile could not be parsed"""

    kind = ErrorKind.PARSE


class MalformedDirective(ParseError):
    """Recognised directive with the wrong number of arguments"""

    def __init__(self, message: str, line_number: Optional[int] = None, line: str = ''):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class EmptyBuildFile(ParseError):
    """Dockerfile has no instructions"""
    pass


class InvalidBuildContext(DockerException):
    """Build context directory or Dockerfile is missing"""

    kind = ErrorKind.CONTEXT


class ResolutionError(DockerException):
    """ADD source could not be resolved inside the build context"""

    kind = ErrorKind.RESOLUTION

    def __init__(self, message: str, source: str = ''):
        super().__init__(message)
        self.source = source


class UnsafeAbsoluteSource(ResolutionError):
    """ADD source is an absolute path"""
    pass


class SourceNotFound(ResolutionError):
    """ADD source does not exist"""
    pass


class SourceOutsideContext(ResolutionError):
    """ADD source resolves outside the build context"""
    pass


class ArchiveError(DockerException):
    """I/O failure while writing the build context archive"""

    kind = ErrorKind.ARCHIVE


# HTTP errors

class TransportError(DockerException):
    """Connection or timeout failure talking to the daemon"""

    kind = ErrorKind.TRANSPORT


class DaemonError(DockerException):
    """Error classified from a daemon HTTP response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(DaemonError):
    """Image or container not found (HTTP 404)"""

    kind = ErrorKind.NOT_FOUND


class ImageNotFound(NotFound):
    """Image not found"""
    pass


class ContainerNotFound(NotFound):
    """Container not found"""
    pass


class ServerFault(DaemonError):
    """Daemon-side failure (HTTP 500)"""

    kind = ErrorKind.SERVER_FAULT


class Malformed(DaemonError):
    """Successful response whose body could not be decoded"""

    kind = ErrorKind.MALFORMED


class APIError(DaemonError):
    """Docker API error for any other unsuccessful status"""

    kind = ErrorKind.API

    def __init__(self, message: str, response=None, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)
        self.response = response


class BuildError(DockerException):
    """Image build error reported in the build output"""

    kind = ErrorKind.BUILD
