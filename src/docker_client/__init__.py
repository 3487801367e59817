"""
Docker client - Pure Python implementation without external dependencies
Works with Docker daemon via Unix socket or TCP
"""

from .client import DockerClient
from .config import ClientSettings
from .exceptions import (
    APIError,
    ArchiveError,
    BuildError,
    ContainerNotFound,
    DaemonError,
    DockerException,
    EmptyBuildFile,
    ErrorKind,
    ImageNotFound,
    InvalidBuildContext,
    Malformed,
    MalformedDirective,
    NotFound,
    ParseError,
    ResolutionError,
    ServerFault,
    SourceNotFound,
    SourceOutsideContext,
    TransportError,
    UnsafeAbsoluteSource
)

__all__ = [
    'DockerClient',
    'ClientSettings',
    'APIError',
    'ArchiveError',
    'BuildError',
    'ContainerNotFound',
    'DaemonError',
    'DockerException',
    'EmptyBuildFile',
    'ErrorKind',
    'ImageNotFound',
    'InvalidBuildContext',
    'Malformed',
    'MalformedDirective',
    'NotFound',
    'ParseError',
    'ResolutionError',
    'ServerFault',
    'SourceNotFound',
    'SourceOutsideContext',
    'TransportError',
    'UnsafeAbsoluteSource'
]

__version__ = '1.0.0'
