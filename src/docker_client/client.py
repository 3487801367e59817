"""
Docker Client - Main API entry point
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional

from .config import ClientSettings
from .containers import ContainerCollection
from .http_client import ConnectionFactory, DockerHTTPClient
from .images import ImageCollection
from .request import prepare

logger = logging.getLogger(__name__)


class DockerClient:
    """
    Docker API Client
    Pure Python implementation without external dependencies
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = 60,
                 connection_factory: Optional[ConnectionFactory] = None,
                 settings: Optional[ClientSettings] = None):
        """
        Initialize Docker client

        Args:
            base_url: Docker daemon address (default: auto-detect socket)
            timeout: Request timeout in seconds
            connection_factory: Callable creating connections, replaces base_url
            settings: Remaining settings (dockerfile_name); base_url and timeout win
        """
        self.settings = replace(settings or ClientSettings(), base_url=base_url, timeout=timeout)
        self.http = DockerHTTPClient(base_url=base_url, timeout=timeout,
                                     connection_factory=connection_factory)
        self.images = ImageCollection(self)
        self.containers = ContainerCollection(self)
        logger.info(f"Docker daemon URL: {base_url or 'default socket'}")

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> 'DockerClient':
        """Create a client from ClientSettings, applying its log level to the package logger"""
        logging.getLogger(__package__).setLevel(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        )
        return cls(base_url=settings.base_url, timeout=settings.timeout, settings=settings, **kwargs)

    @classmethod
    def from_env(cls, **kwargs) -> 'DockerClient':
        """Create a client configured from environment variables"""
        return cls.from_settings(ClientSettings.from_env(), **kwargs)

    def version(self) -> Dict[str, Any]:
        """Get Docker version info"""
        return self.http.request_json('GET', '/version')

    def info(self) -> Dict[str, Any]:
        """Get Docker system info"""
        return self.http.request_json('GET', '/info')

    def ping(self) -> int:
        """Ping Docker daemon, returning the HTTP status"""
        return self.http.send(prepare('GET', '/_ping')).status

    def close(self):
        """Close client (connections are per request, nothing to release)"""
        pass
