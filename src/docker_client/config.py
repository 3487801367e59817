"""
Client settings

Defaults, optionally overridden by a JSON settings file and by environment
variables (DOCKER_HOST, DOCKER_CLIENT_TIMEOUT, DOCKER_CLIENT_LOG_LEVEL).
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ENV_BASE_URL = 'DOCKER_HOST'
ENV_TIMEOUT = 'DOCKER_CLIENT_TIMEOUT'
ENV_LOG_LEVEL = 'DOCKER_CLIENT_LOG_LEVEL'


@dataclass
class ClientSettings:
    """Settings for DockerClient"""
    base_url: Optional[str] = None
    timeout: int = 60
    log_level: str = 'INFO'
    dockerfile_name: str = 'Dockerfile'

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientSettings':
        """Create settings from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        settings = cls(**{key: value for key, value in data.items() if key in known})
        settings.timeout = int(settings.timeout)
        return settings

    @classmethod
    def load(cls, path: str) -> 'ClientSettings':
        """
        Load settings from a JSON file

        Missing keys keep their defaults.

        Raises:
            OSError: File cannot be read
            ValueError: File is not valid JSON
        """
        with open(path, 'r', encoding='utf-8') as f:
            loaded_settings = json.load(f)
        if not isinstance(loaded_settings, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")

        logger.info(f"Settings loaded from {path}")
        return cls.from_dict(loaded_settings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 base: Optional['ClientSettings'] = None) -> 'ClientSettings':
        """Overlay environment variables on base settings (default: defaults)"""
        environ = os.environ if environ is None else environ
        data = asdict(base) if base is not None else {}

        if environ.get(ENV_BASE_URL):
            data['base_url'] = environ[ENV_BASE_URL]
        if environ.get(ENV_TIMEOUT):
            data['timeout'] = environ[ENV_TIMEOUT]
        if environ.get(ENV_LOG_LEVEL):
            data['log_level'] = environ[ENV_LOG_LEVEL]

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def setup_logging(level: str = 'INFO'):
    """Configure root logging for applications using the client"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )
