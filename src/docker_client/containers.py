"""
Docker Containers API
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import ContainerNotFound, NotFound
from .http_client import DaemonResponse
from .models import CommitResponse, ContainerCreateResponse, ContainerWaitResponse

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT = 10


def _require_id(container_id: str):
    if not container_id:
        raise ValueError("Container ID can't be empty")


class Container:
    """Docker Container object"""

    def __init__(self, attrs: Dict[str, Any], client):
        self.attrs = attrs
        self.client = client
        self.id = attrs.get('Id', '')
        self.short_id = self.id[:12] if self.id else ''
        self.name = attrs.get('Name', attrs.get('Names', [''])[0] if attrs.get('Names') else '').lstrip('/')

        state = attrs.get('State', {})
        if isinstance(state, dict):
            self.status = state.get('Status', 'unknown')
        else:
            self.status = attrs.get('Status', state if isinstance(state, str) else 'unknown')

        self.image = attrs.get('Image', attrs.get('ImageID', ''))

    def __repr__(self):
        return f"<Container: {self.name or self.short_id}>"

    def start(self, host_config: Optional[Dict[str, Any]] = None):
        """Start this container"""
        return self.client.start(self.id, host_config=host_config)

    def stop(self, timeout: int = DEFAULT_STOP_TIMEOUT):
        """Stop this container"""
        return self.client.stop(self.id, timeout=timeout)

    def remove(self, remove_volumes: bool = False):
        """Remove this container"""
        return self.client.remove(self.id, remove_volumes=remove_volumes)

    def wait(self) -> ContainerWaitResponse:
        """Block until this container stops"""
        return self.client.wait(self.id)

    def logs(self, stream: bool = False):
        """Get container output"""
        return self.client.logs(self.id, stream=stream)


class ContainerCollection:
    """Docker Containers collection"""

    def __init__(self, client):
        self.client = client

    @property
    def http(self):
        return self.client.http

    def list(self, all: bool = False, latest: bool = False, limit: int = -1,
             size: bool = False, since: Optional[str] = None,
             before: Optional[str] = None) -> List[Container]:
        """
        List containers

        Args:
            all: Show all containers (including stopped)
            latest: Show only the latest created container
            limit: Maximum number of containers to return (-1 for no limit)
            size: Include container sizes
            since: Only containers created after this one
            before: Only containers created before this one

        Returns:
            List of Container objects
        """
        params = {
            'all': all,
            'limit': 1 if latest else (limit if limit > 0 else None),
            'size': size,
            'since': since,
            'before': before
        }
        containers_data = self.http.request_json('GET', '/containers/json', params=params)
        return [Container(c_data, self) for c_data in containers_data or []]

    def create(self, config: Dict[str, Any], name: Optional[str] = None) -> ContainerCreateResponse:
        """
        Create container

        Args:
            config: Container configuration, sent as-is
            name: Container name

        Returns:
            ContainerCreateResponse with the new container ID
        """
        logger.debug(f"Creating a container with the following configuration: {json.dumps(config)}")
        result = self.http.request_json('POST', '/containers/create', params={'name': name}, data=config)
        response = ContainerCreateResponse.from_dict(result)
        for warning in response.warnings:
            logger.warning(f"Container {response.id[:12]}: {warning}")
        return response

    def inspect(self, container_id: str) -> Dict[str, Any]:
        """
        Inspect container

        Raises:
            ContainerNotFound: If container not found
        """
        _require_id(container_id)
        try:
            return self.http.request_json(
                'GET', '/containers/{id}/json', path_params={'id': container_id}
            )
        except NotFound as e:
            raise ContainerNotFound(f"Container not found: {container_id}", status_code=e.status_code) from e

    def get(self, container_id: str) -> Container:
        """Get container by ID or name"""
        return Container(self.inspect(container_id), self)

    def start(self, container_id: str, host_config: Optional[Dict[str, Any]] = None):
        """Start container"""
        _require_id(container_id)
        return self.http.post('/containers/{id}/start', path_params={'id': container_id}, data=host_config)

    def stop(self, container_id: str, timeout: int = DEFAULT_STOP_TIMEOUT):
        """Stop container, killing it after timeout seconds"""
        _require_id(container_id)
        return self.http.post('/containers/{id}/stop', path_params={'id': container_id}, params={'t': timeout})

    def restart(self, container_id: str, timeout: int = DEFAULT_STOP_TIMEOUT):
        """Restart container"""
        _require_id(container_id)
        return self.http.post('/containers/{id}/restart', path_params={'id': container_id}, params={'t': timeout})

    def kill(self, container_id: str, signal: Optional[str] = None):
        """Kill container"""
        _require_id(container_id)
        return self.http.post('/containers/{id}/kill', path_params={'id': container_id}, params={'signal': signal})

    def remove(self, container_id: str, remove_volumes: bool = False, force: bool = False):
        """Remove container"""
        _require_id(container_id)
        try:
            return self.http.delete(
                '/containers/{id}', path_params={'id': container_id},
                params={'v': remove_volumes, 'force': force or None}
            )
        except NotFound as e:
            raise ContainerNotFound(f"Container not found: {container_id}", status_code=e.status_code) from e

    def remove_many(self, container_ids: Iterable[str], remove_volumes: bool = False):
        """Remove several containers, stopping at the first failure"""
        if container_ids is None:
            raise ValueError("List of containers can't be None")
        for container_id in container_ids:
            self.remove(container_id, remove_volumes=remove_volumes)

    def top(self, container_id: str) -> Dict[str, Any]:
        """List processes running inside the container"""
        _require_id(container_id)
        return self.http.request_json('GET', '/containers/{id}/top', path_params={'id': container_id})

    def diff(self, container_id: str) -> List[Dict[str, Any]]:
        """Changes on the container's filesystem"""
        _require_id(container_id)
        return self.http.request_json('GET', '/containers/{id}/changes', path_params={'id': container_id}) or []

    def wait(self, container_id: str) -> ContainerWaitResponse:
        """Block until the container stops"""
        _require_id(container_id)
        result = self.http.request_json('POST', '/containers/{id}/wait', path_params={'id': container_id})
        return ContainerWaitResponse.from_dict(result)

    def logs(self, container_id: str, stream: bool = False) -> Union[bytes, DaemonResponse]:
        """
        Get container output through the attach endpoint

        Args:
            container_id: Container ID
            stream: Keep the connection open and follow new output

        Returns:
            All output so far as bytes, or with stream=True a DaemonResponse
            to pull from (close it to stop following)
        """
        _require_id(container_id)
        params = {'logs': True, 'stdout': True, 'stderr': True, 'stream': stream}
        response = self.http.request(
            'POST', '/containers/{id}/attach', path_params={'id': container_id},
            params=params, stream=True
        )
        if stream:
            return response
        return response.read()

    def commit(self, commit_config: Dict[str, Any]) -> str:
        """
        Create an image from a container

        Args:
            commit_config: container (required), repo, tag, message, author, run

        Returns:
            New image ID
        """
        if not commit_config or not commit_config.get('container'):
            raise ValueError("Container ID was not specified")

        run = commit_config.get('run')
        params = {
            'container': commit_config['container'],
            'repo': commit_config.get('repo'),
            'tag': commit_config.get('tag'),
            'm': commit_config.get('message'),
            'author': commit_config.get('author'),
            'run': json.dumps(run) if isinstance(run, dict) else run
        }
        result = self.http.request_json('POST', '/commit', params=params)
        return CommitResponse.from_dict(result).id
