"""
Docker Images API
"""

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .archive import build_archive
from .context import DEFAULT_DOCKERFILE, BuildContext, resolve_context
from .dockerfile import parse_file
from .exceptions import APIError, BuildError, ImageNotFound, NotFound
from .request import prepare

logger = logging.getLogger(__name__)


def split_repository(repository: str) -> Tuple[str, Optional[str]]:
    """
    Split ``name:tag`` into name and tag

    A colon followed by a path (registry port) is not a tag separator.
    """
    name, sep, tag = repository.rpartition(':')
    if not sep or '/' in tag:
        return repository, None
    return name, tag


class Image:
    """Docker Image object"""

    def __init__(self, attrs: Dict[str, Any], client):
        self.attrs = attrs
        self.client = client
        self.id = attrs.get('Id', '')
        self.short_id = self.id[:12] if self.id else ''
        self.tags = attrs.get('RepoTags') or []

    def __repr__(self):
        return f"<Image: {self.tags[0] if self.tags else self.short_id}>"

    def remove(self):
        """Remove this image"""
        return self.client.remove(self.id)


class ImageCollection:
    """Docker Images collection"""

    def __init__(self, client):
        self.client = client

    def list(self, name: Optional[str] = None, all: bool = False) -> List[Image]:
        """
        List images

        Args:
            name: Filter by image name
            all: Show all images (including intermediates)
        """
        params = {'filter': name, 'all': all}
        images_data = self.client.http.request_json('GET', '/images/json', params=params)
        return [Image(img_data, self) for img_data in images_data or []]

    def inspect(self, image_id: str) -> Dict[str, Any]:
        """
        Inspect image

        Raises:
            ImageNotFound: If image not found
        """
        if not image_id:
            raise ValueError("Image ID can't be empty")
        try:
            return self.client.http.request_json(
                'GET', '/images/{name}/json', path_params={'name': image_id}
            )
        except NotFound as e:
            raise ImageNotFound(f"Image not found: {image_id}", status_code=e.status_code) from e

    def get(self, image_id: str) -> Image:
        """Get image by name or ID"""
        return Image(self.inspect(image_id), self)

    def pull(self, repository: str, tag: Optional[str] = None,
             registry: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Pull image from registry

        Args:
            repository: Repository name, optionally with ``:tag``
            tag: Image tag
            registry: Registry to pull from

        Returns:
            Progress records reported by the daemon
        """
        if repository is None:
            raise ValueError("Repository was not specified")

        name, repo_tag = split_repository(repository)
        if repo_tag is not None:
            tag = repo_tag

        params = {'fromImage': name, 'tag': tag, 'registry': registry}
        logger.info(f"Pulling image {name}:{tag or 'latest'}")

        progress = []
        with self.client.http.post('/images/create', params=params, stream=True) as response:
            for record in _json_records(response.iter_lines()):
                if 'error' in record:
                    raise APIError(f"Pull failed: {record['error']}")
                progress.append(record)
        return progress

    def search(self, term: str) -> List[Dict[str, Any]]:
        """Search images on the registry"""
        return self.client.http.request_json('GET', '/images/search', params={'term': term})

    def remove(self, image_id: str, force: bool = False, noprune: bool = False):
        """
        Remove image

        Args:
            image_id: Image name or ID
            force: Force removal
            noprune: Don't delete untagged parents
        """
        if not image_id:
            raise ValueError("Image ID can't be empty")
        try:
            return self.client.http.delete(
                '/images/{name}', path_params={'name': image_id},
                params={'force': force or None, 'noprune': noprune or None}
            )
        except NotFound as e:
            raise ImageNotFound(f"Image not found: {image_id}", status_code=e.status_code) from e

    def remove_many(self, image_ids: Iterable[str]):
        """Remove several images, stopping at the first failure"""
        if image_ids is None:
            raise ValueError("List of images can't be None")
        for image_id in image_ids:
            self.remove(image_id)

    def viz(self) -> str:
        """Get the image graph in Graphviz format"""
        return self.client.http.get('/images/viz')

    def build(self, path: str, tag: Optional[str] = None, nocache: bool = False,
              quiet: bool = False, dockerfile: Optional[str] = None,
              buildargs: Optional[Dict[str, str]] = None, rm: bool = True,
              stream: bool = False, callback: Optional[Callable[[str], None]] = None):
        """
        Build image from a context directory

        Only the Dockerfile and the sources named by its ADD instructions are
        sent to the daemon.

        Args:
            path: Build context path
            tag: Tag for the image
            nocache: Don't use the build cache
            quiet: Suppress verbose build output
            dockerfile: Dockerfile name inside the context
                        (default: the client's dockerfile_name setting)
            buildargs: Build arguments
            rm: Remove intermediate containers
            stream: Return the raw build output response instead of waiting
            callback: Callback for build output lines

        Returns:
            Built image ID, or the DaemonResponse if stream=True

        Raises:
            InvalidBuildContext: Missing context folder or Dockerfile
            ParseError: Malformed or empty Dockerfile
            ResolutionError: ADD source unusable
            ArchiveError: Context archive could not be written
            BuildError: Daemon reported a build failure
        """
        if dockerfile is None:
            dockerfile = self.client.settings.dockerfile_name
        context = BuildContext(path, dockerfile)
        context.validate()

        directives = parse_file(context.dockerfile_path)
        resources = resolve_context(context, directives)
        archive = build_archive(resources, dockerfile_name=context.dockerfile_name)

        params = {
            't': tag,
            'dockerfile': dockerfile if dockerfile != DEFAULT_DOCKERFILE else None,
            'nocache': nocache,
            'q': quiet,
            'rm': rm,
            'buildargs': buildargs
        }

        logger.info(f"Building image {tag or '<untagged>'} from {path} ({len(resources)} files)")
        try:
            response = self.client.http.send(
                prepare('POST', '/build', params=params, data=archive), stream=True
            )
        finally:
            archive.close()

        if stream:
            return response
        return self._read_build_output(response, callback)

    def _read_build_output(self, response, callback: Optional[Callable[[str], None]]) -> str:
        image_id = None

        with response:
            for data in _json_records(response.iter_lines(), callback):
                if 'error' in data:
                    error_msg = data['error']
                    if 'errorDetail' in data:
                        error_msg = data['errorDetail'].get('message', error_msg)
                    raise BuildError(f"Build failed: {error_msg}")

                if 'stream' in data:
                    msg = data['stream'].strip()
                    if callback and msg:
                        callback(msg)
                    if msg.startswith('Successfully built '):
                        image_id = msg[len('Successfully built '):].strip()

                if 'aux' in data and 'ID' in data['aux']:
                    image_id = data['aux']['ID']

        if not image_id:
            raise BuildError("Build completed but no success confirmation received")

        logger.info(f"Image built successfully: {image_id}")
        return image_id


def _json_records(lines: Iterable[bytes], callback: Optional[Callable[[str], None]] = None):
    """Decode newline-delimited JSON progress output"""
    for line in lines:
        line_str = line.decode('utf-8', errors='replace').strip()
        if not line_str:
            continue
        try:
            data = json.loads(line_str)
        except ValueError:
            # Skip non-JSON lines
            if callback:
                callback(line_str)
            continue
        if isinstance(data, dict):
            yield data
