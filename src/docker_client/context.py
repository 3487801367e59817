"""
Build context resolution

Turns a context directory plus its parsed Dockerfile into the ordered list of
files that make up the build archive. ADD sources must stay inside the context
directory; absolute paths are refused outright.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, List
from urllib.parse import unquote, urlparse

from .dockerfile import Directive
from .exceptions import (
    InvalidBuildContext,
    SourceNotFound,
    SourceOutsideContext,
    UnsafeAbsoluteSource
)

logger = logging.getLogger(__name__)

DEFAULT_DOCKERFILE = 'Dockerfile'

_DRIVE_PATH = re.compile(r'^[A-Za-z]:[\\/]')


@dataclass
class BuildContext:
    """Directory sent to the daemon as the build context"""
    root_directory: str
    dockerfile_name: str = DEFAULT_DOCKERFILE

    @property
    def dockerfile_path(self) -> str:
        return os.path.join(self.root_directory, self.dockerfile_name)

    def validate(self):
        """
        Check the context before any parsing happens

        Raises:
            InvalidBuildContext: Missing directory or Dockerfile
        """
        if not self.root_directory:
            raise InvalidBuildContext("Build context folder is not set")
        if not os.path.isdir(self.root_directory):
            raise InvalidBuildContext(f"Folder {self.root_directory} doesn't exist")
        if not os.path.isfile(self.dockerfile_path):
            raise InvalidBuildContext(
                f"{self.dockerfile_name} doesn't exist in {self.root_directory}"
            )


@dataclass(frozen=True)
class ResolvedResource:
    """File going into the build archive"""
    absolute_path: str
    archive_name: str


def is_file_resource(source: str) -> bool:
    """True for plain paths and file: URIs, False for remote URLs"""
    if _DRIVE_PATH.match(source):
        return True
    scheme = urlparse(source).scheme
    return scheme in ('', 'file')


def _local_path(source: str) -> str:
    if source.lower().startswith('file:'):
        return unquote(urlparse(source).path)
    return source


def _is_absolute(path: str) -> bool:
    return os.path.isabs(path) or path.startswith(('/', '\\')) or bool(_DRIVE_PATH.match(path))


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def _archive_name(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, '/')


def _expand_directory(directory: str, root: str, source: str) -> List[ResolvedResource]:
    resources = []
    # Real paths of the directories above each walked path, to stop link loops
    ancestors = {directory: frozenset()}

    for dirpath, dirnames, filenames in os.walk(directory, followlinks=True):
        real_dir = os.path.realpath(dirpath)
        if not _is_within(real_dir, root):
            raise SourceOutsideContext(
                f"{dirpath} links outside of {root}", source=source
            )
        above = ancestors.pop(dirpath, frozenset())
        if real_dir in above:
            logger.debug(f"Skipping directory link loop at {dirpath}")
            dirnames[:] = []
            continue

        dirnames.sort()
        for name in dirnames:
            ancestors[os.path.join(dirpath, name)] = above | {real_dir}
        for name in filenames:
            file_path = os.path.join(dirpath, name)
            if not _is_within(os.path.realpath(file_path), root):
                raise SourceOutsideContext(
                    f"{file_path} links outside of {root}", source=source
                )
            if not os.path.isfile(file_path):
                logger.debug(f"Skipping non-regular file {file_path}")
                continue
            resources.append(ResolvedResource(file_path, _archive_name(file_path, root)))

    resources.sort(key=lambda r: r.archive_name)
    return resources


def resolve(directive: Directive, context_root: str) -> List[ResolvedResource]:
    """
    Resolve the source of an ADD directive

    Args:
        directive: Parsed directive (non-ADD directives resolve to nothing)
        context_root: Build context directory

    Returns:
        Files to add, directories expanded recursively

    Raises:
        UnsafeAbsoluteSource: Source is an absolute path
        SourceOutsideContext: Source escapes the context directory
        SourceNotFound: Source does not exist
    """
    if not directive.is_inclusion:
        return []

    source = directive.source
    if not is_file_resource(source):
        logger.debug(f"Remote source {source} left to the daemon")
        return []

    path = _local_path(source)
    if _is_absolute(path):
        raise UnsafeAbsoluteSource(
            f"Source file {path} must be relative to {context_root}", source=source
        )

    root = os.path.realpath(context_root)
    candidate = os.path.realpath(os.path.join(root, path))

    if not _is_within(candidate, root):
        raise SourceOutsideContext(
            f"Source file {path} is outside of {context_root}", source=source
        )
    if not os.path.exists(candidate):
        raise SourceNotFound(f"Source file {candidate} doesn't exist", source=source)

    if os.path.isdir(candidate):
        return _expand_directory(candidate, root, source)
    return [ResolvedResource(candidate, _archive_name(candidate, root))]


def resolve_context(context: BuildContext, directives: Iterable[Directive]) -> List[ResolvedResource]:
    """
    Collect every file of the build context

    The Dockerfile always comes first, then ADD sources in directive order.
    A file named more than once is kept at its first position.
    """
    dockerfile = ResolvedResource(
        os.path.abspath(context.dockerfile_path),
        context.dockerfile_name.replace(os.sep, '/')
    )
    resources = [dockerfile]
    seen = {dockerfile.archive_name}

    for directive in directives:
        for resource in resolve(directive, context.root_directory):
            if resource.archive_name in seen:
                continue
            seen.add(resource.archive_name)
            resources.append(resource)

    logger.debug(f"Resolved {len(resources)} files in {context.root_directory}")
    return resources
