"""
TAR archive builder for Docker build contexts
"""

import io
import logging
import os
import stat
import tarfile
import tempfile
from typing import BinaryIO, List, Optional, Sequence, Union

from .context import DEFAULT_DOCKERFILE, ResolvedResource
from .exceptions import ArchiveError

logger = logging.getLogger(__name__)


def _ordered(resources: Sequence[ResolvedResource], dockerfile_name: str) -> List[ResolvedResource]:
    # Dockerfile first so the daemon can start on it before the rest arrives
    head = [r for r in resources if r.archive_name == dockerfile_name]
    tail = [r for r in resources if r.archive_name != dockerfile_name]
    return head[:1] + tail


def _tar_info(resource: ResolvedResource, st) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=resource.archive_name)
    info.size = st.st_size
    info.mode = stat.S_IMODE(st.st_mode)
    info.type = tarfile.REGTYPE
    # Fixed metadata keeps the archive byte-identical between builds
    info.mtime = 0
    info.uid = info.gid = 0
    info.uname = info.gname = ''
    return info


def _add_resource(tar: tarfile.TarFile, resource: ResolvedResource):
    with open(resource.absolute_path, 'rb') as f:
        info = _tar_info(resource, os.fstat(f.fileno()))
        tar.addfile(info, f)


def build_archive(resources: Sequence[ResolvedResource],
                  dockerfile_name: str = DEFAULT_DOCKERFILE,
                  fileobj: Optional[BinaryIO] = None) -> BinaryIO:
    """
    Write resolved build context files into an uncompressed tar stream

    Args:
        resources: Files from the resolver
        dockerfile_name: Archive name of the Dockerfile, always written first
        fileobj: Destination (default: anonymous temporary file)

    Returns:
        Archive file object, rewound to the start of the archive when seekable

    Raises:
        ArchiveError: A source file could not be read; partial output is discarded
    """
    owned = fileobj is None
    if owned:
        fileobj = tempfile.TemporaryFile(prefix='docker-context-', suffix='.tar')
    start = _rewind_point(fileobj)
    # Pipes and sockets get the streaming writer, which never seeks
    mode = 'w' if start is not None else 'w|'

    try:
        with tarfile.open(fileobj=fileobj, mode=mode, format=tarfile.PAX_FORMAT,
                          encoding='utf-8') as tar:
            for resource in _ordered(resources, dockerfile_name):
                _add_resource(tar, resource)
    except (OSError, tarfile.TarError) as e:
        _discard(fileobj, start, owned)
        raise ArchiveError(f"Error occurred while preparing Docker context folder: {e}") from e

    if start is not None:
        fileobj.seek(start)
    logger.debug(f"Build context archive written ({len(resources)} entries)")
    return fileobj


def _rewind_point(fileobj: BinaryIO) -> Optional[int]:
    seekable = getattr(fileobj, 'seekable', None)
    if seekable is None or not seekable():
        return None
    return fileobj.tell()


def _discard(fileobj: BinaryIO, start: Optional[int], owned: bool):
    if owned:
        fileobj.close()
        return
    if start is None:
        logger.warning("Partial archive already written to a non-seekable stream")
        return
    try:
        fileobj.seek(start)
        fileobj.truncate()
    except (OSError, ValueError) as e:
        logger.warning(f"Could not discard partial archive: {e}")


def archive_bytes(resources: Sequence[ResolvedResource],
                  dockerfile_name: str = DEFAULT_DOCKERFILE) -> bytes:
    """Build the archive in memory"""
    buffer = build_archive(resources, dockerfile_name, fileobj=io.BytesIO())
    return buffer.getvalue()


def list_archive(archive: Union[bytes, BinaryIO]) -> List[str]:
    """
    List contents of tar archive

    Args:
        archive: Tar archive as bytes or a readable file object

    Returns:
        Entry names in archive order
    """
    fileobj = io.BytesIO(archive) if isinstance(archive, bytes) else archive

    with tarfile.open(fileobj=fileobj, mode='r') as tar:
        return tar.getnames()
