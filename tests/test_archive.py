"""
Build context archive tests
"""

import io
import os
import tarfile
from unittest.mock import patch

import pytest

from docker_client.archive import archive_bytes, build_archive, list_archive
from docker_client.context import BuildContext, ResolvedResource, resolve_context
from docker_client.dockerfile import parse_file
from docker_client.exceptions import ArchiveError, ErrorKind


def resources_for(root):
    context = BuildContext(str(root))
    return resolve_context(context, parse_file(context.dockerfile_path))


class TestBuildArchive:
    """build_archive()"""

    def test_dockerfile_then_added_file(self, build_dir):
        archive = build_archive(resources_for(build_dir))
        try:
            assert list_archive(archive) == ['Dockerfile', 'app.jar']
        finally:
            archive.close()

    def test_dockerfile_is_moved_first(self, build_dir):
        resources = [
            ResolvedResource(str(build_dir / 'app.jar'), 'app.jar'),
            ResolvedResource(str(build_dir / 'Dockerfile'), 'Dockerfile'),
        ]

        assert list_archive(archive_bytes(resources)) == ['Dockerfile', 'app.jar']

    def test_entry_content_and_metadata(self, build_dir):
        os.chmod(str(build_dir / 'app.jar'), 0o751)

        data = archive_bytes(resources_for(build_dir))

        with tarfile.open(fileobj=io.BytesIO(data), mode='r') as tar:
            member = tar.getmember('app.jar')
            assert tar.extractfile(member).read() == b'PK\x03\x04jar-content'
            assert member.size == len(b'PK\x03\x04jar-content')
            assert member.mode == 0o751
            assert member.mtime == 0
            assert member.uid == member.gid == 0
            assert member.isfile()

    def test_nested_names_use_forward_slashes(self, tmp_path):
        (tmp_path / 'Dockerfile').write_text('ADD conf /etc/app\n')
        (tmp_path / 'conf' / 'sub').mkdir(parents=True)
        (tmp_path / 'conf' / 'sub' / 'app.ini').write_text('[app]\n')

        assert list_archive(archive_bytes(resources_for(tmp_path))) == ['Dockerfile', 'conf/sub/app.ini']

    def test_deterministic(self, build_dir):
        first = archive_bytes(resources_for(build_dir))
        os.utime(str(build_dir / 'app.jar'), (1000000000, 1000000000))
        second = archive_bytes(resources_for(build_dir))

        assert first == second

    def test_uncompressed(self, build_dir):
        data = archive_bytes(resources_for(build_dir))

        with tarfile.open(fileobj=io.BytesIO(data), mode='r:') as tar:
            assert len(tar.getmembers()) == 2

    def test_read_failure_discards_temporary_file(self, build_dir):
        created = []

        def temporary_file(**kwargs):
            created.append(io.BytesIO())
            return created[-1]

        resources = resources_for(build_dir) + [
            ResolvedResource(str(build_dir / 'vanished.bin'), 'vanished.bin')
        ]

        with patch('docker_client.archive.tempfile.TemporaryFile', side_effect=temporary_file):
            with pytest.raises(ArchiveError) as exc_info:
                build_archive(resources)

        assert exc_info.value.kind is ErrorKind.ARCHIVE
        assert created[0].closed

    def test_read_failure_truncates_caller_stream(self, build_dir):
        out = io.BytesIO()
        out.write(b'header')
        resources = [ResolvedResource(str(build_dir / 'vanished.bin'), 'vanished.bin')]

        with pytest.raises(ArchiveError):
            build_archive(resources, fileobj=out)

        assert out.getvalue() == b'header'

    def test_returned_stream_is_rewound(self, build_dir):
        out = build_archive(resources_for(build_dir), fileobj=io.BytesIO())

        assert out.tell() == 0

    def test_pipe_destination(self, build_dir):
        resources = resources_for(build_dir)
        read_fd, write_fd = os.pipe()

        with os.fdopen(write_fd, 'wb') as sink:
            build_archive(resources, fileobj=sink)
        with os.fdopen(read_fd, 'rb') as source:
            data = source.read()

        assert data == archive_bytes(resources)

    def test_read_failure_on_unseekable_destination(self, build_dir):
        class Sink(io.RawIOBase):
            def __init__(self):
                self.written = []

            def writable(self):
                return True

            def write(self, data):
                self.written.append(bytes(data))
                return len(data)

        resources = [ResolvedResource(str(build_dir / 'vanished.bin'), 'vanished.bin')]

        with pytest.raises(ArchiveError):
            build_archive(resources, fileobj=Sink())
