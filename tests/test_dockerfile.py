"""
Dockerfile parser tests
"""

import pytest

from docker_client.dockerfile import Directive, LineKind, classify_line, parse, parse_file
from docker_client.exceptions import (
    EmptyBuildFile,
    ErrorKind,
    InvalidBuildContext,
    MalformedDirective,
    ParseError
)


class TestClassifyLine:
    """Line classification"""

    def test_blank(self):
        assert classify_line('') is LineKind.BLANK

    def test_comment(self):
        assert classify_line('# syntax=docker/dockerfile:1') is LineKind.COMMENT

    def test_command(self):
        assert classify_line('RUN make') is LineKind.COMMAND


class TestParse:
    """parse()"""

    def test_skips_blank_lines_and_comments(self):
        directives = parse([
            '# base image',
            '',
            'FROM busybox',
            '   ',
            '  # indented comment',
            'ADD app.jar /app.jar',
        ])

        assert [d.command for d in directives] == ['FROM', 'ADD']

    def test_keeps_line_numbers_and_raw_text(self):
        directives = parse(['', 'FROM busybox'])

        assert directives[0].line_number == 2
        assert directives[0].raw == 'FROM busybox'

    def test_command_is_case_insensitive(self):
        directive = parse(['  add   app.jar\t/app.jar  '])[0]

        assert directive.command == 'ADD'
        assert directive.is_inclusion
        assert directive.source == 'app.jar'
        assert directive.destination == '/app.jar'

    def test_unknown_commands_are_opaque(self):
        directive = parse(['RUN echo hello world'])[0]

        assert directive == Directive('RUN', ['echo', 'hello', 'world'], 1, 'RUN echo hello world')
        assert not directive.is_inclusion

    def test_add_prefix_is_not_add(self):
        directive = parse(['ADDITIONAL a b c'])[0]

        assert directive.command == 'ADDITIONAL'
        assert not directive.is_inclusion

    @pytest.mark.parametrize('line', ['ADD app.jar', 'ADD', 'ADD a b c'])
    def test_add_requires_two_arguments(self, line):
        with pytest.raises(MalformedDirective) as exc_info:
            parse(['FROM busybox', line])

        assert exc_info.value.line_number == 2
        assert exc_info.value.line == line
        assert exc_info.value.kind is ErrorKind.PARSE

    def test_empty_input(self):
        with pytest.raises(EmptyBuildFile):
            parse([])

    def test_only_comments_is_empty(self):
        with pytest.raises(EmptyBuildFile) as exc_info:
            parse(['# nothing here', '', '   '])

        assert isinstance(exc_info.value, ParseError)


class TestParseFile:
    """parse_file()"""

    def test_reads_file(self, tmp_path):
        dockerfile = tmp_path / 'Dockerfile'
        dockerfile.write_text("FROM busybox\r\nADD a.txt /a.txt\r\n")

        directives = parse_file(str(dockerfile))

        assert [d.raw for d in directives] == ['FROM busybox', 'ADD a.txt /a.txt']

    def test_byte_order_mark_is_dropped(self, tmp_path):
        dockerfile = tmp_path / 'Dockerfile'
        dockerfile.write_bytes(b'\xef\xbb\xbfADD app.jar /app.jar\n')

        directives = parse_file(str(dockerfile))

        assert directives[0].command == 'ADD'
        assert directives[0].source == 'app.jar'

    def test_non_utf8_bytes_pass_through(self, tmp_path):
        dockerfile = tmp_path / 'Dockerfile'
        dockerfile.write_bytes(b'# caf\xe9\nFROM busybox\nLABEL name=caf\xe9\n')

        directives = parse_file(str(dockerfile))

        assert [d.command for d in directives] == ['FROM', 'LABEL']
        assert directives[1].raw.encode('utf-8', 'surrogateescape') == b'LABEL name=caf\xe9'

    def test_empty_file(self, tmp_path):
        dockerfile = tmp_path / 'Dockerfile'
        dockerfile.write_text('')

        with pytest.raises(EmptyBuildFile, match='is empty'):
            parse_file(str(dockerfile))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidBuildContext):
            parse_file(str(tmp_path / 'Dockerfile'))
