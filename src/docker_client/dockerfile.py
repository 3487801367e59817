"""
Dockerfile directive parser

Splits a Dockerfile into directives. Only ADD is interpreted by the client
(its sources go into the build context); every other instruction is kept as an
opaque directive and sent to the daemon untouched inside the archive.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from .exceptions import EmptyBuildFile, InvalidBuildContext, MalformedDirective

logger = logging.getLogger(__name__)

ADD = 'ADD'

_ARG_SEPARATOR = re.compile(r'[ \t]+')


class LineKind(Enum):
    BLANK = 'blank'
    COMMENT = 'comment'
    COMMAND = 'command'


@dataclass(frozen=True)
class Directive:
    """One Dockerfile instruction"""
    command: str
    args: List[str] = field(default_factory=list)
    line_number: int = 0
    raw: str = ''

    @property
    def is_inclusion(self) -> bool:
        return self.command == ADD

    @property
    def source(self) -> str:
        return self.args[0]

    @property
    def destination(self) -> str:
        return self.args[1]


def classify_line(line: str) -> LineKind:
    """Classify an already-trimmed line"""
    if not line:
        return LineKind.BLANK
    if line.startswith('#'):
        return LineKind.COMMENT
    return LineKind.COMMAND


def _parse_command(line: str, line_number: int) -> Directive:
    tokens = _ARG_SEPARATOR.split(line)
    command = tokens[0].upper()
    args = tokens[1:]

    if command == ADD and len(args) != 2:
        raise MalformedDirective(
            f"Wrong format on line {line_number}: [{line}] "
            f"(ADD takes a source and a destination)",
            line_number=line_number,
            line=line
        )

    return Directive(command=command, args=args, line_number=line_number, raw=line)


def parse(lines: Iterable[str]) -> List[Directive]:
    """
    Parse Dockerfile lines into directives

    Args:
        lines: Dockerfile content, one instruction per line

    Returns:
        Directives in file order

    Raises:
        MalformedDirective: ADD line without exactly two arguments
        EmptyBuildFile: No instruction lines at all
    """
    directives = []

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        kind = classify_line(line)

        if kind is LineKind.COMMAND:
            directives.append(_parse_command(line, line_number))

    if not directives:
        raise EmptyBuildFile("Dockerfile has no instructions")

    logger.debug(f"Parsed {len(directives)} Dockerfile directives")
    return directives


def parse_file(path: str) -> List[Directive]:
    """Read and parse a Dockerfile from disk"""
    try:
        with open(path, 'r', encoding='utf-8-sig', errors='surrogateescape') as f:
            content = f.read()
    except OSError as e:
        raise InvalidBuildContext(f"Cannot read Dockerfile {path}: {e}") from e

    try:
        return parse(content.splitlines())
    except EmptyBuildFile as e:
        raise EmptyBuildFile(f"Dockerfile {path} is empty") from e
