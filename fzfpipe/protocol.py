"""
fzfpipe.protocol — Text line protocol between the wrapper and the listener.

One command per line, three fields joined by a literal '$$':

    <kind>$$<workingDirectory>$$<argument>

Kinds:
    open   argument is a file to show
    add    argument is a folder to add as a workspace root
    rg     argument is <file>:<line>:<column>[:<text>], 1-based positions
           (the format `rg --vimgrep` prints)

Decoding never raises. Anything that cannot be acted on comes back as a
NoOp carrying the reason, so callers have to handle that branch.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

FIELD_SEPARATOR = "$$"


class CommandKind(str, Enum):
    """Command kinds the dispatcher knows how to act on"""
    OPEN = "open"
    ADD = "add"
    RG = "rg"


@dataclass(frozen=True)
class Location:
    """Zero-based cursor position inside a file"""
    path: str
    line: int
    column: int


@dataclass(frozen=True)
class Command:
    """
    One decoded protocol line.

    kind is kept as the raw string; unknown kinds still decode and are
    ignored at dispatch time. location is only set for rg.
    """
    kind: str
    cwd: str
    argument: str
    location: Optional[Location] = None


@dataclass(frozen=True)
class NoOp:
    """A line that decodes to nothing actionable"""
    reason: str
    raw: str = ""


DecodeResult = Union[Command, NoOp]

# The optional drive prefix keeps "C:\src\a.py:3:1" in one piece.
_RG_ARGUMENT = re.compile(
    r'^(?P<path>(?:[A-Za-z]:(?=[\\/]))?[^:]*):(?P<line>[0-9]+):(?P<column>[0-9]+)(?::.*)?$',
    re.DOTALL,
)


def _decode_location(argument: str) -> Optional[Location]:
    match = _RG_ARGUMENT.match(argument)
    if match is None:
        return None
    line = int(match.group('line'), 10)
    column = int(match.group('column'), 10)
    if line < 1 or column < 1:
        return None
    return Location(match.group('path').strip(), line - 1, column - 1)


def decode(data: Union[bytes, str]) -> DecodeResult:
    """
    Decode one protocol line.

    Returns a Command, or a NoOp when the line is malformed, carries no
    selection, or has an rg position that does not parse.
    """
    if isinstance(data, bytes):
        data = data.decode('utf-8', errors='replace')
    text = data.strip()

    fields = text.split(FIELD_SEPARATOR, 2)
    if len(fields) < 3:
        return NoOp("malformed", text)

    kind, cwd, argument = (f.strip() for f in fields)
    if not argument:
        # Finder was cancelled without a selection
        return NoOp("empty selection", text)
    if not kind or not cwd:
        return NoOp("malformed", text)

    location = None
    if kind == CommandKind.RG.value:
        location = _decode_location(argument)
        if location is None or not location.path:
            return NoOp("bad position", text)

    return Command(kind=kind, cwd=cwd, argument=argument, location=location)


def encode(kind: str, cwd: str, argument: str) -> str:
    """Build one protocol line, newline included"""
    argument = argument.replace('\r', ' ').replace('\n', ' ')
    return FIELD_SEPARATOR.join((kind, cwd, argument)) + '\n'
