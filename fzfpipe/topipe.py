"""
fzfpipe.topipe — Companion wrapper at the end of a finder pipeline.

Usage:
    fzf | '/usr/bin/python3' -m fzfpipe.topipe open '/tmp/fzf-pipe-1234'

Reads the selection(s) from stdin and writes one protocol line per
selection into the endpoint, with the current directory as cwd. With no
selection a single line with an empty argument is written; the listener
drops it.
"""

import argparse
import os
import sys
from typing import Iterable, List, Optional, TextIO

from .protocol import CommandKind, encode


def build_lines(kind: str, cwd: str, selections: Iterable[str]) -> List[str]:
    lines = [encode(kind, cwd, s.rstrip('\r\n')) for s in selections if s.strip()]
    if not lines:
        lines.append(encode(kind, cwd, ""))
    return lines


def write_selections(kind: str, endpoint: str, stream: TextIO,
                     cwd: Optional[str] = None) -> int:
    """
    Write the selections read from stream into the endpoint.

    Returns the number of lines written.
    """
    lines = build_lines(kind, cwd or os.getcwd(), stream)
    # Opening blocks until the listener has the read side open
    with open(endpoint, 'w', encoding='utf-8', newline='\n') as pipe:
        pipe.write(''.join(lines))
    return len(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m fzfpipe.topipe",
        description="Send finder selections to an fzfpipe endpoint"
    )
    parser.add_argument(
        'kind',
        help=f"Command kind ({', '.join(k.value for k in CommandKind)})"
    )
    parser.add_argument('endpoint', help='FIFO path or named pipe name')

    args = parser.parse_args(argv)

    try:
        write_selections(args.kind, args.endpoint, sys.stdin)
    except OSError as e:
        print(f"Error: cannot write to {args.endpoint}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
