"""
fzfpipe — Send fzf selections from a terminal back to an editor

A terminal finder cannot call editor APIs, so the editor side opens a
FIFO (POSIX) or named pipe (Windows) and a small wrapper at the end of
the finder pipeline writes the selection into it:

    fzf | '/usr/bin/python3' -m fzfpipe.topipe open '/tmp/fzf-pipe-1234'

Each line is `kind$$cwd$$argument`; the listener decodes it and opens a
file, adds a workspace folder, or jumps to a ripgrep match.
"""

from .config import Settings, SettingsStore, SearchStyle, load_settings
from .dispatch import CommandDispatcher, EditorActions
from .endpoint import (
    EndpointError,
    EndpointState,
    FifoEndpoint,
    NamedPipeEndpoint,
    PipeEndpoint,
    create_endpoint,
)
from .host import FzfPipeHost
from .paths import resolve_path
from .protocol import Command, CommandKind, Location, NoOp, decode, encode
from .shell import ShellCommands, build_commands, escape_win_path, quote_path

__all__ = [
    'Settings',
    'SettingsStore',
    'SearchStyle',
    'load_settings',
    'CommandDispatcher',
    'EditorActions',
    'EndpointError',
    'EndpointState',
    'FifoEndpoint',
    'NamedPipeEndpoint',
    'PipeEndpoint',
    'create_endpoint',
    'FzfPipeHost',
    'resolve_path',
    'Command',
    'CommandKind',
    'Location',
    'NoOp',
    'decode',
    'encode',
    'ShellCommands',
    'build_commands',
    'escape_win_path',
    'quote_path',
]
