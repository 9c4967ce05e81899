"""
fzfpipe.shell — Command lines that feed finder selections into the endpoint.

Each command ends with the wrapper writing to the endpoint:

    fzf | <wrapper> open <endpoint>

Endpoint and wrapper paths are escaped for the configured shell exactly
once, here, when they are embedded, and then wrapped in the path quote.
escape_win_path is not idempotent: escaping an escaped path doubles the
backslashes again. The raw endpoint name is what the OS calls use and
is never escaped.
"""

import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .config import Settings
from .protocol import CommandKind


def escape_win_path(path: str, settings: Settings) -> str:
    """Double backslashes for Windows shells that treat them as escapes"""
    if settings.needs_escape:
        return path.replace('\\', '\\\\')
    return path


def quote(value: str, settings: Settings) -> str:
    q = settings.quote
    return f"{q}{value}{q}"


def quote_path(path: str, settings: Settings) -> str:
    """Escape a path for the shell, then wrap it in the path quote"""
    q = settings.path_quote
    return f"{q}{escape_win_path(path, settings)}{q}"


def default_wrapper() -> List[str]:
    """Argv of the companion wrapper (fzfpipe.topipe)"""
    return [sys.executable, "-m", "fzfpipe.topipe"]


def _wrapper_invocation(wrapper: Union[str, Sequence[str]], settings: Settings) -> str:
    # A plain string is a single script path
    if isinstance(wrapper, str):
        wrapper = [wrapper]
    executable, *args = wrapper
    return " ".join([quote_path(executable, settings), *args])


@dataclass(frozen=True)
class ShellCommands:
    open_file: str
    add_folder: str
    search: str
    find_directories: Optional[str] = None

    def search_for(self, pattern: str, settings: Settings) -> str:
        """Search command with the pattern filled in"""
        return self.search.replace("{pattern}", quote(pattern, settings), 1)


def build_commands(settings: Settings, endpoint_name: str,
                   wrapper: Union[str, Sequence[str], None] = None) -> ShellCommands:
    """
    Build the command strings for one endpoint.

    Args:
        settings: Settings value read once for this build
        endpoint_name: Raw FIFO path or pipe name
        wrapper: Wrapper argv, or a script path (default: python -m fzfpipe.topipe)

    The search command keeps a '{pattern}' placeholder, filled in by
    ShellCommands.search_for.
    """
    fzf = settings.fuzzy_cmd
    pipe = quote_path(endpoint_name, settings)
    script = _wrapper_invocation(wrapper or default_wrapper(), settings)

    def to_pipe(kind: CommandKind) -> str:
        return f"{script} {kind.value} {pipe}"

    search = (
        f"rg {{pattern}} --vimgrep --color ansi {settings.rg_flags} "
        f"| {fzf} --ansi | {to_pipe(CommandKind.RG)}"
    )

    find_directories = None
    if settings.find_directories_cmd:
        find_directories = (
            f"{settings.find_directories_cmd} | {fzf} | {to_pipe(CommandKind.ADD)}"
        )

    return ShellCommands(
        open_file=f"{fzf} | {to_pipe(CommandKind.OPEN)}",
        add_folder=f"{fzf} | {to_pipe(CommandKind.ADD)}",
        search=search,
        find_directories=find_directories,
    )
