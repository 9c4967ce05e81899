"""
fzfpipe.dispatch — Turn decoded commands into editor actions.

    kind   needs                       action
    open   path exists                 show_document
    add    path exists                 add_workspace_folder, show_explorer
    rg     file exists, position ok    show_document, then select_and_reveal
    other  -                           nothing

Every failure is a silent no-op: missing paths are expected when files
move between listing and selection. dispatch() never raises.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional

from .paths import resolve_path
from .protocol import Command, CommandKind, DecodeResult, NoOp

logger = logging.getLogger("fzfpipe.dispatch")

Resolver = Callable[[str, str], Optional[str]]


class EditorActions(ABC):
    """
    Editor capabilities the dispatcher calls.

    Implement this for the host editor. show_document returns whatever
    handle select_and_reveal needs to address the shown document.
    """

    @abstractmethod
    async def show_document(self, path: str) -> Any:
        pass

    @abstractmethod
    async def select_and_reveal(self, document: Any, line: int, column: int):
        """Place the cursor at a zero-based position and scroll to it"""
        pass

    @abstractmethod
    async def add_workspace_folder(self, path: str):
        pass

    @abstractmethod
    async def show_explorer(self):
        pass


class CommandDispatcher:
    """
    Performs at most one editor action per command.

    Args:
        editor: Editor capabilities
        resolver: Path resolver (default: fzfpipe.paths.resolve_path)
    """

    def __init__(self, editor: EditorActions, resolver: Resolver = resolve_path):
        self.editor = editor
        self.resolver = resolver
        self._handlers: Dict[str, Callable[[Command], Awaitable[bool]]] = {
            CommandKind.OPEN.value: self._open,
            CommandKind.ADD.value: self._add,
            CommandKind.RG.value: self._goto,
        }

    async def dispatch(self, result: DecodeResult) -> bool:
        """
        Dispatch a decoded line.

        Returns True if an editor action was performed.
        """
        if isinstance(result, NoOp):
            logger.debug(f"Dropped line ({result.reason}): {result.raw!r}")
            return False

        handler = self._handlers.get(result.kind)
        if handler is None:
            logger.debug(f"Ignoring unknown command kind '{result.kind}'")
            return False

        try:
            return await handler(result)
        except Exception as e:
            logger.warning(f"{result.kind} {result.argument!r} failed: {e}", exc_info=True)
            return False

    def _resolve(self, argument: str, cwd: str) -> Optional[str]:
        path = self.resolver(argument, cwd)
        if path is None:
            logger.debug(f"No such path: {argument!r} (cwd {cwd!r})")
        return path

    async def _open(self, command: Command) -> bool:
        path = self._resolve(command.argument, command.cwd)
        if path is None:
            return False
        await self.editor.show_document(path)
        return True

    async def _add(self, command: Command) -> bool:
        folder = self._resolve(command.argument, command.cwd)
        if folder is None:
            return False
        await self.editor.add_workspace_folder(folder)
        await self.editor.show_explorer()
        return True

    async def _goto(self, command: Command) -> bool:
        location = command.location
        if location is None:
            return False
        path = self._resolve(location.path, command.cwd)
        if path is None:
            return False
        # Selection can only be applied once the document is shown
        document = await self.editor.show_document(path)
        await self.editor.select_and_reveal(document, location.line, location.column)
        return True
