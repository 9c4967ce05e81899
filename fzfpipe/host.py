"""
fzfpipe.host — Wires settings, endpoint, codec and dispatcher together.

    host = FzfPipeHost(editor)
    await host.activate()
    host.commands.open_file     # hand this to the finder terminal
    ...
    await host.deactivate()
"""

import logging
import os
import sys
from typing import Optional, Sequence, Union

from .config import Settings, SettingsStore
from .dispatch import CommandDispatcher, EditorActions
from .endpoint import PipeEndpoint, create_endpoint
from .protocol import decode
from .shell import ShellCommands, build_commands

logger = logging.getLogger("fzfpipe.host")


class FzfPipeHost:
    """
    Editor-side half of the finder pipeline.

    Args:
        editor: Editor capabilities used by the dispatcher
        store: Settings store (default: loaded from the environment)
        platform: Override sys.platform
        pid: Override the process id used in endpoint names
        temp_dir: Directory for the POSIX FIFO
        wrapper: Wrapper argv or script path embedded in the command strings
    """

    def __init__(self, editor: EditorActions,
                 store: Optional[SettingsStore] = None,
                 platform: Optional[str] = None,
                 pid: Optional[int] = None,
                 temp_dir: Optional[str] = None,
                 wrapper: Union[str, Sequence[str], None] = None):
        self.store = store if store is not None else SettingsStore()
        self.platform = platform or sys.platform
        self.dispatcher = CommandDispatcher(editor)
        self.endpoint: PipeEndpoint = create_endpoint(
            self.handle_line, platform=self.platform, pid=pid, temp_dir=temp_dir
        )
        self.wrapper = wrapper
        self._commands: Optional[ShellCommands] = None
        self.store.subscribe(self._on_settings_changed)

    @property
    def commands(self) -> Optional[ShellCommands]:
        """Command strings, None until activated or without an endpoint"""
        return self._commands

    @property
    def working_directory(self) -> str:
        """Initial cwd for the finder terminal"""
        return self.store.current.initial_working_directory or os.getcwd()

    async def activate(self):
        await self.endpoint.start()
        self._rebuild_commands(self.store.current)

    async def deactivate(self):
        await self.endpoint.close()

    async def handle_line(self, line: bytes) -> bool:
        """Decode one line and dispatch it; True if an action ran"""
        return await self.dispatcher.dispatch(decode(line))

    def reload_settings(self, settings: Optional[Settings] = None):
        """Swap in new settings (re-read from the environment if not given)"""
        if settings is None:
            self.store.reload()
        else:
            self.store.replace(settings)

    def _on_settings_changed(self, settings: Settings):
        self._rebuild_commands(settings)

    def _rebuild_commands(self, settings: Settings):
        if self.endpoint.name is None:
            self._commands = None
            return
        self._commands = build_commands(settings, self.endpoint.name, self.wrapper)
        logger.debug(f"Command strings rebuilt for {self.endpoint.name}")
