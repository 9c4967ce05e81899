"""
fzfpipe.editor — Editor actions reported as JSON lines.

The host editor runs the listener as a child process and reads one event
per line from its stdout:

    {"event": "open", "path": "/src/a.py"}
    {"event": "select", "path": "/src/a.py", "line": 9, "column": 4}
    {"event": "add_folder", "path": "/src/lib"}
    {"event": "show_explorer"}

Lines and columns are zero-based.
"""

import json
import sys
from typing import Any, Dict, Optional, TextIO

from .dispatch import EditorActions


class JsonLinesEditor(EditorActions):

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, event: str, **fields: Any):
        payload: Dict[str, Any] = {"event": event}
        payload.update(fields)
        self.stream.write(json.dumps(payload) + "\n")
        self.stream.flush()

    async def show_document(self, path: str) -> str:
        self._emit("open", path=path)
        return path

    async def select_and_reveal(self, document: str, line: int, column: int):
        self._emit("select", path=document, line=line, column=column)

    async def add_workspace_folder(self, path: str):
        self._emit("add_folder", path=path)

    async def show_explorer(self):
        self._emit("show_explorer")
