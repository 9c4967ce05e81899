"""Shared pytest fixtures."""

from typing import Any, List, Tuple

import pytest

from fzfpipe.config import Settings, SettingsStore
from fzfpipe.dispatch import EditorActions


class RecordingEditor(EditorActions):
    """Editor that records every call instead of acting on it."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []

    async def show_document(self, path: str) -> str:
        self.calls.append(("show_document", path))
        return f"doc:{path}"

    async def select_and_reveal(self, document: Any, line: int, column: int) -> None:
        self.calls.append(("select_and_reveal", document, line, column))

    async def add_workspace_folder(self, path: str) -> None:
        self.calls.append(("add_workspace_folder", path))

    async def show_explorer(self) -> None:
        self.calls.append(("show_explorer",))


@pytest.fixture
def editor() -> RecordingEditor:
    return RecordingEditor()


@pytest.fixture
def workspace(tmp_path):
    """A directory holding file.txt and a sub/ folder."""
    (tmp_path / "file.txt").write_text("hello\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    return tmp_path


@pytest.fixture
def posix_store() -> SettingsStore:
    """Settings store that never touches the environment."""
    settings = Settings(platform="linux")
    return SettingsStore(settings, loader=lambda: Settings(platform="linux"))
