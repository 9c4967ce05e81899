"""Tests for CommandDispatcher and the JSON lines editor."""

import io
import json
import os

import pytest

from fzfpipe.dispatch import CommandDispatcher
from fzfpipe.editor import JsonLinesEditor
from fzfpipe.protocol import decode


class TestCommandDispatcher:
    """Tests for CommandDispatcher.dispatch()."""

    @pytest.fixture
    def dispatcher(self, editor) -> CommandDispatcher:
        return CommandDispatcher(editor)

    @pytest.mark.asyncio
    async def test_open_shows_document(self, dispatcher, editor, workspace) -> None:
        line = f"open$${workspace}$$file.txt"
        assert await dispatcher.dispatch(decode(line)) is True
        assert editor.calls == [("show_document", os.path.join(str(workspace), "file.txt"))]

    @pytest.mark.asyncio
    async def test_empty_selection_dispatches_nothing(self, dispatcher, editor, workspace) -> None:
        assert await dispatcher.dispatch(decode(f"open$${workspace}$$  ")) is False
        assert editor.calls == []

    @pytest.mark.asyncio
    async def test_rg_shows_then_selects(self, dispatcher, editor, workspace) -> None:
        path = os.path.join(str(workspace), "file.txt")
        assert await dispatcher.dispatch(decode(f"rg$${workspace}$$file.txt:10:5")) is True
        assert editor.calls == [
            ("show_document", path),
            ("select_and_reveal", f"doc:{path}", 9, 4),
        ]

    @pytest.mark.asyncio
    async def test_add_folder_then_explorer(self, dispatcher, editor, workspace) -> None:
        assert await dispatcher.dispatch(decode(f"add$${workspace}$$sub")) is True
        assert editor.calls == [
            ("add_workspace_folder", os.path.join(str(workspace), "sub")),
            ("show_explorer",),
        ]

    @pytest.mark.asyncio
    async def test_add_missing_folder_does_nothing(self, dispatcher, editor, workspace) -> None:
        assert await dispatcher.dispatch(decode(f"add$${workspace}$$missing")) is False
        assert editor.calls == []

    @pytest.mark.asyncio
    async def test_rg_missing_file_does_nothing(self, dispatcher, editor, workspace) -> None:
        assert await dispatcher.dispatch(decode(f"rg$${workspace}$$gone.txt:1:1")) is False
        assert editor.calls == []

    @pytest.mark.asyncio
    async def test_unknown_kind_is_noop(self, dispatcher, editor, workspace) -> None:
        assert await dispatcher.dispatch(decode(f"delete$${workspace}$$file.txt")) is False
        assert editor.calls == []

    @pytest.mark.asyncio
    async def test_same_command_twice_acts_twice(self, dispatcher, editor, workspace) -> None:
        line = f"open$${workspace}$$file.txt"
        await dispatcher.dispatch(decode(line))
        await dispatcher.dispatch(decode(line))
        assert [c[0] for c in editor.calls] == ["show_document", "show_document"]

    @pytest.mark.asyncio
    async def test_editor_failure_does_not_escape(self, dispatcher, editor, workspace) -> None:
        async def broken(path):
            raise RuntimeError("editor went away")

        editor.show_document = broken
        assert await dispatcher.dispatch(decode(f"open$${workspace}$$file.txt")) is False

    @pytest.mark.asyncio
    async def test_custom_resolver(self, editor) -> None:
        seen = []

        def resolver(argument, cwd):
            seen.append((argument, cwd))
            return "/virtual/" + argument

        dispatcher = CommandDispatcher(editor, resolver=resolver)
        await dispatcher.dispatch(decode("open$$/w$$a.txt"))
        assert seen == [("a.txt", "/w")]
        assert editor.calls == [("show_document", "/virtual/a.txt")]


class TestJsonLinesEditor:
    """Tests for JsonLinesEditor."""

    @pytest.mark.asyncio
    async def test_events_are_json_lines(self, workspace) -> None:
        stream = io.StringIO()
        dispatcher = CommandDispatcher(JsonLinesEditor(stream))

        await dispatcher.dispatch(decode(f"rg$${workspace}$$file.txt:2:3"))
        await dispatcher.dispatch(decode(f"add$${workspace}$$sub"))

        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        path = os.path.join(str(workspace), "file.txt")
        assert events == [
            {"event": "open", "path": path},
            {"event": "select", "path": path, "line": 1, "column": 2},
            {"event": "add_folder", "path": os.path.join(str(workspace), "sub")},
            {"event": "show_explorer"},
        ]
