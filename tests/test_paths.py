"""Tests for path resolution."""

import os

from fzfpipe.paths import resolve_path


class TestResolvePath:
    """Tests for resolve_path()."""

    def test_relative_path_joined_onto_cwd(self, workspace) -> None:
        assert resolve_path("file.txt", str(workspace)) == os.path.join(
            str(workspace), "file.txt"
        )

    def test_absolute_path_used_as_is(self, workspace, tmp_path_factory) -> None:
        target = str(workspace / "file.txt")
        other = str(tmp_path_factory.mktemp("elsewhere"))
        assert resolve_path(target, other) == target

    def test_missing_path_is_none(self, workspace) -> None:
        assert resolve_path("nope.txt", str(workspace)) is None

    def test_directories_resolve(self, workspace) -> None:
        assert resolve_path("sub", str(workspace)) == os.path.join(str(workspace), "sub")
