"""Tests for settings and the settings store."""

import pytest

from fzfpipe.config import SearchStyle, Settings, SettingsStore, load_settings, settings_from_env


class TestSettings:
    """Tests for Settings and environment loading."""

    def test_defaults(self) -> None:
        settings = settings_from_env({}, platform="linux")
        assert settings.fuzzy_cmd == "fzf"
        assert settings.find_directories_cmd is None
        assert settings.rg_flags == "--case-sensitive"
        assert settings.quote == "'"
        assert settings.needs_escape is False
        assert settings.path_quote == "'"

    def test_reads_prefixed_variables(self) -> None:
        settings = settings_from_env(
            {
                "FZF_QUICK_OPEN_FUZZY_CMD": "sk",
                "FZF_QUICK_OPEN_FIND_DIRECTORIES_CMD": "fd -t d",
                "FZF_QUICK_OPEN_INITIAL_WORKING_DIRECTORY": "/src",
                "FZF_QUICK_OPEN_RIPGREP_SEARCH_STYLE": "Smart case",
                "FZF_QUICK_OPEN_RIPGREP_OPTIONS": "--hidden",
            },
            platform="linux",
        )
        assert settings.fuzzy_cmd == "sk"
        assert settings.find_directories_cmd == "fd -t d"
        assert settings.initial_working_directory == "/src"
        assert settings.search_style is SearchStyle.SMART_CASE
        assert settings.rg_flags == "--smart-case --hidden"

    def test_unknown_search_style_falls_back(self, caplog) -> None:
        settings = settings_from_env(
            {"FZF_QUICK_OPEN_RIPGREP_SEARCH_STYLE": "Shouty case"}, platform="linux"
        )
        assert settings.search_style is SearchStyle.CASE_SENSITIVE
        assert "Shouty case" in caplog.text

    @pytest.mark.parametrize(
        "shell, quote_char, needs_escape, path_quote",
        [
            ("C:\\Windows\\System32\\cmd.exe", '"', False, '"'),
            ("C:\\Windows\\System32\\WindowsPowerShell\\v1.0\\PowerShell.exe", '"', False, '"'),
            ("C:\\Program Files\\Git\\bin\\bash.exe", "'", True, '"'),
            (None, "'", True, '"'),
        ],
    )
    def test_windows_shell_picks_quoting(self, shell, quote_char, needs_escape, path_quote) -> None:
        settings = Settings(windows_shell=shell, platform="win32")
        assert settings.quote == quote_char
        assert settings.needs_escape is needs_escape
        assert settings.path_quote == path_quote

    def test_windows_falls_back_to_comspec(self) -> None:
        settings = settings_from_env({"COMSPEC": "C:\\Windows\\cmd.exe"}, platform="win32")
        assert settings.is_windows_cmd

    def test_load_settings_from_env_file(self, tmp_path, monkeypatch) -> None:
        # Recorded here so the value dotenv writes is undone at teardown
        monkeypatch.setenv("FZF_QUICK_OPEN_FUZZY_CMD", "fzf")
        env_file = tmp_path / ".env"
        env_file.write_text("FZF_QUICK_OPEN_FUZZY_CMD=fzf --height 40%\n", encoding="utf-8")

        settings = load_settings(str(env_file), platform="linux")
        assert settings.fuzzy_cmd == "fzf --height 40%"


class TestSettingsStore:
    """Tests for SettingsStore."""

    def test_replace_notifies_listeners(self) -> None:
        store = SettingsStore(Settings(platform="linux"), loader=lambda: Settings(platform="linux"))
        seen = []
        store.subscribe(seen.append)

        new = Settings(fuzzy_cmd="sk", platform="linux")
        store.replace(new)

        assert store.current is new
        assert seen == [new]

    def test_reload_uses_loader(self) -> None:
        values = iter([Settings(platform="linux"), Settings(fuzzy_cmd="sk", platform="linux")])
        store = SettingsStore(loader=lambda: next(values))
        assert store.current.fuzzy_cmd == "fzf"
        assert store.reload().fuzzy_cmd == "sk"

