"""
fzfpipe.config — Settings for the finder pipeline.

Settings come from the environment, optionally seeded from a .env file:

    FZF_QUICK_OPEN_FUZZY_CMD                  finder command (default: fzf)
    FZF_QUICK_OPEN_FIND_DIRECTORIES_CMD       command listing directories
    FZF_QUICK_OPEN_INITIAL_WORKING_DIRECTORY  cwd for the finder terminal
    FZF_QUICK_OPEN_RIPGREP_SEARCH_STYLE       Case sensitive | Ignore case | Smart case
    FZF_QUICK_OPEN_RIPGREP_OPTIONS            extra ripgrep flags
    FZF_QUICK_OPEN_WINDOWS_SHELL              shell path, picks the quoting style

A Settings value is immutable. SettingsStore owns the current one and
swaps it wholesale on reload.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger("fzfpipe.config")

ENV_PREFIX = "FZF_QUICK_OPEN_"


class SearchStyle(Enum):
    """Ripgrep case handling"""
    CASE_SENSITIVE = "Case sensitive"
    IGNORE_CASE = "Ignore case"
    SMART_CASE = "Smart case"


SEARCH_STYLE_FLAGS = {
    SearchStyle.CASE_SENSITIVE: "--case-sensitive",
    SearchStyle.IGNORE_CASE: "--ignore-case",
    SearchStyle.SMART_CASE: "--smart-case",
}

# Windows shells that take double quotes and treat backslash literally
_WINDOWS_CMD_SHELLS = ("cmd.exe", "powershell.exe")


@dataclass(frozen=True)
class Settings:
    fuzzy_cmd: str = "fzf"
    find_directories_cmd: Optional[str] = None
    initial_working_directory: Optional[str] = None
    search_style: SearchStyle = SearchStyle.CASE_SENSITIVE
    search_options: str = ""
    windows_shell: Optional[str] = None
    platform: str = field(default_factory=lambda: sys.platform)

    @property
    def rg_flags(self) -> str:
        flags = SEARCH_STYLE_FLAGS.get(self.search_style, "--case-sensitive")
        return f"{flags} {self.search_options}".strip()

    @property
    def is_windows(self) -> bool:
        return self.platform == 'win32'

    @property
    def is_windows_cmd(self) -> bool:
        """True for cmd.exe and powershell.exe"""
        if not self.windows_shell:
            return False
        return self.windows_shell.lower().endswith(_WINDOWS_CMD_SHELLS)

    @property
    def needs_escape(self) -> bool:
        """Backslashes in embedded paths must be doubled (e.g. Git Bash)"""
        return self.is_windows and not self.is_windows_cmd

    @property
    def quote(self) -> str:
        if self.is_windows and self.is_windows_cmd:
            return '"'
        return "'"

    @property
    def path_quote(self) -> str:
        """Quote around embedded paths; escaped backslashes need double quotes"""
        if self.needs_escape:
            return '"'
        return self.quote


def _parse_search_style(value: Optional[str]) -> SearchStyle:
    if not value:
        return SearchStyle.CASE_SENSITIVE
    try:
        return SearchStyle(value.strip())
    except ValueError:
        logger.warning(
            f"Unknown ripgrep search style '{value}', "
            f"using '{SearchStyle.CASE_SENSITIVE.value}'"
        )
        return SearchStyle.CASE_SENSITIVE


def settings_from_env(environ: Mapping[str, str],
                      platform: Optional[str] = None) -> Settings:
    """Build Settings from an environment mapping"""
    platform = platform or sys.platform

    def get(name: str) -> Optional[str]:
        value = environ.get(ENV_PREFIX + name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    windows_shell = get("WINDOWS_SHELL")
    if windows_shell is None and platform == 'win32':
        windows_shell = environ.get("COMSPEC") or None

    return Settings(
        fuzzy_cmd=get("FUZZY_CMD") or "fzf",
        find_directories_cmd=get("FIND_DIRECTORIES_CMD"),
        initial_working_directory=get("INITIAL_WORKING_DIRECTORY"),
        search_style=_parse_search_style(get("RIPGREP_SEARCH_STYLE")),
        search_options=get("RIPGREP_OPTIONS") or "",
        windows_shell=windows_shell,
        platform=platform,
    )


def load_settings(env_file: Optional[str] = None,
                  environ: Optional[Mapping[str, str]] = None,
                  platform: Optional[str] = None) -> Settings:
    """
    Load settings.

    Args:
        env_file: .env file to load first; its values override the process
                  environment so edits take effect on reload
        environ: Mapping to read instead of os.environ (dotenv is skipped)
        platform: Override sys.platform
    """
    if environ is None:
        if env_file is not None:
            if not load_dotenv(env_file, override=True):
                logger.warning(f"No settings loaded from {env_file}")
        else:
            load_dotenv()
        environ = os.environ
    return settings_from_env(environ, platform)


class SettingsStore:
    """
    Owns the current Settings value.

    Readers take the value once (store.current) and use it for the whole
    operation. Updates replace the value and then notify listeners.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 loader: Callable[[], Settings] = load_settings):
        self._loader = loader
        self._settings = settings if settings is not None else loader()
        self._listeners: List[Callable[[Settings], None]] = []

    @property
    def current(self) -> Settings:
        return self._settings

    def subscribe(self, listener: Callable[[Settings], None]):
        self._listeners.append(listener)

    def replace(self, settings: Settings):
        self._settings = settings
        logger.debug(f"Settings replaced: {settings}")
        for listener in list(self._listeners):
            listener(settings)

    def reload(self) -> Settings:
        """Re-read settings from the loader and swap them in"""
        self.replace(self._loader())
        return self._settings
