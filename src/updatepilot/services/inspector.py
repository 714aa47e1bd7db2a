"""Inspection of locally installed plugins and themes."""

import re
from pathlib import Path
from typing import Protocol

from updatepilot.logger import get_logger
from updatepilot.models.extension import ExtensionKind

logger = get_logger(__name__)

# Headers are only looked for in the beginning of a file
HEADER_READ_SIZE = 8192


def _header_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"^(?:[ \t]*<\?php)?[ \t/*#@]*{re.escape(name)}:(.*)$", re.IGNORECASE | re.MULTILINE)


VERSION_HEADER = _header_pattern("Version")
PLUGIN_NAME_HEADER = _header_pattern("Plugin Name")


class LocalArtifactInspector(Protocol):
    """What the registry needs to know about installed artifacts."""

    def list_installed_plugin_folders(self) -> set[str]: ...

    def list_installed_theme_folders(self) -> set[str]: ...

    def get_installed_version(self, kind: ExtensionKind, folder: str) -> str | None: ...


class FilesystemInspector:
    """
    Reads installed plugins and themes from their directories.

    Every subdirectory of ``plugins_dir`` / ``themes_dir`` is an installed
    folder. Versions come from the ``Version:`` file header of the plugin main
    file or of the theme's ``style.css``.
    """

    def __init__(self, plugins_dir: Path, themes_dir: Path) -> None:
        self.plugins_dir = plugins_dir
        self.themes_dir = themes_dir

    def base_dir(self, kind: ExtensionKind) -> Path:
        return self.plugins_dir if kind is ExtensionKind.PLUGIN else self.themes_dir

    def list_installed_plugin_folders(self) -> set[str]:
        return self._folders(self.plugins_dir)

    def list_installed_theme_folders(self) -> set[str]:
        return self._folders(self.themes_dir)

    @staticmethod
    def _folders(base: Path) -> set[str]:
        if not base.is_dir():
            return set()
        return {p.name for p in base.iterdir() if p.is_dir() and not p.name.startswith(".")}

    def get_installed_version(self, kind: ExtensionKind, folder: str) -> str | None:
        """
        Get the version an installed plugin or theme declares.

        Args:
            kind: Plugin or theme
            folder: Installation folder name

        Returns:
            The declared version, or None if the folder or header is missing
        """
        path = self.base_dir(kind) / folder
        if not folder or not path.is_dir():
            return None

        if kind is ExtensionKind.THEME:
            return self._read_header(path / "style.css", VERSION_HEADER)

        main_file = self._find_plugin_main_file(path)
        if main_file is None:
            return None
        return self._read_header(main_file, VERSION_HEADER)

    def _find_plugin_main_file(self, path: Path) -> Path | None:
        preferred = path / f"{path.name}.php"
        if preferred.is_file():
            return preferred
        for candidate in sorted(path.glob("*.php")):
            if self._read_header(candidate, PLUGIN_NAME_HEADER):
                return candidate
        return None

    @staticmethod
    def _read_header(file: Path, pattern: re.Pattern[str]) -> str | None:
        if not file.is_file():
            return None
        try:
            with open(file, encoding="utf-8", errors="replace") as f:
                head = f.read(HEADER_READ_SIZE)
        except OSError as e:
            logger.warning(f"Cannot read {file}: {e}")
            return None

        match = pattern.search(head.replace("\r", "\n"))
        if not match:
            return None
        # Strip a trailing comment close such as "*/"
        value = re.sub(r"\s*(?:\*/|\?>).*$", "", match.group(1)).strip()
        return value or None
