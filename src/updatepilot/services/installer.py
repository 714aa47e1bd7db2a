"""Download and unpack repository snapshots into the plugin/theme directories."""

import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Protocol

import httpx

from updatepilot.logger import get_logger
from updatepilot.models.extension import ExtensionKind
from updatepilot.services.http import ApiClient

logger = get_logger(__name__)

CHUNK_SIZE = 8192


class ArchiveInstaller(Protocol):
    """Fetches an archive and unpacks it as an installed plugin or theme."""

    def install(
        self, url: str, kind: ExtensionKind, folder: str, headers: dict[str, str] | None = None
    ) -> bool: ...


class ZipArchiveInstaller:
    """
    Installs zip snapshots as produced by GitHub zipball and GitLab archive.zip.

    Host archives wrap the tree in a single top-level directory named after
    the repository and ref. That directory becomes ``<kind dir>/<folder>``,
    replacing the previous installation.
    """

    def __init__(self, client: ApiClient, plugins_dir: Path, themes_dir: Path, cache_dir: Path) -> None:
        """
        Initialize the installer.

        Args:
            client: API client used for the download
            plugins_dir: Directory holding installed plugins
            themes_dir: Directory holding installed themes
            cache_dir: Scratch space for downloads and extraction
        """
        self.client = client
        self.plugins_dir = plugins_dir
        self.themes_dir = themes_dir
        self.cache_dir = cache_dir

    def install(self, url: str, kind: ExtensionKind, folder: str, headers: dict[str, str] | None = None) -> bool:
        """
        Download ``url`` and install it into ``folder``.

        Returns:
            True on success, False if the download or extraction failed
        """
        if not folder:
            logger.error("Refusing to install without an installation folder")
            return False

        base_dir = self.plugins_dir if kind is ExtensionKind.PLUGIN else self.themes_dir
        target = base_dir / folder
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        archive = self.cache_dir / f"{kind.value}-{folder}.zip"

        try:
            logger.info(f"Downloading {kind.value} archive for {folder}")
            if not self._download(url, archive, headers):
                return False

            with tempfile.TemporaryDirectory(dir=self.cache_dir) as tmpdir:
                extract_dir = Path(tmpdir)
                logger.info(f"Extracting {archive.name} to {target}")
                with zipfile.ZipFile(archive, "r") as zip_ref:
                    zip_ref.extractall(extract_dir)

                entries = list(extract_dir.iterdir())
                source = entries[0] if len(entries) == 1 and entries[0].is_dir() else extract_dir

                self._replace(source, target)
        except (httpx.HTTPError, zipfile.BadZipFile, OSError) as e:
            logger.error(f"Failed to install {kind.value} {folder}: {e}")
            return False
        finally:
            archive.unlink(missing_ok=True)

        logger.info(f"Installed {kind.value} {folder}")
        return True

    @staticmethod
    def _replace(source: Path, target: Path) -> None:
        """
        Swap ``source`` in as ``target``.

        The new tree is copied next to the target first. The previous
        installation is only removed once the copy is complete, and is put
        back if the swap fails.
        """
        target.parent.mkdir(parents=True, exist_ok=True)
        prefix = f".{target.name}.new-"
        staging = Path(tempfile.mkdtemp(prefix=prefix, dir=target.parent))
        backup = target.parent / f".{target.name}.old-{staging.name[len(prefix):]}"
        try:
            shutil.copytree(source, staging, dirs_exist_ok=True)
            if target.exists():
                os.replace(target, backup)
            try:
                os.replace(staging, target)
            except OSError:
                if backup.exists():
                    os.replace(backup, target)
                raise
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        shutil.rmtree(backup, ignore_errors=True)

    def _download(self, url: str, path: Path, headers: dict[str, str] | None) -> bool:
        with self.client.stream(url, headers=headers) as response:
            if response.status_code != 200:
                logger.error(f"Archive download returned HTTP {response.status_code}")
                return False
            with open(path, "wb") as out_file:
                for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                    out_file.write(chunk)
        return True
