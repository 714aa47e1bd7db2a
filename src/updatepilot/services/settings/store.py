"""Settings store.

Owns the connectors, plugins and themes. The whole graph is read from
settings.json at once and written back at once after every mutation.
"""

import json
import os
import tempfile
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from updatepilot.logger import get_logger
from updatepilot.models.config import HostsConfig
from updatepilot.models.extension import ExtensionKind
from updatepilot.models.settings import SettingsData
from updatepilot.services.connectors import Connector, create_connector
from updatepilot.services.extensions import Extension, Plugin, Theme
from updatepilot.services.http import ApiClient

logger = get_logger(__name__)


class SettingsStore:
    """
    Registry of connectors and tracked extensions.

    There is no global instance: the scheduler, reconciler and controller all
    receive the store they work on. ``lock`` is re-entrant and serializes
    sweeps and admin actions within one process. Writes from other processes
    are not coordinated; the last writer wins.
    """

    def __init__(
        self,
        settings_file: Path,
        client: ApiClient | None = None,
        hosts: HostsConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the store.

        Args:
            settings_file: Path of settings.json
            client: API client handed to every connector
            hosts: Host base URLs handed to every connector
            clock: Source of the current Unix time
        """
        self.settings_file = settings_file
        self.client = client or ApiClient()
        self.hosts = hosts or HostsConfig()
        self.clock = clock
        self.lock = threading.RLock()

        self.connectors: list[Connector] = []
        self.plugins: list[Plugin] = []
        self.themes: list[Theme] = []

    # Persistence

    def load(self) -> None:
        """
        Replace the in-memory graph with the content of the settings file.

        Connectors are built first so that every extension can be linked to
        its connector. Records that do not validate are skipped.
        """
        with self.lock:
            data = self._read()

            self.connectors = []
            for raw in data.connectors:
                try:
                    self.connectors.append(self.build_connector(raw))
                except PydanticValidationError as e:
                    logger.warning(f"Skipping invalid connector record: {e}")

            self.plugins = self._load_extensions(Plugin, data.plugins)  # type: ignore[assignment]
            self.themes = self._load_extensions(Theme, data.themes)  # type: ignore[assignment]

            logger.info(
                f"Loaded settings: {len(self.connectors)} connectors, "
                f"{len(self.plugins)} plugins, {len(self.themes)} themes"
            )

    def _read(self) -> SettingsData:
        if not self.settings_file.exists():
            return SettingsData()

        with open(self.settings_file, encoding="utf-8") as f:
            content = json.load(f)
        return SettingsData(**(content or {}))

    def _load_extensions(self, cls: type[Extension], records: list[dict]) -> list[Extension]:
        extensions: list[Extension] = []
        for raw in records:
            try:
                extension = cls.model_validate(raw)
            except PydanticValidationError as e:
                logger.warning(f"Skipping invalid {cls.kind.value} record: {e}")
                continue
            extension.connector = self.get_connector_by_id(extension.connector_id)
            if extension.connector is None:
                logger.warning(
                    f"{cls.kind.value} {extension.id} references unknown connector {extension.connector_id!r}"
                )
            extensions.append(extension)
        return extensions

    def save(self) -> None:
        """Write the whole graph to the settings file, replacing it atomically."""
        with self.lock:
            data = SettingsData(
                connectors=[c.to_record().model_dump(mode="json") for c in self.connectors],
                plugins=[p.to_record() for p in self.plugins],
                themes=[t.to_record() for t in self.themes],
            )

            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.settings_file.name}.", suffix=".tmp", dir=self.settings_file.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.settings_file)
            except Exception as e:
                logger.error(f"Failed to save settings.json: {e}")
                Path(tmp_name).unlink(missing_ok=True)
                raise

    # Connectors

    def build_connector(self, record: object) -> Connector:
        """Build a connector sharing this store's client, hosts and clock."""
        return create_connector(record, client=self.client, hosts=self.hosts, clock=self.clock)  # type: ignore[arg-type]

    def add_connector(self, connector: Connector) -> Connector:
        with self.lock:
            self.connectors.append(connector)
            return connector

    def get_connector_by_id(self, connector_id: str) -> Connector | None:
        return next((c for c in self.connectors if c.id == connector_id), None)

    def is_connector_used(self, connector_id: str) -> bool:
        """True if any plugin or theme references the connector."""
        return any(e.connector_id == connector_id for e in self.all_extensions())

    def delete_connector(self, connector_id: str) -> bool:
        """
        Remove a connector.

        Returns:
            False without changing anything if the connector is unknown or
            still referenced, True once it is removed
        """
        with self.lock:
            if self.is_connector_used(connector_id):
                logger.info(f"Refusing to delete connector {connector_id}: still in use")
                return False

            original_count = len(self.connectors)
            self.connectors = [c for c in self.connectors if c.id != connector_id]
            if len(self.connectors) < original_count:
                logger.info(f"Deleted connector {connector_id}")
                return True
            return False

    def connector_repositories(self, connector_id: str) -> list[Extension]:
        """Plugins and themes tracked through a connector."""
        return [e for e in self.all_extensions() if e.connector_id == connector_id]

    def connector_repository_count(self, connector_id: str) -> int:
        return len(self.connector_repositories(connector_id))

    def delete_unused_connectors(self) -> list[Connector]:
        """Remove every connector that no extension references."""
        with self.lock:
            unused = [c for c in self.connectors if not self.is_connector_used(c.id)]
            if unused:
                unused_ids = {c.id for c in unused}
                self.connectors = [c for c in self.connectors if c.id not in unused_ids]
                logger.info(f"Deleted unused connectors: {sorted(unused_ids)}")
            return unused

    # Extensions

    def extensions(self, kind: ExtensionKind) -> list[Extension]:
        return self.plugins if kind is ExtensionKind.PLUGIN else self.themes  # type: ignore[return-value]

    def all_extensions(self) -> list[Extension]:
        return [*self.plugins, *self.themes]

    def add_extension(self, extension: Extension) -> Extension:
        with self.lock:
            self.extensions(extension.kind).append(extension)
            return extension

    def get_extension_by_id(self, kind: ExtensionKind, extension_id: str) -> Extension | None:
        return next((e for e in self.extensions(kind) if e.id == extension_id), None)

    def get_extension_by_repository(self, kind: ExtensionKind, repository: str) -> Extension | None:
        return next((e for e in self.extensions(kind) if e.repository == repository), None)

    def get_plugin_by_id(self, plugin_id: str) -> Plugin | None:
        return self.get_extension_by_id(ExtensionKind.PLUGIN, plugin_id)  # type: ignore[return-value]

    def get_plugin_by_repository(self, repository: str) -> Plugin | None:
        return self.get_extension_by_repository(ExtensionKind.PLUGIN, repository)  # type: ignore[return-value]

    def get_theme_by_id(self, theme_id: str) -> Theme | None:
        return self.get_extension_by_id(ExtensionKind.THEME, theme_id)  # type: ignore[return-value]

    def get_theme_by_repository(self, repository: str) -> Theme | None:
        return self.get_extension_by_repository(ExtensionKind.THEME, repository)  # type: ignore[return-value]

    def delete_extension(self, kind: ExtensionKind, extension_id: str) -> bool:
        """
        Stop tracking an extension. The installed files are left alone.

        Returns:
            True if removed, False if not found
        """
        with self.lock:
            entries = self.extensions(kind)
            remaining = [e for e in entries if e.id != extension_id]
            if len(remaining) == len(entries):
                return False
            entries[:] = remaining
            logger.info(f"Deleted {kind.value} {extension_id}")
            return True

    def reconcile(self, plugin_folders: Iterable[str], theme_folders: Iterable[str]) -> list[Extension]:
        """
        Drop extensions that are no longer installed.

        An entry is removed when its installation folder is empty or missing
        from the installed folders of its kind. Entries are never added back.

        Returns:
            The removed entries
        """
        with self.lock:
            removed = self._prune(self.plugins, set(plugin_folders))
            removed += self._prune(self.themes, set(theme_folders))
            for extension in removed:
                logger.info(
                    f"Pruned {extension.kind.value} {extension.id} "
                    f"({extension.repository}): folder {extension.installation_folder!r} not installed"
                )
            return removed

    @staticmethod
    def _prune(entries: list, installed: set[str]) -> list[Extension]:
        kept, removed = [], []
        for extension in entries:
            if extension.installation_folder and extension.installation_folder in installed:
                kept.append(extension)
            else:
                removed.append(extension)
        entries[:] = kept
        return removed
