"""Admin actions on connectors and tracked extensions."""

from pydantic import BaseModel

from updatepilot.exceptions import OperationalError, ResourceConflictError, ResourceNotFoundError, ValidationError
from updatepilot.logger import get_logger
from updatepilot.models.connector import ConnectorRecord, ConnectorType
from updatepilot.models.extension import ExtensionKind
from updatepilot.services.connectors import Connector
from updatepilot.services.extensions import EXTENSION_TYPES, Extension
from updatepilot.services.inspector import LocalArtifactInspector
from updatepilot.services.installer import ArchiveInstaller
from updatepilot.services.settings import Reconciler, SettingsStore
from updatepilot.utils.ids import generate_id

logger = get_logger(__name__)


class UpdateOffer(BaseModel):
    """An available update for an installed plugin or theme."""

    kind: ExtensionKind
    id: str
    folder: str
    new_version: str
    url: str
    package: str | None = None


class UpdaterController:
    """
    Entry point for every admin action.

    Unlike the store and connectors, which report problems through return
    values and diagnostic fields, the controller raises the application's
    typed errors so the API layer can turn them into responses.
    """

    def __init__(
        self,
        store: SettingsStore,
        reconciler: Reconciler,
        installer: ArchiveInstaller,
        inspector: LocalArtifactInspector,
    ) -> None:
        self.store = store
        self.reconciler = reconciler
        self.installer = installer
        self.inspector = inspector

    # Connectors

    def list_connectors(self) -> list[Connector]:
        return list(self.store.connectors)

    def get_connector(self, connector_id: str) -> Connector:
        connector = self.store.get_connector_by_id(connector_id)
        if connector is None:
            raise ResourceNotFoundError("connector.not_found", id=connector_id)
        return connector

    def add_connector(self, connector_type: ConnectorType, owner: str, token: str = "") -> Connector:
        owner = owner.strip()
        if not owner:
            raise ValidationError("connector.owner_required")

        with self.store.lock:
            record = ConnectorRecord(type=connector_type, id=generate_id(), owner=owner, token=token.strip())
            connector = self.store.add_connector(self.store.build_connector(record))
            self.store.save()

        logger.info(f"Added {connector_type.value} connector {connector.id} for {owner}")
        return connector

    def edit_connector(self, connector_id: str, token: str) -> Connector:
        """Only the token can change; type and owner are fixed once created."""
        with self.store.lock:
            connector = self.get_connector(connector_id)
            connector.token = token.strip()
            self.store.save()
        logger.info(f"Updated token of connector {connector_id}")
        return connector

    def delete_connector(self, connector_id: str) -> None:
        with self.store.lock:
            self.get_connector(connector_id)
            if not self.store.delete_connector(connector_id):
                raise ResourceConflictError(
                    "connector.in_use",
                    id=connector_id,
                    count=self.store.connector_repository_count(connector_id),
                )
            self.store.save()

    def connector_repositories(self, connector_id: str) -> list[Extension]:
        self.get_connector(connector_id)
        return self.store.connector_repositories(connector_id)

    # Extensions

    def list_extensions(self, kind: ExtensionKind) -> list[Extension]:
        """List tracked extensions after dropping the ones no longer installed."""
        self.reconciler.run()
        return list(self.store.extensions(kind))

    def get_extension(self, kind: ExtensionKind, extension_id: str) -> Extension:
        extension = self.store.get_extension_by_id(kind, extension_id)
        if extension is None:
            raise ResourceNotFoundError("extension.not_found", kind=kind.value, id=extension_id)
        return extension

    def installed_version(self, extension: Extension) -> str | None:
        return self.inspector.get_installed_version(extension.kind, extension.installation_folder)

    def add_extension(
        self,
        kind: ExtensionKind,
        connector_id: str,
        repository: str,
        branch: str = "",
        installation_folder: str = "",
        updates: str = "",
    ) -> Extension:
        """
        Track a repository and install it.

        The remote version found by the first check is installed, or the head
        of the branch when update checks are off or nothing was found.
        """
        repository = repository.strip()
        if not repository:
            raise ValidationError("extension.repository_required")

        with self.store.lock:
            if self.store.get_extension_by_repository(kind, repository) is not None:
                raise ResourceConflictError("extension.repository_exists", repository=repository)
            connector = self.get_connector(connector_id)

            extension = EXTENSION_TYPES[kind].create(
                connector,
                repository,
                branch=branch.strip(),
                installation_folder=installation_folder.strip(),
                updates=updates,
            )
            extension.check_for_updates(now=self.store.clock())
            if extension.last_error:
                raise OperationalError("extension.remote_error", error=extension.last_error)

            self._install(extension, extension.remote_version or extension.branch)
            extension.mark_installed()

            self.store.add_extension(extension)
            self.store.save()

        logger.info(f"Added {kind.value} {extension.id} ({repository}) into {extension.installation_folder}")
        return extension

    def edit_extension(
        self,
        kind: ExtensionKind,
        extension_id: str,
        connector_id: str | None = None,
        repository: str | None = None,
        branch: str | None = None,
        updates: str | None = None,
    ) -> Extension:
        """
        Change what an extension tracks, then check it again.

        Every change is validated before any field is assigned, so a rejected
        edit leaves the extension untouched.
        """
        with self.store.lock:
            extension = self.get_extension(kind, extension_id)

            connector = self.get_connector(connector_id) if connector_id is not None else None

            if repository is not None:
                repository = repository.strip()
                if not repository:
                    raise ValidationError("extension.repository_required")
                existing = self.store.get_extension_by_repository(kind, repository)
                if existing is not None and existing.id != extension.id:
                    raise ResourceConflictError("extension.repository_exists", repository=repository)

            if connector is not None:
                extension.connector = connector
                extension.connector_id = connector.id
            if repository is not None:
                extension.repository = repository
            if branch is not None:
                extension.branch = branch.strip() or "main"
            if updates is not None:
                extension.updates = updates

            extension.check_for_updates(now=self.store.clock())
            self.store.save()

        logger.info(f"Updated {kind.value} {extension_id}")
        return extension

    def delete_extension(self, kind: ExtensionKind, extension_id: str) -> None:
        with self.store.lock:
            if not self.store.delete_extension(kind, extension_id):
                raise ResourceNotFoundError("extension.not_found", kind=kind.value, id=extension_id)
            self.store.save()

    def check_extension(self, kind: ExtensionKind, extension_id: str) -> Extension:
        with self.store.lock:
            extension = self.get_extension(kind, extension_id)
            extension.check_for_updates(now=self.store.clock())
            self.store.save()
        return extension

    def install_update(self, kind: ExtensionKind, extension_id: str) -> Extension:
        """Install the last resolved remote version."""
        with self.store.lock:
            extension = self.get_extension(kind, extension_id)
            if not extension.remote_version:
                raise ValidationError("extension.no_remote_version", repository=extension.repository)

            self._install(extension, extension.remote_version)
            extension.mark_installed()
            self.store.save()

        logger.info(f"Updated {kind.value} {extension.installation_folder} to {extension.display_version}")
        return extension

    def _install(self, extension: Extension, ref: str) -> None:
        connector = extension.connector
        if connector is None:
            raise OperationalError("connector.missing")

        url = connector.resolve_download_reference(extension.repository, ref)
        if connector.error:
            raise OperationalError("extension.remote_error", error=connector.error)
        if url is None:
            raise OperationalError("extension.download_unavailable", repository=extension.repository, ref=ref)

        if not self.installer.install(url, extension.kind, extension.installation_folder, connector.request_headers()):
            raise OperationalError(
                "extension.install_failed",
                repository=extension.repository,
                folder=extension.installation_folder,
            )

    # Repositories and update offers

    def list_repositories(self, search: str = "") -> list[Extension]:
        """Every tracked repository, optionally filtered by a case-insensitive substring."""
        self.reconciler.run()
        needle = search.strip().lower()
        return [e for e in self.store.all_extensions() if needle in e.repository.lower()]

    def delete_repository(self, extension_id: str) -> None:
        with self.store.lock:
            for kind in ExtensionKind:
                if self.store.delete_extension(kind, extension_id):
                    self.store.save()
                    return
        raise ResourceNotFoundError("extension.not_found", kind="repository", id=extension_id)

    def pending_updates(self) -> list[UpdateOffer]:
        """Offers for installed extensions whose remote version differs from the installed one."""
        self.reconciler.run()
        offers = []
        for extension in self.store.all_extensions():
            if not extension.has_update or extension.connector is None:
                continue
            offers.append(
                UpdateOffer(
                    kind=extension.kind,
                    id=extension.id,
                    folder=extension.installation_folder,
                    new_version=extension.display_version,
                    url=extension.connector.resolve_url(extension.repository),
                    package=extension.connector.resolve_download_reference(
                        extension.repository, extension.remote_version
                    ),
                )
            )
        return offers
