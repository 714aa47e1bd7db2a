"""Tracked plugins and themes."""

import time
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from updatepilot.logger import get_logger
from updatepilot.models.extension import ExtensionKind, ExtensionState, UpdateMode
from updatepilot.services.connectors import Connector
from updatepilot.services.i18n import get_i18n_service
from updatepilot.utils.ids import generate_id

logger = get_logger(__name__)

SHORT_SHA_LENGTH = 7


class Extension(BaseModel):
    """
    A local artifact bound to a remote repository reference.

    Serialized with camelCase keys. ``connector`` is resolved from
    ``connector_id`` when the registry loads and is never persisted.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, arbitrary_types_allowed=True)

    kind: ClassVar[ExtensionKind]

    id: str = Field(default_factory=generate_id)
    connector_id: str = ""
    repository: str = ""
    branch: str = "main"
    installation_folder: str = ""
    local_version: str = ""
    remote_version: str = ""
    updates: str = ""
    last_checked: int = 0
    last_warning: str = ""
    last_error: str = ""

    connector: Connector | None = Field(default=None, exclude=True)

    @field_validator("id", mode="before")
    @classmethod
    def ensure_id(cls, v: object) -> str:
        return str(v) if v else generate_id()

    @field_validator("branch", mode="before")
    @classmethod
    def default_branch(cls, v: object) -> str:
        return str(v) if v else "main"

    @field_validator(
        "connector_id",
        "repository",
        "installation_folder",
        "local_version",
        "remote_version",
        "updates",
        "last_warning",
        "last_error",
        mode="before",
    )
    @classmethod
    def as_text(cls, v: object) -> str:
        # Older settings stored False for "no value"
        if v is None or v is False:
            return ""
        return str(v)

    @field_validator("last_checked", mode="before")
    @classmethod
    def as_timestamp(cls, v: object) -> int:
        if not v:
            return 0
        return int(v)  # type: ignore[call-overload]

    @classmethod
    def create(
        cls,
        connector: Connector | None,
        repository: str,
        branch: str = "",
        installation_folder: str = "",
        updates: str = "",
        connector_id: str = "",
    ) -> "Extension":
        """
        Create a new entry; the installation folder defaults to the repository name.
        """
        return cls(
            connector_id=connector.id if connector else connector_id,
            connector=connector,
            repository=repository,
            branch=branch,
            installation_folder=installation_folder or repository,
            updates=updates,
        )

    @property
    def update_mode(self) -> UpdateMode:
        try:
            return UpdateMode(self.updates)
        except ValueError:
            return UpdateMode.DISABLED

    @property
    def state(self) -> ExtensionState:
        if self.update_mode is UpdateMode.DISABLED:
            return ExtensionState.DISABLED
        if self.last_error:
            return ExtensionState.CHECKED_ERROR
        if self.last_warning:
            return ExtensionState.CHECKED_WARNING
        return ExtensionState.CHECKED_OK

    @property
    def has_update(self) -> bool:
        return bool(self.remote_version) and self.remote_version != self.local_version

    @property
    def display_version(self) -> str:
        if self.update_mode is UpdateMode.COMMITS:
            return self.remote_version[:SHORT_SHA_LENGTH]
        return self.remote_version

    def check_for_updates(self, now: float | None = None) -> None:
        """
        Resolve the remote version for the configured update mode.

        Does nothing unless ``updates`` is "tags" or "commits". Otherwise the
        attempt is stamped in ``last_checked`` before any network access, so a
        failed check still counts as a check. The connector's warning and error
        are copied afterwards; an error always empties ``remote_version``.
        """
        mode = self.update_mode
        if mode is UpdateMode.DISABLED:
            return

        self.last_checked = int(now if now is not None else time.time())

        if self.connector is None:
            self.last_warning = ""
            self.last_error = get_i18n_service().translate("connector.missing")
            self.remote_version = ""
            logger.warning("Extension has no connector", id=self.id, connector_id=self.connector_id)
            return

        if mode is UpdateMode.TAGS:
            remote_version = self.connector.resolve_latest_tag(self.repository)
        else:
            remote_version = self.connector.resolve_latest_commit(self.repository, self.branch)

        self.last_warning = self.connector.warning
        self.last_error = self.connector.error
        if self.last_error:
            remote_version = ""

        self.remote_version = remote_version or ""
        logger.info(
            "Checked for updates",
            kind=self.kind.value,
            repository=self.repository,
            remote_version=self.remote_version,
            error=self.last_error or None,
        )

    def mark_installed(self) -> None:
        """Record that the remote version is now the installed one."""
        self.local_version = self.remote_version

    def to_record(self) -> dict[str, Any]:
        """Persisted form (camelCase keys, connector reference left out)."""
        return self.model_dump(by_alias=True)


class Plugin(Extension):
    """A tracked plugin."""

    kind: ClassVar[ExtensionKind] = ExtensionKind.PLUGIN


class Theme(Extension):
    """A tracked theme."""

    kind: ClassVar[ExtensionKind] = ExtensionKind.THEME


EXTENSION_TYPES: dict[ExtensionKind, type[Extension]] = {
    ExtensionKind.PLUGIN: Plugin,
    ExtensionKind.THEME: Theme,
}
