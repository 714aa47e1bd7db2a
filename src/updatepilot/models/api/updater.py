"""API request/response models for connectors, extensions and updates."""

from pydantic import BaseModel

from updatepilot.models.connector import ConnectorType
from updatepilot.models.extension import ExtensionKind, ExtensionState, UpdateMode


class CreateConnectorRequest(BaseModel):
    """Request to add a connector."""

    type: ConnectorType
    owner: str
    token: str = ""


class UpdateConnectorRequest(BaseModel):
    """Request to change a connector's token."""

    token: str = ""


class ConnectorItem(BaseModel):
    """Connector as shown in the admin API. The token itself is never returned."""

    id: str
    type: ConnectorType
    display: str
    owner: str
    has_token: bool
    repository_count: int


class RepositoryItem(BaseModel):
    """A tracked repository, regardless of kind."""

    id: str
    kind: ExtensionKind
    repository: str
    url: str | None = None
    connector_id: str
    connector_display: str | None = None
    owner: str | None = None
    branch: str
    updates: UpdateMode


class CreateExtensionRequest(BaseModel):
    """Request to track and install a plugin or theme."""

    connector_id: str
    repository: str
    branch: str = ""
    installation_folder: str = ""
    updates: UpdateMode = UpdateMode.DISABLED


class UpdateExtensionRequest(BaseModel):
    """Request to change what an extension tracks. Omitted fields stay as they are."""

    connector_id: str | None = None
    repository: str | None = None
    branch: str | None = None
    updates: UpdateMode | None = None


class ExtensionItem(BaseModel):
    """A tracked plugin or theme with its last check outcome."""

    id: str
    kind: ExtensionKind
    connector_id: str
    repository: str
    url: str | None = None
    branch: str
    installation_folder: str
    installed_version: str | None = None
    local_version: str
    remote_version: str
    display_version: str
    updates: UpdateMode
    state: ExtensionState
    has_update: bool
    last_checked: int
    last_checked_ago: str | None = None
    last_warning: str
    last_error: str


class DeleteResponse(BaseModel):
    """Response for delete operations."""

    success: bool
