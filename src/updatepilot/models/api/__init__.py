"""API models package."""

from updatepilot.models.api.updater import (
    ConnectorItem,
    CreateConnectorRequest,
    CreateExtensionRequest,
    DeleteResponse,
    ExtensionItem,
    RepositoryItem,
    UpdateConnectorRequest,
    UpdateExtensionRequest,
)

__all__ = [
    "ConnectorItem",
    "CreateConnectorRequest",
    "CreateExtensionRequest",
    "DeleteResponse",
    "ExtensionItem",
    "RepositoryItem",
    "UpdateConnectorRequest",
    "UpdateExtensionRequest",
]
