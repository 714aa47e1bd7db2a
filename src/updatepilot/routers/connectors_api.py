"""Connector and repository API endpoints."""

from fastapi import APIRouter, Depends, Query

from updatepilot.logger import get_logger
from updatepilot.models.api import (
    ConnectorItem,
    CreateConnectorRequest,
    DeleteResponse,
    RepositoryItem,
    UpdateConnectorRequest,
)
from updatepilot.routers.dependencies import get_controller
from updatepilot.services.connectors import Connector
from updatepilot.services.controller import UpdaterController
from updatepilot.services.extensions import Extension

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["connectors"])


def to_connector_item(controller: UpdaterController, connector: Connector) -> ConnectorItem:
    return ConnectorItem(
        id=connector.id,
        type=connector.type,
        display=connector.display,
        owner=connector.owner,
        has_token=bool(connector.token),
        repository_count=controller.store.connector_repository_count(connector.id),
    )


def to_repository_item(extension: Extension) -> RepositoryItem:
    connector = extension.connector
    return RepositoryItem(
        id=extension.id,
        kind=extension.kind,
        repository=extension.repository,
        url=connector.resolve_url(extension.repository) if connector else None,
        connector_id=extension.connector_id,
        connector_display=connector.display if connector else None,
        owner=connector.owner if connector else None,
        branch=extension.branch,
        updates=extension.update_mode,
    )


@router.get("/connectors", response_model=list[ConnectorItem])
def list_connectors(controller: UpdaterController = Depends(get_controller)) -> list[ConnectorItem]:
    """List all connectors with the number of repositories using them."""
    return [to_connector_item(controller, c) for c in controller.list_connectors()]


@router.post("/connectors", response_model=ConnectorItem, status_code=201)
def create_connector(
    request: CreateConnectorRequest, controller: UpdaterController = Depends(get_controller)
) -> ConnectorItem:
    """Add a connector."""
    connector = controller.add_connector(request.type, request.owner, request.token)
    return to_connector_item(controller, connector)


@router.put("/connectors/{connector_id}", response_model=ConnectorItem)
def update_connector(
    connector_id: str, request: UpdateConnectorRequest, controller: UpdaterController = Depends(get_controller)
) -> ConnectorItem:
    """Replace a connector's token."""
    connector = controller.edit_connector(connector_id, request.token)
    return to_connector_item(controller, connector)


@router.delete("/connectors/{connector_id}", response_model=DeleteResponse)
def delete_connector(
    connector_id: str, controller: UpdaterController = Depends(get_controller)
) -> DeleteResponse:
    """Delete a connector. Refused with 409 while repositories still use it."""
    controller.delete_connector(connector_id)
    return DeleteResponse(success=True)


@router.get("/connectors/{connector_id}/repositories", response_model=list[RepositoryItem])
def list_connector_repositories(
    connector_id: str, controller: UpdaterController = Depends(get_controller)
) -> list[RepositoryItem]:
    """List the repositories tracked through a connector."""
    return [to_repository_item(e) for e in controller.connector_repositories(connector_id)]


@router.get("/repositories", response_model=list[RepositoryItem])
def list_repositories(
    search: str = Query("", description="Case-insensitive substring of the repository name"),
    controller: UpdaterController = Depends(get_controller),
) -> list[RepositoryItem]:
    """List every tracked repository."""
    return [to_repository_item(e) for e in controller.list_repositories(search)]


@router.delete("/repositories/{extension_id}", response_model=DeleteResponse)
def delete_repository(extension_id: str, controller: UpdaterController = Depends(get_controller)) -> DeleteResponse:
    """Stop tracking a repository. Installed files are kept."""
    controller.delete_repository(extension_id)
    return DeleteResponse(success=True)
