"""Plugin and theme API endpoints.

Endpoints are plain functions so FastAPI runs them in its threadpool. They
wait on the settings store lock, which a sweep holds while it talks to the
hosts, and must not block the event loop while doing so.
"""

import time

from fastapi import APIRouter, Depends

from updatepilot.logger import get_logger
from updatepilot.models.api import CreateExtensionRequest, DeleteResponse, ExtensionItem, UpdateExtensionRequest
from updatepilot.models.extension import ExtensionKind
from updatepilot.routers.dependencies import get_controller, get_language
from updatepilot.services.controller import UpdaterController
from updatepilot.services.extensions import Extension
from updatepilot.utils.timefmt import human_time_diff

logger = get_logger(__name__)
router = APIRouter(prefix="/api/extensions", tags=["extensions"])


def to_extension_item(controller: UpdaterController, extension: Extension, lang: str) -> ExtensionItem:
    connector = extension.connector
    last_checked_ago = None
    if extension.last_checked:
        last_checked_ago = human_time_diff(extension.last_checked, time.time(), lang=lang)

    return ExtensionItem(
        id=extension.id,
        kind=extension.kind,
        connector_id=extension.connector_id,
        repository=extension.repository,
        url=connector.resolve_url(extension.repository) if connector else None,
        branch=extension.branch,
        installation_folder=extension.installation_folder,
        installed_version=controller.installed_version(extension),
        local_version=extension.local_version,
        remote_version=extension.remote_version,
        display_version=extension.display_version,
        updates=extension.update_mode,
        state=extension.state,
        has_update=extension.has_update,
        last_checked=extension.last_checked,
        last_checked_ago=last_checked_ago,
        last_warning=extension.last_warning,
        last_error=extension.last_error,
    )


@router.get("/{kind}", response_model=list[ExtensionItem])
def list_extensions(
    kind: ExtensionKind,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> list[ExtensionItem]:
    """
    List tracked plugins or themes.

    Entries whose installation folder is gone are pruned first.
    """
    return [to_extension_item(controller, e, lang) for e in controller.list_extensions(kind)]


@router.post("/{kind}", response_model=ExtensionItem, status_code=201)
def create_extension(
    kind: ExtensionKind,
    request: CreateExtensionRequest,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> ExtensionItem:
    """Track a repository and install its current version."""
    extension = controller.add_extension(
        kind,
        connector_id=request.connector_id,
        repository=request.repository,
        branch=request.branch,
        installation_folder=request.installation_folder,
        updates=request.updates.value,
    )
    return to_extension_item(controller, extension, lang)


@router.get("/{kind}/{extension_id}", response_model=ExtensionItem)
def get_extension(
    kind: ExtensionKind,
    extension_id: str,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> ExtensionItem:
    """Get one tracked plugin or theme."""
    return to_extension_item(controller, controller.get_extension(kind, extension_id), lang)


@router.put("/{kind}/{extension_id}", response_model=ExtensionItem)
def update_extension(
    kind: ExtensionKind,
    extension_id: str,
    request: UpdateExtensionRequest,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> ExtensionItem:
    """Change connector, repository, branch or update mode and check again."""
    extension = controller.edit_extension(
        kind,
        extension_id,
        connector_id=request.connector_id,
        repository=request.repository,
        branch=request.branch,
        updates=request.updates.value if request.updates is not None else None,
    )
    return to_extension_item(controller, extension, lang)


@router.delete("/{kind}/{extension_id}", response_model=DeleteResponse)
def delete_extension(
    kind: ExtensionKind, extension_id: str, controller: UpdaterController = Depends(get_controller)
) -> DeleteResponse:
    """Stop tracking a plugin or theme. Installed files are kept."""
    controller.delete_extension(kind, extension_id)
    return DeleteResponse(success=True)


@router.post("/{kind}/{extension_id}/check", response_model=ExtensionItem)
def check_extension(
    kind: ExtensionKind,
    extension_id: str,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> ExtensionItem:
    """Check for updates now."""
    return to_extension_item(controller, controller.check_extension(kind, extension_id), lang)


@router.post("/{kind}/{extension_id}/install", response_model=ExtensionItem)
def install_extension_update(
    kind: ExtensionKind,
    extension_id: str,
    controller: UpdaterController = Depends(get_controller),
    lang: str = Depends(get_language),
) -> ExtensionItem:
    """Install the last resolved remote version."""
    return to_extension_item(controller, controller.install_update(kind, extension_id), lang)
