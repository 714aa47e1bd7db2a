from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from updatepilot import __version__
from updatepilot.config import get_config, save_config
from updatepilot.exceptions import AppBaseError
from updatepilot.logger import configure_logging, get_logger
from updatepilot.models.config import AppConfig
from updatepilot.routers import connectors_api as connectors_router
from updatepilot.routers import extensions_api as extensions_router
from updatepilot.routers import updates_api as updates_router
from updatepilot.services.controller import UpdaterController
from updatepilot.services.http import ApiClient
from updatepilot.services.i18n import get_i18n_service
from updatepilot.services.inspector import FilesystemInspector, LocalArtifactInspector
from updatepilot.services.installer import ArchiveInstaller, ZipArchiveInstaller
from updatepilot.services.scheduler import UpdateScheduler
from updatepilot.services.settings import Reconciler, SettingsStore

logger = get_logger(__name__)


def create_app(
    config: AppConfig | None = None,
    client: ApiClient | None = None,
    installer: ArchiveInstaller | None = None,
    inspector: LocalArtifactInspector | None = None,
) -> FastAPI:
    """
    Build the admin API application.

    Args:
        config: Application configuration, defaults to the global one
        client: API client shared by connectors and the installer
        installer: Archive installer, defaults to ZipArchiveInstaller
        inspector: Local artifact inspector, defaults to FilesystemInspector

    Returns:
        FastAPI application with the store, controller and scheduler on app.state
    """
    config = config or get_config()
    paths = config.paths
    assert paths.settings_file is not None
    assert paths.plugins_dir is not None
    assert paths.themes_dir is not None
    assert paths.cache_dir is not None

    client = client or ApiClient(timeout=config.http.timeout, user_agent=config.http.user_agent)
    inspector = inspector or FilesystemInspector(paths.plugins_dir, paths.themes_dir)
    installer = installer or ZipArchiveInstaller(client, paths.plugins_dir, paths.themes_dir, paths.cache_dir)

    store = SettingsStore(paths.settings_file, client=client, hosts=config.hosts)
    reconciler = Reconciler(store, inspector)
    scheduler = UpdateScheduler(store, reconciler, config.scheduler)
    controller = UpdaterController(store, reconciler, installer, inspector)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifespan events."""
        paths.data_dir.mkdir(parents=True, exist_ok=True)
        store.load()
        await scheduler.start()
        yield
        await scheduler.stop()
        client.close()

    app = FastAPI(title="UpdatePilot", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.controller = controller
    app.state.scheduler = scheduler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppBaseError)
    async def app_error_handler(request: Request, exc: AppBaseError) -> JSONResponse:
        detail = get_i18n_service().translate(
            exc.i18n_key, lang=config.ui.preferred_language, default=exc.i18n_key, **exc.params
        )
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": detail, "code": exc.i18n_key, "retriable": exc.retriable},
        )

    @app.get("/api/hello")
    async def hello_get() -> dict[str, str]:
        """Return a simple hello message with version info."""
        return {"message": "Hello from UpdatePilot!", "version": __version__}

    app.include_router(connectors_router.router)
    app.include_router(extensions_router.router)
    app.include_router(updates_router.router)

    return app


def run_server(port: int | None = None, run_scheduler: bool = True) -> None:
    """Run the UpdatePilot admin server.

    Args:
        port: Optional port number to override config. If provided, will be saved to config.
        run_scheduler: Whether this process runs the periodic sweep.
    """
    config = get_config()
    configure_logging(config.advanced.log_level)

    # If port is provided via CLI, update and save config
    if port is not None and port != config.server.port:
        logger.info(f"Port override detected, updating config: {config.server.port} -> {port}")
        config.server.port = port
        save_config(config)

    if not run_scheduler:
        config.scheduler.enabled = False

    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


def main() -> None:
    """Main entry point with CLI argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="UpdatePilot - update tracker for plugins and themes hosted on GitHub/GitLab",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  updatepilot                    # Start with default/saved port
  updatepilot --port 9000        # Start on port 9000 and save it
  updatepilot --no-scheduler     # Serve the admin API without the periodic sweep
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number to run the server on (will be saved to config)",
    )

    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Do not run the periodic update-check sweep in this process",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"UpdatePilot {__version__}",
    )

    args = parser.parse_args()

    run_server(port=args.port, run_scheduler=not args.no_scheduler)


if __name__ == "__main__":
    main()
