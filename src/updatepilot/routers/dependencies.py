"""Shared FastAPI dependencies."""

from fastapi import Request

from updatepilot.services.controller import UpdaterController
from updatepilot.services.scheduler import UpdateScheduler


def get_controller(request: Request) -> UpdaterController:
    return request.app.state.controller


def get_scheduler(request: Request) -> UpdateScheduler:
    return request.app.state.scheduler


def get_language(request: Request) -> str:
    """Language for user-facing messages, from the application config."""
    return request.app.state.config.ui.preferred_language
