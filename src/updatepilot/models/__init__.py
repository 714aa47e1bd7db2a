"""Data models for UpdatePilot."""

from updatepilot.models.config import AppConfig
from updatepilot.models.connector import ConnectorRecord, ConnectorType
from updatepilot.models.extension import ExtensionKind, ExtensionState, UpdateMode
from updatepilot.models.settings import SettingsData

__all__ = [
    "AppConfig",
    "ConnectorRecord",
    "ConnectorType",
    "ExtensionKind",
    "ExtensionState",
    "SettingsData",
    "UpdateMode",
]
