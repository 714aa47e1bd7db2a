"""Settings store and reconciliation."""

from .reconciler import Reconciler
from .store import SettingsStore

__all__ = ["Reconciler", "SettingsStore"]
