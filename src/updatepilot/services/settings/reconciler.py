"""Keeps the tracked extensions in line with what is installed."""

from updatepilot.logger import get_logger
from updatepilot.services.extensions import Extension
from updatepilot.services.inspector import LocalArtifactInspector

from .store import SettingsStore

logger = get_logger(__name__)


class Reconciler:
    """Prunes tracked extensions whose installation folder has gone away."""

    def __init__(self, store: SettingsStore, inspector: LocalArtifactInspector) -> None:
        self.store = store
        self.inspector = inspector

    def run(self, save: bool = True) -> list[Extension]:
        """
        Reconcile the store against the installed folders.

        Args:
            save: Save the store when something was removed. A sweep passes
                False and saves once at its end.

        Returns:
            The removed entries
        """
        with self.store.lock:
            removed = self.store.reconcile(
                self.inspector.list_installed_plugin_folders(),
                self.inspector.list_installed_theme_folders(),
            )
            if removed:
                if save:
                    self.store.save()
                logger.info(f"Reconciliation removed {len(removed)} entries")
            return removed
