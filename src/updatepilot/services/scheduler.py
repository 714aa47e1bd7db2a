"""Periodic update-check sweep."""

import asyncio
import contextlib
import time
from collections.abc import Callable

from pydantic import BaseModel, Field

from updatepilot.logger import get_logger
from updatepilot.models.config import SchedulerConfig
from updatepilot.models.extension import UpdateMode
from updatepilot.services.extensions import Extension
from updatepilot.services.settings import Reconciler, SettingsStore

logger = get_logger(__name__)


class SweepReport(BaseModel):
    """Outcome of one sweep."""

    started_at: int
    pruned: list[str] = Field(default_factory=list)
    checked: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


class UpdateScheduler:
    """
    Runs the update-check sweep on a fixed cadence.

    Only the designated instance sweeps. Instances sharing one settings file
    share the host API quota too, so a non-designated instance cancels its
    loop instead of leaving it idle.
    """

    def __init__(
        self,
        store: SettingsStore,
        reconciler: Reconciler,
        config: SchedulerConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.reconciler = reconciler
        self.config = config or SchedulerConfig()
        self.clock = clock
        self._task: asyncio.Task | None = None

    def is_designated_instance(self) -> bool:
        return self.config.instance_id == self.config.primary_instance_id

    def is_due(self, extension: Extension, now: float) -> bool:
        """Never checked, or last checked longer ago than the re-check interval."""
        return extension.last_checked == 0 or (now - extension.last_checked) > self.config.recheck_interval_seconds

    def run_sweep(self) -> SweepReport:
        """
        Reconcile, check every extension that is due, then save once.

        Checks run one after another; a sweep over many extensions takes as
        long as all of their host requests together.
        """
        with self.store.lock:
            now = self.clock()
            report = SweepReport(started_at=int(now))
            report.pruned = [e.id for e in self.reconciler.run(save=False)]

            for extension in self.store.all_extensions():
                if extension.update_mode is UpdateMode.DISABLED or not self.is_due(extension, now):
                    report.skipped.append(extension.id)
                    continue
                extension.check_for_updates(now=now)
                report.checked.append(extension.id)
                if extension.last_error:
                    report.errors[extension.id] = extension.last_error

            self.store.save()

        logger.info(
            f"Sweep finished: {len(report.checked)} checked, {len(report.skipped)} skipped, "
            f"{len(report.pruned)} pruned, {len(report.errors)} errors"
        )
        return report

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop, or cancel it when this is not the designated instance."""
        if not self.is_designated_instance():
            if self._task is not None:
                self._task.cancel()
                self._task = None
            logger.info(
                f"Instance {self.config.instance_id} is not the designated scheduler "
                f"({self.config.primary_instance_id}); sweep cancelled"
            )
            return

        if not self.config.enabled:
            logger.info("Update-check scheduler disabled")
            return

        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Update-check scheduler started, interval {self.config.interval_seconds}s")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Update-check scheduler stopped")

    async def _run_loop(self) -> None:
        while True:
            try:
                # Blocking HTTP; keep it off the event loop
                await asyncio.to_thread(self.run_sweep)
            except Exception as e:
                logger.error(f"Update-check sweep failed: {e}")

            await asyncio.sleep(self.config.interval_seconds)
