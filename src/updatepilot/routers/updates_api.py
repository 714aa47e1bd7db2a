"""Update offer and sweep endpoints."""

from fastapi import APIRouter, Depends

from updatepilot.routers.dependencies import get_controller, get_scheduler
from updatepilot.services.controller import UpdateOffer, UpdaterController
from updatepilot.services.scheduler import SweepReport, UpdateScheduler

router = APIRouter(prefix="/api/updates", tags=["updates"])


@router.get("", response_model=list[UpdateOffer])
def list_updates(controller: UpdaterController = Depends(get_controller)) -> list[UpdateOffer]:
    """List available updates for installed plugins and themes."""
    return controller.pending_updates()


@router.post("/sweep", response_model=SweepReport)
def run_sweep(scheduler: UpdateScheduler = Depends(get_scheduler)) -> SweepReport:
    """Run one update-check sweep now, on any instance."""
    return scheduler.run_sweep()
