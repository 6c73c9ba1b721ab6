"""Lock status router.

On-demand lock check for one account and a manual sweep trigger.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from lineadmin.routers.dependencies import get_lock_check_service, verify_admin_password
from lineadmin.schemas import ActiveDateItem, LockStatusResponse, LockSweepResponse
from lineadmin.services.lock_check_service import LockCheckService

router = APIRouter(prefix="/api/lock-status", tags=["lock-status"])


@router.post("/sweep", response_model=LockSweepResponse)
async def run_lock_sweep(
    service: LockCheckService = Depends(get_lock_check_service),
    _auth: str = Depends(verify_admin_password),
):
    """Reconcile every account now; returns aggregate counters only."""
    summary = await asyncio.to_thread(service.check_all_accounts)
    return LockSweepResponse(
        checked=summary.checked,
        locked=summary.locked,
        failed=summary.failed,
        now=service.now().isoformat(),
    )


@router.get("/{account_id}", response_model=LockStatusResponse)
async def get_lock_status(account_id: int, service: LockCheckService = Depends(get_lock_check_service)):
    """Check and reconcile one account, then return its locked and active days.

    Store failures yield empty lists rather than an error.
    """
    if account_id <= 0:
        raise HTTPException(status_code=400, detail="INVALID_ACCOUNT_ID")

    status = await asyncio.to_thread(service.check_and_update_account, account_id)
    return LockStatusResponse(
        account_id=account_id,
        locked_dates=status.locked_dates,
        active_dates=[ActiveDateItem(**item.to_dict()) for item in status.active_dates],
        now=service.now().isoformat(),
    )
