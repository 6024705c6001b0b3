"""
Maintenance API Routes

Retention cleanup and log reset, for the host's scheduler and admins.
Authentication is via Admin API Key, not user JWTs.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from logify.api.error import raise_for
from logify.api.utils.admin_auth import verify_admin_api_key
from logify.app.services.unit_of_work import UnitOfWork
from logify.app.use_cases.maintenance import (
    CleanupOldEventsResponse,
    CleanupOldEventsUseCase,
    ResetLogResponse,
    ResetLogUseCase,
)
from logify.depends import get_unit_of_work

router = APIRouter(prefix="/admin/log", tags=["Maintenance"])


class CleanupRequest(BaseModel):
    """POST /admin/log/cleanup request payload; omitted fields use the configured period"""

    quantity: Optional[int] = None
    units: Optional[str] = None


@router.post(
    "/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupOldEventsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_old_events(
    request: Optional[CleanupRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Delete Old Events

    Requires: X-Admin-API-Key header

    Raises:
        - 400 Bad Request: INVALID_KEEP_PERIOD
        - 401 Unauthorized: Missing or invalid admin API key
        - 500 Internal Server Error: CLEANUP_FAILED
    """
    request = request or CleanupRequest()
    use_case = CleanupOldEventsUseCase(uow)
    result = await use_case.execute(quantity=request.quantity, units=request.units)

    if result.is_err():
        raise_for(result.error, client_codes=("INVALID_KEEP_PERIOD",))

    return result.value


@router.post(
    "/reset",
    status_code=status.HTTP_200_OK,
    response_model=ResetLogResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def reset_log(
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Reset Log

    Deletes every event. Cannot be undone.

    Requires: X-Admin-API-Key header
    """
    use_case = ResetLogUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise_for(result.error)

    return result.value
