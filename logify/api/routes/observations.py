"""
Observation API Routes

Where the host site sends what happened during each of its requests.
"""

from fastapi import APIRouter, Depends, status

from logify.api.error import raise_for
from logify.api.utils.admin_auth import verify_admin_api_key
from logify.app.services.access_control import ActorPolicy
from logify.app.services.location import LocationResolver
from logify.app.services.unit_of_work import UnitOfWork
from logify.app.use_cases.observations import (
    RecordObservationsCommand,
    RecordObservationsResponse,
    RecordObservationsUseCase,
)
from logify.depends import get_actor_policy, get_location_resolver, get_unit_of_work

router = APIRouter(prefix="/observations", tags=["Observations"])


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=RecordObservationsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def record_observations(
    command: RecordObservationsCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    locator: LocationResolver = Depends(get_location_resolver),
    policy: ActorPolicy = Depends(get_actor_policy),
):
    """
    Record One Unit of Work

    The body carries the acting user, snapshots of the objects involved, and
    the hooks that fired in order. Events are created, amended and finalized
    as one unit; failed saves are reported, not raised.

    Requires: X-Admin-API-Key header

    Raises:
        - 400 Bad Request: UNKNOWN_OBJECT_TYPE
        - 401 Unauthorized: Missing or invalid admin API key
    """
    use_case = RecordObservationsUseCase(uow, locator=locator, policy=policy)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for(result.error, client_codes=("UNKNOWN_OBJECT_TYPE",))

    return result.value
