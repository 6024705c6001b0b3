"""
Log API Routes

Reading the log: the paged table, one event's details, and filter choices.
"""

from fastapi import APIRouter, Depends, status

from logify.api.error import raise_for
from logify.app.services.unit_of_work import UnitOfWork
from logify.app.use_cases.log import (
    EventDetails,
    FilterOptionsResponse,
    GetEventDetailsUseCase,
    GetFilterOptionsUseCase,
    SearchEventsResponse,
    SearchEventsUseCase,
)
from logify.depends import get_unit_of_work, require_log_access
from logify.domain.event_query import EventQuery

router = APIRouter(prefix="/log", tags=["Log"])


@router.post(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=SearchEventsResponse,
)
async def search_events(
    query: EventQuery,
    current_user: dict = Depends(require_log_access),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Search Events

    DataTables-style server-side processing: filters, search text, sort and
    paging in; draw, recordsTotal, recordsFiltered and rows out. Invalid
    filter values fall back to defaults instead of failing.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: INSUFFICIENT_ROLE
    """
    use_case = SearchEventsUseCase(uow)
    result = await use_case.execute(query)

    if result.is_err():
        raise_for(result.error)

    return result.value


@router.get(
    "/events/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=EventDetails,
)
async def get_event_details(
    event_id: int,
    current_user: dict = Depends(require_log_access),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Event Details

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: INSUFFICIENT_ROLE
        - 404 Not Found: EVENT_NOT_FOUND
    """
    use_case = GetEventDetailsUseCase(uow)
    result = await use_case.execute(event_id)

    if result.is_err():
        raise_for(result.error, not_found_codes=("EVENT_NOT_FOUND",))

    return result.value


@router.get(
    "/filters",
    status_code=status.HTTP_200_OK,
    response_model=FilterOptionsResponse,
)
async def get_filter_options(
    current_user: dict = Depends(require_log_access),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    use_case = GetFilterOptionsUseCase(uow)
    result = await use_case.execute()

    if result.is_err():
        raise_for(result.error)

    return result.value
