"""
Admin API Routes - System Maintenance Endpoints

These endpoints are for schedulers and internal integrations.
Authentication is via Admin API Key, not account sessions.
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, status

from src.api.error import ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.session_manager import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import SweepStaleRecordsResponse, SweepStaleRecordsUseCase
from src.depends import get_config, get_session_settings, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sweep",
    status_code=status.HTTP_200_OK,
    response_model=SweepStaleRecordsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def sweep_stale_records(
    config=Depends(get_config),
    session_settings: SessionSettings = Depends(get_session_settings),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Sweep Stale Records

    Deletes sessions that can no longer validate and pending invitations
    expired longer than INVITATION_RETENTION_DAYS ago.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 500 Internal Server Error: Server error
    """
    use_case = SweepStaleRecordsUseCase(
        uow,
        session_settings,
        invitation_retention=timedelta(days=config.INVITATION_RETENTION_DAYS),
    )
    result = await use_case.execute()

    if result.is_err():
        raise ServerError(result.err_value)

    return result.ok_value
