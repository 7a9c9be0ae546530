"""
Event-day check-in routes - requires authentication
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from seatplan.core.context import AppContext, get_context
from seatplan.core.db import get_db
from seatplan.schemas.guest import CheckInRequest, CheckInResponse
from seatplan.services.errors import AlreadyCheckedInError, NoTableAssignedError, NotCheckedInError
from seatplan.services.guest_directory import load_guest_directory
from seatplan.utils.security import verify_admin_token
from seatplan.utils.responses import success_response, error_response

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/guests")
async def checkin_roster(
    search: Optional[str] = Query(None, description="Filter by guest name"),
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    admin: str = Depends(verify_admin_token)
):
    """Attending guests with table numbers and check-in state"""
    roster = context.checkin_service.roster(db, load_guest_directory(db), context.editor.layout, search)
    return success_response(
        message=f"Found {len(roster['guests'])} guests",
        data=roster
    )

@router.get("/log")
async def checkin_log(
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    admin: str = Depends(verify_admin_token)
):
    """Check-in history, newest first"""
    entries = context.checkin_service.log(db, limit)
    return success_response(
        message=f"Found {len(entries)} check-in records",
        data={"entries": [CheckInResponse.model_validate(entry).dict() for entry in entries]}
    )

@router.post("")
async def check_in_guest(
    checkin_data: CheckInRequest,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    admin: str = Depends(verify_admin_token)
):
    """Check in a guest at their assigned table"""
    try:
        entry = await context.checkin_service.check_in_guest(
            db, checkin_data.guest_name, context.editor.layout, checked_in_by=admin
        )
    except ValueError as e:
        return error_response(message=str(e), status_code=422)
    except NoTableAssignedError as e:
        return error_response(message=str(e), error_code="no_table", status_code=422)
    except AlreadyCheckedInError as e:
        return error_response(message=str(e), error_code="already_checked_in", status_code=409)

    return success_response(
        message=f"{entry.guest_name} checked in at table {entry.table_number}",
        data=CheckInResponse.model_validate(entry).dict()
    )

@router.post("/checkout")
async def check_out_guest(
    checkin_data: CheckInRequest,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    admin: str = Depends(verify_admin_token)
):
    try:
        entry = await context.checkin_service.check_out_guest(db, checkin_data.guest_name)
    except ValueError as e:
        return error_response(message=str(e), status_code=422)
    except NotCheckedInError as e:
        return error_response(message=str(e), error_code="not_checked_in", status_code=409)

    return success_response(
        message=f"{entry.guest_name} checked out",
        data=CheckInResponse.model_validate(entry).dict()
    )
