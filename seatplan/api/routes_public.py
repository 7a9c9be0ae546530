"""
Public API routes - no authentication required
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from seatplan.core.context import AppContext, get_context
from seatplan.core.db import get_db
from seatplan.schemas.guest import EmailLookupRequest, InvitedGuestResponse, RegistrationRequest
from seatplan.services.errors import GuestValidationError, NotInvitedError, RegistrationClosedError
from seatplan.services.qr_service import QRService
from seatplan.services.registration_service import RegistrationService
from seatplan.utils.security import rate_limit_check, get_client_ip
from seatplan.utils.responses import success_response, error_response, rate_limit_error

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check(context: AppContext = Depends(get_context)):
    """Health check endpoint"""
    return {"status": "ok", "layout": context.editor.sync_state()["status"]}

@router.get("/qr.png")
async def get_qr_code(context: AppContext = Depends(get_context)):
    """QR code pointing guests at the registration page"""
    qr_bytes = QRService.generate_registration_qr(context.settings.BASE_URL)
    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": "inline; filename=registration_qr.png"}
    )

@router.get("/registration/status")
async def registration_status(db: Session = Depends(get_db)):
    """Whether RSVP is currently open"""
    rsvp = RegistrationService.get_rsvp_settings(db)
    return success_response(
        message="RSVP status retrieved",
        data={"is_open": rsvp.is_open}
    )

@router.post("/registration/lookup")
async def lookup_invitation(
    request: Request,
    lookup_data: EmailLookupRequest,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context)
):
    """Look up an invitation by email"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip, context.settings.RATE_LIMIT_PER_MINUTE):
        raise rate_limit_error()

    try:
        invited, registration = RegistrationService.lookup(db, lookup_data.email)
    except RegistrationClosedError as e:
        return error_response(message=str(e), error_code="registration_closed", status_code=403)
    except NotInvitedError as e:
        return error_response(message=str(e), error_code="not_invited", status_code=404)

    return success_response(
        message="Invitation found",
        data={
            "invited_guest": InvitedGuestResponse.model_validate(invited).dict(),
            "max_guests": invited.max_guests,
            "registration": RegistrationService.registration_to_dict(registration) if registration else None,
        }
    )

@router.post("/registration")
async def submit_registration(
    request: Request,
    registration_data: RegistrationRequest,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context)
):
    """Create or update a registration"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip, context.settings.RATE_LIMIT_PER_MINUTE):
        raise rate_limit_error()

    try:
        registration, created = RegistrationService.register(
            db,
            registration_data.email,
            registration_data.will_attend,
            registration_data.guests,
        )
    except RegistrationClosedError as e:
        return error_response(message=str(e), error_code="registration_closed", status_code=403)
    except NotInvitedError as e:
        return error_response(message=str(e), error_code="not_invited", status_code=404)
    except GuestValidationError as e:
        return error_response(message="Registration is not valid", details=e.errors, status_code=422)

    return success_response(
        message="Registration saved" if created else "Registration updated",
        data=RegistrationService.registration_to_dict(registration),
        status_code=201 if created else 200
    )
