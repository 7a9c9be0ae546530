"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from seatplan.schemas.common import StandardResponse, ErrorResponse

def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    """Wrap ``data`` in the success envelope; datetimes and models are encoded"""
    body = StandardResponse(success=True, message=message, data=data)
    return JSONResponse(content=jsonable_encoder(body.dict()), status_code=status_code)

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Failure envelope for errors the client is expected to show"""
    body = ErrorResponse(message=message, error_code=error_code, details=details)
    return JSONResponse(content=jsonable_encoder(body.dict()), status_code=status_code)

def not_found_error(resource: str = "Resource"):
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} not found"
    )

def conflict_error(message: str, details: Any = None):
    """409 with the conflicting items under ``details``"""
    detail = message if details is None else {"message": message, "details": details}
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

def rate_limit_error():
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Please try again later."
    )
