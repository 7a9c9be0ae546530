"""
Pydantic schemas package
"""

from .common import *
from .guest import *
from .layout import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "SeatDocument",
    "TableDocument",
    "TableView",
    "AddTableRequest",
    "RenameTableRequest",
    "MoveTableRequest",
    "AssignSeatRequest",
    "EmailLookupRequest",
    "RegistrationRequest",
    "RsvpUpdate",
    "CheckInRequest",
    "CheckInResponse",
]
