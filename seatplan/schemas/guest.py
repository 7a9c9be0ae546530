"""
Registration and check-in Pydantic schemas
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

class EmailLookupRequest(BaseModel):
    """Registration lookup by invitation email"""
    email: str

class PlusOne(BaseModel):
    """Additional guest brought by an invited guest"""
    name: str = ""
    email: Optional[str] = None

class RegistrationRequest(BaseModel):
    """Create or update a registration"""
    email: str
    will_attend: bool = True
    guests: List[PlusOne] = Field(default_factory=list)

class InvitedGuestResponse(BaseModel):
    """Invited guest as returned by the lookup"""
    id: int
    name: str
    email: str
    max_guests: int

    class Config:
        from_attributes = True

class RsvpUpdate(BaseModel):
    """Open or close registration"""
    is_open: bool

class CheckInRequest(BaseModel):
    """Guest check-in or check-out request"""
    guest_name: str

class CheckInResponse(BaseModel):
    """Check-in log entry"""
    id: int
    guest_name: str
    table_number: int
    checked_in_at: datetime
    checked_in_by: str
    checked_out_at: Optional[datetime] = None

    class Config:
        from_attributes = True
