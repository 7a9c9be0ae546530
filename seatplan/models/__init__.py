"""
Database models package
"""

from .layout import TableConfiguration, SeatAssignment
from .guest import InvitedGuest, Registration, GuestRegistration, RsvpSettings
from .checkin import GuestCheckIn

__all__ = [
    "TableConfiguration",
    "SeatAssignment",
    "InvitedGuest",
    "Registration",
    "GuestRegistration",
    "RsvpSettings",
    "GuestCheckIn",
]
