"""
Invitation and registration models
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from seatplan.core.db import Base

class InvitedGuest(Base):
    __tablename__ = "invited_guests"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercase
    name = Column(String(255), nullable=False)
    max_guests = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    registration = relationship(
        "Registration", back_populates="invited_guest", uselist=False, cascade="all, delete-orphan"
    )


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    invited_guest_id = Column(Integer, ForeignKey("invited_guests.id"), unique=True, nullable=False)
    registered_at = Column(DateTime, default=datetime.utcnow)
    will_attend = Column(Boolean, default=True)
    modified_after_initial = Column(Boolean, default=False)
    last_modified_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    invited_guest = relationship("InvitedGuest", back_populates="registration")
    guests = relationship(
        "GuestRegistration",
        back_populates="registration",
        cascade="all, delete-orphan",
        order_by="GuestRegistration.id",
    )


class GuestRegistration(Base):
    __tablename__ = "guest_registrations"

    id = Column(Integer, primary_key=True, index=True)
    registration_id = Column(Integer, ForeignKey("registrations.id"), nullable=False)
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    registration = relationship("Registration", back_populates="guests")


class RsvpSettings(Base):
    __tablename__ = "rsvp_settings"

    id = Column(Integer, primary_key=True, index=True)
    is_open = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
