"""
Guest registration and RSVP management
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload, selectinload

from seatplan.models import GuestRegistration, InvitedGuest, Registration, RsvpSettings
from seatplan.schemas.guest import PlusOne
from seatplan.services.errors import GuestValidationError, NotInvitedError, RegistrationClosedError

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class RegistrationService:
    """Service for invitation lookups and registrations"""

    @staticmethod
    def get_rsvp_settings(db: Session) -> RsvpSettings:
        settings_row = db.query(RsvpSettings).first()
        if settings_row is None:
            settings_row = RsvpSettings(is_open=True)
            db.add(settings_row)
            db.commit()
            db.refresh(settings_row)
        return settings_row

    @staticmethod
    def set_rsvp_open(db: Session, is_open: bool) -> RsvpSettings:
        settings_row = RegistrationService.get_rsvp_settings(db)
        settings_row.is_open = is_open
        settings_row.updated_at = datetime.utcnow()
        db.commit()
        logger.info(f"RSVP is now {'open' if is_open else 'closed'}")
        return settings_row

    @staticmethod
    def lookup(db: Session, email: str) -> Tuple[InvitedGuest, Optional[Registration]]:
        """Find the invitation for an email and any existing registration"""
        if not RegistrationService.get_rsvp_settings(db).is_open:
            raise RegistrationClosedError()

        normalized = normalize_email(email)
        invited = db.query(InvitedGuest).options(
            joinedload(InvitedGuest.registration).selectinload(Registration.guests)
        ).filter(InvitedGuest.email == normalized).first()
        if not normalized or invited is None:
            raise NotInvitedError(normalized)
        return invited, invited.registration

    @staticmethod
    def validate_guests(invited: InvitedGuest, guests: List[PlusOne]) -> List[PlusOne]:
        """Drop blank rows and check the plus-one limits"""
        named = [guest for guest in guests if guest.name.strip()]
        errors = []
        if len(named) > invited.max_guests:
            errors.append(f"You can bring up to {invited.max_guests} guests")
        missing_email = [guest.name.strip() for guest in named if not (guest.email or "").strip()]
        if missing_email:
            errors.append(f"Please provide email addresses for: {', '.join(missing_email)}")
        if errors:
            raise GuestValidationError(errors)
        return named

    @staticmethod
    def register(db: Session, email: str, will_attend: bool, guests: List[PlusOne]) -> Tuple[Registration, bool]:
        """Create or update a registration; returns it and whether it is new"""
        invited, registration = RegistrationService.lookup(db, email)
        named = RegistrationService.validate_guests(invited, guests)

        created = registration is None
        now = datetime.utcnow()
        if created:
            registration = Registration(
                invited_guest=invited,
                will_attend=will_attend,
                registered_at=now,
                last_modified_at=now,
            )
            db.add(registration)
        else:
            registration.will_attend = will_attend
            registration.modified_after_initial = True
            registration.last_modified_at = now
            registration.guests.clear()

        for guest in named:
            registration.guests.append(GuestRegistration(
                guest_name=guest.name.strip(),
                guest_email=normalize_email(guest.email) or None,
            ))

        db.commit()
        db.refresh(registration)
        logger.info(
            f"Registration {'created' if created else 'updated'} for {invited.email} "
            f"(attending={will_attend}, guests={len(named)})"
        )
        return registration, created

    @staticmethod
    def registration_to_dict(registration: Registration) -> Dict:
        invited = registration.invited_guest
        return {
            "id": registration.id,
            "registered_at": registration.registered_at,
            "will_attend": registration.will_attend,
            "modified_after_initial": registration.modified_after_initial,
            "last_modified_at": registration.last_modified_at,
            "invited_guest": {
                "name": invited.name,
                "email": invited.email,
                "max_guests": invited.max_guests,
            },
            "guests": [
                {"name": guest.guest_name, "email": guest.guest_email}
                for guest in registration.guests
            ],
        }

    @staticmethod
    def list_registrations(db: Session) -> List[Dict]:
        registrations = db.query(Registration).options(
            joinedload(Registration.invited_guest),
            selectinload(Registration.guests),
        ).order_by(Registration.registered_at).all()
        return [RegistrationService.registration_to_dict(r) for r in registrations]

    @staticmethod
    def attendee_list(db: Session) -> List[Dict]:
        """Flat list of everyone attending, primary guests first within each registration"""
        registrations = db.query(Registration).options(
            joinedload(Registration.invited_guest),
            selectinload(Registration.guests),
        ).filter(Registration.will_attend == True).order_by(Registration.registered_at).all()

        attendees = []
        for registration in registrations:
            invited = registration.invited_guest
            attendees.append({
                "name": invited.name,
                "email": invited.email,
                "registered_on": registration.registered_at,
                "primary_guest": invited.name,
                "is_primary": True,
            })
            for guest in registration.guests:
                attendees.append({
                    "name": guest.guest_name,
                    "email": guest.guest_email or "Not provided",
                    "registered_on": registration.registered_at,
                    "primary_guest": invited.name,
                    "is_primary": False,
                })
        return attendees

    @staticmethod
    def upsert_invitations(db: Session, rows: List[Dict]) -> Tuple[int, int]:
        """Insert or update invited guests keyed by email; returns (created, updated)"""
        created = updated = 0
        for row in rows:
            email = normalize_email(row["email"])
            invited = db.query(InvitedGuest).filter(InvitedGuest.email == email).first()
            if invited is None:
                db.add(InvitedGuest(email=email, name=row["name"].strip(), max_guests=row["max_guests"]))
                created += 1
            else:
                invited.name = row["name"].strip()
                invited.max_guests = row["max_guests"]
                updated += 1
        db.commit()
        logger.info(f"Invitations imported: {created} created, {updated} updated")
        return created, updated
