"""
Guest directory: invited guests who are attending plus their registered guests
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from seatplan.editor.layout import Layout, normalize_name
from seatplan.models import Registration

INVITED = "invited"
PLUS_ONE = "guest"


@dataclass
class GuestEntry:
    name: str
    email: Optional[str]
    kind: str
    invited_by: str
    table_number: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "type": self.kind,
            "invited_by": self.invited_by,
            "table_number": self.table_number,
        }


def load_guest_directory(db: Session, attending_only: bool = True) -> List[GuestEntry]:
    """Join registrations with their invited guest and plus-ones, sorted by name"""
    query = db.query(Registration).options(
        joinedload(Registration.invited_guest),
        selectinload(Registration.guests),
    )
    if attending_only:
        query = query.filter(Registration.will_attend == True)

    entries: List[GuestEntry] = []
    seen_emails = set()
    seen_plus_ones = set()
    for registration in query.all():
        invited = registration.invited_guest
        if invited and invited.email not in seen_emails:
            seen_emails.add(invited.email)
            entries.append(GuestEntry(
                name=invited.name.strip(),
                email=invited.email,
                kind=INVITED,
                invited_by=invited.name.strip(),
            ))

        for guest in registration.guests:
            if not guest.guest_name or not guest.guest_name.strip():
                continue
            key = (normalize_name(guest.guest_name), (guest.guest_email or "").lower())
            if key in seen_plus_ones:
                continue
            seen_plus_ones.add(key)
            entries.append(GuestEntry(
                name=guest.guest_name.strip(),
                email=guest.guest_email or None,
                kind=PLUS_ONE,
                invited_by=invited.name.strip() if invited else "",
            ))

    entries.sort(key=lambda entry: entry.name.lower())
    return entries


def attach_tables(entries: List[GuestEntry], layout: Layout) -> List[GuestEntry]:
    """Fill in each guest's table number by name match against the seats"""
    for entry in entries:
        table = layout.table_for_guest(entry.name)
        entry.table_number = table.number if table else None
    return entries


def unassigned_guests(entries: List[GuestEntry], layout: Layout) -> List[GuestEntry]:
    return [entry for entry in attach_tables(entries, layout) if entry.table_number is None]


def filter_guests(entries: List[GuestEntry], term: Optional[str]) -> List[GuestEntry]:
    needle = (term or "").strip().lower()
    if not needle:
        return entries
    return [entry for entry in entries if needle in entry.name.lower()]
