"""
Event-day check-in with real-time broadcasting
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from seatplan.api.ws import WebSocketManager, CHECKIN_ROOM
from seatplan.editor.layout import Layout, normalize_name
from seatplan.models import GuestCheckIn
from seatplan.services.errors import AlreadyCheckedInError, NoTableAssignedError, NotCheckedInError
from seatplan.services.guest_directory import GuestEntry, attach_tables, filter_guests

logger = logging.getLogger(__name__)


class CheckInService:
    """Service for handling guest check-ins"""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    @staticmethod
    def latest_entry(db: Session, guest_name: str) -> Optional[GuestCheckIn]:
        return db.query(GuestCheckIn).filter(
            func.lower(func.trim(GuestCheckIn.guest_name)) == normalize_name(guest_name)
        ).order_by(GuestCheckIn.checked_in_at.desc(), GuestCheckIn.id.desc()).first()

    @staticmethod
    def is_checked_in(db: Session, guest_name: str) -> bool:
        """A guest is in iff their most recent entry has no check-out time"""
        entry = CheckInService.latest_entry(db, guest_name)
        return entry is not None and entry.checked_out_at is None

    @staticmethod
    def checked_in_names(db: Session) -> set:
        """Normalized names of everyone currently checked in"""
        latest: Dict[str, GuestCheckIn] = {}
        for entry in db.query(GuestCheckIn).order_by(GuestCheckIn.checked_in_at, GuestCheckIn.id).all():
            latest[normalize_name(entry.guest_name)] = entry
        return {name for name, entry in latest.items() if entry.checked_out_at is None}

    @staticmethod
    def log(db: Session, limit: Optional[int] = None) -> List[GuestCheckIn]:
        query = db.query(GuestCheckIn).order_by(GuestCheckIn.checked_in_at.desc(), GuestCheckIn.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    async def check_in_guest(self, db: Session, guest_name: str, layout: Layout, checked_in_by: str) -> GuestCheckIn:
        """Check in a guest and broadcast the update.

        The guest must hold a seat; the table number is taken from it.
        """
        name = (guest_name or "").strip()
        if not name:
            raise ValueError("Guest name is required")

        table = layout.table_for_guest(name)
        if table is None:
            raise NoTableAssignedError(name)

        # no lock: two desks can still race past this check
        if self.is_checked_in(db, name):
            raise AlreadyCheckedInError(name)

        entry = GuestCheckIn(
            guest_name=name,
            table_number=table.number,
            checked_in_at=datetime.utcnow(),
            checked_in_by=checked_in_by,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        logger.info(f"Checked in {name} at table {table.number}")

        await self.broadcast_checkin(entry, "checkin")
        return entry

    async def check_out_guest(self, db: Session, guest_name: str) -> GuestCheckIn:
        name = (guest_name or "").strip()
        if not name:
            raise ValueError("Guest name is required")

        entry = self.latest_entry(db, name)
        if entry is None or entry.checked_out_at is not None:
            raise NotCheckedInError(name)

        entry.checked_out_at = datetime.utcnow()
        db.commit()
        db.refresh(entry)
        logger.info(f"Checked out {name}")

        await self.broadcast_checkin(entry, "checkout")
        return entry

    def roster(self, db: Session, entries: List[GuestEntry], layout: Layout, search: Optional[str] = None) -> Dict:
        """Directory entries with table number and check-in state"""
        attach_tables(entries, layout)
        checked_in = self.checked_in_names(db)
        guests = [
            {**entry.as_dict(), "checked_in": normalize_name(entry.name) in checked_in}
            for entry in filter_guests(entries, search)
        ]
        return {
            "guests": guests,
            "total_guests": len(entries),
            "assigned_guests": sum(1 for entry in entries if entry.table_number is not None),
            "checked_in_guests": sum(1 for entry in entries if normalize_name(entry.name) in checked_in),
        }

    async def broadcast_checkin(self, entry: GuestCheckIn, update_type: str):
        message = {
            "type": update_type,
            "guest": {
                "name": entry.guest_name,
                "table_number": entry.table_number,
                "checked_in_at": entry.checked_in_at.isoformat(),
                "checked_out_at": entry.checked_out_at.isoformat() if entry.checked_out_at else None,
            },
            "timestamp": datetime.utcnow().isoformat(),
        }
        await self.websocket_manager.broadcast_to_room(CHECKIN_ROOM, message)
