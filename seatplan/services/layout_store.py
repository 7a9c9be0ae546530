"""
Persistence adapter between the in-memory layout and the backing store.

Two stores are available: SQLAlchemy (default) and Firebase Firestore
(``USE_FIREBASE``). Both write one table at a time keyed by table number
and never clear the whole layout; a bulk replace only removes the tables
that are absent from the new layout.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from seatplan.editor.geometry import even_angles
from seatplan.editor.layout import DEFAULT_SEAT_COUNT, MAX_SEATS, MIN_SEATS, Seat, Table
from seatplan.models import SeatAssignment, TableConfiguration
from seatplan.services.errors import StoreError

logger = logging.getLogger(__name__)


def build_table(number: int, label: str, x: float, y: float, seat_count: Optional[int],
                seat_rows: List[Dict[str, Any]]) -> Table:
    """Rebuild a table from stored rows, joining seats by index.

    A seat without a stored angle falls back to the even distribution.
    """
    count = max(MIN_SEATS, min(MAX_SEATS, seat_count or DEFAULT_SEAT_COUNT))
    fallback = even_angles(count)
    by_index = {row.get("seat_index"): row for row in seat_rows}
    seats = []
    for index in range(count):
        row = by_index.get(index) or {}
        angle = row.get("seat_angle")
        seats.append(Seat(
            angle=float(angle) if angle is not None else fallback[index],
            guest_name=row.get("guest_name") or None,
            tag=row.get("tag") or None,
            note=row.get("note") or None,
        ))
    return Table(number=number, label=label or f"Table {number}", x=float(x), y=float(y), seats=seats)


def seat_rows_for(table: Table) -> List[Dict[str, Any]]:
    return [
        {
            "seat_index": index,
            "seat_angle": seat.angle,
            "guest_name": seat.guest_name,
            "tag": seat.tag,
            "note": seat.note,
        }
        for index, seat in enumerate(table.seats)
    ]


class LayoutStore:
    """Interface implemented by the concrete stores"""

    def load_tables(self) -> List[Table]:
        raise NotImplementedError

    def save_table(self, table: Table) -> None:
        raise NotImplementedError

    def delete_table(self, number: int) -> bool:
        raise NotImplementedError

    def replace_all(self, tables: List[Table]) -> None:
        raise NotImplementedError


# -------- SQLAlchemy store --------

class SqlLayoutStore(LayoutStore):
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def load_tables(self) -> List[Table]:
        try:
            with self.session_factory() as db:
                configs = (
                    db.query(TableConfiguration)
                    .options(selectinload(TableConfiguration.seats))
                    .order_by(TableConfiguration.table_number)
                    .all()
                )
                return [
                    build_table(
                        config.table_number,
                        config.label,
                        config.x,
                        config.y,
                        config.seat_count,
                        [
                            {
                                "seat_index": row.seat_index,
                                "seat_angle": row.seat_angle,
                                "guest_name": row.guest_name,
                                "tag": row.tag,
                                "note": row.note,
                            }
                            for row in config.seats
                        ],
                    )
                    for config in configs
                ]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load tables: {e}") from e

    def save_table(self, table: Table) -> None:
        with self.session_factory() as db:
            try:
                self._upsert(db, table)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Failed to save table {table.number}: {e}") from e

    def delete_table(self, number: int) -> bool:
        with self.session_factory() as db:
            try:
                config = db.query(TableConfiguration).filter(TableConfiguration.table_number == number).first()
                if config is None:
                    return False
                db.delete(config)
                db.commit()
                return True
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Failed to delete table {number}: {e}") from e

    def replace_all(self, tables: List[Table]) -> None:
        numbers = [table.number for table in tables]
        with self.session_factory() as db:
            try:
                stale = db.query(TableConfiguration).filter(~TableConfiguration.table_number.in_(numbers)).all()
                for config in stale:
                    db.delete(config)
                db.flush()
                for table in tables:
                    self._upsert(db, table)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Failed to replace layout: {e}") from e

    @staticmethod
    def _upsert(db: Session, table: Table) -> None:
        config = db.query(TableConfiguration).filter(TableConfiguration.table_number == table.number).first()
        if config is None:
            config = TableConfiguration(table_number=table.number)
            db.add(config)
        config.label = table.label
        config.x = table.x
        config.y = table.y
        config.seat_count = table.seat_count

        existing = {row.seat_index: row for row in config.seats}
        for values in seat_rows_for(table):
            row = existing.pop(values["seat_index"], None)
            if row is None:
                row = SeatAssignment(seat_index=values["seat_index"])
                config.seats.append(row)
            row.seat_angle = values["seat_angle"]
            row.guest_name = values["guest_name"]
            row.tag = values["tag"]
            row.note = values["note"]

        # seats beyond the current count
        for row in existing.values():
            config.seats.remove(row)


# -------- Firestore store --------

class FirestoreLayoutStore(LayoutStore):
    """One document per table under ``table_configurations/{number}`` with embedded seats"""

    COLLECTION = "table_configurations"

    def __init__(self, client):
        self.client = client

    def _collection(self):
        return self.client.collection(self.COLLECTION)

    @staticmethod
    def _document_for(table: Table) -> Dict[str, Any]:
        return {
            "table_number": table.number,
            "label": table.label,
            "x": table.x,
            "y": table.y,
            "seat_count": table.seat_count,
            "seats": seat_rows_for(table),
            "updated_at": datetime.utcnow().isoformat(),
        }

    def load_tables(self) -> List[Table]:
        try:
            docs = self._collection().order_by("table_number").get()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to load tables: {e}") from e
        tables = []
        for doc in docs:
            data = doc.to_dict()
            tables.append(build_table(
                data["table_number"],
                data.get("label"),
                data.get("x", 0),
                data.get("y", 0),
                data.get("seat_count"),
                data.get("seats") or [],
            ))
        return tables

    def save_table(self, table: Table) -> None:
        try:
            self._collection().document(str(table.number)).set(self._document_for(table))
        except google_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to save table {table.number}: {e}") from e

    def delete_table(self, number: int) -> bool:
        try:
            ref = self._collection().document(str(number))
            if not ref.get().exists:
                return False
            ref.delete()
            return True
        except google_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to delete table {number}: {e}") from e

    def replace_all(self, tables: List[Table]) -> None:
        wanted = {str(table.number) for table in tables}
        try:
            batch = self.client.batch()
            for doc in self._collection().get():
                if doc.id not in wanted:
                    batch.delete(doc.reference)
            for table in tables:
                batch.set(self._collection().document(str(table.number)), self._document_for(table))
            batch.commit()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError(f"Failed to replace layout: {e}") from e


def get_layout_store(settings, session_factory) -> LayoutStore:
    if settings.USE_FIREBASE:
        from seatplan.services.firebase_client import get_firestore_client
        logger.info("Using Firestore layout store")
        return FirestoreLayoutStore(get_firestore_client(settings))
    return SqlLayoutStore(session_factory)
