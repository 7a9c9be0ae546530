"""
Layout-related Pydantic schemas
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from seatplan.editor.geometry import seat_position
from seatplan.editor.layout import MAX_SEATS, MIN_SEATS, Seat, Table

class SeatDocument(BaseModel):
    """Seat record inside an exported layout"""
    id: Optional[str] = None
    angle: Optional[float] = None
    guest_name: Optional[str] = Field(None, alias="guestName")
    tag: Optional[str] = None
    note: Optional[str] = None

    class Config:
        populate_by_name = True

class TableDocument(BaseModel):
    """Table record inside an exported layout"""
    id: Optional[str] = None
    number: int = Field(..., ge=1)
    label: Optional[str] = None
    x: float
    y: float
    seats: List[SeatDocument] = Field(..., min_length=MIN_SEATS, max_length=MAX_SEATS)

class SeatView(BaseModel):
    """Seat with its drawing position"""
    index: int
    angle: float
    x: float
    y: float
    guest_name: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None

class TableView(BaseModel):
    """Table as rendered by the canvas"""
    id: str
    number: int
    label: str
    x: float
    y: float
    seat_count: int
    seats: List[SeatView]

class AddTableRequest(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    seat_count: int = Field(10, ge=MIN_SEATS, le=MAX_SEATS)

class RenameTableRequest(BaseModel):
    label: str

class MoveTableRequest(BaseModel):
    x: float
    y: float

class AssignSeatRequest(BaseModel):
    guest_name: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None
    allow_duplicate: bool = False


def table_to_document(table: Table) -> TableDocument:
    return TableDocument(
        id=table.id,
        number=table.number,
        label=table.label,
        x=table.x,
        y=table.y,
        seats=[
            SeatDocument(
                id=f"seat-{table.number}-{index}",
                angle=seat.angle,
                guest_name=seat.guest_name,
                tag=seat.tag,
                note=seat.note,
            )
            for index, seat in enumerate(table.seats)
        ],
    )


def document_to_table(document: TableDocument) -> Table:
    seats = [
        Seat(
            angle=seat.angle if seat.angle is not None else 0.0,
            guest_name=(seat.guest_name or "").strip() or None,
            tag=seat.tag or None,
            note=seat.note or None,
        )
        for seat in document.seats
    ]
    table = Table(
        number=document.number,
        label=document.label or f"Table {document.number}",
        x=document.x,
        y=document.y,
        seats=seats,
        id=document.id or "",
    )
    table.move_to(document.x, document.y)
    if any(seat.angle is None for seat in document.seats):
        table.redistribute()
    return table


def table_to_view(table: Table) -> TableView:
    seats = []
    for index, seat in enumerate(table.seats):
        x, y = seat_position(table.x, table.y, seat.angle)
        seats.append(SeatView(
            index=index,
            angle=seat.angle,
            x=round(x, 2),
            y=round(y, 2),
            guest_name=seat.guest_name,
            tag=seat.tag,
            note=seat.note,
        ))
    return TableView(
        id=table.id,
        number=table.number,
        label=table.label,
        x=table.x,
        y=table.y,
        seat_count=table.seat_count,
        seats=seats,
    )
