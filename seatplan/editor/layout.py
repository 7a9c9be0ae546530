"""
In-memory table and seat model for the seating editor.

Tables are addressed by their display number everywhere except the drag
controller, which works with the stable string id the canvas renders.
Every seat-count change redistributes the seat angles evenly, so seat ``i``
of ``n`` always sits at ``360 * i / n`` degrees.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from seatplan.editor.errors import DuplicateAssignmentError, SeatNotFoundError, TableNotFoundError
from seatplan.editor.geometry import CANVAS_HEIGHT, CANVAS_WIDTH, clamp_position, even_angles

MIN_SEATS = 1
MAX_SEATS = 14
DEFAULT_SEAT_COUNT = 10


def normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


@dataclass
class Seat:
    angle: float = 0.0
    guest_name: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.guest_name)

    def clear(self) -> None:
        self.guest_name = None
        self.tag = None
        self.note = None


@dataclass
class Table:
    number: int
    label: str
    x: float
    y: float
    seats: List[Seat] = field(default_factory=list)
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = f"table-{self.number}"

    @property
    def seat_count(self) -> int:
        return len(self.seats)

    def redistribute(self) -> None:
        for seat, angle in zip(self.seats, even_angles(len(self.seats))):
            seat.angle = angle

    def add_seat(self) -> bool:
        if len(self.seats) >= MAX_SEATS:
            return False
        self.seats.append(Seat())
        self.redistribute()
        return True

    def remove_seat(self) -> bool:
        if len(self.seats) <= MIN_SEATS:
            return False
        self.seats.pop()
        self.redistribute()
        return True

    def move_to(self, x: float, y: float) -> None:
        self.x, self.y = clamp_position(x, y)

    def seat(self, index: int) -> Seat:
        if index < 0 or index >= len(self.seats):
            raise SeatNotFoundError(self.number, index)
        return self.seats[index]


@dataclass
class AssignmentResult:
    table: Table
    seat_index: int
    duplicates: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [
            f"Also assigned to table {number} seat {index + 1}"
            for number, index in self.duplicates
        ]


def create_table(number: int, x: float, y: float, seat_count: int = DEFAULT_SEAT_COUNT, label: Optional[str] = None) -> Table:
    seat_count = max(MIN_SEATS, min(MAX_SEATS, seat_count))
    seats = [Seat(angle=angle) for angle in even_angles(seat_count)]
    table = Table(number=number, label=label or f"Table {number}", x=x, y=y, seats=seats)
    table.move_to(x, y)
    return table


def default_layout() -> List[Table]:
    """Three rows: 10 tables, 10 tables, then 4 tables"""
    tables = []
    for i in range(10):
        tables.append(create_table(i + 1, (i + 1) * (CANVAS_WIDTH / 11), 150))
    for i in range(10):
        tables.append(create_table(i + 11, (i + 1) * (CANVAS_WIDTH / 11), 350))
    for i in range(4):
        tables.append(create_table(i + 21, (i + 1) * (CANVAS_WIDTH / 5), 550))
    return tables


class Layout:
    """Ordered collection of tables with the editing operations"""

    def __init__(self, tables: Optional[List[Table]] = None):
        self.tables: List[Table] = list(tables or [])

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)

    def replace(self, tables: List[Table]) -> None:
        self.tables = list(tables)

    def get(self, number: int) -> Table:
        for table in self.tables:
            if table.number == number:
                return table
        raise TableNotFoundError(number)

    def find_by_id(self, table_id: str) -> Optional[Table]:
        return next((table for table in self.tables if table.id == table_id), None)

    def next_number(self) -> int:
        if not self.tables:
            return 1
        return max(table.number for table in self.tables) + 1

    def add_table(self, x: Optional[float] = None, y: Optional[float] = None,
                  seat_count: int = DEFAULT_SEAT_COUNT) -> Table:
        if x is None:
            x = CANVAS_WIDTH / 2
        if y is None:
            y = CANVAS_HEIGHT / 2
        table = create_table(self.next_number(), x, y, seat_count=seat_count)
        self.tables.append(table)
        return table

    def delete_table(self, number: int) -> Table:
        table = self.get(number)
        self.tables.remove(table)
        return table

    def add_seat(self, number: int) -> bool:
        return self.get(number).add_seat()

    def remove_seat(self, number: int) -> bool:
        return self.get(number).remove_seat()

    def move_table(self, number: int, x: float, y: float) -> Table:
        table = self.get(number)
        table.move_to(x, y)
        return table

    def rename_table(self, number: int, label: str) -> Table:
        table = self.get(number)
        table.label = label.strip() or f"Table {number}"
        return table

    def occupied_seats(self) -> Iterator[Tuple[Table, int, Seat]]:
        for table in self.tables:
            for index, seat in enumerate(table.seats):
                if seat.is_assigned:
                    yield table, index, seat

    def find_assignments(self, guest_name: str, exclude: Optional[Tuple[int, int]] = None) -> List[Tuple[int, int]]:
        wanted = normalize_name(guest_name)
        if not wanted:
            return []
        return [
            (table.number, index)
            for table, index, seat in self.occupied_seats()
            if normalize_name(seat.guest_name) == wanted and (table.number, index) != exclude
        ]

    def assign_seat(self, number: int, seat_index: int, guest_name: Optional[str],
                    tag: Optional[str] = None, note: Optional[str] = None,
                    allow_duplicate: bool = False) -> AssignmentResult:
        """Write guest fields to a seat; a blank name clears the seat.

        Raises ``DuplicateAssignmentError`` when the guest already sits
        elsewhere, unless ``allow_duplicate`` is set, in which case the
        other seats are reported on the result instead.
        """
        table = self.get(number)
        seat = table.seat(seat_index)
        name = (guest_name or "").strip()
        if not name:
            seat.clear()
            return AssignmentResult(table=table, seat_index=seat_index)

        duplicates = self.find_assignments(name, exclude=(number, seat_index))
        if duplicates and not allow_duplicate:
            raise DuplicateAssignmentError(name, duplicates)

        seat.guest_name = name
        seat.tag = (tag or "").strip() or None
        seat.note = (note or "").strip() or None
        return AssignmentResult(table=table, seat_index=seat_index, duplicates=duplicates)

    def find_guest(self, query: str) -> Optional[Table]:
        """First table holding a guest whose name contains ``query``"""
        needle = (query or "").strip().lower()
        if not needle:
            return None
        for table in self.tables:
            if any(needle in seat.guest_name.lower() for seat in table.seats if seat.guest_name):
                return table
        return None

    def table_for_guest(self, guest_name: str) -> Optional[Table]:
        wanted = normalize_name(guest_name)
        if not wanted:
            return None
        for table in self.tables:
            if any(normalize_name(seat.guest_name) == wanted for seat in table.seats):
                return table
        return None
