"""
Layout editor exceptions
"""

from typing import List, Tuple


class LayoutError(Exception):
    """Base class for layout editing errors"""


class TableNotFoundError(LayoutError):
    def __init__(self, table_ref):
        super().__init__(f"Table {table_ref} not found")
        self.table_ref = table_ref


class SeatNotFoundError(LayoutError):
    def __init__(self, table_number: int, seat_index: int):
        super().__init__(f"Seat {seat_index + 1} not found at table {table_number}")
        self.table_number = table_number
        self.seat_index = seat_index


class DuplicateAssignmentError(LayoutError):
    """Raised when a guest already occupies another seat"""

    def __init__(self, guest_name: str, seats: List[Tuple[int, int]]):
        where = ", ".join(f"table {table} seat {index + 1}" for table, index in seats)
        super().__init__(f"{guest_name} is already assigned to {where}")
        self.guest_name = guest_name
        self.seats = seats


class InvalidLayoutDocument(LayoutError):
    def __init__(self, reason: str = ""):
        message = "Invalid file format"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason
