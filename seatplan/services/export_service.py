"""
Spreadsheet exports and the invitation list import
"""

import io
from typing import Dict, List, Tuple
import pandas as pd

from seatplan.editor.layout import Layout

SEATING_LIST_COLUMNS = ['Table Number', 'Table Label', 'Seat Number', 'Guest Name', 'Tag', 'Note']


def _to_xlsx(df: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


class ExportService:
    """Seating list and attendee exports"""

    @staticmethod
    def seating_list_frame(layout: Layout) -> pd.DataFrame:
        """One row per occupied seat, seats numbered from 1"""
        rows = [
            {
                'Table Number': table.number,
                'Table Label': table.label,
                'Seat Number': index + 1,
                'Guest Name': seat.guest_name,
                'Tag': seat.tag or '',
                'Note': seat.note or '',
            }
            for table, index, seat in layout.occupied_seats()
        ]
        return pd.DataFrame(rows, columns=SEATING_LIST_COLUMNS)

    @staticmethod
    def seating_list_csv(layout: Layout) -> str:
        return ExportService.seating_list_frame(layout).to_csv(index=False)

    @staticmethod
    def seating_list_xlsx(layout: Layout) -> bytes:
        return _to_xlsx(ExportService.seating_list_frame(layout), 'Seating List')

    @staticmethod
    def attendees_xlsx(attendees: List[Dict]) -> bytes:
        df = pd.DataFrame([
            {
                'Name': attendee['name'],
                'Email': attendee['email'],
                'Primary Guest': attendee['primary_guest'],
                'Type': 'Primary' if attendee['is_primary'] else 'Guest',
                'Registered On': attendee['registered_on'],
            }
            for attendee in attendees
        ], columns=['Name', 'Email', 'Primary Guest', 'Type', 'Registered On'])
        return _to_xlsx(df, 'Attendees')


class InvitationImportService:
    """Invitation list upload in Excel format"""

    REQUIRED_COLUMNS = ['name', 'email', 'max guests']

    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with required columns"""
        df = pd.DataFrame([
            ['Sample Guest 1', 'guest1@example.com', 2],
            ['Sample Guest 2', 'guest2@example.com', 0],
        ], columns=['Name', 'Email', 'Max Guests'])
        return _to_xlsx(df, 'Invitations')

    @staticmethod
    def column_mapping(df: pd.DataFrame) -> Dict[str, str]:
        mapping = {}
        for col in df.columns:
            col_lower = str(col).lower().strip()
            if 'mail' in col_lower:
                mapping['email'] = col
            elif 'max' in col_lower or 'guests' in col_lower:
                mapping['max guests'] = col
            elif 'name' in col_lower:
                mapping['name'] = col
        return mapping

    @staticmethod
    def validate_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate the sheet has the required columns"""
        mapping = InvitationImportService.column_mapping(df)
        missing = [col for col in InvitationImportService.REQUIRED_COLUMNS if col not in mapping]
        if missing:
            return False, [f"Missing required columns: {', '.join(missing)}"]
        return True, []

    @staticmethod
    def validate_rows(df: pd.DataFrame) -> Tuple[bool, List[str], List[Dict]]:
        """Check emails, plus-one counts and duplicates; returns the clean rows"""
        mapping = InvitationImportService.column_mapping(df)
        errors = []
        rows = []
        seen = set()

        for position, (_, row) in enumerate(df.iterrows(), start=2):
            name = row[mapping['name']]
            email = row[mapping['email']]
            if pd.isna(name) and pd.isna(email):
                continue
            name = '' if pd.isna(name) else str(name).strip()
            email = '' if pd.isna(email) else str(email).strip().lower()

            if not name:
                errors.append(f"Row {position}: name is required")
            if '@' not in email:
                errors.append(f"Row {position}: invalid email '{email}'")
            elif email in seen:
                errors.append(f"Row {position}: duplicate email '{email}'")
            seen.add(email)

            max_guests = row[mapping['max guests']]
            if pd.isna(max_guests):
                max_guests = 0
            try:
                max_guests = int(max_guests)
                if max_guests < 0:
                    raise ValueError(max_guests)
            except (TypeError, ValueError):
                errors.append(f"Row {position}: max guests must be a non-negative number")
                continue

            rows.append({'name': name, 'email': email, 'max_guests': max_guests})

        return len(errors) == 0, errors, rows

    @staticmethod
    def parse_upload(file_content: bytes) -> Tuple[bool, List[str], List[Dict]]:
        """Read and validate an uploaded invitation sheet"""
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except (ValueError, OSError, KeyError) as e:
            return False, [f"Error reading Excel file: {e}"], []

        valid_structure, structure_errors = InvitationImportService.validate_structure(df)
        if not valid_structure:
            return False, structure_errors, []

        return InvitationImportService.validate_rows(df)
