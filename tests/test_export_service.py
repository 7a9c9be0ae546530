"""
Tests for seating list exports and the invitation spreadsheet import
"""

import io
import pandas as pd

from seatplan.editor.layout import Layout, create_table
from seatplan.services.export_service import ExportService, InvitationImportService

def create_test_excel(data):
    """Helper function to create Excel bytes from data"""
    df = pd.DataFrame(data)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False)
    return buffer.getvalue()

def seated_layout():
    layout = Layout([create_table(1, 200, 200, label="Family"), create_table(2, 500, 200)])
    layout.assign_seat(1, 0, "Alice Tan", tag="vip", note="window")
    layout.assign_seat(2, 3, "Bob Lim")
    return layout

def test_seating_list_csv():
    """Header plus one row per occupied seat, seats counted from 1"""
    lines = ExportService.seating_list_csv(seated_layout()).splitlines()
    assert lines == [
        "Table Number,Table Label,Seat Number,Guest Name,Tag,Note",
        "1,Family,1,Alice Tan,vip,window",
        "2,Table 2,4,Bob Lim,,",
    ]

def test_seating_list_csv_empty_layout():
    lines = ExportService.seating_list_csv(Layout([create_table(1, 200, 200)])).splitlines()
    assert lines == ["Table Number,Table Label,Seat Number,Guest Name,Tag,Note"]

def test_seating_list_xlsx():
    df = pd.read_excel(io.BytesIO(ExportService.seating_list_xlsx(seated_layout())))
    assert list(df.columns) == ['Table Number', 'Table Label', 'Seat Number', 'Guest Name', 'Tag', 'Note']
    assert df['Guest Name'].tolist() == ["Alice Tan", "Bob Lim"]
    assert df['Seat Number'].tolist() == [1, 4]

def test_attendees_xlsx():
    attendees = [
        {"name": "Alice Tan", "email": "alice@example.com", "primary_guest": "Alice Tan",
         "is_primary": True, "registered_on": "2024-06-01"},
        {"name": "Carol", "email": "carol@example.com", "primary_guest": "Alice Tan",
         "is_primary": False, "registered_on": "2024-06-01"},
    ]
    df = pd.read_excel(io.BytesIO(ExportService.attendees_xlsx(attendees)))
    assert df['Type'].tolist() == ["Primary", "Guest"]

def test_invitation_template_is_valid():
    """The downloadable template passes its own validation"""
    valid, errors, rows = InvitationImportService.parse_upload(InvitationImportService.create_template())
    assert valid is True
    assert errors == []
    assert [row['email'] for row in rows] == ['guest1@example.com', 'guest2@example.com']

def test_invitation_missing_columns():
    excel_bytes = create_test_excel({'Name': ['Alice'], 'Email': ['alice@example.com']})
    valid, errors, rows = InvitationImportService.parse_upload(excel_bytes)
    assert valid is False
    assert "max guests" in errors[0]

def test_invitation_columns_case_insensitive():
    excel_bytes = create_test_excel({
        'NAME': ['Alice'],
        'e-mail address': [' Alice@Example.com '],
        'max guests': [1],
    })
    valid, errors, rows = InvitationImportService.parse_upload(excel_bytes)
    assert valid is True
    assert rows == [{'name': 'Alice', 'email': 'alice@example.com', 'max_guests': 1}]

def test_invitation_row_errors():
    excel_bytes = create_test_excel({
        'Name': ['Alice', 'Bob', '', 'Dan'],
        'Email': ['alice@example.com', 'ALICE@example.com', 'carol@example.com', 'not-an-email'],
        'Max Guests': [1, 0, 2, -1],
    })
    valid, errors, rows = InvitationImportService.parse_upload(excel_bytes)
    assert valid is False
    assert "Row 3: duplicate email 'alice@example.com'" in errors
    assert "Row 4: name is required" in errors
    assert "Row 5: invalid email 'not-an-email'" in errors
    assert "Row 5: max guests must be a non-negative number" in errors

def test_invitation_unreadable_file():
    valid, errors, rows = InvitationImportService.parse_upload(b"definitely not excel")
    assert valid is False
    assert errors[0].startswith("Error reading Excel file")
