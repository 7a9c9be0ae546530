"""
Admin API routes - requires authentication
"""

import logging
from fastapi import APIRouter, Depends, UploadFile, File, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from seatplan.core.context import AppContext, get_context
from seatplan.core.db import get_db
from seatplan.editor.errors import (
    DuplicateAssignmentError,
    InvalidLayoutDocument,
    LayoutError,
    SeatNotFoundError,
    TableNotFoundError,
)
from seatplan.schemas.guest import RsvpUpdate
from seatplan.schemas.layout import (
    AddTableRequest,
    AssignSeatRequest,
    MoveTableRequest,
    RenameTableRequest,
    table_to_view,
)
from seatplan.services.export_service import ExportService, InvitationImportService
from seatplan.services.guest_directory import attach_tables, load_guest_directory, unassigned_guests
from seatplan.services.registration_service import RegistrationService
from seatplan.utils.security import verify_admin_token
from seatplan.utils.responses import success_response, error_response, conflict_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(verify_admin_token)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def raise_layout_error(error: LayoutError):
    """Translate an editor error into the matching HTTP error"""
    if isinstance(error, TableNotFoundError):
        raise not_found_error("Table")
    if isinstance(error, SeatNotFoundError):
        raise not_found_error("Seat")
    if isinstance(error, DuplicateAssignmentError):
        raise conflict_error(
            str(error),
            details=[{"table_number": number, "seat_number": index + 1} for number, index in error.seats],
        )
    raise error


def _table_data(context: AppContext, table) -> dict:
    return {"table": table_to_view(table).dict(), "sync": context.editor.sync_state()}


# -------- layout --------

@router.get("/layout")
async def get_layout(context: AppContext = Depends(get_context)):
    """All tables with seat positions"""
    editor = context.editor
    return success_response(
        message="Layout retrieved",
        data={
            "tables": [table_to_view(table).dict() for table in editor.layout],
            "loaded_from": editor.loaded_from,
            "sync": editor.sync_state(),
        }
    )

@router.get("/layout/status")
async def get_sync_status(context: AppContext = Depends(get_context)):
    return success_response(message="Sync status retrieved", data=context.editor.sync_state())

@router.post("/layout/flush")
async def flush_layout(context: AppContext = Depends(get_context)):
    """Write pending moves now and retry unsynced tables"""
    await context.editor.flush()
    return success_response(message="Layout flushed", data=context.editor.sync_state())

@router.get("/layout/search")
async def search_layout(
    q: str = Query(..., description="Part of a guest name"),
    context: AppContext = Depends(get_context)
):
    """Find the first table seating a matching guest"""
    table = context.editor.search(q)
    if table is None:
        return error_response(message="No results", status_code=404)
    return success_response(message="Guest found", data={"table": table_to_view(table).dict()})

@router.get("/layout/export.json")
async def export_layout(context: AppContext = Depends(get_context)):
    """Download the layout document"""
    return Response(
        content=context.editor.export_layout(),
        media_type="application/json",
        headers={"Content-Disposition": "attachment; filename=seating_layout.json"}
    )

@router.post("/layout/import")
async def import_layout(
    file: UploadFile = File(...),
    context: AppContext = Depends(get_context)
):
    """Replace the whole layout with an exported document"""
    content = await file.read()
    if len(content) > context.settings.MAX_UPLOAD_SIZE:
        return error_response(message="File too large", status_code=413)

    try:
        layout = await context.editor.import_layout(content)
    except InvalidLayoutDocument as e:
        logger.warning(f"Rejected layout import: {e}")
        return error_response(message="Invalid file format", details=e.reason or None, status_code=400)

    return success_response(
        message=f"Layout imported. {len(layout)} tables loaded.",
        data={"table_count": len(layout), "sync": context.editor.sync_state()}
    )

@router.post("/layout/reset")
async def reset_layout(context: AppContext = Depends(get_context)):
    """Replace the layout with the default arrangement"""
    layout = await context.editor.reset_to_default()
    return success_response(
        message="Layout reset to default",
        data={"table_count": len(layout), "sync": context.editor.sync_state()}
    )

@router.get("/layout/seating-list.csv")
async def seating_list_csv(context: AppContext = Depends(get_context)):
    return Response(
        content=ExportService.seating_list_csv(context.editor.layout),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=seating_list.csv"}
    )

@router.get("/layout/seating-list.xlsx")
async def seating_list_xlsx(context: AppContext = Depends(get_context)):
    return Response(
        content=ExportService.seating_list_xlsx(context.editor.layout),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=seating_list.xlsx"}
    )


# -------- tables --------

@router.post("/layout/tables")
async def add_table(
    table_data: AddTableRequest,
    context: AppContext = Depends(get_context)
):
    table = await context.editor.add_table(table_data.x, table_data.y, seat_count=table_data.seat_count)
    return success_response(
        message=f"Table {table.number} added",
        data=_table_data(context, table),
        status_code=201
    )

@router.patch("/layout/tables/{number}")
async def rename_table(
    number: int,
    rename_data: RenameTableRequest,
    context: AppContext = Depends(get_context)
):
    try:
        table = await context.editor.rename_table(number, rename_data.label)
    except LayoutError as e:
        raise_layout_error(e)
    return success_response(message="Table renamed", data=_table_data(context, table))

@router.delete("/layout/tables/{number}")
async def delete_table(
    number: int,
    context: AppContext = Depends(get_context)
):
    try:
        await context.editor.delete_table(number)
    except LayoutError as e:
        raise_layout_error(e)
    return success_response(
        message=f"Table {number} deleted",
        data={"table_number": number, "sync": context.editor.sync_state()}
    )

@router.put("/layout/tables/{number}/position")
async def move_table(
    number: int,
    position: MoveTableRequest,
    context: AppContext = Depends(get_context)
):
    """Move a table; the write is debounced"""
    try:
        table = await context.editor.move_table(number, position.x, position.y)
    except LayoutError as e:
        raise_layout_error(e)
    return success_response(message="Table moved", data=_table_data(context, table))

@router.post("/layout/tables/{number}/seats")
async def add_seat(
    number: int,
    context: AppContext = Depends(get_context)
):
    try:
        table = await context.editor.add_seat(number)
    except LayoutError as e:
        raise_layout_error(e)
    return success_response(message=f"Table {number} has {table.seat_count} seats", data=_table_data(context, table))

@router.delete("/layout/tables/{number}/seats")
async def remove_seat(
    number: int,
    context: AppContext = Depends(get_context)
):
    try:
        table = await context.editor.remove_seat(number)
    except LayoutError as e:
        raise_layout_error(e)
    return success_response(message=f"Table {number} has {table.seat_count} seats", data=_table_data(context, table))

@router.put("/layout/tables/{number}/seats/{seat_index}")
async def assign_seat(
    number: int,
    seat_index: int,
    assignment: AssignSeatRequest,
    context: AppContext = Depends(get_context)
):
    """Assign or clear a seat. Seat indexes start at 0."""
    try:
        result = await context.editor.assign_seat(
            number,
            seat_index,
            assignment.guest_name,
            tag=assignment.tag,
            note=assignment.note,
            allow_duplicate=assignment.allow_duplicate,
        )
    except LayoutError as e:
        raise_layout_error(e)

    data = _table_data(context, result.table)
    data["warnings"] = result.warnings
    return success_response(message="Seat updated", data=data)


# -------- guests and registrations --------

@router.get("/guests")
async def list_guests(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context)
):
    """Attending guests with their table numbers"""
    entries = attach_tables(load_guest_directory(db), context.editor.layout)
    return success_response(
        message=f"Found {len(entries)} guests",
        data={"guests": [entry.as_dict() for entry in entries], "total": len(entries)}
    )

@router.get("/guests/unassigned")
async def list_unassigned_guests(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context)
):
    entries = unassigned_guests(load_guest_directory(db), context.editor.layout)
    return success_response(
        message=f"{len(entries)} guests without a seat",
        data={"guests": [entry.as_dict() for entry in entries], "total": len(entries)}
    )

@router.get("/registrations")
async def list_registrations(db: Session = Depends(get_db)):
    registrations = RegistrationService.list_registrations(db)
    return success_response(
        message=f"Found {len(registrations)} registrations",
        data={
            "registrations": registrations,
            "attending": sum(1 for r in registrations if r["will_attend"]),
            "not_attending": sum(1 for r in registrations if not r["will_attend"]),
        }
    )

@router.get("/attendees")
async def list_attendees(db: Session = Depends(get_db)):
    attendees = RegistrationService.attendee_list(db)
    return success_response(
        message=f"Found {len(attendees)} attendees",
        data={"attendees": attendees, "total": len(attendees)}
    )

@router.get("/attendees.xlsx")
async def export_attendees(db: Session = Depends(get_db)):
    return Response(
        content=ExportService.attendees_xlsx(RegistrationService.attendee_list(db)),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=attendees.xlsx"}
    )

@router.get("/rsvp")
async def get_rsvp(db: Session = Depends(get_db)):
    rsvp = RegistrationService.get_rsvp_settings(db)
    return success_response(message="RSVP status retrieved", data={"is_open": rsvp.is_open})

@router.put("/rsvp")
async def update_rsvp(
    rsvp_data: RsvpUpdate,
    db: Session = Depends(get_db)
):
    """Open or close registration"""
    rsvp = RegistrationService.set_rsvp_open(db, rsvp_data.is_open)
    return success_response(
        message="RSVP opened" if rsvp.is_open else "RSVP closed",
        data={"is_open": rsvp.is_open}
    )

@router.post("/invitations/upload")
async def upload_invitations(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context)
):
    """Import the invitation list from an Excel file"""
    if not file.filename or not file.filename.endswith(('.xlsx', '.xls')):
        return error_response(
            message="Invalid file format. Please upload an Excel file (.xlsx or .xls)",
            status_code=400
        )

    file_content = await file.read()
    if len(file_content) > context.settings.MAX_UPLOAD_SIZE:
        return error_response(message="File too large", status_code=413)

    valid, errors, rows = InvitationImportService.parse_upload(file_content)
    if not valid:
        return error_response(
            message="Excel file validation failed",
            details=errors,
            status_code=422
        )

    created, updated = RegistrationService.upsert_invitations(db, rows)
    return success_response(
        message=f"Invitations imported. {created} added, {updated} updated.",
        data={"created": created, "updated": updated}
    )

@router.get("/invitations/template.xlsx")
async def download_invitation_template():
    return Response(
        content=InvitationImportService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=invitation_template.xlsx"}
    )
