import logging
from datetime import date
from typing import List

from fastapi import FastAPI, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from seating import config
from seating.database import Base, engine, get_db
from seating.errors import (
    AllocationError,
    InsufficientSubjectsError,
    NoCandidatesError,
    SeatingError,
    ValidationError,
)
from seating.exports import (
    export_all_rooms_pdf,
    export_consolidated_excel,
    export_consolidated_pdf,
    export_room_pdf,
    export_room_reports_excel,
)
from seating.schemas import (
    FilterOptions,
    GenerationSummary,
    ImportSummary,
    RoomIn,
    SeatingFilter,
    SeatLookup,
    StudentIn,
)
from seating.service import RosterService, SeatingService
from seating.student_import import (
    room_import_excel,
    room_template,
    student_import_excel,
    student_template,
)


config.configure_logging()
logger = logging.getLogger(__name__)

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ERROR_STATUS = {
    ValidationError: 400,
    NoCandidatesError: 404,
    InsufficientSubjectsError: 422,
    AllocationError: 422,
}


app = FastAPI(title = "Exam Seating API")

Base.metadata.create_all(bind = engine)


def _http_error(e):
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(e, cls)),
        500
    )
    return HTTPException(status_code = status, detail = str(e))


def _export_path(filename):
    export_dir = config.EXPORT_DIR
    export_dir.mkdir(parents = True, exist_ok = True)
    return export_dir / filename


@app.get("/")
def root():
    return {"message": "Exam Seating API is running !"}


# students

@app.get("/students")
def get_students(db: Session = Depends(get_db)):
    return [
        {
            "roll_no": s.roll_no,
            "name": s.name,
            "department": s.department,
            "class_name": s.class_name,
            "subjects": sorted(s.subjects)
        }
        for s in RosterService(db).list_students()
    ]


@app.post("/students", response_model = ImportSummary)
def create_students(students: List[StudentIn], db: Session = Depends(get_db)):
    return RosterService(db).add_students(students)


@app.post("/students/import", response_model = ImportSummary)
def import_students_from_excel(file: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        students = student_import_excel(file.file)
    except Exception as e:
        logger.error("Error uploading students: %s", e)
        raise HTTPException(status_code = 400, detail = f"Excel read failed: {str(e)}")

    if not students:
        raise HTTPException(status_code = 400, detail = "No valid student data found in Excel file")

    return RosterService(db).add_students(students)


@app.get("/students/template")
def download_student_template():
    return Response(
        content = student_template(),
        media_type = XLSX,
        headers = {"Content-Disposition": "attachment; filename=student_template.xlsx"}
    )


@app.get("/students/count")
def get_student_count(db: Session = Depends(get_db)):
    return {"count": RosterService(db).counts()["students"]}


@app.get("/students/filters", response_model = FilterOptions)
def get_filter_options(db: Session = Depends(get_db)):
    return RosterService(db).filter_options()


@app.post("/students/reset")
def reset_allocations(db: Session = Depends(get_db)):
    RosterService(db).reset_allocations()
    return {"message": "All student allocations have been reset"}


@app.delete("/students")
def delete_students(db: Session = Depends(get_db)):
    RosterService(db).delete_all_students()
    return {"message": "All students have been deleted"}


# rooms

@app.get("/rooms")
def get_rooms(db: Session = Depends(get_db)):
    return [
        {
            "room_no": r.room_no,
            "total_benches": r.total_benches,
            "capacity": r.capacity,
            "r_count": r.r_count,
            "m_count": r.m_count,
            "l_count": r.l_count
        }
        for r in RosterService(db).list_rooms()
    ]


@app.post("/rooms/create", response_model = ImportSummary)
def create_rooms(rooms: List[RoomIn], db: Session = Depends(get_db)):
    return RosterService(db).add_rooms(rooms)


@app.post("/rooms/import", response_model = ImportSummary)
def import_rooms_from_excel(file: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        rooms = room_import_excel(file.file)
    except Exception as e:
        logger.error("Error uploading rooms: %s", e)
        raise HTTPException(status_code = 400, detail = f"Excel read failed: {str(e)}")

    if not rooms:
        raise HTTPException(status_code = 400, detail = "No valid room data found in Excel file")

    return RosterService(db).add_rooms(rooms)


@app.get("/rooms/count")
def get_room_count(db: Session = Depends(get_db)):
    counts = RosterService(db).counts()
    return {"room_count": counts["rooms"], "seat_count": counts["seats"]}


@app.get("/rooms/template")
def download_room_template():
    return Response(
        content = room_template(),
        media_type = XLSX,
        headers = {"Content-Disposition": "attachment; filename=room_template.xlsx"}
    )


@app.get("/rooms/{room_no}/seats")
def get_seats(room_no: str, db: Session = Depends(get_db)):
    try:
        room, seats = RosterService(db).room_seats(room_no)
    except LookupError as e:
        raise HTTPException(status_code = 404, detail = str(e))

    return {
        "room_no": room.room_no,
        "total_seats": len(seats),
        "seats": [
            {
                "seat_no": s.seat_no,
                "position": s.position,
                "bench_no": s.bench_no,
                "is_occupied": s.is_occupied
            }
            for s in seats
        ]
    }


@app.post("/seats/reset")
def reset_seats(db: Session = Depends(get_db)):
    RosterService(db).reset_seats()
    return {"message": "All seats have been reset"}


@app.delete("/rooms")
def delete_rooms(db: Session = Depends(get_db)):
    RosterService(db).delete_all_rooms()
    return {"message": "All rooms have been deleted"}


# seating

@app.post("/seating/generate", response_model = GenerationSummary)
def generate_seating_arrangement(seating_filter: SeatingFilter, db: Session = Depends(get_db)):
    try:
        return SeatingService(db).generate(seating_filter)
    except SeatingError as e:
        logger.error("Error generating seating arrangement: %s", e)
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code = 400, detail = str(e))


@app.get("/seating/dates")
def get_arrangement_dates(db: Session = Depends(get_db)):
    return SeatingService(db).arrangement_dates()


@app.get("/seating/labels")
def get_session_labels(db: Session = Depends(get_db)):
    return SeatingService(db).session_labels()


@app.delete("/seating")
def delete_arrangement(date: date, db: Session = Depends(get_db)):
    deleted = SeatingService(db).delete_arrangement(date)
    return {"message": "Arrangement deleted successfully", "deleted": deleted}


@app.get("/seating/reports/consolidated")
def get_consolidated_report(date: date, db: Session = Depends(get_db)):
    return SeatingService(db).consolidated_report(date)


@app.get("/seating/reports/rooms")
def get_room_reports(date: date, db: Session = Depends(get_db)):
    return SeatingService(db).room_reports(date)


@app.get("/seating/reports/supervisor")
def get_supervisor_reports(date: date, db: Session = Depends(get_db)):
    return [
        {
            "room_no": r.room_no,
            "department": r.department,
            "class_name": r.class_name,
            "subject": r.subject,
            "total_students": r.total_students,
            "students": r.entries
        }
        for r in SeatingService(db).supervisor_reports(date)
    ]


@app.get("/public/seat-lookup", response_model = SeatLookup)
def seat_lookup(roll_no: str, date: date, db: Session = Depends(get_db)):
    found = SeatingService(db).seat_lookup(roll_no, date)
    if found is None:
        raise HTTPException(status_code = 404, detail = "Seat not allocated yet")
    return found


# exports

@app.get("/export/consolidated/excel")
def export_consolidated_to_excel(date: date, db: Session = Depends(get_db)):
    rows = SeatingService(db).consolidated_report(date)
    if not rows:
        raise HTTPException(status_code = 404, detail = "No seating arrangement found for this date")

    file_path = _export_path(f"consolidated_report_{date}.xlsx")
    export_consolidated_excel(rows, file_path)
    return FileResponse(path = str(file_path), filename = file_path.name, media_type = XLSX)


@app.get("/export/rooms/excel")
def export_rooms_to_excel(date: date, db: Session = Depends(get_db)):
    reports = SeatingService(db).room_reports(date)
    if not reports:
        raise HTTPException(status_code = 404, detail = "No seating arrangement found for this date")

    file_path = _export_path(f"room_reports_{date}.xlsx")
    export_room_reports_excel(reports, file_path)
    return FileResponse(path = str(file_path), filename = file_path.name, media_type = XLSX)


@app.get("/export/consolidated/pdf")
def export_consolidated_to_pdf(date: date, font_size: int = config.PDF_FONT_SIZE, db: Session = Depends(get_db)):
    rows = SeatingService(db).consolidated_report(date)

    file_path = _export_path(f"consolidated_report_{date}.pdf")
    export_consolidated_pdf(rows, date, str(file_path), font_size)
    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "application/pdf")


@app.get("/export/room/pdf")
def export_room_to_pdf(room_no: str, date: date, font_size: int = config.PDF_FONT_SIZE, db: Session = Depends(get_db)):
    try:
        report = SeatingService(db).room_report(date, room_no)
    except LookupError as e:
        raise HTTPException(status_code = 404, detail = str(e))

    file_path = _export_path(f"room_{room_no}_report_{date}.pdf")
    export_room_pdf(report, date, str(file_path), font_size)
    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "application/pdf")


@app.get("/export/rooms/pdf")
def export_all_rooms_to_pdf(date: date, font_size: int = config.PDF_FONT_SIZE, db: Session = Depends(get_db)):
    reports = SeatingService(db).room_reports(date)

    file_path = _export_path(f"all_rooms_report_{date}.pdf")
    export_all_rooms_pdf(reports, date, str(file_path), font_size)
    return FileResponse(path = str(file_path), filename = file_path.name, media_type = "application/pdf")
