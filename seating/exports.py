from dataclasses import asdict

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from seating import config


CONSOLIDATED_HEADERS = {
    "room_no": "Room No",
    "department": "Department",
    "seat_from": "Seat From",
    "seat_to": "Seat To",
    "count": "Total Count",
}


def consolidated_frame(rows):
    df = pd.DataFrame([asdict(r) for r in rows], columns=list(CONSOLIDATED_HEADERS))
    return df.rename(columns=CONSOLIDATED_HEADERS)


def room_frame(report):
    lines = []
    for position, seats in (
        ("R", report.right_seats),
        ("M", report.middle_seats),
        ("L", report.left_seats),
    ):
        for s in seats:
            lines.append({
                "Room No": report.room_no,
                "Position": position,
                "Bench": s.bench_no,
                "Seat No": s.seat_no,
                "Roll No": s.roll_no,
                "Student Name": s.student_name,
                "Department": s.department,
                "Subject": s.subject,
            })
    return pd.DataFrame(lines)


def export_consolidated_excel(rows, target):
    consolidated_frame(rows).to_excel(target, index=False, sheet_name="Consolidated")


def export_room_reports_excel(reports, target):
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        if not reports:
            pd.DataFrame().to_excel(writer, sheet_name="Rooms", index=False)
        for report in reports:
            # sheet names are capped at 31 characters
            room_frame(report).to_excel(
                writer, sheet_name=f"Room {report.room_no}"[:31], index=False
            )


class _PdfWriter:
    def __init__(self, target, font_size=None):
        self.c = canvas.Canvas(target, pagesize=A4)
        self.width, self.height = A4
        self.font_size = font_size or config.PDF_FONT_SIZE
        self.line_height = self.font_size + 5
        self.y = self.height - 50

    def header(self, title, session_date):
        for line in (config.REPORT_HEADER_LINE1, config.REPORT_HEADER_LINE2):
            if line:
                self.c.setFont("Helvetica-Bold", self.font_size + 2)
                self.c.drawCentredString(self.width / 2, self.y, line)
                self.y -= self.line_height + 2

        self.c.setFont("Helvetica-Bold", self.font_size + 4)
        self.c.drawString(50, self.y, title)
        self.y -= self.line_height + 10

        self.c.setFont("Helvetica", self.font_size)
        self.c.drawString(50, self.y, f"Date: {session_date}")
        self.y -= self.line_height

    def text(self, value, bold=False):
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", self.font_size)
        self.c.drawString(50, self.y, value)
        self.y -= self.line_height

    def table(self, columns, rows):
        """columns: [(title, x)]"""
        self._table_header(columns)
        for row in rows:
            if self.y < 60:
                self.c.showPage()
                self.y = self.height - 50
                self._table_header(columns)
            self.c.setFont("Helvetica", self.font_size)
            for (_, x), value in zip(columns, row):
                self.c.drawString(x, self.y, str(value))
            self.y -= self.line_height

    def _table_header(self, columns):
        self.y -= 5
        self.c.setFont("Helvetica-Bold", self.font_size)
        for title, x in columns:
            self.c.drawString(x, self.y, title)
        self.y -= self.line_height
        self.c.line(50, self.y + self.font_size, 550, self.y + self.font_size)

    def new_page(self):
        self.c.showPage()
        self.y = self.height - 50

    def save(self):
        self.c.save()


def export_consolidated_pdf(rows, session_date, target, font_size=None):
    pdf = _PdfWriter(target, font_size)
    pdf.header("Consolidated Report", session_date)
    pdf.table(
        [("Room No", 50), ("Department", 130), ("Seat From", 260), ("Seat To", 350), ("Total Count", 440)],
        [(r.room_no, r.department, r.seat_from, r.seat_to, r.count) for r in rows]
    )
    pdf.save()


def _draw_room(pdf, report, session_date):
    pdf.header("Individual Room Report", session_date)
    pdf.text(f"Room No: {report.room_no}", bold=True)
    pdf.text("Departments: " + ", ".join(report.departments))
    pdf.text("Subjects: " + ", ".join(report.subjects))

    columns = [("R Seat", 50), ("Roll No", 100), ("M Seat", 220), ("Roll No", 270), ("L Seat", 390), ("Roll No", 440)]
    height = max(len(report.right_seats), len(report.middle_seats), len(report.left_seats))
    rows = []
    for i in range(height):
        row = []
        for seats in (report.right_seats, report.middle_seats, report.left_seats):
            if i < len(seats):
                row.extend([seats[i].seat_no, seats[i].roll_no])
            else:
                row.extend(["", ""])
        rows.append(row)
    pdf.table(columns, rows)


def export_room_pdf(report, session_date, target, font_size=None):
    pdf = _PdfWriter(target, font_size)
    _draw_room(pdf, report, session_date)
    pdf.save()


def export_all_rooms_pdf(reports, session_date, target, font_size=None):
    pdf = _PdfWriter(target, font_size)
    for i, report in enumerate(reports):
        if i:
            pdf.new_page()
        _draw_room(pdf, report, session_date)
    if not reports:
        pdf.text("No seating arrangement for this date.")
    pdf.save()
