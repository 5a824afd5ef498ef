import io
import logging

import pandas as pd
from pydantic import ValidationError as SchemaError

from seating.schemas import RoomIn, StudentIn


logger = logging.getLogger(__name__)

STUDENT_COLUMNS = ["Roll No", "Student Name", "Department", "Class"]
ROOM_COLUMNS = ["Room No", "Total Benches", "Capacity", "R Count", "M Count", "L Count"]

STUDENT_INSTRUCTIONS = [
    "Instructions for Student Data Upload:",
    "1. Fill in student details in the 'Students' sheet",
    "2. Roll No must be unique for each student",
    "3. Enter subject names in Subject columns (leave empty if not applicable)",
    "4. All filled subjects will be considered for seating arrangement",
]

ROOM_INSTRUCTIONS = [
    "Instructions for Room Data Upload:",
    "1. Fill in room details in the 'Rooms' sheet",
    "2. Room No must be unique",
    "3. Capacity should equal (R Count + M Count + L Count)",
    "4. R = Right seats, M = Middle seats, L = Left seats on each bench",
    "5. Example: 30 benches with R=30, M=30, L=30 means 90 total seats",
]


def _read_sheet(source, sheet_name):
    sheets = pd.read_excel(source, sheet_name=None, dtype=object)
    if not sheets:
        return pd.DataFrame()
    if sheet_name in sheets:
        return sheets[sheet_name]
    return next(iter(sheets.values()))


def _text(value):
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _number(value):
    text = _text(value)
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def student_import_excel(source):
    """
    Read the 'Students' sheet (or the first sheet). Columns after 'Class'
    are subject columns; blank cells are ignored.
    """
    df = _read_sheet(source, "Students")
    missing = set(STUDENT_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}")

    subject_columns = list(df.columns[df.columns.get_loc("Class") + 1:])
    students = []

    for i, row in df.iterrows():
        line = i + 2
        values = [_text(row[c]) for c in STUDENT_COLUMNS]
        if not any(values) and not any(_text(row[c]) for c in subject_columns):
            continue

        roll_no, name, department, class_name = values
        if not (roll_no and name and department and class_name):
            logger.warning("Skipping row %d due to missing required fields", line)
            continue

        subjects = {_text(row[c]) for c in subject_columns} - {""}
        if not subjects:
            logger.warning("Skipping row %d - student %s has no subjects", line, roll_no)
            continue

        students.append(
            StudentIn(
                roll_no=roll_no,
                name=name,
                department=department,
                class_name=class_name,
                subjects=subjects
            )
        )

    logger.info("Parsed %d students from Excel file", len(students))
    return students


def room_import_excel(source):
    df = _read_sheet(source, "Rooms")
    missing = set(ROOM_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}")

    rooms = []
    for i, row in df.iterrows():
        line = i + 2
        room_no = _text(row["Room No"])
        numbers = [_number(row[c]) for c in ROOM_COLUMNS[1:]]
        if not room_no and all(n is None for n in numbers):
            continue
        if not room_no or any(n is None for n in numbers):
            logger.warning("Skipping row %d due to missing required fields", line)
            continue

        total_benches, capacity, r_count, m_count, l_count = numbers
        try:
            rooms.append(
                RoomIn(
                    room_no=room_no,
                    total_benches=total_benches,
                    capacity=capacity,
                    r_count=r_count,
                    m_count=m_count,
                    l_count=l_count
                )
            )
        except SchemaError as e:
            logger.error("Error parsing row %d: %s", line, e)

    logger.info("Parsed %d rooms from Excel file", len(rooms))
    return rooms


def _template(sheet_name, data, instructions):
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(data).to_excel(writer, sheet_name=sheet_name, index=False)
        pd.DataFrame({"Instructions": instructions}).to_excel(
            writer, sheet_name="Instructions", index=False, header=False
        )
    return buffer.getvalue()


def student_template():
    data = {
        "Roll No": ["CS001"],
        "Student Name": ["John Doe"],
        "Department": ["CSE"],
        "Class": ["BE-IV"],
        "Subject1": ["Mathematics"],
        "Subject2": ["Physics"],
        "Subject3": [""],
        "Subject4": [""],
        "Subject5": [""],
    }
    return _template("Students", data, STUDENT_INSTRUCTIONS)


def room_template():
    data = {
        "Room No": ["101"],
        "Total Benches": [30],
        "Capacity": [90],
        "R Count": [30],
        "M Count": [30],
        "L Count": [30],
    }
    return _template("Rooms", data, ROOM_INSTRUCTIONS)
