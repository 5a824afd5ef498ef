import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from seating import config
from seating.main_api import XLSX, app


ROOM = {"room_no": "101", "total_benches": 3, "capacity": 9, "r_count": 3, "m_count": 3, "l_count": 3}

FILTER = {
    "departments": ["CS"],
    "classes": ["BE"],
    "subjects": ["Math", "Physics"],
    "session_label": "Mid-term",
}


def student(roll_no, subject, department="CS", class_name="BE"):
    return {
        "roll_no": roll_no,
        "name": f"Student {roll_no}",
        "department": department,
        "class_name": class_name,
        "subjects": [subject],
    }


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "EXPORT_DIR", tmp_path / "exports")
    return TestClient(app)


@pytest.fixture
def seeded(client):
    assert client.post("/rooms/create", json=[ROOM]).json()["inserted"] == 1
    students = [student(f"M{i:03d}", "Math") for i in range(1, 5)]
    students += [student(f"P{i:03d}", "Physics") for i in range(1, 4)]
    assert client.post("/students", json=students).json()["inserted"] == 7
    return client


@pytest.fixture
def generated(seeded):
    response = seeded.post("/seating/generate", json=FILTER)
    assert response.status_code == 200
    return response.json()


def test_root(client):
    assert client.get("/").status_code == 200


def test_generate_and_read_reports(seeded, generated):
    assert generated["total_assigned"] == 7
    assert generated["rooms_used"] == 1
    assert generated["unfilled_seats"] == 2

    day = generated["date"]
    assert seeded.get("/seating/dates").json() == [day]
    assert seeded.get("/seating/labels").json() == ["Mid-term"]

    consolidated = seeded.get("/seating/reports/consolidated", params={"date": day}).json()
    assert consolidated == [
        {"room_no": "101", "department": "CS", "seat_from": "L1", "seat_to": "R3", "count": 7}
    ]

    rooms = seeded.get("/seating/reports/rooms", params={"date": day}).json()
    assert [s["seat_no"] for s in rooms[0]["right_seats"]] == ["R1", "R2", "R3"]
    assert [s["seat_no"] for s in rooms[0]["middle_seats"]] == ["M1"]
    assert [s["subject"] for s in rooms[0]["left_seats"]] == ["Physics"] * 3

    sheets = seeded.get("/seating/reports/supervisor", params={"date": day}).json()
    assert [(s["subject"], s["total_students"]) for s in sheets] == [("Math", 4), ("Physics", 3)]


def test_seat_lookup(seeded, generated):
    day = generated["date"]

    found = seeded.get("/public/seat-lookup", params={"roll_no": "P002", "date": day})
    assert found.status_code == 200
    assert (found.json()["seat_no"], found.json()["room_no"]) == ("L2", "101")

    missing = seeded.get("/public/seat-lookup", params={"roll_no": "X999", "date": day})
    assert missing.status_code == 404


def test_room_seats(seeded, generated):
    body = seeded.get("/rooms/101/seats").json()
    assert body["total_seats"] == 9
    assert sum(s["is_occupied"] for s in body["seats"]) == 7

    assert seeded.get("/rooms/999/seats").status_code == 404


@pytest.mark.parametrize("overrides, status", [
    ({"subjects": []}, 400),
    ({"departments": ["EE"]}, 404),
    ({"subjects": ["Math", "Chemistry"]}, 422),
    ({"strategy": "random"}, 400),
])
def test_generate_errors(seeded, overrides, status):
    response = seeded.post("/seating/generate", json={**FILTER, **overrides})

    assert response.status_code == status
    assert response.json()["detail"]


def test_generate_without_rooms(client):
    client.post("/students", json=[student("M001", "Math"), student("P001", "Physics")])

    assert client.post("/seating/generate", json=FILTER).status_code == 404


def test_delete_arrangement(seeded, generated):
    day = generated["date"]

    response = seeded.delete("/seating", params={"date": day})

    assert response.json()["deleted"] == 7
    assert seeded.get("/seating/dates").json() == []
    assert sum(s["is_occupied"] for s in seeded.get("/rooms/101/seats").json()["seats"]) == 0


def test_exports(seeded, generated):
    day = generated["date"]

    pdf = seeded.get("/export/consolidated/pdf", params={"date": day})
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")

    room_pdf = seeded.get("/export/room/pdf", params={"room_no": "101", "date": day, "font_size": 8})
    assert room_pdf.content.startswith(b"%PDF")
    assert seeded.get("/export/room/pdf", params={"room_no": "999", "date": day}).status_code == 404

    assert seeded.get("/export/rooms/pdf", params={"date": day}).content.startswith(b"%PDF")

    excel = seeded.get("/export/consolidated/excel", params={"date": day})
    assert excel.status_code == 200
    assert pd.read_excel(io.BytesIO(excel.content))["Total Count"].tolist() == [7]

    assert seeded.get("/export/rooms/excel", params={"date": day}).status_code == 200
    assert seeded.get("/export/consolidated/excel", params={"date": "2000-01-01"}).status_code == 404


def test_excel_uploads(client):
    buffer = io.BytesIO()
    pd.DataFrame({
        "Roll No": ["CS001", "CS002"],
        "Student Name": ["Asha", "Ravi"],
        "Department": ["CS", "CS"],
        "Class": ["BE", "BE"],
        "Subject1": ["Math", "Physics"],
    }).to_excel(buffer, sheet_name="Students", index=False)

    response = client.post(
        "/students/import",
        files={"file": ("students.xlsx", buffer.getvalue(), XLSX)},
    )
    assert response.json()["inserted"] == 2

    rooms = client.post(
        "/rooms/import",
        files={"file": ("rooms.xlsx", client.get("/rooms/template").content, XLSX)},
    )
    assert rooms.json()["inserted"] == 1
    assert client.get("/rooms").json()[0]["capacity"] == 90

    options = client.get("/students/filters").json()
    assert options["subjects"] == ["Math", "Physics"]

    bad = client.post("/students/import", files={"file": ("x.xlsx", b"not excel", XLSX)})
    assert bad.status_code == 400


def test_delete_everything(seeded, generated):
    assert seeded.delete("/rooms").status_code == 200
    assert seeded.delete("/students").status_code == 200

    assert seeded.get("/rooms").json() == []
    assert seeded.get("/students").json() == []
    assert seeded.get("/seating/dates").json() == []


def test_counts(seeded):
    assert seeded.get("/students/count").json() == {"count": 7}
    assert seeded.get("/rooms/count").json() == {"room_count": 1, "seat_count": 9}

    seeded.delete("/rooms")

    assert seeded.get("/rooms/count").json() == {"room_count": 0, "seat_count": 0}
