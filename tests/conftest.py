import os

os.environ["SEATING_DATABASE_URL"] = "sqlite://"

import pytest

import seating.db_models  # noqa: F401  registers the tables
from seating.database import Base, SessionLocal, engine
from seating.layouts import generate_seats
from seating.models import Seat, Student


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_students():
    """make_students(("Math", 3), ("Physics", 2)) -> ids numbered from `start`."""

    def _make(*groups, start=1, department="CS", class_name="BE"):
        students = []
        next_id = start
        for subjects, count in groups:
            if isinstance(subjects, str):
                subjects = [subjects]
            for _ in range(count):
                students.append(
                    Student(
                        id=next_id,
                        roll_no=f"S{next_id:03d}",
                        name=f"Student {next_id}",
                        department=department,
                        class_name=class_name,
                        subjects=subjects,
                    )
                )
                next_id += 1
        return students

    return _make


@pytest.fixture
def make_seats():
    """Seats of one room laid out like a stored room with R/M/L counts."""

    def _make(room_id, r=0, m=0, l=0, room_no=None, benches=None):
        benches = benches or max(r, m, l)
        return [
            Seat(
                id=room_id * 1000 + i,
                room_id=room_id,
                room_no=room_no or str(100 + room_id),
                seat_no=slot.seat_no,
                position=slot.position,
                bench_no=slot.bench_no,
            )
            for i, slot in enumerate(generate_seats(benches, r, m, l), start=1)
        ]

    return _make
