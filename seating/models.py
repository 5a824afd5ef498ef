from dataclasses import dataclass
from datetime import date
from typing import Optional


RIGHT = "R"
MIDDLE = "M"
LEFT = "L"

POSITIONS = (RIGHT, MIDDLE, LEFT)


class Student:
    def __init__(self, id, roll_no, name, department, class_name, subjects):
        self.id = id
        self.roll_no = roll_no
        self.name = name
        self.department = department
        self.class_name = class_name
        self.subjects = frozenset(subjects)

    def __repr__(self):
        return f"Student({self.roll_no}, {self.name})"


class Room:
    def __init__(self, id, room_no, total_benches, capacity, r_count, m_count, l_count):
        self.id = id
        self.room_no = room_no
        self.total_benches = total_benches
        self.capacity = capacity
        self.r_count = r_count
        self.m_count = m_count
        self.l_count = l_count

    @property
    def seat_count(self):
        return self.r_count + self.m_count + self.l_count

    @property
    def capacity_mismatch(self):
        return self.capacity != self.seat_count

    def __repr__(self):
        return f"Room({self.room_no}, {self.capacity} seats)"


class Seat:
    def __init__(self, id, room_id, room_no, seat_no, position, bench_no, is_occupied=False):
        self.id = id
        self.room_id = room_id
        self.room_no = room_no
        self.seat_no = seat_no
        self.position = position
        self.bench_no = bench_no
        self.is_occupied = is_occupied

    def __repr__(self):
        return f"Seat({self.room_no}/{self.seat_no})"


@dataclass(frozen=True)
class AssignmentRecord:
    """One student placed on one seat for one exam session."""

    student: Student
    seat: Seat
    subject: str
    session_date: date
    session_label: Optional[str] = None

    @property
    def room_id(self):
        return self.seat.room_id

    @property
    def room_no(self):
        return self.seat.room_no

    @property
    def position(self):
        return self.seat.position

    @property
    def bench_no(self):
        return self.seat.bench_no
