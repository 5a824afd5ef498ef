from collections import defaultdict
from dataclasses import dataclass, field
from typing import List

from seating.models import LEFT, MIDDLE, POSITIONS, RIGHT


@dataclass
class ConsolidatedRow:
    room_no: str
    department: str
    seat_from: str
    seat_to: str
    count: int


@dataclass
class SeatLine:
    seat_no: str
    bench_no: int
    roll_no: str
    student_name: str
    department: str
    subject: str


@dataclass
class RoomReport:
    room_no: str
    departments: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    right_seats: List[SeatLine] = field(default_factory=list)
    middle_seats: List[SeatLine] = field(default_factory=list)
    left_seats: List[SeatLine] = field(default_factory=list)

    @property
    def total(self):
        return len(self.right_seats) + len(self.middle_seats) + len(self.left_seats)


@dataclass
class SupervisorEntry:
    sr_no: int
    seat_no: str
    roll_no: str


@dataclass
class SupervisorReport:
    room_no: str
    department: str
    class_name: str
    subject: str
    entries: List[SupervisorEntry] = field(default_factory=list)

    @property
    def total_students(self):
        return len(self.entries)


def _bench_key(record):
    return record.bench_no


def _seat_key(record):
    return (record.bench_no, POSITIONS.index(record.position))


def _seat_line(record):
    return SeatLine(
        seat_no=record.seat.seat_no,
        bench_no=record.bench_no,
        roll_no=record.student.roll_no,
        student_name=record.student.name,
        department=record.student.department,
        subject=record.subject,
    )


class ReportAggregator:
    """
    Read-side projections over the assignment records of one session date.
    Input order is kept for records that tie on bench number.
    """

    def consolidated(self, records):
        groups = defaultdict(list)
        for record in records:
            groups[(record.room_no, record.student.department)].append(record)

        rows = []
        for (room_no, department), group in sorted(groups.items()):
            group = sorted(group, key=_bench_key)
            rows.append(
                ConsolidatedRow(
                    room_no=room_no,
                    department=department,
                    seat_from=group[0].seat.seat_no,
                    seat_to=group[-1].seat.seat_no,
                    count=len(group),
                )
            )
        return rows

    def room_reports(self, records):
        by_room = defaultdict(list)
        for record in records:
            by_room[record.room_no].append(record)

        reports = []
        for room_no in sorted(by_room):
            room_records = by_room[room_no]
            by_position = {position: [] for position in POSITIONS}
            for record in room_records:
                by_position[record.position].append(record)

            reports.append(
                RoomReport(
                    room_no=room_no,
                    departments=sorted({r.student.department for r in room_records}),
                    subjects=sorted({r.subject for r in room_records}),
                    right_seats=[_seat_line(r) for r in sorted(by_position[RIGHT], key=_bench_key)],
                    middle_seats=[_seat_line(r) for r in sorted(by_position[MIDDLE], key=_bench_key)],
                    left_seats=[_seat_line(r) for r in sorted(by_position[LEFT], key=_bench_key)],
                )
            )
        return reports

    def supervisor_reports(self, records):
        """One attendance sheet per room, department, class and subject."""
        groups = defaultdict(list)
        for record in records:
            key = (
                record.room_no,
                record.student.department,
                record.student.class_name,
                record.subject,
            )
            groups[key].append(record)

        reports = []
        for (room_no, department, class_name, subject), group in sorted(groups.items()):
            entries = [
                SupervisorEntry(sr_no=i, seat_no=r.seat.seat_no, roll_no=r.student.roll_no)
                for i, r in enumerate(sorted(group, key=_seat_key), start=1)
            ]
            reports.append(
                SupervisorReport(
                    room_no=room_no,
                    department=department,
                    class_name=class_name,
                    subject=subject,
                    entries=entries,
                )
            )
        return reports
