"""
SQLAlchemy backed collaborators of the allocation engine.

Repositories translate between ORM rows and the plain objects in
``seating.models``. None of them commit; the calling service owns the
transaction.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from seating.db_models import AssignmentDB, RoomDB, SeatDB, StudentDB, StudentSubjectDB
from seating.layouts import generate_seats


logger = logging.getLogger(__name__)


class StudentDirectory:
    def __init__(self, db: Session):
        self.db = db

    def find_candidates(self, departments, classes, subjects):
        matching_subject = (
            select(StudentSubjectDB.student_id)
            .where(StudentSubjectDB.subject.in_(list(subjects)))
        )
        students = (
            self.db.query(StudentDB)
            .filter(StudentDB.department.in_(list(departments)))
            .filter(StudentDB.class_name.in_(list(classes)))
            .filter(StudentDB.id.in_(matching_subject))
            .order_by(StudentDB.id)
            .all()
        )
        return [s.to_domain() for s in students]

    def reset_allocation_flags(self):
        self.db.query(StudentDB).update({StudentDB.is_allocated: False}, synchronize_session = False)

    def mark_allocated(self, student_ids):
        ids = list(student_ids)
        if not ids:
            return
        (
            self.db.query(StudentDB)
            .filter(StudentDB.id.in_(ids))
            .update({StudentDB.is_allocated: True}, synchronize_session = False)
        )

    def exists(self, roll_no):
        return self.db.query(StudentDB.id).filter(StudentDB.roll_no == roll_no).first() is not None

    def add_student(self, roll_no, name, department, class_name, subjects):
        student = StudentDB(
            roll_no = roll_no,
            name = name,
            department = department,
            class_name = class_name,
            is_allocated = False,
            subjects = [StudentSubjectDB(subject = s) for s in sorted(set(subjects))]
        )
        self.db.add(student)
        self.db.flush()
        return student

    def list_students(self):
        return [s.to_domain() for s in self.db.query(StudentDB).order_by(StudentDB.id).all()]

    def allocated_ids(self):
        rows = self.db.query(StudentDB.id).filter(StudentDB.is_allocated.is_(True)).order_by(StudentDB.id)
        return [row.id for row in rows]

    def departments(self):
        rows = self.db.query(StudentDB.department).distinct().order_by(StudentDB.department)
        return [row[0] for row in rows]

    def classes(self):
        rows = self.db.query(StudentDB.class_name).distinct().order_by(StudentDB.class_name)
        return [row[0] for row in rows]

    def subjects(self, department = None):
        query = self.db.query(StudentSubjectDB.subject).distinct()
        if department is not None:
            query = (
                query.join(StudentDB, StudentSubjectDB.student_id == StudentDB.id)
                .filter(StudentDB.department == department)
            )
        return [row[0] for row in query.order_by(StudentSubjectDB.subject)]

    def subjects_by_department(self):
        return {department: self.subjects(department) for department in self.departments()}

    def count(self):
        return self.db.query(StudentDB).count()

    def delete_all(self):
        self.db.query(AssignmentDB).delete(synchronize_session = False)
        self.db.query(StudentSubjectDB).delete(synchronize_session = False)
        self.db.query(StudentDB).delete(synchronize_session = False)


class SeatCatalog:
    def __init__(self, db: Session):
        self.db = db

    def find_available_seats(self, room_id):
        seats = (
            self.db.query(SeatDB)
            .options(joinedload(SeatDB.room))
            .filter(SeatDB.room_id == room_id)
            .filter(SeatDB.is_occupied.is_(False))
            .order_by(SeatDB.bench_no, SeatDB.position)
            .all()
        )
        return [s.to_domain() for s in seats]

    def seats_for_room(self, room_id):
        seats = (
            self.db.query(SeatDB)
            .options(joinedload(SeatDB.room))
            .filter(SeatDB.room_id == room_id)
            .order_by(SeatDB.bench_no, SeatDB.position)
            .all()
        )
        return [s.to_domain() for s in seats]

    def reset_occupied_flags(self):
        self.db.query(SeatDB).update({SeatDB.is_occupied: False}, synchronize_session = False)

    def mark_occupied(self, seat_ids):
        ids = list(seat_ids)
        if not ids:
            return
        (
            self.db.query(SeatDB)
            .filter(SeatDB.id.in_(ids))
            .update({SeatDB.is_occupied: True}, synchronize_session = False)
        )

    def occupied_ids(self):
        rows = self.db.query(SeatDB.id).filter(SeatDB.is_occupied.is_(True)).order_by(SeatDB.id)
        return [row.id for row in rows]

    def count(self):
        return self.db.query(SeatDB).count()


class RoomCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list_rooms(self):
        return [r.to_domain() for r in self.db.query(RoomDB).order_by(RoomDB.id).all()]

    def find_by_room_no(self, room_no):
        room = self.db.query(RoomDB).filter(RoomDB.room_no == room_no).first()
        return room.to_domain() if room else None

    def exists(self, room_no):
        return self.db.query(RoomDB.id).filter(RoomDB.room_no == room_no).first() is not None

    def add_room(self, room_no, total_benches, capacity, r_count, m_count, l_count):
        room = RoomDB(
            room_no = room_no,
            total_benches = total_benches,
            capacity = capacity,
            r_count = r_count,
            m_count = m_count,
            l_count = l_count
        )
        self.db.add(room)
        self.db.flush()

        slots = generate_seats(total_benches, r_count, m_count, l_count)
        for slot in slots:
            self.db.add(
                SeatDB(
                    room_id = room.id,
                    seat_no = slot.seat_no,
                    position = slot.position,
                    bench_no = slot.bench_no,
                    is_occupied = False
                )
            )
        self.db.flush()
        logger.debug("Generated %d seats for room %s", len(slots), room_no)
        return room, len(slots)

    def count(self):
        return self.db.query(RoomDB).count()

    def delete_all(self):
        # arrangements reference seats and rooms, seats reference rooms
        self.db.query(AssignmentDB).delete(synchronize_session = False)
        self.db.query(SeatDB).delete(synchronize_session = False)
        self.db.query(RoomDB).delete(synchronize_session = False)


class AssignmentStore:
    def __init__(self, db: Session):
        self.db = db

    def save_all(self, records):
        rows = [
            AssignmentDB(
                student_id = record.student.id,
                room_id = record.room_id,
                seat_id = record.seat.id,
                subject = record.subject,
                arrangement_date = record.session_date,
                arrangement_name = record.session_label
            )
            for record in records
        ]
        self.db.add_all(rows)
        self.db.flush()
        return len(rows)

    def _ordered(self):
        return (
            self.db.query(AssignmentDB)
            .join(RoomDB, AssignmentDB.room_id == RoomDB.id)
            .join(SeatDB, AssignmentDB.seat_id == SeatDB.id)
            .options(
                joinedload(AssignmentDB.student),
                joinedload(AssignmentDB.seat).joinedload(SeatDB.room)
            )
            .order_by(RoomDB.room_no, SeatDB.bench_no, SeatDB.position)
        )

    def find_by_date_ordered(self, session_date):
        rows = self._ordered().filter(AssignmentDB.arrangement_date == session_date).all()
        return [row.to_domain() for row in rows]

    def find_for_student(self, roll_no, session_date):
        row = (
            self._ordered()
            .join(StudentDB, AssignmentDB.student_id == StudentDB.id)
            .filter(StudentDB.roll_no == roll_no)
            .filter(AssignmentDB.arrangement_date == session_date)
            .first()
        )
        return row.to_domain() if row else None

    def list_distinct_dates(self):
        rows = (
            self.db.query(AssignmentDB.arrangement_date)
            .distinct()
            .order_by(AssignmentDB.arrangement_date.desc())
        )
        return [row[0] for row in rows]

    def list_session_labels(self):
        rows = (
            self.db.query(AssignmentDB.arrangement_name)
            .filter(AssignmentDB.arrangement_name.isnot(None))
            .distinct()
            .order_by(AssignmentDB.arrangement_name)
        )
        return [row[0] for row in rows]

    def delete_by_date(self, session_date):
        return (
            self.db.query(AssignmentDB)
            .filter(AssignmentDB.arrangement_date == session_date)
            .delete(synchronize_session = False)
        )
