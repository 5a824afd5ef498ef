import logging
from datetime import date

from seating import config
from seating.allocator import AllocationEngine
from seating.errors import AllocationError, NoCandidatesError, ValidationError
from seating.reports import ReportAggregator
from seating.repositories import AssignmentStore, RoomCatalog, SeatCatalog, StudentDirectory
from seating.schemas import GenerationSummary, ImportSummary, SeatLookup


logger = logging.getLogger(__name__)


class SeatingService:
    """
    Generation and reporting of seating arrangements.

    Only one generation may run at a time: the flag reset and the
    allocated/occupied flags are shared database state and are not locked.
    """

    def __init__(self, db, today=date.today):
        self.db = db
        self.today = today
        self.students = StudentDirectory(db)
        self.seats = SeatCatalog(db)
        self.rooms = RoomCatalog(db)
        self.store = AssignmentStore(db)
        self.aggregator = ReportAggregator()

    def generate(self, seating_filter):
        if not (seating_filter.departments and seating_filter.classes and seating_filter.subjects):
            raise ValidationError("Please select departments, classes, and subjects")

        engine = AllocationEngine(seating_filter.strategy or config.ALLOCATION_STRATEGY)

        students = self.students.find_candidates(
            seating_filter.departments, seating_filter.classes, seating_filter.subjects
        )
        if not students:
            raise NoCandidatesError("No students found matching the selected criteria")

        rooms = self.rooms.list_rooms()
        if not rooms:
            raise NoCandidatesError("No rooms available. Please add rooms first.")

        # not rolled back if allocation fails below
        self.reset_flags()
        self.db.commit()

        seats = []
        for room in rooms:
            seats.extend(self.seats.find_available_seats(room.id))
        if not seats:
            logger.error("No available seats found in any room")

        session_date = self.today()
        result = engine.allocate(
            students,
            seats,
            seating_filter.subjects,
            session_label=seating_filter.session_label,
            session_date=session_date,
        )
        if not result.records:
            raise AllocationError("Unable to generate seating arrangement. Please check room capacity.")

        try:
            replaced = self.store.delete_by_date(session_date)
            if replaced:
                logger.info("Replacing %d records already stored for %s", replaced, session_date)
            self.store.save_all(result.records)
            self.students.mark_allocated(result.allocated_student_ids)
            self.seats.mark_occupied(result.occupied_seat_ids)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Error persisting seating arrangement")
            raise

        logger.info(
            "Generated seating arrangement for %d students across %d rooms",
            len(result), result.rooms_used
        )
        return GenerationSummary(
            total_assigned=len(result),
            rooms_used=result.rooms_used,
            date=session_date,
            unallocated_students=len(result.unallocated_students),
            unfilled_seats=len(result.unfilled_seats),
            shortages=result.shortages,
        )

    def reset_flags(self):
        self.students.reset_allocation_flags()
        self.seats.reset_occupied_flags()

    def consolidated_report(self, session_date):
        return self.aggregator.consolidated(self.store.find_by_date_ordered(session_date))

    def room_reports(self, session_date):
        return self.aggregator.room_reports(self.store.find_by_date_ordered(session_date))

    def room_report(self, session_date, room_no):
        for report in self.room_reports(session_date):
            if report.room_no == room_no:
                return report
        raise LookupError(f"Room {room_no} not found in reports for {session_date}")

    def supervisor_reports(self, session_date):
        return self.aggregator.supervisor_reports(self.store.find_by_date_ordered(session_date))

    def arrangement_dates(self):
        return self.store.list_distinct_dates()

    def session_labels(self):
        return self.store.list_session_labels()

    def delete_arrangement(self, session_date):
        deleted = self.store.delete_by_date(session_date)
        self.reset_flags()
        self.db.commit()
        logger.info("Deleted arrangement for date %s (%d records)", session_date, deleted)
        return deleted

    def seat_lookup(self, roll_no, session_date):
        record = self.store.find_for_student(roll_no, session_date)
        if record is None:
            return None
        return SeatLookup(
            roll_no=record.student.roll_no,
            student_name=record.student.name,
            room_no=record.room_no,
            seat_no=record.seat.seat_no,
            bench_no=record.bench_no,
            position=record.position,
            subject=record.subject,
            date=record.session_date,
            session_label=record.session_label,
        )


class RosterService:
    """Students, rooms and their seats."""

    def __init__(self, db):
        self.db = db
        self.students = StudentDirectory(db)
        self.seats = SeatCatalog(db)
        self.rooms = RoomCatalog(db)

    def add_students(self, students):
        inserted = 0
        skipped = 0
        seen = set()

        for s in students:
            if s.roll_no in seen or self.students.exists(s.roll_no):
                logger.warning("Student with roll no %s already exists, skipping", s.roll_no)
                skipped += 1
                continue
            self.students.add_student(s.roll_no, s.name, s.department, s.class_name, s.subjects)
            seen.add(s.roll_no)
            inserted += 1

        self.db.commit()
        logger.info("Student upload completed. Saved: %d, Skipped: %d", inserted, skipped)
        return ImportSummary(
            message="Student import completed",
            inserted=inserted,
            skipped_duplicates=skipped,
        )

    def add_rooms(self, rooms):
        inserted = 0
        skipped = 0
        seen = set()

        for r in rooms:
            if r.room_no in seen or self.rooms.exists(r.room_no):
                logger.warning("Room %s already exists, skipping", r.room_no)
                skipped += 1
                continue

            seat_total = r.r_count + r.m_count + r.l_count
            capacity = r.capacity if r.capacity is not None else seat_total
            if capacity != seat_total:
                logger.warning(
                    "Room %s: capacity mismatch. Expected %d, got %d",
                    r.room_no, seat_total, capacity
                )

            self.rooms.add_room(
                r.room_no, r.total_benches, capacity, r.r_count, r.m_count, r.l_count
            )
            seen.add(r.room_no)
            inserted += 1

        self.db.commit()
        logger.info("Room upload completed. Saved: %d, Skipped: %d", inserted, skipped)
        return ImportSummary(
            message="Room import completed",
            inserted=inserted,
            skipped_duplicates=skipped,
        )

    def list_students(self):
        return self.students.list_students()

    def list_rooms(self):
        return self.rooms.list_rooms()

    def room_seats(self, room_no):
        room = self.rooms.find_by_room_no(room_no)
        if room is None:
            raise LookupError(f"Room {room_no} not found")
        return room, self.seats.seats_for_room(room.id)

    def counts(self):
        return {
            "students": self.students.count(),
            "rooms": self.rooms.count(),
            "seats": self.seats.count(),
        }

    def filter_options(self):
        return {
            "departments": self.students.departments(),
            "classes": self.students.classes(),
            "subjects": self.students.subjects(),
            "subjects_by_department": self.students.subjects_by_department(),
        }

    def reset_seats(self):
        self.seats.reset_occupied_flags()
        self.db.commit()
        logger.info("All seats have been reset")

    def reset_allocations(self):
        self.students.reset_allocation_flags()
        self.db.commit()
        logger.info("All student allocations have been reset")

    def delete_all_rooms(self):
        self.rooms.delete_all()
        self.db.commit()
        logger.info("All rooms, seats and seating arrangements have been deleted")

    def delete_all_students(self):
        self.students.delete_all()
        self.db.commit()
        logger.info("All students have been deleted")
