import logging
from collections import Counter
from datetime import date

from seating.errors import InsufficientSubjectsError
from seating.models import AssignmentRecord, LEFT, MIDDLE, POSITIONS, RIGHT
from seating.population import SubjectPopulationIndex
from seating.topology import SeatTopology


logger = logging.getLogger(__name__)


# Phase order executed inside every room. Records are always emitted
# R, M, L regardless of the order the phases ran in.
STRATEGIES = {
    "room_major": (RIGHT, MIDDLE, LEFT),
    "room_major_two_pass": (RIGHT, LEFT, MIDDLE),
}

DEFAULT_STRATEGY = "room_major"


class ConsumptionRecord:
    """Student and seat ids used up by a single allocation run."""

    def __init__(self):
        self.allocated_students = set()
        self.occupied_seats = set()


class AllocationResult:
    def __init__(self, records, unallocated_students, unfilled_seats, shortages, strategy):
        self.records = tuple(records)
        self.unallocated_students = unallocated_students
        self.unfilled_seats = unfilled_seats
        self.shortages = shortages
        self.strategy = strategy

    @property
    def rooms_used(self):
        return len({record.room_id for record in self.records})

    @property
    def allocated_student_ids(self):
        return [record.student.id for record in self.records]

    @property
    def occupied_seat_ids(self):
        return [record.seat.id for record in self.records]

    def __len__(self):
        return len(self.records)


class AllocationEngine:
    """
    Greedy single pass seat allocator.

    Rooms are visited in ascending id order. R seats draw from the subject
    under the right cursor, L seats from the subject under the left cursor,
    and the two cursors never point at the same subject, so the outer seats
    of a bench always carry different subjects. An M seat takes the subject
    of its bench neighbours, preferring the one with more students left.
    """

    def __init__(self, strategy=DEFAULT_STRATEGY):
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown allocation strategy {strategy!r}, "
                f"expected one of {', '.join(sorted(STRATEGIES))}"
            )
        self.strategy = strategy

    def allocate(self, students, seats, subjects, session_label=None, session_date=None):
        consumption = ConsumptionRecord()
        index = SubjectPopulationIndex(students, subjects, consumption.allocated_students)

        logger.info("Students found per subject:")
        for subject in index.subjects:
            logger.info("  %s -> %d students", subject, index.population(subject))
        for subject in index.shortages:
            logger.warning("Subject %s has no students matching the filter", subject)

        populated = index.populated_subjects()
        if len(populated) < 2:
            logger.error("Cannot allocate with %d populated subject(s)", len(populated))
            raise InsufficientSubjectsError(populated)

        topology = SeatTopology(seats)
        run = _AllocationRun(
            index,
            consumption,
            session_date or date.today(),
            session_label,
        )
        logger.info("Subjects ordered by count: %s", run.ranked)

        records = []
        for room_id in topology.rooms():
            records.extend(run.fill_room(topology, room_id, STRATEGIES[self.strategy]))

        unfilled = [
            seat for seat in topology.all_seats()
            if seat.id not in consumption.occupied_seats
        ]
        result = AllocationResult(
            records,
            index.unallocated(),
            unfilled,
            list(index.shortages),
            self.strategy,
        )

        logger.info(
            "Seating allocation complete: %d students allocated across %d rooms",
            len(result), result.rooms_used
        )
        logger.info(
            "Subject distribution: %s",
            dict(sorted(Counter(r.subject for r in records).items()))
        )
        if result.unallocated_students:
            logger.warning(
                "%d students were not allocated (insufficient seats or subject constraints)",
                len(result.unallocated_students)
            )
        if result.unfilled_seats:
            logger.warning("%d seats were left unfilled", len(result.unfilled_seats))

        return result


class _AllocationRun:
    def __init__(self, index, consumption, session_date, session_label):
        self.index = index
        self.consumption = consumption
        self.session_date = session_date
        self.session_label = session_label

        self.ranked = index.ranked()
        self.r_cursor = 0
        self.l_cursor = 1
        self.r_stopped = False
        self.l_stopped = False

        # (room_id, bench_no, position) -> subject
        self._bench_subjects = {}

    def fill_room(self, topology, room_id, phases):
        placed = {position: [] for position in POSITIONS}
        for position in phases:
            seats = topology.seats(room_id, position)
            if position == RIGHT:
                placed[RIGHT] = self._fill_outer(seats, RIGHT)
            elif position == LEFT:
                placed[LEFT] = self._fill_outer(seats, LEFT)
            else:
                placed[MIDDLE] = self._fill_middle(seats)

        logger.debug(
            "Room %s: R=%d M=%d L=%d",
            topology.room_no(room_id),
            len(placed[RIGHT]), len(placed[MIDDLE]), len(placed[LEFT])
        )
        return placed[RIGHT] + placed[MIDDLE] + placed[LEFT]

    def _fill_outer(self, seats, position):
        records = []

        for seat in seats:
            if self._stopped(position):
                break

            cursor, other = self._cursors(position)
            subject = self.ranked[cursor]
            student = None
            if cursor != other:
                student = self.index.take_next(subject)

            if student is None:
                cursor = self._next_subject(cursor, skip=other)
                if cursor is None:
                    logger.warning(
                        "No more students available for %s seats, stopping at room %s bench %d",
                        position, seat.room_no, seat.bench_no
                    )
                    self._stop(position)
                    break
                logger.info(
                    "Subject %s exhausted for %s seats, switched to %s",
                    subject, position, self.ranked[cursor]
                )
                self._move(position, cursor)
                subject = self.ranked[cursor]
                student = self.index.take_next(subject)

            records.append(self._assign(student, seat, subject))

        return records

    def _fill_middle(self, seats):
        records = []

        for seat in seats:
            candidates = [
                subject
                for subject in (
                    self._bench_subjects.get((seat.room_id, seat.bench_no, RIGHT)),
                    self._bench_subjects.get((seat.room_id, seat.bench_no, LEFT)),
                )
                if subject is not None
            ]
            # stable: R wins a tie
            candidates.sort(key=lambda s: -self.index.remaining(s))

            for subject in candidates:
                student = self.index.take_next(subject)
                if student is not None:
                    records.append(self._assign(student, seat, subject))
                    break
            else:
                logger.debug("M seat %s in room %s left unfilled", seat.seat_no, seat.room_no)

        return records

    def _next_subject(self, cursor, skip):
        n = len(self.ranked)
        for step in range(1, n + 1):
            candidate = (cursor + step) % n
            if candidate == skip:
                continue
            if self.index.remaining(self.ranked[candidate]) > 0:
                return candidate
        return None

    def _cursors(self, position):
        if position == RIGHT:
            return self.r_cursor, self.l_cursor
        return self.l_cursor, self.r_cursor

    def _move(self, position, cursor):
        if position == RIGHT:
            self.r_cursor = cursor
        else:
            self.l_cursor = cursor

    def _stopped(self, position):
        return self.r_stopped if position == RIGHT else self.l_stopped

    def _stop(self, position):
        if position == RIGHT:
            self.r_stopped = True
        else:
            self.l_stopped = True

    def _assign(self, student, seat, subject):
        self.consumption.occupied_seats.add(seat.id)
        self._bench_subjects[(seat.room_id, seat.bench_no, seat.position)] = subject
        return AssignmentRecord(
            student=student,
            seat=seat,
            subject=subject,
            session_date=self.session_date,
            session_label=self.session_label,
        )
