import logging
from collections import Counter
from datetime import date

import pytest

from seating.allocator import AllocationEngine, STRATEGIES
from seating.errors import InsufficientSubjectsError


SESSION = date(2024, 5, 1)


def allocate(students, seats, subjects, strategy="room_major", label=None):
    return AllocationEngine(strategy).allocate(
        students, seats, subjects, session_label=label, session_date=SESSION
    )


def subjects_at(result, position):
    return [r.subject for r in result.records if r.position == position]


def assert_seating_invariants(result):
    seat_ids = [r.seat.id for r in result.records]
    student_ids = [r.student.id for r in result.records]
    assert len(seat_ids) == len(set(seat_ids))
    assert len(student_ids) == len(set(student_ids))

    outer = {}
    for r in result.records:
        if r.position in ("R", "L"):
            outer.setdefault((r.room_id, r.bench_no), {})[r.position] = r.subject
    for bench, subjects in outer.items():
        if len(subjects) == 2:
            assert subjects["R"] != subjects["L"], bench


def test_math_fills_right_and_middle_physics_fills_left(make_students, make_seats):
    students = make_students(("Math", 10), ("Physics", 4))
    seats = make_seats(1, r=5, m=5, l=5)

    result = allocate(students, seats, {"Math", "Physics"})

    assert subjects_at(result, "R") == ["Math"] * 5
    assert subjects_at(result, "M") == ["Math"] * 5
    assert subjects_at(result, "L") == ["Physics"] * 4
    assert [s.seat_no for s in result.unfilled_seats] == ["L5"]
    assert result.unallocated_students == []
    assert_seating_invariants(result)


def test_spare_physics_student_is_left_unallocated(make_students, make_seats):
    students = make_students(("Math", 10), ("Physics", 6))
    seats = make_seats(1, r=5, m=5, l=5)

    result = allocate(students, seats, {"Math", "Physics"})

    assert len(result) == 15
    assert subjects_at(result, "L") == ["Physics"] * 5
    assert [s.subjects for s in result.unallocated_students] == [frozenset({"Physics"})]
    assert result.unfilled_seats == []


def test_zero_population_subject_does_not_block(make_students, make_seats):
    students = make_students(("A", 3), ("B", 3))
    seats = make_seats(1, r=3, m=3, l=3)

    result = allocate(students, seats, {"A", "B", "C"})

    assert result.shortages == ["C"]
    assert subjects_at(result, "R") == ["A"] * 3
    assert subjects_at(result, "L") == ["B"] * 3
    # A is used up by the R seats, so M has nothing to mirror
    assert subjects_at(result, "M") == []
    assert len(result.unfilled_seats) == 3


def test_shortages_are_logged(make_students, make_seats, caplog):
    with caplog.at_level(logging.WARNING, logger="seating.allocator"):
        allocate(make_students(("A", 3), ("B", 3)), make_seats(1, r=3, m=3, l=3), {"A", "B", "C"})

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert "Subject C has no students matching the filter" in warnings
    assert "3 seats were left unfilled" in warnings


def test_unallocated_students_and_unfilled_seats_are_logged(make_students, make_seats, caplog):
    seats = make_seats(1, r=5, m=5, l=5)

    with caplog.at_level(logging.WARNING, logger="seating.allocator"):
        allocate(make_students(("Math", 10), ("Physics", 6)), seats, {"Math", "Physics"})
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("1 students were not allocated") for m in messages)
    assert not any("seats were left unfilled" in m for m in messages)

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="seating.allocator"):
        allocate(make_students(("Math", 10), ("Physics", 4)), seats, {"Math", "Physics"})
    messages = [r.getMessage() for r in caplog.records]
    assert "1 seats were left unfilled" in messages
    assert not any("students were not allocated" in m for m in messages)


def test_single_populated_subject_is_rejected(make_students, make_seats):
    students = make_students(("Math", 5))

    with pytest.raises(InsufficientSubjectsError) as excinfo:
        allocate(students, make_seats(1, r=5, l=5), {"Math", "Physics"})

    assert excinfo.value.populated_subjects == ["Math"]


def test_output_is_room_major_then_phase_then_bench(make_students, make_seats):
    students = make_students(("A", 8), ("B", 8))
    seats = make_seats(2, r=2, m=2, l=2) + make_seats(1, r=2, m=2, l=2)

    result = allocate(students, seats, {"A", "B"})

    assert [(r.room_id, r.seat.seat_no) for r in result.records] == [
        (1, "R1"), (1, "R2"), (1, "M1"), (1, "M2"), (1, "L1"), (1, "L2"),
        (2, "R1"), (2, "R2"), (2, "M1"), (2, "M2"), (2, "L1"), (2, "L2"),
    ]
    assert {r.session_date for r in result.records} == {SESSION}


def test_cursors_carry_across_rooms_and_right_stops_for_the_run(make_students, make_seats):
    students = make_students(("A", 3), ("B", 3))
    seats = make_seats(1, r=2, l=2) + make_seats(2, r=2, l=2)

    result = allocate(students, seats, {"A", "B"})

    assert [(r.room_id, r.seat.seat_no, r.subject) for r in result.records] == [
        (1, "R1", "A"), (1, "R2", "A"), (1, "L1", "B"), (1, "L2", "B"),
        (2, "R1", "A"), (2, "L1", "B"),
    ]
    assert sorted(s.seat_no for s in result.unfilled_seats) == ["L2", "R2"]
    assert result.rooms_used == 2


def test_right_switch_skips_the_left_subject(make_students, make_seats):
    # ranked C(3), A(2), B(2): R starts on C, L on A
    students = make_students(("A", 2), ("B", 2), ("C", 3))
    seats = make_seats(1, r=4, l=4)

    result = allocate(students, seats, {"A", "B", "C"})

    assert subjects_at(result, "R") == ["C", "C", "C", "B"]
    assert subjects_at(result, "L") == ["A", "A"]
    assert len(result.unallocated_students) == 1
    assert_seating_invariants(result)


def test_middle_seat_needs_a_neighbour(make_students, make_seats):
    students = make_students(("A", 3), ("B", 3))
    seats = make_seats(1, r=1, m=2)

    result = allocate(students, seats, {"A", "B"})

    assert [(r.seat.seat_no, r.subject) for r in result.records] == [("R1", "A"), ("M1", "A")]
    assert [s.seat_no for s in result.unfilled_seats] == ["M2"]


def test_middle_mirrors_right_in_default_strategy(make_students, make_seats):
    students = make_students(("A", 4), ("B", 5))
    seats = make_seats(1, r=3, m=1, l=1)

    result = allocate(students, seats, {"A", "B"})

    assert [(r.seat.seat_no, r.subject) for r in result.records] == [
        ("R1", "B"), ("R2", "B"), ("R3", "B"), ("M1", "B"), ("L1", "A"),
    ]


def test_two_pass_lets_middle_follow_the_larger_neighbour(make_students, make_seats):
    students = make_students(("A", 4), ("B", 5))
    seats = make_seats(1, r=3, m=1, l=1)

    result = allocate(students, seats, {"A", "B"}, strategy="room_major_two_pass")

    # after R and L: B has 2 left, A has 3 left
    assert [(r.seat.seat_no, r.subject) for r in result.records] == [
        ("R1", "B"), ("R2", "B"), ("R3", "B"), ("M1", "A"), ("L1", "A"),
    ]


@pytest.mark.parametrize("strategy", sorted(STRATEGIES))
def test_invariants_hold_on_uneven_rooms(strategy, make_students, make_seats):
    students = make_students(("A", 7), ("B", 5), ("C", 4), ("D", 2))
    seats = (
        make_seats(1, r=4, m=4, l=4)
        + make_seats(2, r=3, m=3, l=3)
        + make_seats(3, r=3, l=3)
    )

    result = allocate(students, seats, {"A", "B", "C", "D"}, strategy=strategy)

    assert_seating_invariants(result)
    assert len(result) + len(result.unallocated_students) == len(students)
    assert len(result) + len(result.unfilled_seats) == len(seats)


def test_runs_are_deterministic(make_students, make_seats):
    students = make_students(("A", 6), ("B", 4), ("C", 5))
    seats = make_seats(1, r=4, m=4, l=4) + make_seats(2, r=2, m=2, l=2)

    first = allocate(students, seats, {"A", "B", "C"}, label="Mid-term")
    second = allocate(students, seats, {"A", "B", "C"}, label="Mid-term")

    assert first.records == second.records
    assert Counter(r.session_label for r in first.records) == {"Mid-term": len(first)}


def test_inputs_are_left_untouched(make_students, make_seats):
    students = make_students(("A", 3), ("B", 3))
    seats = make_seats(1, r=3, l=3)
    before = (list(students), list(seats))

    allocate(students, seats, {"A", "B"})

    assert (students, seats) == before
    assert not hasattr(students[0], "is_allocated")


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        AllocationEngine("random")
