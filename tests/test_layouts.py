from seating.layouts import generate_seats


def test_full_benches_get_three_seats_each():
    seats = generate_seats(3, 3, 3, 3)

    assert [s.seat_no for s in seats] == ["R1", "M1", "L1", "R2", "M2", "L2", "R3", "M3", "L3"]
    assert [s.bench_no for s in seats] == [1, 1, 1, 2, 2, 2, 3, 3, 3]


def test_position_counts_limit_the_leading_benches():
    seats = generate_seats(3, 3, 1, 2)

    assert [s.seat_no for s in seats] == ["R1", "M1", "L1", "R2", "L2", "R3"]
    assert {s.position for s in seats if s.bench_no == 3} == {"R"}


def test_counts_beyond_bench_total_are_capped():
    assert len(generate_seats(2, 5, 0, 0)) == 2
