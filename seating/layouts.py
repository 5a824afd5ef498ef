from seating.models import LEFT, MIDDLE, RIGHT


class SeatSlot:
    def __init__(self, seat_no, position, bench_no):
        self.seat_no = seat_no
        self.position = position
        self.bench_no = bench_no


def generate_seats(total_benches, r_count, m_count, l_count):
    """
    Lay out seats bench by bench. Bench i gets a seat in a position only
    while i is within that position's count, e.g. 3 benches with
    R=3, M=1, L=3 -> R1 M1 L1 R2 L2 R3 L3.
    """
    seats = []
    counts = ((RIGHT, r_count), (MIDDLE, m_count), (LEFT, l_count))

    for bench_no in range(1, total_benches + 1):
        for position, count in counts:
            if bench_no <= count:
                seats.append(
                    SeatSlot(
                        seat_no=f"{position}{bench_no}",
                        position=position,
                        bench_no=bench_no
                    )
                )

    return seats
