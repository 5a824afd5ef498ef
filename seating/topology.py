import logging

from seating.models import POSITIONS


logger = logging.getLogger(__name__)


class SeatTopology:
    """Free seats per room, split by position and ordered by bench."""

    def __init__(self, seats):
        self._rooms = {}
        self._room_numbers = {}
        self._size = 0

        for seat in seats:
            if seat.position not in POSITIONS:
                logger.warning(
                    "Ignoring seat %s in room %s with unknown position %r",
                    seat.seat_no, seat.room_no, seat.position
                )
                continue
            by_position = self._rooms.setdefault(
                seat.room_id, {position: [] for position in POSITIONS}
            )
            by_position[seat.position].append(seat)
            self._room_numbers[seat.room_id] = seat.room_no
            self._size += 1

        for by_position in self._rooms.values():
            for seats_in_position in by_position.values():
                seats_in_position.sort(key=lambda s: s.bench_no)

    def __len__(self):
        return self._size

    def rooms(self):
        return sorted(self._rooms)

    def room_no(self, room_id):
        return self._room_numbers[room_id]

    def seats(self, room_id, position):
        return list(self._rooms.get(room_id, {}).get(position, ()))

    def all_seats(self):
        return [
            seat
            for room_id in self.rooms()
            for position in POSITIONS
            for seat in self._rooms[room_id][position]
        ]
