import argparse

from seating import config
from seating.database import Base, SessionLocal, engine
from seating.errors import SeatingError
from seating.schemas import SeatingFilter
from seating.service import RosterService, SeatingService
from seating.student_import import room_import_excel, student_import_excel


def parse_args():
    parser = argparse.ArgumentParser(description = "Generate an exam seating arrangement")
    parser.add_argument("--students", default = "students.xlsx")
    parser.add_argument("--rooms", default = "rooms.xlsx")
    parser.add_argument("--departments", nargs = "+", required = True)
    parser.add_argument("--classes", nargs = "+", required = True)
    parser.add_argument("--subjects", nargs = "+", required = True)
    parser.add_argument("--label", default = None)
    parser.add_argument("--strategy", default = None)
    return parser.parse_args()


def main():
    args = parse_args()
    config.configure_logging()
    Base.metadata.create_all(bind = engine)

    db = SessionLocal()
    try:
        roster = RosterService(db)
        roster.add_students(student_import_excel(args.students))
        roster.add_rooms(room_import_excel(args.rooms))

        service = SeatingService(db)
        try:
            summary = service.generate(
                SeatingFilter(
                    departments = set(args.departments),
                    classes = set(args.classes),
                    subjects = set(args.subjects),
                    session_label = args.label,
                    strategy = args.strategy
                )
            )
        except SeatingError as e:
            print(f"Unable to generate seating arrangement: {e}")
            return 1

        print(
            f"\n--- Seat Allocation {summary.date} ---\n"
            f"{summary.total_assigned} students in {summary.rooms_used} rooms "
            f"({summary.unallocated_students} unallocated, {summary.unfilled_seats} seats free)"
        )
        for row in service.consolidated_report(summary.date):
            print(
                f"Room {row.room_no} | {row.department} | "
                f"{row.seat_from} - {row.seat_to} | {row.count}"
            )
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
