from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from seating.database import Base
from seating.models import AssignmentRecord, Room, Seat, Student


class StudentDB(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key = True, index = True)
    roll_no = Column(String(50), unique = True, index = True, nullable = False)
    name = Column(String(100), nullable = False)
    department = Column(String(50), index = True, nullable = False)
    class_name = Column(String(50), index = True, nullable = False)
    is_allocated = Column(Boolean, nullable = False, default = False)

    subjects = relationship(
        "StudentSubjectDB",
        back_populates = "student",
        cascade = "all, delete-orphan",
        lazy = "selectin"
    )

    def to_domain(self):
        return Student(
            id = self.id,
            roll_no = self.roll_no,
            name = self.name,
            department = self.department,
            class_name = self.class_name,
            subjects = [s.subject for s in self.subjects]
        )


class StudentSubjectDB(Base):
    __tablename__ = "student_subjects"

    id = Column(Integer, primary_key = True, index = True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable = False, index = True)
    subject = Column(String(100), nullable = False, index = True)

    student = relationship("StudentDB", back_populates = "subjects")


class RoomDB(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key = True, index = True)
    room_no = Column(String(50), unique = True, index = True, nullable = False)
    total_benches = Column(Integer, nullable = False)
    capacity = Column(Integer, nullable = False)
    r_count = Column(Integer, nullable = False, default = 0)
    m_count = Column(Integer, nullable = False, default = 0)
    l_count = Column(Integer, nullable = False, default = 0)

    seats = relationship("SeatDB", back_populates = "room", cascade = "all, delete")

    def to_domain(self):
        return Room(
            id = self.id,
            room_no = self.room_no,
            total_benches = self.total_benches,
            capacity = self.capacity,
            r_count = self.r_count,
            m_count = self.m_count,
            l_count = self.l_count
        )


class SeatDB(Base):
    __tablename__ = "seats"
    __table_args__ = (
        Index("idx_room_bench_position", "room_id", "bench_no", "position"),
    )

    id = Column(Integer, primary_key = True, index = True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable = False)
    seat_no = Column(String(10), nullable = False)
    position = Column(String(1), nullable = False)
    bench_no = Column(Integer, nullable = False)
    is_occupied = Column(Boolean, nullable = False, default = False)

    room = relationship("RoomDB", back_populates = "seats")

    def to_domain(self):
        return Seat(
            id = self.id,
            room_id = self.room_id,
            room_no = self.room.room_no,
            seat_no = self.seat_no,
            position = self.position,
            bench_no = self.bench_no,
            is_occupied = self.is_occupied
        )


class AssignmentDB(Base):
    __tablename__ = "seating_arrangements"
    __table_args__ = (
        Index("idx_room_arrangement", "room_id", "arrangement_date"),
    )

    id = Column(Integer, primary_key = True, index = True)

    student_id = Column(Integer, ForeignKey("students.id"), nullable = False, index = True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable = False)
    seat_id = Column(Integer, ForeignKey("seats.id"), nullable = False)
    subject = Column(String(100), nullable = False)

    arrangement_date = Column(Date, nullable = False, index = True)
    arrangement_name = Column(String(100), nullable = True)

    student = relationship("StudentDB")
    room = relationship("RoomDB")
    seat = relationship("SeatDB")

    def to_domain(self):
        return AssignmentRecord(
            student = self.student.to_domain(),
            seat = self.seat.to_domain(),
            subject = self.subject,
            session_date = self.arrangement_date,
            session_label = self.arrangement_name
        )
