from datetime import date
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field


class SeatingFilter(BaseModel):
    departments: Set[str] = Field(default_factory=set)
    classes: Set[str] = Field(default_factory=set)
    subjects: Set[str] = Field(default_factory=set)
    session_label: Optional[str] = None
    strategy: Optional[str] = None


class GenerationSummary(BaseModel):
    total_assigned: int
    rooms_used: int
    date: date
    unallocated_students: int = 0
    unfilled_seats: int = 0
    shortages: List[str] = Field(default_factory=list)
    message: str = "Seating arrangement generated successfully"


class StudentIn(BaseModel):
    roll_no: str = Field(min_length=1)
    name: str = Field(min_length=1)
    department: str = Field(min_length=1)
    class_name: str = Field(min_length=1)
    subjects: Set[str] = Field(min_length=1)


class RoomIn(BaseModel):
    """
    Example request body:
    {
      "room_no": "101",
      "total_benches": 30,
      "capacity": 90,
      "r_count": 30,
      "m_count": 30,
      "l_count": 30
    }
    """

    room_no: str = Field(min_length=1)
    total_benches: int = Field(ge=1)
    capacity: Optional[int] = Field(default=None, ge=1)
    r_count: int = Field(ge=0)
    m_count: int = Field(ge=0)
    l_count: int = Field(ge=0)


class ImportSummary(BaseModel):
    message: str
    inserted: int
    skipped_duplicates: int


class FilterOptions(BaseModel):
    departments: List[str]
    classes: List[str]
    subjects: List[str]
    subjects_by_department: Dict[str, List[str]]


class SeatLookup(BaseModel):
    roll_no: str
    student_name: str
    room_no: str
    seat_no: str
    bench_no: int
    position: str
    subject: str
    date: date
    session_label: Optional[str] = None
