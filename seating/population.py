import logging
from typing import Dict, Iterable, List, Optional

from seating.models import Student


logger = logging.getLogger(__name__)


class SubjectPopulationIndex:
    """
    Buckets candidate students by the subject they sit for this session.

    A student whose subjects match several requested ones is bucketed under
    the lexicographically smallest match. Buckets keep the order in which
    students were supplied and are never mutated; consumption is tracked
    through a cursor per subject and the shared ``allocated`` id set.
    """

    def __init__(self, students: Iterable[Student], subjects: Iterable[str], allocated=None):
        self.subjects = sorted(set(subjects))
        self._allocated = allocated if allocated is not None else set()

        requested = set(self.subjects)
        buckets: Dict[str, List[Student]] = {subject: [] for subject in self.subjects}
        for student in students:
            matches = sorted(requested.intersection(student.subjects))
            if not matches:
                logger.debug("Student %s takes none of the requested subjects", student.roll_no)
                continue
            buckets[matches[0]].append(student)

        self._buckets = {subject: tuple(bucket) for subject, bucket in buckets.items()}
        self._cursors = dict.fromkeys(self.subjects, 0)
        self._remaining = {
            subject: sum(1 for s in bucket if s.id not in self._allocated)
            for subject, bucket in self._buckets.items()
        }

        self.shortages = [s for s in self.subjects if self._remaining[s] == 0]

    def population(self, subject) -> int:
        return len(self._buckets.get(subject, ()))

    def remaining(self, subject) -> int:
        return self._remaining.get(subject, 0)

    def populated_subjects(self) -> List[str]:
        return [s for s in self.subjects if self._remaining[s] > 0]

    def ranked(self) -> List[str]:
        """Subjects by descending remaining population, then by name."""
        return sorted(self.subjects, key=lambda s: (-self._remaining[s], s))

    def take_next(self, subject) -> Optional[Student]:
        bucket = self._buckets.get(subject)
        if bucket is None:
            return None

        i = self._cursors[subject]
        while i < len(bucket) and bucket[i].id in self._allocated:
            i += 1

        if i >= len(bucket):
            self._cursors[subject] = i
            return None

        student = bucket[i]
        self._cursors[subject] = i + 1
        self._allocated.add(student.id)
        self._remaining[subject] -= 1
        return student

    def unallocated(self) -> List[Student]:
        return [
            student
            for subject in self.subjects
            for student in self._buckets[subject]
            if student.id not in self._allocated
        ]
