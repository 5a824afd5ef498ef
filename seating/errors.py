class SeatingError(Exception):
    """Base class for failures surfaced by a seating generation request."""


class ValidationError(SeatingError):
    """The generation filter is missing departments, classes or subjects."""


class NoCandidatesError(SeatingError):
    """No students or no rooms match the generation filter."""


class InsufficientSubjectsError(SeatingError):
    """Fewer than two requested subjects have a student left to seat."""

    def __init__(self, populated_subjects):
        self.populated_subjects = list(populated_subjects)
        super().__init__(
            "At least two subjects with students are required to keep "
            "same-subject students apart; found %d (%s)"
            % (
                len(self.populated_subjects),
                ", ".join(self.populated_subjects) or "none",
            )
        )


class AllocationError(SeatingError):
    """The engine ran but produced no assignment at all."""
