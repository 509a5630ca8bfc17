"""
Statistics over the student API, built from the lazy primitives.
"""

from typing import Iterator, Optional

from lazy import lazy_filter, lazy_map, lazy_reversed, reduce
from models import Student
from student_api import StudentList
from student_iterator import DEFAULT_RETRIES, StudentListIterator


class NoStudentsForUnitError(ZeroDivisionError):
    """No student has a mark for the unit, so there is nothing to average."""

    def __init__(self, unit: Optional[str] = None):
        self.unit = unit
        if unit is None:
            super().__init__("Cannot average zero samples")
        else:
            super().__init__(f"No student has taken unit {unit}")


class IntegerAverage:
    """Running integer average of mark samples."""

    def __init__(self, unit: Optional[str] = None):
        self.unit = unit
        self.total = 0
        self.count = 0

    def add_sample(self, sample: Optional[int]) -> "IntegerAverage":
        if sample is None:
            return self
        self.total += sample
        self.count += 1
        return self

    @property
    def average(self) -> int:
        """Truncated average; raises NoStudentsForUnitError with no samples"""
        if self.count == 0:
            raise NoStudentsForUnitError(self.unit)
        # Truncate toward zero; // alone floors negative totals
        quotient = abs(self.total) // self.count
        return -quotient if self.total < 0 else quotient


def unit_average(student_list: StudentList, unit: str, retries: int = DEFAULT_RETRIES) -> int:
    """
    Average mark (integer division) across all students who have completed
    `unit`. Students without a mark for the unit are skipped, not counted
    as zero.
    """
    marks = lazy_map(StudentListIterator(student_list, retries), lambda student: student.get_mark(unit))
    return reduce(marks, IntegerAverage(unit), IntegerAverage.add_sample).average


def unit_newest_students(student_list: StudentList, unit: str,
                         retries: int = DEFAULT_RETRIES) -> Iterator[Student]:
    """
    Students who have taken `unit`, newest first.

    Newest means last in the student list; the result follows list order
    backwards and is not sorted by id. Pages are fetched as the result is
    consumed.
    """
    newest_first = lazy_reversed(StudentListIterator(student_list, retries))
    return lazy_filter(newest_first, lambda student: student.has_taken(unit))
