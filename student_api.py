"""
Student API interface and implementations.

`StudentList` is the paged remote list consumed by the iterators. The
in-memory implementation serves a fixed list in pages; `FlakyStudentList`
wraps any list and makes page queries time out on demand.
"""

import json
import math
import random
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol, Sequence, Union

from models import Student


logger = logging.getLogger(__name__)


class QueryTimedOutError(Exception):
    """A page query timed out. Transient, the query may be retried."""
    pass


class ApiUnreachableError(Exception):
    """The student API did not answer within the retry budget."""
    pass


class StudentList(Protocol):
    """Protocol for the paged student API"""

    def get_num_students(self) -> int:
        """Total number of students in the list"""
        ...

    def get_num_pages(self) -> int:
        """Total number of pages in the list"""
        ...

    def get_page(self, page_index: int) -> Sequence[Student]:
        """Students on page `page_index`; may raise QueryTimedOutError"""
        ...


class InMemoryStudentList:
    """Serves a fixed list of students in pages of `page_size`."""

    def __init__(self, students: Iterable[Student], page_size: int = 10):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._students = tuple(students)
        self.page_size = page_size

    def get_num_students(self) -> int:
        return len(self._students)

    def get_num_pages(self) -> int:
        return math.ceil(len(self._students) / self.page_size)

    def get_page(self, page_index: int) -> Sequence[Student]:
        if not 0 <= page_index < self.get_num_pages():
            raise IndexError(f"Page {page_index} out of range (0..{self.get_num_pages() - 1})")
        start = page_index * self.page_size
        return self._students[start:start + self.page_size]


class FlakyStudentList:
    """
    Wraps a StudentList and makes page queries time out.

    `failures` maps a page index to the number of upcoming queries for that
    page that should time out. Once a page's scheduled failures are used
    up, queries time out with probability `timeout_rate` (drawn from a
    random generator seeded with `seed`).
    """

    def __init__(self, inner: StudentList, failures: Optional[Dict[int, int]] = None,
                 timeout_rate: float = 0.0, seed: Optional[int] = None):
        if not 0.0 <= timeout_rate < 1.0:
            raise ValueError("timeout_rate must be in [0, 1)")
        self._inner = inner
        self._failures = dict(failures or {})
        self._timeout_rate = timeout_rate
        self._rng = random.Random(seed)
        self.page_requests = Counter()

    @property
    def page_size(self) -> Optional[int]:
        return getattr(self._inner, "page_size", None)

    def get_num_students(self) -> int:
        return self._inner.get_num_students()

    def get_num_pages(self) -> int:
        return self._inner.get_num_pages()

    def get_page(self, page_index: int) -> Sequence[Student]:
        self.page_requests[page_index] += 1

        if self._failures.get(page_index, 0) > 0:
            self._failures[page_index] -= 1
            raise QueryTimedOutError(f"Query for page {page_index} timed out")

        if self._timeout_rate and self._rng.random() < self._timeout_rate:
            raise QueryTimedOutError(f"Query for page {page_index} timed out")

        return self._inner.get_page(page_index)


def load_student_list(path: Union[str, Path], page_size: int = 10) -> InMemoryStudentList:
    """Load a JSON array of student records into an in-memory list."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Expected a JSON array of students in {path}")

    students = [Student.model_validate(record) for record in raw]
    logger.info(f"Loaded {len(students)} students from {path} (page size {page_size})")
    return InMemoryStudentList(students, page_size=page_size)
