"""
Double-ended iteration over the paged student API.

`StudentListIterator` walks a `StudentList` from both ends without loading
the whole list: it holds one fetched page per end and queries the API for
the next page only when the page at that end runs out.
"""

import logging
from typing import Sequence

from lazy import DoubleEndedIterator
from models import Student
from student_api import ApiUnreachableError, QueryTimedOutError, StudentList
from utils import retry_call


logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3


class EmptyCursorError(IndexError):
    """A PageCursor was asked for a record after it ran out."""
    pass


class PageCursor:
    """
    Front and back cursor over one fetched page.

    `take_front` and `take_back` close in on each other and each record is
    handed out exactly once, from whichever end reaches it first.
    """

    def __init__(self, records: Sequence[Student]):
        self._records = records
        self._position = 0
        self._end = len(records) - 1

    def has_more(self) -> bool:
        return self._position <= self._end

    def take_front(self) -> Student:
        if not self.has_more():
            raise EmptyCursorError("take_front() on an exhausted page")
        record = self._records[self._position]
        self._position += 1
        return record

    def take_back(self) -> Student:
        if not self.has_more():
            raise EmptyCursorError("take_back() on an exhausted page")
        record = self._records[self._end]
        self._end -= 1
        return record

    def __len__(self):
        return max(self._end - self._position + 1, 0)


class StudentListIterator(DoubleEndedIterator):
    """
    A double-ended iterator over student records pulled from the student API.

    Pages are fetched lazily: the first and last pages on construction, then
    one page at a time as the front or back cursor runs dry. Exhaustion is
    global: the iterator is done once `get_num_students()` records have been
    returned, whichever end they came from, so the two cursors never hand
    out the same record twice.

    Page queries that time out are retried up to `retries` times before
    ApiUnreachableError is raised.

    Not thread safe; meant for a single consumer.
    """

    def __init__(self, student_list: StudentList, retries: int = DEFAULT_RETRIES):
        if retries < 0:
            raise ValueError("retries must be >= 0")

        self._students = student_list
        self._retries = retries
        self._total_students = student_list.get_num_students()
        self._num_pages = student_list.get_num_pages()
        self._retrieved = 0

        if self._total_students == 0 or self._num_pages == 0:
            self._front = PageCursor(())
            self._back = PageCursor(())
        else:
            first_page = self._fetch_page(0)
            self._front = PageCursor(first_page)
            if self._num_pages == 1:
                self._back = PageCursor(first_page)
            else:
                self._back = PageCursor(self._fetch_page(self._num_pages - 1))

        self._next_front_page = 1
        self._next_back_page = self._num_pages - 2

    @property
    def retrieved_count(self) -> int:
        return self._retrieved

    @property
    def remaining(self) -> int:
        return self._total_students - self._retrieved

    def __length_hint__(self):
        return self.remaining

    def _fetch_page(self, page_index: int) -> Sequence[Student]:
        """Fetch one page, retrying timed out queries"""
        outcome = retry_call(
            lambda: self._students.get_page(page_index),
            self._retries,
            retry_on=(QueryTimedOutError,)
        )
        if not outcome.ok:
            logger.warning(f"Student API unreachable: page {page_index} failed {outcome.attempts} times")
            raise ApiUnreachableError(
                f"Page {page_index} could not be fetched after {outcome.attempts} attempts"
            ) from outcome.error

        if outcome.attempts > 1:
            logger.debug(f"Fetched page {page_index} after {outcome.attempts} attempts")
        return outcome.value

    def has_next(self) -> bool:
        if self._retrieved >= self._total_students:
            return False

        # Refresh the front page here; next() relies on it
        while not self._front.has_more() and self._next_front_page < self._num_pages:
            self._front = PageCursor(self._fetch_page(self._next_front_page))
            self._next_front_page += 1
        return self._front.has_more()

    def __next__(self) -> Student:
        if not self.has_next():
            raise StopIteration
        self._retrieved += 1
        return self._front.take_front()

    def reverse_next(self) -> Student:
        if not self.has_next():
            raise StopIteration

        while not self._back.has_more() and self._next_back_page >= 0:
            self._back = PageCursor(self._fetch_page(self._next_back_page))
            self._next_back_page -= 1
        self._retrieved += 1
        return self._back.take_back()
