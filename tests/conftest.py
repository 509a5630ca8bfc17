"""
Pytest configuration for the student statistics tests.

Puts the project root on the Python path so tests can import the modules
directly, and provides student list fixtures.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from models import Student
from student_api import FlakyStudentList, InMemoryStudentList


def make_students(n, start_id=1000):
    """n students with increasing ids; every third one hasn't taken FIT2099"""
    return [
        Student(
            id=str(start_id + i),
            marks={"FIT1045": 50 + i % 50, **({} if i % 3 == 2 else {"FIT2099": 60 + i % 40})}
        )
        for i in range(n)
    ]


@pytest.fixture
def students_factory():
    """Factory building an in-memory list of n students with a given page size"""
    def _build(n, page_size=3):
        return InMemoryStudentList(make_students(n), page_size=page_size)
    return _build


@pytest.fixture
def counting_list_factory(students_factory):
    """Factory wrapping an in-memory list so page queries are counted"""
    def _build(n, page_size=3, failures=None):
        return FlakyStudentList(students_factory(n, page_size), failures=failures)
    return _build


@pytest.fixture
def example_students():
    """A: 80, B: 100, C: hasn't taken the unit"""
    return InMemoryStudentList([
        Student(id="1", marks={"FIT2099": 80}),
        Student(id="2", marks={"FIT2099": 100, "FIT1045": 70}),
        Student(id="3", marks={"FIT1045": 65}),
    ], page_size=2)
