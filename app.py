import datetime
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from itertools import islice
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query, Depends
from fastapi.responses import JSONResponse

from lazy import LazyCollection
from models import (
    ServiceSettings, Student, StudentSummary, UnitAverageResponse,
    StudentsResponse, HealthCheckResponse, ErrorResponse
)
from stats import NoStudentsForUnitError, unit_average, unit_newest_students
from student_api import ApiUnreachableError, FlakyStudentList, StudentList, load_student_list
from student_iterator import StudentListIterator
from utils import measure_performance, setup_logging


logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> ServiceSettings:
    return ServiceSettings()


@lru_cache()
def get_student_list() -> StudentList:
    """Student API handle shared by all requests; immutable once loaded."""
    settings = get_settings()
    student_list = load_student_list(settings.resolve_data_path(), settings.page_size)
    if settings.timeout_rate > 0:
        logger.info(f"Simulating page query timeouts at rate {settings.timeout_rate}")
        return FlakyStudentList(student_list, timeout_rate=settings.timeout_rate)
    return student_list


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"Student statistics service starting (page size {settings.page_size}, retries {settings.retries})")
    yield
    logger.info("Student statistics service stopped")


app = FastAPI(title="Student Statistics API", lifespan=lifespan)


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _error_response(status_code: int, error: str, error_code: str,
                    details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            error_code=error_code,
            details=details,
            timestamp=_now()
        ).model_dump()
    )


def _summaries(students: List[Student], unit: Optional[str] = None) -> List[StudentSummary]:
    return [
        StudentSummary(
            id=student.get_id(),
            marks=dict(student.marks),
            mark=student.get_mark(unit) if unit else None
        )
        for student in students
    ]


@app.get("/health", response_model=HealthCheckResponse)
def health(
    student_list: StudentList = Depends(get_student_list),
    settings: ServiceSettings = Depends(get_settings)
) -> HealthCheckResponse:
    """Report what the student API says about its size"""
    return HealthCheckResponse(
        status="healthy",
        total_students=student_list.get_num_students(),
        total_pages=student_list.get_num_pages(),
        page_size=getattr(student_list, "page_size", None),
        retries=settings.retries,
        timestamp=_now()
    )


@app.get("/units/{unit}/average", response_model=UnitAverageResponse)
def get_unit_average(
    unit: str,
    student_list: StudentList = Depends(get_student_list),
    settings: ServiceSettings = Depends(get_settings)
):
    """Integer average mark of every student who has taken `unit`"""
    try:
        average, perf = measure_performance(
            f"unit_average[{unit}]", unit_average, student_list, unit, settings.retries
        )
    except NoStudentsForUnitError as e:
        return _error_response(404, str(e), "NO_STUDENTS_FOR_UNIT", {"unit": unit})
    except ApiUnreachableError as e:
        logger.error(f"Average for {unit} failed: {e}")
        return _error_response(503, str(e), "API_UNREACHABLE", {"retries": settings.retries})

    return UnitAverageResponse(
        unit=unit,
        average=average,
        processing_time_ms=perf["execution_time_ms"]
    )


@app.get("/units/{unit}/newest", response_model=StudentsResponse)
def get_unit_newest_students(
    unit: str,
    limit: int = Query(10, description="Number of students to return", ge=1, le=100),
    student_list: StudentList = Depends(get_student_list),
    settings: ServiceSettings = Depends(get_settings)
):
    """The newest students who have taken `unit`, newest first"""
    def _newest():
        return list(islice(unit_newest_students(student_list, unit, settings.retries), limit))

    try:
        students, perf = measure_performance(f"unit_newest_students[{unit}]", _newest)
    except ApiUnreachableError as e:
        logger.error(f"Newest students for {unit} failed: {e}")
        return _error_response(503, str(e), "API_UNREACHABLE", {"retries": settings.retries})

    return StudentsResponse(
        students=_summaries(students, unit),
        count=len(students),
        unit=unit,
        reverse=True,
        processing_time_ms=perf["execution_time_ms"]
    )


@app.get("/students", response_model=StudentsResponse)
def list_students(
    reverse: bool = Query(False, description="Walk the list from the newest student"),
    unit: Optional[str] = Query(None, description="Only students who have taken this unit"),
    limit: int = Query(20, description="Number of students to return", ge=1, le=100),
    student_list: StudentList = Depends(get_student_list),
    settings: ServiceSettings = Depends(get_settings)
):
    """List students in list order (or reversed), optionally filtered by unit"""
    def _collect():
        collection = LazyCollection(StudentListIterator(student_list, settings.retries))
        if reverse:
            collection = collection.reversed()
        if unit:
            collection = collection.filter(lambda student: student.has_taken(unit))
        return collection.take(limit).to_list()

    try:
        students, perf = measure_performance("list_students", _collect)
    except ApiUnreachableError as e:
        logger.error(f"Listing students failed: {e}")
        return _error_response(503, str(e), "API_UNREACHABLE", {"retries": settings.retries})

    return StudentsResponse(
        students=_summaries(students, unit),
        count=len(students),
        unit=unit,
        reverse=reverse,
        processing_time_ms=perf["execution_time_ms"]
    )
