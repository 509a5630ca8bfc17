"""
Pydantic models for the student statistics service.

Student records, service configuration and the HTTP response envelopes.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, FilePath, field_validator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DATA_PATH = Path(__file__).parent / "data" / "students.json"


class Student(BaseModel):
    """A single student record as served by the student API."""
    id: str = Field(..., description="Student identifier (numeric string)")
    marks: Dict[str, int] = Field(
        default_factory=dict,
        description="Mark per unit code, only for units the student has taken"
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {"id": "1001", "marks": {"FIT1045": 80, "FIT2099": 72}}
        }
    )

    @field_validator('id', mode='before')
    @classmethod
    def validate_id(cls, v):
        """Accept integers and require the identifier to parse as one."""
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str):
            raise ValueError("Student id must be a string")
        try:
            int(v)
        except ValueError:
            raise ValueError(f"Student id must be numeric: {v!r}")
        return v

    def get_id(self) -> str:
        return self.id

    def get_mark(self, unit: str) -> Optional[int]:
        """Return the mark for `unit`, or None if the student hasn't taken it."""
        return self.marks.get(unit)

    def has_taken(self, unit: str) -> bool:
        return unit in self.marks


class ServiceSettings(BaseSettings):
    """Runtime configuration, read from STUDENTSTATS_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="STUDENTSTATS_", extra="ignore")

    data_path: Optional[FilePath] = Field(
        None,
        description="JSON file holding the student list; the bundled sample when unset"
    )
    page_size: int = Field(
        10,
        description="Number of students per API page",
        ge=1,
        le=1000
    )
    retries: int = Field(
        3,
        description="Retries allowed after a timed out page query",
        ge=0,
        le=10
    )
    timeout_rate: float = Field(
        0.0,
        description="Probability of a simulated timeout per page query",
        ge=0.0,
        lt=1.0
    )
    log_level: str = Field("INFO", description="Logging level name")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Normalise and check the logging level name."""
        level = v.strip().upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return level

    def resolve_data_path(self) -> Path:
        """The configured student file, or the sample shipped with a source checkout."""
        if self.data_path is not None:
            return self.data_path
        if not DEFAULT_DATA_PATH.is_file():
            raise FileNotFoundError(
                f"No bundled student data at {DEFAULT_DATA_PATH}; set STUDENTSTATS_DATA_PATH"
            )
        return DEFAULT_DATA_PATH


class StudentSummary(BaseModel):
    """Student as returned by the listing endpoints."""
    id: str = Field(..., description="Student identifier")
    marks: Dict[str, int] = Field(default_factory=dict, description="Marks per unit")
    mark: Optional[int] = Field(None, description="Mark for the requested unit, if any")


class UnitAverageResponse(BaseModel):
    """Average mark for one unit."""
    ok: bool = Field(True, description="Request success status")
    unit: str = Field(..., description="Unit code")
    average: int = Field(..., description="Integer (truncated) average mark")
    processing_time_ms: Optional[float] = Field(
        None,
        description="Processing time in milliseconds",
        ge=0
    )


class StudentsResponse(BaseModel):
    """A (possibly truncated) list of students."""
    ok: bool = Field(True, description="Request success status")
    students: List[StudentSummary] = Field(default_factory=list, description="Students in iteration order")
    count: int = Field(..., description="Number of students returned", ge=0)
    unit: Optional[str] = Field(None, description="Unit filter applied, if any")
    reverse: bool = Field(False, description="Whether the list was walked newest first")
    processing_time_ms: Optional[float] = Field(
        None,
        description="Processing time in milliseconds",
        ge=0
    )


class HealthCheckResponse(BaseModel):
    """Service and student API status."""
    status: str = Field(..., description="Overall status")
    total_students: int = Field(..., description="Students reported by the API", ge=0)
    total_pages: int = Field(..., description="Pages reported by the API", ge=0)
    page_size: Optional[int] = Field(None, description="Configured page size")
    retries: int = Field(..., description="Configured retry budget", ge=0)
    timestamp: str = Field(..., description="Check timestamp in ISO format")


class ErrorResponse(BaseModel):
    """Standard error envelope."""
    ok: bool = Field(False, description="Request success status")
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")
    timestamp: str = Field(
        ...,
        description="Error timestamp in ISO format"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": False,
                "error": "No student has taken unit FIT9999",
                "error_code": "NO_STUDENTS_FOR_UNIT",
                "details": {"unit": "FIT9999"},
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
    )
