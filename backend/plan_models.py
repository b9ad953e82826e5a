"""
Request/response types for the study planner.

Plain frozen dataclasses: built once from validated input, never mutated.
No Flask or LLM imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
DEFAULT_PREFERRED_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

DIFFICULTY_LEVELS = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "medium"
DEFAULT_WEIGHT = 50
DEFAULT_PREFERRED_TIMES = "Flexible"

MIN_DAYS, MAX_DAYS = 1, 14
MIN_DAILY_HOURS, MAX_DAILY_HOURS = 0.5, 8.0
MIN_WEIGHT, MAX_WEIGHT = 1, 100

PRIORITY_HIGH = "HIGH"
PRIORITY_MEDIUM = "MEDIUM"
PRIORITY_LOW = "LOW"

HIGH_PRIORITY_THRESHOLD = 70
MEDIUM_PRIORITY_THRESHOLD = 40
EXTRA_REVISION_RATE = 0.15


def priority_level(weight: int) -> str:
    if weight > HIGH_PRIORITY_THRESHOLD:
        return PRIORITY_HIGH
    if weight > MEDIUM_PRIORITY_THRESHOLD:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


@dataclass(frozen=True)
class Course:
    name: str
    topics: tuple[str, ...] = ()
    weight: int = DEFAULT_WEIGHT
    difficulty: str = DEFAULT_DIFFICULTY
    course_id: object = None

    def to_dict(self) -> dict:
        out = {
            "name": self.name,
            "topics": list(self.topics),
            "weight": self.weight,
            "difficulty": self.difficulty,
        }
        if self.course_id is not None:
            out["id"] = self.course_id
        return out


@dataclass(frozen=True)
class AllocatedCourse:
    """A course plus its share of the daily budget."""

    course: Course
    daily_hours: float
    percentage: int
    priority_level: str

    @property
    def name(self) -> str:
        return self.course.name

    @property
    def is_high_priority(self) -> bool:
        return self.priority_level == PRIORITY_HIGH

    @property
    def extra_revision_hours(self) -> float:
        # Bonus on top of the base allocation; other courses are not reduced.
        if not self.is_high_priority:
            return 0.0
        return self.daily_hours * EXTRA_REVISION_RATE

    @property
    def total_daily_hours(self) -> float:
        return self.daily_hours + self.extra_revision_hours

    def to_dict(self) -> dict:
        return {
            **self.course.to_dict(),
            "priorityLevel": self.priority_level,
            "allocatedPercentage": self.percentage,
            "dailyHours": self.daily_hours,
            "extraRevisionTime": round(self.extra_revision_hours, 2),
            "totalDailyTime": round(self.total_daily_hours, 2),
        }


@dataclass(frozen=True)
class StudyDate:
    iso_date: str
    weekday_name: str
    ordinal: int

    def to_dict(self) -> dict:
        return {"date": self.iso_date, "day": self.weekday_name, "dayNumber": self.ordinal}


@dataclass(frozen=True)
class PlanRequest:
    goal: str
    courses: tuple[Course, ...]
    total_days: int
    daily_hours: float
    intensity: str = DEFAULT_DIFFICULTY
    preferred_times: str = DEFAULT_PREFERRED_TIMES
    preferred_days: tuple[str, ...] = field(default=DEFAULT_PREFERRED_DAYS)
