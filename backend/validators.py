"""
Pure input-validation helpers for the /generate-plan endpoint.
No Flask or LLM imports.
"""

from typing import Optional, Tuple

from normalizer import (
    normalize_days,
    normalize_difficulty,
    normalize_weight,
    split_list,
)
from plan_models import (
    DEFAULT_DIFFICULTY,
    DEFAULT_PREFERRED_DAYS,
    DEFAULT_PREFERRED_TIMES,
    MAX_DAILY_HOURS,
    MAX_DAYS,
    MIN_DAILY_HOURS,
    MIN_DAYS,
    Course,
    PlanRequest,
)

REQUIRED_FIELDS = ["goal", "courses", "days", "dailyHours"]

MISSING_FIELDS = "MISSING_FIELDS"
INVALID_INPUT = "INVALID_INPUT"
INVALID_DURATION = "INVALID_DURATION"
INVALID_DAILY_HOURS = "INVALID_DAILY_HOURS"
NO_COURSES = "NO_COURSES"
INVALID_COURSE = "INVALID_COURSE"
INVALID_INTENSITY = "INVALID_INTENSITY"
INVALID_DAYS = "INVALID_DAYS"


def _is_missing(value) -> bool:
    """Absent or blank. 0 and [] count as present so range checks can report them."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _parse_total_days(raw) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    if not value.is_integer():
        return None
    days = int(value)
    return days if MIN_DAYS <= days <= MAX_DAYS else None


def _parse_daily_hours(raw) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        hours = float(raw)
    except (TypeError, ValueError, OverflowError):
        return None
    return hours if MIN_DAILY_HOURS <= hours <= MAX_DAILY_HOURS else None


def _course_name(raw_course) -> str:
    name = raw_course.get("name")
    return name.strip() if isinstance(name, str) else ""


def _is_text_list(raw) -> bool:
    """None, a string, or a list whose items are all strings."""
    if raw is None or isinstance(raw, str):
        return True
    return isinstance(raw, list) and all(isinstance(item, str) for item in raw)


def validate_plan_body(body) -> Tuple[Optional[str], Optional[str]]:
    """
    Returns (error_code, message) on invalid input, (None, None) on success.

    Check order: required fields, goal type, duration, daily hours, course
    list, each course, intensity, preferred times, preferred days.
    """
    if not isinstance(body, dict):
        return INVALID_INPUT, "Request body must be a JSON object."

    if any(_is_missing(body.get(f)) for f in REQUIRED_FIELDS):
        return MISSING_FIELDS, "Missing required fields"

    if not isinstance(body["goal"], str):
        return INVALID_INPUT, "Goal must be a text value."

    if _parse_total_days(body.get("days")) is None:
        return INVALID_DURATION, f"Duration must be between {MIN_DAYS}-{MAX_DAYS} days"

    if _parse_daily_hours(body.get("dailyHours")) is None:
        return INVALID_DAILY_HOURS, "Daily hours must be between 0.5-8 hours"

    courses = body.get("courses")
    if not isinstance(courses, list) or len(courses) == 0:
        return NO_COURSES, "Please provide at least one course"

    for idx, raw_course in enumerate(courses, start=1):
        if not isinstance(raw_course, dict):
            return INVALID_COURSE, f"Course #{idx} must be an object with a name."
        name = raw_course.get("name")
        if name is not None and not isinstance(name, str):
            return INVALID_COURSE, f"Course #{idx} name must be a text value."
        if not _course_name(raw_course):
            return INVALID_COURSE, f"Course #{idx} is missing a name."
        if not _is_text_list(raw_course.get("topics")):
            return INVALID_COURSE, (
                f"Course '{_course_name(raw_course)}' topics must be text or a list of text."
            )
        if normalize_difficulty(raw_course.get("difficulty"), DEFAULT_DIFFICULTY) is None:
            return INVALID_COURSE, (
                f"Course '{_course_name(raw_course)}' has an unknown difficulty "
                f"'{raw_course.get('difficulty')}' (use easy, medium or hard)."
            )

    if normalize_difficulty(body.get("difficulty"), DEFAULT_DIFFICULTY) is None:
        return INVALID_INTENSITY, (
            f"Unknown plan intensity '{body.get('difficulty')}' (use easy, medium or hard)."
        )

    preferred_times = body.get("preferredTimes")
    if preferred_times is not None and not isinstance(preferred_times, str):
        return INVALID_INPUT, "Preferred times must be a text value."

    raw_days = body.get("preferredDays")
    if raw_days is not None:
        days = normalize_days(raw_days)
        if days["invalid"]:
            return INVALID_DAYS, f"Unrecognized preferred day(s): {', '.join(days['invalid'])}"
        if not days["valid"]:
            return INVALID_DAYS, "Select at least one preferred study day."

    return None, None


def build_course(raw_course: dict) -> Course:
    return Course(
        name=_course_name(raw_course),
        topics=tuple(split_list(raw_course.get("topics"))),
        weight=normalize_weight(raw_course.get("weight")),
        difficulty=normalize_difficulty(raw_course.get("difficulty"), DEFAULT_DIFFICULTY),
        course_id=raw_course.get("id"),
    )


def build_plan_request(body: dict) -> PlanRequest:
    """Build a PlanRequest from a body that already passed validate_plan_body()."""
    raw_days = body.get("preferredDays")
    preferred_days = (
        tuple(normalize_days(raw_days)["valid"]) if raw_days is not None else DEFAULT_PREFERRED_DAYS
    )
    preferred_times = (body.get("preferredTimes") or "").strip() or DEFAULT_PREFERRED_TIMES

    return PlanRequest(
        goal=body["goal"].strip(),
        courses=tuple(build_course(c) for c in body["courses"]),
        total_days=_parse_total_days(body["days"]),
        daily_hours=_parse_daily_hours(body["dailyHours"]),
        intensity=normalize_difficulty(body.get("difficulty"), DEFAULT_DIFFICULTY),
        preferred_times=preferred_times,
        preferred_days=preferred_days,
    )
