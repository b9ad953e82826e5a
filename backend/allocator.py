import math

from plan_models import (
    DEFAULT_WEIGHT,
    MAX_WEIGHT,
    MIN_WEIGHT,
    AllocatedCourse,
    Course,
    priority_level,
)


def _effective_weight(course: Course) -> int:
    weight = course.weight
    if isinstance(weight, bool) or not isinstance(weight, int):
        return DEFAULT_WEIGHT
    if not (MIN_WEIGHT <= weight <= MAX_WEIGHT):
        return DEFAULT_WEIGHT
    return weight


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def allocate_time(courses, daily_hours: float) -> list[AllocatedCourse]:
    """
    Split the daily study budget across courses in proportion to their weights.

    daily_hours per course = budget * weight / sum(weights); percentages are
    rounded half-up, so they sum to 100 only up to rounding. Priority tiers
    come from the raw weight (HIGH > 70, MEDIUM > 40, else LOW).

    Raises ValueError on an empty course list; callers reject that upstream.
    """
    courses = list(courses)
    if not courses:
        raise ValueError("allocate_time requires at least one course")

    weights = [_effective_weight(c) for c in courses]
    total_weight = sum(weights)

    allocated = []
    for course, weight in zip(courses, weights):
        share = weight / total_weight
        allocated.append(AllocatedCourse(
            course=course,
            daily_hours=daily_hours * share,
            percentage=_round_half_up(share * 100),
            priority_level=priority_level(weight),
        ))
    return allocated


def high_priority_courses(allocated: list[AllocatedCourse]) -> list[AllocatedCourse]:
    return [a for a in allocated if a.is_high_priority]


def allocation_summary(allocated: list[AllocatedCourse], total_days: int) -> list[dict]:
    """Per-course time allocation rows, including the HIGH-tier revision bonus."""
    rows = []
    for a in allocated:
        rows.append({
            "course": a.name,
            "percentage": a.percentage,
            "priorityLevel": a.priority_level,
            "dailyBaseHours": round(a.daily_hours, 2),
            "extraRevisionHours": round(a.extra_revision_hours, 2),
            "totalDailyTime": round(a.total_daily_hours, 2),
            "weeklyHours": round(a.total_daily_hours * total_days, 2),
        })
    return rows
