import json

from allocator import allocation_summary, high_priority_courses

SYSTEM_PROMPT = (
    "You are a Multi-Course Study Planner Assistant. You MUST return ONLY valid JSON. "
    "Create balanced schedules that include multiple courses each day with extra revision "
    "time for high priority courses. Account for overall intensity level."
)

TEST_PROMPT = 'Return {"status": "OK", "message": "API is working"}'

_INTENSITY_GUIDE = """    - If intensity is "easy": More breaks, lighter sessions
    - If intensity is "medium": Balanced approach
    - If intensity is "hard": Dense sessions, fewer breaks, more focus"""


def _course_lines(allocated) -> str:
    lines = []
    for a in allocated:
        extra = f" [+{a.extra_revision_hours:.1f}h for revision]" if a.is_high_priority else ""
        topics = ", ".join(a.course.topics) or "General review"
        lines.append(
            f"- {a.name} ({a.percentage}% of daily time = ~{a.daily_hours:.1f} hours/day{extra})\n"
            f"  Topics: {topics}\n"
            f"  Difficulty: {a.course.difficulty}\n"
            f"  Priority: {a.course.weight}/100 ({a.priority_level})"
        )
    return "\n".join(lines)


def _high_priority_lines(allocated) -> str:
    high = high_priority_courses(allocated)
    if not high:
        return "None"
    return "\n".join(
        f"- {a.name}: {a.daily_hours:.1f}h base + {a.extra_revision_hours:.1f}h revision "
        f"= {a.total_daily_hours:.1f}h total"
        for a in high
    )


def _response_template(plan_request, allocated, study_dates, today: str) -> dict:
    """The exact JSON shape the model is asked to fill in."""
    high = high_priority_courses(allocated)
    first_day = study_dates[0] if study_dates else None
    return {
        "goal": plan_request.goal,
        "totalDays": plan_request.total_days,
        "dailyHours": plan_request.daily_hours,
        "overallIntensity": plan_request.intensity,
        "courses": [a.to_dict() for a in allocated],
        "timeAllocation": allocation_summary(allocated, plan_request.total_days),
        "description": "Brief overview explaining how courses are balanced with priority-based extra revision time",
        "dailySchedule": [
            {
                "day": 1,
                "dayOfWeek": first_day.weekday_name if first_day else "Monday",
                "date": first_day.iso_date if first_day else today,
                "totalHours": plan_request.daily_hours,
                "focus": "Primary focus for today - mention which courses",
                "coursesCovered": ["Course1", "Course2"],
                "highPrioritySessions": ["Course with high priority gets extra revision"],
                "sessions": [
                    {
                        "time": "09:00 - 10:30",
                        "course": "Course Name",
                        "topic": "Specific Topic",
                        "activity": "Study activity description",
                        "duration": 1.5,
                        "type": "study",
                        "priority": "normal",
                    }
                ],
                "breaks": [
                    {"time": "10:30 - 11:00", "duration": 0.5, "activity": "Break / Refresh"}
                ],
                "milestone": "Today's learning objectives across courses",
            }
        ],
        "courseBalance": {
            "strategy": "Explain how courses are balanced with priority-based extra time",
            "highPriorityExtraTime": [
                {
                    "course": a.name,
                    "extraTimeHours": round(a.extra_revision_hours, 2),
                    "extraTimePercentage": "15%",
                    "reason": "High priority course gets extra revision time",
                }
                for a in high
            ],
            "recommendations": ["Recommendation 1", "Recommendation 2"],
        },
        "recommendations": ["Study tip 1", "Study tip 2"],
        "studyTips": ["Multi-course study tip 1", "Multi-course study tip 2"],
        "priorityBasedFeatures": {
            "highPriorityExtraRevision": True,
            "extraTimePercentage": "15%",
            "appliedToCourses": [a.name for a in high],
        },
    }


def build_plan_prompt(plan_request, allocated, study_dates, today: str) -> str:
    """
    Builds the user message sent to the LLM.
    Allocation and calendar dates are computed locally; the model only lays
    out sessions within them.
    """
    days_text = ", ".join(plan_request.preferred_days)
    intensity = plan_request.intensity
    schedule_lines = "\n".join(
        f"Day {d.ordinal}: {d.weekday_name} ({d.iso_date})" for d in study_dates
    )
    template = json.dumps(
        _response_template(plan_request, allocated, study_dates, today), indent=2
    )

    return f"""You are an Expert Multi-Course Study Planner. Create a detailed {plan_request.total_days}-day study plan for MULTIPLE courses.

CRITICAL REQUIREMENTS:
1. The student is studying {len(allocated)} different courses/subjects
2. Allocate study time proportionally based on course priority/weights
3. For courses with HIGH priority (weight > 70), allocate EXTRA REVISION TIME (15-20% extra time)
4. Balance courses across the week - don't focus on one course only
5. Include mixed sessions where appropriate (review of multiple courses)
6. Schedule ONLY on these specific days: {days_text}
7. Account for OVERALL PLAN INTENSITY: {intensity}

OVERVIEW:
ACADEMIC GOAL: {plan_request.goal}
STUDY DURATION: {plan_request.total_days} days
DAILY STUDY TIME: {plan_request.daily_hours} hours per day
OVERALL PLAN INTENSITY: {intensity}
AVAILABLE DAYS: {days_text}
PREFERRED TIME SLOTS: {plan_request.preferred_times}

COURSES WITH TIME ALLOCATION:
{_course_lines(allocated)}

STUDY DAY SCHEDULE:
{schedule_lines}

INSTRUCTIONS:
1. Create a BALANCED schedule that includes ALL courses
2. Each day should include sessions from MULTIPLE courses
3. Distribute difficult topics across different days
4. For HIGH PRIORITY courses (weight > 70), include extra revision sessions (15-20% more time)
5. Include review sessions that combine related topics from different courses
6. Consider course difficulty when allocating time (harder courses get more time)
7. Include short breaks between sessions
8. Schedule based on preferred time slots: {plan_request.preferred_times}
9. Ensure total daily study time is approximately {plan_request.daily_hours} hours
10. Account for OVERALL PLAN INTENSITY: {intensity}:
{_INTENSITY_GUIDE}

HIGH PRIORITY COURSES EXTRA TIME ALLOCATION:
{_high_priority_lines(allocated)}

Return ONLY valid JSON in this format. Session "type" is one of "study", "review", "practice", "break", "high-priority-review"; session "priority" is "normal" or "high" (high for high priority course sessions). Produce one dailySchedule entry per study day listed above:
{template}

IMPORTANT:
1. Each day MUST include sessions from AT LEAST 2 different courses.
2. HIGH PRIORITY courses (weight > 70) get 15-20% extra time for revision.
3. Account for OVERALL PLAN INTENSITY in session density and breaks.
4. Balance is key!
5. Today's date is {today}."""
