import datetime as dt
import sys
import time

from allocator import allocate_time, high_priority_courses
from llm_planner import PROVIDER, complete_with_fallback
from prompt_builder import build_plan_prompt
from study_dates import calculate_study_dates

# Fixed request used by GET /test-plan and scripts/generate_plan.py --sample.
SAMPLE_PLAN_REQUEST = {
    "goal": "Prepare for Final Exams",
    "courses": [
        {
            "id": 1,
            "name": "Operating Systems",
            "topics": "Process Management, Memory Management, File Systems, Virtual Memory",
            "weight": 80,
            "difficulty": "hard",
        },
        {
            "id": 2,
            "name": "Database Systems",
            "topics": "SQL Queries, Normalization, Transactions, Indexing",
            "weight": 60,
            "difficulty": "medium",
        },
        {
            "id": 3,
            "name": "Data Structures",
            "topics": "Trees, Graphs, Sorting Algorithms, Hash Tables",
            "weight": 40,
            "difficulty": "easy",
        },
    ],
    "days": 7,
    "dailyHours": 3,
    "difficulty": "medium",
    "preferredTimes": "Morning 9-12, Evening 7-10",
    "preferredDays": ["Monday", "Tuesday", "Wednesday", "Thursday"],
}


def prepare_plan_inputs(plan_request, today: dt.date | None = None) -> dict:
    """
    Deterministic half of plan generation: allocation, dates and prompt.
    No network calls; used directly by dry runs.
    """
    today = today or dt.date.today()
    allocated = allocate_time(plan_request.courses, plan_request.daily_hours)
    study_dates = calculate_study_dates(
        plan_request.total_days,
        plan_request.preferred_days,
        start_date=today,
    )
    if len(study_dates) != plan_request.total_days:
        print(
            f"[WARN] Could only find {len(study_dates)} days out of "
            f"{plan_request.total_days} requested",
            file=sys.stderr,
        )

    prompt = build_plan_prompt(plan_request, allocated, study_dates, today.isoformat())
    return {
        "allocated": allocated,
        "study_dates": study_dates,
        "prompt": prompt,
    }


def build_plan_metadata(plan_request, allocated, study_dates, model: str, generated_at: dt.datetime) -> dict:
    return {
        "generatedAt": generated_at.isoformat(),
        "generatedBy": f"{PROVIDER} AI",
        "model": model,
        "provider": PROVIDER,
        "note": "Multi-course study plan with priority-based extra revision",
        "totalCourses": len(plan_request.courses),
        "highPriorityCourses": len(high_priority_courses(allocated)),
        "input": {
            "goal": plan_request.goal,
            "preferredDays": list(plan_request.preferred_days),
            "preferredTimes": plan_request.preferred_times,
            "totalDays": len(study_dates),
            "requestedDays": plan_request.total_days,
            "dailyHours": plan_request.daily_hours,
            "courseCount": len(plan_request.courses),
            "overallIntensity": plan_request.intensity,
            "studyDates": [d.to_dict() for d in study_dates],
        },
    }


def run_study_plan(
    plan_request,
    client,
    models,
    today: dt.date | None = None,
    max_tokens: int = 6000,
) -> dict:
    """
    Full request path: allocate → map dates → prompt → model fallback → metadata.

    Raises llm_planner.PlanGenerationError when every candidate model fails.
    """
    print(f"[INFO] Generating multi-course study plan for: {plan_request.goal}")
    inputs = prepare_plan_inputs(plan_request, today)
    allocated = inputs["allocated"]
    study_dates = inputs["study_dates"]
    for a in allocated:
        extra = "15% extra" if a.is_high_priority else "none"
        print(
            f"[INFO]   {a.name}: {a.priority_level} {a.percentage}% "
            f"{a.daily_hours:.2f}h/day (extra revision: {extra})"
        )

    plan, model = complete_with_fallback(client, models, inputs["prompt"], max_tokens=max_tokens)

    generated_at = dt.datetime.now(dt.timezone.utc)
    plan["metadata"] = build_plan_metadata(plan_request, allocated, study_dates, model, generated_at)
    plan["success"] = True
    plan["id"] = f"plan_{int(time.time() * 1000)}"

    schedule = plan.get("dailySchedule")
    scheduled_days = len(schedule) if isinstance(schedule, list) else 0
    print(
        f"[OK] Plan ready: {len(allocated)} course(s), "
        f"{len(high_priority_courses(allocated))} high priority, "
        f"{scheduled_days} day(s) scheduled, intensity={plan_request.intensity}"
    )
    return plan
