"""
Tests for /generate-plan body validation and PlanRequest construction.

Covers validate_plan_body() and build_plan_request() with plain dict bodies;
no Flask app or LLM needed.
"""

import pytest

from plan_models import DEFAULT_PREFERRED_DAYS
from validators import (
    INVALID_COURSE,
    INVALID_DAILY_HOURS,
    INVALID_DAYS,
    INVALID_DURATION,
    INVALID_INPUT,
    INVALID_INTENSITY,
    MISSING_FIELDS,
    NO_COURSES,
    build_plan_request,
    validate_plan_body,
)


def _body(**overrides):
    body = {
        "goal": "Prepare for Final Exams",
        "courses": [
            {"name": "Operating Systems", "topics": "Paging, Scheduling", "weight": 80, "difficulty": "hard"},
            {"name": "Databases", "topics": ["SQL", "Indexing"], "weight": 60},
        ],
        "days": 7,
        "dailyHours": 3,
    }
    body.update(overrides)
    return body


def _without(key):
    body = _body()
    del body[key]
    return body


class TestRequiredFields:
    def test_valid_body(self):
        assert validate_plan_body(_body()) == (None, None)

    @pytest.mark.parametrize("key", ["goal", "courses", "days", "dailyHours"])
    def test_missing_field(self, key):
        code, msg = validate_plan_body(_without(key))
        assert code == MISSING_FIELDS
        assert msg == "Missing required fields"

    def test_blank_goal_is_missing(self):
        code, _ = validate_plan_body(_body(goal="   "))
        assert code == MISSING_FIELDS

    @pytest.mark.parametrize("body", [None, [], "text", 42])
    def test_non_object_body(self, body):
        code, _ = validate_plan_body(body)
        assert code == INVALID_INPUT


class TestDuration:
    @pytest.mark.parametrize("days", [0, 15, -1, 7.5, "seven", True])
    def test_out_of_range(self, days):
        code, msg = validate_plan_body(_body(days=days))
        assert code == INVALID_DURATION
        assert msg == "Duration must be between 1-14 days"

    @pytest.mark.parametrize("days", [1, 14, "10", 7.0])
    def test_in_range(self, days):
        assert validate_plan_body(_body(days=days)) == (None, None)


    def test_huge_integer_is_out_of_range(self):
        code, msg = validate_plan_body(_body(days=10 ** 400))
        assert code == INVALID_DURATION
        assert msg == "Duration must be between 1-14 days"


class TestDailyHours:
    @pytest.mark.parametrize("hours", [9, 0.4, 0, -2, "lots", False])
    def test_out_of_range(self, hours):
        code, msg = validate_plan_body(_body(dailyHours=hours))
        assert code == INVALID_DAILY_HOURS
        assert msg == "Daily hours must be between 0.5-8 hours"

    @pytest.mark.parametrize("hours", [0.5, 8, "2.5", 4])
    def test_in_range(self, hours):
        assert validate_plan_body(_body(dailyHours=hours)) == (None, None)


    def test_huge_integer_is_out_of_range(self):
        code, _ = validate_plan_body(_body(dailyHours=10 ** 400))
        assert code == INVALID_DAILY_HOURS


class TestCourses:
    def test_empty_list(self):
        code, msg = validate_plan_body(_body(courses=[]))
        assert code == NO_COURSES
        assert msg == "Please provide at least one course"

    def test_not_a_list(self):
        code, _ = validate_plan_body(_body(courses={"name": "OS"}))
        assert code == NO_COURSES

    def test_course_without_name(self):
        code, msg = validate_plan_body(_body(courses=[{"name": "OS"}, {"topics": "SQL"}]))
        assert code == INVALID_COURSE
        assert "#2" in msg

    def test_course_not_an_object(self):
        code, _ = validate_plan_body(_body(courses=["OS"]))
        assert code == INVALID_COURSE

    def test_course_unknown_difficulty(self):
        code, msg = validate_plan_body(_body(courses=[{"name": "OS", "difficulty": "brutal"}]))
        assert code == INVALID_COURSE
        assert "brutal" in msg

    def test_invalid_weight_is_not_an_error(self):
        assert validate_plan_body(_body(courses=[{"name": "OS", "weight": 500}])) == (None, None)

    def test_huge_weight_is_not_an_error(self):
        assert validate_plan_body(_body(courses=[{"name": "OS", "weight": 10 ** 400}])) == (None, None)

    @pytest.mark.parametrize("name", [["OS", "DB"], {"title": "OS"}, 42])
    def test_non_text_name(self, name):
        code, msg = validate_plan_body(_body(courses=[{"name": name}]))
        assert code == INVALID_COURSE
        assert "#1" in msg

    @pytest.mark.parametrize("topics", [{"a": 1}, ["SQL", 2], 7])
    def test_non_text_topics(self, topics):
        code, msg = validate_plan_body(_body(courses=[{"name": "DB", "topics": topics}]))
        assert code == INVALID_COURSE
        assert "topics" in msg


class TestTextFields:
    @pytest.mark.parametrize("goal", [{"nested": 1}, ["Exams"], 3])
    def test_non_text_goal(self, goal):
        code, _ = validate_plan_body(_body(goal=goal))
        assert code == INVALID_INPUT

    @pytest.mark.parametrize("times", [[1, 2], {"from": 9}, 9])
    def test_non_text_preferred_times(self, times):
        code, _ = validate_plan_body(_body(preferredTimes=times))
        assert code == INVALID_INPUT

    def test_null_preferred_times_uses_default(self):
        assert validate_plan_body(_body(preferredTimes=None)) == (None, None)
        assert build_plan_request(_body(preferredTimes=None)).preferred_times == "Flexible"


class TestIntensityAndDays:
    def test_unknown_intensity(self):
        code, _ = validate_plan_body(_body(difficulty="insane"))
        assert code == INVALID_INTENSITY

    def test_unknown_day(self):
        code, msg = validate_plan_body(_body(preferredDays=["Monday", "Caturday"]))
        assert code == INVALID_DAYS
        assert "Caturday" in msg

    def test_empty_days(self):
        code, _ = validate_plan_body(_body(preferredDays=[]))
        assert code == INVALID_DAYS


class TestCheckOrder:
    def test_duration_reported_before_courses(self):
        code, _ = validate_plan_body(_body(days=0, courses=[]))
        assert code == INVALID_DURATION

    def test_hours_reported_before_courses(self):
        code, _ = validate_plan_body(_body(dailyHours=9, courses=[]))
        assert code == INVALID_DAILY_HOURS


class TestBuildPlanRequest:
    def test_defaults(self):
        req = build_plan_request(_body())
        assert req.goal == "Prepare for Final Exams"
        assert req.total_days == 7
        assert req.daily_hours == 3.0
        assert req.intensity == "medium"
        assert req.preferred_times == "Flexible"
        assert req.preferred_days == DEFAULT_PREFERRED_DAYS

    def test_courses_normalized(self):
        req = build_plan_request(_body(courses=[
            {"id": 7, "name": " OS ", "topics": "Paging, Scheduling", "weight": "90", "difficulty": "HARD"},
            {"name": "DB", "topics": ["SQL"], "weight": None},
        ]))
        os_course, db_course = req.courses
        assert os_course.name == "OS"
        assert os_course.topics == ("Paging", "Scheduling")
        assert os_course.weight == 90
        assert os_course.difficulty == "hard"
        assert os_course.course_id == 7
        assert db_course.weight == 50
        assert db_course.difficulty == "medium"
        assert db_course.course_id is None

    def test_huge_weight_falls_back_to_default(self):
        req = build_plan_request(_body(courses=[{"name": "OS", "weight": 10 ** 400}]))
        assert req.courses[0].weight == 50

    def test_optional_fields(self):
        req = build_plan_request(_body(
            days="10",
            dailyHours="2.5",
            difficulty="Hard",
            preferredTimes="Evenings",
            preferredDays=["sat", "Sunday"],
        ))
        assert req.total_days == 10
        assert req.daily_hours == 2.5
        assert req.intensity == "hard"
        assert req.preferred_times == "Evenings"
        assert req.preferred_days == ("Saturday", "Sunday")
