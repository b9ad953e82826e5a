"""
Tests for the command-line plan generator (scripts/generate_plan.py).
"""

import json

import pytest

from generate_plan import main
from fake_llm import FakeGroqClient, auth_error, plan_reply


def test_dry_run_prints_prompt(capsys):
    status = main(["--sample", "--dry-run", "--start-date", "2024-01-01"])
    assert status == 0
    out = capsys.readouterr().out
    assert "ACADEMIC GOAL: Prepare for Final Exams" in out
    assert "Day 1: Monday (2024-01-01)" in out
    assert "Today's date is 2024-01-01." in out


def test_generates_plan_to_file(tmp_path):
    output = tmp_path / "plan.json"
    client = FakeGroqClient({"model-x": plan_reply()})
    status = main(
        ["--sample", "--models", "model-x", "--start-date", "2024-01-01", "--output", str(output)],
        client=client,
    )
    assert status == 0
    plan = json.loads(output.read_text(encoding="utf-8"))
    assert plan["success"] is True
    assert plan["metadata"]["model"] == "model-x"


def test_reads_request_file(tmp_path, capsys):
    request_path = tmp_path / "request.json"
    request_path.write_text(json.dumps({
        "goal": "Midterms",
        "courses": [{"name": "Calculus", "topics": "Limits", "weight": 90}],
        "days": 2,
        "dailyHours": 1,
        "preferredDays": ["sat", "sun"],
    }), encoding="utf-8")
    status = main(["--input", str(request_path), "--dry-run", "--start-date", "2024-01-01"])
    assert status == 0
    out = capsys.readouterr().out
    assert "Day 1: Saturday (2024-01-06)" in out
    assert "Day 2: Sunday (2024-01-07)" in out


def test_invalid_request_exit_code(tmp_path, capsys):
    request_path = tmp_path / "request.json"
    request_path.write_text(json.dumps({"goal": "x", "courses": [], "days": 3, "dailyHours": 2}), encoding="utf-8")
    assert main(["--input", str(request_path)]) == 2
    assert "NO_COURSES" in capsys.readouterr().err


def test_generation_failure_exit_code(capsys):
    client = FakeGroqClient(default=auth_error())
    assert main(["--sample", "--models", "a,b"], client=client) == 1
    assert "Invalid GROQ API key" in capsys.readouterr().err
    assert client.models_called == ["a", "b"]


def test_bad_start_date():
    with pytest.raises(SystemExit):
        main(["--sample", "--dry-run", "--start-date", "01/02/2024"])
