"""
Generate a study plan from the command line.

Uses the same validation, allocation, date mapping and model fallback as
POST /generate-plan, without starting the web server.

Examples:
    python scripts/generate_plan.py --sample --dry-run
    python scripts/generate_plan.py --input request.json --output plan.json
"""

import argparse
import datetime as dt
import json
import os
import sys

# Add backend/ to path so sibling imports work
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "backend"))

from dotenv import load_dotenv

from llm_planner import (
    MissingCredentialError,
    PlanGenerationError,
    classify_generation_error,
    get_groq_client,
    parse_model_list,
)
from study_planner import SAMPLE_PLAN_REQUEST, prepare_plan_inputs, run_study_plan
from validators import build_plan_request, validate_plan_body


def _load_body(opts) -> dict:
    if opts.sample:
        return dict(SAMPLE_PLAN_REQUEST)
    with open(opts.input, encoding="utf-8") as f:
        return json.load(f)


def _parse_start_date(raw: str | None) -> dt.date | None:
    if not raw:
        return None
    return dt.date.fromisoformat(raw)


def _write_output(payload, output_path: str | None) -> None:
    text = payload if isinstance(payload, str) else json.dumps(payload, indent=2)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        print(f"[OK] Wrote {output_path}", file=sys.stderr)
    else:
        print(text)


def main(args=None, client=None) -> int:
    parser = argparse.ArgumentParser(description="Generate a multi-course study plan.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=str, help="Path to a JSON request body (same shape as POST /generate-plan).")
    source.add_argument("--sample", action="store_true", help="Use the built-in sample request.")
    parser.add_argument("--start-date", type=str, help="First calendar day to consider (YYYY-MM-DD). Default: today.")
    parser.add_argument("--dry-run", action="store_true", help="Print the prompt instead of calling the model.")
    parser.add_argument("--output", type=str, help="Write the result to this file instead of stdout.")
    parser.add_argument("--models", type=str, help="Comma-separated candidate models (overrides GROQ_MODELS).")
    opts = parser.parse_args(args)

    load_dotenv()

    try:
        start_date = _parse_start_date(opts.start_date)
    except ValueError:
        parser.error(f"--start-date must be YYYY-MM-DD, got '{opts.start_date}'.")

    body = _load_body(opts)
    err_code, err_msg = validate_plan_body(body)
    if err_code:
        print(f"[ERROR] {err_code}: {err_msg}", file=sys.stderr)
        return 2

    plan_request = build_plan_request(body)

    if opts.dry_run:
        inputs = prepare_plan_inputs(plan_request, today=start_date)
        _write_output(inputs["prompt"], opts.output)
        return 0

    models = parse_model_list(opts.models or os.environ.get("GROQ_MODELS"))
    try:
        plan = run_study_plan(
            plan_request,
            client or get_groq_client(),
            models,
            today=start_date,
        )
    except (PlanGenerationError, MissingCredentialError) as exc:
        info = classify_generation_error(exc)
        print(f"[ERROR] {info['error']}: {info['message']}", file=sys.stderr)
        return 1

    _write_output(plan, opts.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
