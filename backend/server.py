import datetime as dt
import os
import sys
import threading
import time
from collections import defaultdict

# Sibling modules (allocator, llm_planner, ...) import by bare name.
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from data_loader import load_form_options
from llm_planner import (
    PROVIDER,
    MissingCredentialError,
    PlanGenerationError,
    classify_generation_error,
    complete_with_fallback,
    get_groq_client,
    parse_model_list,
)
from prompt_builder import TEST_PROMPT
from study_planner import SAMPLE_PLAN_REQUEST, run_study_plan
from validators import MISSING_FIELDS, REQUIRED_FIELDS, build_plan_request, validate_plan_body

load_dotenv()

app = Flask(__name__)

VERSION = "1.0.0"
SERVICE_NAME = "Multi-Course Study Planner API"

# ── Form-option data directory ────────────────────────────────────────────────
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _resolve_data_path(raw: str | None) -> str:
    """DATA_PATH env value, relative to the project root unless absolute."""
    if not raw:
        return os.path.join(PROJECT_ROOT, "data")
    return raw if os.path.isabs(raw) else os.path.join(PROJECT_ROOT, raw)


DATA_PATH = _resolve_data_path(os.environ.get("DATA_PATH"))


def _env_number(name: str, default, minimum, cast=float):
    """Numeric env setting clamped to minimum; unset or unparsable gives default."""
    try:
        return max(minimum, cast(os.environ[name]))
    except (KeyError, TypeError, ValueError):
        return default


def _env_flag(name: str, environ=None) -> bool:
    environ = os.environ if environ is None else environ
    return str(environ.get(name, "")).strip().lower() in {"1", "true", "yes", "y"}


APP_ENV = os.environ.get("APP_ENV", "development").strip().lower()
CANDIDATE_MODELS = parse_model_list(os.environ.get("GROQ_MODELS"))
_LLM_TIMEOUT_SECONDS = _env_number("LLM_TIMEOUT_SECONDS", 60.0, 1.0)
_LLM_MAX_TOKENS = _env_number("LLM_MAX_TOKENS", 6000, 256, cast=int)
_SLOW_REQUEST_LOG_MS = _env_number("SLOW_REQUEST_LOG_MS", 750.0, 0.0)

# -- Rate limiting (sliding window per IP on plan generation) ---------------
_RATE_LIMIT_MAX = _env_number("RATE_LIMIT_MAX", 10, 1, cast=int)
_RATE_LIMIT_WINDOW = 60  # seconds
_rate_limit_lock = threading.Lock()
_rate_limit_tracker: dict[str, list[float]] = defaultdict(list)

_cors_origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
CORS(app, resources={r"/*": {"origins": _cors_origins or "*"}})

FEATURES = [
    "Multi-course study planning",
    "Priority-based extra revision time (15% more for high priority courses)",
    "Overall intensity adjustment",
    "Date-based scheduling",
    f"AI-powered planning with {PROVIDER}",
]

ENDPOINTS = {
    "generatePlan": "POST /api/generate-plan",
    "health": "GET /api/health",
    "testAI": "POST /api/test-ai",
    "testPlan": "GET /api/test-plan",
    "models": "GET /api/models",
    "goals": "GET /api/goals",
    "backgrounds": "GET /api/backgrounds",
    "timeOptions": "GET /api/time-options",
    "difficulties": "GET /api/difficulties",
}


def _api_key_configured() -> bool:
    return bool(os.environ.get("GROQ_API_KEY"))


def check_api_key_at_startup(environ=None) -> bool:
    """
    Warn when GROQ_API_KEY is missing. Returns False only when the process
    must not start: production mode without ALLOW_MISSING_API_KEY.
    """
    environ = os.environ if environ is None else environ
    if environ.get("GROQ_API_KEY"):
        return True

    print("[WARN] GROQ_API_KEY is missing; plan generation will fail.", file=sys.stderr)
    print("[WARN] Create a .env file with:", file=sys.stderr)
    print("[WARN]   PORT=5000", file=sys.stderr)
    print("[WARN]   GROQ_API_KEY=your_groq_key_here", file=sys.stderr)
    print("[WARN] Get a free key: https://console.groq.com/keys", file=sys.stderr)

    app_env = str(environ.get("APP_ENV", "development")).strip().lower()
    if app_env == "production" and not _env_flag("ALLOW_MISSING_API_KEY", environ):
        print(
            "[FATAL] GROQ_API_KEY is required when APP_ENV=production "
            "(set ALLOW_MISSING_API_KEY=1 to override).",
            file=sys.stderr,
        )
        return False
    return True


# ── Startup checks ─────────────────────────────────────────────────────────────
if not check_api_key_at_startup():
    sys.exit(1)

try:
    _form_options = load_form_options(DATA_PATH)
    print(f"[OK] Loaded form options from {DATA_PATH}")
except Exception as exc:
    print(f"[FATAL] Failed to load form options: {exc}", file=sys.stderr)
    sys.exit(1)


def _today() -> dt.date:
    return dt.date.today()


def _timestamp() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _error_payload(error: str, message: str, **hints) -> dict:
    return {
        "success": False,
        "error": error,
        "message": message,
        "timestamp": _timestamp(),
        **hints,
    }


def _record_plan_request(ip: str) -> bool:
    """Counts a plan request for ip. False once the window already holds the max."""
    now = time.monotonic()
    with _rate_limit_lock:
        recent = [t for t in _rate_limit_tracker[ip] if now - t < _RATE_LIMIT_WINDOW]
        allowed = len(recent) < _RATE_LIMIT_MAX
        if allowed:
            recent.append(now)
        _rate_limit_tracker[ip] = recent
        return allowed


def _rate_limited_response():
    if app.config.get("TESTING", False):
        return None
    if _record_plan_request(request.remote_addr or "unknown"):
        return None
    return jsonify(_error_payload(
        "Too many requests",
        f"At most {_RATE_LIMIT_MAX} plan requests per minute are allowed. Please wait and try again.",
        retryAfterSeconds=_RATE_LIMIT_WINDOW,
    )), 429


def _llm_client():
    return get_groq_client(timeout=_LLM_TIMEOUT_SECONDS)


# ── Request hooks: timing and security headers ──────────────────────────────
@app.before_request
def _start_request_timer():
    g._request_start_time = time.perf_counter()


@app.after_request
def _add_security_headers(response):
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "same-origin"

    started = getattr(g, "_request_start_time", None)
    if started is not None:
        duration_ms = (time.perf_counter() - started) * 1000.0
        if duration_ms >= _SLOW_REQUEST_LOG_MS:
            endpoint = request.endpoint or "unknown"
            print(
                f"[SLOW] {request.method} {request.path} "
                f"endpoint={endpoint} status={response.status_code} duration_ms={duration_ms:.1f}"
            )
    return response


# ── Error handlers ─────────────────────────────────────────────────────────────
def _available_endpoints() -> dict:
    get_routes = ["/", "/health", "/goals", "/backgrounds", "/time-options", "/difficulties", "/models", "/test-plan"]
    post_routes = ["/generate-plan", "/test-ai"]
    return {
        "GET": get_routes + [f"/api{r}" for r in get_routes if r != "/"],
        "POST": post_routes + [f"/api{r}" for r in post_routes],
    }


@app.errorhandler(404)
def handle_not_found(e):
    return jsonify(_error_payload(
        "Endpoint not found",
        f"The requested endpoint {request.method} {request.path} does not exist",
        availableEndpoints=_available_endpoints(),
    )), 404


@app.errorhandler(405)
def handle_method_not_allowed(e):
    return jsonify(_error_payload(
        "Method not allowed",
        f"{request.method} is not supported for {request.path}",
        availableEndpoints=_available_endpoints(),
    )), 405


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return jsonify(_error_payload(e.name, e.description or e.name)), e.code
    print(f"[ERROR] Server error: {e!r}", file=sys.stderr)
    message = str(e) if APP_ENV == "development" else "Something went wrong"
    return jsonify(_error_payload("Internal server error", message)), 500


# ── Plan generation ────────────────────────────────────────────────────────────
def _generate_plan_response(body):
    err_code, err_msg = validate_plan_body(body)
    if err_code:
        hints = {"errorCode": err_code}
        if err_code == MISSING_FIELDS:
            hints["required"] = REQUIRED_FIELDS
        return jsonify(_error_payload("Invalid input", err_msg, **hints)), 400

    plan_request = build_plan_request(body)
    try:
        plan = run_study_plan(
            plan_request,
            _llm_client(),
            CANDIDATE_MODELS,
            today=_today(),
            max_tokens=_LLM_MAX_TOKENS,
        )
    except (PlanGenerationError, MissingCredentialError) as exc:
        print(f"[WARN] {PROVIDER} API error: {exc}", file=sys.stderr)
        info = classify_generation_error(exc)
        return jsonify(_error_payload(
            info["error"],
            info["message"],
            provider=PROVIDER,
            suggestion=info["suggestion"],
        )), info["status"]

    return jsonify(plan)


# ── Service routes ────────────────────────────────────────────────────────────
@app.route("/", methods=["GET"])
def index():
    return jsonify({
        "message": SERVICE_NAME,
        "status": "running",
        "version": VERSION,
        "features": FEATURES,
        "endpoints": ENDPOINTS,
        "documentation": {
            "note": "Use the /api/generate-plan endpoint to create study plans with multiple courses",
            "priorityFeature": "Courses with weight > 70 get 15% extra revision time",
            "intensityLevels": "easy, medium, hard - affects session density and breaks",
        },
    })


@app.route("/health", methods=["GET"])
def health_endpoint():
    return jsonify({
        "success": True,
        "message": f"{SERVICE_NAME} is running",
        "timestamp": _timestamp(),
        "features": FEATURES,
        "status": {
            "groqApi": "Configured" if _api_key_configured() else "Missing",
            "cors": "Enabled",
            "version": VERSION,
        },
    })


@app.route("/generate-plan", methods=["POST"])
def generate_plan():
    limited = _rate_limited_response()
    if limited is not None:
        return limited
    body = request.get_json(force=True, silent=True)
    return _generate_plan_response(body)


@app.route("/test-plan", methods=["GET"])
def test_plan():
    limited = _rate_limited_response()
    if limited is not None:
        return limited
    return _generate_plan_response(SAMPLE_PLAN_REQUEST)


@app.route("/test-ai", methods=["POST"])
def test_ai():
    print(f"[INFO] Testing {PROVIDER} API connection...")
    try:
        result, model = complete_with_fallback(
            _llm_client(),
            CANDIDATE_MODELS[:2],
            TEST_PROMPT,
            required_keys=(),
            max_tokens=100,
        )
    except (PlanGenerationError, MissingCredentialError) as exc:
        print(f"[WARN] {PROVIDER} API test failed: {exc}", file=sys.stderr)
        return jsonify(_error_payload(
            f"{PROVIDER} API test failed",
            str(exc),
            solution="Check your GROQ_API_KEY and account status",
        )), 500

    return jsonify({
        "success": True,
        "message": f"{PROVIDER} API is working correctly",
        "model": model,
        "response": result,
        "timestamp": _timestamp(),
        "availableModels": list(CANDIDATE_MODELS),
    })


@app.route("/models", methods=["GET"])
def get_models():
    return jsonify({
        "success": True,
        "models": list(CANDIDATE_MODELS),
        "recommended": CANDIDATE_MODELS[0],
        "timestamp": _timestamp(),
    })


@app.route("/goals", methods=["GET"])
def get_goals():
    return jsonify(_form_options["goals"])


@app.route("/backgrounds", methods=["GET"])
def get_backgrounds():
    return jsonify(_form_options["backgrounds"])


@app.route("/time-options", methods=["GET"])
def get_time_options():
    return jsonify(_form_options["time_options"])


@app.route("/difficulties", methods=["GET"])
def get_difficulties():
    return jsonify(_form_options["difficulties"])


# -- /api-prefixed aliases used by the web client ---------------------
app.add_url_rule("/api/health", endpoint="api_health", view_func=health_endpoint, methods=["GET"])
app.add_url_rule("/api/generate-plan", endpoint="api_generate_plan", view_func=generate_plan, methods=["POST"])
app.add_url_rule("/api/test-plan", endpoint="api_test_plan", view_func=test_plan, methods=["GET"])
app.add_url_rule("/api/test-ai", endpoint="api_test_ai", view_func=test_ai, methods=["POST"])
app.add_url_rule("/api/models", endpoint="api_models", view_func=get_models, methods=["GET"])
app.add_url_rule("/api/goals", endpoint="api_goals", view_func=get_goals, methods=["GET"])
app.add_url_rule("/api/backgrounds", endpoint="api_backgrounds", view_func=get_backgrounds, methods=["GET"])
app.add_url_rule("/api/time-options", endpoint="api_time_options", view_func=get_time_options, methods=["GET"])
app.add_url_rule("/api/difficulties", endpoint="api_difficulties", view_func=get_difficulties, methods=["GET"])


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "1") == "1"
    print(f"[OK] {SERVICE_NAME} v{VERSION} on http://localhost:{port}")
    print(f"[OK] AI provider: {PROVIDER}; candidate models: {', '.join(CANDIDATE_MODELS)}")
    print(f"[OK] API key: {'configured' if _api_key_configured() else 'MISSING'}")
    app.run(host="0.0.0.0", port=port, debug=debug)
