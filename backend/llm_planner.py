import enum
import json
import os
import sys
from dataclasses import dataclass

import openai
from openai import OpenAI

from prompt_builder import SYSTEM_PROMPT

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
PROVIDER = "GROQ"

# Tried in order until one returns a usable plan.
DEFAULT_GROQ_MODELS = (
    "llama-3.3-70b-versatile",
    "llama-3.2-3b-preview",
    "llama-3.2-1b-preview",
    "gemma2-9b-it",
    "llama-3.1-8b-instant",
    "mixtral-8x7b-32768",
)

PLAN_REQUIRED_KEYS = ("goal", "dailySchedule")

_MODEL_GONE_MARKERS = ("model_decommissioned", "decommissioned", "model_not_found")


class MissingCredentialError(RuntimeError):
    pass


class MalformedResponseError(Exception):
    """Provider answered 2xx but the completion envelope has no message."""


class ReplyParseError(Exception):
    """The model's text did not contain a usable JSON object."""


class PlanGenerationError(Exception):
    """Every candidate model failed. last_error is the final underlying failure."""

    def __init__(self, last_error: Exception | None, attempted_models: list[str]):
        self.last_error = last_error
        self.attempted_models = list(attempted_models)
        detail = str(last_error) if last_error is not None else "no candidate models configured"
        super().__init__(f"All models failed. Last error: {detail}")


class ExtractionStatus(enum.Enum):
    NOT_FOUND = "not_found"
    FOUND_INVALID = "found_invalid"
    FOUND_VALID = "found_valid"


@dataclass(frozen=True)
class ExtractionResult:
    status: ExtractionStatus
    payload: dict | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.FOUND_VALID


def parse_model_list(raw: str | None) -> tuple[str, ...]:
    """Comma-separated GROQ_MODELS override; blank → built-in candidates."""
    models = tuple(m.strip() for m in (raw or "").split(",") if m.strip())
    return models or DEFAULT_GROQ_MODELS


def get_groq_client(api_key: str | None = None, timeout: float = 60.0) -> OpenAI:
    api_key = api_key or os.environ.get("GROQ_API_KEY")
    if not api_key:
        raise MissingCredentialError("GROQ_API_KEY is not configured")
    return OpenAI(
        api_key=api_key,
        base_url=os.environ.get("GROQ_BASE_URL", GROQ_BASE_URL),
        timeout=timeout,
        # The candidate list is the only retry mechanism.
        max_retries=0,
    )


def extract_json_object(text: str | None, required_keys=()) -> ExtractionResult:
    """
    Best-effort: take everything from the first "{" to the last "}" and parse it.

    Models often wrap JSON in prose or code fences, so a failure here is an
    expected outcome of talking to a text generator, not a bug.
    """
    text = text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return ExtractionResult(ExtractionStatus.NOT_FOUND, reason="No JSON found in response")

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        return ExtractionResult(ExtractionStatus.FOUND_INVALID, reason=f"Invalid JSON: {exc}")

    if not isinstance(parsed, dict):
        return ExtractionResult(ExtractionStatus.FOUND_INVALID, reason="JSON reply is not an object")

    missing = [k for k in required_keys if not parsed.get(k)]
    if missing:
        return ExtractionResult(
            ExtractionStatus.FOUND_INVALID,
            payload=parsed,
            reason=f"Missing required fields in response: {', '.join(missing)}",
        )
    return ExtractionResult(ExtractionStatus.FOUND_VALID, payload=parsed)


def call_model(
    client,
    model: str,
    user_prompt: str,
    system_prompt: str = SYSTEM_PROMPT,
    max_tokens: int = 6000,
) -> str:
    """One chat completion. Returns the reply text; raises on any provider failure."""
    response = client.chat.completions.create(
        model=model,
        max_tokens=max_tokens,
        temperature=0.7,
        top_p=0.9,
        stream=False,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
    )

    choices = getattr(response, "choices", None)
    if not choices or getattr(choices[0], "message", None) is None:
        raise MalformedResponseError(f"Invalid response structure from {PROVIDER} API")
    return choices[0].message.content or ""


def complete_with_fallback(
    client,
    models,
    user_prompt: str,
    required_keys=PLAN_REQUIRED_KEYS,
    system_prompt: str = SYSTEM_PROMPT,
    max_tokens: int = 6000,
) -> tuple[dict, str]:
    """
    Try each candidate model in order, one call at a time.

    Returns (parsed_reply, model) for the first model whose reply yields a
    valid JSON object. Raises PlanGenerationError once every model has failed.
    """
    models = list(models)
    last_error = None
    for model in models:
        print(f"[LLM] Trying model: {model}")
        try:
            raw = call_model(client, model, user_prompt, system_prompt, max_tokens)
            result = extract_json_object(raw, required_keys)
            if not result.ok:
                print(f"[WARN] Raw response from {model}: {raw[:500]!r}", file=sys.stderr)
                raise ReplyParseError(f"Failed to parse AI response: {result.reason}")
        except (openai.OpenAIError, MalformedResponseError, ReplyParseError) as exc:
            last_error = exc
            print(f"[WARN] Model {model} failed: {exc}", file=sys.stderr)
            continue

        print(f"[OK] Success with model: {model}")
        return result.payload, model

    raise PlanGenerationError(last_error, models)


def _is_model_unavailable(exc: Exception) -> bool:
    if not isinstance(exc, (openai.BadRequestError, openai.NotFoundError)):
        return False
    code = str(getattr(exc, "code", "") or "")
    text = f"{code} {exc}".lower()
    return any(marker in text for marker in _MODEL_GONE_MARKERS)


def classify_generation_error(exc: Exception) -> dict:
    """
    Map a generation failure to the HTTP-facing error category.

    Returns {"status", "error", "message", "suggestion"}. Classification looks
    at the last underlying error when given a PlanGenerationError.
    """
    cause = exc.last_error if isinstance(exc, PlanGenerationError) else exc

    if isinstance(cause, (MissingCredentialError, openai.AuthenticationError)):
        return {
            "status": 401,
            "error": f"Invalid {PROVIDER} API key",
            "message": "Please check your GROQ_API_KEY in the environment or .env file",
            "suggestion": "Get a key at https://console.groq.com/keys",
        }
    if isinstance(cause, openai.RateLimitError):
        return {
            "status": 429,
            "error": "Rate limit exceeded",
            "message": "Please wait a moment and try again",
            "suggestion": "Retry after a short pause",
        }
    if cause is not None and _is_model_unavailable(cause):
        return {
            "status": 400,
            "error": "Model deprecated",
            "message": "Please update GROQ_MODELS with currently available models",
            "suggestion": "Check https://console.groq.com/docs/models for latest models",
        }
    return {
        "status": 500,
        "error": "Failed to generate study plan",
        "message": str(exc),
        "suggestion": "Check https://console.groq.com/docs/models for latest models",
    }
