"""Turn untrusted model text into a validated DailyPlan."""

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from nutrigenius.domain.plan import DailyPlan
from nutrigenius.errors import MalformedPlanError

_FENCED_BLOCK = re.compile(r"```[a-zA-Z0-9_-]*\s*\n?(.*?)```", re.DOTALL)
_FENCE_MARKER = re.compile(r"```[a-zA-Z0-9_-]*")

_logger = logging.getLogger(__name__)


def parse_plan(raw_text: str) -> DailyPlan:
    """Parse model output into a DailyPlan.

    Code fences and prose around the JSON object are tolerated; the object
    itself must match the plan shape exactly. Nothing is filled in for
    missing fields.
    """
    candidate = extract_json_object(raw_text)
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedPlanError(f"Plan is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise MalformedPlanError("Plan must be a JSON object")
    try:
        # Strict validation runs in JSON mode, where nested objects are
        # accepted but no value coercion happens.
        return DailyPlan.model_validate_json(candidate)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'plan'}: {error['msg']}"
            for error in exc.errors()
        )
        _logger.warning("Rejected malformed plan: %s", problems)
        raise MalformedPlanError(f"Plan failed validation: {problems}") from exc


def extract_json_object(raw_text: str) -> str:
    """Strip fences and surrounding prose, returning the outermost {...} span."""
    if not raw_text or not raw_text.strip():
        raise MalformedPlanError("Model returned an empty plan")
    fenced = _FENCED_BLOCK.search(raw_text)
    text = fenced.group(1) if fenced else _FENCE_MARKER.sub("", raw_text)
    text = text.strip()
    if text.startswith("{") and text.endswith("}"):
        return text
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise MalformedPlanError("No JSON object found in model output")
    return text[start : end + 1]


def dump_plan(plan: DailyPlan) -> str:
    """Serialise a plan to its persisted JSON form."""
    return plan.model_dump_json()
