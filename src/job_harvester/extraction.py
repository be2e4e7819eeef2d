import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from job_harvester.errors import ExtractionError

logger = logging.getLogger(__name__)

FRESHER = "Fresher"
EXPERIENCED = "Experienced"

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*")


@dataclass(frozen=True)
class Parsed:
    candidate: dict[str, Any]


@dataclass(frozen=True)
class Malformed:
    raw_text: str
    reason: str  # "no_json_found" or "malformed"


@dataclass(frozen=True)
class ServiceFailure:
    reason: str


ExtractionOutcome = Parsed | Malformed | ServiceFailure


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) wrapped around service output."""
    return _FENCE_RE.sub("", text).strip()


def extract_json_span(text: str) -> str:
    """
    Return the span from the first '{' to the last '}' of the text.

    Extraction services sometimes prepend or append commentary to the JSON
    object, so anything outside the outermost braces is discarded.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ExtractionError("no_json_found", "No JSON object found in extraction output", text)
    return text[start : end + 1]


def parse_extraction_output(text: str) -> ExtractionOutcome:
    """Turn raw service text into a Parsed or Malformed outcome."""
    cleaned = strip_code_fences(text)
    try:
        span = extract_json_span(cleaned)
    except ExtractionError:
        return Malformed(raw_text=text, reason="no_json_found")

    try:
        data = json.loads(span)
    except json.JSONDecodeError:
        return Malformed(raw_text=text, reason="malformed")

    if not isinstance(data, dict):
        return Malformed(raw_text=text, reason="malformed")
    return Parsed(candidate=data)


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def derive_employment_type(
    experience_min: int, experience_max: int, supplied: list[str] | None = None
) -> list[str]:
    """
    Make sure the employment type agrees with the experience bounds.

    Both bounds 0 -> Fresher; minimum above 0 -> Experienced; minimum 0 with a
    positive maximum -> both. Labels the extraction service supplied are kept.
    """
    labels = list(supplied or [])
    required: list[str] = []
    if experience_min > 0:
        required.append(EXPERIENCED)
    elif experience_max > 0:
        required.extend([FRESHER, EXPERIENCED])
    else:
        required.append(FRESHER)

    for label in required:
        if label not in labels:
            labels.append(label)
    return labels


def _supplied_labels(candidate: dict[str, Any]) -> list[str]:
    value = candidate.get("employment_type", candidate.get("employmentType"))
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item) for item in value if str(item).strip()]
    return []


def normalize(outcome: ExtractionOutcome) -> dict[str, Any]:
    """
    Convert an extraction outcome into a candidate record.

    Raises ExtractionError for Malformed and ServiceFailure outcomes. For Parsed
    outcomes, fills in the employment type derived from the experience bounds.
    """
    match outcome:
        case Parsed(candidate=candidate):
            result = dict(candidate)
            exp_min = _as_int(candidate.get("experience_min", candidate.get("experienceMin")))
            exp_max = _as_int(candidate.get("experience_max", candidate.get("experienceMax")))
            if exp_min is None or exp_max is None:
                # Unparseable bounds are left for the schema validator to reject
                return result
            result.pop("employmentType", None)
            result["employment_type"] = derive_employment_type(
                exp_min, exp_max, _supplied_labels(candidate)
            )
            return result
        case Malformed(raw_text=raw_text, reason=reason):
            logger.error(f"Could not parse extraction output ({reason}): {raw_text!r}")
            raise ExtractionError(reason, f"Extraction output unusable: {reason}", raw_text)
        case ServiceFailure(reason=reason):
            raise ExtractionError("service_failure", f"Extraction service failed: {reason}")
    raise TypeError(f"Unknown extraction outcome: {outcome!r}")
