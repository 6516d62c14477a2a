"""Recover the report JSON object from raw model output."""

import json
import re

from pitchplan.errors import ReportParseError
from pitchplan.schemas import StructuredReport
from pitchplan.utils.validator import validate_report

_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)


def extract_json(text: str):
    """Parse ``text`` as JSON, falling back to its first ```json fenced block.

    Raises ReportParseError if neither yields valid JSON.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    match = _JSON_FENCE_RE.search(text) if isinstance(text, str) else None
    if match is None:
        raise ReportParseError("Failed to parse JSON response: no JSON object or ```json block found.")
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise ReportParseError(f"Failed to parse JSON response: fenced block is invalid JSON ({exc.msg}).") from exc


def extract_report(raw_text: str) -> StructuredReport:
    """Turn raw model output into a validated StructuredReport."""
    return validate_report(extract_json(raw_text))
