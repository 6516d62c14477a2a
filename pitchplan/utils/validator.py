"""Input and report validation."""

from pydantic import ValidationError

from pitchplan.errors import ReportValidationError
from pitchplan.schemas import StructuredReport


def validate_input(user_text: str) -> str:
    """Validate that a user utterance is a non-empty string.

    Returns the stripped input on success.
    Raises ValueError if input is empty or whitespace-only.
    """
    if not isinstance(user_text, str) or not user_text.strip():
        raise ValueError("Message must be a non-empty string.")
    return user_text.strip()


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "<root>"
    return f"{location}: {error['msg']}"


def validate_report(data) -> StructuredReport:
    """Validate parsed JSON against the report schema.

    No coercion and no default-filling: the object either matches the full
    shape or ReportValidationError is raised listing every failing path.
    """
    if not isinstance(data, dict):
        raise ReportValidationError(
            f"Report must be a JSON object, got {type(data).__name__}.",
            errors=[f"<root>: expected object, got {type(data).__name__}"],
        )
    try:
        return StructuredReport.model_validate(data)
    except ValidationError as exc:
        errors = [_format_error(e) for e in exc.errors()]
        raise ReportValidationError(
            f"Report does not match the IdeaReport schema ({len(errors)} issue(s)): "
            + "; ".join(errors[:5]),
            errors=errors,
        ) from exc
