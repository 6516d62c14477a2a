"""Error taxonomy for the interview-to-report pipeline.

Every error carries a ``user_hint`` so callers can pick user messaging
without inspecting provider details.
"""


class PitchPlanError(Exception):
    """Base class for all errors raised by pitchplan."""

    user_hint = "Something went wrong. Please try again."


class ConfigurationError(PitchPlanError):
    """Provider credential or setup is missing. Never retried."""

    user_hint = "Set OPENAI_API_KEY in your environment or .env file."


class ProviderError(PitchPlanError):
    """The language-model provider call failed."""


class TransientProviderError(ProviderError):
    """Network, 5xx, timeout or empty-body failure expected to clear on retry."""

    user_hint = "The AI service is unavailable right now. Please try again later."


class RateLimitError(TransientProviderError):
    """Provider reported a rate limit."""

    user_hint = "Rate limit exceeded. Please try again later."

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class InvalidCredentialError(ProviderError):
    """Provider rejected the configured API key."""

    user_hint = "Invalid API key. Please check your configuration."

    def __init__(self, message: str = "Invalid API key. Please check your configuration."):
        super().__init__(message)


class ReportError(PitchPlanError):
    """Model output could not be turned into a StructuredReport."""

    user_hint = "The AI returned an unusable report. Please try generating it again."


class ReportParseError(ReportError):
    """Raw model output contains no recoverable JSON."""


class ReportValidationError(ReportError):
    """JSON was recovered but does not match the report schema."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class StateError(PitchPlanError):
    """Operation targets a record that does not exist or a finished conversation."""

    user_hint = "That idea or conversation is not available."
