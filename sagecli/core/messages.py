"""User-facing wording for gateway failures."""

from sagecli.domain.errors import FatalRequestError, RetriesExhaustedError, AUTH

COOLDOWN_MESSAGE = (
    "Quota exhausted. The AI service needs a cooldown. "
    "Please wait 1-2 minutes before retrying."
)

def describe_gateway_error(error: Exception) -> str:
    if isinstance(error, RetriesExhaustedError):
        if error.is_rate_limited:
            return COOLDOWN_MESSAGE
        return f"The AI service kept failing after {error.attempts} attempts: {error.last_error}"
    if isinstance(error, FatalRequestError):
        if getattr(error.cause, "failure_class", None) == AUTH:
            return f"Authentication failed: {error.cause}. Please check your API key."
        return f"AI request failed: {error.cause}"
    return f"An unexpected error occurred: {error}"
