"""
Error taxonomy for the clinical-assistant backend.

Every failure the service layer surfaces derives from HealthAIError and
carries the HTTP status the API reports plus a generic public message.
The detailed message stays in the operational log.

"Parse Error" is not an exception here: unparsable LLM fields are stored
as the PARSE_ERROR sentinel (see services.response_parser).
"""


class HealthAIError(Exception):
    """Base class for all service-layer failures."""

    http_status = 500
    public_message = "An internal error occurred."

    def __init__(self, message, detail=None, public_message=None):
        self.message = message
        self.detail = detail
        if public_message is not None:
            self.public_message = public_message
        super().__init__(message)


class ConfigurationError(HealthAIError):
    """Missing or invalid credentials. Raised before any partial work."""

    public_message = "Service is not configured correctly."


class InputError(HealthAIError):
    """Malformed caller input (base64 data, identifiers, payload shape)."""

    http_status = 400
    public_message = "Invalid request data."

    def __init__(self, message, detail=None, public_message=None):
        # Input problems are the caller's to fix, so the message is safe to echo.
        super().__init__(message, detail, public_message or message)


class ConflictError(HealthAIError):
    """A record with the same unique key already exists."""

    http_status = 409
    public_message = "Record already exists."


class UpstreamError(HealthAIError):
    """Network failure, timeout or error status from the LLM or OCR backend."""

    public_message = "An upstream service failed to respond."


class StorageError(HealthAIError):
    """Persistence failure; the surrounding transaction has been rolled back."""

    public_message = "Database error while saving data."


class ValidationError(HealthAIError):
    """Internal fault inside the rule engine; reported as an issue, never raised to HTTP."""
