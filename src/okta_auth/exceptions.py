"""Exception hierarchy for okta_auth.

All exceptions inherit from :class:`OktaAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`okta_auth.exit_codes`
and a short machine-readable ``code`` used in MCP error payloads. The CLI
entry point catches ``OktaAuthError`` and exits with the matching code; the
MCP server converts it to ``{"error": true, "message": ..., "code": ...}``.

Subclass hierarchy::

    OktaAuthError          (exit 1)
    +-- UnknownServiceError (exit 4)
    +-- NoSessionError      (exit 5)
    +-- LoginTimeoutError   (exit 6)
    +-- StorageError        (exit 7)
    +-- CaptureError        (exit 8)
    +-- ConfigError         (exit 1)
"""

from okta_auth.exit_codes import (
    EXIT_CAPTURE_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_LOGIN_TIMEOUT,
    EXIT_NO_SESSION,
    EXIT_STORAGE_FAILURE,
    EXIT_UNKNOWN_SERVICE,
)


class OktaAuthError(Exception):
    """Base exception for all okta_auth errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    code: str = "error"

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnknownServiceError(OktaAuthError):
    """Raised when a service key is not registered in the catalog."""

    exit_code = EXIT_UNKNOWN_SERVICE
    code = "unknown_service"

    def __init__(self, service: str, known: list[str] | None = None):
        message = f"Unknown service: {service}"
        if known:
            message += f" (known services: {', '.join(known)})"
        super().__init__(message)
        self.service = service


class NoSessionError(OktaAuthError):
    """Raised when an operation needs a stored Okta session and none exists."""

    exit_code = EXIT_NO_SESSION
    code = "no_session"


class LoginTimeoutError(OktaAuthError):
    """Raised when the user does not leave the login page within the allowed time."""

    exit_code = EXIT_LOGIN_TIMEOUT
    code = "login_timeout"


class StorageError(OktaAuthError):
    """Raised when credentials cannot be written to or removed from disk."""

    exit_code = EXIT_STORAGE_FAILURE
    code = "storage_failure"


class CaptureError(OktaAuthError):
    """Raised when the browser fails while capturing a session."""

    exit_code = EXIT_CAPTURE_FAILURE
    code = "capture_failure"


class ConfigError(OktaAuthError):
    """Raised for configuration problems (invalid JSON, duplicate service keys)."""

    exit_code = EXIT_GENERIC_FAILURE
    code = "config_error"
