"""Core exceptions for PolicyHub authentication, provisioning and sessions."""

from policyhub.utils.exceptions import PolicyHubError


class ContextNotSetError(PolicyHubError):
    """Raised when attempting to access request context that is not set."""

    def __init__(self, message: str = "Request context is not set"):
        super().__init__(message)


class AuthenticationError(PolicyHubError):
    """Raised when a request carries no valid session.

    Attributes:
        reason: The specific reason authentication failed
    """

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(reason)
        self.reason = reason


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match a user."""

    def __init__(self, reason: str = "Invalid email or password"):
        super().__init__(reason)


class AuthorizationError(PolicyHubError):
    """Raised when an authenticated user lacks the role for an action.

    Attributes:
        required_role: The role the action requires
    """

    def __init__(self, message: str, required_role: str = "admin"):
        super().__init__(message)
        self.required_role = required_role


class InputValidationError(PolicyHubError):
    """Raised when request input is malformed.

    Attributes:
        field: Name of the offending field, if known
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class RegistrationConflictError(PolicyHubError):
    """Raised when an organization slug or admin email is already taken.

    Attributes:
        conflict: Which value collided ("slug" or "email")
    """

    def __init__(self, message: str, conflict: str):
        super().__init__(message)
        self.conflict = conflict


class OrganizationNotFoundError(PolicyHubError):
    """Raised when an organization lookup finds nothing."""

    def __init__(self, identifier: int | str):
        super().__init__("Organization not found")
        self.identifier = identifier


class SessionExchangeError(PolicyHubError):
    """Base for failures while exchanging a temporary token for a session."""

    pass


class InvalidTokenError(SessionExchangeError):
    """Raised when a temporary token does not exist or was already consumed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class TokenExpiredError(SessionExchangeError):
    """Raised when a temporary token exists but is past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class SessionUserNotFoundError(SessionExchangeError):
    """Raised when a temporary token points at a user that no longer exists."""

    def __init__(self, user_id: int):
        super().__init__("User not found")
        self.user_id = user_id


class DriveError(PolicyHubError):
    """Base for failures while proxying a Google Drive download."""

    pass


class DriveUpstreamError(DriveError):
    """Raised when Google Drive answers a download with a non-success status.

    Attributes:
        status_code: Upstream HTTP status, mirrored to the client
        details: Upstream error message, or a generic fallback
    """

    def __init__(self, status_code: int, details: str):
        super().__init__(f"Google Drive API responded with status {status_code}")
        self.status_code = status_code
        self.details = details


class DriveUnavailableError(DriveError):
    """Raised when Google Drive cannot be reached at all."""

    def __init__(self, details: str):
        super().__init__("Google Drive request failed")
        self.details = details
