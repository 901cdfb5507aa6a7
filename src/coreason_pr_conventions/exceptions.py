class ConventionsError(Exception):
    """Base exception for Coreason PR Conventions."""

    pass


class ScmError(ConventionsError):
    """Base exception for SCM (Git/GitHub) related errors."""

    pass


class NetworkError(ScmError):
    """Exception raised for network-related SCM errors (timeouts, connection refused)."""

    pass


class AuthError(ScmError):
    """Exception raised for authentication or permission errors."""

    pass


class MetadataError(ConventionsError):
    """Exception raised when the pull request metadata cannot be assembled."""

    pass
