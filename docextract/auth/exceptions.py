class AuthenticationError(Exception):
    """Raised when the caller's identity cannot be established."""
