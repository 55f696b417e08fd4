class UserAccountError(Exception):
    """Base class for errors raised by the user account service."""


class DuplicateEmailError(UserAccountError):
    """Raised when a user is created with an email that is already registered."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class InvalidTokenError(UserAccountError):
    """Raised when a bearer token cannot be decoded or has a bad signature."""
