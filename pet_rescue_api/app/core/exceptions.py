"""
Domain exceptions raised by the service layer.

Endpoints translate these into HTTP responses.  ``NotFoundError`` and
``DuplicateError`` derive from ``ValueError`` so callers that only care
about "bad input" can catch them together; ``AccountLockedError`` is
raised by sign-in only.
"""

from datetime import datetime


class NotFoundError(ValueError):
    """A referenced record does not exist."""


class DuplicateError(ValueError):
    """A unique field (e.g. a user's email) is already taken."""


class AccountLockedError(Exception):
    """Sign-in refused because the account is temporarily locked out."""

    def __init__(self, email: str, locked_until: datetime):
        super().__init__(f"Account {email} is locked until {locked_until.isoformat()}")
        self.email = email
        self.locked_until = locked_until
