"""
Domain errors raised by the voting engine and the settings store.

Each error carries the HTTP status it maps to and a short machine-checkable
code. The API layer renders them as ``{"detail": ..., "error_code": ...}``.
"""

from fastapi import status


class OneWorldError(Exception):
    """Base exception for domain failures reported to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "bad_request"
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None, error_code: str | None = None):
        self.message = message or self.default_message
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)


class VotingValidationError(OneWorldError):
    """Malformed voting input (title, dates, option count)."""

    error_code = "validation_error"
    default_message = "Invalid voting data"


class VotingNotFoundError(OneWorldError):
    """Voting does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "voting_not_found"
    default_message = "Voting not found"


class VotingNotOpenError(OneWorldError):
    """Voting is missing or outside its effective active window."""

    error_code = "voting_not_open"
    default_message = "Voting is not active or does not exist"


class AlreadyVotedError(OneWorldError):
    """A ballot already exists for this user and voting."""

    error_code = "already_voted"
    default_message = "You have already voted in this voting"


class InvalidOptionError(OneWorldError):
    """Chosen option does not belong to the voting."""

    error_code = "invalid_option"
    default_message = "Invalid voting option"


class InvalidTransitionError(OneWorldError):
    """Requested status change would move the lifecycle backwards."""

    error_code = "invalid_transition"
    default_message = "Voting status cannot move backwards"


class SettingNotFoundError(OneWorldError):
    """Settings entry (flag, text, theme, tab, config key) does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Setting not found"
