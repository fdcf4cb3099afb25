"""
Exception hierarchy for GrantStream.

Every rejected operation raises a subclass of :class:`GrantError`. All of
them are raised before any state is committed, so a caller that catches one
can assume nothing changed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GrantError(Exception):
    """Base exception for all treasury and grant errors.

    Attributes:
        message: Human-readable error description
        code: Stable machine-readable error code
        details: Additional context about the error
        recoverable: Whether resubmitting later may succeed
    """

    default_code = "grant_error"
    recoverable = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        if recoverable is not None:
            self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# ==================== Request Errors ====================


class ValidationError(GrantError):
    """Raised when request parameters are malformed.

    Examples: bad timing, non-positive amount, description too long,
    requested amount above what is currently releasable.
    """

    default_code = "invalid_request"


class AuthorizationError(GrantError):
    """Raised when the caller is not the expected authority or recipient."""

    default_code = "unauthorized"


class NotFoundError(GrantError):
    """Raised when a treasury or grant id does not resolve to a record."""

    default_code = "not_found"


# ==================== State Errors ====================


class StateError(GrantError):
    """Raised when an operation is incompatible with the current status."""

    default_code = "invalid_state"


class LimitError(GrantError):
    """Raised when the treasury is paused or a governance cap would be exceeded."""

    default_code = "limit_exceeded"
    # Governance can be relaxed by the authority
    recoverable = True


class ArithmeticOverflowError(GrantError):
    """Raised when a checked per-grant balance update would overflow.

    Reaching this means the ``released <= total`` invariant was already
    broken; it is never recoverable.
    """

    default_code = "arithmetic_overflow"


# ==================== Collaborator Errors ====================


class TransferError(GrantError):
    """Raised when the transfer gateway reports a failed movement of funds."""

    default_code = "transfer_failed"
    recoverable = True


class ConfigurationError(GrantError):
    """Raised when required configuration is missing or invalid."""

    default_code = "invalid_configuration"
