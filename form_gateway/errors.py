"""Exception hierarchy for the gateway."""

from __future__ import annotations


class GatewayError(RuntimeError):
    """Base class for all gateway errors."""


class LoginError(GatewayError):
    """Login could not be completed. Fatal at startup."""


class VerificationOptionNotFoundError(LoginError):
    """A challenge was shown but no known verification option is on the page."""


class ChallengeCodeTimeoutError(LoginError):
    """No verification code arrived within the configured time."""


class SessionStateError(GatewayError):
    """Illegal session state transition."""


class SessionNotReadyError(GatewayError):
    """The page was requested while the session is not authenticated."""
