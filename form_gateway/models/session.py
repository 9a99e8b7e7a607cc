"""Pydantic models for session state."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionState(str, Enum):
    """Lifecycle of the single authenticated browser session."""

    UNINITIALIZED = "uninitialized"
    LOGGING_IN = "logging_in"
    AWAITING_CHALLENGE = "awaiting_challenge"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"
    CLOSED = "closed"


# Closing is allowed from every state except CLOSED itself
TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.UNINITIALIZED: frozenset({SessionState.LOGGING_IN, SessionState.CLOSED}),
    SessionState.LOGGING_IN: frozenset({
        SessionState.AWAITING_CHALLENGE,
        SessionState.AUTHENTICATED,
        SessionState.FAILED,
        SessionState.CLOSED,
    }),
    SessionState.AWAITING_CHALLENGE: frozenset({
        SessionState.AUTHENTICATED,
        SessionState.FAILED,
        SessionState.CLOSED,
    }),
    SessionState.AUTHENTICATED: frozenset({SessionState.CLOSED}),
    SessionState.FAILED: frozenset({SessionState.CLOSED}),
    SessionState.CLOSED: frozenset(),
}


class ChallengeKind(str, Enum):
    """What the identity provider asked for after the identifier step."""

    NONE = "none"
    EMAIL_CODE = "email_code"
    UNKNOWN = "unknown"


class ChallengeContext(BaseModel):
    """Detected verification step. Only meaningful while awaiting a challenge."""

    kind: ChallengeKind = ChallengeKind.NONE
    markers: list[str] = Field(default_factory=list)
    option_selector: Optional[str] = None

    @property
    def detected(self) -> bool:
        return self.kind is not ChallengeKind.NONE


class Credentials(BaseModel):
    """Account identifier and secret. Empty strings are passed through unchanged."""

    model_config = ConfigDict(frozen=True)

    email: str = ""
    password: str = Field(default="", repr=False)


class SessionStatus(BaseModel):
    """Current state of the browser session and its cache."""

    state: SessionState = SessionState.UNINITIALIZED
    is_authenticated: bool = False
    cached_pages: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    started_at: Optional[str] = None
    authenticated_at: Optional[str] = None
    message: str = ""
