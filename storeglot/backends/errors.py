"""
Typed backend errors.

Backends translate transport failures into a `BackendError` carrying a
`BackendErrorKind`, so the retry policy can tell a rate limit (wait and try
again) from a bad API key (give up now).
"""

from __future__ import annotations

from enum import Enum

from storeglot.core.errors import StoreglotError


class BackendErrorKind(str, Enum):
    """Failure categories a translation backend can report."""

    BAD_REQUEST = "BAD_REQUEST"
    AUTH_FAILED = "AUTH_FAILED"
    FORBIDDEN = "FORBIDDEN"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "RATE_LIMITED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN"


TRANSIENT_KINDS = frozenset(
    {
        BackendErrorKind.RATE_LIMITED,
        BackendErrorKind.SERVICE_UNAVAILABLE,
        BackendErrorKind.TIMEOUT,
        BackendErrorKind.NETWORK_ERROR,
    }
)

STATUS_KINDS: dict[int, BackendErrorKind] = {
    400: BackendErrorKind.BAD_REQUEST,
    401: BackendErrorKind.AUTH_FAILED,
    403: BackendErrorKind.FORBIDDEN,
    413: BackendErrorKind.PAYLOAD_TOO_LARGE,
    429: BackendErrorKind.RATE_LIMITED,
    456: BackendErrorKind.QUOTA_EXCEEDED,
    503: BackendErrorKind.SERVICE_UNAVAILABLE,
}

_MESSAGES: dict[BackendErrorKind, str] = {
    BackendErrorKind.BAD_REQUEST: "Bad request",
    BackendErrorKind.AUTH_FAILED: "Authentication failed: invalid API key",
    BackendErrorKind.FORBIDDEN: "Authorization failed: API key lacks permissions",
    BackendErrorKind.PAYLOAD_TOO_LARGE: "Request too large: text exceeds maximum length",
    BackendErrorKind.RATE_LIMITED: "Rate limit exceeded: too many requests",
    BackendErrorKind.QUOTA_EXCEEDED: "Quota exceeded: character limit reached",
    BackendErrorKind.SERVICE_UNAVAILABLE: "Service unavailable: translation API is temporarily down",
    BackendErrorKind.TIMEOUT: "Request timeout: translation API did not respond in time",
    BackendErrorKind.NETWORK_ERROR: "Network error",
    BackendErrorKind.UNKNOWN: "API error",
}


class BackendError(StoreglotError):
    """A translation backend call failed."""

    def __init__(
        self,
        kind: BackendErrorKind,
        message: str = "",
        status_code: int | None = None,
    ):
        self.kind = kind
        self.status_code = status_code
        self.message = message or _MESSAGES[kind]
        super().__init__(self.message)

    @property
    def transient(self) -> bool:
        """Whether retrying the same call later may succeed."""
        return self.kind in TRANSIENT_KINDS

    @classmethod
    def from_status(cls, status_code: int, detail: str = "") -> BackendError:
        """Build the error for an HTTP status returned by a backend."""
        kind = STATUS_KINDS.get(status_code, BackendErrorKind.UNKNOWN)
        message = _MESSAGES[kind]
        if kind == BackendErrorKind.UNKNOWN:
            message = f"API error {status_code}"
        if detail:
            message = f"{message}: {detail}"
        return cls(kind, message, status_code)

    def __repr__(self) -> str:
        return f"BackendError(kind={self.kind.value}, status_code={self.status_code}, message={self.message!r})"


class BackendConfigurationError(StoreglotError):
    """Raised when a backend is selected but not configured (missing key, unknown name)."""


def is_transient(error: BaseException) -> bool:
    """Retry predicate: only transient backend errors are retried."""
    return isinstance(error, BackendError) and error.transient
