from typing import Any, Dict, Optional


# Caller-facing kinds mapped to HTTP status codes
ERROR_STATUS = {
    "invalid-argument": 400,
    "unauthenticated": 401,
    "resource-exhausted": 429,
    "internal": 500,
    "unimplemented": 501,
    "deadline-exceeded": 504,
}


class MenuAnalysisError(Exception):
    """Base error for the menu analysis backend.

    Attributes:
        message: human-readable message
        code: machine-readable taxonomy name, used in server logs
        kind: caller-facing error kind (see ERROR_STATUS)
        detail_kind: finer kind for upstream failures, never sent to callers
    """

    code = "internal"
    kind = "internal"
    detail_kind: Optional[str] = None

    def __init__(self, message: str = "Internal error", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def http_status(self) -> int:
        return ERROR_STATUS.get(self.kind, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "msg": self.message}

    def __str__(self) -> str:
        return self.message


class InvalidInputError(MenuAnalysisError):
    code = "invalid-input"
    kind = "invalid-argument"


class UnauthenticatedError(MenuAnalysisError):
    code = "unauthenticated"
    kind = "unauthenticated"


class NotImplementedYetError(MenuAnalysisError):
    code = "unimplemented"
    kind = "unimplemented"


class UpstreamError(MenuAnalysisError):
    """Failure of the generative model call; surfaced to callers as `internal`."""

    code = "upstream"


class UpstreamUnavailableError(UpstreamError):
    code = "upstream-unavailable"
    detail_kind = "resource-exhausted"


class UpstreamUnauthorizedError(UpstreamError):
    code = "upstream-unauthorized"
    detail_kind = "unauthenticated"


class UpstreamTimeoutError(UpstreamError):
    code = "upstream-timeout"
    detail_kind = "deadline-exceeded"


class EmptyUpstreamResponseError(UpstreamError):
    code = "empty-upstream-response"


class MalformedOutputError(MenuAnalysisError):
    code = "malformed-output"


class AIUnavailableError(MenuAnalysisError):
    code = "ai-unavailable"


class InternalFailureError(MenuAnalysisError):
    code = "internal"
