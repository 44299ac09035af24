"""Error hierarchy for the Ask Reddit AI backend.

Every failure the service surfaces to a caller is an ``AskRedditError``.
Each subclass fixes the HTTP status of the response envelope, a stable
category string, and whether the caller may usefully retry.

Hierarchy:
    AskRedditError
    ├── ValidationError            400  malformed caller input
    ├── NotFoundError              404  subreddit does not exist
    ├── ForbiddenError             403  subreddit is private or banned
    ├── AuthError                  401  Reddit or OpenAI credentials rejected
    ├── UpstreamError              500  unexpected Reddit API failure (429 if Reddit said so)
    ├── InsufficientContentError   404  nothing usable to ground an answer
    ├── GenerationError            500  OpenAI call failed
    └── RateLimitedError           429  quota, billing or rate limit exhausted
"""

from typing import Optional


class AskRedditError(Exception):
    """Base class for all Ask Reddit AI errors."""

    status_code: int = 500
    category: str = "unknown"
    retryable: bool = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AskRedditError):
    """Caller input is malformed."""

    status_code = 400
    category = "validation"


class NotFoundError(AskRedditError):
    """The requested subreddit does not exist."""

    status_code = 404
    category = "not_found"


class ForbiddenError(AskRedditError):
    """The requested subreddit is private or banned."""

    status_code = 403
    category = "forbidden"


class AuthError(AskRedditError):
    """A credential or token was missing or rejected."""

    status_code = 401
    category = "auth"

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)


class UpstreamError(AskRedditError):
    """The Reddit API failed in an unexpected way."""

    category = "upstream"
    retryable = True

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 429 if self.upstream_status == 429 else 500


class InsufficientContentError(AskRedditError):
    """The subreddit has no usable recent discussion."""

    status_code = 404
    category = "insufficient_content"


class GenerationError(AskRedditError):
    """The generation service failed for reasons other than quota or auth."""

    status_code = 500
    category = "generation"
    retryable = True


class RateLimitedError(AskRedditError):
    """Quota, billing or request-rate exhaustion."""

    status_code = 429
    category = "rate_limited"
    retryable = True
