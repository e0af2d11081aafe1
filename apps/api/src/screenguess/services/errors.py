from __future__ import annotations


class ContentError(RuntimeError):
    """Base class for every failure the content engine reports to callers.

    ``status_code`` is the HTTP status the API layer answers with. Messages stay
    generic and never include credentials; players see them next to a retry button.
    """

    status_code: int = 502
    default_message = "Content provider request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message or self.default_message)
        if status_code is not None:
            self.status_code = status_code


class RateLimited(ContentError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class Unauthorized(ContentError):
    status_code = 401
    default_message = "Content provider rejected the configured credentials"


class NotFound(ContentError):
    status_code = 404
    default_message = "Content not found"


class ProviderError(ContentError):
    """Any other non-2xx provider answer (or an unreadable body)."""

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"Content provider error: {status}", status_code=502)
        self.status = status


class NetworkError(ContentError):
    status_code = 503
    default_message = "Network error. Please check your connection."


class InsufficientContent(ContentError):
    status_code = 404
    default_message = "Failed to find content with enough screenshots"


class Cancelled(ContentError):
    status_code = 504
    default_message = "Content lookup was cancelled"


class UnknownCategory(LookupError):
    """Raised for a category outside the fixed set; a programming error."""

    def __init__(self, category: object) -> None:
        super().__init__(f"Unknown content category: {category!r}")
        self.category = category
