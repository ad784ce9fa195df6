"""Error hierarchy for schedule API calls and grid operations.

Transient failures (should retry) are kept apart from permanent failures
(should not retry) so tenacity decorators can classify them:

    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def list_activities(self, team_id: str):
        ...
"""


class ScheduleError(Exception):
    """Base exception for all schedule errors."""

    pass


class TransientError(ScheduleError):
    """Temporary failure that may succeed on retry.

    Examples: connection errors, timeouts, 502/503/504 from the backend.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429).

    Inherits from TransientError so read calls retry it.
    """

    pass


class PermanentError(ScheduleError):
    """Failure that won't succeed on retry.

    Examples: 400 Missing required fields, 404 Activity not found, a body
    that does not match the expected shape.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(PermanentError):
    """Missing or rejected credentials (HTTP 401/403).

    Needs a new API token, cannot be fixed by retry.
    """

    pass


class ValidationError(PermanentError):
    """A required field is missing before any request is sent."""

    pass


class GridError(PermanentError):
    """Unknown day label, unknown time slot or malformed cell key."""

    pass
