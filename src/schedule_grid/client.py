"""HTTP client for the team-management schedule API.

ScheduleClient wraps a requests.Session and maps backend responses onto the
error hierarchy: network failures and 5xx become TransientError, 401/403
AuthenticationError, 429 RateLimitError, other 4xx PermanentError.

Reads retry TransientError with tenacity. Writes are sent exactly once; the
caller decides what to do with a failure.
"""

from typing import TypeVar

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from schedule_grid.config import ScheduleConfig, get_config
from schedule_grid.errors import (
    AuthenticationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from schedule_grid.logging import get_logger
from schedule_grid.models import (
    ActivityDraft,
    ActivityResponse,
    ActivityUpdate,
    PlayerWeeklyAvailability,
    ScheduleActivity,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_read_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_fixed(1),
    retry=retry_if_exception_type(TransientError),
    reraise=True,
)


class ScheduleClient:
    """Thin client over /api/schedule, /api/player-availability and /api/schedule-responses."""

    SCHEDULE_PATH = "/api/schedule"
    AVAILABILITY_PATH = "/api/player-availability"
    RESPONSES_PATH = "/api/schedule-responses"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
        config: ScheduleConfig | None = None,
    ) -> None:
        config = config or get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds
        self.session = session or requests.Session()

        token = token if token is not None else config.api_token
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> dict:
        """Send one request and return its JSON body (empty dict for empty bodies)."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("api_timeout", method=method, url=url)
            raise TransientError(f"{method} {path} timed out") from e
        except requests.RequestException as e:
            logger.warning("api_unreachable", method=method, url=url, error=str(e))
            raise TransientError(f"{method} {path} failed: {e}") from e

        if not resp.ok:
            detail = _error_detail(resp)
            logger.warning(
                "api_error", method=method, url=url, status=resp.status_code, detail=detail
            )
            message = f"{method} {path} returned {resp.status_code}: {detail}"
            if resp.status_code in (401, 403):
                raise AuthenticationError(message, resp.status_code)
            if resp.status_code == 429:
                raise RateLimitError(message)
            if resp.status_code >= 500:
                raise TransientError(message)
            raise PermanentError(message, resp.status_code)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise PermanentError(f"{method} {path} returned a non-JSON body") from e

    @_read_retry
    def list_activities(self, team_id: str) -> list[ScheduleActivity]:
        data = self._request("GET", self.SCHEDULE_PATH, params={"team_id": team_id})
        activities = _parse_rows(ScheduleActivity, data, "activities")
        logger.info("activities_loaded", team_id=team_id, count=len(activities))
        return activities

    def create_activity(self, draft: ActivityDraft) -> ScheduleActivity:
        data = self._request(
            "POST", self.SCHEDULE_PATH, json=draft.model_dump(mode="json")
        )
        return _activity_from(data, "POST")

    def update_activity(self, activity_id: str, update: ActivityUpdate) -> ScheduleActivity:
        data = self._request(
            "PUT",
            f"{self.SCHEDULE_PATH}/{activity_id}",
            json=update.model_dump(mode="json"),
        )
        return _activity_from(data, "PUT")

    def delete_activity(self, activity_id: str) -> None:
        self._request("DELETE", f"{self.SCHEDULE_PATH}/{activity_id}")

    @_read_retry
    def get_player_availability(
        self, team_id: str, week_start: str
    ) -> list[PlayerWeeklyAvailability]:
        data = self._request(
            "GET",
            self.AVAILABILITY_PATH,
            params={"team_id": team_id, "week_start": week_start},
        )
        availabilities = _parse_rows(PlayerWeeklyAvailability, data, "availabilities")
        logger.info(
            "availability_loaded",
            team_id=team_id,
            week_start=week_start,
            players=len(availabilities),
        )
        return availabilities

    @_read_retry
    def list_responses(self, activity_id: str) -> list[ActivityResponse]:
        data = self._request(
            "GET", self.RESPONSES_PATH, params={"activity_id": activity_id}
        )
        return _parse_rows(ActivityResponse, data, "responses")

    def close(self) -> None:
        self.session.close()


def _parse_rows(model: type[ModelT], data: dict, field: str) -> list[ModelT]:
    """Validate every row of a list response, failing the whole read on a bad row."""
    rows = data.get(field) or []
    try:
        return [model.model_validate(row) for row in rows]
    except PydanticValidationError as e:
        raise PermanentError(f"GET response has a malformed row in '{field}': {e}") from e


def _activity_from(data: dict, method: str) -> ScheduleActivity:
    activity = data.get("activity")
    if not activity:
        raise PermanentError(f"{method} response has no 'activity' field")
    try:
        return ScheduleActivity.model_validate(activity)
    except PydanticValidationError as e:
        raise PermanentError(f"{method} response has a malformed activity: {e}") from e


def _error_detail(resp: requests.Response) -> str:
    """The backend's {"error": "..."} message, or the raw text."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.text[:200]
