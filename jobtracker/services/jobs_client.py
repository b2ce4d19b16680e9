"""
HTTP client the dashboard uses to talk to the jobs REST API.

The dashboard goes through the public API (with the shared x-api-key) rather
than the database so it sees exactly what other API consumers see.
"""

import logging
import httpx
from typing import Any, Dict, List, Optional
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from jobtracker.core.config import settings
from jobtracker.models.job import JobStatus
from jobtracker.schemas.job import JobDetailResponse, JobResponse

logger = logging.getLogger(__name__)

_job_list = TypeAdapter(List[JobResponse])


class JobsApiError(Exception):
    """The jobs API failed or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JobsApiClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "JobsApiClient":
        return cls(
            base_url=settings.JOBS_API_URL,
            api_key=settings.API_KEY,
            timeout=settings.JOBS_API_TIMEOUT_SECONDS,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers={"x-api-key": self.api_key},
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Jobs API {method} {path} unreachable: {e}")
            raise JobsApiError(f"Jobs API unreachable: {e}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.text
            except (ValueError, AttributeError):
                message = response.text
            logger.warning(f"Jobs API {method} {path} returned {response.status_code}: {message}")
            raise JobsApiError(message or f"Jobs API returned {response.status_code}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Jobs API {method} {path} returned a non-JSON body")
            raise JobsApiError(f"Jobs API returned an unreadable response ({response.status_code})") from e

    @staticmethod
    def _parse(validator, payload: Any, what: str):
        """A 2xx body of the wrong shape counts as an API failure."""
        try:
            return validator(payload)
        except PydanticValidationError as e:
            logger.warning(f"Jobs API returned an unexpected {what} payload: {e}")
            raise JobsApiError(f"Jobs API returned an unexpected {what} payload") from e

    async def list_jobs(self, status: Optional[JobStatus] = None) -> List[JobResponse]:
        params = {"status": status.value} if status else None
        payload = await self._request("GET", "/jobs", params=params)
        return self._parse(_job_list.validate_python, payload, "job list")

    async def get_job(self, job_id: int) -> JobDetailResponse:
        payload = await self._request("GET", f"/jobs/{job_id}")
        return self._parse(JobDetailResponse.model_validate, payload, "job")

    async def patch_job(self, job_id: int, changes: Dict[str, Any]) -> JobResponse:
        """
        Send a partial update. `changes` goes out as-is, so a None value is an
        explicit null (e.g. clearing in_hands_date).
        """
        body = {
            key: (value.value if isinstance(value, JobStatus) else value)
            for key, value in changes.items()
        }
        if body.get("in_hands_date") is not None:
            body["in_hands_date"] = str(body["in_hands_date"])
        payload = await self._request("PATCH", f"/jobs/{job_id}", json=body)
        return self._parse(JobResponse.model_validate, payload, "job")
