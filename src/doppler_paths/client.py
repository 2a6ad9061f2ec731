"""
HTTP client for the remote Doppler simulation service.

The service takes a flat simulation request, runs the audio synthesis as a
background job and serves the finished audio file. This client covers the
calls the editor needs:
- health and catalogue lookups (vehicles, paths)
- job submission and status polling
- download URLs for finished results
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import httpx

from .settings import get_settings

logger = logging.getLogger(__name__)


HEALTH = "/health"
INFO = "/api/info"
VEHICLES = "/api/vehicles"
PATHS = "/api/paths"
SIMULATE = "/api/simulate"
JOB_STATUS = "/api/job"
DOWNLOAD = "/api/download"

# Range accepted by the service for the synthesised clip length.
AUDIO_DURATION_RANGE: Tuple[float, float] = (1.0, 30.0)


class SimulationServiceError(RuntimeError):
    """Raised when the service is unreachable or answers with an error."""


@dataclass
class JobStatus:
    """Snapshot of a simulation job.

    Attributes:
        job_id: Identifier returned on submission
        status: ``processing``, ``completed`` or ``failed``
        progress: Service-reported progress in percent
        result: Result descriptor once completed (holds ``filename``)
        error: Failure message once failed
    """
    job_id: str
    status: str
    progress: float = 0.0
    result: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in ("completed", "failed")

    @property
    def fraction(self) -> float:
        return max(0.0, min(1.0, self.progress / 100.0))

    @classmethod
    def from_payload(cls, job_id: str, payload: Mapping[str, Any]) -> "JobStatus":
        status = str(payload.get("status", "processing"))
        progress = payload.get("progress")
        if status == "completed":
            progress = 100.0
        return cls(
            job_id=job_id,
            status=status,
            progress=float(progress) if isinstance(progress, (int, float)) else 0.0,
            result=dict(payload.get("result") or {}),
            error=payload.get("error"),
        )


def check_request(record: Mapping[str, Any]) -> None:
    """Reject records the service would refuse before sending them."""
    for key in ("path", "vehicle_type", "speed", "audio_duration"):
        if key not in record:
            raise ValueError(f"Simulation request is missing '{key}'")
    low, high = AUDIO_DURATION_RANGE
    duration = float(record["audio_duration"])
    if duration < low:
        raise ValueError(f"audio_duration must be at least {low:g}")
    if duration > high:
        raise ValueError(f"audio_duration must be at most {high:g}")


class SimulationClient:
    """Synchronous client for the simulation service.

    Args:
        base_url: Service root; defaults to the ``DOPPLER_API_URL`` setting
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_s
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SimulationClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SimulationServiceError(
                f"HTTP {exc.response.status_code} from {url}: {exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise SimulationServiceError(f"Network error calling {url}: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise SimulationServiceError(f"Invalid JSON from {url}") from exc

    # Catalogue ---------------------------------------------------------

    def health(self) -> Dict[str, Any]:
        return self._request("GET", HEALTH)

    def info(self) -> Dict[str, Any]:
        return self._request("GET", INFO)

    def vehicles(self) -> List[Dict[str, Any]]:
        return self._request("GET", VEHICLES)

    def paths(self, vehicle_type: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"vehicle_type": vehicle_type} if vehicle_type else None
        return self._request("GET", PATHS, params=params)

    # Jobs --------------------------------------------------------------

    def start_simulation(self, record: Mapping[str, Any]) -> str:
        """Submit a simulation request and return the job id."""
        check_request(record)
        payload = self._request("POST", SIMULATE, json=dict(record))
        job_id = payload.get("job_id") if isinstance(payload, Mapping) else None
        if not job_id:
            raise SimulationServiceError("Simulation service did not return a job id")
        logger.info("Submitted %s simulation as job %s", record.get("path"), job_id)
        return str(job_id)

    def job_status(self, job_id: str) -> JobStatus:
        payload = self._request("GET", f"{JOB_STATUS}/{job_id}")
        return JobStatus.from_payload(job_id, payload)

    def wait_for_job(
        self,
        job_id: str,
        poll_interval_s: Optional[float] = None,
        on_progress: Optional[Callable[[JobStatus], None]] = None,
        max_polls: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> JobStatus:
        """
        Poll a job until it completes or fails.

        Raises SimulationServiceError when the job fails or ``max_polls``
        is exhausted.
        """
        interval = poll_interval_s if poll_interval_s is not None else get_settings().polling_interval_s
        polls = 0
        while True:
            status = self.job_status(job_id)
            polls += 1
            if on_progress is not None:
                on_progress(status)
            if status.status == "completed":
                return status
            if status.status == "failed":
                raise SimulationServiceError(status.error or "Unknown error occurred")
            if max_polls is not None and polls >= max_polls:
                raise SimulationServiceError(f"Job {job_id} still {status.status} after {polls} polls")
            logger.debug("Job %s %s (%.0f%%)", job_id, status.status, status.progress)
            sleep(interval)

    def download_url(self, filename: str) -> str:
        return f"{self.base_url}{DOWNLOAD}/{filename}"
