import json

import httpx
import pytest

from doppler_paths.client import JobStatus, SimulationClient, SimulationServiceError, check_request
from doppler_paths.config import build_simulation_request, default_parameters


def _client(handler):
    return SimulationClient(base_url="http://sim.test/", transport=httpx.MockTransport(handler))


def _record(**overrides):
    record = build_simulation_request(default_parameters("straight"), "car")
    record.update(overrides)
    return record


def test_catalogue_endpoints():
    def handler(request):
        if request.url.path == "/api/paths":
            return httpx.Response(200, json=[{"vehicle_type": request.url.params.get("vehicle_type")}])
        return httpx.Response(200, json={"path": request.url.path})

    with _client(handler) as client:
        assert client.base_url == "http://sim.test"
        assert client.health() == {"path": "/health"}
        assert client.info() == {"path": "/api/info"}
        assert client.paths("truck") == [{"vehicle_type": "truck"}]


def test_start_simulation_posts_record():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"job_id": "abc"})

    with _client(handler) as client:
        assert client.start_simulation(_record()) == "abc"

    assert seen["method"] == "POST"
    assert seen["body"]["path"] == "straight"
    assert seen["body"]["shift_method"] == "timestretch"


@pytest.mark.parametrize("duration", [0.5, 31.0])
def test_audio_duration_range_checked_before_sending(duration):
    def handler(request):
        raise AssertionError("request should not be sent")

    with _client(handler) as client:
        with pytest.raises(ValueError):
            client.start_simulation(_record(audio_duration=duration))


def test_check_request_requires_core_keys():
    record = _record()
    del record["speed"]
    with pytest.raises(ValueError):
        check_request(record)


def test_missing_job_id_raises():
    with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(SimulationServiceError):
            client.start_simulation(_record())


def test_http_errors_are_wrapped():
    with _client(lambda request: httpx.Response(500, text="boom")) as client:
        with pytest.raises(SimulationServiceError, match="HTTP 500"):
            client.health()


def test_network_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with _client(handler) as client:
        with pytest.raises(SimulationServiceError, match="Network error"):
            client.vehicles()


def test_wait_for_job_polls_until_completed():
    responses = iter(
        [
            {"status": "processing", "progress": 10},
            {"status": "processing", "progress": 60},
            {"status": "completed", "result": {"filename": "out.wav"}},
        ]
    )
    seen = []
    sleeps = []

    with _client(lambda request: httpx.Response(200, json=next(responses))) as client:
        status = client.wait_for_job("job1", poll_interval_s=0.5, on_progress=seen.append, sleep=sleeps.append)
        assert client.download_url(status.result["filename"]) == "http://sim.test/api/download/out.wav"

    assert status.status == "completed"
    assert status.progress == 100.0
    assert [s.progress for s in seen] == [10.0, 60.0, 100.0]
    assert sleeps == [0.5, 0.5]


def test_wait_for_job_raises_on_failure():
    payload = {"status": "failed", "error": "vehicle not found"}
    with _client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(SimulationServiceError, match="vehicle not found"):
            client.wait_for_job("job1", sleep=lambda _: None)


def test_wait_for_job_gives_up_after_max_polls():
    payload = {"status": "processing", "progress": 5}
    with _client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(SimulationServiceError):
            client.wait_for_job("job1", max_polls=3, sleep=lambda _: None)


def test_job_status_from_payload():
    status = JobStatus.from_payload("j", {"status": "processing", "progress": 50})
    assert not status.is_finished
    assert status.fraction == 0.5
    assert JobStatus.from_payload("j", {"status": "failed"}).is_finished
