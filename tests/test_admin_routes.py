import pytest
from conftest import DEFAULT_SEGMENTATION, FakeTextClient
from fastapi.testclient import TestClient

import evaluation_config
from dependencies import get_error_logger, get_pipeline, get_store
from evaluation.pipeline import EvaluationPipeline
from evaluation_models import ErrorLogEntry, EvaluationStatus
from main import app

CRON = {"Authorization": "Bearer cron-secret"}
ADMIN = {"Authorization": "Bearer admin-token"}


@pytest.fixture
def text_client():
    return FakeTextClient()


@pytest.fixture
def client(store, error_logger, text_client, monkeypatch):
    monkeypatch.setattr(evaluation_config, "CRON_SECRET", "cron-secret")
    monkeypatch.setattr(evaluation_config, "ADMIN_API_TOKEN", "admin-token")
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_error_logger] = lambda: error_logger
    app.dependency_overrides[get_pipeline] = lambda: EvaluationPipeline(store, error_logger, text_client)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_cron_requires_bearer(client):
    assert client.post("/cron/process-evaluations").status_code == 401
    assert client.post("/cron/process-evaluations", headers={"Authorization": "Bearer wrong"}).status_code == 401


def test_cron_secret_not_configured(client, monkeypatch):
    monkeypatch.setattr(evaluation_config, "CRON_SECRET", None)
    assert client.post("/cron/process-evaluations", headers=CRON).status_code == 500


def test_cron_with_nothing_queued(client, seeded):
    response = client.get("/cron/process-evaluations", headers=CRON)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "No pending evaluations"}


def test_cron_processes_queued_interview(client, store, queued):
    response = client.post("/cron/process-evaluations", headers=CRON)

    assert response.json() == {
        "success": True,
        "interviewId": queued["interview_id"],
        "recommendation": "yes",
        "score": 75,
    }
    assert store.get_interview(queued["interview_id"]).evaluation_status == EvaluationStatus.COMPLETED


def test_cron_reports_failed_evaluation(client, text_client, queued):
    text_client.segmentation = {"qa_pairs": []}
    body = client.post("/cron/process-evaluations", headers=CRON).json()

    assert body["success"] is False
    assert body["interviewId"] == queued["interview_id"]
    assert "error" in body


def test_retry_endpoint(client, store, text_client, queued):
    text_client.segmentation = {"qa_pairs": []}
    client.post("/cron/process-evaluations", headers=CRON)
    assert store.get_interview(queued["interview_id"]).evaluation_status == EvaluationStatus.FAILED

    text_client.segmentation = DEFAULT_SEGMENTATION
    response = client.post("/admin/retry-evaluation", json={"interviewId": queued["interview_id"]}, headers=ADMIN)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["interviewSlug"] == "abc123"
    assert body["result"] == {"recommendation": "yes", "score": 75}


def test_retry_endpoint_errors(client, store, queued, seeded):
    assert client.post("/admin/retry-evaluation", json={"interviewId": "x"}).status_code == 401
    assert client.post("/admin/retry-evaluation", json={"interviewId": "missing"}, headers=ADMIN).status_code == 404

    store.try_claim(queued["interview_id"])
    response = client.post("/admin/retry-evaluation", json={"interviewId": queued["interview_id"]}, headers=ADMIN)
    assert response.status_code == 409


def test_retry_endpoint_without_transcript(client, seeded):
    response = client.post("/admin/retry-evaluation", json={"interviewId": seeded["interview_id"]}, headers=ADMIN)
    assert response.status_code == 400


def test_retry_failure_returns_truncated_details(client, store, text_client, queued):
    text_client.segmentation = {"qa_pairs": []}
    client.post("/cron/process-evaluations", headers=CRON)

    response = client.post("/admin/retry-evaluation", json={"interviewId": queued["interview_id"]}, headers=ADMIN)
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Evaluation retry failed"
    assert len(body["details"]) <= 503


def test_failed_interviews_queue(client, store, text_client, queued):
    text_client.segmentation = {"qa_pairs": []}
    client.post("/cron/process-evaluations", headers=CRON)

    body = client.get("/admin/failed-interviews", headers=ADMIN).json()

    assert [i["id"] for i in body["failedInterviews"]] == [queued["interview_id"]]
    assert body["failedInterviews"][0]["evaluationStatus"] == "failed"
    assert body["failedInterviews"][0]["evaluationError"]
    assert body["summary"]["totalFailed"] == 1
    assert body["summary"]["totalUnresolvedErrors"] == len(body["unresolvedErrors"]) >= 1


def test_resolve_error(client, store):
    error_id = store.insert_error_log(ErrorLogEntry(endpoint="/x", error_type="t", error_message="m"))

    response = client.post("/admin/resolve-error", json={"errorId": error_id}, headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["error"]["resolution_notes"] == "Marked as resolved"
    assert store.list_unresolved_errors() == []

    missing = client.post("/admin/resolve-error", json={"errorId": 999}, headers=ADMIN)
    assert missing.status_code == 404
