from fastapi.testclient import TestClient

from api import dependencies
from api.main import app
from conftest import FakeProvider
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient

NOTES = "I need to buy groceries: milk, eggs, bread. Also, call mom by end of day."


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    client = TestClient(app)

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    body = r.text
    assert "mindlyst_requests_total" in body
    assert "mindlyst_request_latency_seconds" in body
    assert "mindlyst_pending_submissions" in body


def test_extract_increments_request_counter() -> None:
    extractor = TaskExtractor(LLMClient(FakeProvider('[{"title":"Buy groceries"}]')))
    app.dependency_overrides[dependencies.get_task_extractor] = lambda: extractor
    try:
        client = TestClient(app)
        assert client.post("/extract", json={"text": NOTES}).status_code == 200
        body = client.get("/metrics").text
    finally:
        app.dependency_overrides.clear()

    # We avoid parsing because Prometheus text parsers can be fragile across environments.
    assert any(
        line.startswith('mindlyst_requests_total{endpoint="/extract",status="extracted"}')
        for line in body.splitlines()
    )


def test_health_without_database() -> None:
    r = TestClient(app).get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["database"] == {"status": "disabled"}
    assert body["pending_submissions"] == 0
