import httpx
import pytest
from fastapi.testclient import TestClient

from medassist.api.chat import HARD_FALLBACK_REPLY
from medassist.api.deps import get_reply_pipeline
from medassist.main import app
from medassist.services.contextual_fallback_service import CONTEXTUAL_RULES
from medassist.services.knowledge_service import KNOWLEDGE_RULES
from medassist.services.model_cascade_service import DEFAULT_MODEL_ENDPOINTS
from tests.support import TEST_DISCLAIMER, RecordingTransport, failing_handler, make_pipeline

EXPECTED_CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "authorization, x-client-info, apikey, content-type",
}


class SpyPipeline:
    def __init__(self) -> None:
        self.calls = 0

    def resolve(self, request):
        self.calls += 1
        raise AssertionError("pipeline should not run")


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(failing_handler)


@pytest.fixture
def client(transport):
    app.dependency_overrides[get_reply_pipeline] = lambda: make_pipeline(transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _assert_cors(response) -> None:
    for header, value in EXPECTED_CORS.items():
        assert response.headers[header] == value


def test_options_returns_empty_preflight_without_running_pipeline():
    spy = SpyPipeline()
    app.dependency_overrides[get_reply_pipeline] = lambda: spy
    try:
        with TestClient(app) as test_client:
            response = test_client.options("/chat")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 204
    assert response.content == b""
    assert spy.calls == 0
    _assert_cors(response)


def test_post_returns_knowledge_reply(client, transport):
    response = client.post("/chat", json={"message": "How often can I take aspirin?"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {
        "reply": next(rule.response for rule in KNOWLEDGE_RULES if "aspirin" in rule.triggers)
    }
    assert transport.requests == []
    _assert_cors(response)


def test_post_hello_with_failing_models_returns_greeting(client, transport):
    response = client.post("/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json()["reply"] == CONTEXTUAL_RULES[0].response
    assert len(transport.requests) == 3


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"message": ""},
        {"message": None},
        {"text": "wrong field"},
        ["not", "an", "object"],
    ],
)
def test_post_with_invalid_body_returns_hard_fallback(client, body):
    response = client.post("/chat", json=body)

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}
    _assert_cors(response)


def test_post_with_malformed_json_returns_hard_fallback(client):
    response = client.post(
        "/chat",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}


def test_post_with_whitespace_message_returns_hard_fallback(client, transport):
    response = client.post("/chat", json={"message": "   "})

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}
    assert transport.requests == []


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "TRACE"])
def test_other_methods_return_hard_fallback(client, method):
    response = client.request(method, "/chat")

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}
    _assert_cors(response)


def test_unexpected_pipeline_error_returns_hard_fallback():
    class BrokenPipeline:
        def resolve(self, request):
            raise RuntimeError("serialization bug")

    app.dependency_overrides[get_reply_pipeline] = lambda: BrokenPipeline()
    try:
        with TestClient(app) as test_client:
            response = test_client.post("/chat", json={"message": "anything"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}


def test_model_reply_includes_disclaimer():
    transport = RecordingTransport(
        lambda request: httpx.Response(
            200, json=[{"generated_text": "Light exercise often improves energy."}]
        )
    )
    app.dependency_overrides[get_reply_pipeline] = lambda: make_pipeline(transport)
    try:
        with TestClient(app) as test_client:
            response = test_client.post("/chat", json={"message": "I am always exhausted"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json()["reply"] == (
        f"Light exercise often improves energy.{TEST_DISCLAIMER}"
    )
    assert len(transport.requests) == 1


def test_post_with_long_message_still_reaches_knowledge_base(client, transport):
    message = "What's a good dose of ibuprofen? " + "context " * 600

    response = client.post("/chat", json={"message": message})

    assert len(message) > 4000
    assert response.status_code == 200
    assert response.json() == {
        "reply": next(rule.response for rule in KNOWLEDGE_RULES if "ibuprofen" in rule.triggers)
    }
    assert transport.requests == []


def test_post_before_startup_returns_hard_fallback():
    app.dependency_overrides[get_reply_pipeline] = lambda: None
    try:
        with TestClient(app) as test_client:
            response = test_client.post("/chat", json={"message": "aspirin"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json() == {"reply": HARD_FALLBACK_REPLY}


def test_health_reports_configured_endpoints_and_root():
    with TestClient(app) as test_client:
        health = test_client.get("/health")
        root = test_client.get("/")

    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["cascade_enabled"] is True
    assert health.json()["model_endpoints"] == [
        endpoint.identifier for endpoint in DEFAULT_MODEL_ENDPOINTS
    ]
    assert "is running" in root.json()["message"]


def test_health_reports_disabled_cascade(transport):
    app.dependency_overrides[get_reply_pipeline] = lambda: make_pipeline(
        transport, model_endpoints=()
    )
    try:
        with TestClient(app) as test_client:
            health = test_client.get("/health")
    finally:
        app.dependency_overrides.clear()

    assert health.json()["status"] == "ok"
    assert health.json()["cascade_enabled"] is False
    assert health.json()["model_endpoints"] == []


def test_health_before_startup_reports_starting():
    app.dependency_overrides[get_reply_pipeline] = lambda: None
    try:
        with TestClient(app) as test_client:
            health = test_client.get("/health")
    finally:
        app.dependency_overrides.clear()

    assert health.json()["status"] == "starting"
    assert health.json()["model_endpoints"] == []


def test_lifespan_builds_pipeline_and_closes_its_client():
    with TestClient(app) as test_client:
        pipeline = app.state.reply_pipeline
        test_client.get("/health")
        assert not pipeline._cascade._client.is_closed

    assert pipeline._cascade._client.is_closed
