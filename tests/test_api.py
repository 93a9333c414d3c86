"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from memora.main import create_app, get_assistant_service
from memora.services.assistant_service import AssistantService
from memora.services.category_rules import CATEGORY_RULES
from memora.services.fallback_generator import DEFAULT_ANSWER
from memora.services.model_gateway import TransportError

from tests.test_assistant_service import FakeGateway


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(text="Model answer")


@pytest.fixture
def client(settings, gateway) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[get_assistant_service] = lambda: AssistantService(settings, gateway=gateway)
    return TestClient(app)


class TestMetaEndpoints:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health_degraded_without_key(self, client):
        body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["checks"] == {"api": True, "llm_configured": False}

    def test_request_id_header(self, client):
        assert client.get("/").headers["X-Request-ID"]

    def test_categories(self, client):
        body = client.get("/api/v1/categories").json()
        assert [c["identifier"] for c in body] == [c.identifier for c in CATEGORY_RULES]
        assert body[0]["instruction"]


class TestAssistantEndpoints:
    def test_classify(self, client):
        body = client.post("/api/v1/assistant/classify", json={"question": "She gets lost at night"}).json()
        assert body["categories"] == ["memory", "safety"]
        assert body["primary_category"] == "memory"

    def test_classify_no_match(self, client):
        body = client.post("/api/v1/assistant/classify", json={"question": "Hello there"}).json()
        assert body["categories"] == []
        assert body["primary_category"] is None

    def test_chat_without_key_uses_fallback(self, client, gateway):
        response = client.post("/api/v1/assistant/chat", json={"question": "Hello there"})
        assert response.status_code == 200
        assert response.json()["source"] == "fallback"
        assert gateway.prompts == []

    def test_chat_with_header_key_uses_model(self, client, gateway):
        response = client.post(
            "/api/v1/assistant/chat",
            json={"question": "Hello there"},
            headers={"X-LLM-API-Key": "sk-header"},
        )
        body = response.json()
        assert body["source"] == "model"
        assert body["answer"] == "Model answer"
        assert gateway.credentials == ["sk-header"]

    def test_chat_transport_error_still_answers(self, client, gateway):
        gateway.error = TransportError("down")
        response = client.post(
            "/api/v1/assistant/chat",
            json={"question": "How do I talk to him?", "case_text": "He has dementia."},
            headers={"X-LLM-API-Key": "sk-header"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "fallback"
        assert body["answer"].startswith("Communication techniques")

    def test_chat_with_subject_and_history(self, client, gateway):
        payload = {
            "question": "What should I try next?",
            "subject": {
                "subject_id": "p-9",
                "name": "Rosa",
                "age": 81,
                "diagnosis": "Alzheimer's disease",
                "stage": "not-a-stage",
            },
            "history": [
                {"role": "user", "content": "She was restless today.", "created_at": "2024-01-01T09:00:00Z"},
                {"role": "assistant", "content": "Try a short walk.", "created_at": "2024-01-01T09:01:00Z"},
            ],
        }
        response = client.post("/api/v1/assistant/chat", json=payload, headers={"X-LLM-API-Key": "sk"})
        assert response.status_code == 200
        prompt = gateway.prompts[0]
        assert "Stage: moderate" in prompt
        assert "assistant: Try a short walk." in prompt

    @pytest.mark.parametrize("question", ["", "   "])
    def test_chat_blank_question_gets_default(self, client, gateway, question):
        response = client.post(
            "/api/v1/assistant/chat",
            json={"question": question},
            headers={"X-LLM-API-Key": "sk-header"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == DEFAULT_ANSWER
        assert body["source"] == "fallback"
        assert gateway.prompts == []

    def test_chat_question_sent_verbatim(self, client, gateway):
        client.post(
            "/api/v1/assistant/chat",
            json={"question": "  Hello there  "},
            headers={"X-LLM-API-Key": "sk-header"},
        )
        assert gateway.prompts == ["  Hello there  "]

    def test_suggestions(self, client, nighttime_case):
        payload = {
            "subject": {"subject_id": "p-1", "name": "Pam", "stage": "moderate", "case_narrative": nighttime_case},
            "category": "caregiving_strategies",
        }
        body = client.post("/api/v1/assistant/suggestions", json=payload).json()
        assert body["category"] == "caregiving_strategies"
        assert "nighttime issues" in body["scenarios"]
        assert len(body["questions"]) == 5
        assert "reality orientation" in body["questions"][1]


class TestAppSettings:
    def test_service_built_from_app_settings(self, settings):
        settings.history_window = 2
        app = create_app(settings)
        service = app.state.assistant_service
        assert service.settings is settings
        assert service.gateway.settings is settings

    def test_chat_uses_app_history_window(self, settings, gateway):
        settings.history_window = 2
        app = create_app(settings)
        app.state.assistant_service = AssistantService(settings, gateway=gateway)
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}",
             "created_at": f"2024-01-01T09:0{i}:00Z"}
            for i in range(6)
        ]

        with TestClient(app) as client:
            client.post(
                "/api/v1/assistant/chat",
                json={"question": "Hello there", "history": history},
                headers={"X-LLM-API-Key": "sk-header"},
            )

        assert gateway.prompts[0].endswith("user: turn 4\nassistant: turn 5")
        assert gateway.closed
