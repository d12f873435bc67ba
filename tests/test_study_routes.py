"""
HTTP surface tests: request validation, error responses and delegation.

Run with:
    python3 -m pytest tests/test_study_routes.py -v
"""

import random
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from main import app
from routes import study_routes
from services.content_validator import validate_and_clean_content
from services.daily_content_service import DailyContentService
from utils.exceptions import GenerationError
from utils.quota import QuotaCooldown


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def study_service(monkeypatch):
    service = MagicMock()
    service.generate_study_content_from_text = AsyncMock(
        return_value=validate_and_clean_content({"weekTitle": "Graça", "lessons": [{"title": "Dia 1"}]})
    )
    service.generate_study_content_from_pdf = AsyncMock(
        return_value=validate_and_clean_content({"weekTitle": "PDF"})
    )
    service.generate_exercises_from_topic = AsyncMock(return_value=[{"type": "reflection"}])
    service.generate_reflection_questions = AsyncMock(return_value=["Como?"])
    service.summarize_text = AsyncMock(return_value="Resumo")
    monkeypatch.setattr(study_routes, "study_service", service)
    return service


def test_root(client):
    assert client.get("/").json()["greeting"] == "Hello!"


def test_study_from_text(client, study_service, gemini_key):
    response = client.post("/api/v1/study/from-text", json={"text": "Texto base", "weekNumber": 7, "year": 2026})

    assert response.status_code == 200
    body = response.json()
    assert body["weekTitle"] == "Graça"
    assert body["lessons"][0]["title"] == "Dia 1"
    assert len(body["lessons"][0]["units"]) == 8

    study_service.generate_study_content_from_text.assert_awaited_once_with(
        "Texto base", 7, 2026, gemini_key="1", provider="gemini", openai_key="1",
    )


def test_study_from_text_validation_error(client, study_service, gemini_key):
    response = client.post("/api/v1/study/from-text", json={"text": "T", "weekNumber": 60, "year": 2026})
    assert response.status_code == 422
    study_service.generate_study_content_from_text.assert_not_awaited()


def test_not_configured(client, study_service, no_api_keys):
    response = client.post("/api/v1/study/from-text", json={"text": "T", "weekNumber": 1, "year": 2026})
    assert response.status_code == 500
    assert response.json()["error"] == "AI_NOT_CONFIGURED"


def test_generation_error_response(client, study_service, gemini_key):
    study_service.generate_study_content_from_text.side_effect = GenerationError(
        "Falha ao gerar conteudo: Resposta vazia da IA"
    )
    response = client.post("/api/v1/study/from-text", json={"text": "T", "weekNumber": 1, "year": 2026})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "GENERATION_FAILED"
    assert body["message"] == "Falha ao gerar conteudo: Resposta vazia da IA"


def test_pdf_upload_rejects_other_files(client, study_service, gemini_key):
    response = client.post(
        "/api/v1/study/from-pdf",
        files={"file": ("notas.txt", b"texto", "text/plain")},
        data={"week_number": "1", "year": "2026"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_REQUEST"


def test_pdf_upload(client, study_service, gemini_key, monkeypatch):
    monkeypatch.setattr(study_routes, "_extract_pdf_text", lambda content: "Texto do PDF")
    response = client.post(
        "/api/v1/study/from-pdf",
        files={"file": ("licao.pdf", b"%PDF-1.4", "application/pdf")},
        data={"week_number": "2", "year": "2026"},
    )
    assert response.status_code == 200
    assert response.json()["weekTitle"] == "PDF"
    study_service.generate_study_content_from_pdf.assert_awaited_once_with(
        "Texto do PDF", 2, 2026, gemini_key="1", provider="gemini", openai_key="1",
    )


def test_pdf_without_text(client, study_service, gemini_key, monkeypatch):
    monkeypatch.setattr(study_routes, "_extract_pdf_text", lambda content: "  \n ")
    response = client.post(
        "/api/v1/study/from-pdf",
        files={"file": ("vazio.pdf", b"%PDF-1.4", "application/pdf")},
        data={"week_number": "2", "year": "2026"},
    )
    assert response.status_code == 400
    study_service.generate_study_content_from_pdf.assert_not_awaited()


def test_exercises(client, study_service, gemini_key):
    response = client.post("/api/v1/study/exercises", json={"topic": "Graça", "count": 3})
    assert response.json() == {"exercises": [{"type": "reflection"}]}
    study_service.generate_exercises_from_topic.assert_awaited_once_with("Graça", 3)


def test_reflection_questions(client, study_service, gemini_key):
    response = client.post("/api/v1/study/reflection-questions", json={"text": "Texto"})
    assert response.json() == {"questions": ["Como?"]}


def test_summarize(client, study_service, gemini_key):
    response = client.post("/api/v1/study/summarize", json={"text": "Texto"})
    assert response.json() == {"summary": "Resumo"}


def test_status(client, no_api_keys):
    no_api_keys.setenv("OPENAI_API_KEY_1", "sk")
    body = client.get("/api/v1/study/status").json()
    assert body == {"configured": False, "providers": {"gemini": False, "openai": True}}


def test_daily_missions_fallback(client, monkeypatch):
    service = DailyContentService(
        cooldown=QuotaCooldown(),
        generate=AsyncMock(),
        is_configured=lambda: False,
        rng=random.Random(5),
        today=lambda: date(2026, 3, 1),
    )
    monkeypatch.setattr(study_routes, "daily_service", service)

    missions = client.get("/api/v1/daily/missions").json()["missions"]
    assert [m["type"] for m in missions] == ["easy", "medium", "hard"]
    assert {"title", "description", "xpReward", "type"} == set(missions[0])


def test_daily_quiz_unavailable(client, monkeypatch):
    service = DailyContentService(is_configured=lambda: False, generate=AsyncMock())
    monkeypatch.setattr(study_routes, "daily_service", service)
    assert client.get("/api/v1/daily/quiz").json() == {"questions": [], "available": False}


def test_daily_verse_memory_fallback(client, monkeypatch):
    service = DailyContentService(is_configured=lambda: False, generate=AsyncMock(), rng=random.Random(2))
    monkeypatch.setattr(study_routes, "daily_service", service)

    body = client.get("/api/v1/daily/verse-memory").json()
    assert set(body) == {"reference", "fullVerse", "blanks"}
    assert all(word in body["fullVerse"] for word in body["blanks"])


def test_daily_bible_character_unavailable(client, monkeypatch):
    service = DailyContentService(is_configured=lambda: False, generate=AsyncMock())
    monkeypatch.setattr(study_routes, "daily_service", service)
    assert client.get("/api/v1/daily/bible-character").json() == {"character": None}


def test_daily_timed_quiz_unavailable(client, monkeypatch):
    service = DailyContentService(is_configured=lambda: False, generate=AsyncMock())
    monkeypatch.setattr(study_routes, "daily_service", service)
    assert client.get("/api/v1/daily/timed-quiz?count=3").json() == {"questions": [], "available": False}
    assert client.get("/api/v1/daily/timed-quiz?count=50").status_code == 422
