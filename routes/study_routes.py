"""
FastAPI routes for study content generation.
Thin handlers: input validation, PDF text extraction, and delegation to
the study / daily content services.
"""

from fastapi import APIRouter, UploadFile, File, Form, Query
import io
import logging

import PyPDF2
from PyPDF2.errors import PdfReadError

from services.study_content_service import StudyContentService, is_ai_configured
from services.daily_content_service import DailyContentService
from models.study_models import (
    StudyFromTextRequest,
    ExercisesRequest,
    PracticeQuestionsRequest,
    ReflectionQuestionsRequest,
    SummarizeRequest,
)
from utils.exceptions import ValidationError, ConfigurationError
from utils.model_config import ModelConfig, DEFAULT_KEY_SLOT, DEFAULT_PROVIDER

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["study"])

# Initialize services
study_service = StudyContentService()
daily_service = DailyContentService()


def _require_provider(provider: str = DEFAULT_PROVIDER) -> None:
    if not ModelConfig.is_configured(provider):
        raise ConfigurationError(
            "IA não configurada. Configure GEMINI_API_KEY ou OPENAI_API_KEY.",
            context={"provider": provider},
        )


def _extract_pdf_text(content: bytes) -> str:
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in pdf_reader.pages]
    except PdfReadError as e:
        raise ValidationError(f"PDF inválido: {e}", error_code="INVALID_PDF")
    return "\n\n".join(pages)


# Weekly study content

@router.post("/study/from-text")
async def create_study_from_text(request: StudyFromTextRequest):
    """Generate a full week of lessons from pasted text"""
    _require_provider(request.provider)

    week = await study_service.generate_study_content_from_text(
        request.text,
        request.week_number,
        request.year,
        gemini_key=request.gemini_key,
        provider=request.provider,
        openai_key=request.openai_key,
    )
    return week.model_dump(by_alias=True, mode="json")


@router.post("/study/from-pdf")
async def create_study_from_pdf(
    file: UploadFile = File(...),
    week_number: int = Form(..., ge=1, le=53),
    year: int = Form(..., ge=2000),
    provider: str = Form(DEFAULT_PROVIDER),
    gemini_key: str = Form(DEFAULT_KEY_SLOT),
    openai_key: str = Form(DEFAULT_KEY_SLOT),
):
    """Generate a full week of lessons from an uploaded PDF"""
    if not (file.filename or "").lower().endswith(".pdf"):
        raise ValidationError("Apenas arquivos PDF são aceitos", context={"filename": file.filename})
    if provider not in ModelConfig.get_available_providers():
        raise ValidationError(f"Provedor desconhecido: {provider}")
    _require_provider(provider)

    pdf_text = _extract_pdf_text(await file.read())
    if not pdf_text.strip():
        raise ValidationError("Não foi possível extrair texto do PDF", context={"filename": file.filename})

    logger.info(f"Extracted {len(pdf_text)} chars from {file.filename}")

    week = await study_service.generate_study_content_from_pdf(
        pdf_text,
        week_number,
        year,
        gemini_key=gemini_key,
        provider=provider,
        openai_key=openai_key,
    )
    return week.model_dump(by_alias=True, mode="json")


# Exercises and questions

@router.post("/study/exercises")
async def create_exercises(request: ExercisesRequest):
    _require_provider()
    exercises = await study_service.generate_exercises_from_topic(request.topic, request.count)
    return {"exercises": exercises}


@router.post("/study/practice-questions")
async def create_practice_questions(request: PracticeQuestionsRequest):
    _require_provider()
    questions = await study_service.generate_unique_practice_questions(
        request.week_title, request.week_description, request.existing_questions
    )
    return {"questions": [q.model_dump(by_alias=True, mode="json") for q in questions]}


@router.post("/study/reflection-questions")
async def create_reflection_questions(request: ReflectionQuestionsRequest):
    _require_provider()
    questions = await study_service.generate_reflection_questions(request.text, request.count)
    return {"questions": questions}


@router.post("/study/summarize")
async def summarize(request: SummarizeRequest):
    _require_provider()
    summary = await study_service.summarize_text(request.text)
    return {"summary": summary}


@router.get("/study/status")
async def ai_status():
    """Which providers have a usable key"""
    return {
        "configured": is_ai_configured(),
        "providers": {p: ModelConfig.is_configured(p) for p in ModelConfig.get_available_providers()},
    }


# Daily content (best-effort, never fails)

@router.get("/daily/recovery-verses")
async def recovery_verses(count: int = Query(5, ge=1, le=10)):
    verses = await daily_service.generate_recovery_verses(count)
    return {"verses": [v.model_dump(by_alias=True) for v in verses]}


@router.get("/daily/missions")
async def daily_missions():
    missions = await daily_service.generate_daily_missions()
    return {"missions": [m.model_dump(by_alias=True) for m in missions]}


@router.get("/daily/bible-fact")
async def bible_fact():
    fact = await daily_service.generate_bible_fact()
    return fact.model_dump(by_alias=True)


@router.get("/daily/quiz")
async def quiz_questions(count: int = Query(5, ge=1, le=20)):
    questions = await daily_service.generate_quiz_questions(count)
    return {"questions": [q.model_dump(by_alias=True) for q in questions or []], "available": questions is not None}


@router.get("/daily/verse")
async def daily_verse():
    verse = await daily_service.generate_daily_verse()
    return {"verse": verse.model_dump(by_alias=True) if verse else None}


@router.get("/daily/verse-memory")
async def verse_memory():
    verse = await daily_service.generate_verse_memory()
    return verse.model_dump(by_alias=True)


@router.get("/daily/bible-character")
async def bible_character():
    character = await daily_service.generate_bible_character()
    return {"character": character.model_dump(by_alias=True) if character else None}


@router.get("/daily/timed-quiz")
async def timed_quiz(count: int = Query(5, ge=1, le=20)):
    questions = await daily_service.generate_timed_quiz(count)
    return {"questions": [q.model_dump(by_alias=True) for q in questions or []], "available": questions is not None}
