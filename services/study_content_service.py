"""
Core study content generation service.
Builds prompts, runs them through the provider fallback chain, parses the
JSON payload and hands it to the content validator.
"""

import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from models.study_models import (
    FillBlankContent,
    MultipleChoiceContent,
    PracticeQuestion,
    TrueFalseContent,
    UnitType,
    WeekContent,
)
from prompts.study_prompts import (
    build_practice_questions_prompt,
    build_reflection_questions_prompt,
    build_summary_prompt,
    build_topic_exercises_prompt,
    build_weekly_study_prompt,
)
from services.ai_executor import generate_plain_text, generate_with_ai
from services.content_validator import normalize_unit_content, validate_and_clean_content
from utils.exceptions import GenerationError
from utils.json_repair import safe_json_parse
from utils.model_config import AIProvider, DEFAULT_KEY_SLOT, DEFAULT_PROVIDER, ModelConfig

logger = logging.getLogger(__name__)

MAX_PRACTICE_QUESTIONS = 10
PRACTICE_QUESTION_XP = 5

_PRACTICE_CONTENT_MODELS = {
    UnitType.MULTIPLE_CHOICE.value: MultipleChoiceContent,
    UnitType.TRUE_FALSE.value: TrueFalseContent,
    UnitType.FILL_BLANK.value: FillBlankContent,
}


def clean_pdf_text(pdf_text: str) -> str:
    """Normalize line endings, collapse runs of 3+ newlines and trim"""
    text = pdf_text.replace("\r\n", "\n")
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def _failure_reason(error: Exception) -> str:
    return str(error) or "Erro desconhecido"


def _practice_question(raw: Any) -> Optional[PracticeQuestion]:
    """Normalized question worth PRACTICE_QUESTION_XP, or None when it cannot be used"""
    question_type = raw.get("type") if isinstance(raw, dict) else None
    if not isinstance(question_type, str) or question_type not in _PRACTICE_CONTENT_MODELS:
        logger.warning(f"Skipping practice question with unsupported type: {question_type!r}")
        return None

    unit = normalize_unit_content({**raw, "xpValue": PRACTICE_QUESTION_XP})
    try:
        content = _PRACTICE_CONTENT_MODELS[question_type].model_validate(unit["content"])
    except ValidationError as e:
        logger.warning(f"Skipping invalid {question_type} practice question: {e.error_count()} field error(s)")
        return None
    return PracticeQuestion(type=question_type, content=content, xp_value=PRACTICE_QUESTION_XP)


class StudyContentService:
    """Main service for study content generation"""

    def __init__(
        self,
        generate: Optional[Callable[..., Awaitable[str]]] = None,
        generate_text: Optional[Callable[..., Awaitable[str]]] = None,
    ):
        self._generate = generate or generate_with_ai
        self._generate_text = generate_text or generate_plain_text

    async def _generate_json(self, system_prompt: str, user_prompt: str, **provider_options) -> Any:
        content = await self._generate(system_prompt, user_prompt, **provider_options)
        if not content:
            raise ValueError("Resposta vazia da IA")
        return safe_json_parse(content)

    async def generate_study_content_from_text(
        self,
        text: str,
        week_number: int,
        year: int,
        gemini_key: str = DEFAULT_KEY_SLOT,
        provider: str = DEFAULT_PROVIDER,
        openai_key: str = DEFAULT_KEY_SLOT,
    ) -> WeekContent:
        """
        Generate a full week of lessons from a source text.

        Raises:
            GenerationError: "Falha ao gerar conteudo: <reason>" on any failure
        """
        system_prompt, user_prompt = build_weekly_study_prompt(text, week_number, year)

        try:
            parsed = await self._generate_json(
                system_prompt, user_prompt,
                provider=provider, gemini_key=gemini_key, openai_key=openai_key,
            )
            week = validate_and_clean_content(parsed)
        except Exception as e:
            logger.error(f"Error generating study content for week {week_number}/{year}: {e}")
            raise GenerationError(
                f"Falha ao gerar conteudo: {_failure_reason(e)}",
                context={"week_number": week_number, "year": year, "provider": provider},
            ) from e

        logger.info(f"Generated week \"{week.week_title}\" with {len(week.lessons)} lessons")
        return week

    async def generate_study_content_from_pdf(
        self,
        pdf_text: str,
        week_number: int,
        year: int,
        gemini_key: str = DEFAULT_KEY_SLOT,
        provider: str = DEFAULT_PROVIDER,
        openai_key: str = DEFAULT_KEY_SLOT,
    ) -> WeekContent:
        return await self.generate_study_content_from_text(
            clean_pdf_text(pdf_text), week_number, year,
            gemini_key=gemini_key, provider=provider, openai_key=openai_key,
        )

    async def generate_exercises_from_topic(self, topic: str, count: int = 5) -> List[Dict[str, Any]]:
        """Raw exercise units for a topic, as returned by the model"""
        system_prompt, user_prompt = build_topic_exercises_prompt(topic, count)

        try:
            parsed = await self._generate_json(system_prompt, user_prompt)
        except Exception as e:
            logger.error(f"Error generating exercises for topic '{topic}': {e}")
            raise GenerationError(f"Falha ao gerar exercicios: {_failure_reason(e)}") from e

        exercises = parsed.get("exercises") if isinstance(parsed, dict) else None
        return [ex for ex in (exercises or []) if isinstance(ex, dict)]

    async def generate_unique_practice_questions(
        self,
        week_title: str,
        week_description: str,
        existing_questions: List[str],
    ) -> List[PracticeQuestion]:
        """
        Up to 10 new questions on a week's theme, avoiding existing_questions.

        Each question is normalized like a lesson unit (multiple-choice
        answers shuffled) and worth 5 XP. Items of any other type are
        dropped.
        """
        system_prompt, user_prompt = build_practice_questions_prompt(
            week_title, week_description, existing_questions
        )

        try:
            parsed = await self._generate_json(system_prompt, user_prompt)
            raw_questions = parsed.get("questions") if isinstance(parsed, dict) else None

            questions: List[PracticeQuestion] = []
            for raw in raw_questions if isinstance(raw_questions, list) else []:
                question = _practice_question(raw)
                if question is not None:
                    questions.append(question)
        except Exception as e:
            logger.error(f"Error generating practice questions for '{week_title}': {e}")
            raise GenerationError(f"Falha ao gerar perguntas: {_failure_reason(e)}") from e

        return questions[:MAX_PRACTICE_QUESTIONS]

    async def generate_reflection_questions(self, text: str, count: int = 3) -> List[str]:
        system_prompt, user_prompt = build_reflection_questions_prompt(text, count)

        try:
            parsed = await self._generate_json(system_prompt, user_prompt)
        except Exception as e:
            logger.error(f"Error generating reflection questions: {e}")
            raise GenerationError(f"Falha ao gerar perguntas: {_failure_reason(e)}") from e

        questions = parsed.get("questions") if isinstance(parsed, dict) else None
        return [str(q) for q in questions or [] if q]

    async def summarize_text(self, text: str) -> str:
        """2-3 paragraph summary, plain text"""
        system_prompt, user_prompt = build_summary_prompt(text)

        try:
            summary = await self._generate_text(system_prompt, user_prompt)
        except Exception as e:
            logger.error(f"Error summarizing text: {e}")
            raise GenerationError(f"Falha ao resumir: {_failure_reason(e)}") from e

        return summary or ""


def is_ai_configured() -> bool:
    """True when the default Gemini key resolves"""
    return ModelConfig.is_configured(AIProvider.GEMINI.value)


# Module-level entry points backed by a default service instance
_default_service = StudyContentService()

generate_study_content_from_text = _default_service.generate_study_content_from_text
generate_study_content_from_pdf = _default_service.generate_study_content_from_pdf
generate_exercises_from_topic = _default_service.generate_exercises_from_topic
generate_unique_practice_questions = _default_service.generate_unique_practice_questions
generate_reflection_questions = _default_service.generate_reflection_questions
summarize_text = _default_service.summarize_text
