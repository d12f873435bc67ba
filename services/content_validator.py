"""
Normalization and validation of generated study content.

Models return loosely shaped JSON: legacy field names, letters instead of
indexes, blanks without context, duplicated options, too few questions.
This module turns that into the strict WeekContent / Unit shapes and pads
lessons up to the structural minimums. Nothing here raises on bad content;
units are repaired, defaulted, or dropped with a log line.
"""

import logging
import random
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import TypeAdapter, ValidationError

from models.study_models import (
    APPLICATION_TYPES,
    QUESTION_TYPES,
    LessonType,
    Stage,
    Unit,
    UnitType,
    WeekContent,
    infer_stage,
)

logger = logging.getLogger(__name__)

MIN_ESTUDE_SCREENS = 6
MIN_MEDITE_APPLICATIONS = 3
MIN_RESPONDA_QUESTIONS = 5
REQUIRED_OPTION_COUNT = 4
MIN_FILL_BLANK_CONTEXT = 20
MIN_FILL_BLANK_STEM = 15

BLANK = "___"
DEFAULT_OPTIONS = ["Opcao A", "Opcao B", "Opcao C", "Opcao D"]

_INSTRUCTION_PREFIXES = [
    re.compile(r'^complete:?\s*', re.IGNORECASE),
    re.compile(r'^preencha:?\s*', re.IGNORECASE),
    re.compile(r'^a resposta e:?\s*', re.IGNORECASE),
]

APPLICATION_TEMPLATES = [
    {
        "title": "Aplicacao na Vida Diaria",
        "body": "Como posso aplicar esse ensinamento hoje em minhas decisoes e relacionamentos?",
        "reflectionPrompt": "Pense em uma situacao recente onde esse principio poderia ter guiado suas acoes.",
    },
    {
        "title": "Oracao de Compromisso",
        "body": "Faca uma oracao pedindo a Deus sabedoria para viver esse ensinamento no seu cotidiano.",
        "reflectionPrompt": "Dedique um momento para orar e se comprometer com essa verdade.",
    },
    {
        "title": "Pratica Semanal",
        "body": "Escolha uma acao concreta para praticar esse ensinamento durante esta semana.",
        "reflectionPrompt": "Qual sera sua acao pratica para viver esse principio?",
    },
]

# Multiple-choice templates list the correct option first; it is shuffled on insertion
QUESTION_TEMPLATES = [
    {
        "type": UnitType.TRUE_FALSE.value,
        "content": {
            "statement": "Este ensinamento nos ajuda a viver de forma mais alinhada com a vontade de Deus.",
            "isTrue": True,
            "explanationCorrect": "Correto! Os ensinamentos biblicos sempre nos guiam para a vontade de Deus.",
            "explanationIncorrect": "A resposta correta e Verdadeiro. Os ensinamentos biblicos nos direcionam a Deus.",
        },
    },
    {
        "type": UnitType.TRUE_FALSE.value,
        "content": {
            "statement": "Os principios biblicos se aplicam somente a vida espiritual, nao afetando decisoes praticas do dia a dia.",
            "isTrue": False,
            "explanationCorrect": "Correto! Os principios biblicos se aplicam a toda nossa vida, incluindo decisoes praticas.",
            "explanationIncorrect": "A resposta correta e Falso. A Biblia orienta todas as areas da nossa vida.",
        },
    },
    {
        "type": UnitType.MULTIPLE_CHOICE.value,
        "content": {
            "question": "Qual atitude reflete melhor a aplicacao deste ensinamento?",
            "options": [
                "Refletir sobre o texto e buscar aplicacao pratica",
                "Compartilhar o texto com outros antes de aplicar",
                "Memorizar o texto para usar no futuro",
                "Estudar comentarios sobre o texto primeiro",
            ],
            "correctIndex": 0,
            "explanationCorrect": "Isso mesmo! A reflexao e aplicacao pratica sao fundamentais.",
            "explanationIncorrect": "A resposta correta e refletir e aplicar. Embora outras opcoes sejam boas, a aplicacao pratica e essencial.",
        },
    },
    {
        "type": UnitType.TRUE_FALSE.value,
        "content": {
            "statement": "A meditacao na Palavra de Deus requer um ambiente perfeito e silencioso para ser eficaz.",
            "isTrue": False,
            "explanationCorrect": "Correto! Podemos meditar na Palavra em qualquer lugar, mesmo em ambientes imperfeitos.",
            "explanationIncorrect": "A resposta correta e Falso. A meditacao biblica nao depende de condicoes perfeitas.",
        },
    },
    {
        "type": UnitType.MULTIPLE_CHOICE.value,
        "content": {
            "question": "Como a fe biblica se relaciona com os desafios diarios?",
            "options": [
                "A fe nos fortalece para enfrentar dificuldades com esperanca",
                "A fe nos livra de todos os problemas automaticamente",
                "A fe e apenas para momentos de culto e oracao",
                "A fe substitui a necessidade de agir praticamente",
            ],
            "correctIndex": 0,
            "explanationCorrect": "Correto! A fe nos fortalece, mas nao nos isenta dos desafios.",
            "explanationIncorrect": "A resposta correta e que a fe nos fortalece para enfrentar dificuldades com esperanca.",
        },
    },
]


# ================================================================
# Small coercion helpers
# ================================================================

def _first_text(*values: Any, default: str = "") -> str:
    """First truthy value as a string, or the default"""
    for value in values:
        if value:
            return value if isinstance(value, str) else str(value)
    return default


def _optional_text(value: Any) -> Optional[str]:
    return _first_text(value) or None


def _is_member(value: Any, enum_type: Type[Enum]) -> bool:
    """String value of one of the enum's members (lists, dicts etc. never are)"""
    return isinstance(value, str) and value in {member.value for member in enum_type}


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number >= 1 else default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _shuffled(items: List[Any], rng: Optional[random.Random] = None) -> List[Any]:
    """Fisher-Yates shuffle of a copy"""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def _fill_explanations(content: Dict[str, Any], correct: str, incorrect: str) -> None:
    explanation = content.pop("explanation", None)
    if not content.get("explanationCorrect") and explanation:
        content["explanationCorrect"] = str(explanation)
        content["explanationIncorrect"] = str(explanation)
    content["explanationCorrect"] = _first_text(content.get("explanationCorrect"), default=correct)
    content["explanationIncorrect"] = _first_text(content.get("explanationIncorrect"), default=incorrect)


# ================================================================
# Option shuffling
# ================================================================

def randomize_multiple_choice_answer(
    content: Dict[str, Any],
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    """
    Shuffle the options of a multiple-choice content dict and move
    correctIndex along with the correct text.

    An out-of-range correctIndex never raises: the options are kept and
    correctIndex is reset to 0.
    """
    options = content.get("options")
    if not isinstance(options, list) or len(options) < 2:
        return content

    correct_index = _to_int(content.get("correctIndex"), 0)
    if correct_index < 0 or correct_index >= len(options) or not options[correct_index]:
        logger.warning(
            f"[randomize_multiple_choice_answer] correctIndex {content.get('correctIndex')} "
            f"is out of bounds for {len(options)} options"
        )
        return {**content, "correctIndex": 0}

    correct_answer = options[correct_index]
    shuffled_options = _shuffled(options, rng)

    return {
        **content,
        "options": shuffled_options,
        "correctIndex": shuffled_options.index(correct_answer),
    }


# ================================================================
# Per-type content normalizers
# ================================================================

def _normalize_text(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    content["body"] = _first_text(content.get("body"), content.get("text"), default="Conteudo nao disponivel")
    content["title"] = _first_text(content.get("title"))
    content["highlight"] = _optional_text(content.get("highlight"))
    content.pop("text", None)
    return content


def _normalize_verse(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    content["body"] = _first_text(
        content.get("body"), content.get("verseText"), content.get("text"),
        default="Versiculo nao disponivel",
    )
    content["highlight"] = _first_text(content.get("highlight"), content.get("verseReference")) or None
    content["title"] = _first_text(content.get("title"), default="Versiculo")
    content.pop("text", None)
    content.pop("verseText", None)
    return content


def _parse_correct_answer(answer: Any) -> int:
    """Letter (A-D), 1-based number, or 0 when unreadable"""
    value = str(answer).strip().upper()
    parsed = 0
    if re.fullmatch(r'[A-D]', value):
        parsed = ord(value) - ord('A')
    elif value.isdigit():
        number = int(value)
        parsed = number - 1 if number >= 1 else number
    elif isinstance(answer, (int, float)) and not isinstance(answer, bool):
        parsed = _to_int(answer - 1 if answer >= 1 else answer)
    return max(parsed, 0)


def _normalize_multiple_choice(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    options = content.get("options")
    if not isinstance(options, list) or not options:
        options = list(DEFAULT_OPTIONS)
    options = [("" if opt is None else str(opt)).strip() for opt in options]
    options = [opt for opt in options if opt]
    if len(options) < 2:
        options = list(DEFAULT_OPTIONS)
    content["options"] = options
    option_count = len(options)

    if content.get("correctAnswer") is not None and content.get("correctIndex") is None:
        content["correctIndex"] = min(_parse_correct_answer(content["correctAnswer"]), option_count - 1)

    correct_index = _to_int(content.get("correctIndex"), 0)
    content["correctIndex"] = max(0, min(correct_index, option_count - 1))

    content["question"] = _first_text(content.get("question"), default="Pergunta nao disponivel")
    content["hint"] = _optional_text(content.get("hint"))
    _fill_explanations(content, "Correto!", "Incorreto. Tente novamente.")
    content.pop("correctAnswer", None)

    return randomize_multiple_choice_answer(content, rng)


def _normalize_true_false(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    content["statement"] = _first_text(
        content.get("statement"), content.get("question"), default="Afirmacao nao disponivel",
    )

    is_true = content.get("isTrue")
    if is_true is None:
        answer = content.get("correctAnswer")
        # TODO: flag items with no readable answer for regeneration instead of defaulting to True
        is_true = (answer is True or answer == "true") if answer is not None else True
    elif isinstance(is_true, str):
        is_true = is_true.strip().lower() == "true"
    content["isTrue"] = bool(is_true)

    _fill_explanations(content, "Correto!", "Incorreto. Tente novamente.")
    content.pop("question", None)
    content.pop("correctAnswer", None)
    return content


def _answer_hint(answer: str) -> str:
    """First letter plus one spaced placeholder per remaining letter"""
    if not answer:
        return "..."
    first_letter = answer[0].upper()
    if len(answer) > 3:
        return first_letter + " _" * (len(answer) - 1)
    return f"{first_letter}..."


def _single_blank(question: str) -> str:
    if BLANK not in question:
        return question.rstrip() + " " + BLANK
    first = question.index(BLANK) + len(BLANK)
    return question[:first] + question[first:].replace(BLANK, "...")


def _normalize_fill_blank(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    raw_answer = content.get("correctAnswer")
    answer = "" if raw_answer is None or raw_answer is False else str(raw_answer).strip()
    if not answer:
        answer = "palavra"
        logger.warning("[AI Validation] fill_blank missing correctAnswer, using default")
    content["correctAnswer"] = answer

    cleaned = _first_text(content.get("question"))
    for prefix in _INSTRUCTION_PREFIXES:
        cleaned = prefix.sub('', cleaned)
    cleaned = cleaned.strip()

    without_blanks = cleaned.replace(BLANK, "").strip()
    has_context = (
        len(without_blanks) >= MIN_FILL_BLANK_STEM
        and " " in without_blanks
        and cleaned not in (BLANK, "")
    )
    if has_context:
        question = cleaned
    else:
        question = f"Complete a frase com a palavra correta ({_answer_hint(answer)}): {BLANK}"
        logger.warning("[AI Validation] fill_blank had insufficient context, created fallback question")
    content["question"] = _single_blank(question)
    content["hint"] = _optional_text(content.get("hint"))

    _fill_explanations(
        content,
        "Correto! Muito bem!",
        f'Incorreto. A resposta correta e: "{answer}".',
    )

    options = content.get("options")
    if isinstance(options, list):
        options = [("" if opt is None else str(opt)).strip() for opt in options]
        content["options"] = _shuffled(options, rng) if len(options) >= 2 else options
    else:
        content["options"] = []
    return content


def _normalize_meditation(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    content["body"] = _first_text(
        content.get("body"), content.get("meditationGuide"), content.get("text"),
        default="Guia de meditacao nao disponivel",
    )
    content["meditationDuration"] = _positive_int(content.get("meditationDuration"), 60)
    content["title"] = _first_text(content.get("title"), default="Meditacao")
    content.pop("text", None)
    content.pop("meditationGuide", None)
    return content


def _normalize_reflection(content: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    content["body"] = _first_text(
        content.get("body"), content.get("reflectionPrompt"), content.get("text"),
        default="Reflexao nao disponivel",
    )
    content["title"] = _first_text(content.get("title"), default="Reflexao")
    if content.get("reflectionPrompt") is not None:
        content["reflectionPrompt"] = str(content["reflectionPrompt"])
    content.pop("text", None)
    return content


ContentNormalizer = Callable[[Dict[str, Any], Optional[random.Random]], Dict[str, Any]]

_CONTENT_NORMALIZERS: Dict[UnitType, ContentNormalizer] = {
    UnitType.TEXT: _normalize_text,
    UnitType.VERSE: _normalize_verse,
    UnitType.MULTIPLE_CHOICE: _normalize_multiple_choice,
    UnitType.TRUE_FALSE: _normalize_true_false,
    UnitType.FILL_BLANK: _normalize_fill_blank,
    UnitType.MEDITATION: _normalize_meditation,
    UnitType.REFLECTION: _normalize_reflection,
}

_unhandled = set(UnitType) - set(_CONTENT_NORMALIZERS)
if _unhandled:
    raise RuntimeError(f"No content normalizer for unit types: {sorted(t.value for t in _unhandled)}")


def normalize_unit_content(unit: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Normalize the content of one unit according to its type.

    Returns a new unit dict; units with an unknown type are returned as-is.
    """
    unit = dict(unit)
    content = unit.get("content")
    content = dict(content) if isinstance(content, dict) else {}

    if not _is_member(unit.get("type"), UnitType):
        unit["content"] = content
        return unit

    normalizer = _CONTENT_NORMALIZERS[UnitType(unit["type"])]
    unit["content"] = normalizer(content, rng)
    return unit


def prepare_unit(unit: Any, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Unit-level defaults (type, content, xpValue, stage) followed by content normalization"""
    unit = dict(unit) if isinstance(unit, dict) else {}

    if not _is_member(unit.get("type"), UnitType):
        unit["type"] = UnitType.TEXT.value
    if not isinstance(unit.get("content"), dict) or not unit["content"]:
        unit["content"] = {"body": "Conteudo nao disponivel"}
    unit["xpValue"] = _positive_int(unit.get("xpValue"), 2)

    if not _is_member(unit.get("stage"), Stage):
        unit["stage"] = infer_stage(unit["type"]).value

    if unit.get("orderIndex") is not None:
        unit["orderIndex"] = _to_int(unit["orderIndex"], 0)

    return normalize_unit_content(unit, rng)


# ================================================================
# Lesson-level filtering and minimums
# ================================================================

def _is_well_formed_question(unit: Dict[str, Any]) -> bool:
    """Multiple-choice and fill-blank units need 4 unique options and a consistent answer"""
    unit_type = unit["type"]
    if unit_type not in (UnitType.MULTIPLE_CHOICE.value, UnitType.FILL_BLANK.value):
        return True

    content = unit.get("content") or {}
    options = content.get("options")

    if not isinstance(options, list) or len(options) != REQUIRED_OPTION_COUNT:
        logger.error(
            f"[AI Validation] Removing {unit_type} question without {REQUIRED_OPTION_COUNT} options: "
            f"\"{content.get('question') or 'no question'}\""
        )
        return False

    normalized_options = [str(opt).lower().strip() for opt in options]
    if len(set(normalized_options)) != REQUIRED_OPTION_COUNT:
        logger.error(f"[AI Validation] Removing {unit_type} question with duplicate options: {options}")
        return False

    if unit_type == UnitType.MULTIPLE_CHOICE.value:
        correct_index = content.get("correctIndex")
        if not isinstance(correct_index, int) or not 0 <= correct_index < REQUIRED_OPTION_COUNT:
            logger.error(f"[AI Validation] Removing multiple_choice question with invalid correctIndex: {correct_index}")
            return False
        return True

    correct = str(content.get("correctAnswer") or "").lower().strip()
    if correct not in normalized_options:
        logger.error(f"[AI Validation] Removing fill_blank - correctAnswer \"{content.get('correctAnswer')}\" not in options")
        return False

    question = content.get("question") or ""
    if len(question.replace(BLANK, "").strip()) < MIN_FILL_BLANK_CONTEXT:
        logger.warning(f"[AI Validation] Removing contextless fill_blank: \"{question}\"")
        return False

    return True


_UNIT_ADAPTER: TypeAdapter = TypeAdapter(Unit)


def _max_order_index(units: List[Dict[str, Any]]) -> int:
    return max([u.get("orderIndex") or 0 for u in units] + [0])


def _template_question(template: Dict[str, Any], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Fresh copy of a stock question, multiple-choice options re-shuffled"""
    content = dict(template["content"])
    if template["type"] == UnitType.MULTIPLE_CHOICE.value:
        content = randomize_multiple_choice_answer(content, rng)
    return content


def _pad_lesson(lesson: Dict[str, Any], rng: Optional[random.Random] = None) -> None:
    units = lesson["units"]
    title = lesson["title"]

    estude_count = sum(1 for u in units if u["stage"] == Stage.ESTUDE.value)
    medite_count = sum(
        1 for u in units
        if u["stage"] == Stage.MEDITE.value and UnitType(u["type"]) in APPLICATION_TYPES
    )
    responda_count = sum(
        1 for u in units
        if u["stage"] == Stage.RESPONDA.value and UnitType(u["type"]) in QUESTION_TYPES
    )

    if medite_count < MIN_MEDITE_APPLICATIONS:
        logger.warning(
            f"[AI Validation] Lesson \"{title}\" has only {medite_count} applications. "
            f"Adding {MIN_MEDITE_APPLICATIONS - medite_count} more."
        )
        base_index = _max_order_index(units)
        for i in range(medite_count, MIN_MEDITE_APPLICATIONS):
            units.append({
                "type": UnitType.REFLECTION.value,
                "stage": Stage.MEDITE.value,
                "orderIndex": base_index + i + 1,
                "content": dict(APPLICATION_TEMPLATES[i % len(APPLICATION_TEMPLATES)]),
                "xpValue": 3,
            })

    if responda_count < MIN_RESPONDA_QUESTIONS:
        logger.warning(
            f"[AI Validation] Lesson \"{title}\" has only {responda_count} questions. "
            f"Adding {MIN_RESPONDA_QUESTIONS - responda_count} more."
        )
        base_index = _max_order_index(units)
        for i in range(responda_count, MIN_RESPONDA_QUESTIONS):
            template = QUESTION_TEMPLATES[i % len(QUESTION_TEMPLATES)]
            units.append({
                "type": template["type"],
                "stage": Stage.RESPONDA.value,
                "orderIndex": base_index + 10 + i,
                "content": _template_question(template, rng),
                "xpValue": 5,
            })

    if estude_count < MIN_ESTUDE_SCREENS:
        logger.warning(
            f"[AI Validation] Lesson \"{title}\" has only {estude_count} study screens "
            f"(minimum {MIN_ESTUDE_SCREENS} required)"
        )


def _is_valid_unit(unit: Dict[str, Any]) -> bool:
    try:
        _UNIT_ADAPTER.validate_python(unit)
    except ValidationError as e:
        logger.error(f"[AI Validation] Removing invalid {unit.get('type')} unit: {e.error_count()} field error(s)")
        return False
    return True


def _clean_lesson(lesson: Any, index: int, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    lesson = dict(lesson) if isinstance(lesson, dict) else {}

    if not _is_member(lesson.get("type"), LessonType):
        lesson["type"] = LessonType.STUDY.value
    lesson["title"] = _first_text(lesson.get("title"), default=f"Licao {index + 1}")
    lesson["description"] = _first_text(lesson.get("description"))
    lesson["xpReward"] = _positive_int(lesson.get("xpReward"), 10)
    lesson["estimatedMinutes"] = _positive_int(lesson.get("estimatedMinutes"), 5)

    units = lesson.get("units")
    if not isinstance(units, list):
        units = []
    units = [prepare_unit(unit, rng) for unit in units]
    lesson["units"] = [unit for unit in units if _is_well_formed_question(unit) and _is_valid_unit(unit)]

    _pad_lesson(lesson, rng)
    return lesson


def validate_and_clean_content(content: Any, rng: Optional[random.Random] = None) -> WeekContent:
    """
    Turn a parsed model response into a WeekContent.

    Per lesson: unit defaults and normalization, removal of malformed
    multiple-choice / fill-blank units, then padding up to 3 medite
    applications and 5 responda questions. Study screens are never removed.
    """
    if not isinstance(content, dict):
        logger.warning(f"[AI Validation] Expected a JSON object, got {type(content).__name__}")
        content = {}
    content = dict(content)

    content["weekTitle"] = _first_text(content.get("weekTitle"), default="Semana de Estudos")
    content["weekDescription"] = _first_text(
        content.get("weekDescription"), default="Conteudo semanal de estudos biblicos",
    )

    lessons = content.get("lessons")
    if not isinstance(lessons, list):
        lessons = []
    content["lessons"] = [_clean_lesson(lesson, i, rng) for i, lesson in enumerate(lessons)]

    return WeekContent.model_validate(content)
