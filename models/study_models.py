"""
Pydantic models for generated study content.

Field names are snake_case in Python and camelCase on the wire
(weekTitle, correctIndex, ...), matching what the admin pages and storage
layer already expect. Units are a tagged union on "type".
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal, Union, Annotated
from enum import Enum


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Enums for type safety and validation
class LessonType(str, Enum):
    INTRO = "intro"
    STUDY = "study"
    MEDITATION = "meditation"
    CHALLENGE = "challenge"
    REVIEW = "review"


class UnitType(str, Enum):
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    MEDITATION = "meditation"
    REFLECTION = "reflection"
    VERSE = "verse"


class Stage(str, Enum):
    ESTUDE = "estude"
    MEDITE = "medite"
    RESPONDA = "responda"


QUESTION_TYPES = {UnitType.MULTIPLE_CHOICE, UnitType.TRUE_FALSE, UnitType.FILL_BLANK}
APPLICATION_TYPES = {UnitType.MEDITATION, UnitType.REFLECTION}


def infer_stage(unit_type: str) -> Stage:
    """text/verse are read, meditation/reflection are meditated, the rest are answered"""
    if unit_type in (UnitType.TEXT.value, UnitType.VERSE.value):
        return Stage.ESTUDE
    if unit_type in (UnitType.MEDITATION.value, UnitType.REFLECTION.value):
        return Stage.MEDITE
    return Stage.RESPONDA


# Unit content variants
class ReadingContent(CamelModel):
    title: str = ""
    body: str
    highlight: Optional[str] = None


class MultipleChoiceContent(CamelModel):
    question: str
    options: List[str]
    correct_index: int = Field(..., ge=0)
    explanation_correct: str
    explanation_incorrect: str
    hint: Optional[str] = None


class TrueFalseContent(CamelModel):
    statement: str
    is_true: bool
    explanation_correct: str
    explanation_incorrect: str


class FillBlankContent(CamelModel):
    question: str
    correct_answer: str
    options: List[str] = []
    explanation_correct: str
    explanation_incorrect: str
    hint: Optional[str] = None


class MeditationContent(CamelModel):
    title: str
    body: str
    meditation_duration: int = 60


class ReflectionContent(CamelModel):
    title: str
    body: str
    reflection_prompt: Optional[str] = None


# Unit variants, one per UnitType
class UnitBase(CamelModel):
    stage: Stage
    order_index: Optional[int] = None
    xp_value: int = Field(2, ge=1)


class TextUnit(UnitBase):
    type: Literal["text"] = "text"
    content: ReadingContent


class VerseUnit(UnitBase):
    type: Literal["verse"] = "verse"
    content: ReadingContent


class MultipleChoiceUnit(UnitBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    content: MultipleChoiceContent


class TrueFalseUnit(UnitBase):
    type: Literal["true_false"] = "true_false"
    content: TrueFalseContent


class FillBlankUnit(UnitBase):
    type: Literal["fill_blank"] = "fill_blank"
    content: FillBlankContent


class MeditationUnit(UnitBase):
    type: Literal["meditation"] = "meditation"
    content: MeditationContent


class ReflectionUnit(UnitBase):
    type: Literal["reflection"] = "reflection"
    content: ReflectionContent


Unit = Annotated[
    Union[
        TextUnit,
        VerseUnit,
        MultipleChoiceUnit,
        TrueFalseUnit,
        FillBlankUnit,
        MeditationUnit,
        ReflectionUnit,
    ],
    Field(discriminator="type"),
]


class Lesson(CamelModel):
    title: str
    description: str = ""
    type: LessonType = LessonType.STUDY
    xp_reward: int = Field(10, ge=1)
    estimated_minutes: int = Field(5, ge=1)
    units: List[Unit] = []


class WeekContent(CamelModel):
    """The full generated week, ready for the caller to persist"""
    week_title: str
    week_description: str
    lessons: List[Lesson] = []


class PracticeQuestion(CamelModel):
    """Extra practice question for a week the member already studied"""
    type: Literal["multiple_choice", "true_false", "fill_blank"]
    content: Union[MultipleChoiceContent, TrueFalseContent, FillBlankContent]
    xp_value: int = 5


# Daily content (best-effort jobs)
class RecoveryVerse(CamelModel):
    verse: str
    reference: str
    reflection: str = ""


class DailyVerse(CamelModel):
    verse: str
    reference: str


class DailyMission(CamelModel):
    title: str
    description: str
    xp_reward: int = 10
    type: str = "easy"


class BibleFact(CamelModel):
    fact: str
    category: str = "curiosidade"


class QuizQuestion(CamelModel):
    question: str
    options: List[str]
    correct_index: int = Field(0, ge=0)


class BibleCharacter(CamelModel):
    name: str
    description: str
    verse: str
    fact: str


class VerseMemory(CamelModel):
    """A verse to memorize; blanks are the words hidden from the member"""
    reference: str
    full_verse: str
    blanks: List[str] = Field(..., min_length=3)


# Request models
class StudyFromTextRequest(CamelModel):
    text: str = Field(..., min_length=1)
    week_number: int = Field(..., ge=1, le=53)
    year: int = Field(..., ge=2000)
    gemini_key: str = "1"
    provider: Literal["gemini", "openai"] = "gemini"
    openai_key: str = "1"


class ExercisesRequest(CamelModel):
    topic: str = Field(..., min_length=1)
    count: int = Field(5, ge=1, le=20)


class PracticeQuestionsRequest(CamelModel):
    week_title: str = Field(..., min_length=1)
    week_description: str = ""
    existing_questions: List[str] = []


class ReflectionQuestionsRequest(CamelModel):
    text: str = Field(..., min_length=1)
    count: int = Field(3, ge=1, le=10)


class SummarizeRequest(CamelModel):
    text: str = Field(..., min_length=1)
