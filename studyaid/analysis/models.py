from dataclasses import dataclass, field
from enum import StrEnum


class AnalysisOperation(StrEnum):
    STUDY_GUIDE = "study_guide"
    QUIZ = "quiz"
    CONVERSATION = "conversation"
    FILE_ANALYSIS = "file_analysis"


class ParseSource(StrEnum):
    """How a model reply was turned into a domain object."""

    STRUCTURED = "structured"
    FREEFORM = "freeform"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class StudyGuide:
    """Study guide generated from a user's notes."""

    title: str
    content: str = ""
    key_points: list[str] = field(default_factory=list)
    summary: str = ""
    subject: str | None = None
    level: str | None = None
    source_file_ids: list[int] = field(default_factory=list)
    parse_source: ParseSource = ParseSource.STRUCTURED


@dataclass(frozen=True)
class QuizQuestion:
    """Multiple-choice question.

    ``correct_index`` always points into ``options`` (0 when there are none).
    """

    question: str
    options: list[str] = field(default_factory=list)
    correct_index: int = 0
    explanation: str = ""


@dataclass(frozen=True)
class Quiz:
    title: str
    questions: list[QuizQuestion] = field(default_factory=list)
    subject: str | None = None
    level: str | None = None
    source_file_ids: list[int] = field(default_factory=list)
    parse_source: ParseSource = ParseSource.STRUCTURED


@dataclass(frozen=True)
class AnalysisResult:
    """Per-file analysis: detected subject, topic and study hints."""

    file_id: int
    user_id: int
    analysis_type: str = "general"
    subject: str | None = None
    topic: str | None = None
    key_points: list[str] = field(default_factory=list)
    summary: str = ""
    difficulty: str = "medium"
    recommendations: list[str] = field(default_factory=list)
    parse_source: ParseSource = ParseSource.STRUCTURED


@dataclass(frozen=True)
class ConversationReply:
    text: str
    source_file_ids: list[int] = field(default_factory=list)
