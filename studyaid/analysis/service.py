"""Cached end-to-end entry points: adapter call, parsing and persistence."""

from dataclasses import replace
from typing import Protocol

from studyaid.analysis.adapter import AnalysisClientAdapter
from studyaid.analysis.cache import AnalysisCache
from studyaid.analysis.context import AnalysisContext
from studyaid.analysis.models import (
    AnalysisOperation,
    AnalysisResult,
    ConversationReply,
    Quiz,
    StudyGuide,
)
from studyaid.analysis.parser import parse_file_analysis, parse_quiz, parse_study_guide
from studyaid.analysis.quiz_planner import estimate_quiz_plan
from studyaid.logging.logger import Log

_MAX_FILE_ANALYSIS_CHARS = 12000


class StudyMaterialStore(Protocol):
    def save_study_guide(self, user_id: int, guide: StudyGuide) -> None: ...

    def save_quiz(self, user_id: int, quiz: Quiz) -> None: ...


class AnalysisService:
    """Generates study guides, quizzes, replies and file analyses.

    Identical requests (same operation, user, prompt and context) are served
    from the cache without calling the model again.
    """

    def __init__(
        self,
        adapter: AnalysisClientAdapter,
        cache: AnalysisCache,
        repository: StudyMaterialStore | None = None,
    ) -> None:
        self._adapter = adapter
        self._cache = cache
        self._repository = repository

    def generate_study_guide(
        self,
        prompt: str,
        user_id: int,
        context: AnalysisContext | None = None,
    ) -> StudyGuide:
        _validate_request(prompt, user_id)
        context = context or AnalysisContext()

        def compute() -> StudyGuide:
            raw = self._adapter.request(AnalysisOperation.STUDY_GUIDE, prompt, context)
            guide = parse_study_guide(raw)
            guide = replace(
                guide,
                subject=guide.subject or context.subject,
                level=guide.level or context.level,
                source_file_ids=context.file_ids,
            )
            if self._repository is not None:
                self._repository.save_study_guide(user_id, guide)
            Log.info(f"Study guide '{guide.title}' generated for user {user_id}")
            return guide

        guide, _ = self._cache.get_or_compute(
            AnalysisOperation.STUDY_GUIDE, user_id, _signature(prompt, context), compute
        )
        return guide

    def generate_quiz(
        self,
        prompt: str,
        user_id: int,
        context: AnalysisContext | None = None,
    ) -> Quiz:
        _validate_request(prompt, user_id)
        context = context or AnalysisContext()

        def compute() -> Quiz:
            plan = estimate_quiz_plan(material.text for material in context.files)
            raw = self._adapter.request(
                AnalysisOperation.QUIZ,
                prompt,
                context,
                question_count=plan.question_count,
                knowledge_level=str(plan.knowledge_level).replace("_", " "),
                time_estimate_minutes=plan.time_estimate_minutes,
            )
            quiz = parse_quiz(raw)
            quiz = replace(
                quiz,
                subject=quiz.subject or context.subject,
                level=quiz.level or context.level or str(plan.knowledge_level),
                source_file_ids=context.file_ids,
            )
            if self._repository is not None:
                self._repository.save_quiz(user_id, quiz)
            Log.info(f"Quiz '{quiz.title}' with {len(quiz.questions)} questions generated for user {user_id}")
            return quiz

        quiz, _ = self._cache.get_or_compute(
            AnalysisOperation.QUIZ, user_id, _signature(prompt, context), compute
        )
        return quiz

    def generate_conversational_response(
        self,
        prompt: str,
        user_id: int,
        context: AnalysisContext | None = None,
    ) -> ConversationReply:
        _validate_request(prompt, user_id)
        context = context or AnalysisContext()

        def compute() -> ConversationReply:
            raw = self._adapter.request(AnalysisOperation.CONVERSATION, prompt, context)
            return ConversationReply(text=(raw or "").strip(), source_file_ids=context.file_ids)

        reply, _ = self._cache.get_or_compute(
            AnalysisOperation.CONVERSATION, user_id, _signature(prompt, context), compute
        )
        return reply

    def analyze_file(
        self,
        *,
        file_id: int,
        user_id: int,
        text: str,
        file_name: str = "",
        context: AnalysisContext | None = None,
    ) -> AnalysisResult:
        """Detect subject, topic and key points of one file's extracted text."""
        _validate_request(text, user_id)
        context = context or AnalysisContext()
        excerpt = text[:_MAX_FILE_ANALYSIS_CHARS]

        def compute() -> AnalysisResult:
            raw = self._adapter.request(
                AnalysisOperation.FILE_ANALYSIS, excerpt, context, file_name=file_name
            )
            result = parse_file_analysis(raw, file_id=file_id, user_id=user_id)
            if result.subject is None and context.subject:
                result = replace(result, subject=context.subject)
            return result

        signature = f"file:{file_id}|{_signature(excerpt, context)}"
        result, _ = self._cache.get_or_compute(
            AnalysisOperation.FILE_ANALYSIS, user_id, signature, compute
        )
        return result

    def invalidate_user(self, user_id: int) -> int:
        return self._cache.invalidate_user(user_id)

    def close(self) -> None:
        """Release the adapter's worker threads; pending model calls are cancelled."""
        self._adapter.close()


def _validate_request(prompt: str, user_id: int) -> None:
    if not prompt or not prompt.strip():
        raise ValueError("Prompt must not be empty")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise ValueError(f"Invalid user id: {user_id!r}")


def _signature(prompt: str, context: AnalysisContext) -> str:
    normalized = " ".join(prompt.split()).casefold()
    return f"{normalized}|{context.signature()}"
