import json
from unittest.mock import MagicMock

import pytest

from studyaid.analysis.cache import AnalysisCache
from studyaid.analysis.context import AnalysisContext, SourceMaterial
from studyaid.analysis.exceptions import AnalysisTimeoutError
from studyaid.analysis.models import AnalysisOperation, ParseSource
from studyaid.analysis.service import AnalysisService

GUIDE_REPLY = json.dumps({"title": "Cells", "content": "All about cells", "keyPoints": ["Membrane"]})
QUIZ_REPLY = json.dumps(
    {"title": "Cell Quiz", "questions": [{"question": "Q?", "options": ["a", "b"], "correctAnswer": "b"}]}
)
ANALYSIS_REPLY = json.dumps({"subject": "Biology", "topic": "Cells", "summary": "About cells."})


def _make_service(reply: str = GUIDE_REPLY) -> tuple[AnalysisService, MagicMock, MagicMock]:
    """Create an AnalysisService with a mocked adapter and repository."""
    adapter = MagicMock()
    adapter.request.return_value = reply
    repository = MagicMock()
    return AnalysisService(adapter, AnalysisCache(), repository), adapter, repository


def _make_context(**kwargs: object) -> AnalysisContext:
    return AnalysisContext(
        files=[SourceMaterial(id=3, name="cells.pdf", text="Cells have a membrane.")],
        **kwargs,  # type: ignore[arg-type]
    )


class TestStudyGuide:
    def test_generates_and_persists(self) -> None:
        service, adapter, repository = _make_service()
        context = _make_context(subject="Biology")

        guide = service.generate_study_guide("Explain cells", 1, context)

        assert guide.title == "Cells"
        assert guide.subject == "Biology"
        assert guide.source_file_ids == [3]
        adapter.request.assert_called_once_with(AnalysisOperation.STUDY_GUIDE, "Explain cells", context)
        repository.save_study_guide.assert_called_once_with(1, guide)

    def test_identical_request_served_from_cache(self) -> None:
        service, adapter, repository = _make_service()

        first = service.generate_study_guide("Explain cells", 1, _make_context())
        second = service.generate_study_guide("  explain   CELLS ", 1, _make_context())

        assert first == second
        assert adapter.request.call_count == 1
        assert repository.save_study_guide.call_count == 1

    def test_different_prompt_calls_model_again(self) -> None:
        service, adapter, _repository = _make_service()

        service.generate_study_guide("Explain cells", 1)
        service.generate_study_guide("Explain atoms", 1)

        assert adapter.request.call_count == 2

    def test_different_user_calls_model_again(self) -> None:
        service, adapter, _repository = _make_service()

        service.generate_study_guide("Explain cells", 1)
        service.generate_study_guide("Explain cells", 2)

        assert adapter.request.call_count == 2

    def test_different_context_calls_model_again(self) -> None:
        service, adapter, _repository = _make_service()

        service.generate_study_guide("Explain cells", 1, _make_context(level="college"))
        service.generate_study_guide("Explain cells", 1, _make_context(level="high_school"))

        assert adapter.request.call_count == 2

    def test_unparseable_reply_still_returns_guide(self) -> None:
        service, _adapter, _repository = _make_service(reply="")

        guide = service.generate_study_guide("Explain cells", 1)

        assert guide.title == "Generated Study Guide"
        assert guide.parse_source is ParseSource.FALLBACK

    def test_adapter_error_propagates_and_is_not_cached(self) -> None:
        service, adapter, repository = _make_service()
        adapter.request.side_effect = [AnalysisTimeoutError("slow"), GUIDE_REPLY]

        with pytest.raises(AnalysisTimeoutError):
            service.generate_study_guide("Explain cells", 1)
        guide = service.generate_study_guide("Explain cells", 1)

        assert guide.title == "Cells"
        assert adapter.request.call_count == 2
        repository.save_study_guide.assert_called_once()


class TestValidation:
    @pytest.mark.parametrize("prompt", ["", "   "])
    def test_rejects_empty_prompt(self, prompt: str) -> None:
        service, adapter, _repository = _make_service()

        with pytest.raises(ValueError, match="Prompt"):
            service.generate_study_guide(prompt, 1)
        adapter.request.assert_not_called()

    @pytest.mark.parametrize("user_id", [0, -3, True, "1"])
    def test_rejects_invalid_user(self, user_id: object) -> None:
        service, adapter, _repository = _make_service()

        with pytest.raises(ValueError, match="user id"):
            service.generate_quiz("Quiz me", user_id)  # type: ignore[arg-type]
        adapter.request.assert_not_called()


class TestQuiz:
    def test_generates_with_plan_and_persists(self) -> None:
        service, adapter, repository = _make_service(reply=QUIZ_REPLY)

        quiz = service.generate_quiz("Quiz me on cells", 1)

        assert quiz.title == "Cell Quiz"
        assert quiz.questions[0].correct_index == 1
        assert quiz.level == "high_school"
        kwargs = adapter.request.call_args.kwargs
        assert kwargs["question_count"] == 3
        assert kwargs["knowledge_level"] == "high school"
        assert kwargs["time_estimate_minutes"] == 5
        repository.save_quiz.assert_called_once_with(1, quiz)

    def test_cached(self) -> None:
        service, adapter, repository = _make_service(reply=QUIZ_REPLY)

        service.generate_quiz("Quiz me", 1)
        service.generate_quiz("Quiz me", 1)

        assert adapter.request.call_count == 1
        assert repository.save_quiz.call_count == 1


class TestConversation:
    def test_returns_reply_text(self) -> None:
        service, _adapter, _repository = _make_service(reply="  Cells are the unit of life.  ")

        reply = service.generate_conversational_response("What is a cell?", 1, _make_context())

        assert reply.text == "Cells are the unit of life."
        assert reply.source_file_ids == [3]


class TestAnalyzeFile:
    def test_parses_analysis(self) -> None:
        service, adapter, repository = _make_service(reply=ANALYSIS_REPLY)

        result = service.analyze_file(file_id=3, user_id=1, text="Cells have a membrane.", file_name="cells.pdf")

        assert result.file_id == 3
        assert result.subject == "Biology"
        assert adapter.request.call_args.kwargs["file_name"] == "cells.pdf"
        repository.save_study_guide.assert_not_called()

    def test_truncates_long_text(self) -> None:
        service, adapter, _repository = _make_service(reply=ANALYSIS_REPLY)

        service.analyze_file(file_id=3, user_id=1, text="x" * 20000)

        sent_prompt = adapter.request.call_args.args[1]
        assert len(sent_prompt) == 12000

    def test_same_text_different_file_not_shared(self) -> None:
        service, adapter, _repository = _make_service(reply=ANALYSIS_REPLY)

        service.analyze_file(file_id=3, user_id=1, text="same")
        service.analyze_file(file_id=4, user_id=1, text="same")

        assert adapter.request.call_count == 2


class TestInvalidateUser:
    def test_next_request_calls_model(self) -> None:
        service, adapter, _repository = _make_service()
        service.generate_study_guide("Explain cells", 1)

        assert service.invalidate_user(1) == 1
        service.generate_study_guide("Explain cells", 1)

        assert adapter.request.call_count == 2


class TestClose:
    def test_closes_adapter(self) -> None:
        service, adapter, _repository = _make_service()

        service.close()

        adapter.close.assert_called_once()
