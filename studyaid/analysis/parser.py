"""Turns raw model replies into study guides, quizzes and file analyses.

Model output is untrusted: every public function here accepts any string
(or None) and always returns a populated object. Structured JSON is tried
first, then line-oriented heuristics, then a minimal default instance.
"""

import json
import re
from typing import Any

from studyaid.analysis.models import (
    AnalysisResult,
    ParseSource,
    Quiz,
    QuizQuestion,
    StudyGuide,
)
from studyaid.logging.logger import Log

DEFAULT_STUDY_GUIDE_TITLE = "Generated Study Guide"
DEFAULT_QUIZ_TITLE = "Generated Quiz"
DEFAULT_ANALYSIS_TYPE = "general"
DEFAULT_DIFFICULTY = "medium"

_MAX_TITLE_LENGTH = 100

_FENCED_BLOCK_RE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)
_BULLET_RE = re.compile(r"^(?:[•\-*+]|\d+[.)])\s+(.+)$")
_LABELLED_POINT_RE = re.compile(r"^(?:key\s+points?|important)\b[^:]*:?\s*(.*)$", re.IGNORECASE)
_HEADER_RE = re.compile(r"^#+\s*")
_SECTION_RE = re.compile(r"^([A-Za-z][A-Za-z ]{0,30}):\s*(.*)$")
_QUESTION_RE = re.compile(r"^(?:Q(?:uestion)?\s*(\d+)\s*[.):]?|(\d+)\s*[.)])\s*(.*)$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^(?:\(([A-Ha-h])\)|([A-Ha-h])[.)])\s*(.+)$")
_ANSWER_RE = re.compile(r"^(?:correct\s+)?answer\s*[:\-]\s*(.+)$", re.IGNORECASE)
_EXPLANATION_RE = re.compile(r"^explanation\s*[:\-]\s*(.*)$", re.IGNORECASE)
_ANSWER_LABEL_RE = re.compile(r"^(?:option\s+)?\(?([A-Ha-h])\)?(?:[.):]\s*(.*))?$", re.IGNORECASE)

_INDEX_KEYS = ("correctAnswerIndex", "correct_answer_index", "correctIndex", "correct_index")
_ANSWER_KEYS = ("correctAnswer", "correct_answer", "answer", "correct")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_study_guide(raw: str | None) -> StudyGuide:
    """Parse a study guide reply. Never raises."""
    text = _as_text(raw)
    data = _decode_object(text)
    if data is not None and _has_any(data, "title", "content", "keyPoints", "key_points", "summary"):
        return _build_study_guide(data, text)
    if text:
        Log.debug("Study guide reply is not structured, using text heuristics")
        return _study_guide_from_text(text)
    Log.warning("Empty study guide reply, returning default study guide")
    return StudyGuide(title=DEFAULT_STUDY_GUIDE_TITLE, parse_source=ParseSource.FALLBACK)


def parse_quiz(raw: str | None) -> Quiz:
    """Parse a quiz reply. Never raises; every question gets a valid answer index."""
    text = _as_text(raw)
    decoded = _decode_structured(text)
    if isinstance(decoded, list):
        decoded = {"questions": decoded}
    if isinstance(decoded, dict) and isinstance(decoded.get("questions"), list):
        return _build_quiz(decoded)
    if text:
        quiz = _quiz_from_text(text)
        if quiz.questions:
            return quiz
        Log.warning("No quiz questions found in reply, returning empty quiz")
        return Quiz(title=quiz.title, parse_source=ParseSource.FALLBACK)
    Log.warning("Empty quiz reply, returning default quiz")
    return Quiz(title=DEFAULT_QUIZ_TITLE, parse_source=ParseSource.FALLBACK)


def parse_file_analysis(raw: str | None, *, file_id: int = 0, user_id: int = 0) -> AnalysisResult:
    """Parse a per-file analysis reply. Never raises."""
    text = _as_text(raw)
    data = _decode_object(text)
    if data is not None and _has_any(
        data, "subject", "topic", "summary", "keyPoints", "key_points", "analysisType", "analysis_type"
    ):
        return _build_analysis(data, file_id=file_id, user_id=user_id)
    if text:
        Log.debug("File analysis reply is not structured, using text heuristics")
        return _analysis_from_text(text, file_id=file_id, user_id=user_id)
    Log.warning("Empty file analysis reply, returning default analysis")
    return AnalysisResult(file_id=file_id, user_id=user_id, parse_source=ParseSource.FALLBACK)


def extract_key_points(text: str | None) -> list[str]:
    """Collect bulleted, numbered and "Key Point"/"Important" lines."""
    points: list[str] = []
    for line in _as_text(text).splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        bullet = _BULLET_RE.match(stripped)
        if bullet:
            points.append(bullet.group(1).strip())
            continue
        labelled = _LABELLED_POINT_RE.match(stripped)
        if labelled and labelled.group(1).strip():
            points.append(labelled.group(1).strip())
    return points


def resolve_correct_index(answer: Any, options: list[str]) -> int | None:
    """Map a stated answer (index, letter or option text) to an option index.

    Returns None when the answer cannot be matched to any option.
    """
    if not options or answer is None or isinstance(answer, bool):
        return None
    if isinstance(answer, float) and answer.is_integer():
        answer = int(answer)
    if isinstance(answer, int):
        return _index_in_range(answer, len(options))
    if not isinstance(answer, str):
        return None

    stated = answer.strip()
    if not stated:
        return None
    if stated.isdigit():
        return _index_in_range(int(stated), len(options))

    normalized = _strip_option_label(stated).casefold()
    for index, option in enumerate(options):
        if _strip_option_label(option).casefold() == normalized:
            return index

    label = _ANSWER_LABEL_RE.match(stated)
    if label:
        index = ord(label.group(1).lower()) - ord("a")
        if index < len(options):
            return index
    return None


# ---------------------------------------------------------------------------
# Structured decoding
# ---------------------------------------------------------------------------


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)
    return raw.strip()


def _decode_structured(text: str) -> dict[str, Any] | list[Any] | None:
    """Decode the whole reply, else a fenced block, else the first {...} span."""
    if not text:
        return None
    candidates = [text]
    candidates.extend(match.group(1).strip() for match in _FENCED_BLOCK_RE.finditer(text))
    span = _first_object_span(text)
    if span is not None:
        candidates.append(span)
    for candidate in candidates:
        try:
            decoded = json.loads(candidate)
        except (json.JSONDecodeError, ValueError, RecursionError):
            continue
        if isinstance(decoded, (dict, list)):
            return decoded
    return None


def _decode_object(text: str) -> dict[str, Any] | None:
    decoded = _decode_structured(text)
    return decoded if isinstance(decoded, dict) else None


def _first_object_span(text: str) -> str | None:
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for position in range(start, len(text)):
        char = text[position]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : position + 1]
    return None


def _has_any(data: dict[str, Any], *keys: str) -> bool:
    return any(data.get(key) not in (None, "", []) for key in keys)


def _get_str(data: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return None


def _get_str_list(data: dict[str, Any], *keys: str) -> list[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return [_item_text(item) for item in value if _item_text(item)]
        if isinstance(value, str) and value.strip():
            return [value.strip()]
    return []


def _item_text(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        for key in ("text", "content", "value", "point"):
            if isinstance(item.get(key), str):
                return item[key].strip()
        return ""
    if isinstance(item, (int, float)) and not isinstance(item, bool):
        return str(item)
    return ""


def _build_study_guide(data: dict[str, Any], raw: str) -> StudyGuide:
    return StudyGuide(
        title=_get_str(data, "title") or DEFAULT_STUDY_GUIDE_TITLE,
        content=_get_str(data, "content") or raw,
        key_points=_get_str_list(data, "keyPoints", "key_points"),
        summary=_get_str(data, "summary") or "",
        subject=_get_str(data, "subject"),
        level=_get_str(data, "level"),
        parse_source=ParseSource.STRUCTURED,
    )


def _build_quiz(data: dict[str, Any]) -> Quiz:
    questions = []
    for position, item in enumerate(data["questions"]):
        question = _build_question(item, position)
        if question is not None:
            questions.append(question)
    return Quiz(
        title=_get_str(data, "title") or DEFAULT_QUIZ_TITLE,
        questions=questions,
        subject=_get_str(data, "subject"),
        level=_get_str(data, "level"),
        parse_source=ParseSource.STRUCTURED,
    )


def _build_question(raw: Any, position: int) -> QuizQuestion | None:
    if not isinstance(raw, dict):
        Log.warning(f"Skipping quiz question at index {position}: not an object")
        return None
    text = _get_str(raw, "question", "text", "prompt")
    if not text:
        Log.warning(f"Skipping quiz question at index {position}: no question text")
        return None

    options_raw = raw.get("options", raw.get("choices"))
    if isinstance(options_raw, dict):
        options = [_item_text(value) for _, value in sorted(options_raw.items())]
    else:
        options = _get_str_list(raw, "options", "choices")

    answer = next((raw[key] for key in _INDEX_KEYS if raw.get(key) is not None), None)
    if answer is None:
        answer = next((raw[key] for key in _ANSWER_KEYS if raw.get(key) is not None), None)

    return QuizQuestion(
        question=text,
        options=options,
        correct_index=_correct_index_or_first(answer, options, text),
        explanation=_get_str(raw, "explanation", "rationale") or "",
    )


def _build_analysis(data: dict[str, Any], *, file_id: int, user_id: int) -> AnalysisResult:
    return AnalysisResult(
        file_id=file_id,
        user_id=user_id,
        analysis_type=_get_str(data, "analysisType", "analysis_type") or DEFAULT_ANALYSIS_TYPE,
        subject=_get_str(data, "subject"),
        topic=_get_str(data, "topic"),
        key_points=_get_str_list(data, "keyPoints", "key_points"),
        summary=_get_str(data, "summary") or "",
        difficulty=_get_str(data, "difficulty") or DEFAULT_DIFFICULTY,
        recommendations=_get_str_list(data, "recommendations"),
        parse_source=ParseSource.STRUCTURED,
    )


# ---------------------------------------------------------------------------
# Text heuristics
# ---------------------------------------------------------------------------


def _study_guide_from_text(text: str) -> StudyGuide:
    return StudyGuide(
        title=_title_from_text(text) or DEFAULT_STUDY_GUIDE_TITLE,
        content=text,
        key_points=extract_key_points(text),
        summary=_section_text(text, "summary"),
        subject=_section_text(text, "subject") or None,
        level=_section_text(text, "level") or None,
        parse_source=ParseSource.FREEFORM,
    )


def _analysis_from_text(text: str, *, file_id: int, user_id: int) -> AnalysisResult:
    return AnalysisResult(
        file_id=file_id,
        user_id=user_id,
        subject=_section_text(text, "subject") or None,
        topic=_section_text(text, "topic") or None,
        key_points=extract_key_points(text),
        summary=_section_text(text, "summary") or text,
        difficulty=_section_text(text, "difficulty") or DEFAULT_DIFFICULTY,
        parse_source=ParseSource.FREEFORM,
    )


def _title_from_text(text: str) -> str | None:
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        title = _HEADER_RE.sub("", stripped)
        if title.lower().startswith("title:"):
            title = title[len("title:") :].strip()
        title = title.strip("*").strip()
        if title and len(title) < _MAX_TITLE_LENGTH:
            return title
        return None
    return None


def _section_text(text: str, name: str) -> str:
    """Return the body of a ``Name:`` section, up to a blank line or the next section."""
    collected: list[str] = []
    inside = False
    for line in text.splitlines():
        stripped = _HEADER_RE.sub("", line.strip()).strip("*").strip()
        section = _SECTION_RE.match(stripped)
        if inside:
            if not stripped or section is not None:
                break
            collected.append(stripped)
        elif section is not None and section.group(1).strip().lower() == name:
            inside = True
            if section.group(2).strip():
                collected.append(section.group(2).strip())
    return " ".join(collected).strip()


class _QuestionDraft:
    def __init__(self, text: str) -> None:
        self.text = text
        self.options: list[str] = []
        self.answer: str | None = None
        self.explanation: list[str] = []

    def build(self) -> QuizQuestion:
        return QuizQuestion(
            question=self.text,
            options=self.options,
            correct_index=_correct_index_or_first(self.answer, self.options, self.text),
            explanation=" ".join(self.explanation).strip(),
        )


def _quiz_from_text(text: str) -> Quiz:
    drafts: list[_QuestionDraft] = []
    current: _QuestionDraft | None = None
    in_explanation = False
    title: str | None = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        question = _QUESTION_RE.match(stripped)
        if question and question.group(3).strip():
            current = _QuestionDraft(question.group(3).strip())
            drafts.append(current)
            in_explanation = False
            continue

        if current is None:
            if title is None:
                title = _title_from_text(stripped)
            continue

        option = _OPTION_RE.match(stripped)
        if option and not in_explanation and current.answer is None:
            current.options.append(option.group(3).strip())
            continue

        answer = _ANSWER_RE.match(stripped)
        if answer:
            current.answer = answer.group(1).strip()
            in_explanation = False
            continue

        explanation = _EXPLANATION_RE.match(stripped)
        if explanation:
            in_explanation = True
            if explanation.group(1).strip():
                current.explanation.append(explanation.group(1).strip())
            continue

        if in_explanation:
            current.explanation.append(stripped)
        elif not current.options:
            current.text = f"{current.text} {stripped}"

    return Quiz(
        title=title or DEFAULT_QUIZ_TITLE,
        questions=[draft.build() for draft in drafts],
        parse_source=ParseSource.FREEFORM,
    )


# ---------------------------------------------------------------------------
# Answer helpers
# ---------------------------------------------------------------------------


def _correct_index_or_first(answer: Any, options: list[str], question: str) -> int:
    index = resolve_correct_index(answer, options)
    if index is not None:
        return index
    if options:
        Log.warning(
            f"Could not match answer {answer!r} to options for question "
            f"'{question[:60]}', defaulting to the first option"
        )
    return 0


def _index_in_range(value: int, count: int) -> int | None:
    if 0 <= value < count:
        return value
    if 1 <= value <= count:
        return value - 1
    return None


def _strip_option_label(text: str) -> str:
    option = _OPTION_RE.match(text.strip())
    if option:
        return option.group(3).strip()
    return text.strip()
