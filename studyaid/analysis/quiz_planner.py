"""Sizes a quiz from the volume and difficulty of the source material."""

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

MIN_QUESTIONS = 3
MAX_QUESTIONS = 50


class KnowledgeLevel(StrEnum):
    ELEMENTARY = "elementary"
    MIDDLE_SCHOOL = "middle_school"
    HIGH_SCHOOL = "high_school"
    COLLEGE = "college"
    GRADUATE = "graduate"
    EXPERT = "expert"


@dataclass(frozen=True)
class QuizPlan:
    question_count: int
    knowledge_level: KnowledgeLevel
    time_estimate_minutes: int
    complexity: float = 0.0
    unique_concepts: int = 0


_LEVEL_INDICATORS: dict[KnowledgeLevel, tuple[str, ...]] = {
    KnowledgeLevel.ELEMENTARY: ("basic", "simple", "easy", "beginner", "introduction", "fundamental"),
    KnowledgeLevel.MIDDLE_SCHOOL: ("intermediate", "standard", "regular", "common", "typical"),
    KnowledgeLevel.HIGH_SCHOOL: ("advanced", "complex", "detailed", "comprehensive", "thorough"),
    KnowledgeLevel.COLLEGE: ("theoretical", "research", "analysis", "methodology", "framework", "paradigm"),
    KnowledgeLevel.GRADUATE: ("doctoral", "dissertation", "thesis", "peer-reviewed", "empirical", "quantitative"),
    KnowledgeLevel.EXPERT: ("cutting-edge", "novel", "innovative", "breakthrough", "pioneering", "groundbreaking"),
}

_COMPLEX_WORDS = (
    "analysis", "synthesis", "evaluation", "hypothesis", "theorem",
    "algorithm", "methodology", "framework", "paradigm", "conceptual",
)
_TECHNICAL_TERMS = (
    "function", "variable", "equation", "derivative", "integral",
    "molecule", "organism", "ecosystem", "algorithm", "database",
)
_CONCEPT_RE = re.compile(r"\b\w+(?:ion|ism|ity|ment|ness|ing|ed|ly)\b")
_WORD_RE = re.compile(r"\b\w{4,}\b")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]")


def estimate_quiz_plan(texts: Iterable[str]) -> QuizPlan:
    """Estimate question count (3..50), knowledge level and duration for a quiz."""
    documents = [text for text in texts if text]
    if not documents:
        return QuizPlan(
            question_count=MIN_QUESTIONS,
            knowledge_level=KnowledgeLevel.HIGH_SCHOOL,
            time_estimate_minutes=5,
        )

    content = " ".join(documents)
    lowered = content.lower()
    concepts = _count_unique_concepts(lowered)
    complexity = _complexity(content, lowered, len(documents))
    level = _detect_level(lowered, len(content), complexity)

    base = max(MIN_QUESTIONS, min(MAX_QUESTIONS, concepts * 0.8))
    complexity_factor = max(0.5, min(2.0, complexity / 5.0))
    volume_factor = min(1.5, len(content) / 10000.0)
    count = max(MIN_QUESTIONS, min(MAX_QUESTIONS, int(base * complexity_factor * volume_factor)))

    return QuizPlan(
        question_count=count,
        knowledge_level=level,
        time_estimate_minutes=max(1, int(count * complexity_factor)),
        complexity=complexity,
        unique_concepts=concepts,
    )


def _count_unique_concepts(lowered: str) -> int:
    concepts = {match for match in _CONCEPT_RE.findall(lowered) if 4 < len(match) < 20}
    repeated = Counter(_WORD_RE.findall(lowered))
    concepts.update(word for word, count in repeated.items() if count > 2)
    return min(len(concepts), MAX_QUESTIONS)


def _complexity(content: str, lowered: str, document_count: int) -> float:
    complex_hits = sum(_count_word(lowered, word) for word in _COMPLEX_WORDS)
    technical_hits = sum(_count_word(lowered, term) for term in _TECHNICAL_TERMS)
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if len(s.strip()) > 10]
    if sentences:
        words_per_sentence = sum(len(s.split()) for s in sentences) / len(sentences)
    else:
        words_per_sentence = 10.0
    score = (
        complex_hits * 0.5
        + technical_hits * 0.3
        + words_per_sentence / 5
        + document_count * 0.2
    )
    return round(min(10.0, score), 1)


def _detect_level(lowered: str, length: int, complexity: float) -> KnowledgeLevel:
    scores = {
        level: sum(_count_word(lowered, word) for word in words)
        for level, words in _LEVEL_INDICATORS.items()
    }
    if length > 10000:
        scores[KnowledgeLevel.COLLEGE] += 2
    if length > 50000:
        scores[KnowledgeLevel.GRADUATE] += 2
    if complexity > 7:
        scores[KnowledgeLevel.COLLEGE] += 1
    if complexity > 8:
        scores[KnowledgeLevel.GRADUATE] += 1
    # Ties resolve to the earliest level in declaration order.
    return max(scores, key=lambda level: scores[level])


def _count_word(lowered: str, word: str) -> int:
    return len(re.findall(rf"\b{re.escape(word)}\b", lowered))
