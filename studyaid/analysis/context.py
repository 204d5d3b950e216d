import hashlib
import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceMaterial:
    """Extracted text of one uploaded file, supplied as model context."""

    id: int
    name: str
    text: str


@dataclass(frozen=True)
class ConversationTurn:
    role: str
    content: str


@dataclass(frozen=True)
class AnalysisContext:
    """Everything besides the prompt that a generation request depends on."""

    files: list[SourceMaterial] = field(default_factory=list)
    study_guides: list[str] = field(default_factory=list)
    history: list[ConversationTurn] = field(default_factory=list)
    subject: str | None = None
    level: str | None = None
    topic: str | None = None

    @property
    def file_ids(self) -> list[int]:
        return [material.id for material in self.files]

    def signature(self) -> str:
        """Stable digest of the context, used as part of cache keys."""
        payload = {
            "files": [[m.id, m.name, _digest(m.text)] for m in self.files],
            "study_guides": [_digest(guide) for guide in self.study_guides],
            "history": [[turn.role, turn.content] for turn in self.history],
            "subject": self.subject,
            "level": self.level,
            "topic": self.topic,
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False)
        return _digest(encoded)

    def render_files(self, max_chars_per_file: int = 4000) -> str:
        if not self.files:
            return "(no files)"
        blocks = []
        for material in self.files:
            text = material.text[:max_chars_per_file]
            blocks.append(f"--- {material.name} (id {material.id}) ---\n{text}")
        return "\n\n".join(blocks)

    def render_study_guides(self) -> str:
        if not self.study_guides:
            return "(none)"
        return "\n\n".join(self.study_guides)

    def render_history(self) -> str:
        if not self.history:
            return "(no previous messages)"
        return "\n".join(f"{turn.role}: {turn.content}" for turn in self.history)


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
