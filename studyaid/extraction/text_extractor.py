from pathlib import Path
from typing import Any

from studyaid.extraction.base import BaseExtractor, normalize_text
from studyaid.extraction.exceptions import ExtractionError


class TextExtractor(BaseExtractor):
    """Plain text and markdown files."""

    def extract_text(self, path: Path) -> str:
        try:
            raw = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(f"Cannot read text file {path.name}: {exc}") from exc
        return normalize_text(raw)

    def extract_images(self, path: Path) -> list[str]:
        return []

    def extract_metadata(self, path: Path) -> dict[str, Any]:
        try:
            raw = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ExtractionError(f"Cannot read text file {path.name}: {exc}") from exc
        return {"line_count": len(raw.splitlines()), "char_count": len(raw)}
