from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class BaseExtractor(ABC):
    """Contract for all content extractors.

    Every extractor produces text, image references and format metadata for a
    file on disk. Each call may fail independently with ``ExtractionError``.
    """

    @abstractmethod
    def extract_text(self, path: Path) -> str:
        """Extract plain text from the file.

        Raises:
            ExtractionError: if the file cannot be read.
        """

    @abstractmethod
    def extract_images(self, path: Path) -> list[str]:
        """Extract embedded images and return references (filesystem paths)."""

    @abstractmethod
    def extract_metadata(self, path: Path) -> dict[str, Any]:
        """Return format metadata (page count, duration, dimensions, ...)."""


def normalize_text(text: str) -> str:
    if not text:
        return ""
    text = text.replace("\x00", "")
    while "\n\n\n\n" in text:
        text = text.replace("\n\n\n\n", "\n\n\n")
    return text.strip()


def images_dir_for(path: Path) -> Path:
    """Directory where images extracted from ``path`` are written."""
    return path.parent / f"{path.stem}_images"
