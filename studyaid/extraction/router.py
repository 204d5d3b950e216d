"""Maps a declared file type onto the extractor that handles it."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from studyaid.extraction.base import BaseExtractor


class ExtractorKind(StrEnum):
    DOCUMENT = "document"
    WORD_PROCESSOR = "word_processor"
    IMAGE = "image"
    MEDIA = "media"
    PLAIN_TEXT = "plain_text"


EXTENSION_KINDS: Mapping[str, ExtractorKind] = MappingProxyType(
    {
        "pdf": ExtractorKind.DOCUMENT,
        "docx": ExtractorKind.WORD_PROCESSOR,
        "doc": ExtractorKind.WORD_PROCESSOR,
        **{
            ext: ExtractorKind.IMAGE
            for ext in ("jpg", "jpeg", "png", "gif", "bmp", "tif", "tiff", "webp")
        },
        **{
            ext: ExtractorKind.MEDIA
            for ext in (
                "mp3", "wav", "flac", "aac", "ogg", "wma", "m4a",
                "mp4", "avi", "mov", "wmv", "flv", "webm", "mkv", "m4v",
            )
        },
        "txt": ExtractorKind.PLAIN_TEXT,
        "md": ExtractorKind.PLAIN_TEXT,
        "csv": ExtractorKind.PLAIN_TEXT,
    }
)

MIME_EXTENSIONS: Mapping[str, str] = MappingProxyType(
    {
        "application/pdf": "pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
        "application/msword": "doc",
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/gif": "gif",
        "image/bmp": "bmp",
        "image/tiff": "tiff",
        "image/webp": "webp",
        "audio/mpeg": "mp3",
        "audio/wav": "wav",
        "audio/x-wav": "wav",
        "audio/flac": "flac",
        "audio/aac": "aac",
        "audio/ogg": "ogg",
        "audio/mp4": "m4a",
        "video/mp4": "mp4",
        "video/x-msvideo": "avi",
        "video/quicktime": "mov",
        "video/webm": "webm",
        "video/x-matroska": "mkv",
        "text/plain": "txt",
        "text/markdown": "md",
        "text/csv": "csv",
    }
)


@dataclass(frozen=True)
class ExtractorHandle:
    """A supported route: the extractor family and its implementation."""

    kind: ExtractorKind
    extractor: BaseExtractor
    file_type: str


@dataclass(frozen=True)
class Unsupported:
    """No extractor handles this file type."""

    file_type: str


Route = ExtractorHandle | Unsupported


def normalize_file_type(declared: str | None) -> str:
    """Reduce an extension, MIME type or file name to a bare lower-case extension.

    ``".PDF"``, ``"pdf"``, ``"application/pdf"`` and ``"notes.pdf"`` all
    normalize to ``"pdf"``. Unknown MIME types are returned unchanged.
    """
    if not declared:
        return ""
    value = declared.strip().lower()
    if "/" in value:
        value = value.split(";", 1)[0].strip()
        return MIME_EXTENSIONS.get(value, value)
    if "." in value:
        value = value.rsplit(".", 1)[1]
    return value


def classify(declared: str | None) -> ExtractorKind | None:
    return EXTENSION_KINDS.get(normalize_file_type(declared))


class FormatRouter:
    """Stateless dispatch from declared file type to extractor."""

    def __init__(self, extractors: Mapping[ExtractorKind, BaseExtractor]) -> None:
        self._extractors: Mapping[ExtractorKind, BaseExtractor] = MappingProxyType(
            dict(extractors)
        )

    def route(self, declared: str | None) -> Route:
        file_type = normalize_file_type(declared)
        kind = EXTENSION_KINDS.get(file_type)
        if kind is None:
            return Unsupported(file_type=file_type)
        extractor = self._extractors.get(kind)
        if extractor is None:
            return Unsupported(file_type=file_type)
        return ExtractorHandle(kind=kind, extractor=extractor, file_type=file_type)

    def supports(self, declared: str | None) -> bool:
        return isinstance(self.route(declared), ExtractorHandle)
