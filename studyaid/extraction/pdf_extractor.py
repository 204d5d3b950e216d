from pathlib import Path
from typing import Any, ClassVar

import pdfplumber
import pymupdf

from studyaid.extraction.base import BaseExtractor, images_dir_for, normalize_text
from studyaid.extraction.exceptions import ExtractionError
from studyaid.logging.logger import Log

_METADATA_KEYS = (
    "title",
    "author",
    "subject",
    "keywords",
    "creator",
    "producer",
    "creationDate",
    "modDate",
)


class PdfExtractor(BaseExtractor):
    """Extracts text, embedded images and document info from PDF files.

    Text comes from the configured engine (pdfplumber or PyMuPDF); images and
    metadata always come from PyMuPDF.
    """

    ENGINES: ClassVar[tuple[str, ...]] = ("pdfplumber", "pymupdf")

    def __init__(self, engine: str = "pdfplumber") -> None:
        engine = engine.lower()
        if engine not in self.ENGINES:
            raise ValueError(f"Unknown PDF engine '{engine}'. Choose from: {list(self.ENGINES)}")
        self._engine = engine

    def extract_text(self, path: Path) -> str:
        try:
            if self._engine == "pdfplumber":
                with pdfplumber.open(path) as pdf:
                    pages = [page.extract_text() or "" for page in pdf.pages]
            else:
                with pymupdf.open(path) as doc:  # type: ignore[no-untyped-call]
                    pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise ExtractionError(f"{self._engine} extraction failed: {exc}") from exc
        text = normalize_text("\n".join(pages))
        Log.info(f"Extracted {len(text)} chars from {len(pages)} PDF pages: {path}")
        return text

    def extract_images(self, path: Path) -> list[str]:
        out_dir = images_dir_for(path)
        image_paths: list[str] = []
        try:
            with pymupdf.open(path) as doc:  # type: ignore[no-untyped-call]
                for page_number, page in enumerate(doc, start=1):
                    for index, info in enumerate(page.get_images(full=True)):
                        image = doc.extract_image(info[0])
                        if not image:
                            continue
                        out_dir.mkdir(parents=True, exist_ok=True)
                        target = out_dir / f"page{page_number}_img{index}.{image['ext']}"
                        target.write_bytes(image["image"])
                        image_paths.append(str(target))
        except Exception as exc:
            raise ExtractionError(f"PDF image extraction failed: {exc}") from exc
        Log.info(f"Extracted {len(image_paths)} images from PDF: {path}")
        return image_paths

    def extract_metadata(self, path: Path) -> dict[str, Any]:
        try:
            with pymupdf.open(path) as doc:  # type: ignore[no-untyped-call]
                info = doc.metadata or {}
                metadata: dict[str, Any] = {"page_count": doc.page_count}
        except Exception as exc:
            raise ExtractionError(f"PDF metadata extraction failed: {exc}") from exc
        for key in _METADATA_KEYS:
            metadata[key] = info.get(key) or ""
        return metadata
