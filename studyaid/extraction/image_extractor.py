from pathlib import Path
from typing import Any

import pytesseract
from PIL import Image

from studyaid.extraction.base import BaseExtractor, normalize_text
from studyaid.extraction.exceptions import ExtractionError
from studyaid.logging.logger import Log


class ImageExtractor(BaseExtractor):
    """OCR text extraction and image analysis using Tesseract and Pillow."""

    def __init__(self, lang: str = "eng", tesseract_cmd: str = "") -> None:
        self._lang = lang
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def extract_text(self, path: Path) -> str:
        try:
            with Image.open(path) as image:
                raw = pytesseract.image_to_string(image, lang=self._lang)
        except Exception as exc:
            raise ExtractionError(f"OCR failed for {path.name}: {exc}") from exc
        text = normalize_text(raw)
        Log.info(f"OCR extracted {len(text)} chars from image: {path}")
        return text

    def extract_images(self, path: Path) -> list[str]:
        if not path.exists():
            raise ExtractionError(f"Image not found: {path}")
        return [str(path)]

    def extract_metadata(self, path: Path) -> dict[str, Any]:
        try:
            with Image.open(path) as image:
                metadata: dict[str, Any] = {
                    "width": image.width,
                    "height": image.height,
                    "mode": image.mode,
                    "format": image.format or "",
                }
                dpi = image.info.get("dpi")
                if dpi:
                    metadata["dpi"] = [float(v) for v in dpi]
            metadata["size_bytes"] = path.stat().st_size
        except Exception as exc:
            raise ExtractionError(f"Cannot analyze image {path.name}: {exc}") from exc
        Log.info(f"Analyzed image: {path}, size {metadata['width']}x{metadata['height']}")
        return metadata
