from pathlib import Path
from typing import Any

import docx  # python-docx

from studyaid.extraction.base import BaseExtractor, images_dir_for, normalize_text
from studyaid.extraction.exceptions import ExtractionError
from studyaid.logging.logger import Log

_IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/bmp": "bmp",
}


class DocxExtractor(BaseExtractor):
    """Extracts paragraphs, tables, images and core properties from Word files."""

    def extract_text(self, path: Path) -> str:
        document = self._open(path)
        parts: list[str] = [p.text for p in document.paragraphs if p.text and p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    parts.append("\t".join(cells))
        text = normalize_text("\n".join(parts))
        Log.info(f"Extracted {len(text)} chars from Word document: {path}")
        return text

    def extract_images(self, path: Path) -> list[str]:
        document = self._open(path)
        out_dir = images_dir_for(path)
        image_paths: list[str] = []
        try:
            image_parts = [
                part
                for part in document.part.related_parts.values()
                if part.content_type.startswith("image/")
            ]
            for index, part in enumerate(image_parts):
                ext = _IMAGE_EXTENSIONS.get(part.content_type, "jpg")
                out_dir.mkdir(parents=True, exist_ok=True)
                target = out_dir / f"image_{index}.{ext}"
                target.write_bytes(part.blob)
                image_paths.append(str(target))
        except OSError as exc:
            raise ExtractionError(f"Word image extraction failed: {exc}") from exc
        Log.info(f"Extracted {len(image_paths)} images from Word document: {path}")
        return image_paths

    def extract_metadata(self, path: Path) -> dict[str, Any]:
        document = self._open(path)
        props = document.core_properties
        return {
            "title": props.title or "",
            "subject": props.subject or "",
            "author": props.author or "",
            "keywords": props.keywords or "",
            "description": props.comments or "",
            "last_modified_by": props.last_modified_by or "",
            "created": props.created.isoformat() if props.created else "",
            "modified": props.modified.isoformat() if props.modified else "",
            "category": props.category or "",
            "version": props.version or "",
            "paragraph_count": len(document.paragraphs),
            "table_count": len(document.tables),
        }

    @staticmethod
    def _open(path: Path) -> Any:
        try:
            return docx.Document(str(path))
        except Exception as exc:
            raise ExtractionError(f"Cannot open Word document {path.name}: {exc}") from exc
