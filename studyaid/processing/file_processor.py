from pathlib import Path
from typing import Any

from studyaid.extraction.router import ExtractorHandle, FormatRouter, Unsupported
from studyaid.logging.logger import Log
from studyaid.processing.models import ProcessedFile, UploadedFile


class FileProcessor:
    """Turns an uploaded file into a ProcessedFile record.

    Pipeline: route -> size check -> text -> images -> metadata.
    Never raises for bad files: every outcome is a ProcessedFile.
    """

    def __init__(
        self,
        router: FormatRouter,
        max_upload_size_bytes: int,
        files_root: Path | None = None,
    ) -> None:
        self._router = router
        self._max_upload_size_bytes = max_upload_size_bytes
        self._files_root = files_root

    def process_file(self, file: UploadedFile) -> ProcessedFile:
        Log.info(f"Starting file processing for {file.file_name} (file {file.id})")

        route = self._router.route(file.file_type or file.file_name)
        if isinstance(route, Unsupported):
            Log.warning(f"Unsupported file type '{route.file_type}' for file {file.id}")
            return ProcessedFile.unsupported(file)

        if file.file_size_bytes > self._max_upload_size_bytes:
            message = (
                f"File too large: {file.file_size_bytes} bytes "
                f"(max {self._max_upload_size_bytes})"
            )
            Log.warning(f"File {file.id} rejected: {message}")
            return ProcessedFile.error(file, message)

        return self._extract(file, route)

    def resolve_path(self, file: UploadedFile) -> Path:
        """Relative paths are resolved under the configured files root."""
        path = Path(file.file_path)
        if self._files_root is not None and not path.is_absolute():
            return self._files_root / path
        return path

    def _extract(self, file: UploadedFile, route: ExtractorHandle) -> ProcessedFile:
        path = self.resolve_path(file)
        extractor = route.extractor

        try:
            text = extractor.extract_text(path)
        except Exception as exc:
            Log.error(f"Text extraction failed for file {file.id} ({route.kind}): {exc}")
            return ProcessedFile.error(file, str(exc) or type(exc).__name__)

        secondary_error: str | None = None

        images: list[str] = []
        try:
            images = extractor.extract_images(path)
        except Exception as exc:
            secondary_error = f"Image extraction failed: {exc}"
            Log.warning(f"File {file.id}: {secondary_error}")

        metadata: dict[str, Any] = {}
        try:
            metadata = extractor.extract_metadata(path)
        except Exception as exc:
            if secondary_error is None:
                secondary_error = f"Metadata extraction failed: {exc}"
            Log.warning(f"File {file.id}: metadata extraction failed: {exc}")

        Log.info(
            f"File processing completed for {file.file_name}: "
            f"{len(text)} chars, {len(images)} images"
        )
        return ProcessedFile.completed(
            file,
            text=text,
            images=images,
            metadata=metadata,
            error_message=secondary_error,
        )


def validate_upload(file_name: str, size_bytes: int, max_bytes: int, router: FormatRouter) -> list[str]:
    """Return the problems that should block an upload (empty when valid)."""
    problems: list[str] = []
    if size_bytes > max_bytes:
        problems.append(f"File too large: {size_bytes} bytes (max {max_bytes})")
    if size_bytes <= 0:
        problems.append("File is empty")
    if ".." in file_name or "/" in file_name or "\\" in file_name:
        problems.append(f"Invalid file name: {file_name}")
    if not router.supports(file_name):
        problems.append(f"Unsupported file type: {file_name}")
    return problems
