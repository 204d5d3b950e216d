from studyaid.config.settings import Settings
from studyaid.extraction.base import BaseExtractor
from studyaid.extraction.docx_extractor import DocxExtractor
from studyaid.extraction.image_extractor import ImageExtractor
from studyaid.extraction.media_extractor import MediaExtractor
from studyaid.extraction.pdf_extractor import PdfExtractor
from studyaid.extraction.router import ExtractorKind, FormatRouter
from studyaid.extraction.text_extractor import TextExtractor
from studyaid.extraction.transcription import (
    BaseTranscriptionClient,
    DisabledTranscriptionClient,
    OpenAITranscriptionClient,
)


class ExtractorFactory:
    """Creates the configured extractors and the router over them."""

    @classmethod
    def create_router(cls, settings: Settings) -> FormatRouter:
        extractors: dict[ExtractorKind, BaseExtractor] = {
            ExtractorKind.DOCUMENT: PdfExtractor(engine=settings.pdf_engine),
            ExtractorKind.WORD_PROCESSOR: DocxExtractor(),
            ExtractorKind.IMAGE: ImageExtractor(
                lang=settings.tesseract_lang,
                tesseract_cmd=settings.tesseract_cmd,
            ),
            ExtractorKind.MEDIA: MediaExtractor(
                cls.create_transcriber(settings),
                ffmpeg_binary=settings.ffmpeg_binary,
                frame_interval_seconds=settings.video_frame_interval_seconds,
                max_frames=settings.video_max_frames,
            ),
            ExtractorKind.PLAIN_TEXT: TextExtractor(),
        }
        return FormatRouter(extractors)

    @classmethod
    def create_transcriber(cls, settings: Settings) -> BaseTranscriptionClient:
        provider = settings.transcription_provider.lower()
        if provider == "none":
            return DisabledTranscriptionClient()
        if provider == "openai":
            return OpenAITranscriptionClient(
                api_key=settings.analysis_api_key,
                model=settings.transcription_model_name,
                timeout_seconds=settings.analysis_timeout_seconds,
                base_url=settings.analysis_base_url or None,
            )
        raise ValueError(
            f"Unknown transcription provider '{provider}'. Choose from: ['none', 'openai']"
        )
