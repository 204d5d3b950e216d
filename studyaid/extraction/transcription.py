from abc import ABC, abstractmethod
from pathlib import Path

import httpx
import openai

from studyaid.extraction.exceptions import ExtractionError


class BaseTranscriptionClient(ABC):
    """Contract for speech-to-text providers."""

    @abstractmethod
    def transcribe(self, path: Path) -> str:
        """Return the transcript of an audio or video file."""


class OpenAITranscriptionClient(BaseTranscriptionClient):
    """Speech-to-text built on the OpenAI audio transcription API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def transcribe(self, path: Path) -> str:
        try:
            with path.open("rb") as audio:
                response = self._client.audio.transcriptions.create(
                    model=self._model,
                    file=audio,
                )
        except OSError as exc:
            raise ExtractionError(f"Cannot read media file {path.name}: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionError(f"Transcription network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionError(f"Transcription API error: {exc}") from exc
        return response.text or ""


class DisabledTranscriptionClient(BaseTranscriptionClient):
    """Used when no speech-to-text provider is configured."""

    def transcribe(self, path: Path) -> str:
        raise ExtractionError(
            f"Audio transcription is not configured (file {path.name})"
        )
