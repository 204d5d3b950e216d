import shutil
import subprocess
import wave
from pathlib import Path
from typing import Any

from studyaid.extraction.base import BaseExtractor, images_dir_for, normalize_text
from studyaid.extraction.exceptions import ExtractionError
from studyaid.extraction.transcription import BaseTranscriptionClient
from studyaid.logging.logger import Log

AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv", ".m4v"})


class MediaExtractor(BaseExtractor):
    """Audio/video extractor.

    Media files have no text layer: text is a transcript and images are
    sampled video frames. ``transcribe_audio`` and ``extract_frames`` are the
    native operations; the generic contract delegates to them.
    """

    def __init__(
        self,
        transcriber: BaseTranscriptionClient,
        *,
        ffmpeg_binary: str = "ffmpeg",
        frame_interval_seconds: int = 30,
        max_frames: int = 10,
    ) -> None:
        self._transcriber = transcriber
        self._ffmpeg_binary = ffmpeg_binary
        self._frame_interval_seconds = max(1, frame_interval_seconds)
        self._max_frames = max(1, max_frames)

    def extract_text(self, path: Path) -> str:
        return self.transcribe_audio(path)

    def extract_images(self, path: Path) -> list[str]:
        return self.extract_frames(path)

    def transcribe_audio(self, path: Path) -> str:
        if not path.exists():
            raise ExtractionError(f"Media file not found: {path}")
        text = normalize_text(self._transcriber.transcribe(path))
        Log.info(f"Transcribed {len(text)} chars from media file: {path}")
        return text

    def extract_frames(self, path: Path) -> list[str]:
        if path.suffix.lower() not in VIDEO_EXTENSIONS:
            return []
        ffmpeg = shutil.which(self._ffmpeg_binary)
        if ffmpeg is None:
            Log.warning(f"ffmpeg not found, skipping frame extraction for {path}")
            return []

        out_dir = images_dir_for(path)
        out_dir.mkdir(parents=True, exist_ok=True)
        command = [
            ffmpeg,
            "-loglevel", "error",
            "-y",
            "-i", str(path),
            "-vf", f"fps=1/{self._frame_interval_seconds}",
            "-frames:v", str(self._max_frames),
            str(out_dir / "frame_%03d.jpg"),
        ]
        try:
            subprocess.run(command, check=True, capture_output=True, timeout=300)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
            raise ExtractionError(f"Frame extraction failed for {path.name}: {exc}") from exc

        frames = sorted(str(p) for p in out_dir.glob("frame_*.jpg"))
        Log.info(f"Extracted {len(frames)} frames from video: {path}")
        return frames

    def extract_metadata(self, path: Path) -> dict[str, Any]:
        suffix = path.suffix.lower()
        try:
            metadata: dict[str, Any] = {
                "size_bytes": path.stat().st_size,
                "extension": suffix,
                "media_kind": "video" if suffix in VIDEO_EXTENSIONS else "audio",
            }
            if suffix == ".wav":
                metadata.update(self._wav_metadata(path))
        except (OSError, wave.Error, EOFError) as exc:
            raise ExtractionError(f"Cannot read media metadata for {path.name}: {exc}") from exc
        return metadata

    @staticmethod
    def _wav_metadata(path: Path) -> dict[str, Any]:
        with wave.open(str(path), "rb") as wav:
            frames = wav.getnframes()
            rate = wav.getframerate()
            return {
                "duration_seconds": round(frames / rate, 3) if rate else 0.0,
                "sample_rate": rate,
                "channels": wav.getnchannels(),
                "sample_width_bytes": wav.getsampwidth(),
            }
