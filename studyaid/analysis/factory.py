from typing import ClassVar

from studyaid.analysis.adapter import AnalysisClientAdapter
from studyaid.analysis.client_base import BaseAnalysisClient
from studyaid.analysis.example_client_adapter import ExampleClientAdapter
from studyaid.analysis.openai_client_adapter import OpenAIClientAdapter
from studyaid.config.settings import Settings


class AnalysisClientFactory:
    """Creates the configured analysis client and adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> AnalysisClientAdapter:
        """Create a configured adapter from application settings."""
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return AnalysisClientAdapter(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
                timeout_seconds=settings.analysis_timeout_seconds,
                max_concurrent_requests=settings.job_worker_count * 2,
            )
        return AnalysisClientAdapter(
            client=cls.create_client(settings),
            model=settings.analysis_model_name,
            temperature=settings.analysis_temperature,
            timeout_seconds=settings.analysis_timeout_seconds,
            max_concurrent_requests=settings.job_worker_count * 2,
        )

    @classmethod
    def create_client(cls, settings: Settings) -> BaseAnalysisClient:
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.analysis_api_key,
            timeout_seconds=settings.analysis_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = (settings.analysis_base_url or "").strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "analysis_base_url is required for analysis_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {supported}"
        )
