"""Pass-through from (operation, prompt, context) to raw model text."""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any

from studyaid.analysis.client_base import BaseAnalysisClient
from studyaid.analysis.context import AnalysisContext
from studyaid.analysis.exceptions import AnalysisTimeoutError
from studyaid.analysis.models import AnalysisOperation
from studyaid.analysis.prompt_loader import load_prompt_template
from studyaid.logging.logger import Log


class _Blank(dict):
    def __missing__(self, key: str) -> str:
        return ""


class AnalysisClientAdapter:
    """Renders prompt templates and calls the model under a timeout.

    The reply is returned untouched; parsing happens elsewhere.
    """

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        model: str,
        temperature: float = 0.3,
        timeout_seconds: float = 60.0,
        max_concurrent_requests: int = 8,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._timeout_seconds = timeout_seconds
        self._system_template = load_prompt_template("system", prompt_dir)
        self._templates = {
            operation: load_prompt_template(str(operation), prompt_dir)
            for operation in AnalysisOperation
        }
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_concurrent_requests),
            thread_name_prefix="analysis-call",
        )

    def request(
        self,
        operation: AnalysisOperation,
        prompt: str,
        context: AnalysisContext | None = None,
        timeout: float | None = None,
        **extra: Any,
    ) -> str:
        """Send one request and return the raw reply text.

        Raises:
            AnalysisTimeoutError: if the provider does not answer in time.
            AnalysisError: on provider failures (from the client).
        """
        context = context or AnalysisContext()
        messages = self.build_messages(operation, prompt, context, **extra)
        limit = self._timeout_seconds if timeout is None else timeout
        Log.debug(f"Analysis request ({operation}):\n{messages[-1]['content']}")

        future = self._executor.submit(
            self._client.create_chat_completion,
            model=self._model,
            temperature=self._temperature,
            messages=messages,
        )
        try:
            raw = future.result(timeout=limit)
        except FutureTimeoutError as exc:
            future.cancel()
            raise AnalysisTimeoutError(
                f"AI provider did not answer {operation} request within {limit:.0f}s"
            ) from exc
        Log.debug(f"AI raw response ({operation}):\n{raw}")
        return raw

    def build_messages(
        self,
        operation: AnalysisOperation,
        prompt: str,
        context: AnalysisContext,
        **extra: Any,
    ) -> list[dict[str, str]]:
        fields = _Blank(
            operation=str(operation),
            prompt=prompt,
            subject=context.subject or "unknown",
            level=context.level or "unknown",
            topic=context.topic or "unknown",
            files=context.render_files(),
            study_guides=context.render_study_guides(),
            history=context.render_history(),
        )
        fields.update(extra)
        return [
            {"role": "system", "content": self._system_template.format_map(fields)},
            {"role": "user", "content": self._templates[operation].format_map(fields)},
        ]

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
