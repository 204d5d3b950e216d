"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalysisClientFactory.
"""

import json
from typing import ClassVar

from studyaid.analysis.client_base import BaseAnalysisClient


class ExampleClientAdapter(BaseAnalysisClient):
    """Example adapter that returns fixed, valid JSON for every operation.

    No network calls. Useful for local development and tests. The operation
    is read from the ``operation`` marker the prompt templates put in the
    system message.
    """

    RESPONSES: ClassVar[dict[str, dict[str, object]]] = {
        "study_guide": {
            "title": "Example Study Guide",
            "content": "This is an example study guide generated without a model.",
            "keyPoints": ["Example key point"],
            "summary": "Example summary.",
        },
        "quiz": {
            "title": "Example Quiz",
            "questions": [
                {
                    "question": "Which option is correct?",
                    "options": ["This one", "Not this one"],
                    "correctAnswerIndex": 0,
                    "explanation": "The first option is always correct in the example.",
                }
            ],
        },
        "file_analysis": {
            "analysisType": "general",
            "subject": "General",
            "topic": "Example",
            "keyPoints": ["Example key point"],
            "summary": "Example summary.",
            "difficulty": "medium",
            "recommendations": ["Review the material"],
        },
    }
    CONVERSATION_REPLY: ClassVar[str] = "This is an example reply generated without a model."

    def __init__(self) -> None:
        pass

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        messages: list[dict[str, str]],
    ) -> str:
        _ = model, temperature
        system = messages[0]["content"] if messages else ""
        for operation, response in self.RESPONSES.items():
            if f"operation: {operation}" in system:
                return json.dumps(response)
        return self.CONVERSATION_REPLY
