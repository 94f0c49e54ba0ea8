"""Client for the chat completion API that writes tests from course material."""

import json
import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from snapquiz.config import Settings
from snapquiz.exceptions import GenerationError, ValidationError
from snapquiz.schemas import GeneratedTest

logger = logging.getLogger(__name__)

MIN_QUESTION_COUNT = 3
MAX_QUESTION_COUNT = 30

SYSTEM_PROMPT = """You are an expert educator and test designer. You will be given a learning \
document and must write a test title and {question_count} high-quality multiple-choice \
questions about its key concepts and facts.

Each question must have:
- the question text
- four answer choices
- one or more correct answers (flag every correct choice)
- a detailed explanation of the correct answer(s)

Respond with JSON only, using this structure:
{{
  "title": "string",
  "questions": [
    {{
      "question_text": "string",
      "options": [{{"option_text": "string", "is_correct": true}}],
      "explanation": "string"
    }}
  ]
}}"""


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def parse_generated_test(content: str) -> GeneratedTest:
    """Parse the model's message content into a `GeneratedTest`."""
    try:
        payload = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Completion did not return valid JSON: {exc}") from exc
    try:
        return GeneratedTest.model_validate(payload)
    except PydanticValidationError as exc:
        raise GenerationError(f"Completion returned an invalid test payload: {exc}") from exc


class CompletionClient:
    """Thin wrapper around the `/chat/completions` endpoint."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self._http_client = http_client

    def _client(self) -> httpx.Client:
        if self._http_client is not None:
            return self._http_client
        return httpx.Client(base_url=self.settings.openai_base_url, timeout=self.settings.openai_timeout)

    def generate_test(self, content: str, question_count: int = 5) -> GeneratedTest:
        """Ask the completion API for a test about `content`.

        Raises:
            ValidationError: If question_count is outside [3, 30]
            GenerationError: If the API call fails or the payload is unusable
        """
        if question_count < MIN_QUESTION_COUNT or question_count > MAX_QUESTION_COUNT:
            raise ValidationError(
                f"Number of questions must be between {MIN_QUESTION_COUNT} and {MAX_QUESTION_COUNT}"
            )

        body = {
            "model": self.settings.openai_model,
            "store": False,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(question_count=question_count)},
                {
                    "role": "user",
                    "content": f'Generate a test for the text delimited by three quotation marks:\n"""{content}\n"""',
                },
            ],
        }
        headers = {"Authorization": f"Bearer {self.settings.openai_api_key}"}

        client = self._client()
        try:
            response = client.post("/chat/completions", json=body, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Completion API error: {exc.response.status_code} {exc.response.text}")
            raise GenerationError(f"Completion API error: {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Completion API request failed: {exc}", exc_info=True)
            raise GenerationError("Completion API request failed") from exc
        finally:
            if self._http_client is None:
                client.close()

        try:
            message = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("Completion response has no message content") from exc

        generated = parse_generated_test(message)
        logger.info(f"Generated test '{generated.title}' with {len(generated.questions)} questions")
        return generated
