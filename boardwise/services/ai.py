"""
Quiz generation and translation through an external AI service.

The service is a black box reached over HTTP. Responses are validated here and
the single-correct-answer contract is re-enforced, since generated output
cannot be trusted to honour it.
"""

import logging
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from boardwise.config import AI_SERVICE_KEY, AI_SERVICE_URL, AI_TIMEOUT_SECONDS
from boardwise.engine.definitions import DIFFICULTY_POINTS
from boardwise.engine.errors import AIServiceError, EmptyGenerationResult, UnsupportedLanguage
from boardwise.engine.state import QuizConfig, QuizOption
from boardwise.engine.utils import new_id

logger = logging.getLogger(__name__)

LANGUAGE_CODE_TO_NAME = {
    "en": "English",
    "id": "Indonesian",
}


# ===== Pydantic Models =====

class QuizRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_text: str = Field(alias="sourceText", min_length=20)
    number_of_options: int = Field(default=4, alias="numberOfOptions", ge=2, le=5)


class GeneratedOption(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    text: str
    is_correct: bool = Field(default=False, alias="isCorrect")
    image: str | None = None


class QuizResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: list[GeneratedOption]
    suggested_difficulty: Literal["1", "2", "3"] = Field(default="1", alias="suggestedDifficulty")


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    target_language_code: str = Field(alias="targetLanguageCode", min_length=2)


class TranslateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    translated_text: str = Field(alias="translatedText")


# ===== Client =====

class AIServiceClient:
    """JSON-over-HTTP client for the quiz/translation service."""

    def __init__(
        self,
        base_url: str = AI_SERVICE_URL,
        api_key: str = AI_SERVICE_KEY,
        timeout: float = AI_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=body, headers=headers)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise AIServiceError("Cannot connect to AI service") from e
        except httpx.HTTPStatusError as e:
            raise AIServiceError(f"AI service returned {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            raise AIServiceError("AI service timed out") from e
        except httpx.RequestError as e:
            raise AIServiceError(f"AI service request failed: {e}") from e
        try:
            return resp.json()
        except ValueError:
            return None

    async def request_quiz(self, body: dict[str, Any]) -> Any:
        return await self._post("/quiz", body)

    async def request_translation(self, body: dict[str, Any]) -> Any:
        return await self._post("/translate", body)


# ===== Operations =====

def enforce_single_correct(options: list[GeneratedOption]) -> list[GeneratedOption]:
    """Keep only the first correct option; mark the first option correct if none is."""
    result = []
    found = False
    for opt in options:
        correct = opt.is_correct and not found
        found = found or correct
        result.append(opt.model_copy(update={"is_correct": correct, "id": opt.id or new_id()}))
    if result and not found:
        result[0] = result[0].model_copy(update={"is_correct": True})
    return result


async def generate_quiz_question(request: QuizRequest, client: AIServiceClient) -> QuizResponse:
    """
    Ask the service for one multiple-choice question about request.source_text.
    Raises EmptyGenerationResult when the service returns nothing usable.
    """
    raw = await client.request_quiz(request.model_dump(by_alias=True))
    if not raw:
        raise EmptyGenerationResult("AI failed to generate quiz text content.")
    try:
        response = QuizResponse.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding malformed quiz generation result: %s", e)
        raise EmptyGenerationResult("AI returned an unusable quiz question.") from e
    if not response.question.strip() or not response.options:
        raise EmptyGenerationResult("AI returned an empty quiz question.")
    return response.model_copy(update={"options": enforce_single_correct(response.options)})


async def translate_text(request: TranslateRequest, client: AIServiceClient) -> TranslateResponse:
    """
    Translate request.text into the target language.
    Raises UnsupportedLanguage for unknown codes and EmptyGenerationResult for empty output.
    """
    language = LANGUAGE_CODE_TO_NAME.get(request.target_language_code.lower())
    if language is None:
        raise UnsupportedLanguage(
            f"Unsupported target language code: {request.target_language_code}. "
            f"Supported codes are: {', '.join(LANGUAGE_CODE_TO_NAME)}"
        )
    raw = await client.request_translation({
        "textToTranslate": request.text,
        "targetLanguageName": language,
    })
    try:
        response = TranslateResponse.model_validate(raw) if raw else None
    except ValidationError as e:
        logger.warning("Discarding malformed translation result: %s", e)
        response = None
    if response is None or not response.translated_text.strip():
        raise EmptyGenerationResult("AI failed to translate the text or returned an empty translation.")
    return response


def quiz_config_from_generation(response: QuizResponse, points: int | None = None) -> QuizConfig:
    """QuizConfig for a tile from a generated question; points default from the difficulty."""
    difficulty = int(response.suggested_difficulty)
    return QuizConfig(
        question=response.question,
        options=[
            QuizOption(id=o.id or new_id(), text=o.text, is_correct=o.is_correct, image=o.image)
            for o in response.options
        ],
        difficulty=difficulty,
        points=DIFFICULTY_POINTS[difficulty] if points is None else points,
    )
