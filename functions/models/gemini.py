# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import time
import logging
from google import genai
from google.genai import errors
from google.genai import types
from pydantic import BaseModel, ValidationError
from models import api_config
from shared.json_utils import strip_markdown_json
from typing import Sequence, Type, TypeVar

logger = logging.getLogger(__name__)

API_KEY_LOGGING_MESSAGE = "Ran with user-specified API key"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 4000

# Chat history roles map onto the two roles Gemini accepts.
CHAT_ROLE_MAP = {"user": "user", "assistant": "model"}

T = TypeVar("T", bound=BaseModel)


class GeminiConfigurationError(Exception):
    pass


class GeminiApiError(Exception):
    pass


class GeminiInvalidResponseException(Exception):
    pass


def _get_client(api_key: str | None) -> genai.Client:
    if not api_key:
        api_key = api_config.DEFAULT_API_KEY
    else:
        logger.info(API_KEY_LOGGING_MESSAGE)
    if not api_key:
        raise GeminiConfigurationError("GEMINI_API_KEY not configured")
    return genai.Client(api_key=api_key)


def _truncate(text: str, limit: int = 200) -> str:
    return (text[:limit] + "...") if len(text) > limit else text


def _generate(
    client: genai.Client,
    *,
    model: str,
    contents,
    config: types.GenerateContentConfig,
) -> types.GenerateContentResponse:
    try:
        return client.models.generate_content(
            model=model, contents=contents, config=config
        )
    except errors.APIError as e:
        logger.error("Gemini API error (%s): %s", e.code, e.message)
        raise GeminiApiError(f"Gemini API error: {e.code}") from e


def call_predict(
    query: str,
    *,
    system_instruction: str | None = None,
    temperature: float = 0,
    model: str = api_config.DEFAULT_COMPLETION_MODEL,
    api_key: str | None = None,
) -> str:
    client = _get_client(api_key)
    start_time = time.time()
    logger.info("Calling Gemini, prompt: '%s'", _truncate(query))
    response = _generate(
        client,
        model=model,
        contents=query,
        config=types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS,
        ),
    )
    logger.info("Gemini call took: %.2fs", time.time() - start_time)
    if not response.text:
        raise GeminiInvalidResponseException("No content in Gemini response")
    return response.text


def call_predict_with_schema(
    query: str,
    response_schema: Type[T],
    *,
    system_instruction: str | None = None,
    temperature: float = 0,
    model: str = api_config.DEFAULT_COMPLETION_MODEL,
    api_key: str | None = None,
) -> T:
    """Calls Gemini with a response schema for structured output.

    Uses the SDK's parsed object when available and otherwise validates the
    raw text body against the schema, so a model that wraps its JSON in a
    markdown fence is still accepted.
    """
    client = _get_client(api_key)
    start_time = time.time()
    logger.info("Calling Gemini with schema, prompt: '%s'", _truncate(query))
    response = _generate(
        client,
        model=model,
        contents=query,
        config=types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            response_mime_type="application/json",
            response_schema=response_schema,
        ),
    )
    logger.info("Gemini with schema call took: %.2fs", time.time() - start_time)

    if isinstance(response.parsed, response_schema):
        return response.parsed
    if not response.text:
        raise GeminiInvalidResponseException("No content in Gemini response")
    try:
        return response_schema.model_validate_json(strip_markdown_json(response.text))
    except ValidationError as e:
        logger.error("Unparseable Gemini response: %s", response.text)
        raise GeminiInvalidResponseException(
            f"Malformed JSON in Gemini response: {e.error_count()} error(s)"
        ) from e


def call_chat(
    messages: Sequence[dict],
    *,
    system_instruction: str | None = None,
    temperature: float | None = None,
    model: str = api_config.DEFAULT_COMPLETION_MODEL,
    api_key: str | None = None,
) -> str:
    """Sends a multi-turn conversation. Each message is {"role", "content"}."""
    client = _get_client(api_key)
    contents = [
        types.Content(
            role=CHAT_ROLE_MAP[message["role"]],
            parts=[types.Part(text=message["content"])],
        )
        for message in messages
    ]
    response = _generate(
        client,
        model=model,
        contents=contents,
        config=types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
        ),
    )
    if not response.text:
        raise GeminiInvalidResponseException("No content in Gemini response")
    return response.text


def call_embed(
    text: str,
    *,
    model: str = api_config.DEFAULT_EMBEDDING_MODEL,
    api_key: str | None = None,
) -> list[float]:
    client = _get_client(api_key)
    try:
        result = client.models.embed_content(model=model, contents=text)
    except errors.APIError as e:
        logger.error("Gemini embedding error (%s): %s", e.code, e.message)
        raise GeminiApiError(f"Gemini API error: {e.code}") from e
    if not result.embeddings or not result.embeddings[0].values:
        raise GeminiInvalidResponseException("No embedding in Gemini response")
    return list(result.embeddings[0].values)
