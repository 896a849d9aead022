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
from google.genai import types
from models import api_config

logger = logging.getLogger(__name__)

API_KEY_LOGGING_MESSAGE = "Ran with user-specified API key"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 4000
VERIFICATION_MAX_OUTPUT_TOKENS = 300


class GeminiInvalidResponseException(Exception):
    pass


def _resolve_api_key(api_key: str | None) -> str:
    if not api_key:
        return api_config.DEFAULT_API_KEY
    logger.info(API_KEY_LOGGING_MESSAGE)
    return api_key


def call_predict(
    query="The opposite of happy is",
    model: str | None = None,
    api_key: str | None = None,
    temperature: float = 0.9,
) -> str:
    client = genai.Client(api_key=_resolve_api_key(api_key))

    start_time = time.time()
    response = client.models.generate_content(
        model=model or api_config.DEFAULT_MODEL,
        contents=query,
        config=types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS,
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        ),
    )
    logger.debug("Gemini call took %.2fs", time.time() - start_time)
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text


def call_predict_with_image(
    prompt: str,
    image_bytes: bytes,
    mime_type: str = "image/jpeg",
    system_instruction: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
) -> str:
    """Calls Gemini with a prompt and a single image."""
    client = genai.Client(api_key=_resolve_api_key(api_key))

    truncated_query = (prompt[:200] + "...") if len(prompt) > 200 else prompt
    logger.info(
        "Calling Gemini with image (%s, %d bytes), prompt: '%s'",
        mime_type,
        len(image_bytes),
        truncated_query,
    )
    response = client.models.generate_content(
        model=model or api_config.DEFAULT_MODEL,
        contents=[
            prompt,
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        ],
        config=types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=0.1,
            max_output_tokens=VERIFICATION_MAX_OUTPUT_TOKENS,
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        ),
    )
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text
