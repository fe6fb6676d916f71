"""Concrete implementation of the AIModel interface using the OpenAI API.

Hides the specifics of the OpenAI client library and translates requests/
responses between the domain model and the OpenAI API format.
"""

import logging
import os
import asyncio
import time
from typing import List, Optional, Any, Dict

import openai
from openai import OpenAI

# Domain Layer Imports
from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.models.ai import ChatMessage, StructuredAIResponse, ProviderModel
from sagecli.infrastructure.ai.sdk_support import build_request_messages, parse_completion, translate_sdk_error

logger = logging.getLogger(__name__)

class GptClient(AIModel):
    """OpenAI implementation of the AIModel interface.

    Note: Retry logic is handled externally by ApiRetryService.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    provider_name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initializes the OpenAI client.

        Args:
            api_key: OpenAI API key. Reads from OPENAI_API_KEY env var if None.
            model: The default OpenAI model to use.
        """
        effective_api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not effective_api_key:
            raise ValueError("OpenAI API key not provided and not found in environment variables.")

        # SDK-level retries are disabled; ApiRetryService owns retrying
        self.client = OpenAI(api_key=effective_api_key, max_retries=0)
        self.model = model or self.DEFAULT_MODEL
        logger.info(f"GptClient initialized for model: {self.model}")

    async def send_messages(
        self,
        messages: List[ChatMessage],
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> StructuredAIResponse:
        """Sends messages to the configured OpenAI model asynchronously."""
        logger.debug(f"Sending {len(messages)} messages to OpenAI model: {self.model}")
        request: Dict[str, Any] = {
            'model': self.model,
            'messages': build_request_messages(messages, response_schema),
        }
        if response_schema is not None:
            request['response_format'] = {"type": "json_object"}

        start_time = time.perf_counter()
        try:
            # Use asyncio.to_thread for the synchronous SDK call
            response = await asyncio.to_thread(self.client.chat.completions.create, **request)
        except openai.OpenAIError as e:
            error = translate_sdk_error(e, openai, "OpenAI")
            logger.warning(f"OpenAI call failed: {error!r}")
            raise error from e
        latency_ms = (time.perf_counter() - start_time) * 1000

        structured_response = parse_completion(response, "OpenAI")
        structured_response.latency_ms = latency_ms
        logger.debug(f"Received response from OpenAI in {latency_ms:.2f}ms. Usage: {structured_response.token_usage}")
        return structured_response

    async def list_available_models(self) -> List[ProviderModel]:
        """Lists available chat models from OpenAI asynchronously."""
        logger.debug("Listing available models from OpenAI.")
        try:
            models_response = await asyncio.to_thread(self.client.models.list)
        except openai.OpenAIError as e:
            raise translate_sdk_error(e, openai, "OpenAI") from e

        model_list = [
            ProviderModel(model_id=model.id, name=model.id, provider=self.provider_name)
            for model in models_response.data
            if "gpt" in model.id
        ]
        logger.debug(f"Found {len(model_list)} OpenAI models.")
        return model_list
