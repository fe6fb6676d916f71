"""Concrete implementation of the AIModel interface using the Groq API.

Hides the specifics of the Groq client library and translates requests/
responses between the domain model and the Groq API format.
"""

import logging
import os
import asyncio
import time
from typing import List, Optional, Any, Dict

import groq
from groq import Groq as GroqSDKClient

# Domain Layer Imports
from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.models.ai import ChatMessage, StructuredAIResponse, ProviderModel
from sagecli.infrastructure.ai.sdk_support import build_request_messages, parse_completion, translate_sdk_error

logger = logging.getLogger(__name__)

class GroqClient(AIModel):
    """Groq implementation of the AIModel interface."""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    provider_name = "groq"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initializes the Groq client.

        Args:
            api_key: Groq API key. Reads from GROQ_API_KEY env var if None.
            model: The default Groq model to use.
        """
        effective_api_key = api_key or os.getenv("GROQ_API_KEY")
        if not effective_api_key:
            raise ValueError("Groq API key not provided and not found in environment variables.")

        self.client = GroqSDKClient(api_key=effective_api_key, max_retries=0)
        self.model = model or self.DEFAULT_MODEL
        logger.info(f"GroqClient initialized for model: {self.model}")

    async def send_messages(
        self,
        messages: List[ChatMessage],
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> StructuredAIResponse:
        """Sends messages to the configured Groq model asynchronously."""
        logger.debug(f"Sending {len(messages)} messages to Groq model: {self.model}")
        request: Dict[str, Any] = {
            'model': self.model,
            'messages': build_request_messages(messages, response_schema),
        }
        if response_schema is not None:
            request['response_format'] = {"type": "json_object"}

        start_time = time.perf_counter()
        try:
            # The official Groq SDK client is synchronous
            chat_completion = await asyncio.to_thread(self.client.chat.completions.create, **request)
        except groq.GroqError as e:
            error = translate_sdk_error(e, groq, "Groq")
            logger.warning(f"Groq call failed: {error!r}")
            raise error from e
        latency_ms = (time.perf_counter() - start_time) * 1000

        structured_response = parse_completion(chat_completion, "Groq")
        structured_response.latency_ms = latency_ms
        logger.debug(f"Received response from Groq in {latency_ms:.2f}ms. Usage: {structured_response.token_usage}")
        return structured_response

    async def list_available_models(self) -> List[ProviderModel]:
        """Lists available models from Groq asynchronously."""
        logger.debug("Listing available models from Groq.")
        try:
            models_response = await asyncio.to_thread(self.client.models.list)
        except groq.GroqError as e:
            raise translate_sdk_error(e, groq, "Groq") from e

        groq_models = [
            ProviderModel(
                model_id=model_data.id,
                name=model_data.id,
                provider=self.provider_name,
                context_window=getattr(model_data, 'context_window', None),
            )
            for model_data in (models_response.data or [])
        ]
        logger.debug(f"Found {len(groq_models)} Groq models.")
        return groq_models
