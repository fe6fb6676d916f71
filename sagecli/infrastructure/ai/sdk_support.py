"""Helpers shared by the OpenAI and Groq clients.

Both SDKs expose the same exception hierarchy and chat-completion response
shape, so translating errors and parsing responses is done once here.
"""

import json
import logging
from types import ModuleType
from typing import Any, Dict, List, Optional

from sagecli.domain.errors import (
    TransportError, RetryableTransportError,
    RATE_LIMIT, SERVER_ERROR, CLIENT_ERROR, AUTH, CONNECTION, TIMEOUT, INVALID_RESPONSE, UNKNOWN,
)
from sagecli.domain.models.ai import ChatMessage, StructuredAIResponse
from sagecli.domain.models.common import MessageRole, TokenUsage

logger = logging.getLogger(__name__)

SCHEMA_INSTRUCTION = (
    "Respond with a single JSON object only, no prose and no markdown fences. "
    "It must conform to this JSON schema:\n{schema}"
)

def error_for_status(message: str, status_code: int) -> TransportError:
    """Maps an HTTP status to a tagged TransportError."""
    if status_code == 429:
        return RetryableTransportError(message, status_code, RATE_LIMIT)
    if status_code in (401, 403):
        return TransportError(message, status_code, AUTH)
    if status_code >= 500:
        return TransportError(message, status_code, SERVER_ERROR)
    return TransportError(message, status_code, CLIENT_ERROR)

def translate_sdk_error(error: Exception, sdk: ModuleType, provider: str) -> TransportError:
    """Translates an openai/groq SDK exception into the gateway's TransportError.

    Args:
        error: The exception raised by the SDK call.
        sdk: The SDK module (`openai` or `groq`) the exception came from.
        provider: Provider name used in the message.
    """
    if isinstance(error, TransportError):
        return error
    if isinstance(error, sdk.APIStatusError):
        return error_for_status(f"{provider} API error ({error.status_code}): {error.message}", error.status_code)
    if isinstance(error, sdk.APITimeoutError):
        return TransportError(f"{provider} request timed out", failure_class=TIMEOUT)
    if isinstance(error, sdk.APIConnectionError):
        return TransportError(f"{provider} connection error: {error}", failure_class=CONNECTION)
    if isinstance(error, sdk.APIResponseValidationError):
        return TransportError(f"Invalid response structure from {provider}: {error}", failure_class=INVALID_RESPONSE)
    return TransportError(f"Unexpected error calling {provider}: {type(error).__name__} - {error}", failure_class=UNKNOWN)

def build_request_messages(
    messages: List[ChatMessage], response_schema: Optional[Dict[str, Any]] = None
) -> List[ChatMessage]:
    """Prepends the JSON-schema instruction when structured output is requested."""
    if response_schema is None:
        return list(messages)
    instruction: ChatMessage = {
        'role': MessageRole('system'),
        'content': SCHEMA_INSTRUCTION.format(schema=json.dumps(response_schema)),
    }
    return [instruction] + list(messages)

def parse_completion(response: Any, provider: str) -> StructuredAIResponse:
    """Parses a chat-completion response object from either SDK."""
    try:
        choice = response.choices[0]
        content = choice.message.content or ""

        token_usage = None
        if response.usage:
            token_usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens
            )

        return StructuredAIResponse(
            content=content,
            token_usage=token_usage,
            model_name=response.model,
            finish_reason=choice.finish_reason,
        )
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        logger.error(f"Failed to parse {provider} response structure: {e}", exc_info=True)
        logger.debug(f"Raw {provider} response object: {response}")
        raise TransportError(f"Invalid response structure from {provider}: {e}", failure_class=INVALID_RESPONSE) from e
