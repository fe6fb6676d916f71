"""Interface for AI Language Models (LLMs).

Defines the contract for sending messages to different AI providers
(e.g., OpenAI GPT, Groq Llama). Implementations are the transport layer of
the request gateway and must raise `TransportError` subclasses on failure.
"""

import abc
from typing import Any, Dict, List, Optional

# Import relevant domain models
from ..models.ai import ChatMessage, StructuredAIResponse, ProviderModel


class AIModel(abc.ABC):
    """Abstract Base Class for AI language model interactions."""

    provider_name: str = "unknown"

    @abc.abstractmethod
    async def send_messages(
        self,
        messages: List[ChatMessage],
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> StructuredAIResponse:
        """Sends a list of messages (conversation history) to the AI model asynchronously.

        Args:
            messages: A list of ChatMessage objects representing the conversation.
            response_schema: Optional JSON schema the reply must conform to.
                When given, the provider is asked for JSON output.

        Returns:
            A StructuredAIResponse containing the AI's reply and metadata.

        Raises:
            TransportError: If the API call fails. Rate limits are raised as
                RetryableTransportError.
        """
        pass

    @abc.abstractmethod
    async def list_available_models(self) -> List[ProviderModel]:
        """Lists the models available from this provider asynchronously.

        Raises:
            TransportError: If listing models fails.
        """
        pass
