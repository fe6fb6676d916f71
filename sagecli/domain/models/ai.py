"""Domain models related to AI interactions.

Includes structures for outgoing messages, AI responses and model listings.
"""

from typing import Optional, TypedDict
from dataclasses import dataclass

from .common import TokenUsage, MessageRole

# --- AI Interaction Structures ---

class ChatMessage(TypedDict):
    """Represents a message structure expected by AI model APIs (like OpenAI)."""
    role: MessageRole
    content: str

class HistoryTurn(TypedDict):
    """A prior conversation turn as the caller keeps it ('user' or 'model')."""
    role: str
    text: str

@dataclass
class StructuredAIResponse:
    """Structured response from an AI model, including metadata."""
    content: str
    token_usage: Optional[TokenUsage] = None
    model_name: Optional[str] = None # Which model generated the response
    latency_ms: Optional[float] = None # Time taken for the API call
    finish_reason: Optional[str] = None

# --- Model Representation ---

@dataclass
class ProviderModel:
    """Entity representing a model available from a provider."""
    model_id: str # e.g., "llama3-8b-8192"
    name: str     # User-friendly name
    provider: str
    context_window: Optional[int] = None
