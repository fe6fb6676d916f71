"""Defines common Value Objects used across different domain contexts.

These objects represent simple values or concepts like prompts, cache keys,
message roles, etc., ensuring consistency and type safety.
"""

from typing import NewType, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
PromptText = NewType("PromptText", str)        # User's text prompt
ProcessedOutput = NewType("ProcessedOutput", str) # Output ready for display

# === Caching Context ===
CacheKey = NewType("CacheKey", str)              # Unique key for a cache entry
CachePrefix = NewType("CachePrefix", str)      # Prefix for categorizing cache keys (e.g., 'jobs')

# === Conversation Context ===
MessageRole = NewType("MessageRole", str)      # 'system', 'user', 'assistant'

# --- Structured Data ---
class TokenUsage(TypedDict):
    """Represents token usage information from an AI call."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
