"""Domain models specific to chat interactions.

Includes the `ChatSession` aggregate holding the running conversation.
"""

import uuid
import time
from typing import List
from dataclasses import dataclass, field

from sagecli.domain.models.ai import ChatMessage, HistoryTurn
from sagecli.domain.models.common import MessageRole

# Conversation roles as callers store them, mapped to API roles
ROLE_TO_API = {"user": "user", "model": "assistant"}

@dataclass
class ChatSession:
    """Aggregate root representing an ongoing chat conversation."""
    mode: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    history: List[HistoryTurn] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)

    def add_turn(self, role: str, text: str) -> None:
        if role not in ROLE_TO_API:
            raise ValueError(f"Unknown conversation role: {role}")
        self.history.append({'role': role, 'text': text})

def history_to_messages(history: List[HistoryTurn]) -> List[ChatMessage]:
    """Converts stored turns to the ChatMessage format for API calls."""
    return [
        {'role': MessageRole(ROLE_TO_API.get(turn['role'], 'user')), 'content': turn['text']}
        for turn in history
    ]
