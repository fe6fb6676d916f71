"""Core service for conversational call sites.

Covers the SAGE career-advice chat and the mock technical interview. Each
turn sends the system instruction, the prior history and the new message
through the request gateway. Conversations are never cached.
"""

import asyncio
import logging
import time
from typing import List, Optional

from sagecli.core.messages import describe_gateway_error
from sagecli.domain.errors import GatewayError
from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.interfaces.user_interface import UserInterface
from sagecli.domain.models.ai import ChatMessage, HistoryTurn
from sagecli.domain.models.chat import ChatSession, history_to_messages
from sagecli.domain.models.common import MessageRole, ProcessedOutput
from sagecli.infrastructure.ai.response_parsing import clean_text
from sagecli.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

SAGE_MODE = "sage"
INTERVIEW_MODE = "interview"
EXIT_COMMANDS = ("exit", "quit")

SAGE_INSTRUCTION = "You are SAGE. Provide expert career advice in {language}. Be concise."
INTERVIEW_INSTRUCTION = "You are a technical diagnostic AI. Evaluate the user's answer."


class ChatService:
    """Orchestrates SAGE chat and mock interview turns."""

    def __init__(
        self,
        ai_model: AIModel,
        api_retry_service: ApiRetryService,
        ui: UserInterface,
    ):
        """Initializes the ChatService with its dependencies."""
        self.ai_model = ai_model
        self.api_retry_service = api_retry_service
        self.ui = ui
        self.current_session: Optional[ChatSession] = None
        logger.info(f"ChatService initialized with AI model: {ai_model.__class__.__name__}")

    async def _send_turn(
        self, system_instruction: str, history: List[HistoryTurn], user_message: str, endpoint_name: str
    ) -> str:
        messages: List[ChatMessage] = [{'role': MessageRole('system'), 'content': system_instruction}]
        messages.extend(history_to_messages(history))
        messages.append({'role': MessageRole('user'), 'content': user_message})

        async def call() -> str:
            response = await self.ai_model.send_messages(messages)
            return clean_text(response.content)

        return await self.api_retry_service.execute(call, endpoint_name=endpoint_name)

    async def get_sage_response(self, history: List[HistoryTurn], user_message: str, language: str) -> str:
        """Career advice from SAGE for the next user message."""
        return await self._send_turn(
            SAGE_INSTRUCTION.format(language=language), history, user_message, "sage_chat"
        )

    async def get_mock_interview_response(self, history: List[HistoryTurn], user_message: str) -> str:
        """Evaluation of the user's latest interview answer."""
        return await self._send_turn(INTERVIEW_INSTRUCTION, history, user_message, "mock_interview")

    async def _reply(self, session: ChatSession, user_message: str, language: str) -> str:
        if session.mode == INTERVIEW_MODE:
            return await self.get_mock_interview_response(session.history, user_message)
        return await self.get_sage_response(session.history, user_message, language)

    async def chat_loop(self, mode: str = SAGE_MODE, language: str = "English") -> None:
        """Runs an interactive conversation until the user exits."""
        session = ChatSession(mode=mode)
        self.current_session = session
        started = time.time()
        title = "SAGE" if mode == SAGE_MODE else "Interviewer"
        self.ui.display_session_header(title)
        logger.info(f"Chat session {session.session_id} ({mode}) started.")

        try:
            while True:
                user_input = await asyncio.to_thread(self.ui.get_prompt, "You: ")
                text = str(user_input).strip()
                if not text:
                    continue
                if text.lower() in EXIT_COMMANDS:
                    self.ui.display_info("Ending chat session.")
                    break

                try:
                    reply = await self._reply(session, text, language)
                except GatewayError as e:
                    # The failed turn is not added to the history
                    logger.error(f"Chat turn failed: {e!r}")
                    self.ui.display_error(describe_gateway_error(e))
                    continue

                session.add_turn("user", text)
                session.add_turn("model", reply)
                self.ui.display_output(ProcessedOutput(reply), title=title)
        except (KeyboardInterrupt, EOFError):
            logger.info("Chat session interrupted by user.")
            self.ui.display_info("Ending chat session.")
        finally:
            self.ui.display_session_footer(len(session.history), time.time() - started)
            logger.info(f"Chat session {session.session_id} finished.")
            self.current_session = None
