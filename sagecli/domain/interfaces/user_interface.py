"""Interface for interacting with the user (input/output).

Defines the contract for displaying information, errors, warnings,
structured results and getting input from the user, allowing different UI
implementations (e.g., console, GUI).
"""

import abc
from typing import Any, Dict, List, Optional

# Import relevant domain models
from sagecli.domain.models.common import PromptText, ProcessedOutput

class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The processed output string to display.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_records(
        self,
        records: List[Dict[str, Any]],
        columns: List[str],
        title: Optional[str] = None,
    ) -> None:
        """Displays a list of structured records (jobs, news, resources...) as a table.

        Args:
            records: The records to display.
            columns: Keys of each record to show, in order.
            title: Optional table title.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "Input: ") -> PromptText:
        """Gets input from the user synchronously.

        Note: For async contexts, the caller should wrap this in asyncio.to_thread.

        Args:
            prompt_message: The message to display before the input prompt.

        Returns:
            The user's input as PromptText.
        """
        pass

    def display_session_header(self, mode: str = "SAGE") -> None:
        """Displays a header for a new chat session.

        Args:
            mode: Name of the conversation mode
        """
        pass

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        """Displays a footer at the end of a chat session.

        Args:
            message_count: Number of messages exchanged
            session_duration_secs: Session duration in seconds
        """
        pass
