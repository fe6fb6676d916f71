import pytest
from typer.testing import CliRunner
from unittest.mock import AsyncMock, MagicMock
from typing import List

from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.models.ai import StructuredAIResponse
from sagecli.infrastructure.ai.openai.gpt_client import GptClient
from sagecli.infrastructure.cli.display import ConsoleDisplay
from sagecli.infrastructure.config.settings import clear_overrides, clear_test_config


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Stands in for asyncio.sleep in the retry service; records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture
def fake_clock():
    return FakeClock()

@pytest.fixture
def sleep_recorder():
    return SleepRecorder()

@pytest.fixture
def mock_ai_model():
    """AIModel whose send_messages returns a canned text response."""
    mock = MagicMock(spec=AIModel)
    mock.provider_name = "openai"
    mock.send_messages = AsyncMock(return_value=StructuredAIResponse(content="Mocked AI response"))
    mock.list_available_models = AsyncMock(return_value=[])
    return mock

@pytest.fixture(autouse=True)
def reset_test_config():
    yield
    clear_test_config()
    clear_overrides()

# --- CLI composition root mocks ---

@pytest.fixture
def mock_openai_client(mocker):
    """Patches GptClient in main so no real API calls are made."""
    mock = mocker.MagicMock(spec=GptClient)
    mock.provider_name = "openai"
    mock.send_messages = mocker.AsyncMock(
        return_value=StructuredAIResponse(content="Mocked AI integration response")
    )
    mock.list_available_models = mocker.AsyncMock(return_value=[])
    mocker.patch('sagecli.main.GptClient', return_value=mock)
    return mock

@pytest.fixture
def mock_console_display(mocker):
    """Patches ConsoleDisplay in main to capture what commands render."""
    mock = mocker.MagicMock(spec=ConsoleDisplay)
    mocker.patch('sagecli.main.ConsoleDisplay', return_value=mock)
    return mock
