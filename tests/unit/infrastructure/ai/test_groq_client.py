import pytest
from unittest.mock import MagicMock, patch
import os

import httpx
import groq

from sagecli.infrastructure.ai.groq.groq_client import GroqClient
from sagecli.domain.errors import RetryableTransportError, TransportError, RATE_LIMIT, CLIENT_ERROR

REQUEST = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")

@pytest.fixture
def mock_groq_client():
    mock_client = MagicMock()
    mock_choice = MagicMock()
    mock_choice.message.content = '{"quote": "Keep going."}'
    mock_choice.finish_reason = "stop"
    mock_completion = MagicMock(choices=[mock_choice], usage=None, model="llama-3.3-70b-versatile")
    mock_client.chat.completions.create.return_value = mock_completion
    return mock_client

@patch('sagecli.infrastructure.ai.groq.groq_client.GroqSDKClient')
def test_groq_client_init(mock_constructor, mock_groq_client):
    mock_constructor.return_value = mock_groq_client
    client = GroqClient(api_key="gsk_test", model="llama-3.1-8b-instant")
    mock_constructor.assert_called_once_with(api_key="gsk_test", max_retries=0)
    assert client.model == "llama-3.1-8b-instant"
    assert client.provider_name == "groq"

@patch('sagecli.infrastructure.ai.groq.groq_client.GroqSDKClient')
def test_groq_client_init_no_key(mock_constructor):
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(ValueError, match="Groq API key not provided"):
            GroqClient()
    mock_constructor.assert_not_called()

@pytest.mark.asyncio
@patch('sagecli.infrastructure.ai.groq.groq_client.GroqSDKClient')
async def test_send_messages_without_usage(mock_constructor, mock_groq_client):
    mock_constructor.return_value = mock_groq_client
    client = GroqClient(api_key="gsk_test")

    response = await client.send_messages([{'role': 'user', 'content': 'Motivate me'}])

    assert response.content == '{"quote": "Keep going."}'
    assert response.token_usage is None
    assert response.finish_reason == "stop"

@pytest.mark.asyncio
@patch('sagecli.infrastructure.ai.groq.groq_client.GroqSDKClient')
async def test_rate_limit_becomes_retryable(mock_constructor, mock_groq_client):
    mock_constructor.return_value = mock_groq_client
    mock_groq_client.chat.completions.create.side_effect = groq.RateLimitError(
        "Too many requests", response=httpx.Response(429, request=REQUEST), body=None
    )
    client = GroqClient(api_key="gsk_test")

    with pytest.raises(RetryableTransportError) as exc_info:
        await client.send_messages([{'role': 'user', 'content': 'hi'}])

    assert exc_info.value.status_code == 429
    assert exc_info.value.failure_class == RATE_LIMIT

@pytest.mark.asyncio
@patch('sagecli.infrastructure.ai.groq.groq_client.GroqSDKClient')
async def test_bad_request_is_client_error(mock_constructor, mock_groq_client):
    mock_constructor.return_value = mock_groq_client
    mock_groq_client.chat.completions.create.side_effect = groq.BadRequestError(
        "Bad request", response=httpx.Response(400, request=REQUEST), body=None
    )
    client = GroqClient(api_key="gsk_test")

    with pytest.raises(TransportError) as exc_info:
        await client.send_messages([{'role': 'user', 'content': 'hi'}])

    assert exc_info.value.status_code == 400
    assert exc_info.value.failure_class == CLIENT_ERROR
    assert not isinstance(exc_info.value, RetryableTransportError)
