import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from sagecli.core.services import schemas
from sagecli.core.services.career_service import CareerService, JOBS_TTL, NEWS_TTL, ROADMAP_TTL
from sagecli.domain.errors import FatalRequestError, RetriesExhaustedError, TransportError, INVALID_RESPONSE
from sagecli.domain.models.ai import StructuredAIResponse
from sagecli.infrastructure.cache.caching_service import CachingServiceImpl
from sagecli.infrastructure.resilience.api_retry import ApiRetryService
from sagecli.infrastructure.resilience.request_queue import RequestQueue

JOBS = [
    {"company": "Acme", "role": "Backend Intern", "location": "Remote", "salary": "$30/h",
     "category": "Internship", "applyUrl": "https://acme.example/jobs/1"},
]

def _json_reply(payload) -> StructuredAIResponse:
    return StructuredAIResponse(content=json.dumps(payload))

@pytest.fixture
def cache(fake_clock):
    return CachingServiceImpl(clock=fake_clock)

@pytest.fixture
def retry_service(sleep_recorder):
    return ApiRetryService(request_queue=RequestQueue(), sleep=sleep_recorder)

@pytest.fixture
def career_service(mock_ai_model, retry_service, cache):
    return CareerService(ai_model=mock_ai_model, api_retry_service=retry_service, cache_service=cache)

@pytest.mark.asyncio
async def test_search_jobs_unwraps_and_caches(career_service, mock_ai_model, fake_clock):
    mock_ai_model.send_messages.return_value = _json_reply({"jobs": JOBS})

    first = await career_service.search_jobs("Backend", "Remote", "Entry", ["python", "sql"])
    # Same skills in another order hit the same entry
    second = await career_service.search_jobs("Backend", "Remote", "Entry", ["sql", "python"])

    assert first == JOBS
    assert second == JOBS
    mock_ai_model.send_messages.assert_awaited_once()
    call_args = mock_ai_model.send_messages.call_args
    assert call_args.kwargs['response_schema'] == schemas.JOB_SCHEMA

    fake_clock.advance(JOBS_TTL + 1)
    await career_service.search_jobs("Backend", "Remote", "Entry", ["python", "sql"])
    assert mock_ai_model.send_messages.await_count == 2

@pytest.mark.asyncio
async def test_bare_list_reply_is_accepted(career_service, mock_ai_model):
    articles = [{"title": "New model released", "source": "Tech Daily", "date": "2026-10-01", "url": "https://x.example"}]
    mock_ai_model.send_messages.return_value = _json_reply(articles)

    assert await career_service.get_market_pulse_news("AI") == articles

@pytest.mark.asyncio
async def test_news_expires_after_thirty_minutes(career_service, mock_ai_model, fake_clock):
    mock_ai_model.send_messages.return_value = _json_reply({"articles": []})

    await career_service.get_market_pulse_news()
    fake_clock.advance(NEWS_TTL - 1)
    await career_service.get_market_pulse_news()
    assert mock_ai_model.send_messages.await_count == 1

    fake_clock.advance(2)
    await career_service.get_market_pulse_news()
    assert mock_ai_model.send_messages.await_count == 2

@pytest.mark.asyncio
async def test_roadmap_is_a_plain_object(career_service, mock_ai_model, cache):
    roadmap = {"title": "CLI", "description": "A CLI", "tech": ["python"], "phases": []}
    mock_ai_model.send_messages.return_value = _json_reply(roadmap)

    assert await career_service.get_project_roadmap("CLI") == roadmap
    assert cache.get("roadmap_CLI") == roadmap
    assert ROADMAP_TTL == 24 * 60 * 60

@pytest.mark.asyncio
async def test_text_call_site_strips_fences(career_service, mock_ai_model):
    mock_ai_model.send_messages.return_value = StructuredAIResponse(content="```\nStart small, ship often.\n```")

    assert await career_service.get_advice("Get hired", "Beginner") == "Start small, ship often."
    sent_messages = mock_ai_model.send_messages.call_args.args[0]
    assert "Goal: Get hired" in sent_messages[-1]['content']

@pytest.mark.asyncio
async def test_failed_call_is_not_cached(career_service, mock_ai_model, cache, sleep_recorder):
    mock_ai_model.send_messages.side_effect = TransportError("Too many requests", status_code=429)

    with pytest.raises(RetriesExhaustedError):
        await career_service.get_aptitude_quiz("Logical")

    assert mock_ai_model.send_messages.await_count == 5
    assert len(sleep_recorder.delays) == 4
    assert cache.get("quiz_Logical") is None

@pytest.mark.asyncio
async def test_malformed_json_fails_without_retry(career_service, mock_ai_model, sleep_recorder):
    mock_ai_model.send_messages.return_value = StructuredAIResponse(content="not json")

    with pytest.raises(FatalRequestError) as exc_info:
        await career_service.get_problem_solving_set("graphs")

    assert exc_info.value.cause.failure_class == INVALID_RESPONSE
    mock_ai_model.send_messages.assert_awaited_once()
    assert sleep_recorder.delays == []

@pytest.mark.asyncio
async def test_missing_list_key_is_invalid(career_service, mock_ai_model):
    mock_ai_model.send_messages.return_value = _json_reply({"unexpected": {}})

    with pytest.raises(FatalRequestError):
        await career_service.get_localized_resources("Rust", "English")

@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"jobs": ["Acme backend intern"]},
    ["Acme backend intern", {"company": "Acme"}],
])
async def test_list_items_must_be_objects(career_service, mock_ai_model, cache, sleep_recorder, payload):
    mock_ai_model.send_messages.return_value = _json_reply(payload)

    with pytest.raises(FatalRequestError) as exc_info:
        await career_service.search_jobs("Backend", "Remote", "Entry", ["python"])

    assert exc_info.value.cause.failure_class == INVALID_RESPONSE
    assert sleep_recorder.delays == []
    assert cache.get("jobs_Backend_Remote_Entry_python") is None

@pytest.mark.asyncio
async def test_roadmap_must_be_an_object(career_service, mock_ai_model, cache):
    mock_ai_model.send_messages.return_value = _json_reply([{"title": "x"}])

    with pytest.raises(FatalRequestError) as exc_info:
        await career_service.get_project_roadmap("CLI")

    assert exc_info.value.cause.failure_class == INVALID_RESPONSE
    assert cache.get("roadmap_CLI") is None

    # Nothing was cached, so the next request asks the model again
    roadmap = {"title": "CLI", "description": "A command line tool", "tech": ["python"], "phases": []}
    mock_ai_model.send_messages.return_value = _json_reply(roadmap)
    assert await career_service.get_project_roadmap("CLI") == roadmap
    assert mock_ai_model.send_messages.await_count == 2

@pytest.mark.asyncio
async def test_uncached_call_sites_always_hit_the_model(mock_ai_model, retry_service):
    cache = MagicMock()
    service = CareerService(ai_model=mock_ai_model, api_retry_service=retry_service, cache_service=cache)

    await service.simulate_code_execution("print(1)", "python")
    await service.simulate_code_execution("print(1)", "python")
    await service.simulate_terminal("ls", [{"name": "main.py"}])

    assert mock_ai_model.send_messages.await_count == 3
    cache.get.assert_not_called()
    cache.set.assert_not_called()
    terminal_prompt = mock_ai_model.send_messages.call_args.args[0][-1]['content']
    assert '"main.py"' in terminal_prompt

@pytest.mark.asyncio
async def test_cache_hit_skips_gateway(mock_ai_model, cache):
    retry_service = MagicMock()
    retry_service.execute = AsyncMock()
    service = CareerService(ai_model=mock_ai_model, api_retry_service=retry_service, cache_service=cache)
    cache.set("motivation_English", "You've got this!", ttl=60)

    assert await service.get_motivation_quote("English") == "You've got this!"
    retry_service.execute.assert_not_awaited()

@pytest.mark.asyncio
async def test_career_recommendations_use_endpoint_name(mock_ai_model, cache):
    retry_service = MagicMock()
    retry_service.execute = AsyncMock(return_value=[{"title": "Data Engineer"}])
    service = CareerService(ai_model=mock_ai_model, api_retry_service=retry_service, cache_service=cache)

    result = await service.get_career_recommendations(["sql", "python"], "English")

    assert result == [{"title": "Data Engineer"}]
    assert retry_service.execute.call_args.kwargs['endpoint_name'] == "career_recommendations"
    assert cache.get("career_python_sql_English") == [{"title": "Data Engineer"}]
