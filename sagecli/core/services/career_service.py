"""Career Service: the feature call sites of the AI request gateway.

Each operation builds a prompt (and, for structured results, a response
schema), consults the response cache, and otherwise sends the request
through ApiRetryService. Results are cached only after a successful round
trip, with a TTL chosen per feature.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sagecli.core.services import schemas
from sagecli.domain.errors import TransportError, INVALID_RESPONSE
from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.interfaces.cache import CacheService
from sagecli.domain.models.ai import ChatMessage
from sagecli.domain.models.common import CacheKey, MessageRole
from sagecli.infrastructure.ai.response_parsing import clean_text, parse_json_payload
from sagecli.infrastructure.cache.caching_service import build_cache_key
from sagecli.infrastructure.resilience.api_retry import ApiRetryService

logger = logging.getLogger(__name__)

# Cache lifetimes in seconds
NEWS_TTL = 30 * 60
JOBS_TTL = 30 * 60
QUIZ_TTL = 60 * 60
PROBLEMS_TTL = 60 * 60
RESOURCES_TTL = 60 * 60
ADVICE_TTL = 60 * 60
ROADMAP_TTL = 24 * 60 * 60
CAREER_TTL = 24 * 60 * 60
MOTIVATION_TTL = 24 * 60 * 60


async def generate_text(ai_model: AIModel, prompt: str, system_instruction: Optional[str] = None) -> str:
    """One text completion, fences stripped."""
    messages: List[ChatMessage] = []
    if system_instruction:
        messages.append({'role': MessageRole('system'), 'content': system_instruction})
    messages.append({'role': MessageRole('user'), 'content': prompt})
    response = await ai_model.send_messages(messages)
    return clean_text(response.content)


async def generate_json(
    ai_model: AIModel, prompt: str, schema: Dict[str, Any], unwrap_key: Optional[str] = None
) -> Any:
    """One structured completion parsed from JSON.

    With `unwrap_key` the result is a list of objects (a bare list is accepted,
    otherwise it is taken from `payload[unwrap_key]`); without it the result is
    a single object. Any other shape is an INVALID_RESPONSE failure, raised
    before the caller gets a chance to cache it.
    """
    messages: List[ChatMessage] = [{'role': MessageRole('user'), 'content': prompt}]
    response = await ai_model.send_messages(messages, response_schema=schema)
    payload = parse_json_payload(response.content)
    if unwrap_key is None:
        if not isinstance(payload, dict):
            raise TransportError("Expected a JSON object in the model response.", failure_class=INVALID_RESPONSE)
        return payload
    if isinstance(payload, dict):
        payload = payload.get(unwrap_key)
    if not isinstance(payload, list):
        raise TransportError(f"Expected a '{unwrap_key}' list in the model response.", failure_class=INVALID_RESPONSE)
    if not all(isinstance(item, dict) for item in payload):
        raise TransportError(f"Expected objects in the '{unwrap_key}' list.", failure_class=INVALID_RESPONSE)
    return payload


class CareerService:
    """Feature adapters for career guidance (advice, jobs, quizzes, roadmaps...)."""

    def __init__(
        self,
        ai_model: AIModel,
        api_retry_service: ApiRetryService,
        cache_service: CacheService,
    ):
        self.ai_model = ai_model
        self.api_retry_service = api_retry_service
        self.cache_service = cache_service

    async def _cached_call(
        self,
        cache_key: Optional[CacheKey],
        ttl: Optional[float],
        call: Callable[[], Awaitable[Any]],
        endpoint_name: str,
    ) -> Any:
        """Returns a fresh cache hit, or runs `call` through the gateway and caches the result."""
        if cache_key is not None:
            cached = self.cache_service.get(cache_key)
            if cached is not None:
                logger.info(f"Serving {endpoint_name} from cache (key={cache_key}).")
                return cached

        result = await self.api_retry_service.execute(call, endpoint_name=endpoint_name)

        if cache_key is not None:
            self.cache_service.set(cache_key, result, ttl)
        return result

    # --- Cached text call sites ---

    async def get_motivation_quote(self, language: str) -> str:
        prompt = f"Generate a single short powerful motivational sentence for a tech learner in {language}. Use emojis."
        return await self._cached_call(
            build_cache_key("motivation", language), MOTIVATION_TTL,
            lambda: generate_text(self.ai_model, prompt), "motivation_quote",
        )

    async def get_advice(self, goal: str, level: str) -> str:
        prompt = f"Brief tactical advice for: Goal: {goal}, Level: {level}."
        return await self._cached_call(
            build_cache_key("advice", goal, level), ADVICE_TTL,
            lambda: generate_text(self.ai_model, prompt), "advice",
        )

    # --- Cached structured call sites ---

    async def search_jobs(self, role: str, location: str, experience: str, skills: List[str]) -> List[Dict[str, Any]]:
        """Finds job and internship openings matching the criteria."""
        prompt = (
            f"Find 10 active job/internship opportunities matching: Role: {role}, Location: {location}, "
            f"Experience: {experience}, Skills: {', '.join(skills)}. Return raw JSON only."
        )
        return await self._cached_call(
            build_cache_key("jobs", role, location, experience, skills), JOBS_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.JOB_SCHEMA, schemas.JOBS_KEY), "search_jobs",
        )

    async def get_aptitude_quiz(self, category: str) -> List[Dict[str, Any]]:
        prompt = f"Generate 10 aptitude questions for {category}. Return raw JSON only."
        return await self._cached_call(
            build_cache_key("quiz", category), QUIZ_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.QUIZ_SCHEMA, schemas.QUESTIONS_KEY), "aptitude_quiz",
        )

    async def get_problem_solving_set(self, domain: str) -> List[Dict[str, Any]]:
        prompt = f"Create 5 specialized coding/DSA problems for {domain}. Return raw JSON only."
        return await self._cached_call(
            build_cache_key("problems", domain), PROBLEMS_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.PROBLEM_SET_SCHEMA, schemas.PROBLEMS_KEY),
            "problem_set",
        )

    async def get_market_pulse_news(self, interest: str = "Technology") -> List[Dict[str, Any]]:
        prompt = f"List exactly 10 latest tech news for {interest}. Return raw JSON only."
        return await self._cached_call(
            build_cache_key("news", interest), NEWS_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.NEWS_SCHEMA, schemas.ARTICLES_KEY), "market_news",
        )

    async def get_project_roadmap(self, project_name: str) -> Dict[str, Any]:
        prompt = f'Develop a full project roadmap for "{project_name}". Return raw JSON only.'
        return await self._cached_call(
            build_cache_key("roadmap", project_name), ROADMAP_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.ROADMAP_SCHEMA), "project_roadmap",
        )

    async def get_localized_resources(self, topic: str, language: str, count: int = 10) -> List[Dict[str, Any]]:
        prompt = f"Suggest {count} learning resources about {topic} in {language}. Return raw JSON only."
        return await self._cached_call(
            build_cache_key("resources", topic, language), RESOURCES_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.RESOURCES_SCHEMA, schemas.RESOURCES_KEY),
            "localized_resources",
        )

    async def get_career_recommendations(self, skills: List[str], language: str) -> List[Dict[str, Any]]:
        """Recommends career paths (with milestones) for a skill set."""
        prompt = f"Recommend career paths for: {', '.join(skills)} in {language}. Return raw JSON only."
        return await self._cached_call(
            build_cache_key("career", skills, language), CAREER_TTL,
            lambda: generate_json(self.ai_model, prompt, schemas.CAREER_PATHS_SCHEMA, schemas.PATHS_KEY),
            "career_recommendations",
        )

    # --- Uncached call sites ---

    async def simulate_code_execution(self, code: str, language: str) -> str:
        prompt = f"Execute {language} code and return raw result: {code}"
        return await self._cached_call(None, None, lambda: generate_text(self.ai_model, prompt), "code_execution")

    async def simulate_terminal(self, command: str, files: List[Dict[str, Any]]) -> str:
        prompt = f'Bash simulation for cmd "{command}" on files: {json.dumps(files)}'
        return await self._cached_call(None, None, lambda: generate_text(self.ai_model, prompt), "terminal")

    async def get_architect_script(self, project_title: str) -> str:
        prompt = f"Architectural script for: {project_title}."
        return await self._cached_call(None, None, lambda: generate_text(self.ai_model, prompt), "architect_script")

    async def suggest_alternative_videos(self, topic: str, language: str) -> List[Dict[str, Any]]:
        prompt = f"Find alternative YouTube learning for: {topic} in {language}. Return raw JSON only."
        return await self._cached_call(
            None, None,
            lambda: generate_json(self.ai_model, prompt, schemas.VIDEOS_SCHEMA, schemas.RESOURCES_KEY),
            "alternative_videos",
        )
