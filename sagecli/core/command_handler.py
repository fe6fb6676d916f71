"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates the work
to CareerService / ChatService, and renders results or gateway failures
through the UserInterface.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sagecli.core.messages import describe_gateway_error
from sagecli.core.services.career_service import CareerService
from sagecli.core.services.chat_service import ChatService
from sagecli.domain.errors import GatewayError
from sagecli.domain.interfaces.ai_model import AIModel
from sagecli.domain.interfaces.cache import CacheService
from sagecli.domain.interfaces.user_interface import UserInterface
from sagecli.domain.models.common import ProcessedOutput

logger = logging.getLogger(__name__)

JOB_COLUMNS = ["company", "role", "location", "salary", "category", "applyUrl"]
QUIZ_COLUMNS = ["question", "options", "correctAnswer"]
PROBLEM_COLUMNS = ["title", "difficulty", "description"]
NEWS_COLUMNS = ["title", "source", "date", "url"]
RESOURCE_COLUMNS = ["title", "type", "category", "provider", "url"]
CAREER_COLUMNS = ["title", "matchScore", "reason"]


class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        career_service: CareerService,
        chat_service: ChatService,
        cache_service: CacheService,
        ui: UserInterface,
        ai_model: Optional[AIModel] = None,
    ):
        """Initializes the CommandHandler with required services."""
        self.career_service = career_service
        self.chat_service = chat_service
        self.cache_service = cache_service
        self.ui = ui
        self.ai_model = ai_model

    async def _run(self, description: str, operation: Callable[[], Awaitable[Any]]) -> Optional[Any]:
        """Runs a service call, turning gateway failures into UI errors. Returns None on failure."""
        logger.info(f"Handling '{description}' command.")
        try:
            return await operation()
        except GatewayError as e:
            logger.error(f"'{description}' failed: {e!r}")
            self.ui.display_error(describe_gateway_error(e))
            return None

    def _show_text(self, text: Optional[str], title: str) -> None:
        if text is not None:
            self.ui.display_output(ProcessedOutput(text), title=title)

    def _show_records(self, records: Optional[List[Dict[str, Any]]], columns: List[str], title: str) -> None:
        if records is None:
            return
        if not records:
            self.ui.display_info("No results returned.")
            return
        self.ui.display_records(records, columns, title=title)

    # --- Text commands ---

    async def handle_advice(self, goal: str, level: str) -> None:
        advice = await self._run("advice", lambda: self.career_service.get_advice(goal, level))
        self._show_text(advice, "Advice")

    async def handle_motivation(self, language: str) -> None:
        quote = await self._run("motivate", lambda: self.career_service.get_motivation_quote(language))
        self._show_text(quote, "Motivation")

    async def handle_architect(self, project_title: str) -> None:
        script = await self._run("architect", lambda: self.career_service.get_architect_script(project_title))
        self._show_text(script, "Architect")

    async def handle_run_code(self, code: str, language: str) -> None:
        output = await self._run("run-code", lambda: self.career_service.simulate_code_execution(code, language))
        self._show_text(output, "Output")

    async def handle_terminal(self, command: str, files: List[Dict[str, Any]]) -> None:
        output = await self._run("terminal", lambda: self.career_service.simulate_terminal(command, files))
        self._show_text(output, "Terminal")

    # --- Structured commands ---

    async def handle_jobs(self, role: str, location: str, experience: str, skills: List[str]) -> None:
        jobs = await self._run("jobs", lambda: self.career_service.search_jobs(role, location, experience, skills))
        self._show_records(jobs, JOB_COLUMNS, f"Openings for {role}")

    async def handle_quiz(self, category: str) -> None:
        questions = await self._run("quiz", lambda: self.career_service.get_aptitude_quiz(category))
        self._show_records(questions, QUIZ_COLUMNS, f"{category} aptitude quiz")

    async def handle_problems(self, domain: str) -> None:
        problems = await self._run("problems", lambda: self.career_service.get_problem_solving_set(domain))
        self._show_records(problems, PROBLEM_COLUMNS, f"{domain} problem set")

    async def handle_news(self, interest: str) -> None:
        articles = await self._run("news", lambda: self.career_service.get_market_pulse_news(interest))
        self._show_records(articles, NEWS_COLUMNS, f"Market pulse: {interest}")

    async def handle_resources(self, topic: str, language: str, count: int) -> None:
        resources = await self._run(
            "resources", lambda: self.career_service.get_localized_resources(topic, language, count)
        )
        self._show_records(resources, RESOURCE_COLUMNS, f"Resources: {topic}")

    async def handle_videos(self, topic: str, language: str) -> None:
        videos = await self._run("videos", lambda: self.career_service.suggest_alternative_videos(topic, language))
        self._show_records(videos, RESOURCE_COLUMNS, f"Videos: {topic}")

    async def handle_careers(self, skills: List[str], language: str) -> None:
        paths = await self._run("careers", lambda: self.career_service.get_career_recommendations(skills, language))
        self._show_records(paths, CAREER_COLUMNS, "Recommended career paths")

    async def handle_roadmap(self, project_name: str) -> None:
        roadmap = await self._run("roadmap", lambda: self.career_service.get_project_roadmap(project_name))
        if roadmap is None:
            return
        lines = [f"# {roadmap.get('title', project_name)}", "", str(roadmap.get('description', ''))]
        tech = roadmap.get('tech') or []
        if tech:
            lines += ["", f"**Tech:** {', '.join(str(t) for t in tech)}"]
        for phase in roadmap.get('phases') or []:
            if not isinstance(phase, dict):
                continue
            lines += ["", f"## {phase.get('title', '')}", str(phase.get('details', ''))]
            lines += [f"- {task}" for task in phase.get('tasks') or []]
        self._show_text("\n".join(lines), "Roadmap")

    # --- Chat ---

    async def handle_chat(self, mode: str, language: str) -> None:
        await self.chat_service.chat_loop(mode=mode, language=language)

    # --- Maintenance ---

    async def handle_clear_cache(self, level: str) -> None:
        """Handles the 'clear-cache' command."""
        logger.info(f"Handling 'clear-cache' command for level: {level}")
        try:
            self.cache_service.clear(level)
        except ValueError as e:
            self.ui.display_error(str(e))
            return
        self.ui.display_info(f"Cache level '{level}' cleared successfully.")

    async def handle_list_models(self) -> None:
        """Lists models of the active provider."""
        if self.ai_model is None:
            self.ui.display_error("No AI provider is configured.")
            return
        models = await self._run("list-models", self.ai_model.list_available_models)
        if models is None:
            return
        self._show_records(
            [{"model": m.model_id, "provider": m.provider, "context": m.context_window or ""} for m in models],
            ["model", "provider", "context"],
            f"Models for {self.ai_model.provider_name}",
        )


def parse_files_argument(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Parses the --files JSON option of the terminal command."""
    if not raw:
        return []
    files = json.loads(raw)
    if not isinstance(files, list):
        raise ValueError("--files must be a JSON list.")
    return files
