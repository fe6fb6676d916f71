"""Main entry point for the sageCLI application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from sagecli.core.command_handler import CommandHandler, parse_files_argument
from sagecli.core.services.career_service import CareerService
from sagecli.core.services.chat_service import ChatService, SAGE_MODE, INTERVIEW_MODE

# --- Infrastructure Layer ---
from sagecli.infrastructure.config.settings import (
    load_configuration, get_config, set_config, get_openai_api_key, get_groq_api_key,
    get_default_provider, get_default_model, get_max_concurrency, get_max_retries,
    get_retryable_status_codes, get_attempt_timeout, get_cache_dir,
)
from sagecli.infrastructure.cli.display import ConsoleDisplay
from sagecli.infrastructure.ai.openai.gpt_client import GptClient
from sagecli.infrastructure.ai.groq.groq_client import GroqClient
from sagecli.infrastructure.cache.caching_service import CachingServiceImpl
from sagecli.infrastructure.resilience.request_queue import RequestQueue
from sagecli.infrastructure.resilience.api_retry import ApiRetryService, RetryPolicy
from sagecli.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

PROVIDERS = ('openai', 'groq')

# --- Dependency Injection Container (Manual) ---

def _create_ai_model(provider: str) -> Any:
    """Instantiates the client for `provider`, or None when it has no API key."""
    model = get_default_model(provider)
    if provider == 'groq':
        api_key = get_groq_api_key()
        return GroqClient(api_key=api_key, model=model) if api_key else None
    api_key = get_openai_api_key()
    return GptClient(api_key=api_key, model=model) if api_key else None

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    dependencies: Dict[str, Any] = {}
    load_configuration()
    log_level_name = str(get_config('logging.level', 'WARNING')).upper()
    setup_logging(
        log_level=getattr(logging, log_level_name, logging.WARNING),
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )
    logger.info("Initializing application dependencies...")

    dependencies['ui'] = ConsoleDisplay()
    try:
        dependencies['cache_service'] = CachingServiceImpl(l2_dir=get_cache_dir())

        provider = get_default_provider()
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown AI provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}.")
        ai_model = _create_ai_model(provider)
        if ai_model is None:
            # Fall back to whichever provider has a key
            for other in PROVIDERS:
                if other != provider:
                    ai_model = _create_ai_model(other)
                    if ai_model is not None:
                        logger.warning(f"Provider '{provider}' not configured, falling back to '{other}'.")
                        break
        if ai_model is None:
            raise ValueError("No AI provider configured. Set OPENAI_API_KEY or GROQ_API_KEY.")
        dependencies['ai_model'] = ai_model

        dependencies['request_queue'] = RequestQueue(max_concurrency=get_max_concurrency())
        dependencies['api_retry_service'] = ApiRetryService(
            request_queue=dependencies['request_queue'],
            retry_policy=RetryPolicy(retryable_status_codes=get_retryable_status_codes()),
            max_retries=get_max_retries(),
            attempt_timeout_s=get_attempt_timeout(),
        )

        dependencies['career_service'] = CareerService(
            ai_model=ai_model,
            api_retry_service=dependencies['api_retry_service'],
            cache_service=dependencies['cache_service'],
        )
        dependencies['chat_service'] = ChatService(
            ai_model=ai_model,
            api_retry_service=dependencies['api_retry_service'],
            ui=dependencies['ui'],
        )
        dependencies['command_handler'] = CommandHandler(
            career_service=dependencies['career_service'],
            chat_service=dependencies['chat_service'],
            cache_service=dependencies['cache_service'],
            ui=dependencies['ui'],
            ai_model=ai_model,
        )
    except (ValueError, OSError) as e:
        logger.error(f"Fatal Error during application initialization: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Application Initialization Failed: {e}")
        raise typer.Exit(code=1)

    logger.info("All dependencies initialized successfully.")
    return dependencies

_dependencies: Optional[Dict[str, Any]] = None

def get_dependencies() -> Dict[str, Any]:
    """Returns the wired dependencies, building them on first use."""
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies()
    return _dependencies

def reset_dependencies() -> None:
    global _dependencies
    _dependencies = None

def _handler() -> CommandHandler:
    return get_dependencies()['command_handler']

# --- Typer App Definition ---
app = typer.Typer(
    name="sagecli",
    help="sageCLI: AI career guidance with a rate-limit aware request gateway and response caching.",
    add_completion=False,
)

def run_async(coro: Coroutine[Any, Any, None]) -> None:
    """Runs an async command handler from a sync Typer command."""
    asyncio.run(coro)

LanguageOption = Annotated[str, typer.Option("--language", "-l", help="Language of the answer.")]
SkillsOption = Annotated[List[str], typer.Option("--skill", "-s", help="A skill; repeat for several.")]

# --- CLI Commands ---

@app.command()
def careers(skills: SkillsOption, language: LanguageOption = "English"):
    """Recommend career paths for a set of skills."""
    run_async(_handler().handle_careers(skills, language))

@app.command()
def advice(
    goal: Annotated[str, typer.Argument(help="What you want to achieve.")],
    level: Annotated[str, typer.Option("--level", help="Your current level.")] = "Beginner",
):
    """Brief tactical advice for a goal."""
    run_async(_handler().handle_advice(goal, level))

@app.command()
def jobs(
    role: Annotated[str, typer.Argument(help="Target role.")],
    location: Annotated[str, typer.Option("--location", help="Where to look.")] = "Remote",
    experience: Annotated[str, typer.Option("--experience", help="Experience level.")] = "Entry",
    skills: Annotated[Optional[List[str]], typer.Option("--skill", "-s", help="A skill; repeat for several.")] = None,
):
    """Search job and internship openings."""
    run_async(_handler().handle_jobs(role, location, experience, skills or []))

@app.command()
def quiz(category: Annotated[str, typer.Argument(help="Aptitude category.")]):
    """Generate an aptitude quiz."""
    run_async(_handler().handle_quiz(category))

@app.command()
def problems(domain: Annotated[str, typer.Argument(help="Problem domain, e.g. 'graphs'.")]):
    """Generate a coding problem set."""
    run_async(_handler().handle_problems(domain))

@app.command()
def news(interest: Annotated[str, typer.Argument(help="Area of interest.")] = "Technology"):
    """Latest tech news for an interest."""
    run_async(_handler().handle_news(interest))

@app.command()
def roadmap(project: Annotated[str, typer.Argument(help="Project name.")]):
    """Build a project roadmap."""
    run_async(_handler().handle_roadmap(project))

@app.command()
def resources(
    topic: Annotated[str, typer.Argument(help="Topic to learn.")],
    language: LanguageOption = "English",
    count: Annotated[int, typer.Option("--count", min=1, help="Number of resources.")] = 10,
):
    """Suggest learning resources for a topic."""
    run_async(_handler().handle_resources(topic, language, count))

@app.command()
def videos(topic: Annotated[str, typer.Argument(help="Topic to learn.")], language: LanguageOption = "English"):
    """Suggest alternative YouTube videos for a topic."""
    run_async(_handler().handle_videos(topic, language))

@app.command()
def motivate(language: LanguageOption = "English"):
    """A short motivational sentence."""
    run_async(_handler().handle_motivation(language))

@app.command()
def architect(project: Annotated[str, typer.Argument(help="Project title.")]):
    """Architectural script for a project."""
    run_async(_handler().handle_architect(project))

@app.command(name="run-code")
def run_code(
    code: Annotated[str, typer.Argument(help="Source code to run.")],
    language: Annotated[str, typer.Option("--language", "-l", help="Programming language.")] = "python",
):
    """Simulate running a code snippet."""
    run_async(_handler().handle_run_code(code, language))

@app.command()
def terminal(
    command: Annotated[str, typer.Argument(help="Shell command to simulate.")],
    files: Annotated[Optional[str], typer.Option("--files", help="JSON list describing the workspace files.")] = None,
):
    """Simulate a terminal command."""
    try:
        parsed_files = parse_files_argument(files)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--files")
    run_async(_handler().handle_terminal(command, parsed_files))

@app.command()
def chat(language: LanguageOption = "English"):
    """Interactive career chat with SAGE."""
    run_async(_handler().handle_chat(SAGE_MODE, language))

@app.command()
def interview():
    """Interactive mock technical interview."""
    run_async(_handler().handle_chat(INTERVIEW_MODE, "English"))

@app.command(name="clear-cache")
def clear_cache_command(
    level: Annotated[str, typer.Option(help="Level ('l1', 'l2', 'all').")] = 'all'
):
    """Clears the response cache."""
    run_async(_handler().handle_clear_cache(level))

@app.command(name="list-models")
def list_models_command():
    """Lists available AI models from the active provider."""
    run_async(_handler().handle_list_models())

@app.callback()
def main_callback(
    provider: Annotated[
        Optional[str],
        typer.Option("--provider", "-p", help="AI provider to use ('openai' or 'groq'). Uses config default if not set."),
    ] = None,
):
    """Career guidance from generative AI."""
    if provider:
        if provider not in PROVIDERS:
            raise typer.BadParameter(f"Choose one of: {', '.join(PROVIDERS)}.", param_hint="--provider")
        set_config('ai.default_provider', provider)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
