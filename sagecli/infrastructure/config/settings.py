"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.sagecli/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Dict, List

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".sagecli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_CACHE_DIR = DEFAULT_CONFIG_DIR / "cache"
ENV_FILE_NAME = ".env"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_overrides: Dict[str, Any] = {}
_loaded = False

def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML sections into dotted keys ('gateway.max_retries')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Test overrides
    2. Runtime overrides (set_config, e.g. the --provider flag)
    3. Environment Variables
    4. .env file
    5. YAML configuration file
    6. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: ENV VARS take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled in get_config
    _loaded = True
    logger.debug("Configuration loading process completed.")

def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        return float(value) if '.' in value else int(value)
    except ValueError:
        return value

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Dotted keys are looked up in the environment as SAGECLI_<KEY> with dots
    turned into underscores (e.g. 'gateway.max_retries' ->
    SAGECLI_GATEWAY_MAX_RETRIES); plain keys such as 'OPENAI_API_KEY' are
    looked up as-is.

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    if key in _overrides:
        return _overrides[key]

    env_keys = [key.upper()] if '.' not in key else [f"SAGECLI_{key.upper().replace('.', '_')}"]
    for env_key in env_keys:
        if env_key in os.environ:
            return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

def set_config(key: str, value: Any) -> None:
    """Overrides a configuration value for the running process.

    The override outranks the environment but is never written back to it.
    """
    logger.debug(f"Setting config: {key} = {value}")
    _overrides[key] = value

def clear_overrides() -> None:
    """Drops every value set through set_config."""
    _overrides.clear()

# --- Convenience Functions ---

def get_openai_api_key() -> Optional[str]:
    """Convenience function to get the OpenAI API key."""
    key = get_config('OPENAI_API_KEY') or get_config('openai.api_key')
    return str(key) if key is not None else None

def get_groq_api_key() -> Optional[str]:
    """Convenience function to get the Groq API key."""
    key = get_config('GROQ_API_KEY') or get_config('groq.api_key')
    return str(key) if key is not None else None

def get_default_provider() -> str:
    """Gets the default AI provider."""
    provider = get_config('ai.default_provider', 'openai')
    return str(provider) if provider is not None else 'openai'

def get_default_model(provider: Optional[str] = None) -> Optional[str]:
    """Gets the default model for a given provider."""
    selected_provider = provider or get_default_provider()
    model = get_config(f'ai.{selected_provider}.default_model')
    return str(model) if model is not None else None

def get_max_concurrency() -> int:
    """Maximum number of AI requests in flight at once."""
    return int(get_config('gateway.max_concurrency', 2))

def get_max_retries() -> int:
    """Attempts per AI request before giving up."""
    return int(get_config('gateway.max_retries', 5))

def get_retryable_status_codes() -> List[int]:
    """HTTP status codes treated as transient; accepts a list or a comma separated string."""
    codes = get_config('gateway.retryable_status_codes', [429, 500, 503])
    if isinstance(codes, (int, float)):
        return [int(codes)]
    if isinstance(codes, str):
        return [int(code) for code in codes.split(',') if code.strip()]
    return [int(code) for code in codes]

def get_attempt_timeout() -> Optional[float]:
    """Per-attempt timeout in seconds, or None when disabled."""
    timeout = get_config('gateway.attempt_timeout_seconds')
    return float(timeout) if timeout else None

def get_cache_dir() -> Optional[Path]:
    """Directory of the file cache level; 'none' disables it."""
    cache_dir = get_config('cache.dir', str(DEFAULT_CACHE_DIR))
    if cache_dir is None or str(cache_dir).lower() == 'none':
        return None
    return Path(str(cache_dir)).expanduser()

def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")

def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
