"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.freelookup/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from freelookup import __version__

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".freelookup"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "FREELOOKUP_"

DEFAULTS: Dict[str, Any] = {
    'http.timeout_seconds': 10.0,
    'http.user_agent': f"freelookup/{__version__} (+https://pypi.org/project/freelookup/)",
    'rotation.rotate_start': False,
    'batch.delay_seconds': 1.0,
    'batch.initial_backoff_seconds': 2.0,
    'batch.backoff_factor': 2.0,
    'batch.max_backoff_seconds': 60.0,
    'logging.level': 'WARNING',
    'logging.format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'logging.file': None,
}

# Public instances, tried in this order unless overridden.
DEFAULT_PROVIDER_URLS: Dict[str, List[str]] = {
    'searxng': [
        "https://searx.be",
        "https://search.sapti.me",
        "https://searx.tiekoetter.com",
        "https://priv.au",
    ],
    'duckduckgo': ["https://api.duckduckgo.com"],
    'libretranslate': [
        "https://libretranslate.com",
        "https://translate.argosopentech.com",
        "https://translate.terraprint.co",
    ],
    'mymemory': ["https://api.mymemory.translated.net"],
    'ipapi_co': ["https://ipapi.co"],
    'ipwhois': ["https://ipwho.is"],
    'ip_api_com': ["http://ip-api.com"],
    'nominatim': ["https://nominatim.openstreetmap.org"],
    'photon': ["https://photon.komoot.io"],
    'open_meteo': ["https://api.open-meteo.com"],
    'wttr': ["https://wttr.in"],
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_overrides: Dict[str, Any] = {}  # CLI options; survives reloads
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ('http': {'timeout_seconds': 5} -> 'http.timeout_seconds')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Values set with `set_config` (command-line options)
    2. Environment Variables
    3. .env file
    4. YAML configuration file
    5. Default values defined in this module

    Args:
        config_file: Path to the YAML configuration file (DEFAULT_CONFIG_FILE if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
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


def env_var_name(key: str) -> str:
    """Maps a dotted key to its environment variable ('http.timeout_seconds' -> 'FREELOOKUP_HTTP_TIMEOUT_SECONDS')."""
    return ENV_PREFIX + key.upper().replace('.', '_')


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Values set with `set_config`
    3. Environment variable (FREELOOKUP_ prefixed)
    4. YAML config
    5. Module defaults, then `default`

    Args:
        key: The dotted configuration key
        default: Default value if the key is not found anywhere

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    if key in _overrides:
        return _overrides[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    if key in DEFAULTS and default is None:
        return DEFAULTS[key]

    return default


def get_float(key: str, default: Optional[float] = None) -> float:
    value = get_config(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Config key '{key}' has non-numeric value {value!r}; using {default}")
        if default is None:
            return float(DEFAULTS[key])
        return default


def get_bool(key: str, default: bool = False) -> bool:
    flag = get_config(key, default)
    if isinstance(flag, str):
        return flag.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(flag)


def get_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Gets a list value; environment values are comma-separated."""
    value = get_config(key)
    if value is None:
        return list(default or [])
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    logger.warning(f"Config key '{key}' is not a list: {value!r}")
    return list(default or [])


def get_provider_urls(kind: str) -> List[str]:
    """Instance list for a provider kind, e.g. 'searxng'. Configuration key is providers.<kind>."""
    return get_list(f"providers.{kind}", DEFAULT_PROVIDER_URLS.get(kind, []))


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value for the current process.

    Outranks environment variables and files, and survives
    `load_configuration`, so command-line options set before the first
    load still apply.
    """
    logger.debug(f"Setting config: {key} = {value!r}")
    _overrides[key] = value


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
