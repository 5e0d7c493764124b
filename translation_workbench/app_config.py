"""Application configuration for the translation workbench."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from translation_workbench.languages import LanguageCatalog, build_catalog_from_locales
from translation_workbench.logging_config import setup_logger

DEFAULT_SEARCH_THRESHOLD = 0.3
DEFAULT_MAX_RESULTS = 50
DEFAULT_MAX_FILE_SIZE_MB = 10
DEFAULT_PREVIEW_ROWS = 10


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    project_root: str
    catalog: LanguageCatalog

    # Search
    search_threshold: float
    max_results: int

    # Upload and conversion
    max_file_size_mb: float
    preview_rows: int

    # Logging
    log_level: str
    log_file_path: Optional[str]
    log_to_console: bool


def _compute_project_root() -> str:
    """The directory above the package."""
    package_dir = os.path.dirname(os.path.realpath(__file__))
    return os.path.abspath(os.path.join(package_dir, os.pardir))


def _dotenv_candidates(project_root: str):
    return os.path.join(project_root, '.env'), os.path.join(project_root, 'docker', '.env')


def _load_dotenv_files(project_root: str) -> Optional[str]:
    """Load the first .env found in the project root or docker/; return its path."""
    for dotenv_path in _dotenv_candidates(project_root):
        if os.path.exists(dotenv_path):
            load_dotenv(dotenv_path)
            return dotenv_path
    return None


def _load_yaml_config(project_root: str) -> Dict[str, Any]:
    """
    Read the YAML configuration named by WORKBENCH_CONFIG_FILE (default: config.yaml in the project root).

    Problems are reported on stderr, since logging is configured from this file,
    and an empty dict is returned so defaults apply.
    """
    config_file = os.environ.get('WORKBENCH_CONFIG_FILE', os.path.join(project_root, 'config.yaml'))
    config_file = os.path.abspath(config_file)

    if not os.path.exists(config_file):
        print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
              file=sys.stderr)
        return {}

    if not os.access(config_file, os.R_OK):
        print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
              file=sys.stderr)
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as config_stream:
            loaded_config = yaml.safe_load(config_stream)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        return {}
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        return {}

    if loaded_config is None:
        print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.", file=sys.stderr)
        return {}
    if not isinstance(loaded_config, dict):
        print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
              file=sys.stderr)
        return {}
    return loaded_config


def _env_override(name: str, default: Any, cast) -> Any:
    raw = os.environ.get(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        print(f"Warning: Ignoring invalid value '{raw}' for {name}.", file=sys.stderr)
        return default


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def load_app_config(configure_logging: bool = True) -> AppConfig:
    """
    Load application configuration from .env, the YAML file and environment overrides.

    Args:
        configure_logging: Whether to set up the package logger from the
            ``logging`` section.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()
    dotenv_path = _load_dotenv_files(project_root)
    config = _load_yaml_config(project_root)

    log_config = _section(config, 'logging')
    log_level = str(log_config.get('log_level', 'INFO')).upper()
    log_file_path = log_config.get('log_file_path', 'logs/translation_workbench.log')
    log_to_console = bool(log_config.get('log_to_console', True))

    if configure_logging:
        logger = setup_logger(log_level, log_file_path, log_to_console)
    else:
        logger = logging.getLogger(__name__)

    if dotenv_path:
        logger.info("Loaded environment variables from: %s", dotenv_path)
    else:
        logger.debug("No .env file found in '%s' or its docker/ directory.", project_root)

    search_config = _section(config, 'search')
    upload_config = _section(config, 'upload')

    search_threshold = _env_override(
        'WORKBENCH_SEARCH_THRESHOLD', search_config.get('threshold', DEFAULT_SEARCH_THRESHOLD), float
    )
    max_file_size_mb = _env_override(
        'WORKBENCH_MAX_FILE_SIZE_MB', upload_config.get('max_file_size_mb', DEFAULT_MAX_FILE_SIZE_MB), float
    )

    return AppConfig(
        project_root=project_root,
        catalog=build_catalog_from_locales(config.get('supported_locales') or []),
        search_threshold=max(0.0, min(1.0, float(search_threshold))),
        max_results=max(1, int(search_config.get('max_results', DEFAULT_MAX_RESULTS))),
        max_file_size_mb=float(max_file_size_mb),
        preview_rows=int(config.get('preview_rows', DEFAULT_PREVIEW_ROWS)),
        log_level=log_level,
        log_file_path=log_file_path,
        log_to_console=log_to_console
    )
