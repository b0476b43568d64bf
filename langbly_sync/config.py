import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from langbly_sync.logger import get_logger

logger = get_logger(__name__)

# Batch limits for a single translate request
DEFAULT_MAX_BATCH_ITEMS = 50
DEFAULT_MAX_BATCH_CHARS = 10_000

SUPPORTED_FORMATS = ("json", "yaml", "markdown", "auto")
LANG_PLACEHOLDER = "{lang}"

CLIENT_DEFAULTS = {
    "max_retries": 2,
    "timeout": 30,
    "base_delay": 0.5,
    "max_delay": 30.0,
}

# Get base directory (project root)
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = Path(os.environ.get("LANGBLY_CONFIG_DIR", BASE_DIR / "config"))
CONFIG_FILE = CONFIG_DIR / "config.json"

# Default configuration template
DEFAULT_CONFIG = {
    "langbly": {
        "api_key": "YOUR_API_KEY_HERE",
        "api_url": "https://api.langbly.com",
        "user_agent": "langbly-sync/1.0.0",
        **CLIENT_DEFAULTS,
    },
    "translation": {
        "max_batch_items": DEFAULT_MAX_BATCH_ITEMS,
        "max_batch_chars": DEFAULT_MAX_BATCH_CHARS,
        "max_workers": 1,
        "fail_fast": True,
    },
    "web": {
        # Request paths (files, output pattern, source root) must stay under this directory
        "workspace_root": ".",
    },
    "log_mode": "info",
}


class ConfigError(ValueError):
    """Invalid pipeline or application configuration."""
    pass


@dataclass
class PipelineConfig:
    """Options for one translation run."""
    source_language: str
    target_languages: List[str]
    files: List[str]
    output_pattern: str
    format: str = "auto"
    dry_run: bool = False
    create_pr: bool = False
    # Base directory used to keep relative paths for "**" output patterns
    source_root: Optional[str] = None

    def validate(self) -> None:
        if not self.source_language or not self.source_language.strip():
            raise ConfigError("Source language is required")
        if not any(lang.strip() for lang in self.target_languages if isinstance(lang, str)):
            raise ConfigError("No target languages specified")
        if self.format not in SUPPORTED_FORMATS:
            raise ConfigError(
                f"Unsupported format '{self.format}', expected one of {', '.join(SUPPORTED_FORMATS)}"
            )
        if LANG_PLACEHOLDER not in self.output_pattern:
            raise ConfigError(f"Output pattern must contain {LANG_PLACEHOLDER}: {self.output_pattern}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Build a config from a JSON payload (comma-separated languages allowed)."""
        targets = data.get("target_languages") or []
        if isinstance(targets, str):
            targets = [t.strip() for t in targets.split(",")]
        files = data.get("files") or []
        if isinstance(files, str):
            files = [files]

        config = cls(
            source_language=str(data.get("source_language", "")).strip(),
            target_languages=[t for t in targets if isinstance(t, str) and t.strip()],
            files=list(files),
            output_pattern=str(data.get("output_pattern", "")),
            format=data.get("format") or "auto",
            dry_run=bool(data.get("dry_run", False)),
            create_pr=bool(data.get("create_pr", False)),
            source_root=data.get("source_root"),
        )
        config.validate()
        return config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def ensure_config_directory():
    """Ensure the config directory exists."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Config directory ensured: {CONFIG_DIR}")


def create_default_config():
    """Create the default config.json file."""
    ensure_config_directory()
    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    logger.info(f"Created default config file: {CONFIG_FILE}")


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the configuration.

    Values from the config file override DEFAULT_CONFIG; the API key and URL
    can also come from LANGBLY_API_KEY / LANGBLY_API_URL.
    """
    path = Path(config_file) if config_file else CONFIG_FILE
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        config = _deep_merge(config, file_config)
        logger.debug(f"Configuration loaded from {path}")
    else:
        logger.debug(f"No config file at {path}, using defaults")

    api_key = os.environ.get("LANGBLY_API_KEY")
    if api_key:
        config["langbly"]["api_key"] = api_key
    api_url = os.environ.get("LANGBLY_API_URL")
    if api_url:
        config["langbly"]["api_url"] = api_url

    return config


def initialize_app():
    """
    Initialize the application.

    Creates the default config file on first run so the API key can be filled in.
    """
    logger.info("Initializing application...")
    if not CONFIG_FILE.exists():
        logger.info("No config file found, creating default config")
        create_default_config()
    else:
        logger.debug("Config file already exists")
    logger.info("Application initialization complete")
