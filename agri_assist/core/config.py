"""
Configuration management for Agri Assist.

This module handles environment variables, API keys, model names and the data
directory. A project-scoped .env is loaded explicitly with python-dotenv; nothing
is loaded implicitly at import time.
"""

import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


METADATA_DIRNAME = ".agri_assist"
DEFAULT_ENV_FILENAME = os.getenv("AA_ENV_FILENAME", ".env")
ENV_FILE_ENV_VARS = ("AA_ENV_FILE", "AGRI_ASSIST_ENV_FILE")


@lru_cache(maxsize=32)
def load_config(env_path: Optional[str] = None, override: bool = False) -> None:
    """Explicitly load environment variables from the given .env file path."""
    if env_path:
        load_dotenv(dotenv_path=env_path, override=override)


class Config:
    """Configuration settings for Agri Assist."""

    @property
    def openai_api_key(self) -> str:
        """Get OpenAI API key from environment."""
        key = os.getenv("OPENAI_API_KEY")
        if not key:
            raise ConfigError("OPENAI_API_KEY not found in environment. Please set it in your environment or .env file.")
        return key

    @property
    def has_api_key(self) -> bool:
        return bool(os.getenv("OPENAI_API_KEY"))

    @property
    def llm_model(self) -> str:
        """Model used for diagnosis, identification, crop info, Q&A and chat (default: gpt-4o-mini)."""
        return os.getenv("LLM_MODEL", "gpt-4o-mini")

    @property
    def search_model(self) -> str:
        """Web-search capable model used for market prices."""
        return os.getenv("SEARCH_MODEL", "gpt-4o-mini-search-preview")

    @property
    def is_reasoning_model(self) -> bool:
        """Check if the configured model is a reasoning model (default: False)."""
        value = os.getenv("IS_REASONING_MODEL", "false").lower()
        return value in ("true", "1", "yes", "on")

    @property
    def asr_model(self) -> str:
        """Get the model name for speech transcription (default: whisper-1)."""
        return os.getenv("ASR_MODEL", "whisper-1")

    @property
    def openai_timeout(self) -> int:
        """Get OpenAI API timeout in seconds (default: 60)."""
        return int(os.getenv("OPENAI_TIMEOUT", "60"))

    @property
    def max_retries(self) -> int:
        """Get maximum number of retries for API calls (default: 3)."""
        return int(os.getenv("MAX_RETRIES", "3"))

    @property
    def data_dir(self) -> Path:
        """Directory holding the local store and debug logs."""
        explicit = os.getenv("AA_DATA_DIR")
        if explicit:
            return Path(explicit)
        return Path.cwd() / METADATA_DIRNAME


# Global config instance
config = Config()


def ensure_data_dir(data_dir: Optional[Path] = None) -> Path:
    """Create the data directory if needed and return it."""
    target = Path(data_dir) if data_dir else config.data_dir
    target.mkdir(parents=True, exist_ok=True)
    return target


def ensure_project_env(data_dir: Optional[Path] = None, source_env: Optional[str] = None, overwrite: bool = False) -> Path:
    """
    Create or copy a project-scoped env file under the data directory.

    Behavior:
    - If the target exists and overwrite is False, the existing file is preserved.
    - If source_env is provided and exists, it's copied to the target.
    - Else if ./.env exists, it's copied to the target.
    - Else, a minimal template is created.
    """
    meta = ensure_data_dir(data_dir)
    target = meta / DEFAULT_ENV_FILENAME
    if target.exists() and not overwrite:
        return target

    candidates = []
    if source_env:
        candidates.append(Path(source_env))
    candidates.append(Path.cwd() / ".env")

    for candidate in candidates:
        if candidate.is_file():
            shutil.copyfile(candidate, target)
            return target

    template = (
        "# Project-scoped environment for agri_assist\n"
        "LLM_MODEL=gpt-4o-mini\n"
        "SEARCH_MODEL=gpt-4o-mini-search-preview\n"
        "ASR_MODEL=whisper-1\n"
        "IS_REASONING_MODEL=false\n"
        "MODEL_TEMPERATURE=0.4\n"
        "OPENAI_TIMEOUT=60\n"
        "MAX_RETRIES=3\n"
        "# OPENAI_API_KEY=your-key-here\n"
    )
    target.write_text(template, encoding="utf-8")
    return target


def load_project_env(data_dir: Optional[Path] = None, override: bool = False) -> Optional[str]:
    """
    Load a project-scoped environment file, if available.

    Load order (first match wins):
    1) Explicit env file path via AA_ENV_FILE or AGRI_ASSIST_ENV_FILE
    2) <data_dir>/.env

    Returns the path loaded, or None if nothing was loaded.
    """
    for var in ENV_FILE_ENV_VARS:
        explicit = os.getenv(var)
        if explicit and Path(explicit).is_file():
            load_config(explicit, override=override)
            return explicit

    env_path = (Path(data_dir) if data_dir else config.data_dir) / DEFAULT_ENV_FILENAME
    if env_path.is_file():
        load_config(str(env_path), override=override)
        return str(env_path)

    return None


@lru_cache(maxsize=1)
def get_client() -> OpenAI:
    """
    Get configured OpenAI client with timeout and retry settings.

    If OPENAI_API_KEY is missing, attempts to load the project-scoped env first.

    Raises:
        ConfigError: If API key is not configured after project env lookup
    """
    if not os.getenv("OPENAI_API_KEY"):
        loaded_path = load_project_env()
        if not os.getenv("OPENAI_API_KEY"):
            where = loaded_path or f"{METADATA_DIRNAME}/{DEFAULT_ENV_FILENAME}"
            raise ConfigError(f"OPENAI_API_KEY not found in environment. Looked for project env at {where}. Set it via environment, AA_ENV_FILE, or {where}.")
    try:
        return OpenAI(
            api_key=config.openai_api_key,
            timeout=config.openai_timeout,
            max_retries=config.max_retries,
        )
    except Exception as e:
        raise ConfigError(f"Failed to create OpenAI client: {e}")

