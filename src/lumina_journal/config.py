"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

PLACEHOLDER_SUPABASE_URL = "your_url"


@dataclass
class SupabaseConfig:
    """Remote backend settings."""
    table: str = "entries"
    redirect_to: Optional[str] = None
    timeout: float = 30.0


@dataclass
class GeminiConfig:
    """Gemini API settings."""
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.4
    timeout: float = 60.0


@dataclass
class StorageConfig:
    """Local storage settings."""
    data_dir: Path = Path(".lumina")
    entries_key: str = "lumina_entries"
    session_key: str = "lumina_demo_session"
    auth_token_key: str = "lumina_auth_token"


@dataclass
class LookupConfig:
    """Book lookup settings."""
    base_url: str = "https://openlibrary.org"
    covers_url: str = "https://covers.openlibrary.org/b/id/{cover_id}-M.jpg"
    max_results: int = 5
    debounce_seconds: float = 0.5
    min_query_length: int = 2
    timeout: float = 10.0


@dataclass
class DemoConfig:
    """Demo mode settings."""
    user_id: str = "demo-user-123"
    email: str = "demo@example.com"
    login_delay: float = 0.8


@dataclass
class PromptsConfig:
    """Prompts for LLM."""
    analysis: dict = field(default_factory=lambda: {
        "system": "",
        "user": (
            "I am writing a journal entry about a reading source.\n"
            "Title: \"{title}\"\n"
            "Content/Notes: \"{content}\"\n\n"
            "Please analyze this text.\n"
            "1. Write a concise 1-2 sentence summary of the main ideas captured in the notes.\n"
            "2. Generate 3-5 relevant topic tags (single words or short phrases) "
            "to categorize this entry."
        ),
    })


@dataclass
class Settings:
    """Application settings."""

    # Credentials (from environment only)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    gemini_api_key: str = ""

    # Config sections
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    lookup: LookupConfig = field(default_factory=LookupConfig)
    demo: DemoConfig = field(default_factory=DemoConfig)
    prompts: PromptsConfig = field(default_factory=PromptsConfig)

    @property
    def is_demo_mode(self) -> bool:
        """No usable backend credentials: keep everything in local storage."""
        return (
            not self.supabase_url
            or not self.supabase_anon_key
            or self.supabase_url == PLACEHOLDER_SUPABASE_URL
        )

    @property
    def data_dir(self) -> Path:
        return self.storage.data_dir


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return ""


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Get application settings from YAML config and environment."""
    if config_path is None:
        config_path = Path(os.getenv("LUMINA_CONFIG", "config.yaml"))

    # Load YAML config
    config = load_config(config_path)

    # Build settings
    settings = Settings(
        supabase_url=_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        supabase_anon_key=_env("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        gemini_api_key=_env("GEMINI_API_KEY", "API_KEY"),
    )

    # Apply YAML config
    if "supabase" in config:
        for key, value in config["supabase"].items():
            setattr(settings.supabase, key, value)

    if "gemini" in config:
        for key, value in config["gemini"].items():
            setattr(settings.gemini, key, value)

    if "storage" in config:
        for key, value in config["storage"].items():
            setattr(settings.storage, key, Path(value) if key == "data_dir" else value)

    if "lookup" in config:
        for key, value in config["lookup"].items():
            setattr(settings.lookup, key, value)

    if "demo" in config:
        for key, value in config["demo"].items():
            setattr(settings.demo, key, value)

    if "prompts" in config:
        settings.prompts = PromptsConfig(**config["prompts"])

    return settings
