"""
Configuration management for the voice assistant.

Loads settings from a YAML config file and provides typed access.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of redline package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"


def _config_path() -> Path:
    override = os.getenv("REDLINE_CONFIG")
    return Path(override) if override else DEFAULT_CONFIG_PATH


@dataclass
class VoiceAssistantConfig:
    """Configuration for the voice search assistant."""

    # Branding used in spoken prompts
    dealership_name: str = "RedLine Motors"
    currency_symbol: str = "€"

    # Keyword matching: substring containment unless this is set
    word_boundary_matching: bool = False

    # Cross-turn list merging keeps duplicates unless this is set
    dedupe_on_merge: bool = False

    # Dialogue pacing (seconds)
    follow_up_delay_seconds: float = 2.0   # confirmation echo -> next question
    search_delay_seconds: float = 1.5      # "search now" acknowledgement -> search trigger

    # Speech synthesis / recognition
    speech_language: str = "en-US"
    speech_rate: float = 0.9
    speech_volume: float = 0.8

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoiceAssistantConfig":
        """Build a config from the nested YAML layout."""
        assistant = data.get('assistant', {}) or {}
        parsing = data.get('parsing', {}) or {}
        filters = data.get('filters', {}) or {}
        dialogue = data.get('dialogue', {}) or {}
        speech = data.get('speech', {}) or {}

        return cls(
            dealership_name=assistant.get('dealership_name', "RedLine Motors"),
            currency_symbol=assistant.get('currency_symbol', "€"),
            word_boundary_matching=bool(parsing.get('word_boundary_matching', False)),
            dedupe_on_merge=bool(filters.get('dedupe_on_merge', False)),
            follow_up_delay_seconds=float(dialogue.get('follow_up_delay_seconds', 2.0)),
            search_delay_seconds=float(dialogue.get('search_delay_seconds', 1.5)),
            speech_language=speech.get('language', "en-US"),
            speech_rate=float(speech.get('rate', 0.9)),
            speech_volume=float(speech.get('volume', 0.8)),
        )

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "VoiceAssistantConfig":
        """Load configuration from YAML file."""
        path = Path(config_path) if config_path else _config_path()
        if not path.exists():
            return cls()

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)


# Global config instance
_config: Optional[VoiceAssistantConfig] = None


def get_config() -> VoiceAssistantConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = VoiceAssistantConfig.from_yaml()
    return _config


def set_config(config: VoiceAssistantConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
