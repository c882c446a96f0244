"""
RedLine - Voice search assistant for a car dealership inventory

A rule-based voice front end with:
- Keyword/regex utterance parsing (intent, entities, confidence)
- Cross-turn filter accumulation
- A fixed-checklist dialogue that asks for what is still missing
"""

from redline.core.controller import DialogueController, TurnResult, create_controller
from redline.core.config import VoiceAssistantConfig, get_config, set_config
from redline.filters.models import CarFilters
from redline.filters.reconcile import reconcile
from redline.parsing.command_parser import parse
from redline.parsing.models import Entities, Intent, VoiceCommand

__all__ = [
    'DialogueController',
    'TurnResult',
    'create_controller',
    'VoiceAssistantConfig',
    'get_config',
    'set_config',
    'CarFilters',
    'reconcile',
    'parse',
    'Entities',
    'Intent',
    'VoiceCommand',
]

__version__ = '0.1.0'
