"""
Services for the OzBargain Deal Notifier.

Configuration loading, state persistence, interaction signature
verification and periodic scheduling.
"""

from .config_manager import ConfigurationManager
from .interaction_verifier import InteractionVerifier
from .scheduler import Scheduler, SummarySchedule
from .state_store import InMemoryStateStore, JsonFileStateStore, NoveltyStateRepository

__all__ = [
    "ConfigurationManager",
    "InteractionVerifier",
    "Scheduler",
    "SummarySchedule",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "NoveltyStateRepository",
]
