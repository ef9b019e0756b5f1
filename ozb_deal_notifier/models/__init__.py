"""
Data models for the OzBargain Deal Notifier.

This module contains all data classes and type definitions used throughout
the application for representing deals, configuration, and run state.
"""

from .alert import FormattedAlert
from .config import NotifierConfig
from .deal import DealRecord, Pricing, VendorMeta
from .delivery import DeliveryResult, RunResult
from .filter import FilterCriteria
from .interaction import Interaction, InteractionResponseType, InteractionType
from .state import NoveltyState

__all__ = [
    "DealRecord",
    "Pricing",
    "VendorMeta",
    "NoveltyState",
    "FilterCriteria",
    "FormattedAlert",
    "DeliveryResult",
    "RunResult",
    "NotifierConfig",
    "Interaction",
    "InteractionType",
    "InteractionResponseType",
]
