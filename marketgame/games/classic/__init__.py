"""
Classic - The default market game.

Four sectors (tech, finance, industrial, health and science), each with
four stocks. Market events and bubbles move the sector indexes; action
cards let players peek, reshuffle, buy at a discount or push an index.

This module contains:
- Stock, event and action card data
- The catalog factory
"""

from .catalog import create_classic_catalog
from .stocks import CLASSIC_STOCKS
from .events import all_events, bubble_events, regular_events
from .actions import classic_action_cards, DECK_COMPOSITION

__all__ = [
    "create_classic_catalog",
    "CLASSIC_STOCKS",
    "all_events",
    "bubble_events",
    "regular_events",
    "classic_action_cards",
    "DECK_COMPOSITION",
]
