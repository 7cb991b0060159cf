"""
Market Game - Round Engine for a Turn-Based Stock Market Game

A deterministic, rules-driven engine for a multi-player market simulation.
Players trade stocks priced from four shared sector indexes while market
events and action cards push those indexes around. The engine provides:
- Catalog loading and validation (stocks, events, action cards)
- Trading and pricing rules
- Market event lifecycle, including growing "bubbles"
- Round/turn orchestration and scoring
- Ephemeral game sessions with a thin REST/WebSocket adapter
"""

__version__ = "0.1.0"
