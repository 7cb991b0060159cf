"""
Event Engine - Deck lifecycle and resolution of market events.

Each round boundary:
1. Resolved one-shot events are purged
2. END-timing conditional events roll their triggers (bubbles may pop)
3. Surviving bubbles grow by reapplying their initial effects
4. A new event is drawn; START-timing effects apply immediately
5. START-timing conditional events roll their triggers

Events are drawn with replacement of the deck: when the deck runs dry
a fresh shuffled copy of the full catalog takes its place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..catalog.definitions import EventDefinition, EventTiming, PriceEffect
from .deck import ShuffledDeck
from .random_source import RandomSource
from .state import (
    ActiveEvent,
    ConditionalOutcome,
    EventStatus,
    IndexChange,
    MarketIndex,
)

logger = logging.getLogger(__name__)


@dataclass
class DrawResult:
    """A freshly drawn event and the index changes its START effects caused."""
    event: ActiveEvent
    changes: list[IndexChange] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass
class BubbleGrowth:
    """One round of growth for an active bubble."""
    event: ActiveEvent
    changes: list[IndexChange] = field(default_factory=list)


class EventEngine:
    """Owns the event deck and the set of active events."""

    def __init__(self, definitions: list[EventDefinition], rng: RandomSource):
        self.definitions = list(definitions)
        self.rng = rng
        self.event_deck: ShuffledDeck[ActiveEvent] | None = None
        self.active_events: list[ActiveEvent] = []

        # Pop effects of the last round, kept one round for visual net deltas
        self.recent_pop_effects: list[PriceEffect] = []

    def _new_deck(self) -> ShuffledDeck[ActiveEvent]:
        return ShuffledDeck(
            [ActiveEvent(definition=d) for d in self.definitions],
            rng=self.rng,
        )

    def initialize(self) -> None:
        """Build and shuffle the full event deck; clear active events."""
        self.event_deck = self._new_deck()
        self.active_events = []
        self.recent_pop_effects = []
        logger.debug("Event deck initialized with %d events", len(self.event_deck))

    def draw_and_activate(self, indexes: dict[str, MarketIndex]) -> DrawResult | None:
        """
        Deal one event and add it to the active set.

        START-timing events apply their initial effects immediately.
        An empty (or missing) deck is replaced with a fresh shuffled one.
        """
        if self.event_deck is None or self.event_deck.is_empty:
            logger.debug("Event deck empty, reshuffling a fresh deck")
            self.event_deck = self._new_deck()

        event = self.event_deck.deal()
        if event is None:
            return None

        self.active_events.append(event)

        if event.timing != EventTiming.START:
            return DrawResult(event=event)

        changes = event.apply_effects(indexes)
        if event.conditional_effects and event.status == EventStatus.ACTIVE:
            event.rounds_active = 1
        return DrawResult(event=event, changes=changes)

    def reapply_bubble_effects(self, indexes: dict[str, MarketIndex]) -> list[BubbleGrowth]:
        """
        Grow every active bubble.

        The initial effect magnitude is reapplied, not a cumulative total.
        """
        growth = []
        for event in self.active_events:
            if event.conditional_effects and event.status == EventStatus.ACTIVE:
                event.rounds_active += 1
                changes = event.apply_effects(indexes)
                growth.append(BubbleGrowth(event=event, changes=changes))
                logger.debug(
                    "Bubble %s grew (round %d): %s",
                    event.name, event.rounds_active, [c.describe() for c in changes],
                )
        return growth

    def process_conditional_events(
        self, timing: EventTiming, indexes: dict[str, MarketIndex]
    ) -> list[ConditionalOutcome]:
        """
        Roll the triggers of active events whose conditional timing matches.

        A triggered event is resolved; it leaves the active set right away
        only if it is flagged discard-on-trigger. Events drawn as PENDING
        with a matching timing get their initial effects applied here.
        """
        outcomes = []
        discarded: list[ActiveEvent] = []

        for event in self.active_events:
            cond = event.conditional_effects
            if (
                cond is not None
                and cond.timing == timing
                and event.status == EventStatus.ACTIVE
            ):
                outcome = event.apply_conditional_effects(indexes, self.rng)
                outcomes.append(outcome)
                if outcome.triggered and event.should_discard():
                    self.recent_pop_effects.extend(cond.effects)
                    discarded.append(event)

            if event.timing == timing and event.status == EventStatus.PENDING:
                event.apply_effects(indexes)

        if discarded:
            self.active_events = [e for e in self.active_events if e not in discarded]
        return outcomes

    def cleanup_resolved_start_events(self) -> int:
        """
        Purge resolved START-timing events and the recent pop buffer.

        Returns how many events were removed.
        """
        before = len(self.active_events)
        self.active_events = [
            e for e in self.active_events
            if not (e.timing == EventTiming.START and e.status == EventStatus.RESOLVED)
        ]
        self.recent_pop_effects = []
        return before - len(self.active_events)

    def peek_next_event(self) -> ActiveEvent | None:
        """The event that would be dealt next, or None if the deck is empty."""
        if self.event_deck is None:
            return None
        return self.event_deck.peek()

    def shuffle_event_deck(self) -> bool:
        """Reshuffle the remaining deck in place. False if no deck exists yet."""
        if self.event_deck is None:
            return False
        self.event_deck.shuffle()
        return True

    def active_events_json(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self.active_events]

    def visual_effects(self) -> list[PriceEffect]:
        """Static per-round effects of active events plus last round's pops."""
        effects: list[PriceEffect] = []
        for event in self.active_events:
            effects.extend(event.effects)
        effects.extend(self.recent_pop_effects)
        return effects
