"""
Game Log - Player-visible history of a game.

Entries are kept per session for display (recent activity, round
summaries) and mirrored to the module logger for operators.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
import logging

from ..catalog.definitions import EventTiming
from .state import EventStatus

if TYPE_CHECKING:
    from .state import ActiveEvent, ConditionalOutcome, DividendPayment, IndexChange

logger = logging.getLogger(__name__)


@dataclass
class LogEntry:
    """One line of the game log."""
    round_number: int
    message: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round_number,
            "timestamp": self.timestamp,
            "message": self.message,
        }


class GameLog:
    """Append-only game log for one session."""

    def __init__(self, session_id: str = ""):
        self.session_id = session_id
        self.entries: list[LogEntry] = []
        self.round_number = 1

    def add(self, message: str, round_number: int | None = None) -> LogEntry:
        entry = LogEntry(
            round_number=self.round_number if round_number is None else round_number,
            message=message,
        )
        self.entries.append(entry)
        logger.info("[%s round %d] %s", self.session_id, entry.round_number, message)
        return entry

    def log_index_changes(
        self,
        event: ActiveEvent,
        changes: list[IndexChange],
        label: str = "Effect",
        roll: float | int | None = None,
    ) -> LogEntry:
        """Log the price changes caused by an event."""
        message = f"📊 {label} - {event.name}: " + ", ".join(c.describe() for c in changes)
        if roll is not None:
            message += f" [Roll: {roll}]"
        return self.add(message)

    def recent(self, count: int = 5) -> list[LogEntry]:
        return self.entries[-count:]

    def set_round(self, round_number: int) -> None:
        self.round_number = round_number


def build_round_summary(
    round_number: int,
    new_event: ActiveEvent | None,
    end_rolls: list[ConditionalOutcome],
    active_events: list[ActiveEvent],
    dividend_payments: list[DividendPayment] | None = None,
) -> str:
    """Human-readable summary broadcast when a new round begins."""
    lines = [f"🎲 Round {round_number} begins!"]

    if dividend_payments:
        lines.append("")
        lines.append("💰 Dividends:")
        for payment in dividend_payments:
            lines.append(f"  {payment.player_name} +${payment.total}")

    if end_rolls:
        lines.append("")
        lines.append("📊 Previous Round Results:")
        for outcome in end_rolls:
            if outcome.triggered:
                changes = ", ".join(
                    f"{c.sector} {'+' if c.delta >= 0 else ''}{c.delta}" for c in outcome.changes
                )
                lines.append(f"💥 {outcome.event.name} popped! {changes}")
            else:
                lines.append(f"✓ {outcome.event.name} held (remains active)")

    if new_event is not None:
        lines.append("")
        lines.append(f"📰 New Event: {new_event.name}")
        lines.append(new_event.description)
        cond = new_event.conditional_effects
        ongoing = cond is not None and cond.timing == EventTiming.END
        if new_event.effects:
            effects = ", ".join(e.describe() for e in new_event.effects)
            lines.append(f"📊 {effects}{' (each round)' if ongoing else ''}")
        if cond is not None:
            cond_effects = ", ".join(e.describe() for e in cond.effects)
            when = (
                "At the end of this round"
                if cond.timing == EventTiming.END
                else "At the start of next round"
            )
            chance = round(cond.trigger.chance * 100)
            lines.append(f"⚠️ {when}, {chance}% chance bubble pops: {cond_effects}")

    unresolved = [e for e in active_events if e.status != EventStatus.RESOLVED]
    if unresolved:
        lines.append("")
        lines.append("🎪 Active Events:")
        for event in unresolved:
            info = f"  • {event.name}"
            if event.rounds_active > 0:
                info += f" (Round {event.rounds_active})"
            lines.append(info)

    return "\n".join(lines)
