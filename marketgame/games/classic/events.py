"""
Classic Events - Market events, bubbles first.

Bubbles apply a START effect when drawn, grow by that same effect every
round, and pop on a die roll at the end of a round. Regular events are
one-shot START effects.
"""

from ...catalog.definitions import (
    ConditionalEffects,
    DieRollTrigger,
    EventDefinition,
    EventTiming,
    PriceEffect,
)
from ...engine_core.random_source import RandomSource

TECH = "tech"
FINANCE = "finance"
INDUSTRIAL = "industrial"
HEALTH = "health and science"
ALL_SECTORS = (TECH, FINANCE, INDUSTRIAL, HEALTH)


def _effects(*pairs: tuple[str, int]) -> tuple[PriceEffect, ...]:
    return tuple(PriceEffect(sector=s, delta=d) for s, d in pairs)


def _everywhere(delta: int) -> tuple[PriceEffect, ...]:
    return _effects(*[(s, delta) for s in ALL_SECTORS])


def _event(name: str, description: str, *pairs: tuple[str, int]) -> EventDefinition:
    return EventDefinition(
        name=name,
        description=description,
        timing=EventTiming.START,
        effects=_effects(*pairs),
    )


def _bubble(
    name: str,
    description: str,
    effects: tuple[PriceEffect, ...],
    pop_effects: tuple[PriceEffect, ...],
    pop_on: tuple[int, ...],
) -> EventDefinition:
    return EventDefinition(
        name=name,
        description=description,
        timing=EventTiming.START,
        effects=effects,
        conditional_effects=ConditionalEffects(
            timing=EventTiming.END,
            trigger=DieRollTrigger(min_value=1, max_value=6, success=pop_on),
            effects=pop_effects,
        ),
        discard_on_conditional_trigger=True,
    )


def bubble_events() -> list[EventDefinition]:
    return [
        _bubble(
            "Tech Sector Euphoria",
            "Tech stocks surge as investors discover 'this time is different.' Spoiler: it isn't.",
            _effects((TECH, 3)), _effects((TECH, -5)), (1, 2),
        ),
        _bubble(
            "Crypto Mania",
            "Everyone's cousin is now a blockchain expert. Your uncle bought $500 of meme coins.",
            _effects((FINANCE, 3)), _effects((FINANCE, -5)), (1, 2),
        ),
        _bubble(
            "Biotech Boom",
            "One company claims their pill cures baldness AND makes you rich. Investors buy both claims.",
            _effects((HEALTH, 3)), _effects((HEALTH, -5)), (1, 2),
        ),
        _bubble(
            "Real Estate Frenzy",
            "A toolshed in a major city just sold for millions. Totally normal and sustainable!",
            _effects((INDUSTRIAL, 3)), _effects((INDUSTRIAL, -5)), (1,),
        ),
        _bubble(
            "Red Scare",
            "Economists remember infinite growth on a finite planet is problematic. Markets hate math.",
            _everywhere(-2), _everywhere(5), (1,),
        ),
    ]


def regular_events(rng: RandomSource) -> list[EventDefinition]:
    """
    One-shot events.

    "Invisible Hand" moves every sector by a random amount in [-2, 2],
    rolled once when the catalog is built.
    """
    return [
        _event("AI Breakthrough",
               "Robots get smarter. Your job gets nervous. Shareholders throw a party.",
               (TECH, 3)),
        _event("Regional Banking Crisis",
               "Turns out investing in 'definitely not risky' bonds can be risky. Who knew?",
               (FINANCE, -3)),
        _event("Automation Surge",
               "Factories replace workers with robots who don't need coffee breaks or fair wages.",
               (INDUSTRIAL, 2)),
        _event("Healthcare Reform",
               "Politicians promise to fix healthcare. Lobbyists promise they won't.",
               (HEALTH, 2)),
        _event("Market Correction",
               "Stocks fall. Financial advisors explain this was 'totally expected' even though "
               "they said the opposite yesterday.",
               *[(s, -2) for s in ALL_SECTORS]),
        _event("Monetary Stimulus",
               "Central bank activates money printer. Economy goes brrrrr.",
               *[(s, 2) for s in ALL_SECTORS]),
        _event("Invisible Hand",
               "Sometimes nobody knows what is going to happen next, but it happens anyway.",
               *[(s, rng.next_int(-2, 2)) for s in ALL_SECTORS]),
        _event("Fintech Expansion",
               "A new app promises to disrupt banking. It's payment apps with extra steps and VC funding.",
               (TECH, 2), (FINANCE, 2)),
        _event("Supply Chain Disruption",
               "That boat stuck in the canal? Yeah, your electronics are on it. So is everyone else's.",
               (INDUSTRIAL, -3)),
        _event("mRNA Breakthrough",
               "Science does something amazing. Half of social media becomes vaccine experts overnight.",
               (HEALTH, 3)),
        _event("Machine Learning Advance",
               "AI writes code, makes art, and takes jobs. Still can't fold fitted sheets.",
               (TECH, 2)),
        _event("Bank Earnings Beat",
               "Banks make record profits by charging you $35 for being $0.12 overdrawn. "
               "Resilient business model!",
               (FINANCE, 2)),
        _event("Green Energy Initiative",
               "Government finally decides to address climate change. Oil lobbyists file into "
               "conference room.",
               (INDUSTRIAL, 2)),
        _event("Data Breach",
               "Your data was stolen. Again. Time to change that password from 'Password123' "
               "to 'Password124.'",
               (TECH, -4)),
        _event("Accounting Scandal",
               "Executives creatively interpreted 'profit' as 'whatever we want it to be.'",
               (FINANCE, -3)),
        _event("Clinical Trial Failure",
               "Drug that was supposed to cure everything actually cures nothing. Investors shocked "
               "that biology is hard.",
               (HEALTH, -3)),
        _event("Yield Curve Inverts",
               "The yield curve inverted. This means... something. Economists argue about what, exactly.",
               (FINANCE, -3), (INDUSTRIAL, -2)),
        _event("Tech Sector Layoffs",
               "Tech company fires 10,000 workers to 'increase efficiency.' CEO gets $50M bonus "
               "for tough decision.",
               (TECH, -2)),
        _event("Pandemic Preparedness",
               "Government invests in pandemic prep after the pandemic. Better late than never...?",
               (HEALTH, 2)),
        _event("Antitrust Action",
               "Regulators finally notice that monopolies might be monopolistic. Tech CEOs schedule "
               "sad face practice.",
               (TECH, -3)),
        _event("Infrastructure Package",
               "Government agrees to fix aging infrastructure. Only took decades of debate!",
               (INDUSTRIAL, 3)),
        _event("Credit Downgrade",
               "Rating agency downgrades country's credit. Same agency that rated junk bonds AAA before.",
               (FINANCE, -2)),
        _event("Trade Agreement",
               "Countries agree to trade more freely. Economists claim everyone wins. Factory workers "
               "have questions.",
               (INDUSTRIAL, 2), (TECH, 1)),
        _event("Patent Expiration",
               "Big Pharma's $1000/pill loses patent protection. Generic version costs $3. "
               "What a mystery!",
               (HEALTH, -2)),
        _event("Venture Capital Surge",
               "VCs invest billions in startups with no revenue but amazing slides. History repeats itself!",
               (TECH, 2), (FINANCE, 1)),
    ]


def all_events(rng: RandomSource) -> list[EventDefinition]:
    return bubble_events() + regular_events(rng)
