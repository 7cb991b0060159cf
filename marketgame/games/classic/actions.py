"""
Classic Action Cards - The 21-card action deck.

Manipulation cards carry a signed value: positive pushes the target
stock's sector index up, negative pushes it down.
"""

from ...catalog.definitions import ActionCardDefinition, ActionCardType

MARKET_FORECAST = ActionCardDefinition(
    name="Market Forecast",
    action_type=ActionCardType.FORECAST,
    description="Peek at the next event card to predict market movements.",
)

MARKET_UNCERTAINTY = ActionCardDefinition(
    name="Market Uncertainty",
    action_type=ActionCardType.SHUFFLE,
    description="Shuffle the event deck, preventing all forecasts.",
)

INSIDER_TRADING = ActionCardDefinition(
    name="Insider Trading",
    action_type=ActionCardType.INSIDER_TRADING,
    description="Buy a stock at $3 discount. Includes the purchase action.",
    target_type="stock",
    effect_value=3,
)

CREATE_HYPE = ActionCardDefinition(
    name="Create Hype",
    action_type=ActionCardType.MANIPULATE,
    description="Add 2 value to a stock's market index.",
    target_type="stock",
    effect_value=2,
)

SPREAD_RUMOR = ActionCardDefinition(
    name="Spread Rumor",
    action_type=ActionCardType.MANIPULATE,
    description="Reduce a stock's market index by 2.",
    target_type="stock",
    effect_value=-2,
)

SCANDAL = ActionCardDefinition(
    name="Scandal",
    action_type=ActionCardType.MANIPULATE,
    description="Reduce a stock's market index by 4.",
    target_type="stock",
    effect_value=-4,
)

HYSTERIA = ActionCardDefinition(
    name="Hysteria",
    action_type=ActionCardType.MANIPULATE,
    description="Add 4 value to a stock's market index.",
    target_type="stock",
    effect_value=4,
)

# card -> copies in the deck
DECK_COMPOSITION: list[tuple[ActionCardDefinition, int]] = [
    (MARKET_FORECAST, 4),
    (MARKET_UNCERTAINTY, 2),
    (INSIDER_TRADING, 3),
    (CREATE_HYPE, 4),
    (SPREAD_RUMOR, 4),
    (SCANDAL, 2),
    (HYSTERIA, 2),
]


def classic_action_cards() -> list[ActionCardDefinition]:
    cards = []
    for card, copies in DECK_COMPOSITION:
        cards.extend([card] * copies)
    return cards
