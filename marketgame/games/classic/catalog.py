"""
Classic Catalog

The default stock market game: four sector indexes, sixteen stocks,
thirty market events (five of them bubbles) and a 21-card action deck.
"""

from __future__ import annotations

from ...catalog.definitions import Catalog, IndexDefinition
from ...catalog.validation import CatalogValidationError, validate_catalog
from ...engine_core.random_source import RandomSource, SeededRandom
from .actions import classic_action_cards
from .events import all_events
from .stocks import CLASSIC_STOCKS


def create_classic_catalog(rng: RandomSource | None = None) -> Catalog:
    """
    Create and validate the classic catalog.

    `rng` resolves the random deltas of the "Invisible Hand" event.
    """
    catalog = Catalog(
        catalog_id="classic",
        indexes=_define_indexes(),
        stocks=list(CLASSIC_STOCKS),
        events=all_events(rng or SeededRandom()),
        action_cards=classic_action_cards(),
    )
    result = validate_catalog(catalog)
    if not result.valid:
        raise CatalogValidationError(result.errors)
    return catalog


def _define_indexes() -> list[IndexDefinition]:
    return [
        IndexDefinition(
            name="tech",
            emoji="💻",
            description="Technology sector index tracking innovation and digital transformation",
        ),
        IndexDefinition(
            name="finance",
            emoji="🏦",
            description="Financial sector index tracking banks, investment firms, and lending institutions",
        ),
        IndexDefinition(
            name="industrial",
            emoji="🏭",
            description="Industrial sector index tracking production, manufacturing and automation",
        ),
        IndexDefinition(
            name="health and science",
            emoji="🧬",
            description=(
                "Health & Science sector index tracking pharmaceuticals, biotech, "
                "and medical technology"
            ),
        ),
    ]
