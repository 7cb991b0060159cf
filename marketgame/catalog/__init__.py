"""Catalog schema - immutable stock, event, action card and index definitions."""

from .definitions import (
    Catalog,
    IndexDefinition,
    StockDefinition,
    EventDefinition,
    ConditionalEffects,
    PriceEffect,
    ProbabilityTrigger,
    DieRollTrigger,
    ActionCardDefinition,
    ActionCardType,
    EventTiming,
)
from .validation import (
    validate_catalog,
    load_catalog,
    load_catalog_file,
    CatalogValidationError,
    ValidationResult,
)

__all__ = [
    "Catalog",
    "IndexDefinition",
    "StockDefinition",
    "EventDefinition",
    "ConditionalEffects",
    "PriceEffect",
    "ProbabilityTrigger",
    "DieRollTrigger",
    "ActionCardDefinition",
    "ActionCardType",
    "EventTiming",
    "validate_catalog",
    "load_catalog",
    "load_catalog_file",
    "CatalogValidationError",
    "ValidationResult",
]
