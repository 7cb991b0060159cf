"""
Tests for catalog validation and loading.
"""

import json

import pytest

from ..catalog import (
    CatalogValidationError,
    load_catalog,
    load_catalog_file,
    validate_catalog,
)
from ..catalog.definitions import DieRollTrigger, ProbabilityTrigger
from ..games.classic import (
    CLASSIC_STOCKS,
    DECK_COMPOSITION,
    create_classic_catalog,
)
from .conftest import ScriptedRandom


def raw_catalog(**overrides):
    data = {
        "catalog_id": "custom",
        "indexes": [{"name": s} for s in ("tech", "finance", "industrial", "health")],
        "stocks": [
            {"name": "Alpha", "base_cost": 6, "dividend": 1, "growth": 3, "sector": "tech"},
        ],
        "events": [
            {
                "name": "Bubble",
                "timing": "start",
                "effects": [{"sector": "tech", "delta": 1}],
                "conditional_effects": {
                    "timing": "end",
                    "die_roll": {"min": 1, "max": 6, "success": [1, 2]},
                    "effects": [{"sector": "tech", "delta": -3}],
                },
                "discard_on_conditional_trigger": True,
            },
            {
                "name": "Rumor",
                "effects": [{"sector": "finance", "delta": -1}],
                "conditional_effects": {
                    "probability": 0.25,
                    "effects": [{"sector": "finance", "delta": 2}],
                },
            },
        ],
        "action_cards": [
            {"name": "Hype", "action_type": "manipulate", "target_type": "stock", "effect_value": 2},
        ],
    }
    data.update(overrides)
    return data


class TestLoadCatalog:

    def test_valid_catalog_loads(self):
        catalog = load_catalog(raw_catalog())
        assert catalog.catalog_id == "custom"
        assert catalog.sector_names == {"tech", "finance", "industrial", "health"}
        events = {e.name: e for e in catalog.events}
        bubble = events["Bubble"]
        assert bubble.is_bubble
        assert isinstance(bubble.conditional_effects.trigger, DieRollTrigger)
        assert bubble.conditional_effects.trigger.success == (1, 2)
        rumor = events["Rumor"]
        assert isinstance(rumor.conditional_effects.trigger, ProbabilityTrigger)

    def test_unknown_sector_rejected(self):
        data = raw_catalog(stocks=[
            {"name": "Alpha", "base_cost": 6, "dividend": 1, "growth": 3, "sector": "space"},
        ])
        with pytest.raises(CatalogValidationError) as exc:
            load_catalog(data)
        assert any("space" in e for e in exc.value.errors)

    def test_non_integer_delta_rejected(self):
        data = raw_catalog(events=[
            {"name": "Bad", "effects": [{"sector": "tech", "delta": 1.5}]},
        ])
        with pytest.raises(CatalogValidationError):
            load_catalog(data)

    def test_probability_out_of_range_rejected(self):
        data = raw_catalog(events=[{
            "name": "Bad",
            "effects": [],
            "conditional_effects": {"probability": 1.5, "effects": []},
        }])
        with pytest.raises(CatalogValidationError) as exc:
            load_catalog(data)
        assert any("between 0 and 1" in e for e in exc.value.errors)

    def test_die_roll_success_outside_range_rejected(self):
        data = raw_catalog(events=[{
            "name": "Bad",
            "effects": [],
            "conditional_effects": {
                "die_roll": {"min": 1, "max": 6, "success": [7]},
                "effects": [],
            },
        }])
        with pytest.raises(CatalogValidationError):
            load_catalog(data)

    def test_die_roll_min_not_below_max_rejected(self):
        data = raw_catalog(events=[{
            "name": "Bad",
            "effects": [],
            "conditional_effects": {
                "die_roll": {"min": 6, "max": 6, "success": [6]},
                "effects": [],
            },
        }])
        with pytest.raises(CatalogValidationError):
            load_catalog(data)

    def test_wrong_index_count_rejected(self):
        data = raw_catalog(indexes=[{"name": "tech"}])
        with pytest.raises(CatalogValidationError) as exc:
            load_catalog(data)
        assert any("exactly 4" in e for e in exc.value.errors)

    def test_unknown_action_type_rejected(self):
        data = raw_catalog(action_cards=[{"name": "Magic", "action_type": "teleport"}])
        with pytest.raises(CatalogValidationError):
            load_catalog(data)

    def test_targeted_card_without_stock_target_rejected(self):
        data = raw_catalog(action_cards=[
            {"name": "Hype", "action_type": "manipulate", "target_type": "none", "effect_value": 2},
        ])
        with pytest.raises(CatalogValidationError) as exc:
            load_catalog(data)
        assert any("must target a stock" in e for e in exc.value.errors)

    def test_non_positive_growth_rejected(self):
        data = raw_catalog(stocks=[
            {"name": "Flat", "base_cost": 6, "dividend": 1, "growth": 0, "sector": "tech"},
        ])
        with pytest.raises(CatalogValidationError):
            load_catalog(data)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(raw_catalog()), encoding="utf-8")
        catalog = load_catalog_file(path)
        assert len(catalog.stocks) == 1


class TestClassicCatalog:

    def test_classic_catalog_is_valid(self):
        catalog = create_classic_catalog(ScriptedRandom())
        result = validate_catalog(catalog)
        assert result.valid, result.errors

    def test_classic_contents(self):
        catalog = create_classic_catalog(ScriptedRandom())
        assert len(catalog.indexes) == 4
        assert len(catalog.stocks) == len(CLASSIC_STOCKS) == 16
        assert sum(1 for e in catalog.events if e.is_bubble) == 5
        assert len(catalog.action_cards) == 21

    def test_every_stock_sector_has_an_index(self):
        catalog = create_classic_catalog(ScriptedRandom())
        assert {s.sector for s in catalog.stocks} <= catalog.sector_names

    def test_action_deck_composition(self):
        catalog = create_classic_catalog(ScriptedRandom())
        assert len(catalog.action_cards) == sum(copies for _, copies in DECK_COMPOSITION)
        insider = [c for c in catalog.action_cards if c.name == "Insider Trading"]
        assert len(insider) == 3
        assert all(c.effect_value == 3 for c in insider)
