"""
Tests for game settings.
"""

import pytest
from pydantic import ValidationError

from ..config import GameSettings


class TestGameSettings:

    def test_defaults(self):
        settings = GameSettings()
        assert settings.max_rounds == 6
        assert settings.actions_per_turn == 2
        assert settings.max_board_stocks == 6
        assert settings.new_stocks_per_round == 2
        assert settings.initial_board_stocks == 3
        assert settings.starting_cash == 40
        assert settings.max_hand_size == 4
        assert settings.seed is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MARKET_MAX_ROUNDS", "8")
        monkeypatch.setenv("MARKET_SEED", "99")
        settings = GameSettings.from_env()
        assert settings.max_rounds == 8
        assert settings.seed == 99

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("MARKET_STARTING_CASH", "100")
        settings = GameSettings.from_env(starting_cash=25, seed=None)
        assert settings.starting_cash == 25
        assert settings.seed is None

    def test_invalid_env_value_rejected(self, monkeypatch):
        monkeypatch.setenv("MARKET_MAX_ROUNDS", "0")
        with pytest.raises(ValidationError):
            GameSettings.from_env()

    def test_constraints(self):
        with pytest.raises(ValidationError):
            GameSettings(actions_per_turn=0)
