"""Tests for configuration classes."""

import os
import pytest
from dataclasses import fields
from unittest.mock import patch

from config import AppConfig, BaccaratConfig, BlackjackConfig, CUT_PRESETS, RouletteConfig
from tablegames.baccarat import BaccaratRules
from tablegames.blackjack import BlackjackRules
from tablegames.roulette import RouletteRules


class TestBlackjackConfig:
    """Tests for BlackjackConfig."""

    def test_defaults(self):
        """Test defaults when no environment variables are set."""
        with patch.dict(os.environ, {}, clear=True):
            table = BlackjackConfig()

        assert table.num_decks == 6
        assert table.min_bet == 10
        assert table.cut_preset == "STANDARD"
        assert table.cut_ratio == (0.2, 0.25)
        assert table.dealer_hits_soft_17 is False

    def test_reads_environment(self):
        env = {
            "TABLEGAMES_BLACKJACK_DECKS": "4",
            "TABLEGAMES_BLACKJACK_MIN_BET": "25",
            "TABLEGAMES_BLACKJACK_CUT_PRESET": "deep",
            "TABLEGAMES_BLACKJACK_H17": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            table = BlackjackConfig()

        assert table.num_decks == 4
        assert table.min_bet == 25
        assert table.cut_ratio == CUT_PRESETS["DEEP"]
        assert table.dealer_hits_soft_17 is True

    def test_invalid_integer(self):
        with patch.dict(os.environ, {"TABLEGAMES_BLACKJACK_DECKS": "six"}, clear=True):
            with pytest.raises(ValueError):
                BlackjackConfig()

    def test_invalid_preset(self):
        with patch.dict(os.environ, {"TABLEGAMES_BLACKJACK_CUT_PRESET": "NONE"}, clear=True):
            with pytest.raises(ValueError):
                BlackjackConfig()

    def test_rules_from_config(self):
        with patch.dict(os.environ, {"TABLEGAMES_BLACKJACK_CUT_PRESET": "SHALLOW"}, clear=True):
            rules = BlackjackRules.from_config(BlackjackConfig())

        assert rules.cut_ratio_min == 0.25
        assert rules.cut_ratio_max == 0.3


class TestBaccaratAndRouletteConfig:
    """Tests for the baccarat and roulette table defaults."""

    def test_baccarat_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            rules = BaccaratRules.from_config(BaccaratConfig())

        assert rules.num_decks == 8
        assert rules.min_bet == 10

    def test_baccarat_min_bet_from_env(self):
        with patch.dict(os.environ, {"TABLEGAMES_BACCARAT_MIN_BET": "100"}, clear=True):
            assert BaccaratConfig().min_bet == 100

    def test_roulette_history_limit(self):
        with patch.dict(os.environ, {"TABLEGAMES_ROULETTE_HISTORY": "20"}, clear=True):
            rules = RouletteRules.from_config(RouletteConfig())

        assert rules.history_limit == 20

    def test_invalid_rules(self):
        with pytest.raises(ValueError):
            BaccaratRules(num_decks=0)
        with pytest.raises(ValueError):
            RouletteRules(history_limit=0)
        with pytest.raises(ValueError):
            BlackjackRules(min_bet=0)


class TestAppConfig:
    """Tests for the combined configuration."""

    def test_groups_table_configs(self):
        with patch.dict(os.environ, {"TABLEGAMES_ROULETTE_HISTORY": "20"}, clear=True):
            app = AppConfig()
            blackjack = BlackjackConfig()

        assert [f.name for f in fields(AppConfig)] == ["blackjack", "baccarat", "roulette"]
        assert app.blackjack == blackjack
        assert app.roulette.history_limit == 20
