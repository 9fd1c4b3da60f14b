"""
Tests for forecaster.bias — priority table, strengths and trade setups.
"""

import numpy as np
import pytest

import config as cfg
from forecaster.bias import RULES, classify_bias, classify_bias_from_frame
from forecaster.errors import InvalidInputError
from forecaster.models import BIAS_LABELS, PriceBar


def _bar(o, h, l, c):
    return PriceBar(open=o, high=h, low=l, close=c)


# D-1 swept above D-2 high and closed back inside with a bearish body
FAKE_HIGH = (_bar(1.10, 1.12, 1.09, 1.115), _bar(1.115, 1.125, 1.095, 1.097))
FAKE_LOW = (_bar(1.1050, 1.1100, 1.1000, 1.1020), _bar(1.1020, 1.1060, 1.0980, 1.1055))
UPTREND = (_bar(1.1000, 1.1100, 1.0990, 1.1090), _bar(1.1090, 1.1200, 1.1080, 1.1190))
DOWNTREND = (_bar(1.1090, 1.1100, 1.0990, 1.1000), _bar(1.1000, 1.1010, 1.0890, 1.0900))
INSIDE_BULL = (_bar(1.1000, 1.1200, 1.0900, 1.1100), _bar(1.1000, 1.1150, 1.0950, 1.1120))
INSIDE_DOJI = (_bar(1.1000, 1.1200, 1.0900, 1.1100), _bar(1.1000, 1.1100, 1.0950, 1.1005))
CONFLUENCE_BULL = (_bar(1.1000, 1.1050, 1.0950, 1.1040), _bar(1.0960, 1.1100, 1.0950, 1.1090))
CONFLUENCE_BEAR = (_bar(1.1000, 1.1050, 1.0950, 1.0960), _bar(1.1040, 1.1050, 1.0900, 1.0910))
MIXED = (_bar(1.1000, 1.1100, 1.0900, 1.1050), _bar(1.0820, 1.0960, 1.0800, 1.0880))


def _levels(setup):
    return [t.level for t in setup.targets]


class TestFakeBreakouts:
    def test_fake_breakout_high_is_bearish_reversal(self):
        result = classify_bias(*FAKE_HIGH, symbol="EURUSD")
        assert result.bias == "BEARISH REVERSAL"
        assert result.direction == "LOOK FOR SELL"
        assert result.strength == 85
        assert result.bullish_setup is None

        setup = result.bearish_setup
        assert setup.sweep_level == pytest.approx(1.125)
        assert setup.entry_zone.startswith("1.12500 - ")
        assert setup.invalidation == pytest.approx(1.134)
        assert _levels(setup) == pytest.approx([1.097, 1.095, 1.09])
        assert [t.label for t in setup.targets] == ["PD Close", "PD Low", "D-2 Low"]

    def test_fake_breakout_low_is_bullish_reversal(self):
        result = classify_bias(*FAKE_LOW)
        assert result.bias == "BULLISH REVERSAL"
        assert result.strength == 85
        assert result.bearish_setup is None

        setup = result.bullish_setup
        assert setup.sweep_level == pytest.approx(1.098)
        assert setup.entry_zone == "1.09745 - 1.09800"
        assert setup.invalidation == pytest.approx(1.0956)
        assert _levels(setup) == pytest.approx([1.1055, 1.106, 1.11])

    def test_fake_high_wins_over_fake_low(self):
        """Outside bar closing inside on both sides resolves to the first rule."""
        result = classify_bias(
            _bar(1.1000, 1.1100, 1.0900, 1.1050),
            _bar(1.0960, 1.1150, 1.0850, 1.1000),
        )
        assert "fake_breakout_high" in result.flags
        assert "fake_breakout_low" in result.flags
        assert result.bias == "BEARISH REVERSAL"

    def test_fake_breakout_ignores_confluence(self):
        result = classify_bias(*FAKE_LOW)
        assert result.confluence == -1
        assert result.strength == cfg.REVERSAL_STRENGTH


class TestContinuation:
    def test_uptrend_with_bullish_close(self):
        result = classify_bias(*UPTREND)
        assert result.bias == "BULLISH CONTINUATION"
        assert result.direction == "BUY PULLBACKS"
        assert 75 <= result.strength <= 95
        assert result.strength == 95          # 75 + 3*7 capped
        assert result.bearish_setup is None

        setup = result.bullish_setup
        assert setup.sweep_level == pytest.approx(1.108)
        assert setup.entry_zone == "1.10560 - 1.10800"
        assert setup.invalidation == pytest.approx(1.099)
        assert _levels(setup) == pytest.approx([1.12, 1.126, 1.132])
        assert [t.label for t in setup.targets] == ["Equal PD High", "Extension 1", "Extension 2"]

    def test_first_match_beats_confluence_rule(self):
        """Uptrend + bullish and confluence >= 3 both hold; rule 3 wins."""
        result = classify_bias(*UPTREND)
        assert result.confluence >= cfg.BIAS_CONFLUENCE_THRESHOLD
        assert result.rule == "uptrend"
        assert result.bias != "BULLISH"

    def test_strength_reads_config_at_call_time(self, monkeypatch):
        monkeypatch.setattr(cfg, "CONTINUATION_STEP", 1)
        result = classify_bias(*UPTREND)
        assert result.strength == 82          # 75 + 1*7

    def test_downtrend_with_bearish_close(self):
        result = classify_bias(*DOWNTREND)
        assert result.bias == "BEARISH CONTINUATION"
        assert result.direction == "SELL RALLIES"
        assert result.strength == 95
        assert result.bullish_setup is None

        setup = result.bearish_setup
        assert setup.sweep_level == pytest.approx(1.101)
        assert setup.invalidation == pytest.approx(1.11)
        assert _levels(setup) == pytest.approx([1.089, 1.083, 1.077])


class TestInsideBar:
    def test_bullish_inside_bar(self):
        result = classify_bias(*INSIDE_BULL)
        assert result.bias == "BULLISH BREAKOUT"
        assert result.direction == "BUY ABOVE PD HIGH"
        assert result.strength == 70
        # confluence is +3 but the inside bar rule comes first
        assert result.confluence == 3

        bull, bear = result.bullish_setup, result.bearish_setup
        assert bull.sweep_level == pytest.approx(1.115)
        assert bull.invalidation == pytest.approx(1.095)
        assert _levels(bull) == pytest.approx([1.12, 1.14])
        assert bear.sweep_level == pytest.approx(1.095)
        assert bear.invalidation == pytest.approx(1.115)
        assert _levels(bear) == pytest.approx([1.09, 1.07])
        assert [t.label for t in bear.targets] == ["D-2 Low", "Measured Move"]

    def test_doji_inside_bar_waits(self):
        result = classify_bias(*INSIDE_DOJI)
        assert result.bias == "NEUTRAL - WAIT"
        assert result.direction == "TRADE BREAKOUT"
        assert result.strength == 50
        assert result.bullish_setup is not None
        assert result.bearish_setup is not None

    def test_documented_sweep_example_is_an_inside_bar(self):
        """
        D-1 high 1.118 stays below D-2 high 1.12, so no sweep happened:
        the pair is an inside bar with a strong bearish D-1.
        """
        result = classify_bias(
            _bar(1.10, 1.12, 1.09, 1.115),
            _bar(1.115, 1.118, 1.095, 1.097),
        )
        assert result.bias == "BEARISH BREAKOUT"
        assert result.strength == 70
        assert result.bearish_setup.sweep_level == pytest.approx(1.095)
        assert result.bullish_setup.sweep_level == pytest.approx(1.118)


class TestConfluenceBias:
    def test_bullish(self):
        result = classify_bias(*CONFLUENCE_BULL)
        assert result.confluence == 5
        assert result.bias == "BULLISH"
        assert result.direction == "LOOK FOR BUY SETUPS"
        assert result.strength == 85          # 60 + 5*5
        assert result.headline is None
        assert result.bearish_setup is None

        setup = result.bullish_setup
        assert setup.sweep_level == pytest.approx(1.095)
        assert setup.entry_zone == "1.09275 - 1.09500"
        assert _levels(setup) == pytest.approx([1.11, 1.11927])
        assert setup.targets[1].label == "1.618 Extension"

    def test_bearish(self):
        result = classify_bias(*CONFLUENCE_BEAR)
        assert result.confluence == -5
        assert result.bias == "BEARISH"
        assert result.strength == 85
        assert result.bullish_setup is None
        assert result.bearish_setup.sweep_level == pytest.approx(1.105)
        assert _levels(result.bearish_setup) == pytest.approx([1.09, 1.08073])

    def test_neutral(self):
        result = classify_bias(*MIXED)
        assert result.confluence == -2
        assert result.bias == "NEUTRAL"
        assert result.direction == "WAIT FOR CLEAR SIGNAL"
        assert result.strength == 50
        assert result.bullish_setup is None and result.bearish_setup is None
        assert result.headline.startswith("Mixed signals")


class TestResultShape:
    def test_headline_leads_full_reasoning(self):
        result = classify_bias(*FAKE_HIGH)
        assert result.headline.startswith("FORECAST")
        assert result.full_reasoning[0] == result.headline
        assert result.full_reasoning[1:] == list(result.reasoning)

    def test_symbol_defaults(self):
        assert classify_bias(*MIXED).symbol == cfg.DEFAULT_SYMBOL
        assert classify_bias(*MIXED, symbol="XAUUSD").symbol == "XAUUSD"

    def test_candle_analysis(self):
        result = classify_bias(*UPTREND)
        assert set(result.candle_analysis.keys()) == {"dbpd", "pd"}
        assert result.candle_analysis["pd"].shape == "STRONG BULLISH"

    def test_result_is_frozen(self):
        result = classify_bias(*MIXED)
        with pytest.raises(AttributeError):
            result.bias = "BULLISH"

    def test_candle_analysis_is_read_only(self):
        result = classify_bias(*MIXED)
        with pytest.raises(AttributeError):
            result.candle_analysis.pd = result.candle_analysis.dbpd
        with pytest.raises(TypeError):
            result.candle_analysis["pd"] = result.candle_analysis.dbpd
        assert hash(result) == hash(classify_bias(*MIXED))

    def test_calls_do_not_share_state(self):
        first = classify_bias(*UPTREND)
        classify_bias(*DOWNTREND)
        again = classify_bias(*UPTREND)
        assert first == again

    def test_priority_table_ends_with_catch_all(self):
        assert [name for name, _, _ in RULES][0] == "fake_breakout_high"
        assert RULES[-1][0] == "neutral"

    def test_invalid_input_raises(self):
        with pytest.raises(InvalidInputError) as exc:
            classify_bias(_bar(1.10, 1.09, 1.09, 1.09), UPTREND[1])
        assert exc.value.bar == "D-2"


class TestProperties:
    """Random valid bar pairs always produce a well-formed verdict."""

    def _random_pairs(self, n=500, seed=7):
        rng = np.random.RandomState(seed)
        for _ in range(n):
            bars = []
            for _ in range(2):
                o, c = 1.1 + rng.randn(2) * 0.01
                h = max(o, c) + abs(rng.randn()) * 0.005 + 1e-5
                l = min(o, c) - abs(rng.randn()) * 0.005 - 1e-5
                bars.append(_bar(float(o), float(h), float(l), float(c)))
            yield bars

    def test_label_and_strength_bounds(self):
        for d2, d1 in self._random_pairs():
            result = classify_bias(d2, d1)
            assert result.bias in BIAS_LABELS
            assert 0 <= result.strength <= 100

    def test_setup_counts(self):
        for d2, d1 in self._random_pairs():
            result = classify_bias(d2, d1)
            emitted = (result.bullish_setup is not None) + (result.bearish_setup is not None)
            if result.rule == "inside_bar":
                assert emitted == 2
            else:
                assert emitted <= 1

    def test_no_neutral_candle_shape(self):
        for d2, d1 in self._random_pairs(n=200):
            result = classify_bias(d2, d1)
            for candle in result.candle_analysis.values():
                assert candle.shape != "NEUTRAL"


class TestFrame:
    def test_uses_last_two_rows(self):
        import pandas as pd

        df = pd.DataFrame([
            {"Open": 1.05, "High": 1.06, "Low": 1.04, "Close": 1.055},
            {"Open": 1.1000, "High": 1.1100, "Low": 1.0990, "Close": 1.1090},
            {"Open": 1.1090, "High": 1.1200, "Low": 1.1080, "Close": 1.1190},
        ])
        result = classify_bias_from_frame(df, "EURUSD")
        assert result == classify_bias(*UPTREND, symbol="EURUSD")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
