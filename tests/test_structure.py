"""Deterministic tests for the structure, zone and marker detectors.

All tests use fixed candle fixtures. Same input = same output, always.
"""

import pytest

from app.market.models import Candle
from app.smc.markers import synthesize_markers
from app.smc.models import CharacterChange, LiquiditySweep, Zone
from app.smc.structure import detect_bos, detect_choch, detect_liquidity_sweep
from app.smc.zones import collect_fair_value_gaps, collect_order_blocks


def _make_candle(time: int, o: float, h: float, l: float, c: float) -> Candle:
    return Candle(time=time, open=o, high=h, low=l, close=c)


def _filler(time: int = 0) -> Candle:
    """A neutral candle far from the test prices."""
    return _make_candle(time, 50.0, 50.5, 49.5, 50.0)


# ── Break of structure ───────────────────────────────────────────────────


class TestDetectBos:
    @pytest.mark.parametrize("n", [0, 1, 2])
    def test_short_sequence(self, n):
        candles = [_make_candle(i, 10, 11, 9, 10) for i in range(n)]
        assert detect_bos(candles) is None

    def test_bullish_break(self):
        candles = [
            _make_candle(1, 9.5, 10.0, 9.0, 9.8),
            _make_candle(2, 9.0, 9.0, 8.5, 8.8),
            _make_candle(3, 9.5, 11.0, 9.5, 10.8),
        ]
        bos = detect_bos(candles)
        assert bos is not None
        assert bos.direction == "bullish"
        assert bos.level == 10.0
        assert bos.time == 3

    def test_bearish_break(self):
        candles = [
            _make_candle(1, 5.5, 6.0, 5.0, 5.2),
            _make_candle(2, 5.8, 6.0, 5.5, 5.6),
            _make_candle(3, 5.4, 5.6, 4.5, 4.6),
        ]
        bos = detect_bos(candles)
        assert bos.direction == "bearish"
        assert bos.level == 5.0

    def test_gradual_climb_is_not_a_break(self):
        """Middle candle already exceeded the swing high."""
        candles = [
            _make_candle(1, 9.5, 10.0, 9.0, 9.8),
            _make_candle(2, 9.8, 10.5, 9.6, 10.4),
            _make_candle(3, 10.4, 11.0, 10.0, 10.9),
        ]
        assert detect_bos(candles) is None

    def test_equal_middle_high_still_breaks(self):
        candles = [
            _make_candle(1, 9.5, 10.0, 9.0, 9.8),
            _make_candle(2, 9.8, 10.0, 9.2, 9.9),
            _make_candle(3, 9.9, 10.2, 9.5, 10.1),
        ]
        assert detect_bos(candles).direction == "bullish"

    def test_outside_bar_prefers_bullish(self):
        candles = [
            _make_candle(1, 9.5, 10.0, 9.0, 9.5),
            _make_candle(2, 9.5, 9.8, 9.2, 9.5),
            _make_candle(3, 9.5, 10.5, 8.5, 9.5),
        ]
        assert detect_bos(candles).direction == "bullish"

    def test_only_last_three_candles_matter(self):
        tail = [
            _make_candle(10, 9.5, 10.0, 9.0, 9.8),
            _make_candle(11, 9.0, 9.0, 8.5, 8.8),
            _make_candle(12, 9.5, 11.0, 9.5, 10.8),
        ]
        history = [_make_candle(i, 100, 200, 1, 100) for i in range(5)]
        assert detect_bos(history + tail) == detect_bos(tail)


# ── Change of character ──────────────────────────────────────────────────


class TestDetectChoch:
    @pytest.mark.parametrize("n", [0, 1, 2, 3])
    def test_short_sequence(self, n):
        candles = [_make_candle(i, 10, 11, 9, 10) for i in range(n)]
        assert detect_choch(candles) is None

    def test_bullish_change(self):
        candles = [
            _make_candle(1, 100, 102, 98, 101),   # prev
            _make_candle(2, 101, 101.5, 97, 97.5),
            _make_candle(3, 97.5, 98, 96, 96.5),  # swing dips below prev low
            _make_candle(4, 96.5, 99, 95, 98.5),  # last breaks swing high
        ]
        choch = detect_choch(candles)
        assert choch == CharacterChange(direction="bullish", time=4)

    def test_bearish_change(self):
        candles = [
            _make_candle(1, 100, 102, 98, 99),    # prev
            _make_candle(2, 99, 101, 98.5, 100),
            _make_candle(3, 100, 103, 100, 102),  # swing above prev high
            _make_candle(4, 102, 102.5, 99, 99.5),  # last breaks swing low
        ]
        assert detect_choch(candles).direction == "bearish"

    def test_third_from_last_candle_ignored(self):
        base = [
            _make_candle(1, 100, 102, 98, 101),
            _make_candle(2, 101, 101.5, 97, 97.5),
            _make_candle(3, 97.5, 98, 96, 96.5),
            _make_candle(4, 96.5, 99, 95, 98.5),
        ]
        altered = list(base)
        altered[1] = _make_candle(2, 500, 900, 1, 2)
        assert detect_choch(altered) == detect_choch(base)

    def test_no_change_without_prior_dip(self):
        candles = [
            _make_candle(1, 100, 102, 95, 101),
            _make_candle(2, 101, 101.5, 97, 97.5),
            _make_candle(3, 97.5, 98, 96, 96.5),  # low 96 not below 95
            _make_candle(4, 96.5, 99, 96, 98.5),
        ]
        assert detect_choch(candles) is None


# ── Liquidity sweep ──────────────────────────────────────────────────────


class TestDetectLiquiditySweep:
    @pytest.mark.parametrize("n", [0, 1, 2, 3])
    def test_short_sequence(self, n):
        candles = [_make_candle(i, 10, 11, 9, 10) for i in range(n)]
        assert detect_liquidity_sweep(candles) is None

    def test_three_candles_never_sweep_high(self):
        """The high-sweep shape on only three candles is still too short."""
        candles = [
            _make_candle(1, 100, 105, 99, 104),
            _make_candle(2, 104, 104.5, 102, 104),
            _make_candle(3, 104, 106, 102.5, 103),
        ]
        assert detect_liquidity_sweep(candles) is None
        assert detect_liquidity_sweep([_filler(0)] + candles).direction == "high"

    def test_three_candles_never_sweep_low(self):
        candles = [
            _make_candle(1, 101, 101.5, 97, 97.5),
            _make_candle(2, 97.5, 98, 96, 96.5),
            _make_candle(3, 96.5, 99, 95, 98.5),
        ]
        assert detect_liquidity_sweep(candles) is None
        assert detect_liquidity_sweep([_filler(0)] + candles).direction == "low"

    def test_sweep_high(self):
        candles = [
            _filler(0),
            _make_candle(1, 100, 105, 99, 104),   # a
            _make_candle(2, 104, 104.5, 102, 104),  # b
            _make_candle(3, 104, 106, 102.5, 103),  # d wicks above a, closes under b
        ]
        sweep = detect_liquidity_sweep(candles)
        assert sweep == LiquiditySweep(direction="high", level=105, time=3)

    def test_sweep_low(self):
        candles = [
            _filler(0),
            _make_candle(1, 101, 101.5, 97, 97.5),  # a
            _make_candle(2, 97.5, 98, 96, 96.5),    # b
            _make_candle(3, 96.5, 99, 95, 98.5),    # d
        ]
        sweep = detect_liquidity_sweep(candles)
        assert sweep == LiquiditySweep(direction="low", level=97, time=3)

    def test_breakout_close_is_not_a_sweep(self):
        """Wick above the high but close above the previous close."""
        candles = [
            _filler(0),
            _make_candle(1, 100, 105, 99, 104),
            _make_candle(2, 104, 104.5, 102, 103),
            _make_candle(3, 103, 106, 102.5, 105.5),
        ]
        assert detect_liquidity_sweep(candles) is None


# ── Fair value gaps ──────────────────────────────────────────────────────


class TestCollectFairValueGaps:
    def test_bullish_gap(self):
        candles = [
            _make_candle(100, 4.0, 5.0, 3.5, 4.5),
            _make_candle(200, 4.5, 8.0, 4.4, 7.5),
            _make_candle(300, 7.5, 9.0, 7.0, 8.5),
        ]
        zones = collect_fair_value_gaps(candles)
        assert zones == [Zone(kind="FVG_bullish", low=5.0, high=7.0, time=300)]

    def test_bearish_gap(self):
        candles = [
            _make_candle(100, 9.0, 9.5, 8.0, 8.2),
            _make_candle(200, 8.2, 8.3, 5.5, 5.6),
            _make_candle(300, 5.6, 6.0, 5.0, 5.2),
        ]
        zones = collect_fair_value_gaps(candles)
        assert zones == [Zone(kind="FVG_bearish", low=6.0, high=8.0, time=300)]

    def test_fewer_than_three_candles(self):
        candles = [_make_candle(1, 4, 5, 3, 4), _make_candle(2, 7, 9, 7, 8)]
        assert collect_fair_value_gaps(candles) == []

    def test_gaps_kept_in_chronological_order_and_never_removed(self):
        # Rising staircase: every third candle gaps above the first.
        candles = [
            _make_candle(i, 10 + 2 * i, 11 + 2 * i, 10 + 2 * i, 11 + 2 * i)
            for i in range(6)
        ]
        # Later candle trades back through every gap.
        candles.append(_make_candle(6, 20, 21, 5, 6))
        zones = collect_fair_value_gaps(candles)
        assert [z.time for z in zones] == [2, 3, 4, 5]
        assert all(z.kind == "FVG_bullish" for z in zones)

    def test_depth_limits_scan_window(self):
        candles = [
            _make_candle(i, 10 + 2 * i, 11 + 2 * i, 10 + 2 * i, 11 + 2 * i)
            for i in range(10)
        ]
        zones = collect_fair_value_gaps(candles, depth=3)
        assert [z.time for z in zones] == [7, 8, 9]


# ── Order blocks ─────────────────────────────────────────────────────────


class TestCollectOrderBlocks:
    def test_bullish_order_block(self):
        candles = [
            _filler(0),
            _make_candle(1, 102, 103, 99, 100),   # bearish
            _make_candle(2, 100, 105, 99.5, 104),  # bullish, closes above 103
        ]
        zones = collect_order_blocks(candles)
        assert zones == [Zone(kind="OB_bullish", low=99, high=103, time=1)]

    def test_bearish_order_block(self):
        candles = [
            _filler(0),
            _make_candle(1, 100, 103, 99, 102),   # bullish
            _make_candle(2, 102, 102.5, 97, 98),  # bearish, closes below 99
        ]
        zones = collect_order_blocks(candles)
        assert zones == [Zone(kind="OB_bearish", low=99, high=103, time=1)]

    def test_first_pair_never_examined(self):
        """The scan starts at index 2, so candles (0, 1) cannot form a block."""
        candles = [
            _make_candle(0, 102, 103, 99, 100),   # bearish
            _make_candle(1, 100, 105, 99.5, 104),  # bullish, closes above 103
        ]
        assert collect_order_blocks(candles) == []

    def test_requires_adjacent_reversal(self):
        """A reversal two candles after the bearish candle yields no zone."""
        candles = [
            _filler(0),
            _make_candle(1, 102, 103, 99, 100),     # bearish
            _make_candle(2, 100, 101, 99.5, 100.5),  # bullish but weak
            _make_candle(3, 100.5, 106, 100, 105),   # strong bullish
        ]
        assert collect_order_blocks(candles) == []

    def test_reversal_must_close_beyond_range(self):
        candles = [
            _filler(0),
            _make_candle(1, 102, 103, 99, 100),
            _make_candle(2, 100, 104, 99.5, 103),  # close equals high, not above
        ]
        assert collect_order_blocks(candles) == []


# ── Marker synthesis ─────────────────────────────────────────────────────


class TestSynthesizeMarkers:
    def _candles(self):
        return [_make_candle(t, 10, 11, 9, 10) for t in (100, 200, 300, 400)]

    def test_buy_marker(self):
        markers = synthesize_markers(
            self._candles(),
            CharacterChange("bullish", 400),
            LiquiditySweep("low", 9.0, 400),
        )
        assert len(markers) == 1
        m = markers[0]
        assert m.side == "buy"
        assert m.position == "belowBar"
        assert m.shape == "arrowUp"
        assert m.text == "BUY"

    def test_sell_marker(self):
        markers = synthesize_markers(
            self._candles(),
            CharacterChange("bearish", 400),
            LiquiditySweep("high", 11.0, 400),
        )
        assert [m.side for m in markers] == ["sell"]
        assert markers[0].position == "aboveBar"

    def test_marker_stamped_with_latest_candle(self):
        markers = synthesize_markers(
            self._candles(),
            CharacterChange("bullish", 100),
            LiquiditySweep("low", 9.0, 200),
        )
        assert markers[0].time == 400

    def test_mismatched_events(self):
        assert synthesize_markers(
            self._candles(),
            CharacterChange("bullish", 400),
            LiquiditySweep("high", 11.0, 400),
        ) == []

    def test_missing_events(self):
        assert synthesize_markers(self._candles(), None, None) == []
        assert synthesize_markers(
            self._candles(), CharacterChange("bullish", 400), None,
        ) == []
