"""
Unit tests for the random source and the loss models.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.errors import ConfigError
from src.loss import (
    RandomSource, UniformLoss, GilbertElliottLoss, ChannelState, PatternLoss
)
from src.loss.gilbert_elliott import simulate_loss_pattern, analyze_burst_lengths
from src.utils.trace import DropTrace


class TestRandomSource:
    """Tests for the seeded random source."""
    
    def test_same_seed_same_sequence(self):
        """Two sources with the same seed agree value for value."""
        a = RandomSource(seed=42)
        b = RandomSource(seed=42)
        
        assert [a.uniform() for _ in range(100)] == [b.uniform() for _ in range(100)]
    
    def test_block_size_does_not_change_sequence(self):
        """Refilling in small blocks yields the same stream."""
        small = RandomSource(seed=7, block_size=3)
        large = RandomSource(seed=7)
        
        assert [small.uniform() for _ in range(20)] == [large.uniform() for _ in range(20)]
    
    def test_values_in_unit_interval(self):
        source = RandomSource(seed=1)
        values = [source.uniform() for _ in range(1000)]
        
        assert all(0.0 <= v < 1.0 for v in values)
        assert source.draws == 1000
    
    def test_reset(self):
        """Reset restarts the sequence."""
        source = RandomSource(seed=5)
        first = [source.uniform() for _ in range(10)]
        source.reset()
        
        assert [source.uniform() for _ in range(10)] == first
        assert source.draws == 10


class TestUniformLoss:
    """Tests for the uniform loss model."""
    
    def test_never_drops_at_zero(self):
        model = UniformLoss(0.0, RandomSource(seed=1))
        
        assert not any(simulate_loss_pattern(model, 1000))
        assert model.decisions == 1000
        assert model.drops == 0
    
    def test_always_drops_at_one(self):
        model = UniformLoss(1.0, RandomSource(seed=1))
        
        assert all(simulate_loss_pattern(model, 1000))
    
    def test_observed_rate(self):
        """Observed loss rate is close to p over many decisions."""
        model = UniformLoss(0.1, RandomSource(seed=3))
        simulate_loss_pattern(model, 100_000)
        
        assert abs(model.observed_loss_rate - 0.1) < 0.01
    
    def test_one_draw_per_decision(self):
        source = RandomSource(seed=1)
        model = UniformLoss(0.5, source)
        simulate_loss_pattern(model, 25)
        
        assert source.draws == 25
    
    def test_deterministic(self):
        a = UniformLoss(0.2, RandomSource(seed=9))
        b = UniformLoss(0.2, RandomSource(seed=9))
        
        assert simulate_loss_pattern(a, 500) == simulate_loss_pattern(b, 500)
    
    def test_iterator(self):
        """A loss model is an infinite iterator of decisions."""
        model = UniformLoss(1.0, RandomSource(seed=1))
        it = iter(model)
        
        assert [next(it) for _ in range(5)] == [True] * 5
        assert model.decisions == 5
    
    @pytest.mark.parametrize("p", [-0.1, 1.5, None])
    def test_invalid_probability(self, p):
        with pytest.raises(ConfigError):
            UniformLoss(p, RandomSource())
    
    def test_describe(self):
        assert UniformLoss(0.02, RandomSource()).describe() == "uniform_0.02"


class TestGilbertElliottLoss:
    """Tests for the Gilbert-Elliott loss model."""
    
    def test_starts_good(self):
        model = GilbertElliottLoss(0.1, 0.2, RandomSource(seed=1))
        
        assert model.state == ChannelState.GOOD
    
    def test_transition_before_drop(self):
        """The first decision already sees the state after the transition."""
        model = GilbertElliottLoss(1.0, 0.0, RandomSource(seed=1))
        
        assert model.decide(0) is True
        assert model.state == ChannelState.BAD
        assert model.state_transitions == 1
    
    def test_two_draws_per_decision(self):
        source = RandomSource(seed=1)
        model = GilbertElliottLoss(0.1, 0.3, source)
        simulate_loss_pattern(model, 50)
        
        assert source.draws == 100
    
    def test_stationary_start(self):
        """With p_bg = 0 the stationary distribution is all Bad."""
        source = RandomSource(seed=1)
        model = GilbertElliottLoss(1.0, 0.0, source, stationary_start=True)
        
        assert model.state == ChannelState.BAD
        assert source.draws == 1
    
    def test_stationary_start_degenerate_chain(self):
        """A chain that never moves starts Good without drawing."""
        source = RandomSource(seed=1)
        model = GilbertElliottLoss(0.0, 0.0, source, stationary_start=True)
        
        assert model.state == ChannelState.GOOD
        assert source.draws == 0
        assert not any(simulate_loss_pattern(model, 100))
    
    def test_steady_state_probabilities(self):
        model = GilbertElliottLoss(0.01, 0.09, RandomSource())
        
        pi_good, pi_bad = model.get_steady_state_probabilities()
        
        assert pi_good == pytest.approx(0.9)
        assert pi_bad == pytest.approx(0.1)
        assert model.get_average_loss_rate() == pytest.approx(0.1)
        assert model.get_mean_burst_length() == pytest.approx(1 / 0.09)
    
    def test_stationarity(self):
        """Empirical Bad fraction converges to p_gb / (p_gb + p_bg)."""
        model = GilbertElliottLoss(0.01, 0.1, RandomSource(seed=11))
        simulate_loss_pattern(model, 500_000)
        
        expected = 0.01 / (0.01 + 0.1)
        assert abs(model.bad_state_fraction - expected) < 0.01
        assert model.time_in_good + model.time_in_bad == 500_000
    
    def test_losses_come_in_bursts(self):
        """Default state losses (0 / 1) give bursts of mean 1 / p_bg."""
        model = GilbertElliottLoss(0.01, 0.25, RandomSource(seed=4))
        pattern = simulate_loss_pattern(model, 200_000)
        
        bursts = analyze_burst_lengths(pattern)
        assert bursts['num_bursts'] > 0
        assert 3.0 < bursts['avg_burst_length'] < 5.0
    
    def test_from_loss_and_burst(self):
        model = GilbertElliottLoss.from_loss_and_burst(0.1, 5, RandomSource())
        
        assert model.p_bg == pytest.approx(0.2)
        assert model.p_gb == pytest.approx(0.1 * 0.2 / 0.9)
        assert model.get_average_loss_rate() == pytest.approx(0.1)
    
    @pytest.mark.parametrize("loss_rate,burst", [
        (0.1, 0.5),    # burst below one symbol
        (1.0, 4),      # loss_rate not below p_b
        (0.9, 1),      # would need p_gb > 1
    ])
    def test_from_loss_and_burst_invalid(self, loss_rate, burst):
        with pytest.raises(ConfigError):
            GilbertElliottLoss.from_loss_and_burst(loss_rate, burst, RandomSource())
    
    def test_invalid_probability(self):
        with pytest.raises(ConfigError):
            GilbertElliottLoss(0.1, 1.2, RandomSource())

    def test_describe(self):
        """Every chain parameter ends up in the run file name."""
        base = GilbertElliottLoss(0.05, 0.2, RandomSource())
        leaky_good = GilbertElliottLoss(0.05, 0.2, RandomSource(), p_g=0.01)
        stationary = GilbertElliottLoss(0.05, 0.2, RandomSource(), stationary_start=True)

        assert base.describe() == "ge_0.05_0.2_0.0_1.0"
        assert leaky_good.describe() == "ge_0.05_0.2_0.01_1.0"
        assert stationary.describe() == "ge_0.05_0.2_0.0_1.0_stationary"
    
    def test_statistics(self):
        model = GilbertElliottLoss(0.05, 0.2, RandomSource(seed=2))
        simulate_loss_pattern(model, 1000)
        stats = model.get_statistics()
        
        assert stats['decisions'] == 1000
        assert stats['time_in_good'] + stats['time_in_bad'] == 1000
        assert stats['theoretical_loss_rate'] == pytest.approx(0.2)


class TestPatternLoss:
    """Tests for the scripted loss model."""
    
    def test_drops_listed_indices(self):
        model = PatternLoss({1, 3})
        
        assert simulate_loss_pattern(model, 5) == [False, True, False, True, False]
    
    def test_cycle(self):
        model = PatternLoss({0}, cycle_len=4)
        pattern = simulate_loss_pattern(model, 9)
        
        assert [i for i, d in enumerate(pattern) if d] == [0, 4, 8]
    
    def test_add_to_drop(self):
        model = PatternLoss()
        model.add_to_drop([2])
        
        assert simulate_loss_pattern(model, 3) == [False, False, True]
    
    def test_invalid_cycle(self):
        with pytest.raises(ConfigError):
            PatternLoss({0}, cycle_len=0)
    
    def test_from_trace(self):
        trace = DropTrace()
        trace.record(0, False, False)
        trace.record(1, False, True)
        trace.record(2, True, True)
        
        model = PatternLoss.from_trace(trace)
        
        assert simulate_loss_pattern(model, 4) == [False, True, True, False]
