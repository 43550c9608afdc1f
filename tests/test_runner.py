"""
Tests for the batch runner and parameter sweep.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import RNG_SEED_BASE
from simulation.runner import BatchRunner, RunConfig, run_single_simulation
from simulation.parameter_sweep import ParameterPoint, ParameterSweep


def small_runner(tmp_path, **kwargs):
    sweep = ParameterSweep(loss_rates=[0.05], beta_values=[1.0, 2.0], runs_per_config=2)
    return BatchRunner(sweep=sweep, num_symbols=1000,
                       output_file=str(tmp_path / "results.csv"), **kwargs)


class TestParameterSweep:
    """Tests for the parameter space."""
    
    def test_points(self):
        sweep = ParameterSweep(loss_rates=[0.01, 0.05], beta_values=[1.0, 2.0, 3.0])
        points = sweep.get_all_points()
        
        adaptive = [p for p in points if p.scheme == 'adaptive-linear']
        parity = [p for p in points if p.scheme == 'interleaved-parity']
        assert len(adaptive) == 6
        assert len(parity) == 2
        assert all(p.beta is None for p in parity)
    
    def test_totals(self):
        sweep = ParameterSweep(loss_rates=[0.01, 0.05], beta_values=[1.0, 2.0],
                               runs_per_config=3)
        
        assert sweep.total_configurations == 6
        assert sweep.total_simulations == 18
    
    def test_expected_overhead(self):
        parity = ParameterPoint('interleaved-parity', 0.05)
        adaptive = ParameterPoint('adaptive-linear', 0.05, 2.0)
        
        assert ParameterSweep.expected_overhead(parity, rows=10, cols=20) == pytest.approx(0.05)
        assert ParameterSweep.expected_overhead(parity, rows=10, cols=20,
                                                column_parity=True) == pytest.approx(0.15)
        assert ParameterSweep.expected_overhead(adaptive) == pytest.approx(0.1)
        assert ParameterSweep.expected_overhead(parity, rows=10, cols=20,
                                                layers=(40,)) == pytest.approx(0.25)
        assert ParameterSweep.expected_overhead(adaptive, window_size=200,
                                                repair_step=50) == pytest.approx(0.02)
    
    def test_label(self):
        assert ParameterPoint('adaptive-linear', 0.01, 2.0).label == "adaptive-linear (beta=2)"
        assert ParameterPoint('interleaved-parity', 0.01).label == "interleaved-parity"


class TestRunSingleSimulation:
    """Tests for the per-process worker function."""
    
    def test_success(self):
        run = RunConfig(scheme='adaptive-linear', loss_rate=0.05, beta=2.0,
                        run_id=0, seed=1, num_symbols=1000)
        result = run_single_simulation(run)
        
        assert result['error'] is None
        assert result['n_source'] == 1000
        assert result['n_ss_drop'] == result['n_lost'] + result['n_recovered']
    
    def test_config_error_is_recorded(self):
        """An invalid configuration is reported, not raised."""
        run = RunConfig(scheme='adaptive-linear', loss_rate=1.5, beta=1.0,
                        run_id=0, seed=1, num_symbols=1000)
        result = run_single_simulation(run)
        
        assert result['error'].startswith("ConfigError")
        assert 'n_repair' not in result
    
    def test_overrides(self):
        run = RunConfig(scheme='interleaved-parity', loss_rate=0.0, beta=None,
                        run_id=0, seed=1, num_symbols=1000,
                        overrides={'rows': 10, 'cols': 10, 'column_parity': True})
        result = run_single_simulation(run)
        
        assert result['n_repair'] == 200


class TestBatchRunner:
    """Tests for batch execution."""
    
    def test_seeds(self, tmp_path):
        runner = small_runner(tmp_path)
        configs = runner._generate_run_configs()
        
        assert len(configs) == runner.total_runs == 6
        assert {c.seed for c in configs} == {RNG_SEED_BASE, RNG_SEED_BASE + 1}
    
    def test_run_sequential(self, tmp_path):
        progress = []
        runner = small_runner(tmp_path, on_progress=lambda done, total, r: progress.append(done))
        results = runner.run_sequential()
        
        assert len(results) == 6
        assert progress == [1, 2, 3, 4, 5, 6]
        assert not runner.failed_runs
    
    def test_seed_shared_across_points(self, tmp_path):
        """Run i of every point uses the same seed."""
        runner = small_runner(tmp_path)
        
        seeds = {}
        for c in runner._generate_run_configs():
            seeds.setdefault(c.run_id, set()).add(c.seed)
        
        assert seeds == {0: {RNG_SEED_BASE}, 1: {RNG_SEED_BASE + 1}}
    
    def test_save_and_load(self, tmp_path):
        runner = small_runner(tmp_path)
        runner.run_sequential()
        runner.save_results()
        
        loaded = ParameterSweep.load_results(runner.output_file)
        
        assert len(loaded) == 6
        parity = [r for r in loaded if r['scheme'] == 'interleaved-parity']
        assert all(r['beta'] is None for r in parity)
        assert all(r['error'] is None for r in loaded)
        assert {r['loss_rate'] for r in loaded} == {0.05}
    
    def test_aggregated(self, tmp_path):
        runner = small_runner(tmp_path)
        runner.run_sequential()
        
        aggregated = runner.get_aggregated_results()
        
        assert set(aggregated) == {
            ('adaptive-linear', 0.05, 1.0),
            ('adaptive-linear', 0.05, 2.0),
            ('interleaved-parity', 0.05, None),
        }
        assert all(data['runs'] == 2 for data in aggregated.values())
        assert (aggregated[('adaptive-linear', 0.05, 1.0)]['overhead_mean'] <
                aggregated[('adaptive-linear', 0.05, 2.0)]['overhead_mean'])
    
    def test_failed_runs_are_kept(self, tmp_path):
        runner = small_runner(tmp_path, overrides={'window_size': 0})
        runner.run_sequential()
        
        assert len(runner.failed_runs) == 6
        assert runner.get_aggregated_results() == {}
    
    def test_cheapest_configuration(self, tmp_path):
        runner = small_runner(tmp_path)
        runner.run_sequential()
        
        best = runner.get_cheapest_configuration(target_residual=1.0)
        
        assert best['mean_overhead'] == min(
            d['overhead_mean'] for d in runner.get_aggregated_results().values())
    
    def test_run_parallel(self, tmp_path):
        runner = small_runner(tmp_path)
        parallel = runner.run_parallel(max_workers=2)
        
        sequential = small_runner(tmp_path).run_sequential()
        key = lambda r: (r['scheme'], r['beta'] or 0.0, r['run_id'])
        
        assert sorted(parallel, key=key) == sorted(sequential, key=key)
