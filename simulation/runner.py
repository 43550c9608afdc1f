"""
Batch Runner for Parameter Sweep Simulations

This module implements the batch runner that executes every point of
the parameter sweep (scheme × loss rate × beta) several times. Runs are
independent and can be executed in parallel worker processes.
"""

import os
import csv
import time
from typing import Optional, Callable, List, Dict
from dataclasses import dataclass, field
from concurrent.futures import ProcessPoolExecutor, as_completed
import multiprocessing
import sys

import numpy as np
from tqdm import tqdm

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    NUM_SYMBOLS, RUNS_PER_CONFIGURATION, RNG_SEED_BASE, OUTPUT_DIR, RESULTS_CSV
)
from simulation.simulator import Simulator, SimulatorConfig
from simulation.parameter_sweep import ParameterPoint, ParameterSweep
from src.errors import SimulatorError
from src.utils.logger import LogLevel


RESULT_FIELDS = [
    'scheme', 'loss_model', 'loss_rate', 'beta', 'run_id', 'seed',
    'n_source', 'n_repair', 'n_lost', 'n_recovered', 'n_ss_drop', 'n_drop',
    'ratio_post', 'overhead', 'residual_loss_rate', 'windows',
    'failed_windows', 'error'
]


@dataclass
class RunConfig:
    """Configuration for a single simulation run."""
    scheme: str
    loss_rate: float
    beta: Optional[float]
    run_id: int
    seed: int
    num_symbols: int = NUM_SYMBOLS
    overrides: Dict = field(default_factory=dict)
    
    def to_simulator_config(self) -> SimulatorConfig:
        params = dict(self.overrides)
        params.update(
            scheme=self.scheme,
            loss_rate=self.loss_rate,
            num_symbols=self.num_symbols,
            seed=self.seed,
            log_level=LogLevel.ERROR  # Minimal logging for batch runs
        )
        if self.beta is not None:
            params['beta'] = self.beta
        return SimulatorConfig(**params)


def run_single_simulation(run_config: RunConfig) -> Dict:
    """
    Run a single simulation with given configuration.
    
    This function is designed to be called in a separate process.
    Configuration and scheme errors are recorded in the result row.
    
    Args:
        run_config: Configuration for this run
        
    Returns:
        Dictionary with results
    """
    row = {
        'scheme': run_config.scheme,
        'loss_model': run_config.overrides.get('loss_model', 'uniform'),
        'loss_rate': run_config.loss_rate,
        'beta': run_config.beta,
        'run_id': run_config.run_id,
        'seed': run_config.seed,
        'error': None
    }
    
    try:
        config = run_config.to_simulator_config()
        stats = Simulator(config).run()
    except SimulatorError as e:
        row['error'] = f"{type(e).__name__}: {e}"
        return row
    
    row.update(
        n_source=stats.n_source,
        n_repair=stats.n_repair,
        n_lost=stats.n_lost,
        n_recovered=stats.n_recovered,
        n_ss_drop=stats.n_ss_drop,
        n_drop=stats.n_drop,
        ratio_post=stats.ratio_post,
        overhead=stats.overhead,
        residual_loss_rate=stats.residual_loss_rate,
        windows=stats.windows,
        failed_windows=stats.failed_windows
    )
    return row


class BatchRunner:
    """
    Batch Runner for parameter sweep simulations.
    
    Executes every parameter point with multiple runs each. Run `i` of
    every point uses seed `RNG_SEED_BASE + i`, so both schemes and all
    beta values face the same loss draws.
    
    Attributes:
        sweep: Parameter space
        num_symbols: Source symbols per run
        overrides: Extra SimulatorConfig fields applied to every run
    """
    
    def __init__(
        self,
        sweep: Optional[ParameterSweep] = None,
        num_symbols: int = NUM_SYMBOLS,
        overrides: Optional[Dict] = None,
        output_file: str = RESULTS_CSV,
        on_progress: Optional[Callable[[int, int, dict], None]] = None
    ):
        """
        Initialize batch runner.
        
        Args:
            sweep: Parameter space (default from config)
            num_symbols: Number of source symbols per run
            overrides: Extra SimulatorConfig fields, e.g. loss_model='ge'
            output_file: Path to output CSV file
            on_progress: Callback for progress updates
        """
        self.sweep = sweep or ParameterSweep()
        self.num_symbols = num_symbols
        self.overrides = dict(overrides or {})
        self.output_file = output_file
        self.on_progress = on_progress
        
        # Results storage
        self.results: List[Dict] = []
        
        # Progress tracking
        self.total_runs = self.sweep.total_simulations
        self.completed_runs = 0
        self.start_time = 0.0
    
    def _generate_run_configs(self) -> List[RunConfig]:
        """Generate all run configurations."""
        configs = []
        
        for point in self.sweep.get_all_points():
            for run_id in range(self.sweep.runs_per_config):
                configs.append(RunConfig(
                    scheme=point.scheme,
                    loss_rate=point.loss_rate,
                    beta=point.beta,
                    run_id=run_id,
                    seed=RNG_SEED_BASE + run_id,
                    num_symbols=self.num_symbols,
                    overrides=self.overrides
                ))
        
        return configs
    
    def _record(self, result: Dict):
        self.results.append(result)
        self.completed_runs += 1
        if self.on_progress:
            self.on_progress(self.completed_runs, self.total_runs, result)
    
    def run_sequential(self) -> List[Dict]:
        """
        Run all simulations sequentially.
        
        Returns:
            List of result dictionaries
        """
        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()
        
        print(f"Running {self.total_runs} simulations sequentially...")
        
        for config in tqdm(configs, desc="Simulations"):
            self._record(run_single_simulation(config))
        
        total_time = time.time() - self.start_time
        print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")
        
        return self.results
    
    def run_parallel(self, max_workers: Optional[int] = None) -> List[Dict]:
        """
        Run simulations in parallel using multiprocessing.
        
        Args:
            max_workers: Number of parallel workers (default: CPU count)
            
        Returns:
            List of result dictionaries
        """
        if max_workers is None:
            max_workers = multiprocessing.cpu_count()
        
        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()
        
        print(f"Running {self.total_runs} simulations with {max_workers} workers...")
        
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(run_single_simulation, config): config
                for config in configs
            }
            
            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Simulations"):
                self._record(future.result())
        
        # Completion order is arbitrary; keep the file stable
        self.results.sort(key=lambda r: (r['scheme'], r['loss_rate'],
                                         r['beta'] or 0.0, r['run_id']))
        
        total_time = time.time() - self.start_time
        print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")
        
        return self.results
    
    def save_results(self, filepath: Optional[str] = None):
        """
        Save results to CSV file.
        
        Args:
            filepath: Output file path (default: self.output_file)
        """
        filepath = filepath or self.output_file
        
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        
        if not self.results:
            print("No results to save!")
            return
        
        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=RESULT_FIELDS, restval='',
                                    lineterminator='\n')
            writer.writeheader()
            for result in self.results:
                writer.writerow({k: ('' if v is None else v) for k, v in result.items()})
        
        print(f"Results saved to: {filepath}")
    
    @property
    def failed_runs(self) -> List[Dict]:
        """Result rows that carry an error."""
        return [r for r in self.results if r.get('error')]
    
    def get_aggregated_results(self) -> Dict:
        """
        Get aggregated results by (scheme, loss_rate, beta).
        
        Returns:
            Dictionary with aggregated statistics
        """
        aggregated = {}
        
        for result in self.results:
            if result.get('error'):
                continue
            
            point = ParameterPoint(result['scheme'], result['loss_rate'], result['beta'])
            if point.key not in aggregated:
                aggregated[point.key] = {
                    'scheme': point.scheme,
                    'loss_rate': point.loss_rate,
                    'beta': point.beta,
                    'overheads': [],
                    'residuals': [],
                    'recovered': []
                }
            
            data = aggregated[point.key]
            data['overheads'].append(result['overhead'])
            data['residuals'].append(result['residual_loss_rate'])
            data['recovered'].append(result['n_recovered'])
        
        # Calculate statistics
        for data in aggregated.values():
            overheads = np.asarray(data['overheads'])
            residuals = np.asarray(data['residuals'])
            data['runs'] = len(overheads)
            data['overhead_mean'] = float(overheads.mean())
            data['residual_mean'] = float(residuals.mean())
            data['residual_std'] = (float(residuals.std(ddof=1))
                                    if len(residuals) > 1 else 0.0)
            data['residual_max'] = float(residuals.max())
            data['recovered_mean'] = float(np.mean(data['recovered']))
        
        return aggregated
    
    def get_cheapest_configuration(self, target_residual: float = 0.0) -> Dict:
        """
        Find the point with the lowest mean overhead whose mean residual
        loss does not exceed `target_residual`.
        
        Returns:
            Dictionary with the selected point, or an error entry
        """
        aggregated = self.get_aggregated_results()
        candidates = [
            data for data in aggregated.values()
            if data['residual_mean'] <= target_residual
        ]
        
        if not candidates:
            return {'error': 'No configuration meets the residual loss target'}
        
        best = min(candidates, key=lambda d: d['overhead_mean'])
        return {
            'scheme': best['scheme'],
            'loss_rate': best['loss_rate'],
            'beta': best['beta'],
            'mean_overhead': best['overhead_mean'],
            'mean_residual': best['residual_mean']
        }


if __name__ == "__main__":
    # Test batch runner with small parameter space
    print("=" * 60)
    print("BATCH RUNNER TEST")
    print("=" * 60)
    
    runner = BatchRunner(
        sweep=ParameterSweep(loss_rates=[0.01, 0.05], beta_values=[1.0, 3.0],
                             runs_per_config=2),
        num_symbols=2_000,
        output_file=os.path.join(OUTPUT_DIR, "test_results.csv")
    )
    
    print(f"\nTest configuration:")
    print(f"  Loss rates: {runner.sweep.loss_rates}")
    print(f"  Beta values: {runner.sweep.beta_values}")
    print(f"  Runs per config: {runner.sweep.runs_per_config}")
    print(f"  Total runs: {runner.total_runs}")
    
    print("\nRunning simulations...")
    runner.run_sequential()
    runner.save_results()
    
    print("\nAggregated results:")
    for key, data in runner.get_aggregated_results().items():
        print(f"  {key}: overhead={data['overhead_mean']*100:.2f}%, "
              f"residual={data['residual_mean']*100:.4f}%")
