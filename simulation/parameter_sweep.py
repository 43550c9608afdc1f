"""
Parameter Sweep Configuration

This module defines the parameter space compared by the batch runner
and provides utilities for analysing sweep results.
"""

import os
import sys
from typing import List, Dict, Tuple, Optional, Sequence
from dataclasses import dataclass
import csv
import math

import numpy as np

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    LOSS_RATES, BETA_VALUES, RUNS_PER_CONFIGURATION, FEC_WINDOW,
    PARITY_ROWS, PARITY_COLS, calculate_expected_repairs
)
from simulation.simulator import SCHEMES


@dataclass(frozen=True)
class ParameterPoint:
    """
    A single point in the parameter space.
    
    `beta` only applies to the adaptive scheme and is None for the
    interleaved-parity scheme.
    """
    scheme: str
    loss_rate: float
    beta: Optional[float] = None
    
    @property
    def key(self) -> Tuple[str, float, Optional[float]]:
        return (self.scheme, self.loss_rate, self.beta)
    
    @property
    def label(self) -> str:
        if self.beta is None:
            return self.scheme
        return f"{self.scheme} (beta={self.beta:g})"


class ParameterSweep:
    """
    Parameter sweep configuration and analysis.
    
    Defines the parameter space:
    - scheme ∈ {adaptive-linear, interleaved-parity}
    - loss rate ∈ LOSS_RATES
    - beta ∈ BETA_VALUES (adaptive-linear only)
    - RUNS_PER_CONFIGURATION runs per point
    """
    
    def __init__(
        self,
        schemes: List[str] = None,
        loss_rates: List[float] = None,
        beta_values: List[float] = None,
        runs_per_config: int = RUNS_PER_CONFIGURATION
    ):
        """
        Initialize parameter sweep.
        
        Args:
            schemes: Schemes to compare
            loss_rates: Channel loss rates
            beta_values: Redundancy multipliers for the adaptive scheme
            runs_per_config: Number of runs per point
        """
        self.schemes = schemes or list(SCHEMES)
        self.loss_rates = loss_rates or LOSS_RATES
        self.beta_values = beta_values or BETA_VALUES
        self.runs_per_config = runs_per_config
    
    def get_all_points(self) -> List[ParameterPoint]:
        """Get all parameter points."""
        points = []
        for scheme in self.schemes:
            for loss_rate in self.loss_rates:
                if scheme == 'adaptive-linear':
                    for beta in self.beta_values:
                        points.append(ParameterPoint(scheme, loss_rate, beta))
                else:
                    points.append(ParameterPoint(scheme, loss_rate))
        return points
    
    @property
    def total_configurations(self) -> int:
        """Total number of parameter points."""
        return len(self.get_all_points())
    
    @property
    def total_simulations(self) -> int:
        """Total number of simulation runs."""
        return self.total_configurations * self.runs_per_config
    
    @staticmethod
    def expected_overhead(
        point: ParameterPoint,
        window_size: int = FEC_WINDOW,
        rows: int = PARITY_ROWS,
        cols: int = PARITY_COLS,
        column_parity: bool = False,
        layers: Sequence[int] = (),
        repair_step: Optional[int] = None
    ) -> float:
        """
        Steady-state repair overhead of a point.
        
        Adaptive: beta * W * p / W, once p_hat has converged to p,
        or 1 / repair_step with a fixed step.
        Parity: (rows [+ cols] + sum(layers)) / (rows * cols).
        
        Returns:
            Repair symbols per source symbol
        """
        if point.scheme == 'adaptive-linear':
            if repair_step is not None:
                return math.ceil(window_size / repair_step) / window_size
            return calculate_expected_repairs(window_size, point.loss_rate, point.beta) / window_size
        parities = rows + (cols if column_parity else 0)
        parities += sum(min(stride, rows * cols) for stride in layers)
        return parities / (rows * cols)
    
    @staticmethod
    def load_results(filepath: str) -> List[Dict]:
        """
        Load results from CSV file.
        
        Args:
            filepath: Path to CSV file
            
        Returns:
            List of result dictionaries
        """
        results = []
        with open(filepath, 'r', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                # Convert numeric fields, empty cells become None
                for key in row:
                    if row[key] == '':
                        row[key] = None
                        continue
                    try:
                        if '.' in row[key] or 'e' in row[key]:
                            row[key] = float(row[key])
                        else:
                            row[key] = int(row[key])
                    except (ValueError, TypeError):
                        pass
                results.append(row)
        return results
    
    @staticmethod
    def create_metric_matrix(results: List[Dict], metric: str) -> Dict:
        """
        Mean and spread of a metric per parameter point.
        
        Args:
            results: List of result dictionaries
            metric: Result column to aggregate
            
        Returns:
            Dictionary keyed by (scheme, loss_rate, beta)
        """
        grouped: Dict[Tuple, List[float]] = {}
        for r in results:
            if r.get('error'):
                continue
            value = r.get(metric)
            if not isinstance(value, (int, float)):
                continue
            key = (r['scheme'], r['loss_rate'], r.get('beta'))
            grouped.setdefault(key, []).append(value)
        
        matrix = {}
        for key, values in grouped.items():
            arr = np.asarray(values, dtype=float)
            matrix[key] = {
                'mean': float(arr.mean()),
                'std': float(arr.std(ddof=1)) if len(arr) > 1 else 0.0,
                'n': len(arr)
            }
        
        return matrix


if __name__ == "__main__":
    print("=" * 60)
    print("PARAMETER SWEEP CONFIGURATION")
    print("=" * 60)
    
    sweep = ParameterSweep()
    
    print(f"\nParameter Space:")
    print(f"  Schemes: {sweep.schemes}")
    print(f"  Loss rates: {sweep.loss_rates}")
    print(f"  Beta values: {sweep.beta_values}")
    print(f"  Runs per config: {sweep.runs_per_config}")
    print(f"  Total configurations: {sweep.total_configurations}")
    print(f"  Total simulations: {sweep.total_simulations}")
    
    print("\nExpected steady-state overhead:")
    for point in sweep.get_all_points():
        print(f"  {point.label:40s} p={point.loss_rate:<6g} "
              f"{sweep.expected_overhead(point)*100:6.2f}%")
