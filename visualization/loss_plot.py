"""
Residual Loss Plot

Residual loss rate against channel loss rate for every scheme in a
sweep, with the unprotected channel as reference.
"""

import os
import sys
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import PLOTS_DIR
from simulation.parameter_sweep import ParameterPoint, ParameterSweep


class ResidualLossPlot:
    """Line plot comparing schemes across channel loss rates."""
    
    def __init__(
        self,
        results: Optional[List[Dict]] = None,
        csv_file: Optional[str] = None
    ):
        if results:
            self.results = results
        elif csv_file:
            self.results = ParameterSweep.load_results(csv_file)
        else:
            self.results = []
    
    def _series(self, metric: str) -> Dict[str, Tuple[List[float], List[float], List[float]]]:
        """Per-curve (loss rates, means, stds), one curve per scheme/beta."""
        means = ParameterSweep.create_metric_matrix(self.results, metric)
        series: Dict[str, Tuple[List[float], List[float], List[float]]] = {}
        
        for key in sorted(means, key=lambda k: (k[0], k[2] or 0.0, k[1])):
            label = ParameterPoint(*key).label
            xs, ys, errs = series.setdefault(label, ([], [], []))
            xs.append(key[1])
            ys.append(means[key]['mean'] * 100)
            errs.append(means[key]['std'] * 100)
        
        return series
    
    def plot(
        self,
        metric: str = 'residual_loss_rate',
        output_file: Optional[str] = None,
        title: str = "Residual Loss vs Channel Loss Rate",
        figsize: Tuple[int, int] = (10, 6),
        show_reference: bool = True
    ) -> str:
        """
        Generate and save the comparison plot.
        
        Args:
            metric: Result column on the y axis
            output_file: Output file path (auto-generated if None)
            title: Plot title
            figsize: Figure size (width, height)
            show_reference: Draw the unprotected channel (y = loss rate)
            
        Returns:
            Path to saved figure
        """
        series = self._series(metric)
        if not series:
            raise ValueError("No results to plot")
        
        fig, ax = plt.subplots(figsize=figsize)
        
        for label, (xs, ys, errs) in series.items():
            ax.errorbar(xs, ys, yerr=errs, marker='o', capsize=3, label=label)
        
        if show_reference:
            rates = sorted({x for xs, _, _ in series.values() for x in xs})
            ax.plot(rates, [r * 100 for r in rates], 'k--', alpha=0.5,
                    label='no FEC')
        
        ax.set_xlabel('Channel loss rate', fontsize=12)
        ax.set_ylabel('Residual loss (%)', fontsize=12)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend()
        
        plt.tight_layout()
        
        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, f'{metric}_vs_loss.png')
        else:
            directory = os.path.dirname(output_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
        
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)
        
        print(f"Plot saved to: {output_file}")
        return output_file
