"""
Sweep Heatmap Visualization

This module generates 2D heatmaps of a sweep metric for the adaptive
scheme, as a function of beta and channel loss rate.
"""

import os
import sys
from typing import Dict, List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import PLOTS_DIR
from simulation.parameter_sweep import ParameterSweep


METRIC_LABELS = {
    'overhead': 'Repair overhead (%)',
    'residual_loss_rate': 'Residual loss (%)',
    'ratio_post': 'Posterior drop ratio (%)',
}


class SweepHeatmap:
    """
    Generates heatmaps of metric(beta, loss rate) for one scheme.
    
    Values are run means, displayed in percent.
    """
    
    def __init__(
        self,
        results: Optional[List[Dict]] = None,
        csv_file: Optional[str] = None,
        scheme: str = 'adaptive-linear'
    ):
        """
        Initialize heatmap generator.
        
        Args:
            results: List of result dictionaries
            csv_file: Path to CSV file with results
            scheme: Scheme whose points are plotted
        """
        if results:
            self.results = results
        elif csv_file:
            self.results = ParameterSweep.load_results(csv_file)
        else:
            self.results = []
        
        self.scheme = scheme
        rows = [r for r in self.results if r['scheme'] == scheme and not r.get('error')]
        self.loss_rates = sorted(set(r['loss_rate'] for r in rows))
        self.beta_values = sorted(set(r['beta'] for r in rows if r.get('beta') is not None))
    
    def _create_matrix(self, metric: str) -> np.ndarray:
        """
        Matrix of mean metric values, rows = beta, columns = loss rate.
        
        Points without results are NaN.
        """
        means = ParameterSweep.create_metric_matrix(self.results, metric)
        matrix = np.full((len(self.beta_values), len(self.loss_rates)), np.nan)
        
        for i, beta in enumerate(self.beta_values):
            for j, loss_rate in enumerate(self.loss_rates):
                cell = means.get((self.scheme, loss_rate, beta))
                if cell is not None:
                    matrix[i, j] = cell['mean']
        
        return matrix
    
    def plot(
        self,
        metric: str = 'overhead',
        output_file: Optional[str] = None,
        title: Optional[str] = None,
        figsize: Tuple[int, int] = (10, 6),
        cmap: str = "viridis",
        show_values: bool = True
    ) -> str:
        """
        Generate and save heatmap.
        
        Args:
            metric: Result column to plot
            output_file: Output file path (auto-generated if None)
            title: Plot title
            figsize: Figure size (width, height)
            cmap: Colormap name
            show_values: Show values in cells
            
        Returns:
            Path to saved figure
        """
        if not self.loss_rates or not self.beta_values:
            raise ValueError(f"No {self.scheme} results to plot")
        
        # Larger beta at the top
        matrix = np.flipud(self._create_matrix(metric) * 100)
        beta_display = list(reversed(self.beta_values))
        
        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            matrix,
            annot=show_values,
            fmt='.2f',
            cmap=cmap,
            xticklabels=[f"{p:g}" for p in self.loss_rates],
            yticklabels=[f"{b:g}" for b in beta_display],
            ax=ax,
            cbar_kws={'label': METRIC_LABELS.get(metric, metric)}
        )
        
        ax.set_xlabel('Channel loss rate', fontsize=12)
        ax.set_ylabel('Beta', fontsize=12)
        ax.set_title(title or f"{METRIC_LABELS.get(metric, metric)}: {self.scheme}",
                     fontsize=14, fontweight='bold')
        
        plt.tight_layout()
        
        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, f'{metric}_heatmap.png')
        else:
            directory = os.path.dirname(output_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
        
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)
        
        print(f"Heatmap saved to: {output_file}")
        return output_file
