"""
Visualization package - Plotting and visualization tools.

Contains:
- Sweep heatmaps (overhead / residual loss vs beta and loss rate)
- Residual loss comparison plots
"""

from .heatmap import SweepHeatmap
from .loss_plot import ResidualLossPlot

__all__ = [
    'SweepHeatmap',
    'ResidualLossPlot'
]
