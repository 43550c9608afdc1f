"""
Simulation package - Main simulation engine and runners.

Contains:
- Simulation driver and run configuration
- Run CSV output
- Batch runner for parameter sweeps
- Parameter sweep logic
"""

from .simulator import Simulator, SimulatorConfig, run_simulation
from .output import run_file_name, write_run_csv, save_simulation
from .runner import BatchRunner, RunConfig, run_single_simulation
from .parameter_sweep import ParameterSweep, ParameterPoint

__all__ = [
    'Simulator',
    'SimulatorConfig',
    'run_simulation',
    'run_file_name',
    'write_run_csv',
    'save_simulation',
    'BatchRunner',
    'RunConfig',
    'run_single_simulation',
    'ParameterSweep',
    'ParameterPoint'
]
