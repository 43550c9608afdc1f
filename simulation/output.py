"""
Run Output

Deterministic CSV output of a single run: one file per run, named after
the scheme, loss model, symbol count and seed, holding the header and a
single data row.
"""

import csv
import os
from typing import Optional

from config import RUN_CSV_HEADER
from src.fec.base import FecScheme
from src.loss.base import LossModel
from src.utils.statistics import RunStatistics
from src.utils.trace import DropTrace


def run_file_name(num_symbols: int, seed: int, scheme: FecScheme,
                  loss_model: LossModel, tag: str = '') -> str:
    """
    File name of a run.
    
    Format: [<tag>-]<scheme>-<loss>-<N>-<seed>.csv
    """
    name = f"{scheme.describe()}-{loss_model.describe()}-{num_symbols}-{seed}.csv"
    if tag:
        name = f"{tag}-{name}"
    return name


def trace_file_name(run_file: str) -> str:
    """Drop trace file sitting next to a run file."""
    root, ext = os.path.splitext(run_file)
    return f"{root}-dtrace{ext}"


def write_run_csv(stats: RunStatistics, filepath: str) -> str:
    """
    Write the statistics of one run.
    
    Args:
        stats: Final run statistics
        filepath: Output file path
        
    Returns:
        Path of the written file
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    
    with open(filepath, 'w', newline='') as f:
        writer = csv.writer(f, lineterminator='\n')
        writer.writerow(RUN_CSV_HEADER)
        writer.writerow(stats.to_csv_row())
    
    return filepath


def save_simulation(simulator, stats: RunStatistics,
                    output_dir: Optional[str] = None) -> str:
    """
    Save the outputs of a finished simulator.
    
    Writes the run CSV and, when the simulator recorded one, the drop
    trace next to it.
    
    Returns:
        Path of the run CSV
    """
    config = simulator.config
    output_dir = output_dir or config.output_dir
    name = run_file_name(config.num_symbols, config.seed, simulator.scheme,
                         simulator.loss_model, config.tag)
    path = write_run_csv(stats, os.path.join(output_dir, name))
    
    trace: Optional[DropTrace] = simulator.trace
    if trace is not None:
        trace.save(trace_file_name(path))
    
    return path
