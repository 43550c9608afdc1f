#!/usr/bin/env python3
"""
FEC Comparison Simulator - Main Entry Point

This is the main CLI interface for the FEC comparison simulator.
It provides options for:
- Single simulation runs (one CSV per run)
- Parameter sweep over scheme, loss rate and beta
- Visualization generation
- Configuration display

Usage:
    python main.py --single -n 10000 --loss 0.02 --fec adaptive-linear --beta 3 -s 42
    python main.py --single --fec interleaved-parity --drop ge --burst 5
    python main.py --sweep --runs 5 --parallel
    python main.py --visualize --csv results.csv
"""

import argparse
import os
import sys
import time

# Ensure project root is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import (
    NUM_SYMBOLS, DEFAULT_SEED, UNIFORM_LOSS_RATE, P_GOOD_TO_BAD, P_BAD_TO_GOOD,
    GOOD_STATE_LOSS, BAD_STATE_LOSS, FEC_WINDOW, ALPHA_FEC, BETA_FEC,
    PARITY_ROWS, PARITY_COLS, RUNS_PER_CONFIGURATION, LOSS_RATES, BETA_VALUES,
    OUTPUT_DIR, RESULTS_CSV, PLOTS_DIR, calculate_initial_loss,
    calculate_mean_burst_length
)
from src.errors import SimulatorError
from src.utils.logger import LogLevel


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return LogLevel.DEBUG
    if verbosity == 1:
        return LogLevel.INFO
    return LogLevel.WARNING


def _strides(text: str):
    """Parse a comma-separated list of interleave strides."""
    try:
        return tuple(int(value) for value in text.split(',') if value.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {text!r}")


def build_config(args):
    """Build the run configuration from command-line arguments."""
    from simulation.simulator import SimulatorConfig
    
    initial_loss = 0.0
    if args.set_initial_loss:
        initial_loss = calculate_initial_loss(args.loss, args.window)
    
    return SimulatorConfig(
        num_symbols=args.n,
        scheme=args.fec,
        alpha=args.alpha,
        beta=args.beta,
        window_size=args.window,
        initial_loss=initial_loss,
        coder=args.coder,
        repair_step=args.repair_step,
        rows=args.rows,
        cols=args.cols,
        column_parity=args.column_parity,
        layers=args.layers,
        loss_model=args.drop,
        loss_rate=args.loss,
        p_gb=args.p_gb,
        p_bg=args.p_bg,
        p_g=args.p_g,
        p_b=args.p_b,
        burst_length=args.burst,
        stationary_start=args.stationary_start,
        seed=args.seed,
        output_dir=args.dir,
        tag=args.tag,
        record_trace=args.dtrace,
        log_level=_log_level(args.verbose)
    )


def run_single_simulation(args):
    """Run a single simulation with specified parameters."""
    from simulation.simulator import Simulator
    from simulation.output import save_simulation
    
    config = build_config(args)
    
    print("=" * 60)
    print("FEC COMPARISON SIMULATOR")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Scheme: {config.scheme}")
    if config.scheme == 'adaptive-linear':
        print(f"  Window: {config.window_size}, alpha={config.alpha}, beta={config.beta}")
        print(f"  Initial loss estimate: {config.initial_loss}")
        print(f"  Coder: {config.coder}")
        if config.repair_step is not None:
            print(f"  Fixed redundancy: one repair per {config.repair_step} symbols")
    else:
        print(f"  Block: {config.rows}x{config.cols}, column parity={config.column_parity}")
        if config.layers:
            print(f"  Extra layers: {list(config.layers)}")
    print(f"  Loss model: {config.loss_model} (loss rate {config.loss_rate})")
    print(f"  Source symbols: {config.num_symbols}")
    print(f"  Seed: {config.seed}")
    
    print("\nRunning simulation...")
    
    sim = Simulator(config)
    start_time = time.time()
    stats = sim.run()
    elapsed = time.time() - start_time
    
    path = save_simulation(sim, stats)
    
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    
    print(f"\nSymbols:")
    print(f"  Source sent: {stats.n_source}")
    print(f"  Repair sent: {stats.n_repair} ({stats.overhead * 100:.2f}% overhead)")
    print(f"  Dropped (all): {stats.n_drop}")
    print(f"  Dropped (source): {stats.n_ss_drop}")
    print(f"  Recovered: {stats.n_recovered}")
    print(f"  Lost: {stats.n_lost}")
    
    print(f"\nRates:")
    print(f"  Posterior drop ratio: {stats.ratio_post:.6f}")
    print(f"  Residual loss rate: {stats.residual_loss_rate:.6f}")
    print(f"  Windows not fully decoded: {stats.failed_windows}/{stats.windows}")
    print(f"  Real Time: {elapsed:.2f} s")
    
    print(f"\nOutput: {path}")
    
    return stats


def run_parameter_sweep(args):
    """Run parameter sweep."""
    from simulation.runner import BatchRunner
    from simulation.parameter_sweep import ParameterSweep
    
    print("=" * 60)
    print("PARAMETER SWEEP")
    print("=" * 60)
    
    if args.quick:
        sweep = ParameterSweep(loss_rates=[0.01, 0.05], beta_values=[1.0, 3.0],
                               runs_per_config=2)
        num_symbols = 2_000
    else:
        sweep = ParameterSweep(loss_rates=LOSS_RATES, beta_values=BETA_VALUES,
                               runs_per_config=args.runs)
        num_symbols = args.n
    
    # The swept loss rate only reaches a GE chain through a burst length
    burst = args.burst
    if args.drop == 'ge' and burst is None:
        burst = calculate_mean_burst_length(args.p_bg)

    overrides = {
        'loss_model': args.drop,
        'alpha': args.alpha,
        'window_size': args.window,
        'coder': args.coder,
        'rows': args.rows,
        'cols': args.cols,
        'column_parity': args.column_parity,
        'layers': args.layers,
        'repair_step': args.repair_step,
        'p_g': args.p_g,
        'p_b': args.p_b,
        'burst_length': burst,
        'stationary_start': args.stationary_start,
    }
    
    output_file = args.output or RESULTS_CSV
    runner = BatchRunner(
        sweep=sweep,
        num_symbols=num_symbols,
        overrides=overrides,
        output_file=output_file
    )
    
    print(f"\nConfiguration:")
    print(f"  Schemes: {sweep.schemes}")
    print(f"  Loss rates: {sweep.loss_rates}")
    print(f"  Beta values: {sweep.beta_values}")
    print(f"  Runs per config: {sweep.runs_per_config}")
    print(f"  Total simulations: {runner.total_runs}")
    print(f"  Source symbols per run: {num_symbols}")
    print(f"  Output: {output_file}")
    
    print("\nStarting parameter sweep...")
    
    if args.parallel:
        results = runner.run_parallel(max_workers=args.workers)
    else:
        results = runner.run_sequential()
    
    runner.save_results()
    
    for failed in runner.failed_runs:
        print(f"  Failed: {failed['scheme']} p={failed['loss_rate']} "
              f"beta={failed['beta']} run={failed['run_id']}: {failed['error']}")
    
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    for key, data in sorted(runner.get_aggregated_results().items(),
                            key=lambda item: (item[0][0], item[0][1], item[0][2] or 0.0)):
        beta = f"{data['beta']:g}" if data['beta'] is not None else "-"
        print(f"  {data['scheme']:20s} p={data['loss_rate']:<6g} beta={beta:<4s} "
              f"overhead={data['overhead_mean'] * 100:6.2f}%  "
              f"residual={data['residual_mean'] * 100:.4f}%")
    
    return results


def generate_visualizations(args):
    """Generate visualization plots."""
    from simulation.parameter_sweep import ParameterSweep
    from visualization.heatmap import SweepHeatmap
    from visualization.loss_plot import ResidualLossPlot
    
    print("=" * 60)
    print("GENERATING VISUALIZATIONS")
    print("=" * 60)
    
    csv_file = args.csv or RESULTS_CSV
    
    if not os.path.exists(csv_file):
        print(f"Error: Results file not found: {csv_file}")
        print("Run a parameter sweep first: python main.py --sweep")
        return
    
    results = ParameterSweep.load_results(csv_file)
    print(f"Loaded {len(results)} results from {csv_file}")
    
    os.makedirs(PLOTS_DIR, exist_ok=True)
    
    print("\nGenerating residual loss plot...")
    loss_file = ResidualLossPlot(results=results).plot(
        output_file=os.path.join(PLOTS_DIR, 'residual_loss_vs_loss.png')
    )
    
    print("Generating heatmaps...")
    heatmap = SweepHeatmap(results=results)
    overhead_file = heatmap.plot(
        metric='overhead',
        output_file=os.path.join(PLOTS_DIR, 'overhead_heatmap.png')
    )
    residual_file = heatmap.plot(
        metric='residual_loss_rate',
        output_file=os.path.join(PLOTS_DIR, 'residual_heatmap.png'),
        cmap='magma'
    )
    
    print("\n" + "=" * 60)
    print("VISUALIZATIONS GENERATED")
    print("=" * 60)
    print(f"  Residual loss: {loss_file}")
    print(f"  Overhead heatmap: {overhead_file}")
    print(f"  Residual heatmap: {residual_file}")


def show_config(args):
    """Display current configuration."""
    print("=" * 60)
    print("SIMULATOR CONFIGURATION")
    print("=" * 60)
    
    import config as cfg
    
    print(f"\nLoss Models:")
    print(f"  Uniform loss rate: {cfg.UNIFORM_LOSS_RATE}")
    print(f"  GE P(Good→Bad): {cfg.P_GOOD_TO_BAD}")
    print(f"  GE P(Bad→Good): {cfg.P_BAD_TO_GOOD}")
    print(f"  GE loss Good/Bad: {cfg.GOOD_STATE_LOSS}/{cfg.BAD_STATE_LOSS}")
    print(f"  GE average loss: {cfg.calculate_average_loss():.4f}")
    print(f"  GE mean burst: {cfg.calculate_mean_burst_length():.1f} symbols")
    
    print(f"\nAdaptive-Linear Scheme:")
    print(f"  Window: {cfg.FEC_WINDOW}")
    print(f"  Alpha: {cfg.ALPHA_FEC}")
    print(f"  Beta: {cfg.BETA_FEC}")
    print(f"  Expected repairs per window: {cfg.calculate_expected_repairs():.1f}")
    
    print(f"\nInterleaved-Parity Scheme:")
    print(f"  Block: {cfg.PARITY_ROWS}x{cfg.PARITY_COLS}")
    
    print(f"\nParameter Sweep:")
    print(f"  Loss rates: {cfg.LOSS_RATES}")
    print(f"  Beta values: {cfg.BETA_VALUES}")
    print(f"  Runs per config: {cfg.RUNS_PER_CONFIGURATION}")
    
    print(f"\nOutput directory: {cfg.OUTPUT_DIR}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FEC Comparison Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single simulation:
    python main.py --single -n 10000 --loss 0.02 --beta 3 -s 42

  Interleaved parity under burst loss:
    python main.py --single --fec interleaved-parity --drop ge --loss 0.05 --burst 4

  Quick parameter sweep (for testing):
    python main.py --sweep --quick

  Parallel parameter sweep:
    python main.py --sweep --parallel --workers 4

  Generate visualizations:
    python main.py --visualize

  Show configuration:
    python main.py --config
        """
    )
    
    # Mode selection
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--single', action='store_true',
                     help='Run single simulation')
    mode.add_argument('--sweep', action='store_true',
                     help='Run parameter sweep')
    mode.add_argument('--visualize', action='store_true',
                     help='Generate visualizations')
    mode.add_argument('--config', action='store_true',
                     help='Show configuration')
    
    # Run options
    parser.add_argument('-n', type=int, default=NUM_SYMBOLS,
                       help=f'Number of source symbols (default: {NUM_SYMBOLS})')
    parser.add_argument('--seed', '-s', type=int, default=DEFAULT_SEED,
                       help=f'Random seed (default: {DEFAULT_SEED})')
    parser.add_argument('--fec', choices=['adaptive-linear', 'interleaved-parity'],
                       default='adaptive-linear', help='FEC scheme')
    
    # Loss options
    parser.add_argument('--drop', choices=['uniform', 'ge'], default='uniform',
                       help='Loss model (default: uniform)')
    parser.add_argument('--loss', type=float, default=UNIFORM_LOSS_RATE,
                       help=f'Loss rate (default: {UNIFORM_LOSS_RATE})')
    parser.add_argument('--p-gb', type=float, default=P_GOOD_TO_BAD,
                       help='GE: P(Good→Bad)')
    parser.add_argument('--p-bg', type=float, default=P_BAD_TO_GOOD,
                       help='GE: P(Bad→Good)')
    parser.add_argument('--p-g', type=float, default=GOOD_STATE_LOSS,
                       help='GE: loss probability while Good')
    parser.add_argument('--p-b', type=float, default=BAD_STATE_LOSS,
                       help='GE: loss probability while Bad')
    parser.add_argument('--burst', type=float, default=None,
                       help='GE: mean burst length; derives the chain from --loss')
    parser.add_argument('--stationary-start', action='store_true',
                       help='GE: draw the first state from the stationary distribution')
    
    # Adaptive-linear options
    parser.add_argument('--alpha', type=float, default=ALPHA_FEC,
                       help=f'Smoothing factor (default: {ALPHA_FEC})')
    parser.add_argument('--beta', type=float, default=BETA_FEC,
                       help=f'Redundancy multiplier (default: {BETA_FEC})')
    parser.add_argument('--window', '-w', type=int, default=FEC_WINDOW,
                       help=f'Window size (default: {FEC_WINDOW})')
    parser.add_argument('--set-initial-loss', action='store_true',
                       help='Seed the loss estimate with max(loss, 1/window)')
    parser.add_argument('--coder', choices=['ideal', 'gf256'], default='ideal',
                       help='Linear coder (default: ideal)')
    parser.add_argument('--repair-step', type=int, default=None,
                       help='Fixed redundancy: one repair per N source symbols')
    
    # Interleaved-parity options
    parser.add_argument('--rows', type=int, default=PARITY_ROWS,
                       help=f'Rows per block (default: {PARITY_ROWS})')
    parser.add_argument('--cols', type=int, default=PARITY_COLS,
                       help=f'Columns per block (default: {PARITY_COLS})')
    parser.add_argument('--column-parity', action='store_true',
                       help='Also send one parity per column')
    parser.add_argument('--layers', type=_strides, default=(),
                       help='Extra interleave layers as strides, e.g. 20,40')
    
    # Parameter sweep options
    parser.add_argument('--runs', '-r', type=int,
                       default=RUNS_PER_CONFIGURATION,
                       help=f'Runs per configuration (default: {RUNS_PER_CONFIGURATION})')
    parser.add_argument('--parallel', action='store_true',
                       help='Run simulations in parallel')
    parser.add_argument('--workers', type=int, default=None,
                       help='Number of parallel workers')
    parser.add_argument('--quick', action='store_true',
                       help='Quick test with reduced parameters')
    
    # Output options
    parser.add_argument('--dir', '-d', type=str, default=OUTPUT_DIR,
                       help='Output directory for run CSV files')
    parser.add_argument('--tag', type=str, default='',
                       help='Prefix for the run CSV file name')
    parser.add_argument('--dtrace', action='store_true',
                       help='Also write the per-symbol drop trace')
    parser.add_argument('--output', '-o', type=str,
                       help='Sweep results file path')
    parser.add_argument('--csv', type=str,
                       help='CSV file for visualization')
    parser.add_argument('--verbose', '-v', action='count', default=0,
                       help='Verbose output (-vv for per-window logs)')
    
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    
    try:
        if args.single:
            run_single_simulation(args)
        elif args.sweep:
            run_parameter_sweep(args)
        elif args.visualize:
            generate_visualizations(args)
        elif args.config:
            show_config(args)
    except SimulatorError as e:
        parser.exit(2, f"error: {e}\n")


if __name__ == "__main__":
    main()
