"""
Main Simulator - Window-Driven FEC Simulation

This module implements the simulation driver: it pulls windows of source
symbols from a scheme, passes every transmitted symbol through the loss
model in transmission order, lets the scheme decode what survived and
folds the outcome into the run statistics.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple
import sys
import os

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import (
    NUM_SYMBOLS, DEFAULT_SEED, CODER_SEED_OFFSET, OUTPUT_DIR,
    UNIFORM_LOSS_RATE, P_GOOD_TO_BAD, P_BAD_TO_GOOD,
    GOOD_STATE_LOSS, BAD_STATE_LOSS,
    FEC_WINDOW, ALPHA_FEC, BETA_FEC, PARITY_ROWS, PARITY_COLS,
    DEFAULT_LOG_LEVEL
)
from src.errors import (
    ConfigError, UseAfterFinalizeError, check_positive, check_probability
)
from src.loss import GilbertElliottLoss, LossModel, RandomSource, UniformLoss
from src.fec import (
    AdaptiveLinearScheme, FecScheme, GF256LinearCoder, IdealLinearCoder,
    InterleavedParityScheme, LinearCoder, Symbol, symbol_source
)
from src.utils.statistics import RunStatistics, StatisticsCollector
from src.utils.trace import DropTrace
from src.utils.logger import SimulationLogger, LogLevel


SCHEMES = ('adaptive-linear', 'interleaved-parity')
LOSS_MODELS = ('uniform', 'ge')
CODERS = ('ideal', 'gf256')


@dataclass(frozen=True)
class SimulatorConfig:
    """Configuration for one simulation run. Validated on construction."""
    num_symbols: int = NUM_SYMBOLS
    scheme: str = 'adaptive-linear'
    
    # Scheme A parameters
    alpha: float = ALPHA_FEC
    beta: float = BETA_FEC
    window_size: int = FEC_WINDOW
    initial_loss: float = 0.0
    coder: str = 'ideal'
    repair_step: Optional[int] = None
    
    # Scheme B parameters
    rows: int = PARITY_ROWS
    cols: int = PARITY_COLS
    column_parity: bool = False
    layers: Tuple[int, ...] = ()
    
    # Loss model parameters
    loss_model: str = 'uniform'
    loss_rate: float = UNIFORM_LOSS_RATE
    p_gb: float = P_GOOD_TO_BAD
    p_bg: float = P_BAD_TO_GOOD
    p_g: float = GOOD_STATE_LOSS
    p_b: float = BAD_STATE_LOSS
    burst_length: Optional[float] = None
    stationary_start: bool = False
    
    # Run parameters
    seed: int = DEFAULT_SEED
    output_dir: str = OUTPUT_DIR
    tag: str = ''
    record_trace: bool = False
    log_level: int = DEFAULT_LOG_LEVEL
    
    def __post_init__(self):
        if self.scheme not in SCHEMES:
            raise ConfigError(f"unknown scheme {self.scheme!r}, expected one of {SCHEMES}")
        if self.loss_model not in LOSS_MODELS:
            raise ConfigError(
                f"unknown loss model {self.loss_model!r}, expected one of {LOSS_MODELS}"
            )
        if self.coder not in CODERS:
            raise ConfigError(f"unknown coder {self.coder!r}, expected one of {CODERS}")
        
        check_positive("num_symbols", self.num_symbols)
        check_positive("window_size", self.window_size)
        check_positive("rows", self.rows)
        check_positive("cols", self.cols)
        for stride in self.layers:
            check_positive("layer", stride)
        if self.repair_step is not None:
            check_positive("repair_step", self.repair_step)
        if self.alpha is None or not 0.0 < self.alpha <= 1.0:
            raise ConfigError(f"alpha must be in (0, 1], got {self.alpha!r}")
        if self.beta is None or self.beta <= 0:
            raise ConfigError(f"beta must be positive, got {self.beta!r}")
        
        for name in ('initial_loss', 'loss_rate', 'p_gb', 'p_bg', 'p_g', 'p_b'):
            check_probability(name, getattr(self, name))
        if self.burst_length is not None and self.burst_length < 1:
            raise ConfigError(f"burst_length must be >= 1, got {self.burst_length!r}")
        
        if self.seed is None or int(self.seed) != self.seed or not 0 <= self.seed < 2 ** 64:
            raise ConfigError(f"seed must be an unsigned 64-bit integer, got {self.seed!r}")
    
    def build_loss_model(self, source: RandomSource) -> LossModel:
        """Create the configured loss model on top of a random source."""
        if self.loss_model == 'uniform':
            return UniformLoss(self.loss_rate, source)
        if self.burst_length is not None:
            return GilbertElliottLoss.from_loss_and_burst(
                self.loss_rate, self.burst_length, source,
                p_g=self.p_g, p_b=self.p_b,
                stationary_start=self.stationary_start
            )
        return GilbertElliottLoss(
            self.p_gb, self.p_bg, source,
            p_g=self.p_g, p_b=self.p_b,
            stationary_start=self.stationary_start
        )
    
    def build_coder(self) -> LinearCoder:
        """Create the linear coder used by the adaptive scheme."""
        if self.coder == 'gf256':
            return GF256LinearCoder(seed=self.seed + CODER_SEED_OFFSET)
        return IdealLinearCoder()
    
    def build_scheme(self, coder: Optional[LinearCoder] = None) -> FecScheme:
        """Create the configured FEC scheme."""
        if self.scheme == 'adaptive-linear':
            return AdaptiveLinearScheme(
                window_size=self.window_size,
                alpha=self.alpha,
                beta=self.beta,
                initial_loss=self.initial_loss,
                coder=coder if coder is not None else self.build_coder(),
                repair_step=self.repair_step
            )
        return InterleavedParityScheme(
            rows=self.rows,
            cols=self.cols,
            column_parity=self.column_parity,
            layers=self.layers
        )
    
    def to_dict(self) -> Dict:
        return asdict(self)


class Simulator:
    """
    Simulation driver.
    
    Owns one random source, loss model, scheme and statistics collector.
    A simulator runs exactly once.
    
    Attributes:
        config: Run configuration
        scheme: FEC scheme under test
        loss_model: Loss model judging every transmitted symbol
        collector: Statistics collector
        trace: Drop trace, when enabled in the configuration
    """
    
    def __init__(
        self,
        config: SimulatorConfig,
        coder: Optional[LinearCoder] = None,
        loss_model: Optional[LossModel] = None,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize simulator.
        
        Args:
            config: Run configuration
            coder: Linear coder overriding the configured one (Scheme A only)
            loss_model: Loss model overriding the configured one
            logger: Logger to use instead of a fresh one
        """
        self.config = config
        
        self.logger = logger if logger is not None else SimulationLogger(
            name="Sim",
            level=config.log_level
        )
        
        self.random_source = RandomSource(seed=config.seed)
        if loss_model is None:
            loss_model = config.build_loss_model(self.random_source)
        self.loss_model = loss_model
        self.scheme = config.build_scheme(coder)
        self.collector = StatisticsCollector()
        self.trace: Optional[DropTrace] = DropTrace() if config.record_trace else None
        
        # Global transmission index
        self.tx_index = 0
    
    def _transmit(self, symbols: List[Symbol]) -> List[Symbol]:
        """Pass symbols through the loss model; return the survivors."""
        received = []
        for symbol in symbols:
            dropped = self.loss_model.decide(self.tx_index)
            if self.trace is not None:
                self.trace.record(self.tx_index, symbol.is_repair, dropped)
            self.tx_index += 1
            if not dropped:
                received.append(symbol)
        return received
    
    def run(self) -> RunStatistics:
        """
        Run the simulation.
        
        Returns:
            Final run statistics
            
        Raises:
            UseAfterFinalizeError: if the simulator already ran
            SchemeError: if a scheme breaks a recovery invariant
        """
        if self.collector.finalized:
            raise UseAfterFinalizeError("simulator has already been run")
        
        self.logger.simulation_start({
            'scheme': self.scheme.describe(),
            'num_symbols': self.config.num_symbols,
            'seed': self.config.seed,
        })
        self.logger.loss_model(self.loss_model.describe())

        source = symbol_source(self.config.num_symbols)
        while True:
            window = self.scheme.next_window(source)
            if window is None:
                break
            self.logger.set_window(window.index)
            
            repairs = self.scheme.encode(window)
            received_source = self._transmit(list(window))
            received_repair = self._transmit(repairs)
            
            outcome = self.scheme.decode(window, received_source, received_repair)
            self.scheme.feedback(outcome)
            self.collector.record(outcome)
            
            if self.logger.is_enabled(LogLevel.DEBUG):
                self.logger.window_done(
                    window.index, outcome, getattr(self.scheme, 'loss_estimate', None)
                )
                if not outcome.decoded:
                    self.logger.window_failed(window.index, outcome.lost)
        
        self.logger.set_window(None)
        stats = self.collector.snapshot()
        self.logger.simulation_end(stats.to_dict())
        return stats


def run_simulation(config: SimulatorConfig) -> RunStatistics:
    """Convenience wrapper: build a simulator and run it."""
    return Simulator(config).run()


if __name__ == "__main__":
    print("=" * 60)
    print("SIMULATOR TEST")
    print("=" * 60)
    
    for scheme in SCHEMES:
        config = SimulatorConfig(
            num_symbols=10_000,
            scheme=scheme,
            beta=3.0,
            loss_rate=0.02,
            seed=42,
            log_level=LogLevel.INFO
        )
        stats = Simulator(config).run()
        print(f"\n{scheme}:")
        print(f"  Repair symbols: {stats.n_repair}")
        print(f"  Dropped source: {stats.n_ss_drop}")
        print(f"  Recovered: {stats.n_recovered}")
        print(f"  Lost: {stats.n_lost}")
        print(f"  Overhead: {stats.overhead*100:.2f}%")
        print(f"  Residual loss: {stats.residual_loss_rate*100:.4f}%")
