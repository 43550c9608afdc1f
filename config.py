"""
Configuration file for the FEC Comparison Simulator.
Contains the default parameters for loss models, FEC schemes and sweeps.
"""

import os

# =============================================================================
# SIMULATION PARAMETERS
# =============================================================================

# Number of source symbols in a single run
NUM_SYMBOLS = 10_000

# Default RNG seed (64-bit)
DEFAULT_SEED = 1

# Offset between the loss seed and the linear coder seed
CODER_SEED_OFFSET = 1000

# =============================================================================
# LOSS MODEL PARAMETERS
# =============================================================================

# Uniform drop probability
UNIFORM_LOSS_RATE = 0.02

# Gilbert-Elliott state transition probabilities
P_GOOD_TO_BAD = 0.01    # P(G → B)
P_BAD_TO_GOOD = 0.2     # P(B → G)

# Gilbert-Elliott per-state loss probabilities
GOOD_STATE_LOSS = 0.0   # never drop while Good
BAD_STATE_LOSS = 1.0    # always drop while Bad

# =============================================================================
# ADAPTIVE-LINEAR SCHEME (A)
# =============================================================================

# Number of source symbols per window
FEC_WINDOW = 200

# Exponential smoothing factor of the loss estimate
ALPHA_FEC = 0.9

# Safety multiplier on the expected number of losses per window
BETA_FEC = 1.0

# Number of draw blocks pulled at once by the random source
RANDOM_BLOCK_SIZE = 4096

# =============================================================================
# INTERLEAVED-PARITY SCHEME (B)
# =============================================================================

PARITY_ROWS = 10
PARITY_COLS = 20

# =============================================================================
# PARAMETER SWEEP CONFIGURATION
# =============================================================================

# Channel loss rates to evaluate
LOSS_RATES = [0.005, 0.01, 0.02, 0.05, 0.1]

# Beta values to evaluate for the adaptive scheme
BETA_VALUES = [1.0, 2.0, 3.0]

# Number of seeds per configuration
RUNS_PER_CONFIGURATION = 5

# Seed base (actual seed = base + run_id)
RNG_SEED_BASE = 42

# Logging verbosity levels
LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

DEFAULT_LOG_LEVEL = LOG_LEVEL_INFO

# =============================================================================
# OUTPUT
# =============================================================================

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
OUTPUT_DIR = os.path.join(DATA_DIR, "output")
PLOTS_DIR = os.path.join(OUTPUT_DIR, "plots")

# Sweep results CSV filename
RESULTS_CSV = os.path.join(OUTPUT_DIR, "sweep_results.csv")

# Header of the per-run CSV file
RUN_CSV_HEADER = [
    "n-repair",
    "n-lost",
    "n-recovered",
    "n-ss-drop",
    "n-drop",
    "ratio,post",
]

# =============================================================================
# DERIVED PARAMETERS (calculated from fixed parameters)
# =============================================================================

def calculate_steady_state_probabilities(p_gb=P_GOOD_TO_BAD, p_bg=P_BAD_TO_GOOD):
    """
    Calculate steady-state probabilities for Good and Bad states.
    π_G = P(B→G) / (P(G→B) + P(B→G))
    π_B = P(G→B) / (P(G→B) + P(B→G))
    """
    sum_transitions = p_gb + p_bg
    if sum_transitions == 0:
        return 1.0, 0.0
    pi_good = p_bg / sum_transitions
    pi_bad = p_gb / sum_transitions
    return pi_good, pi_bad


def calculate_average_loss(p_gb=P_GOOD_TO_BAD, p_bg=P_BAD_TO_GOOD,
                           p_g=GOOD_STATE_LOSS, p_b=BAD_STATE_LOSS):
    """
    Calculate average loss rate based on steady-state probabilities.
    loss_avg = π_G * p_g + π_B * p_b
    """
    pi_good, pi_bad = calculate_steady_state_probabilities(p_gb, p_bg)
    return pi_good * p_g + pi_bad * p_b


def calculate_mean_burst_length(p_bg=P_BAD_TO_GOOD):
    """Mean sojourn time in the Bad state, in symbols: 1 / P(B→G)."""
    return 1.0 / p_bg if p_bg > 0 else float('inf')


def calculate_expected_repairs(window=FEC_WINDOW, loss_rate=UNIFORM_LOSS_RATE,
                               beta=BETA_FEC):
    """Expected repair budget for one window once the estimate has converged."""
    return beta * window * loss_rate


def calculate_initial_loss(loss_rate=UNIFORM_LOSS_RATE, window=FEC_WINDOW):
    """Seed for p_hat: at least one repair symbol in the first window."""
    if window <= 0:
        # Invalid window; left for SimulatorConfig to reject
        return loss_rate
    return max(loss_rate, 1.0 / window)


# Print configuration summary
if __name__ == "__main__":
    print("=" * 60)
    print("FEC COMPARISON SIMULATOR - CONFIGURATION")
    print("=" * 60)
    print(f"\nSimulation:")
    print(f"  Source symbols: {NUM_SYMBOLS}")
    print(f"  Seed: {DEFAULT_SEED}")

    print(f"\nGilbert-Elliott Model:")
    print(f"  Good State Loss: {GOOD_STATE_LOSS}")
    print(f"  Bad State Loss: {BAD_STATE_LOSS}")
    print(f"  P(G->B): {P_GOOD_TO_BAD}")
    print(f"  P(B->G): {P_BAD_TO_GOOD}")

    pi_good, pi_bad = calculate_steady_state_probabilities()
    print(f"  Steady-state P(Good): {pi_good:.4f}")
    print(f"  Steady-state P(Bad): {pi_bad:.4f}")
    print(f"  Average loss: {calculate_average_loss():.4f}")
    print(f"  Mean burst length: {calculate_mean_burst_length():.1f} symbols")

    print(f"\nAdaptive-Linear Scheme:")
    print(f"  Window: {FEC_WINDOW}")
    print(f"  Alpha: {ALPHA_FEC}")
    print(f"  Beta: {BETA_FEC}")
    print(f"  Expected repairs/window at {UNIFORM_LOSS_RATE}: "
          f"{calculate_expected_repairs():.1f}")

    print(f"\nInterleaved-Parity Scheme:")
    print(f"  Block: {PARITY_ROWS} x {PARITY_COLS}")

    print(f"\nParameter Sweep:")
    print(f"  Loss rates: {LOSS_RATES}")
    print(f"  Beta values: {BETA_VALUES}")
    print(f"  Runs per config: {RUNS_PER_CONFIGURATION}")
