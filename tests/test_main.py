"""
Tests for the command-line interface.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import calculate_initial_loss
from main import build_parser, build_config, main


class TestArguments:
    """Tests for argument parsing."""
    
    def test_defaults(self):
        args = build_parser().parse_args(['--single'])
        config = build_config(args)
        
        assert config.scheme == 'adaptive-linear'
        assert config.initial_loss == 0.0
        assert config.record_trace is False
    
    def test_set_initial_loss(self):
        args = build_parser().parse_args(
            ['--single', '--loss', '0.001', '--window', '200', '--set-initial-loss'])
        
        assert build_config(args).initial_loss == pytest.approx(1 / 200)
    
    def test_layers(self):
        args = build_parser().parse_args(['--single', '--layers', '20,40'])
        
        assert build_config(args).layers == (20, 40)
    
    def test_layers_not_integers(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['--single', '--layers', 'a,b'])
    
    def test_initial_loss_zero_window(self):
        assert calculate_initial_loss(0.02, 0) == 0.02
    
    def test_mode_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestSingleRun:
    """Tests for the single-run mode."""
    
    def test_writes_csv(self, tmp_path):
        main(['--single', '-n', '1000', '--loss', '0.05', '-s', '3',
              '-d', str(tmp_path), '--tag', 'cli', '--dtrace'])
        
        files = sorted(os.listdir(str(tmp_path)))
        assert files == [
            "cli-adaptive_0.9_1.0_200_ideal-uniform_0.05-1000-3-dtrace.csv",
            "cli-adaptive_0.9_1.0_200_ideal-uniform_0.05-1000-3.csv",
        ]
    
    def test_parity_ge(self, tmp_path):
        main(['--single', '-n', '800', '--fec', 'interleaved-parity', '--rows', '4',
              '--cols', '8', '--drop', 'ge', '--loss', '0.05', '--burst', '2',
              '-d', str(tmp_path)])
        
        (name,) = os.listdir(str(tmp_path))
        assert name.startswith("parity_4x8-ge_")
        assert name.endswith("-800-1.csv")
    
    def test_invalid_configuration(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(['--single', '--loss', '2', '-d', str(tmp_path)])
        
        assert exc.value.code == 2
    
    def test_zero_window_with_initial_loss(self, tmp_path):
        """An invalid window is reported as a configuration error."""
        with pytest.raises(SystemExit) as exc:
            main(['--single', '--window', '0', '--set-initial-loss', '-d', str(tmp_path)])
        
        assert exc.value.code == 2
    
    def test_fixed_repair_step(self, tmp_path):
        main(['--single', '-n', '1000', '--repair-step', '50', '-d', str(tmp_path)])
        
        (name,) = os.listdir(str(tmp_path))
        assert name == "step_50_200_ideal-uniform_0.02-1000-1.csv"
    
    def test_parity_layers(self, tmp_path):
        main(['--single', '-n', '400', '--fec', 'interleaved-parity', '--rows', '4',
              '--cols', '10', '--layers', '20,7', '-d', str(tmp_path)])
        
        (name,) = os.listdir(str(tmp_path))
        assert name == "parity_4x10_L20_7-uniform_0.02-400-1.csv"
