"""
Unit tests for the interleaved-parity FEC scheme.
"""

from dataclasses import replace

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.errors import ConfigError, SchemeError
from src.fec import InterleavedParityScheme, Symbol, symbol_source


def transmit(scheme, window, drop_source=(), drop_repair=()):
    """Encode a window, drop the given symbols and decode the rest."""
    repairs = scheme.encode(window)
    received_source = [s for s in window if s.index not in drop_source]
    received_repair = [r for i, r in enumerate(repairs) if i not in drop_repair]
    return scheme.decode(window, received_source, received_repair)


class TestEncoding:
    """Tests for parity generation."""
    
    def test_one_parity_per_row(self):
        scheme = InterleavedParityScheme(rows=4, cols=5)
        window = scheme.next_window(symbol_source(20))
        repairs = scheme.encode(window)
        
        assert len(repairs) == 4
        assert [r.payload.members for r in repairs][1] == (5, 6, 7, 8, 9)
    
    def test_row_and_column_parities(self):
        scheme = InterleavedParityScheme(rows=4, cols=5, column_parity=True)
        window = scheme.next_window(symbol_source(20))
        repairs = scheme.encode(window)
        
        assert len(repairs) == 9
        columns = [r.payload for r in repairs if r.payload.kind == "col"]
        assert columns[2].members == (2, 7, 12, 17)
    
    def test_parity_value(self):
        scheme = InterleavedParityScheme(rows=1, cols=4)
        window = scheme.next_window(symbol_source(4))
        
        (repair,) = scheme.encode(window)
        assert repair.payload.value == 0 ^ 1 ^ 2 ^ 3
    
    def test_short_final_block(self):
        """Trailing rows and columns of a short block are partial or empty."""
        scheme = InterleavedParityScheme(rows=2, cols=5, column_parity=True)
        source = symbol_source(17)
        scheme.encode(scheme.next_window(source))
        
        last = scheme.next_window(source)
        repairs = scheme.encode(last)
        
        assert last.size == 7
        rows = [r.payload.members for r in repairs if r.payload.kind == "row"]
        cols = [r.payload.members for r in repairs if r.payload.kind == "col"]
        assert rows == [(10, 11, 12, 13, 14), (15, 16)]
        assert cols == [(10, 15), (11, 16), (12,), (13,), (14,)]
    
    def test_window_size(self):
        assert InterleavedParityScheme(rows=10, cols=20).window_size == 200
    
    def test_describe(self):
        assert InterleavedParityScheme(rows=10, cols=20).describe() == "parity_10x20"
        assert InterleavedParityScheme(2, 3, True).describe() == "parity_2x3_col"
        assert InterleavedParityScheme(2, 3, layers=(4, 6)).describe() == "parity_2x3_L4_6"

    def test_layer_groups(self):
        """A stride-s layer puts block position p into bin p % s."""
        scheme = InterleavedParityScheme(rows=2, cols=5, layers=(3,))
        window = scheme.next_window(symbol_source(10))
        repairs = scheme.encode(window)

        layer = [r.payload.members for r in repairs if r.payload.kind == "layer3"]
        assert len(repairs) == 5
        assert layer == [(0, 3, 6, 9), (1, 4, 7), (2, 5, 8)]


class TestDecoding:
    """Tests for XOR recovery."""
    
    def test_single_error_in_row(self):
        scheme = InterleavedParityScheme(rows=1, cols=10)
        window = scheme.next_window(symbol_source(10))
        
        result = transmit(scheme, window, drop_source={4})
        
        assert result.recovered == 1
        assert result.lost == 0
    
    def test_two_errors_in_row(self):
        scheme = InterleavedParityScheme(rows=1, cols=10)
        window = scheme.next_window(symbol_source(10))
        
        result = transmit(scheme, window, drop_source={4, 7})
        
        assert result.recovered == 0
        assert result.lost == 2
    
    def test_parity_lost(self):
        scheme = InterleavedParityScheme(rows=1, cols=10)
        window = scheme.next_window(symbol_source(10))
        
        result = transmit(scheme, window, drop_source={4}, drop_repair={0})
        
        assert result.recovered == 0
        assert result.repair_dropped == 1
    
    def test_column_parity_breaks_burst(self):
        """A burst inside one row is spread over the column groups."""
        scheme = InterleavedParityScheme(rows=3, cols=4, column_parity=True)
        window = scheme.next_window(symbol_source(12))
        
        result = transmit(scheme, window, drop_source={4, 5, 6})
        
        assert result.recovered == 3
        assert result.decoded
    
    def test_fixed_point_iteration(self):
        """
        2x2 block, symbols 0..3, parities row0, row1, col0, col1.
        Drop 0, 1, 2 and the col1 parity: row1 rebuilds 2, col0 then
        rebuilds 0, and a second pass lets row0 rebuild 1.
        """
        scheme = InterleavedParityScheme(rows=2, cols=2, column_parity=True)
        window = scheme.next_window(symbol_source(4))
        
        result = transmit(scheme, window, drop_source={0, 1, 2}, drop_repair={3})
        
        assert result.recovered == 3
        assert result.lost == 0
        assert scheme.passes_per_block == [2]
    
    def test_unrecoverable_square(self):
        """Four losses on a 2x2 square defeat row and column parity."""
        scheme = InterleavedParityScheme(rows=3, cols=3, column_parity=True)
        window = scheme.next_window(symbol_source(9))
        
        result = transmit(scheme, window, drop_source={0, 1, 3, 4})
        
        assert result.recovered == 0
        assert result.lost == 4

    def test_extra_layer_breaks_square(self):
        """
        The stride-4 layer holds {1, 5} and {3, 7}, so it rebuilds 1 and 3;
        rows 0 and 1 then rebuild 0 and 4 on the second pass.
        """
        scheme = InterleavedParityScheme(rows=3, cols=3, column_parity=True,
                                         layers=(4,))
        window = scheme.next_window(symbol_source(9))

        result = transmit(scheme, window, drop_source={0, 1, 3, 4})

        assert result.repair_sent == 10
        assert result.recovered == 4
        assert result.lost == 0
        assert scheme.passes_per_block == [2]

    def test_recovery_mismatch(self):
        scheme = InterleavedParityScheme(rows=1, cols=4)
        window = scheme.next_window(symbol_source(4))
        (repair,) = scheme.encode(window)
        corrupted = Symbol.repair(repair.index, replace(repair.payload,
                                                         value=repair.payload.value ^ 1))
        received = [s for s in window if s.index != 2]
        
        with pytest.raises(SchemeError):
            scheme.decode(window, received, [corrupted])
    
    def test_decode_without_encode(self):
        scheme = InterleavedParityScheme(rows=1, cols=4)
        window = scheme.next_window(symbol_source(4))
        
        with pytest.raises(SchemeError):
            scheme.decode(window, list(window), [])
    
    def test_feedback_is_noop(self):
        scheme = InterleavedParityScheme(rows=1, cols=4)
        window = scheme.next_window(symbol_source(4))
        result = transmit(scheme, window, drop_source={1})
        scheme.feedback(result)
        
        assert len(scheme.encode(scheme.next_window(symbol_source(4, start=4)))) == 1


class TestValidation:
    """Tests for parameter validation."""
    
    @pytest.mark.parametrize("rows,cols", [(0, 5), (5, 0), (-1, 2)])
    def test_invalid_dimensions(self, rows, cols):
        with pytest.raises(ConfigError):
            InterleavedParityScheme(rows=rows, cols=cols)
    
    @pytest.mark.parametrize("layers", [(0,), (3, -2)])
    def test_invalid_layers(self, layers):
        with pytest.raises(ConfigError):
            InterleavedParityScheme(rows=2, cols=2, layers=layers)
