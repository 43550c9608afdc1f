"""
Drop Trace

Optional per-symbol record of what the loss model decided, in
transmission order. A trace can be written to CSV and replayed through
PatternLoss.
"""

import csv
import os
from typing import Iterator, List, NamedTuple


class TraceEntry(NamedTuple):
    """One transmitted symbol."""
    index: int
    is_repair: bool
    is_dropped: bool


class DropTrace:
    """Accumulates trace entries for one run."""
    
    HEADER = ["id", "is_repair", "is_dropped"]
    
    def __init__(self):
        self.entries: List[TraceEntry] = []
    
    def record(self, index: int, is_repair: bool, is_dropped: bool):
        self.entries.append(TraceEntry(index, is_repair, is_dropped))
    
    def dropped_source(self) -> List[int]:
        """Transmission indices of dropped source symbols."""
        return [e.index for e in self.entries if e.is_dropped and not e.is_repair]
    
    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self.entries)
    
    def __len__(self) -> int:
        return len(self.entries)
    
    def save(self, filepath: str) -> str:
        """
        Save the trace to a CSV file.
        
        Args:
            filepath: Output file path
            
        Returns:
            Path of the written file
        """
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w', newline='') as f:
            writer = csv.writer(f, lineterminator='\n')
            writer.writerow(self.HEADER)
            for entry in self.entries:
                writer.writerow([entry.index, int(entry.is_repair), int(entry.is_dropped)])
        return filepath
    
    @classmethod
    def load(cls, filepath: str) -> "DropTrace":
        """Load a trace previously written by `save`."""
        trace = cls()
        with open(filepath, 'r', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                trace.record(int(row['id']), row['is_repair'] == '1',
                             row['is_dropped'] == '1')
        return trace
