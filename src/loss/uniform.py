"""
Uniform (Bernoulli) Loss Model

Every symbol is dropped independently with the same probability.
"""

from src.errors import check_probability
from src.loss.base import LossModel
from src.loss.random_source import RandomSource


class UniformLoss(LossModel):
    """
    Independent drops with probability `p`.
    
    Each decision consumes exactly one draw of the random source.
    """
    
    name = "uniform"
    
    def __init__(self, p: float, source: RandomSource):
        """
        Initialize the uniform loss model.
        
        Args:
            p: Drop probability in [0, 1]
            source: Random source shared by the run
        """
        super().__init__()
        self.p = check_probability("p", p)
        self.source = source
    
    def _should_drop(self) -> bool:
        return self.source.uniform() < self.p
    
    def describe(self) -> str:
        return f"uniform_{self.p}"
