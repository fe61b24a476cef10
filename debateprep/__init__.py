"""
Debate Prep - Critique Memory

Keeps a per-participant memory of critiques raised against simulated debate
opponents, merging repeated feedback into a small, strength-ranked set of
guidance rules that steers future generations.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from debateprep.config import config

__all__ = ["config", "__version__"]
