"""
Coup bot players: heuristic and search-based shells, plus the A2A server
that feeds them game notifications.
"""
from .agent import CoupPlayerAgent
from .executor import CoupPlayerExecutor
from .heuristic import HeuristicPlayer
from .minimax import MinimaxPlayer

__all__ = ["CoupPlayerAgent", "CoupPlayerExecutor", "HeuristicPlayer", "MinimaxPlayer"]
