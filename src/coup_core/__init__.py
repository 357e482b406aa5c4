"""
Decision core for Coup bot players: snapshots, lookahead rules, search,
beliefs and the heuristic policy.
"""
from .beliefs import BeliefTracker
from .config import PolicyOptions, SearchOptions
from .errors import CommandRejectedError, CoupError, GameRuleError, IllegalStateError
from .lookahead import CoupLookahead
from .models import Command, CommandType, GameState, PhaseName, Role
from .policy import Decision, FriendOracle, PolicyMemory, decide
from .rules import GameCore

__all__ = [
    "BeliefTracker",
    "Command",
    "CommandRejectedError",
    "CommandType",
    "CoupError",
    "CoupLookahead",
    "Decision",
    "FriendOracle",
    "GameCore",
    "GameRuleError",
    "GameState",
    "IllegalStateError",
    "PhaseName",
    "PolicyMemory",
    "PolicyOptions",
    "Role",
    "SearchOptions",
    "decide",
]
