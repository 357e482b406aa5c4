"""
Coup bindings for the search engine.
"""
import logging
import random
from typing import List, Optional

from .config import SearchOptions
from .models import ACTIONS, Command, CommandType, GameState, PhaseName, claimed_role
from .moves import Position, decision_pending, enumerate_moves, make_position, whose_turn
from .outcomes import MoveOutcome, project_challenge
from .rules import GameCore, draw_unknown
from .search import Minimax

logger = logging.getLogger(__name__)

WIN_SCORE = 1000.0
INFLUENCE_SCORE = 10.0


class CoupLookahead:
    """
    Plays one participant by searching ahead over the lookahead rules core.

    Drawn cards are always unknown to the searcher, and challenges are
    resolved into weighted success and failure worlds.
    """

    def __init__(self, options: Optional[SearchOptions] = None):
        self.options = options or SearchOptions()
        self.rng = random.Random(self.options.random_seed)
        self.core = GameCore(draw_role=draw_unknown)
        self.ai_player_idx: Optional[int] = None
        self.minimax = Minimax(
            evaluate=self.evaluate,
            get_possible_moves=self.get_possible_moves,
            apply_move=self.apply_move,
            max_depth=self.options.max_depth,
            rng=self.rng,
            is_free_ply=self.is_free_ply,
        )

    def compute_best_move(self, state: GameState) -> Optional[Command]:
        """
        Best command for the snapshot's owner, or None when no decision is pending.
        """
        self.ai_player_idx = state.player_idx
        if not decision_pending(state):
            return None

        # In the search it is always our move, which might just mean our chance to block
        position = make_position(state, state.player_idx)
        move = self.minimax.get_best_move(position, state.player_idx)
        if move is None:
            return None
        return move.model_copy(update={"state_id": state.state_id})

    def evaluate(self, position: Position, player: int) -> float:
        players = position.state.players
        me = players[player]
        if not me.is_alive:
            return -WIN_SCORE
        opponents = [p for idx, p in enumerate(players) if idx != player and p.is_alive]
        if not opponents:
            return WIN_SCORE

        def strength(p) -> float:
            return p.influence_count * INFLUENCE_SCORE + p.cash

        return strength(me) - sum(strength(p) for p in opponents) / len(opponents)

    def get_possible_moves(self, position: Position) -> List[Command]:
        if position.current_player is None:
            return []
        moves = enumerate_moves(position)
        # Only actions whose roles are in this game
        return [
            move for move in moves
            if move.command != CommandType.PLAY_ACTION
            or not ACTIONS[move.action].roles
            or claimed_role(position.state, move.action) is not None
        ]

    def is_free_ply(self, position: Position, move: Command, next_position: Position) -> bool:
        # An allow that leaves others still to respond does not move the game on
        phase = position.state.phase.name
        return (
            move.command == CommandType.ALLOW
            and phase in (PhaseName.ACTION_RESPONSE, PhaseName.BLOCK_RESPONSE)
            and next_position.state.phase.name == phase
        )

    def apply_move(self, position: Position, move: Command) -> MoveOutcome:
        if move.command == CommandType.CHALLENGE:
            return project_challenge(position, move, self.core, self.ai_player_idx)
        old_phase = position.state.phase.name
        state = self.core.apply_command(position.state, position.current_player, move)
        return MoveOutcome.certain(make_position(state, whose_turn(state, old_phase)))
