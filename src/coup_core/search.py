"""
Expectiminimax search engine.

The engine knows nothing about Coup. It is driven by three callables:

- evaluate(position, player) -> float, scored from `player`'s point of view
- get_possible_moves(position) -> list of moves for position.current_player
- apply_move(position, move) -> MoveOutcome with one or more weighted branches
- is_free_ply(position, move, next_position) -> bool, optional; a free ply
  does not count against the depth limit

Choice nodes and chance nodes go through the same code path: the value of a
move is the weighted sum of its branches' values, using the searcher's own
branch weights.
"""
import logging
import math
import random
from typing import Any, Callable, List, Optional

from .outcomes import MoveOutcome

logger = logging.getLogger(__name__)

SCORE_TOLERANCE = 1e-9


class Minimax:
    """Depth-limited expectiminimax over positions with a `current_player`."""

    def __init__(
        self,
        evaluate: Callable[[Any, int], float],
        get_possible_moves: Callable[[Any], List[Any]],
        apply_move: Callable[[Any, Any], MoveOutcome],
        max_depth: int = 4,
        rng: Optional[random.Random] = None,
        is_free_ply: Optional[Callable[[Any, Any, Any], bool]] = None
    ):
        self.evaluate = evaluate
        self.get_possible_moves = get_possible_moves
        self.apply_move = apply_move
        self.max_depth = max_depth
        self.rng = rng or random.Random()
        self.is_free_ply = is_free_ply or (lambda position, move, next_position: False)
        self.nodes_visited = 0

    def get_best_move(self, position: Any, player: int) -> Optional[Any]:
        """
        Best move for `player`, who must be the one deciding at `position`.

        Equally scored moves are chosen between at random. Returns None when
        there is nothing to choose from.
        """
        self.nodes_visited = 0
        moves = self.get_possible_moves(position)
        if not moves:
            return None
        if len(moves) == 1:
            return moves[0]

        scored = []
        for move in moves:
            score = self._score_move(position, move, player, self.max_depth)
            scored.append((score, move))
            logger.debug(f"move {move} scored {score:.3f}")

        best_score = max(score for score, _ in scored)
        best_moves = [
            move for score, move in scored
            if math.isclose(score, best_score, abs_tol=SCORE_TOLERANCE)
        ]
        logger.debug(
            f"searched {self.nodes_visited} nodes, {len(best_moves)} best move(s) at {best_score:.3f}"
        )
        return self.rng.choice(best_moves)

    def _score_move(self, position: Any, move: Any, player: int, depth: int) -> float:
        """Value of playing `move` with `depth` plies left, this one included."""
        outcome = self.apply_move(position, move)
        total = 0.0
        for branch in outcome.branches:
            if branch.likelihood_ai == 0:
                continue
            remaining = depth if self.is_free_ply(position, move, branch.position) else depth - 1
            total += branch.likelihood_ai * self._score_position(branch.position, player, remaining)
        return total

    def _score_position(self, position: Any, player: int, depth: int) -> float:
        self.nodes_visited += 1
        if depth <= 0 or position.current_player is None:
            return self.evaluate(position, player)

        moves = self.get_possible_moves(position)
        if not moves:
            return self.evaluate(position, player)

        scores = [self._score_move(position, move, player, depth) for move in moves]
        if position.current_player == player:
            return max(scores)
        return min(scores)
