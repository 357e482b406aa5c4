"""
Two-player end-game rollout.

Plays us against one opponent with a fixed "best action" priority to see who
would run out of influence first. It is only a tie-breaker for challenge and
bluff decisions. Foreign aid is ignored, and a player who loses a card is
still assumed to hold every role it had.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .beliefs import BeliefTracker
from .models import ACTIONS, GameState, PhaseName, Role

logger = logging.getLogger(__name__)

THEM = 0
US = 1


@dataclass
class Duel:
    """Cash, live influence and believed roles, indexed THEM / US."""
    cash: List[int]
    influence: List[int]
    roles: List[List[Role]] = field(default_factory=lambda: [[], []])

    def can_block(self, side: int, action_name: str) -> bool:
        return any(role in self.roles[side] for role in ACTIONS[action_name].blocked_by)

    def can_steal(self, turn: int) -> bool:
        return Role.CAPTAIN in self.roles[turn] and not self.can_block(1 - turn, "steal")

    def can_assassinate(self, turn: int) -> bool:
        return Role.ASSASSIN in self.roles[turn] and not self.can_block(1 - turn, "assassinate")

    def can_tax(self, turn: int) -> bool:
        return Role.DUKE in self.roles[turn]

    def steal(self, turn: int):
        other = 1 - turn
        amount = min(2, self.cash[other])
        self.cash[turn] += amount
        self.cash[other] -= amount

    def assassinate(self, turn: int):
        self.cash[turn] -= 3
        self.influence[1 - turn] -= 1

    def coup(self, turn: int):
        self.cash[turn] -= 7
        self.influence[1 - turn] -= 1

    def tax(self, turn: int):
        self.cash[turn] += 3

    def income(self, turn: int):
        self.cash[turn] += 1

    def play_best(self, turn: int) -> str:
        """Take the single best action for `turn` and return its name."""
        other = 1 - turn
        if self.can_assassinate(turn) and self.cash[turn] >= 3:
            self.assassinate(turn)
            return "assassinate"
        if self.cash[turn] >= 7:
            self.coup(turn)
            return "coup"
        if self.can_steal(turn) and self.cash[other] > 0:
            self.steal(turn)
            return "steal"
        if self.can_tax(turn):
            self.tax(turn)
            return "tax"
        self.income(turn)
        return "income"

    def result(self) -> Optional[int]:
        if self.influence[THEM] <= 0:
            return 1
        if self.influence[US] <= 0:
            return -1
        return None


def simulate_end_game(
    state: GameState,
    beliefs: BeliefTracker,
    opponent_idx: int,
    horizon: int,
    bluffed_role: Optional[Role] = None
) -> int:
    """
    Simulate us against one opponent, both playing their best moves.

    Returns:
        1 if the opponent runs out of influence first, -1 if we do, 0 if
        neither happens within `horizon` steps
    """
    opponent = state.players[opponent_idx]
    our_roles = list(state.me.live_roles)
    if bluffed_role is not None:
        our_roles.append(bluffed_role)
    duel = Duel(
        cash=[opponent.cash, state.me.cash],
        influence=[opponent.influence_count, state.me.influence_count],
        roles=[beliefs.claimed_roles(opponent_idx), our_roles],
    )
    logger.debug(f"simulating with {duel.roles[THEM]} against {duel.roles[US]}, cash {duel.cash}")

    phase = state.phase
    step = 0
    if phase.name in (PhaseName.ACTION_RESPONSE, PhaseName.FINAL_ACTION_RESPONSE):
        # Their action goes through unless we are about to block it, then we move
        if bluffed_role is None:
            pending = {
                "steal": duel.steal,
                "assassinate": duel.assassinate,
                "tax": duel.tax,
            }.get(phase.action)
            if pending is not None:
                pending(THEM)
            else:
                logger.debug(f"unexpected initial action: {phase.action}")
    elif phase.name == PhaseName.BLOCK_RESPONSE:
        # They are blocking us, so they move next
        step = 1

    while step < horizon:
        step += 1
        outcome = duel.result()
        if outcome is not None:
            return outcome
        turn = step % 2
        action = duel.play_best(turn)
        logger.debug(f"{'we' if turn == US else 'they'} {action}, cash {duel.cash}")

    outcome = duel.result()
    if outcome is not None:
        return outcome
    logger.debug("search horizon exceeded while simulating end-game")
    return 0
