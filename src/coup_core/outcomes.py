"""
Outcome projection for challenge commands.

A challenge depends on a card the searcher usually cannot see, so it is
resolved into two weighted worlds: one where the challenge succeeds and one
where it fails.
"""
from dataclasses import dataclass
from typing import Tuple

from .errors import IllegalStateError
from .models import ACTIONS, Command, GameState, PhaseName, Role, claimed_role
from .moves import Position, make_position, whose_turn
from .rules import GameCore

# (success, failure) likelihoods of a challenge, keyed by the challenged player's live hand size.
# Derived from a 5-role deck with 3 copies of each.
CHALLENGE_LIKELIHOODS = {
    2: (0.36, 0.64),
    1: (0.2, 0.8),
}


@dataclass(frozen=True)
class Branch:
    """One possible result of a move"""
    likelihood: float  # Base rate given public information
    position: Position
    likelihood_ai: float  # Weight as seen by the searching player


@dataclass(frozen=True)
class MoveOutcome:
    """All results of a move; a deterministic move has a single branch of weight 1."""
    branches: Tuple[Branch, ...]

    @classmethod
    def certain(cls, position: Position) -> "MoveOutcome":
        return cls(branches=(Branch(likelihood=1.0, position=position, likelihood_ai=1.0),))


def challenged_claim(state: GameState) -> Tuple[int, Role, bool]:
    """
    The player and role disputed by a challenge in this phase.

    Returns:
        (challenged player, claimed role, whether the claim is inverted)
    """
    phase = state.phase
    if phase.name in (PhaseName.ACTION_RESPONSE, PhaseName.FINAL_ACTION_RESPONSE):
        role = claimed_role(state, phase.action)
        if role is None:
            raise IllegalStateError(f"Action {phase.action} makes no claim to challenge")
        return phase.player_idx, role, ACTIONS[phase.action].inverse_claim
    if phase.name == PhaseName.BLOCK_RESPONSE:
        return phase.target, phase.blocking_role, False
    raise IllegalStateError(f"Cannot challenge during {phase.name.value}")


def _with_hand(state: GameState, player_idx: int, role: Role) -> GameState:
    copy = state.model_copy(deep=True)
    for influence in copy.players[player_idx].influence:
        if not influence.revealed:
            influence.role = role
    return copy


def project_challenge(
    position: Position,
    move: Command,
    core: GameCore,
    ai_player_idx: int
) -> MoveOutcome:
    """
    Resolve a challenge into its success and failure branches (in that order).

    Raises:
        IllegalStateError: if the phase has no claim or the challenged hand
            size has no known base rate
    """
    state = position.state
    old_phase = state.phase.name
    challenged, role, inverse = challenged_claim(state)

    # A plain claim is false when the cards are unknown; an inverse claim
    # (not holding the role) is false when the cards are all that role.
    if inverse:
        success_pre = _with_hand(state, challenged, role)
        failure_pre = _with_hand(state, challenged, Role.UNKNOWN)
    else:
        success_pre = _with_hand(state, challenged, Role.UNKNOWN)
        failure_pre = _with_hand(state, challenged, role)

    success_post = core.apply_command(success_pre, position.current_player, move)
    failure_post = core.apply_command(failure_pre, position.current_player, move)

    hand = state.players[challenged].live_roles
    if len(hand) not in CHALLENGE_LIKELIHOODS:
        raise IllegalStateError(f"Cannot weigh a challenge against {len(hand)} cards")
    success, failure = CHALLENGE_LIKELIHOODS[len(hand)]

    if challenged == ai_player_idx:
        holds = role in hand
        truthful = not holds if inverse else holds
        success_ai, failure_ai = (0.0, 1.0) if truthful else (1.0, 0.0)
    else:
        success_ai, failure_ai = success, failure

    return MoveOutcome(branches=(
        Branch(
            likelihood=success,
            position=make_position(success_post, whose_turn(success_post, old_phase)),
            likelihood_ai=success_ai,
        ),
        Branch(
            likelihood=failure,
            position=make_position(failure_post, whose_turn(failure_post, old_phase)),
            likelihood_ai=failure_ai,
        ),
    ))
