"""
Belief tracking: who claimed which roles, and who was caught bluffing.

One tracker belongs to one player instance and lives for one match.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Union

from .history import (
    ChallengeEvent, HistoryEvent, InterrogationEvent, InterrogationOutcome, RevealEvent
)
from .models import ACTIONS, GameState, PhaseName, Role, claimed_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleClaim:
    """The claim currently open to challenge"""
    player_idx: int
    role: Role


class BeliefTracker:
    """
    Per-player claims and called bluffs, plus what an inquisitor has seen of our hand.

    Claims and called bluffs of a player are always cleared together.
    """

    def __init__(self, num_players: int = 0):
        self.reset(num_players)

    def reset(self, num_players: int = 0):
        """Forget everything; called when a match starts."""
        self.claims: Dict[int, Set[Role]] = defaultdict(set)
        self.called_bluffs: Dict[int, Set[Role]] = defaultdict(set)
        for idx in range(num_players):
            self.claims[idx] = set()
            self.called_bluffs[idx] = set()
        self.last_claim: Optional[RoleClaim] = None

        # Indices of our own cards an inquisitor has seen and let us keep
        self.influences_seen: Set[int] = set()
        self.last_seen_idx: int = -1

    # =========================================================================
    # QUERIES
    # =========================================================================

    def has_claimed(self, player_idx: int, role: Role) -> bool:
        return role in self.claims[player_idx]

    def was_caught(self, player_idx: int, role: Role) -> bool:
        return role in self.called_bluffs[player_idx]

    def claimed_roles(self, player_idx: int) -> List[Role]:
        return sorted(self.claims[player_idx], key=lambda role: role.value)

    # =========================================================================
    # UPDATES
    # =========================================================================

    def observe_phase(self, state: GameState):
        """
        Point `last_claim` at the claim a challenge in this phase would dispute.

        The pointer survives reveal-influence, because the history event that
        settles the challenge arrives after the reveal is requested.
        """
        phase = state.phase
        if phase.name == PhaseName.ACTION_RESPONSE:
            spec = ACTIONS.get(phase.action)
            role = claimed_role(state, phase.action)
            if role is None or spec.inverse_claim:
                self.last_claim = None
            else:
                self.last_claim = RoleClaim(phase.player_idx, role)
        elif phase.name == PhaseName.BLOCK_RESPONSE:
            self.last_claim = RoleClaim(phase.target, phase.blocking_role)
        elif phase.name == PhaseName.EXCHANGE:
            self.last_claim = None
            # Our own exchange resets us when we choose the cards we keep
            if phase.player_idx != state.player_idx:
                self.reset_player(phase.player_idx)
        elif phase.name != PhaseName.REVEAL_INFLUENCE:
            self.last_claim = None

    def track_claim(self, state: GameState, player_idx: int, action_or_role: Union[str, Role]):
        """Record that a player claimed a role, directly or by playing an action."""
        spec = ACTIONS.get(action_or_role) if isinstance(action_or_role, str) else None
        if spec is not None:
            # Characterless actions claim nothing; embezzle claims the absence of a duke
            if not spec.roles or spec.inverse_claim:
                return
            role = claimed_role(state, spec.name)
        else:
            role = Role(action_or_role)
        if role is None:
            return
        self.claims[player_idx].add(role)
        logger.debug(f"player {player_idx} claimed {role.value}")

    def forget_claim(self, player_idx: int, role: Role):
        self.claims[player_idx].discard(role)

    def reset_player(self, player_idx: int):
        """A player's hand was replaced: nothing they claimed before still holds."""
        self.claims[player_idx] = set()
        self.called_bluffs[player_idx] = set()

    def reset_exposure(self):
        self.influences_seen = set()
        self.last_seen_idx = -1

    def apply(self, event: HistoryEvent, state: Optional[GameState] = None):
        """
        Update beliefs from one parsed history event.

        Interrogation events only matter when `state` shows we are the target
        and have a friend.
        """
        if isinstance(event, RevealEvent):
            self.forget_claim(event.player_idx, event.role)
        elif isinstance(event, ChallengeEvent):
            if self.last_claim is None or not event.successful:
                return
            claim = self.last_claim
            self.forget_claim(claim.player_idx, claim.role)
            self.called_bluffs[claim.player_idx].add(claim.role)
            logger.debug(f"player {claim.player_idx} caught bluffing {claim.role.value}")
        elif isinstance(event, InterrogationEvent):
            if state is None or not state.me.friend or state.phase.target != state.player_idx:
                return
            self._apply_interrogation(event, state)

    def _apply_interrogation(self, event: InterrogationEvent, state: GameState):
        if event.outcome == InterrogationOutcome.SAW:
            for idx, influence in enumerate(state.me.influence):
                if not influence.revealed and influence.role == event.role:
                    self.last_seen_idx = idx
                    break
        elif event.outcome == InterrogationOutcome.EXCHANGED:
            self.last_seen_idx = -1
        elif self.last_seen_idx >= 0:
            self.influences_seen.add(self.last_seen_idx)
