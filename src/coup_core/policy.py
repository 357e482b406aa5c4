"""
Heuristic decision policy.

A rule-based player that bluffs with a per-match propensity, ranks opponents
by threat, remembers claims and caught bluffs, and falls back to an end-game
simulation when a challenge or bluff could decide the match.

Each phase handler takes a `Decision` (the snapshot plus everything the
player owns) and returns the command to send, or None.
"""
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .beliefs import BeliefTracker
from .config import PolicyOptions
from .models import (
    ACTIONS, Command, CommandType, GameState, GameType, Influence, PhaseName,
    Role, claimed_role
)
from .simulator import simulate_end_game
from .targeting import (
    alive_count, can_block, count_revealed_roles, on_team_by_themselves,
    players_by_strength, should_target, strongest_player
)
from .threats import DO_NOTHING, best_coup_or_team_change

logger = logging.getLogger(__name__)

# Exchange keeps roles in this order of preference
RANKED_ROLES = [
    Role.DUKE, Role.ASSASSIN, Role.CAPTAIN, Role.INQUISITOR, Role.CONTESSA, Role.AMBASSADOR
]

# How likely each role is to be given up when forced to reveal.
# E.g. ambassador is 3 times more likely to be revealed than duke.
ROLE_WEIGHTS: Dict[Role, int] = {
    Role.DUKE: 3,
    Role.ASSASSIN: 4,
    Role.CAPTAIN: 5,
    Role.INQUISITOR: 6,
    Role.CONTESSA: 6,
    Role.AMBASSADOR: 9,
}

MAX_BLUFFED_ROLES = 2
SEED_RANGE = 10 ** 15


class FriendOracle:
    """
    Privileged queries about our own hand, only available to a bot that
    plays as someone's secret friend.
    """

    def has_role(self, player_idx: int, role: Role) -> bool:
        raise NotImplementedError

    def change_influence(self, player_idx: int, roles: List[Role]) -> Optional[List[Influence]]:
        raise NotImplementedError

    def discard_role(self, player_idx: int, role: Role) -> List[Influence]:
        raise NotImplementedError


@dataclass
class PolicyMemory:
    """What the policy keeps between decisions, besides beliefs."""
    bluff_choice: bool = False  # Whether we bluff this match (re-rolled after each bluff)

    def reroll_bluff(self, options: PolicyOptions, rng: random.Random):
        self.bluff_choice = rng.random() < options.chance_to_bluff


@dataclass
class Decision:
    """Everything one decision needs."""
    state: GameState
    beliefs: BeliefTracker
    options: PolicyOptions
    rng: random.Random
    memory: PolicyMemory
    oracle: Optional[FriendOracle] = None
    seed: Optional[int] = None  # Opponent tie-break seed, fixed for this decision

    def __post_init__(self):
        if self.seed is None:
            self.seed = self.rng.randrange(SEED_RANGE)

    @property
    def me(self) -> int:
        return self.state.player_idx

    @property
    def has_friend(self) -> bool:
        return bool(self.state.me.friend) and self.oracle is not None


# =============================================================================
# HELPERS
# =============================================================================

def _command(d: Decision, command: CommandType, **fields) -> Command:
    return Command(command=command, state_id=d.state.state_id, **fields)


def _allow(d: Decision) -> Command:
    logger.debug("allowing")
    return _command(d, CommandType.ALLOW)


def _block(d: Decision, role: Role, bluff: bool = False) -> Command:
    logger.debug("blocking (bluff)" if bluff else "blocking")
    d.beliefs.track_claim(d.state, d.me, role)
    return _command(d, CommandType.BLOCK, blocking_role=role)


def _play(d: Decision, action: str, target: Optional[int] = None) -> Command:
    logger.debug(f"playing {action}")
    d.beliefs.track_claim(d.state, d.me, action)
    return _command(d, CommandType.PLAY_ACTION, action=action, target=target)


def our_influence(d: Decision) -> List[Role]:
    return d.state.me.live_roles


def is_end_game(d: Decision) -> bool:
    """Only one opponent (or opposing team member) is left."""
    return len(players_by_strength(d.state, d.seed)) == 1


def randomize_choice(d: Decision) -> bool:
    """
    Occasionally deviate from a good move so we are harder to predict.
    Never on our last card in the end-game.
    """
    if is_end_game(d) and d.state.me.influence_count == 1:
        return False
    return d.rng.randint(0, 9) < 1


def simulate(d: Decision, bluffed_role: Optional[Role] = None) -> int:
    opponent = strongest_player(d.state, d.seed)
    if opponent is None:
        return 0
    return simulate_end_game(
        d.state, d.beliefs, opponent, d.options.search_horizon, bluffed_role
    )


def assassin_target(d: Decision) -> Optional[int]:
    for idx in players_by_strength(d.state, d.seed):
        if not can_block(d.beliefs.claimed_roles(idx), "assassinate") and should_target(d.state, idx):
            return idx
    return None


def captain_target(d: Decision) -> Optional[int]:
    for idx in players_by_strength(d.state, d.seed):
        if (not can_block(d.beliefs.claimed_roles(idx), "steal")
                and d.state.players[idx].cash > 0 and should_target(d.state, idx)):
            return idx
    return None


def _any_opponent(d: Decision) -> Optional[int]:
    for idx, player in enumerate(d.state.players):
        if idx != d.me and player.is_alive:
            return idx
    return None


# =============================================================================
# FRIEND VARIANT
# =============================================================================

def take_role(d: Decision, role: Role) -> bool:
    """
    Whether we hold `role`. A bot with a friend may first swap an unexposed
    card for it.
    """
    me = d.state.me
    if not d.has_friend or d.beliefs.was_caught(d.me, role):
        return role in me.live_roles

    roles = []
    replaced = False
    for idx, influence in enumerate(me.influence):
        if influence.revealed:
            continue
        if idx not in d.beliefs.influences_seen and influence.role != role and not replaced:
            roles.append(role)
            replaced = True
        else:
            roles.append(influence.role)

    if replaced:
        influence = d.oracle.change_influence(d.me, roles)
        if influence:
            me.influence = influence
            return True
    return role in me.live_roles


def discard_role(d: Decision, role: Role) -> bool:
    """Whether we do not hold `role`. A bot with a friend may first get rid of it."""
    me = d.state.me
    if not d.has_friend:
        return role not in me.live_roles

    for idx, influence in enumerate(me.influence):
        if not influence.revealed and influence.role == role and idx in d.beliefs.influences_seen:
            return False

    me.influence = d.oracle.discard_role(d.me, role)
    return role not in me.live_roles


def is_lying(d: Decision) -> bool:
    phase = d.state.phase
    if phase.name == PhaseName.ACTION_RESPONSE:
        if ACTIONS[phase.action].inverse_claim:
            return d.oracle.has_role(phase.player_idx, Role.DUKE)
        return not d.oracle.has_role(phase.player_idx, claimed_role(d.state, phase.action))
    if phase.name == PhaseName.BLOCK_RESPONSE:
        return not d.oracle.has_role(phase.target, phase.blocking_role)
    return False


# =============================================================================
# CHALLENGES AND BLUFFS
# =============================================================================

def action_is_worth_challenging(d: Decision) -> bool:
    """Tax always; steal or assassinate when we are the actor or the target."""
    phase = d.state.phase
    if phase.action == "tax":
        return True
    if phase.action in ("steal", "assassinate") and d.me in (phase.player_idx, phase.target):
        return True
    return False


def should_challenge(d: Decision) -> bool:
    state = d.state
    phase = state.phase
    if phase.name == PhaseName.ACTION_RESPONSE:
        claimant = phase.player_idx
        spec = ACTIONS[phase.action]
        if spec.inverse_claim:
            # Embezzle is never worth challenging
            return False
        role = claimed_role(state, phase.action)
    elif phase.name == PhaseName.BLOCK_RESPONSE:
        claimant = phase.target
        role = phase.blocking_role
    else:
        return False
    if role is None:
        return False

    # Every copy of the role is revealed or in our hand
    used = count_revealed_roles(state, role) + our_influence(d).count(role)
    if used >= state.num_roles:
        return True

    if d.beliefs.was_caught(claimant, role):
        return True

    if (phase.name == PhaseName.ACTION_RESPONSE and phase.action == "assassinate"
            and phase.target == d.me and state.me.influence_count == 1):
        contessas = count_revealed_roles(state, Role.CONTESSA)
        if contessas >= state.num_roles:
            return True
        for idx, player in enumerate(state.players):
            if idx != d.me and player.is_alive and d.beliefs.has_claimed(idx, Role.CONTESSA):
                contessas += 1
        if contessas >= state.num_roles:
            return True
        if d.beliefs.was_caught(d.me, Role.CONTESSA):
            return True
        # Otherwise we will bluff contessa
        return False

    if not action_is_worth_challenging(d):
        return False

    if is_end_game(d):
        result = simulate(d)
        if result < 0:
            # They would win soon otherwise
            return True
        if result > 0:
            return False

    return d.rng.random() < d.options.chance_to_challenge


def should_bluff(d: Decision, action_or_role: Union[str, Role]) -> bool:
    state = d.state
    spec = ACTIONS.get(action_or_role)
    influence = our_influence(d)

    if spec is not None and spec.inverse_claim:
        if state.treasury_reserve == 0:
            return False
        if Role.DUKE in influence and state.treasury_reserve > 3:
            return True
        role = None
    elif spec is not None:
        role = claimed_role(state, spec.name)
    else:
        role = Role(action_or_role)

    if role is not None:
        if d.beliefs.was_caught(d.me, role):
            return False
        if count_revealed_roles(state, role) >= state.num_roles:
            return False
        if (role == Role.CONTESSA and state.phase.action == "assassinate"
                and state.me.influence_count == 1):
            # Blocking is the only way to survive
            return True

    already_claimed = role is not None and d.beliefs.has_claimed(d.me, role)
    if not d.memory.bluff_choice and not already_claimed:
        return False
    if len(d.beliefs.claims[d.me]) >= MAX_BLUFFED_ROLES and not already_claimed:
        return False
    if is_end_game(d) and simulate(d, role) > 0:
        # A winning bluff is likely to be challenged
        return False
    return True


def get_blocking_role(d: Decision) -> Optional[Role]:
    """A blocking role we genuinely hold, if the action is ours to block."""
    phase = d.state.phase
    if phase.action == "foreign-aid" or phase.target == d.me:
        influence = our_influence(d)
        for role in ACTIONS[phase.action].blocked_by:
            if role in influence:
                return role
    return None


def bluffed_blocking_role(d: Decision) -> Optional[Role]:
    phase = d.state.phase
    if phase.action != "foreign-aid" and phase.target != d.me:
        return None
    roles = [role for role in ACTIONS[phase.action].blocked_by if role in d.state.roles]
    d.rng.shuffle(roles)
    for role in roles:
        if should_bluff(d, role):
            d.memory.reroll_bluff(d.options, d.rng)
            return role
    return None


# =============================================================================
# PHASE HANDLERS
# =============================================================================

def respond_to_action(d: Decision) -> Optional[Command]:
    state = d.state
    phase = state.phase
    if not state.me.is_alive:
        return None

    if not should_target(state, phase.player_idx):
        return _allow(d)

    d.beliefs.track_claim(state, phase.player_idx, phase.action)
    if phase.action == "steal" and state.me.cash == 0:
        # Nothing to lose
        return _allow(d)

    for role in ACTIONS[phase.action].blocked_by:
        if take_role(d, role):
            break

    role = get_blocking_role(d)
    if role is not None:
        return _block(d, role)

    # Bluffing in the final action response would just get challenged
    if phase.name == PhaseName.ACTION_RESPONSE:
        if should_challenge(d) and (not d.has_friend or is_lying(d)):
            logger.debug("challenging")
            return _command(d, CommandType.CHALLENGE)

        if phase.action == "interrogate" and d.has_friend and phase.target == d.me:
            for _ in range(state.me.influence_count):
                take_role(d, Role.INQUISITOR)

        role = bluffed_blocking_role(d)
        if role is not None:
            return _block(d, role, bluff=True)

    return _allow(d)


def respond_to_block(d: Decision) -> Optional[Command]:
    state = d.state
    phase = state.phase
    if not state.me.is_alive:
        return None

    if not should_target(state, phase.target):
        return _allow(d)

    d.beliefs.track_claim(state, phase.target, phase.blocking_role)
    if should_challenge(d) and (not d.has_friend or is_lying(d)):
        logger.debug("challenging")
        return _command(d, CommandType.CHALLENGE)
    return _allow(d)


def play_our_turn(d: Decision) -> Command:
    state = d.state
    me = state.me
    logger.debug(f"influence: {[role.value for role in our_influence(d)]}")

    team_move = best_coup_or_team_change(state)
    alive = alive_count(state)
    strongest = strongest_player(state, d.seed)
    if strongest is None:
        strongest = _any_opponent(d)
    assassin_tgt = assassin_target(d)
    captain_tgt = captain_target(d)

    if state.treasury_reserve > 1:
        discard_role(d, Role.DUKE)
    else:
        take_role(d, Role.DUKE)

    if assassin_tgt is not None:
        take_role(d, Role.ASSASSIN)
    elif captain_tgt is not None:
        take_role(d, Role.CAPTAIN)

    influence = our_influence(d)
    reformation = state.is_reformation
    dukes_gone = count_revealed_roles(state, Role.DUKE) >= state.num_roles

    if me.cash >= 10:
        return _play(d, "coup", strongest)
    if team_move.action != DO_NOTHING:
        # Protect the most friends
        return _play(d, team_move.action, team_move.target)
    if (reformation and me.cash >= 1 and not me.friend
            and on_team_by_themselves(state, d.me) and alive > 2):
        return _play(d, "change-team")
    if me.cash >= 7 and not team_move.force and (should_target(state, strongest) or alive == 2):
        if state.players[strongest].name == me.friend:
            return _play(d, "assassinate", strongest)
        return _play(d, "coup", strongest)
    if (Role.ASSASSIN in influence and me.cash >= 3 and not team_move.force
            and assassin_tgt is not None and not randomize_choice(d)):
        return _play(d, "assassinate", assassin_tgt)
    if (Role.CAPTAIN in influence and state.treasury_reserve < 3
            and captain_tgt is not None and not randomize_choice(d)):
        return _play(d, "steal", captain_tgt)
    if Role.DUKE in influence and state.treasury_reserve < 4 and not randomize_choice(d):
        return _play(d, "tax")
    if (reformation and Role.DUKE not in influence and Role.CAPTAIN in influence
            and state.treasury_reserve > 2 and not randomize_choice(d)):
        return _play(d, "embezzle")
    if (reformation and Role.DUKE not in influence and Role.CAPTAIN not in influence
            and state.treasury_reserve > 1 and not randomize_choice(d)):
        return _play(d, "embezzle")
    if dukes_gone and Role.CAPTAIN not in influence and not randomize_choice(d):
        return _play(d, "foreign-aid")

    # No good moves, so consider a bluff
    bluffs = []
    if d.has_friend:
        if me.cash >= 3 and assassin_tgt is not None and take_role(d, Role.ASSASSIN):
            bluffs.append("assassinate")
        if captain_tgt is not None and take_role(d, Role.CAPTAIN):
            bluffs.append("steal")
        if take_role(d, Role.DUKE):
            bluffs.append("tax")
        if reformation and state.treasury_reserve > 3:
            bluffs.append("embezzle")
    else:
        if me.cash >= 3 and assassin_tgt is not None and should_bluff(d, "assassinate"):
            bluffs.append("assassinate")
        if captain_tgt is not None and should_bluff(d, "steal"):
            bluffs.append("steal")
        if should_bluff(d, "tax"):
            bluffs.append("tax")
        if reformation and should_bluff(d, "embezzle"):
            bluffs.append("embezzle")

    if bluffs and not randomize_choice(d):
        action = d.rng.choice(bluffs)
        d.memory.reroll_bluff(d.options, d.rng)
        if action == "tax":
            take_role(d, Role.DUKE)
            return _play(d, "tax")
        if action == "steal":
            take_role(d, Role.CAPTAIN)
            return _play(d, "steal", captain_tgt)
        if action == "assassinate":
            take_role(d, Role.ASSASSIN)
            return _play(d, "assassinate", assassin_tgt)
        discard_role(d, Role.DUKE)
        return _play(d, "embezzle")

    if Role.ASSASSIN not in influence and not randomize_choice(d):
        # Nothing worth keeping, so exchange
        if state.game_type in (GameType.INQUISITORS, GameType.REFORMATION):
            take_role(d, Role.INQUISITOR)
        else:
            take_role(d, Role.AMBASSADOR)
        return _play(d, "exchange")

    # We have an assassin but cannot afford to use it
    if dukes_gone:
        return _play(d, "foreign-aid")
    return _play(d, "income")


def reveal_by_probability(d: Decision) -> Command:
    """Give up a card, weighted towards the roles we value least."""
    influence = our_influence(d)
    chosen = 0
    if len(influence) > 1:
        weights = [ROLE_WEIGHTS.get(role, 1) for role in influence]
        chosen = d.rng.choices(range(len(influence)), weights=weights)[0]
    role = influence[chosen]
    # Don't claim this role any more
    d.beliefs.forget_claim(d.me, role)
    return _command(d, CommandType.REVEAL, role=role)


def choose_exchange(d: Decision) -> Command:
    needed = d.state.me.influence_count
    available = list(d.state.phase.exchange_options)

    chosen: List[Role] = []
    for _ in range(needed):
        for candidate in RANKED_ROLES:
            if candidate in chosen:
                continue
            if candidate in available:
                chosen.append(candidate)
                break

    leftover = list(available)
    for role in chosen:
        leftover.remove(role)
    while len(chosen) < needed and leftover:
        chosen.append(leftover.pop(0))

    logger.debug(f"chose {[role.value for role in chosen]}")
    # A fresh hand: we can claim anything again
    d.beliefs.reset_player(d.me)
    d.beliefs.reset_exposure()
    return _command(d, CommandType.EXCHANGE, roles=chosen)


def decide(d: Decision) -> Optional[Command]:
    """Dispatch to the handler for the pending phase, if the decision is ours."""
    state = d.state
    phase = state.phase
    me = d.me
    already_allowed = bool(phase.allowed) and phase.allowed[me]

    if phase.name == PhaseName.START_OF_TURN and phase.player_idx == me:
        return play_our_turn(d)
    if phase.name == PhaseName.ACTION_RESPONSE and phase.player_idx != me and not already_allowed:
        return respond_to_action(d)
    if phase.name == PhaseName.FINAL_ACTION_RESPONSE and phase.target == me:
        return respond_to_action(d)
    if phase.name == PhaseName.BLOCK_RESPONSE and phase.target != me and not already_allowed:
        return respond_to_block(d)
    if phase.name == PhaseName.REVEAL_INFLUENCE and phase.player_to_reveal == me:
        return reveal_by_probability(d)
    if phase.name == PhaseName.EXCHANGE and phase.player_idx == me:
        return choose_exchange(d)
    return None
