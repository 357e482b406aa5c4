"""
Move enumeration for the search player.

Maps the pending phase to the set of commands the deciding player may send.
"""
import logging
from dataclasses import dataclass
from itertools import permutations
from typing import List, Optional

from .errors import IllegalStateError
from .models import ACTIONS, Command, CommandType, GameState, PhaseName, claimed_role

logger = logging.getLogger(__name__)

# Actions that are always on the table at turn start, besides the targeted ones
UNTARGETED_ACTIONS = ["tax", "exchange", "income", "foreign-aid"]


@dataclass
class Position:
    """A node of the search tree: snapshot plus the player deciding at it."""
    state: GameState
    current_player: Optional[int]
    live_players: List[bool]


def live_players(state: GameState) -> List[bool]:
    return [player.is_alive for player in state.players]


def make_position(state: GameState, current_player: Optional[int]) -> Position:
    return Position(state=state, current_player=current_player, live_players=live_players(state))


def _opponents(state: GameState, player_idx: int) -> List[int]:
    return [
        idx for idx, player in enumerate(state.players)
        if idx != player_idx and player.is_alive
    ]


def action_moves(position: Position) -> List[Command]:
    state = position.state
    actor = position.current_player
    cash = state.players[actor].cash
    targets = _opponents(state, actor)
    moves: List[Command] = []

    def play(action: str, target: Optional[int] = None) -> Command:
        return Command(command=CommandType.PLAY_ACTION, action=action, target=target)

    if cash >= 7:
        moves.extend(play("coup", idx) for idx in targets)
    if cash >= 10:
        # Forced coup
        return moves
    if cash >= 3:
        moves.extend(play("assassinate", idx) for idx in targets)
    moves.extend(play("steal", idx) for idx in targets)
    moves.extend(play(action) for action in UNTARGETED_ACTIONS)
    return moves


def block_moves(position: Position) -> List[Command]:
    state = position.state
    spec = ACTIONS[state.phase.action]
    if not spec.blocked_by:
        return []
    if spec.targeted and state.phase.target != position.current_player:
        # Only the target may block
        return []
    return [
        Command(command=CommandType.BLOCK, blocking_role=role)
        for role in spec.blocked_by if role in state.roles
    ]


def reveal_moves(position: Position) -> List[Command]:
    roles = position.state.players[position.current_player].live_roles
    return [
        Command(command=CommandType.REVEAL, role=role)
        for role in dict.fromkeys(roles)
    ]


def exchange_moves(position: Position) -> List[Command]:
    """Every distinct set of roles the player may keep from the offered pool."""
    state = position.state
    count = state.players[position.current_player].influence_count
    options = state.phase.exchange_options

    seen = set()
    moves = []
    for combo in permutations(range(len(options)), count):
        roles = sorted((options[i] for i in combo), key=lambda role: role.value)
        key = tuple(roles)
        if key in seen:
            continue
        seen.add(key)
        moves.append(Command(command=CommandType.EXCHANGE, roles=roles))
    return moves


def enumerate_moves(position: Position) -> List[Command]:
    """
    All commands the current player could send in this position.

    Raises:
        IllegalStateError: if the phase is not a decision phase
    """
    state = position.state
    name = state.phase.name
    if name == PhaseName.START_OF_TURN:
        return action_moves(position)
    if name == PhaseName.ACTION_RESPONSE:
        moves = block_moves(position) + [Command(command=CommandType.ALLOW)]
        if claimed_role(state, state.phase.action) is not None:
            moves.append(Command(command=CommandType.CHALLENGE))
        return moves
    if name == PhaseName.FINAL_ACTION_RESPONSE:
        return block_moves(position)
    if name == PhaseName.BLOCK_RESPONSE:
        return [Command(command=CommandType.ALLOW), Command(command=CommandType.CHALLENGE)]
    if name == PhaseName.REVEAL_INFLUENCE:
        return reveal_moves(position)
    if name == PhaseName.EXCHANGE:
        return exchange_moves(position)
    if name == PhaseName.GAME_WON:
        return []
    raise IllegalStateError(f"No moves defined for phase {name.value}")


def whose_turn(state: GameState, old_phase: PhaseName) -> Optional[int]:
    """
    Who decides next after a move moved the game into `state`.

    Raises:
        IllegalStateError: for phases nobody can act in, or a response phase
            with no one left to respond
    """
    phase = state.phase
    if phase.name == PhaseName.START_OF_TURN:
        return phase.player_idx
    if phase.name in (PhaseName.ACTION_RESPONSE, PhaseName.BLOCK_RESPONSE):
        if phase.name != old_phase:
            # The player most likely to respond goes first
            if phase.name == PhaseName.ACTION_RESPONSE and phase.target is not None:
                return phase.target
            if phase.name == PhaseName.BLOCK_RESPONSE:
                return phase.player_idx
        for idx, allowed in enumerate(phase.allowed):
            if not allowed:
                return idx
        raise IllegalStateError("No player left to respond")
    if phase.name == PhaseName.FINAL_ACTION_RESPONSE:
        return phase.target
    if phase.name == PhaseName.GAME_WON:
        return None
    if phase.name == PhaseName.EXCHANGE:
        return phase.player_idx
    if phase.name == PhaseName.REVEAL_INFLUENCE:
        return phase.player_to_reveal
    raise IllegalStateError(f"Cannot attribute turn for phase {phase.name.value}")


def decision_pending(state: GameState) -> bool:
    """Whether the snapshot's owner has a legal decision to make right now."""
    me = state.player_idx
    if not state.players[me].is_alive:
        return False
    phase = state.phase
    name = phase.name
    if name == PhaseName.START_OF_TURN:
        return phase.player_idx == me
    if name == PhaseName.ACTION_RESPONSE:
        return phase.player_idx != me and not (phase.allowed and phase.allowed[me])
    if name == PhaseName.FINAL_ACTION_RESPONSE:
        return phase.target == me
    if name == PhaseName.BLOCK_RESPONSE:
        return phase.target != me and not (phase.allowed and phase.allowed[me])
    if name == PhaseName.REVEAL_INFLUENCE:
        return phase.player_to_reveal == me
    if name == PhaseName.EXCHANGE:
        return phase.player_idx == me
    return False
