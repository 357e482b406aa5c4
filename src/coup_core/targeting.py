"""
Opponent ranking and team helpers shared by the heuristic policy and the
threat optimizer.
"""
import hashlib
from typing import List, Optional

from .models import ACTIONS, GameState, Role


def is_teammate(state: GameState, player_idx: int) -> bool:
    """Whether another player is on our team (we are not our own teammate)."""
    if player_idx == state.player_idx:
        return False
    return not state.free_for_all and state.me.team == state.players[player_idx].team


def enemy_count(state: GameState) -> int:
    """Living players who are neither our friend nor one of the friend's allies."""
    friend = state.me.friend
    count = 0
    for player in state.players:
        if not player.is_alive:
            continue
        if not friend or (player.name != friend and player.friend != friend):
            count += 1
    return count


def should_target(state: GameState, player_idx: Optional[int]) -> bool:
    if player_idx is None or not 0 <= player_idx < state.num_players:
        return False
    player = state.players[player_idx]
    if not player.is_alive or is_teammate(state, player_idx):
        return False

    friend = state.me.friend
    if not friend:
        return True
    # Spare the friend always, and the friend's allies while real enemies remain
    if player.name == friend or (enemy_count(state) > 0 and player.friend == friend):
        return False
    return True


def _tie_break(seed: int, name: str) -> str:
    return hashlib.md5(f"{seed}{name}".encode()).hexdigest()


def players_by_strength(state: GameState, seed: int) -> List[int]:
    """
    Living opponents not on our team, strongest first.

    Ranked by influence then cash; remaining ties follow a hash of the
    per-decision seed and the player's name, so the order is stable within a
    decision but not predictable across decisions.
    """
    indices = [
        idx for idx, player in enumerate(state.players)
        if idx != state.player_idx and player.is_alive
        and (state.free_for_all or state.me.team != player.team)
    ]
    return sorted(indices, key=lambda idx: (
        -state.players[idx].influence_count,
        -state.players[idx].cash,
        _tie_break(seed, state.players[idx].name),
    ))


def strongest_player(state: GameState, seed: int) -> Optional[int]:
    """Strongest opponent, passing over the friend and the friend's allies where possible."""
    ranked = players_by_strength(state, seed)
    if not ranked:
        return None
    friend = state.me.friend
    if len(ranked) == 1 or not friend:
        return ranked[0]

    candidates = [idx for idx in ranked if state.players[idx].name != friend]
    for idx in candidates:
        if state.players[idx].friend != friend:
            return idx
    return candidates[0] if candidates else None


def can_block(claims: List[Role], action_name: str) -> bool:
    return any(role in claims for role in ACTIONS[action_name].blocked_by)


def count_revealed_roles(state: GameState, role: Role) -> int:
    return sum(
        1 for player in state.players
        for influence in player.influence
        if influence.revealed and influence.role == role
    )


def alive_count(state: GameState) -> int:
    return sum(1 for player in state.players if player.is_alive)


def on_team_by_themselves(state: GameState, player_idx: int) -> bool:
    """Whether no other living player shares this player's team (team variant only)."""
    if not state.is_reformation:
        return False
    team = state.players[player_idx].team
    return not any(
        idx != player_idx and player.is_alive and player.team == team
        for idx, player in enumerate(state.players)
    )


def stronger_team(state: GameState) -> int:
    """1 for red, -1 for blue, 0 if tied on both live influence and cash."""
    influence = {1: 0, -1: 0}
    cash = {1: 0, -1: 0}
    for player in state.players:
        if player.is_alive:
            team = 1 if player.team == 1 else -1
            influence[team] += player.influence_count
            cash[team] += player.cash

    if influence[1] != influence[-1]:
        return 1 if influence[1] > influence[-1] else -1
    if cash[1] != cash[-1]:
        return 1 if cash[1] > cash[-1] else -1
    return 0


def friend_player(state: GameState) -> Optional[int]:
    """Index of our living friend, if any."""
    friend = state.me.friend
    if not friend:
        return None
    for idx, player in enumerate(state.players):
        if player.name == friend and player.is_alive:
            return idx
    return None
