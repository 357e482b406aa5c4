"""
Team variant: pick the coup, team change or conversion that leaves our friend
(and then the friend's other allies) facing the fewest threats.

A threat is a living, hostile player with enough cash to coup. Every
candidate is scored on its own projected copy of the snapshot.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import GameState
from .targeting import (
    alive_count, friend_player, on_team_by_themselves, should_target, stronger_team
)

logger = logging.getLogger(__name__)

COUP_CASH = 7
DO_NOTHING = "do-nothing"


@dataclass(frozen=True)
class ThreatCount:
    to_friend: int = 0
    to_friend_ais: int = 0
    to_enemies: int = 0


@dataclass(frozen=True)
class TeamMove:
    action: str
    target: Optional[int] = None
    force: bool = False  # Nothing helps; do not attack at all this turn


def _is_threat(state: GameState, player_idx: int, team: int) -> bool:
    player = state.players[player_idx]
    friend = state.me.friend
    return (
        player.name != friend and player.friend != friend
        and player.is_alive
        and (state.free_for_all or player.team != team)
    )


def count_threats(state: GameState, friend_idx: Optional[int]) -> ThreatCount:
    """Threats facing our friend, the friend's allies (us included) and everyone else."""
    threats = {
        team: sum(
            1 for idx, player in enumerate(state.players)
            if _is_threat(state, idx, team) and player.cash >= COUP_CASH
        )
        for team in (1, -1)
    }

    def facing(team: int) -> int:
        return threats[1] if team == 1 else threats[-1]

    friend = state.players[friend_idx] if friend_idx is not None else None
    to_friend = facing(friend.team) if friend is not None else 0
    to_friend_ais = 0
    to_enemies = 0
    for player in state.players:
        if not player.is_alive or (friend is not None and player.name == friend.name):
            continue
        if player.friend == state.me.friend:
            to_friend_ais += facing(player.team)
        else:
            to_enemies += facing(player.team)
            # In a free-for-all a rich enemy is not a threat to itself
            if state.free_for_all and player.cash >= COUP_CASH:
                to_enemies -= 1

    return ThreatCount(to_friend=to_friend, to_friend_ais=to_friend_ais, to_enemies=to_enemies)


def _after_coup(state: GameState, target: int) -> GameState:
    projected = state.model_copy(deep=True)
    player = projected.players[target]
    if on_team_by_themselves(state, target) and player.influence_count == 1:
        projected.free_for_all = True
    for influence in player.influence:
        if not influence.revealed:
            influence.revealed = True
            break
    return projected


def _after_team_change(state: GameState, target: int) -> GameState:
    projected = state.model_copy(deep=True)
    if on_team_by_themselves(state, target) or state.free_for_all:
        projected.free_for_all = not state.free_for_all
    projected.players[target].team *= -1
    return projected


def keep_extremes(
    counts: List[Optional[ThreatCount]],
    key: Callable[[ThreatCount], float],
    maximize: bool
) -> Optional[ThreatCount]:
    """Null out, in place, every count whose key is not the extreme one; return an extreme count."""
    present = [count for count in counts if count is not None]
    if not present:
        return None
    extreme = max(present, key=key) if maximize else min(present, key=key)
    best = key(extreme)
    for i, count in enumerate(counts):
        if count is not None and key(count) != best:
            counts[i] = None
    return extreme


def best_coup_or_team_change(state: GameState) -> TeamMove:
    """
    Choose between doing nothing, couping someone, changing our team or
    converting someone, so as to protect the friend first and allies second.
    """
    me = state.me
    if not state.is_reformation or not me.friend:
        return TeamMove(action=DO_NOTHING)

    n = state.num_players
    friend_idx = friend_player(state)

    coup_counts: List[Optional[ThreatCount]] = []
    for idx in range(n):
        if not should_target(state, idx) or me.cash < COUP_CASH:
            coup_counts.append(None)
        else:
            coup_counts.append(count_threats(_after_coup(state, idx), friend_idx))

    change_counts: List[Optional[ThreatCount]] = []
    for idx, player in enumerate(state.players):
        affordable = me.cash >= 2 or (me.cash >= 1 and idx == state.player_idx)
        if not player.is_alive or not affordable:
            change_counts.append(None)
        else:
            change_counts.append(count_threats(_after_team_change(state, idx), friend_idx))

    counts = [count_threats(state, friend_idx)] + coup_counts + change_counts

    best = keep_extremes(counts, lambda c: c.to_friend, maximize=False)
    if best.to_friend > 0:
        keep_extremes(counts, lambda c: c.to_enemies / c.to_friend, maximize=True)
        keep_extremes(counts, lambda c: c.to_friend_ais / c.to_friend, maximize=True)

    best = keep_extremes(counts, lambda c: c.to_friend_ais, maximize=False)
    if best.to_friend_ais > 0:
        keep_extremes(counts, lambda c: c.to_enemies / c.to_friend_ais, maximize=True)

    do_nothing = counts[0]
    coup_counts = counts[1:n + 1]
    change_counts = counts[n + 1:]

    if all(c is None for c in coup_counts) and all(c is None for c in change_counts):
        return TeamMove(action=DO_NOTHING, force=True)

    # Coup only when doing nothing is worse, soonest-acting player first
    if do_nothing is None:
        for offset in range(1, n):
            idx = (state.player_idx + offset) % n
            if coup_counts[idx] is not None:
                return TeamMove(action="coup", target=idx)

    strong = stronger_team(state)
    if change_counts[state.player_idx] is not None and strong and me.team != strong and alive_count(state) > 2:
        return TeamMove(action="change-team")

    if do_nothing is not None:
        return TeamMove(action=DO_NOTHING)

    if change_counts[state.player_idx] is not None:
        return TeamMove(action="change-team")

    # Players with no cash cannot convert back; prefer the most influence, acting soonest
    target = None
    most_influence = 0
    for offset in range(1, n):
        idx = (state.player_idx + offset) % n
        player = state.players[idx]
        if change_counts[idx] is not None and player.cash == 0 and player.influence_count > most_influence:
            target = idx
            most_influence = player.influence_count
    if target is not None:
        return TeamMove(action="convert", target=target)

    # Whoever acts last stays converted the longest
    for offset in range(1, n):
        idx = (state.player_idx - offset) % n
        if change_counts[idx] is not None:
            return TeamMove(action="convert", target=idx)

    return TeamMove(action=DO_NOTHING)
