"""
Tests for the Coup bindings of the search engine.
"""
import pytest

from src.coup_core.config import SearchOptions
from src.coup_core.lookahead import WIN_SCORE, CoupLookahead
from src.coup_core.models import Command, CommandType, Phase, PhaseName, RevealReason, Role
from src.coup_core.moves import make_position
from tests.factories import action_response, make_state, player, reformation


def test_coups_last_card_for_the_win():
    players = [
        player("Me", [Role.DUKE, Role.CAPTAIN], cash=7),
        player("Opp", [Role.UNKNOWN], dead=[Role.CONTESSA], cash=1),
    ]
    state = make_state(players, state_id=12)
    move = CoupLookahead(SearchOptions(max_depth=3, random_seed=1)).compute_best_move(state)

    assert move.command == CommandType.PLAY_ACTION
    assert move.action == "coup"
    assert move.target == 1
    assert move.state_id == 12


def test_no_move_when_nothing_pending():
    players = [player("Me"), player("Opp")]
    state = make_state(players, phase=Phase(name=PhaseName.START_OF_TURN, player_idx=1))
    assert CoupLookahead().compute_best_move(state) is None


def test_forced_reveal_picks_a_card():
    players = [player("Me", [Role.DUKE, Role.CAPTAIN]), player("Opp", cash=0)]
    phase = Phase(
        name=PhaseName.REVEAL_INFLUENCE, player_idx=1, target=0, action="coup",
        player_to_reveal=0, reason=RevealReason.COUP
    )
    move = CoupLookahead(SearchOptions(max_depth=2, random_seed=3)).compute_best_move(
        make_state(players, phase=phase)
    )
    assert move.command == CommandType.REVEAL
    assert move.role in (Role.DUKE, Role.CAPTAIN)


def test_evaluation_is_relative_strength():
    lookahead = CoupLookahead()
    players = [
        player("Me", [Role.DUKE, Role.CAPTAIN], cash=4),
        player("A", cash=2),
        player("B", [Role.UNKNOWN], dead=[Role.DUKE], cash=6),
    ]
    position = make_position(make_state(players), 0)
    # 24 - mean(22, 16)
    assert lookahead.evaluate(position, 0) == 5.0

    players[1] = player("A", [], dead=[Role.DUKE, Role.DUKE])
    players[2] = player("B", [], dead=[Role.DUKE, Role.DUKE])
    assert lookahead.evaluate(make_position(make_state(players), 0), 0) == WIN_SCORE
    assert lookahead.evaluate(make_position(make_state(players), 0), 1) == -WIN_SCORE


def test_actions_outside_the_deck_are_not_considered():
    players = [player("Me", cash=2), player("Opp")]
    state = make_state(players, **reformation())
    moves = CoupLookahead().get_possible_moves(make_position(state, 0))
    actions = {m.action for m in moves}

    assert "exchange" in actions
    assert "tax" in actions
    state.roles = [Role.CAPTAIN, Role.CONTESSA, Role.ASSASSIN]
    actions = {m.action for m in CoupLookahead().get_possible_moves(make_position(state, 0))}
    assert "exchange" not in actions
    assert "tax" not in actions
    assert "income" in actions


def test_challenge_moves_branch_into_two_worlds():
    players = [player("Me", [Role.CAPTAIN, Role.CONTESSA]), player("Opp")]
    state = make_state(players, phase=action_response(players, 1, "tax"))
    lookahead = CoupLookahead()
    lookahead.ai_player_idx = 0
    moves = lookahead.get_possible_moves(make_position(state, 0))
    challenge = [m for m in moves if m.command == CommandType.CHALLENGE][0]

    outcome = lookahead.apply_move(make_position(state, 0), challenge)
    assert len(outcome.branches) == 2

    allow = [m for m in moves if m.command == CommandType.ALLOW][0]
    outcome = lookahead.apply_move(make_position(state, 0), allow)
    assert len(outcome.branches) == 1
    assert outcome.branches[0].position.state.players[1].cash == 5


def test_partial_allow_is_a_free_ply():
    players = [player("Me"), player("A"), player("B")]
    state = make_state(players, phase=action_response(players, 0, "tax"))
    lookahead = CoupLookahead()
    allow = Command(command=CommandType.ALLOW)

    first = make_position(state, 1)
    after_first = lookahead.apply_move(first, allow).branches[0].position
    assert after_first.current_player == 2
    assert lookahead.is_free_ply(first, allow, after_first)

    after_last = lookahead.apply_move(after_first, allow).branches[0].position
    assert after_last.state.phase.name == PhaseName.START_OF_TURN
    assert not lookahead.is_free_ply(after_first, allow, after_last)


@pytest.mark.parametrize("seed", range(3))
def test_duke_taxes_at_a_full_table(seed):
    players = [player("Me", [Role.DUKE, Role.CAPTAIN])] + [player(f"Opp{idx}") for idx in range(1, 6)]
    state = make_state(players)
    move = CoupLookahead(SearchOptions(random_seed=seed)).compute_best_move(state)

    assert move.command == CommandType.PLAY_ACTION
    assert move.action == "tax"
