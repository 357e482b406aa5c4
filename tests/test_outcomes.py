"""
Tests for challenge outcome projection.
"""
import pytest

from src.coup_core.errors import IllegalStateError
from src.coup_core.models import Command, CommandType, PhaseName, RevealReason, Role
from src.coup_core.moves import make_position
from src.coup_core.outcomes import challenged_claim, project_challenge
from src.coup_core.rules import GameCore
from tests.factories import action_response, block_response, make_state, player

CHALLENGE = Command(command=CommandType.CHALLENGE)


def test_challenge_of_opponent_splits_into_weighted_worlds():
    """Challenging a hidden hand: success first, then failure, at public base rates."""
    players = [player("Me", [Role.CAPTAIN, Role.CONTESSA]), player("Opp"), player("Other")]
    state = make_state(players, phase=action_response(players, 1, "tax"))

    outcome = project_challenge(make_position(state, 0), CHALLENGE, GameCore(), ai_player_idx=0)
    success, failure = outcome.branches

    assert (success.likelihood, success.likelihood_ai) == (0.36, 0.36)
    assert (failure.likelihood, failure.likelihood_ai) == (0.64, 0.64)

    assert success.position.state.phase.reason == RevealReason.SUCCESSFUL_ACTION_CHALLENGE
    assert success.position.current_player == 1
    assert failure.position.state.phase.reason == RevealReason.FAILED_ACTION_CHALLENGE
    assert failure.position.current_player == 0
    # The original snapshot is untouched
    assert state.phase.name == PhaseName.ACTION_RESPONSE


def test_single_card_uses_single_card_rates():
    players = [player("Me"), player("Opp", [Role.UNKNOWN], dead=[Role.DUKE])]
    state = make_state(players, phase=action_response(players, 1, "tax"))
    outcome = project_challenge(make_position(state, 0), CHALLENGE, GameCore(), ai_player_idx=0)
    assert [b.likelihood for b in outcome.branches] == [0.2, 0.8]


def test_searcher_knows_its_own_honesty():
    players = [player("Me", [Role.DUKE, Role.CAPTAIN]), player("Opp")]
    state = make_state(players, phase=action_response(players, 0, "tax"))
    outcome = project_challenge(make_position(state, 1), CHALLENGE, GameCore(), ai_player_idx=0)
    assert [b.likelihood_ai for b in outcome.branches] == [0.0, 1.0]

    bluffing = make_state(
        [player("Me", [Role.CAPTAIN, Role.CONTESSA]), player("Opp")],
        phase=action_response(players, 0, "tax"),
    )
    outcome = project_challenge(make_position(bluffing, 1), CHALLENGE, GameCore(), ai_player_idx=0)
    assert [b.likelihood_ai for b in outcome.branches] == [1.0, 0.0]


def test_block_claim_is_the_blocker_role():
    players = [player("Actor"), player("Blocker")]
    state = make_state(players, phase=block_response(players, 0, 1, "steal", Role.AMBASSADOR))
    assert challenged_claim(state) == (1, Role.AMBASSADOR, False)

    outcome = project_challenge(make_position(state, 0), CHALLENGE, GameCore(), ai_player_idx=0)
    success, failure = outcome.branches
    assert success.position.state.phase.player_to_reveal == 1
    assert failure.position.state.phase.player_to_reveal == 0


def test_embezzle_claim_is_inverted():
    players = [player("Me"), player("Opp")]
    state = make_state(players, phase=action_response(players, 1, "embezzle"))
    assert challenged_claim(state) == (1, Role.DUKE, True)

    outcome = project_challenge(make_position(state, 0), CHALLENGE, GameCore(), ai_player_idx=0)
    success, failure = outcome.branches
    assert success.position.state.players[1].live_roles == [Role.DUKE, Role.DUKE]
    assert success.position.state.phase.player_to_reveal == 1
    assert failure.position.state.phase.player_to_reveal == 0


def test_unchallengeable_phase_raises():
    players = [player("Me"), player("Opp")]
    state = make_state(players, phase=action_response(players, 1, "foreign-aid"))
    with pytest.raises(IllegalStateError):
        challenged_claim(state)

    with pytest.raises(IllegalStateError):
        challenged_claim(make_state(players))
