"""
Tests for claim and bluff tracking.
"""
from src.coup_core.beliefs import BeliefTracker, RoleClaim
from src.coup_core.history import (
    ChallengeEvent, InterrogationEvent, InterrogationOutcome, RevealEvent
)
from src.coup_core.models import Phase, PhaseName, RevealReason, Role
from tests.factories import action_response, block_response, make_state, player


def four_players():
    return [player("Me"), player("A"), player("B"), player("C")]


def test_track_claim_by_action_and_role(beliefs):
    state = make_state(four_players())
    beliefs.track_claim(state, 1, "tax")
    beliefs.track_claim(state, 1, Role.CONTESSA)
    beliefs.track_claim(state, 2, "income")
    beliefs.track_claim(state, 2, "foreign-aid")

    assert beliefs.claimed_roles(1) == [Role.CONTESSA, Role.DUKE]
    assert beliefs.claimed_roles(2) == []


def test_embezzle_claims_nothing(beliefs):
    state = make_state(four_players())
    beliefs.track_claim(state, 1, "embezzle")
    assert beliefs.claimed_roles(1) == []


def test_successful_challenge_moves_claim_to_called_bluffs(beliefs):
    players = four_players()
    state = make_state(players, phase=action_response(players, 1, "tax"))
    beliefs.track_claim(state, 1, "tax")
    beliefs.observe_phase(state)
    assert beliefs.last_claim == RoleClaim(1, Role.DUKE)

    # The reveal is requested before the challenge is narrated
    reveal = Phase(
        name=PhaseName.REVEAL_INFLUENCE, player_idx=1, action="tax",
        player_to_reveal=1, reason=RevealReason.SUCCESSFUL_ACTION_CHALLENGE
    )
    beliefs.observe_phase(make_state(players, phase=reveal))
    beliefs.apply(ChallengeEvent(successful=True))

    assert not beliefs.has_claimed(1, Role.DUKE)
    assert beliefs.was_caught(1, Role.DUKE)


def test_failed_challenge_keeps_claim(beliefs):
    players = four_players()
    state = make_state(players, phase=action_response(players, 1, "tax"))
    beliefs.track_claim(state, 1, "tax")
    beliefs.observe_phase(state)
    beliefs.apply(ChallengeEvent(successful=False))

    assert beliefs.has_claimed(1, Role.DUKE)
    assert not beliefs.was_caught(1, Role.DUKE)


def test_block_claim_is_the_blocker(beliefs):
    players = four_players()
    beliefs.observe_phase(make_state(players, phase=block_response(players, 0, 2, "steal", Role.CAPTAIN)))
    assert beliefs.last_claim == RoleClaim(2, Role.CAPTAIN)

    beliefs.observe_phase(make_state(players))
    assert beliefs.last_claim is None


def test_unchallengeable_actions_clear_pointer(beliefs):
    players = four_players()
    beliefs.observe_phase(make_state(players, phase=action_response(players, 1, "tax")))
    beliefs.observe_phase(make_state(players, phase=action_response(players, 1, "foreign-aid")))
    assert beliefs.last_claim is None

    beliefs.observe_phase(make_state(players, phase=action_response(players, 1, "embezzle")))
    assert beliefs.last_claim is None


def test_reveal_forgets_revealed_role(beliefs):
    state = make_state(four_players())
    beliefs.track_claim(state, 3, Role.CAPTAIN)
    beliefs.track_claim(state, 3, Role.DUKE)
    beliefs.apply(RevealEvent(player_idx=3, role=Role.CAPTAIN))
    assert beliefs.claimed_roles(3) == [Role.DUKE]


def test_reset_player_clears_claims_and_bluffs(beliefs):
    state = make_state(four_players())
    beliefs.track_claim(state, 0, "steal")
    beliefs.called_bluffs[0].add(Role.DUKE)
    beliefs.reset_player(0)
    assert beliefs.claimed_roles(0) == []
    assert not beliefs.was_caught(0, Role.DUKE)


def test_opponent_exchange_clears_their_claims_and_bluffs(beliefs):
    players = four_players()
    state = make_state(players, phase=action_response(players, 1, "tax"))
    beliefs.track_claim(state, 1, "tax")
    beliefs.track_claim(state, 1, Role.CAPTAIN)
    beliefs.called_bluffs[1].add(Role.ASSASSIN)
    beliefs.track_claim(state, 2, Role.CONTESSA)

    exchanging = Phase(name=PhaseName.EXCHANGE, player_idx=1, exchange_options=[Role.DUKE, Role.CAPTAIN])
    beliefs.observe_phase(make_state(players, phase=exchanging))

    assert beliefs.claimed_roles(1) == []
    assert not beliefs.was_caught(1, Role.ASSASSIN)
    assert beliefs.claimed_roles(2) == [Role.CONTESSA]
    assert beliefs.last_claim is None


def test_own_exchange_phase_keeps_our_claims(beliefs):
    players = four_players()
    beliefs.track_claim(make_state(players), 0, Role.DUKE)

    exchanging = Phase(name=PhaseName.EXCHANGE, player_idx=0, exchange_options=[Role.DUKE, Role.CAPTAIN])
    beliefs.observe_phase(make_state(players, phase=exchanging))

    assert beliefs.claimed_roles(0) == [Role.DUKE]


def test_interrogation_exposes_card_only_with_a_friend():
    players = [
        player("Me", [Role.DUKE, Role.CONTESSA], friend="Pal"),
        player("Pal"),
        player("Inquisitor"),
    ]
    interrogated = Phase(name=PhaseName.START_OF_TURN, player_idx=2, target=0)
    state = make_state(players, phase=interrogated)
    beliefs = BeliefTracker(3)

    beliefs.apply(InterrogationEvent(outcome=InterrogationOutcome.SAW, role=Role.CONTESSA), state)
    assert beliefs.last_seen_idx == 1
    beliefs.apply(InterrogationEvent(outcome=InterrogationOutcome.KEPT), state)
    assert beliefs.influences_seen == {1}

    beliefs.apply(InterrogationEvent(outcome=InterrogationOutcome.EXCHANGED), state)
    assert beliefs.last_seen_idx == -1

    loner = make_state([player("Me", [Role.DUKE, Role.CONTESSA]), player("Pal"), player("Inq")], phase=interrogated)
    fresh = BeliefTracker(3)
    fresh.apply(InterrogationEvent(outcome=InterrogationOutcome.SAW, role=Role.DUKE), loner)
    assert fresh.last_seen_idx == -1

    beliefs.reset_exposure()
    assert beliefs.influences_seen == set()
