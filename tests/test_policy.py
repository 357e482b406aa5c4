"""
Tests for the heuristic decision policy.

Most tests use a random source that never takes the occasional "surprise"
deviation, so the chosen move is the rule-based one.
"""
from src.coup_core.beliefs import BeliefTracker
from src.coup_core.config import PolicyOptions
from src.coup_core.models import CommandType, Influence, Phase, PhaseName, RevealReason, Role
from src.coup_core.policy import (
    Decision, FriendOracle, PolicyMemory, choose_exchange, decide, is_end_game,
    reveal_by_probability, should_bluff, should_challenge, take_role
)
from tests.factories import (
    NoDeviationRandom, action_response, block_response, make_state, player, reformation
)


def decision(state, beliefs=None, bluff=False, oracle=None, options=None, seed=3):
    return Decision(
        state=state,
        beliefs=beliefs or BeliefTracker(state.num_players),
        options=options or PolicyOptions(chance_to_challenge=0.0),
        rng=NoDeviationRandom(seed),
        memory=PolicyMemory(bluff_choice=bluff),
        oracle=oracle,
    )


class FakeOracle(FriendOracle):
    def __init__(self, holds=True):
        self.holds = holds
        self.changes = []

    def has_role(self, player_idx, role):
        return self.holds

    def change_influence(self, player_idx, roles):
        self.changes.append(roles)
        return [Influence(role=role) for role in roles]

    def discard_role(self, player_idx, role):
        return [Influence(role=Role.AMBASSADOR), Influence(role=Role.AMBASSADOR)]


# =============================================================================
# RESPONDING
# =============================================================================

def test_challenges_tax_that_would_win_the_end_game():
    players = [
        player("Me", [Role.CAPTAIN], dead=[Role.DUKE], cash=0),
        player("Opp", cash=5),
    ]
    d = decision(make_state(players, phase=action_response(players, 1, "tax")))

    command = decide(d)
    assert command.command == CommandType.CHALLENGE
    assert command.state_id == 1
    assert d.beliefs.has_claimed(1, Role.DUKE)


def test_bluffs_contessa_against_assassination_on_last_card():
    players = [
        player("Me", [Role.CAPTAIN], dead=[Role.DUKE], cash=0),
        player("Opp", cash=0),
        player("Other"),
    ]
    d = decision(make_state(players, phase=action_response(players, 1, "assassinate", target=0)))

    command = decide(d)
    assert command.command == CommandType.BLOCK
    assert command.blocking_role == Role.CONTESSA
    assert d.beliefs.has_claimed(0, Role.CONTESSA)


def test_blocks_with_a_role_we_hold():
    players = [player("Me", [Role.AMBASSADOR, Role.DUKE]), player("Opp"), player("Other")]
    d = decision(make_state(players, phase=action_response(players, 1, "steal", target=0)))

    command = decide(d)
    assert command.command == CommandType.BLOCK
    assert command.blocking_role == Role.AMBASSADOR


def test_challenges_block_when_every_copy_is_accounted_for():
    players = [
        player("Me", [Role.DUKE, Role.CAPTAIN]),
        player("Blocker", [Role.UNKNOWN], dead=[Role.DUKE]),
        player("Other", [Role.UNKNOWN], dead=[Role.DUKE]),
    ]
    d = decision(make_state(players, phase=block_response(players, 0, 1, "foreign-aid", Role.DUKE)))
    assert decide(d).command == CommandType.CHALLENGE


def test_challenges_known_bluffer():
    players = [player("Me"), player("Opp"), player("Other")]
    beliefs = BeliefTracker(3)
    beliefs.called_bluffs[1].add(Role.DUKE)
    d = decision(make_state(players, phase=action_response(players, 1, "tax")), beliefs=beliefs)
    assert should_challenge(d)


def test_embezzle_is_never_challenged():
    players = [player("Me"), player("Opp"), player("Other")]
    beliefs = BeliefTracker(3)
    beliefs.called_bluffs[1].add(Role.DUKE)
    state = make_state(players, phase=action_response(players, 1, "embezzle"), **reformation())
    assert not should_challenge(decision(state, beliefs=beliefs))


def test_allows_teammate_actions():
    players = [player("Me", team=1), player("Mate", team=1), player("Foe", team=-1)]
    state = make_state(players, phase=action_response(players, 1, "tax"), **reformation())
    assert decide(decision(state)).command == CommandType.ALLOW


def test_nothing_to_decide():
    players = [player("Me"), player("Opp")]
    phase = action_response(players, 1, "tax")
    phase.allowed[0] = True
    assert decide(decision(make_state(players, phase=phase))) is None

    start = Phase(name=PhaseName.START_OF_TURN, player_idx=1)
    assert decide(decision(make_state(players, phase=start))) is None


# =============================================================================
# FRIEND VARIANT
# =============================================================================

def test_friend_does_not_challenge_an_honest_claim():
    players = [
        player("Me", [Role.DUKE, Role.CAPTAIN], friend="Pal"),
        player("Pal", [Role.UNKNOWN], dead=[Role.DUKE]),
        player("Opp", [Role.UNKNOWN], dead=[Role.DUKE]),
    ]
    state = make_state(players, phase=action_response(players, 2, "tax"))
    assert decide(decision(state, oracle=FakeOracle(holds=True))).command == CommandType.ALLOW

    state = make_state(players, phase=action_response(players, 2, "tax"))
    assert decide(decision(state, oracle=FakeOracle(holds=False))).command == CommandType.CHALLENGE


def test_friend_swaps_an_unexposed_card():
    players = [player("Me", [Role.CONTESSA, Role.CAPTAIN], friend="Pal"), player("Pal"), player("Opp")]
    oracle = FakeOracle()
    beliefs = BeliefTracker(3)
    beliefs.influences_seen.add(0)
    d = decision(make_state(players), beliefs=beliefs, oracle=oracle)

    assert take_role(d, Role.DUKE)
    assert oracle.changes == [[Role.CONTESSA, Role.DUKE]]
    assert d.state.me.live_roles == [Role.CONTESSA, Role.DUKE]


def test_without_oracle_friend_plays_straight():
    players = [player("Me", [Role.CONTESSA, Role.CAPTAIN], friend="Pal"), player("Pal"), player("Opp")]
    d = decision(make_state(players))
    assert not d.has_friend
    assert not take_role(d, Role.DUKE)


# =============================================================================
# OUR TURN
# =============================================================================

def test_coups_strongest_with_ten_cash():
    players = [
        player("Me", [Role.DUKE, Role.CAPTAIN], cash=10),
        player("A", cash=1),
        player("B", [Role.UNKNOWN], dead=[Role.DUKE], cash=5),
    ]
    command = decide(decision(make_state(players)))
    assert (command.action, command.target) == ("coup", 1)


def test_taxes_with_a_duke():
    players = [player("Me", [Role.DUKE, Role.CONTESSA]), player("A"), player("B")]
    d = decision(make_state(players))
    command = decide(d)
    assert command.action == "tax"
    assert d.beliefs.has_claimed(0, Role.DUKE)


def test_captain_steals_from_the_richest_equal():
    players = [
        player("Me", [Role.CAPTAIN, Role.CONTESSA]),
        player("A", cash=0),
        player("B", cash=4),
    ]
    command = decide(decision(make_state(players)))
    assert (command.action, command.target) == ("steal", 2)


def test_assassinates_an_unprotected_opponent():
    players = [
        player("Me", [Role.ASSASSIN, Role.CONTESSA], cash=3),
        player("A", cash=1),
        player("B", cash=2),
    ]
    beliefs = BeliefTracker(3)
    beliefs.claims[2].add(Role.CONTESSA)
    command = decide(decision(make_state(players), beliefs=beliefs))
    assert (command.action, command.target) == ("assassinate", 1)


def test_exchanges_when_nothing_good_and_not_bluffing():
    players = [player("Me", [Role.CONTESSA, Role.CONTESSA]), player("A"), player("B")]
    assert decide(decision(make_state(players))).action == "exchange"


def test_bluffs_when_in_the_mood():
    players = [player("Me", [Role.CONTESSA, Role.CONTESSA]), player("A"), player("B")]
    command = decide(decision(make_state(players), bluff=True))
    assert command.action in ("steal", "tax")


def test_bluff_limited_to_two_roles():
    players = [player("Me", [Role.CONTESSA, Role.CONTESSA], cash=3), player("A"), player("B")]
    beliefs = BeliefTracker(3)
    beliefs.claims[0].update({Role.DUKE, Role.CAPTAIN})
    d = decision(make_state(players), beliefs=beliefs, bluff=True)

    assert not should_bluff(d, "assassinate")
    assert should_bluff(d, "tax")


def test_never_bluff_a_role_we_were_caught_with():
    players = [player("Me", [Role.CONTESSA, Role.CONTESSA]), player("A"), player("B")]
    beliefs = BeliefTracker(3)
    beliefs.called_bluffs[0].add(Role.DUKE)
    assert not should_bluff(decision(make_state(players), beliefs=beliefs, bluff=True), "tax")


def test_end_game_only_with_one_opponent():
    players = [player("Me"), player("A"), player("B", [], dead=[Role.DUKE, Role.DUKE])]
    assert is_end_game(decision(make_state(players)))
    players[2] = player("B")
    assert not is_end_game(decision(make_state(players)))


# =============================================================================
# REVEAL AND EXCHANGE
# =============================================================================

def test_reveals_last_card_and_forgets_claim():
    players = [player("Me", [Role.DUKE], dead=[Role.CAPTAIN]), player("Opp")]
    phase = Phase(
        name=PhaseName.REVEAL_INFLUENCE, player_idx=1, target=0, action="coup",
        player_to_reveal=0, reason=RevealReason.COUP
    )
    beliefs = BeliefTracker(2)
    beliefs.claims[0].add(Role.DUKE)
    command = decide(decision(make_state(players, phase=phase), beliefs=beliefs))

    assert command.command == CommandType.REVEAL
    assert command.role == Role.DUKE
    assert not beliefs.has_claimed(0, Role.DUKE)


def test_reveal_picks_a_held_card():
    players = [player("Me", [Role.DUKE, Role.AMBASSADOR]), player("Opp")]
    phase = Phase(
        name=PhaseName.REVEAL_INFLUENCE, player_idx=1, target=0, action="coup",
        player_to_reveal=0, reason=RevealReason.COUP
    )
    command = decide(decision(make_state(players, phase=phase)))
    assert command.role in (Role.DUKE, Role.AMBASSADOR)


def test_reveal_favours_the_least_valued_role():
    players = [player("Me", [Role.DUKE, Role.AMBASSADOR]), player("Opp")]
    phase = Phase(
        name=PhaseName.REVEAL_INFLUENCE, player_idx=1, target=0, action="coup",
        player_to_reveal=0, reason=RevealReason.COUP
    )
    d = decision(make_state(players, phase=phase), seed=11)
    picks = [reveal_by_probability(d).role for _ in range(4000)]

    # Ambassador weighs 9 against the duke's 3
    share = picks.count(Role.AMBASSADOR) / len(picks)
    assert 0.7 < share < 0.8


def exchange_phase(options):
    return Phase(name=PhaseName.EXCHANGE, player_idx=0, action="exchange", exchange_options=options)


def test_exchange_keeps_best_ranked_roles():
    players = [player("Me", [Role.AMBASSADOR, Role.CONTESSA]), player("Opp")]
    state = make_state(
        players, phase=exchange_phase([Role.AMBASSADOR, Role.CONTESSA, Role.CAPTAIN, Role.DUKE])
    )
    beliefs = BeliefTracker(2)
    beliefs.claims[0].add(Role.AMBASSADOR)
    beliefs.influences_seen.add(1)
    command = choose_exchange(decision(state, beliefs=beliefs))

    assert command.roles == [Role.DUKE, Role.CAPTAIN]
    assert beliefs.claimed_roles(0) == []
    assert beliefs.influences_seen == set()


def test_exchange_pads_with_duplicates():
    players = [player("Me", [Role.DUKE, Role.DUKE]), player("Opp")]
    state = make_state(players, phase=exchange_phase([Role.DUKE, Role.DUKE, Role.DUKE, Role.UNKNOWN]))
    assert choose_exchange(decision(state)).roles == [Role.DUKE, Role.DUKE]


def test_exchange_keeps_one_of_each_before_duplicates():
    players = [player("Me", [Role.CONTESSA, Role.CONTESSA]), player("Opp")]
    state = make_state(players, phase=exchange_phase([Role.DUKE, Role.DUKE, Role.CAPTAIN]))
    assert choose_exchange(decision(state)).roles == [Role.DUKE, Role.CAPTAIN]
