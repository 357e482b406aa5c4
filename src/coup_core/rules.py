"""
Lookahead rules core for Coup - applies commands to snapshots.

This is not the authoritative host: it exists so the search player can
produce successor positions, and so tests can run local matches. Every call
returns a fresh copy; the input snapshot is never modified.
"""
import logging
from typing import Callable, List, Optional

from .errors import GameRuleError
from .models import (
    ACTIONS, Command, CommandType, GameState, Phase, PhaseName,
    RevealReason, Role, claimed_role
)

logger = logging.getLogger(__name__)

EXCHANGE_DRAW_COUNT = 2
FORCED_COUP_CASH = 10


def draw_unknown() -> Role:
    """Card source used during search: the drawn card is never known."""
    return Role.UNKNOWN


def claim_is_truthful(state: GameState, player_idx: int, role: Role, inverse: bool = False) -> bool:
    """Whether a player's claim about a role is honest, given the snapshot's cards."""
    holds = role in state.players[player_idx].live_roles
    return not holds if inverse else holds


class GameCore:
    """
    Applies commands for every phase that accepts one.
    """

    def __init__(
        self,
        draw_role: Callable[[], Role] = draw_unknown,
        return_role: Optional[Callable[[Role], None]] = None
    ):
        """
        Args:
            draw_role: Returns the next card from the court deck
            return_role: Puts a card back into the court deck
        """
        self.draw_role = draw_role
        self.return_role = return_role or (lambda role: None)

    def apply_command(self, state: GameState, player_idx: int, command: Command) -> GameState:
        """
        Apply one command on behalf of a player.

        Returns:
            New snapshot with the command applied and state_id advanced

        Raises:
            GameRuleError: if the command is not legal for the phase
        """
        state = state.model_copy(deep=True)
        handlers = {
            PhaseName.START_OF_TURN: self._start_of_turn,
            PhaseName.ACTION_RESPONSE: self._action_response,
            PhaseName.FINAL_ACTION_RESPONSE: self._final_action_response,
            PhaseName.BLOCK_RESPONSE: self._block_response,
            PhaseName.REVEAL_INFLUENCE: self._reveal_influence,
            PhaseName.EXCHANGE: self._exchange,
        }
        handler = handlers.get(state.phase.name)
        if handler is None:
            raise GameRuleError(f"No commands accepted during {state.phase.name.value}")
        if not 0 <= player_idx < state.num_players or not state.players[player_idx].is_alive:
            raise GameRuleError(f"Player {player_idx} is not in the game")

        handler(state, player_idx, command)
        state.state_id += 1
        return state

    # =========================================================================
    # PHASE HANDLERS
    # =========================================================================

    def _start_of_turn(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        if player_idx != phase.player_idx:
            raise GameRuleError(f"Not player {player_idx}'s turn")
        if command.command != CommandType.PLAY_ACTION:
            raise GameRuleError(f"Expected play-action, got {command.command.value}")

        spec = ACTIONS.get(command.action)
        if spec is None:
            raise GameRuleError(f"Unknown action: {command.action}")
        player = state.players[player_idx]
        if spec.roles and claimed_role(state, spec.name) is None:
            raise GameRuleError(f"Action {spec.name} is not available in this game")
        if player.cash >= FORCED_COUP_CASH and spec.name != "coup":
            raise GameRuleError("Must coup with 10 or more cash")
        if player.cash < spec.cost:
            raise GameRuleError(f"Cannot afford {spec.name}")

        target = command.target
        if spec.targeted:
            if spec.name == "convert" and target == player_idx:
                pass
            elif target is None or target == player_idx:
                raise GameRuleError(f"Action {spec.name} needs another player as target")
            if not 0 <= target < state.num_players or not state.players[target].is_alive:
                raise GameRuleError(f"Invalid target: {target}")
        else:
            target = None

        player.cash -= spec.cost
        if spec.name in ("change-team", "convert"):
            state.treasury_reserve += spec.cost

        if spec.roles or spec.blocked_by:
            state.phase = Phase(
                name=PhaseName.ACTION_RESPONSE,
                player_idx=player_idx,
                target=target,
                action=spec.name,
                allowed=self._initial_allows(state, player_idx),
            )
        else:
            self._resolve_action(state, player_idx, spec.name, target)

    def _action_response(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        spec = ACTIONS[phase.action]
        if player_idx == phase.player_idx:
            raise GameRuleError("Cannot respond to own action")

        if command.command == CommandType.ALLOW:
            phase.allowed[player_idx] = True
            if all(phase.allowed):
                self._resolve_action(state, phase.player_idx, phase.action, phase.target)
        elif command.command == CommandType.BLOCK:
            self._block(state, player_idx, command)
        elif command.command == CommandType.CHALLENGE:
            role = claimed_role(state, spec.name)
            if role is None:
                raise GameRuleError(f"Action {spec.name} cannot be challenged")
            actor = phase.player_idx
            if claim_is_truthful(state, actor, role, spec.inverse_claim):
                if not spec.inverse_claim:
                    self._swap_role(state, actor, role)
                self._require_reveal(state, player_idx, RevealReason.FAILED_ACTION_CHALLENGE)
            else:
                self._require_reveal(state, actor, RevealReason.SUCCESSFUL_ACTION_CHALLENGE)
        else:
            raise GameRuleError(f"Unexpected {command.command.value} in action response")

    def _final_action_response(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        if player_idx != phase.target:
            raise GameRuleError("Only the target may respond now")

        if command.command == CommandType.ALLOW:
            self._resolve_action(state, phase.player_idx, phase.action, phase.target)
        elif command.command == CommandType.BLOCK:
            self._block(state, player_idx, command)
        else:
            raise GameRuleError(f"Unexpected {command.command.value} in final action response")

    def _block_response(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        blocker = phase.target
        if player_idx == blocker:
            raise GameRuleError("Cannot respond to own block")

        if command.command == CommandType.ALLOW:
            phase.allowed[player_idx] = True
            if all(phase.allowed):
                # The block stands
                self._end_turn(state, phase.player_idx)
        elif command.command == CommandType.CHALLENGE:
            if claim_is_truthful(state, blocker, phase.blocking_role):
                self._swap_role(state, blocker, phase.blocking_role)
                self._require_reveal(state, player_idx, RevealReason.FAILED_BLOCK_CHALLENGE)
            else:
                self._require_reveal(state, blocker, RevealReason.SUCCESSFUL_BLOCK_CHALLENGE)
        else:
            raise GameRuleError(f"Unexpected {command.command.value} in block response")

    def _reveal_influence(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        if player_idx != phase.player_to_reveal:
            raise GameRuleError(f"Player {player_idx} does not have to reveal")
        if command.command != CommandType.REVEAL:
            raise GameRuleError(f"Expected reveal, got {command.command.value}")

        player = state.players[player_idx]
        for influence in player.influence:
            if not influence.revealed and influence.role == command.role:
                influence.revealed = True
                break
        else:
            raise GameRuleError(f"Player {player_idx} has no unrevealed {command.role}")

        if self._winner(state) is not None:
            self._end_game(state)
            return

        reason = phase.reason
        if reason == RevealReason.FAILED_ACTION_CHALLENGE:
            self._continue_action(state)
        elif reason == RevealReason.SUCCESSFUL_BLOCK_CHALLENGE:
            self._resolve_action(state, phase.player_idx, phase.action, phase.target)
        else:
            self._end_turn(state, phase.player_idx)

    def _exchange(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        if player_idx != phase.player_idx:
            raise GameRuleError("Not this player's exchange")
        if command.command != CommandType.EXCHANGE:
            raise GameRuleError(f"Expected exchange, got {command.command.value}")

        player = state.players[player_idx]
        if len(command.roles) != player.influence_count:
            raise GameRuleError(f"Must keep exactly {player.influence_count} roles")
        remaining = list(phase.exchange_options)
        for role in command.roles:
            if role not in remaining:
                raise GameRuleError(f"Role {role.value} was not offered")
            remaining.remove(role)

        chosen = iter(command.roles)
        for influence in player.influence:
            if not influence.revealed:
                influence.role = next(chosen)
        for role in remaining:
            self.return_role(role)
        self._end_turn(state, player_idx)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _initial_allows(self, state: GameState, claimant: int) -> List[bool]:
        return [
            idx == claimant or not player.is_alive
            for idx, player in enumerate(state.players)
        ]

    def _block(self, state: GameState, player_idx: int, command: Command):
        phase = state.phase
        spec = ACTIONS[phase.action]
        blockers = [role for role in spec.blocked_by if role in state.roles]
        if command.blocking_role not in blockers:
            raise GameRuleError(f"Action {spec.name} cannot be blocked by {command.blocking_role}")
        if spec.targeted and player_idx != phase.target:
            raise GameRuleError("Only the target may block")

        state.phase = Phase(
            name=PhaseName.BLOCK_RESPONSE,
            player_idx=phase.player_idx,
            target=player_idx,
            action=phase.action,
            blocking_role=command.blocking_role,
            allowed=self._initial_allows(state, player_idx),
        )

    def _require_reveal(self, state: GameState, player_idx: int, reason: RevealReason):
        phase = state.phase
        state.phase = Phase(
            name=PhaseName.REVEAL_INFLUENCE,
            player_idx=phase.player_idx,
            target=phase.target,
            action=phase.action,
            blocking_role=phase.blocking_role,
            player_to_reveal=player_idx,
            reason=reason,
        )

    def _swap_role(self, state: GameState, player_idx: int, role: Role):
        """A proven claimant shuffles the card back and draws a replacement."""
        for influence in state.players[player_idx].influence:
            if not influence.revealed and influence.role == role:
                self.return_role(role)
                influence.role = self.draw_role()
                return

    def _continue_action(self, state: GameState):
        """After a failed challenge, the target of a blockable action still gets to block."""
        phase = state.phase
        spec = ACTIONS[phase.action]
        target = phase.target
        if spec.targeted and spec.blocked_by and target is not None and state.players[target].is_alive:
            state.phase = Phase(
                name=PhaseName.FINAL_ACTION_RESPONSE,
                player_idx=phase.player_idx,
                target=target,
                action=phase.action,
            )
        else:
            self._resolve_action(state, phase.player_idx, phase.action, target)

    def _resolve_action(self, state: GameState, actor: int, action_name: str, target: Optional[int]):
        spec = ACTIONS[action_name]
        player = state.players[actor]
        player.cash += spec.gain

        if action_name == "steal":
            victim = state.players[target]
            amount = min(2, victim.cash)
            victim.cash -= amount
            player.cash += amount
        elif action_name in ("coup", "assassinate"):
            if state.players[target].is_alive:
                state.phase = Phase(
                    name=PhaseName.REVEAL_INFLUENCE,
                    player_idx=actor,
                    target=target,
                    action=action_name,
                    player_to_reveal=target,
                    reason=RevealReason.COUP if action_name == "coup" else RevealReason.ASSASSINATE,
                )
                return
        elif action_name == "exchange":
            options = player.live_roles + [self.draw_role() for _ in range(EXCHANGE_DRAW_COUNT)]
            state.phase = Phase(
                name=PhaseName.EXCHANGE,
                player_idx=actor,
                action=action_name,
                exchange_options=options,
            )
            return
        elif action_name == "change-team":
            player.team *= -1
        elif action_name == "convert":
            state.players[target].team *= -1
        elif action_name == "embezzle":
            player.cash += state.treasury_reserve
            state.treasury_reserve = 0

        self._end_turn(state, actor)

    def _winner(self, state: GameState) -> Optional[int]:
        alive = [idx for idx, player in enumerate(state.players) if player.is_alive]
        if len(alive) <= 1:
            return alive[0] if alive else None
        if state.is_reformation and not state.free_for_all:
            teams = {state.players[idx].team for idx in alive}
            if len(teams) == 1:
                return alive[0]
        return None

    def _end_game(self, state: GameState):
        state.phase = Phase(name=PhaseName.GAME_WON, player_idx=self._winner(state))

    def _end_turn(self, state: GameState, actor: int):
        if self._winner(state) is not None:
            self._end_game(state)
            return
        next_idx = actor
        for _ in range(state.num_players):
            next_idx = (next_idx + 1) % state.num_players
            if state.players[next_idx].is_alive:
                break
        state.phase = Phase(name=PhaseName.START_OF_TURN, player_idx=next_idx)
