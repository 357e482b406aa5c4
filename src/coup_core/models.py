"""
Pydantic models for Coup game snapshots, commands and the action table.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    """Character cards"""
    DUKE = "duke"
    ASSASSIN = "assassin"
    CAPTAIN = "captain"
    CONTESSA = "contessa"
    AMBASSADOR = "ambassador"
    INQUISITOR = "inquisitor"
    UNKNOWN = "unknown"  # Hidden from this player's point of view


class PhaseName(str, Enum):
    """Decision points of a turn"""
    WAITING_FOR_PLAYERS = "waiting-for-players"
    START_OF_TURN = "start-of-turn"
    ACTION_RESPONSE = "action-response"
    FINAL_ACTION_RESPONSE = "final-action-response"
    BLOCK_RESPONSE = "block-response"
    REVEAL_INFLUENCE = "reveal-influence"
    EXCHANGE = "exchange"
    GAME_WON = "game-won"


class GameType(str, Enum):
    """Rule sets"""
    ORIGINAL = "original"
    INQUISITORS = "inquisitors"
    REFORMATION = "reformation"  # Team variant


class CommandType(str, Enum):
    """Command variants accepted by the game host"""
    PLAY_ACTION = "play-action"
    BLOCK = "block"
    ALLOW = "allow"
    CHALLENGE = "challenge"
    REVEAL = "reveal"
    EXCHANGE = "exchange"


class RevealReason(str, Enum):
    """Why a player must reveal; decides how the turn continues afterwards"""
    COUP = "coup"
    ASSASSINATE = "assassinate"
    SUCCESSFUL_ACTION_CHALLENGE = "successful-action-challenge"
    FAILED_ACTION_CHALLENGE = "failed-action-challenge"
    SUCCESSFUL_BLOCK_CHALLENGE = "successful-block-challenge"
    FAILED_BLOCK_CHALLENGE = "failed-block-challenge"


class ActionSpec(BaseModel):
    """Static description of an action"""
    name: str
    roles: List[Role] = Field(default_factory=list)  # Roles that may claim it
    cost: int = 0
    gain: int = 0
    targeted: bool = False
    blocked_by: List[Role] = Field(default_factory=list)
    inverse_claim: bool = False  # Claims NOT holding the role (embezzle)


ACTIONS: Dict[str, ActionSpec] = {
    spec.name: spec for spec in [
        ActionSpec(name="income", gain=1),
        ActionSpec(name="foreign-aid", gain=2, blocked_by=[Role.DUKE]),
        ActionSpec(name="coup", cost=7, targeted=True),
        ActionSpec(name="tax", roles=[Role.DUKE], gain=3),
        ActionSpec(
            name="assassinate", roles=[Role.ASSASSIN], cost=3,
            targeted=True, blocked_by=[Role.CONTESSA]
        ),
        ActionSpec(
            name="steal", roles=[Role.CAPTAIN], targeted=True,
            blocked_by=[Role.CAPTAIN, Role.AMBASSADOR, Role.INQUISITOR]
        ),
        ActionSpec(name="exchange", roles=[Role.AMBASSADOR, Role.INQUISITOR]),
        ActionSpec(name="interrogate", roles=[Role.INQUISITOR], targeted=True),
        ActionSpec(name="change-team", cost=1),
        ActionSpec(name="convert", cost=2, targeted=True),
        ActionSpec(name="embezzle", roles=[Role.DUKE], inverse_claim=True),
    ]
}


class Influence(BaseModel):
    """One card held by a player"""
    role: Role
    revealed: bool = False


class PlayerView(BaseModel):
    """A player as seen from one participant's snapshot"""
    name: str = ""
    cash: int = 2
    influence: List[Influence] = Field(default_factory=list)
    team: int = 0  # 1 = red, -1 = blue, 0 = no teams
    friend: Optional[str] = None  # Secret ally alias (team variant)
    ai: bool = False
    is_observer: bool = False

    @property
    def live_roles(self) -> List[Role]:
        """Roles of the unrevealed cards, in hand order."""
        if self.is_observer:
            return []
        return [inf.role for inf in self.influence if not inf.revealed]

    @property
    def influence_count(self) -> int:
        return len(self.live_roles)

    @property
    def is_alive(self) -> bool:
        return self.influence_count > 0


class Phase(BaseModel):
    """
    The pending decision.

    In block-response, `player_idx` is the original actor and `target` is the
    player claiming the blocking role.
    """
    name: PhaseName
    player_idx: Optional[int] = None
    target: Optional[int] = None
    action: Optional[str] = None
    blocking_role: Optional[Role] = None
    exchange_options: List[Role] = Field(default_factory=list)
    player_to_reveal: Optional[int] = None
    reason: Optional[RevealReason] = None
    allowed: List[bool] = Field(default_factory=list)


class GameState(BaseModel):
    """Perspective-specific snapshot delivered to one participant"""
    state_id: int = 0
    player_idx: int  # Our own index
    players: List[PlayerView]
    phase: Phase
    roles: List[Role] = Field(default_factory=lambda: [
        Role.DUKE, Role.ASSASSIN, Role.CAPTAIN, Role.CONTESSA, Role.AMBASSADOR
    ])
    num_roles: int = 3  # Copies of each role in the deck
    game_type: GameType = GameType.ORIGINAL
    free_for_all: bool = True
    treasury_reserve: int = 0

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def me(self) -> PlayerView:
        return self.players[self.player_idx]

    @property
    def is_reformation(self) -> bool:
        return self.game_type == GameType.REFORMATION


class Command(BaseModel):
    """The only way a bot changes the game"""
    command: CommandType
    action: Optional[str] = None
    target: Optional[int] = None
    blocking_role: Optional[Role] = None
    role: Optional[Role] = None
    roles: List[Role] = Field(default_factory=list)
    state_id: Optional[int] = None

    def payload(self) -> Dict[str, Any]:
        """JSON-ready dict for the game host (drops unset fields)."""
        data = self.model_dump(mode="json", exclude_none=True)
        if not self.roles:
            data.pop("roles", None)
        return data

    def key(self) -> tuple:
        """Hashable identity ignoring the state id."""
        return (
            self.command, self.action, self.target, self.blocking_role,
            self.role, tuple(sorted(r.value for r in self.roles))
        )


def claimed_role(state: GameState, action_name: str) -> Optional[Role]:
    """
    Role claimed by playing an action in this game.

    Exchange may be claimed by either ambassador or inquisitor; the one in
    play is used. Characterless actions return None.
    """
    spec = ACTIONS.get(action_name)
    if spec is None or not spec.roles:
        return None
    for role in spec.roles:
        if role in state.roles:
            return role
    return None
