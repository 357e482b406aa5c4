"""
Coup bot agent - routes game notifications to a player shell.

Messages are JSON objects with a "type":
- game_start: creates the player (heuristic or minimax) for this match
- state: a GameState snapshot for this participant
- history: a narrative history event
- chat: a chat line from another participant
"""
import json
import logging
from typing import Any, Dict, Optional, Union

from a2a.server.tasks import TaskUpdater
from a2a.types import Message, Part, TextPart
from a2a.utils import get_message_text
from pydantic import ValidationError
from rich.console import Console

from ..coup_core.config import PolicyOptions, SearchOptions
from ..coup_core.models import GameState
from .chat import ChatResponder
from .heuristic import HeuristicPlayer
from .minimax import MinimaxPlayer
from .transport import GameProxy, HttpFriendOracle, HttpGameProxy

logger = logging.getLogger(__name__)
console = Console()

PLAYER_TYPES = ("heuristic", "minimax")


class CoupPlayerAgent:
    """
    One bot seat in one match.
    """

    def __init__(
        self,
        agent_id: str = "coup-bot",
        player_type: str = "heuristic",
        game_url: Optional[str] = None,
        proxy: Optional[GameProxy] = None
    ):
        if player_type not in PLAYER_TYPES:
            raise ValueError(f"Unknown player type: {player_type}")
        self.agent_id = agent_id
        self.player_type = player_type
        self.game_url = game_url
        self.proxy = proxy
        self.player: Optional[Union[HeuristicPlayer, MinimaxPlayer]] = None

    async def run(self, message: Message, updater: TaskUpdater) -> None:
        """
        Process an incoming A2A message and acknowledge it.

        Args:
            message: A2A Message with a JSON-encoded game notification
            updater: TaskUpdater for sending the response
        """
        response = await self.handle(get_message_text(message))
        await updater.add_artifact(
            [Part(root=TextPart(text=json.dumps(response)))]
        )

    async def handle(self, input_text: str) -> Dict[str, Any]:
        try:
            game_message = json.loads(input_text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse message: {e}")
            return {"status": "error", "message": f"Invalid JSON: {e}"}

        msg_type = game_message.get("type")
        logger.debug(f"Agent {self.agent_id} received: {msg_type}")

        handlers = {
            "game_start": self._handle_game_start,
            "state": self._handle_state,
            "history": self._handle_history,
            "chat": self._handle_chat,
        }
        handler = handlers.get(msg_type)
        if handler is None:
            return {"status": "acknowledged"}
        if msg_type != "game_start" and self.player is None:
            return {"status": "error", "message": "No game in progress"}
        try:
            return await handler(game_message)
        except ValidationError as e:
            logger.error(f"Invalid {msg_type} message: {e}")
            return {"status": "error", "message": f"Invalid {msg_type}: {e.error_count()} error(s)"}

    # =========================================================================
    # HANDLERS
    # =========================================================================

    async def _handle_game_start(self, message: Dict) -> Dict:
        """Create the player for a new match"""
        player_type = message.get("player", self.player_type)
        if player_type not in PLAYER_TYPES:
            return {"status": "error", "message": f"Unknown player type: {player_type}"}

        game_url = message.get("game_url", self.game_url)
        if self.proxy is None:
            if not game_url:
                return {"status": "error", "message": "No game_url to send commands to"}
            self.proxy = HttpGameProxy(game_url, player_token=message.get("player_token"))

        overrides = message.get("options", {})
        if player_type == "minimax":
            self.player = MinimaxPlayer(self.proxy, SearchOptions.from_env(**overrides))
        else:
            oracle = HttpFriendOracle(game_url) if message.get("friend") and game_url else None
            chat = ChatResponder() if message.get("chat", True) else None
            self.player = HeuristicPlayer(
                self.proxy,
                PolicyOptions.from_env(**overrides),
                oracle=oracle,
                chat=chat,
                name=message.get("name"),
            )

        console.print(f"[bold]{self.player.name}[/bold] joins as a {player_type} bot")
        return {"status": "ready", "name": self.player.name, "player": player_type}

    async def _handle_state(self, message: Dict) -> Dict:
        state = GameState.model_validate(message.get("state", {}))
        await self.player.on_state_change(state)
        return {"status": "acknowledged", "state_id": state.state_id}

    async def _handle_history(self, message: Dict) -> Dict:
        self.player.on_history_event(
            message.get("message", ""), message.get("event_type"), message.get("group")
        )
        return {"status": "acknowledged"}

    async def _handle_chat(self, message: Dict) -> Dict:
        await self.player.on_chat_message(message.get("player_idx", -1), message.get("message", ""))
        return {"status": "acknowledged"}
