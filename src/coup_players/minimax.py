"""
Search-based bot player.

Searches on every state notification and answers as soon as the search is
done. The search runs in a worker thread so the server keeps serving
other requests meanwhile.
"""
import asyncio
import logging
from typing import Optional

from ..coup_core.config import SearchOptions
from ..coup_core.errors import GameRuleError, IllegalStateError
from ..coup_core.lookahead import CoupLookahead
from ..coup_core.models import GameState
from .transport import GameProxy, send_command

logger = logging.getLogger(__name__)


class MinimaxPlayer:
    player_type = "minimax"

    def __init__(self, proxy: GameProxy, options: Optional[SearchOptions] = None, name: str = "Minimax"):
        self.proxy = proxy
        self.name = name
        self.lookahead = CoupLookahead(options)
        self.state: Optional[GameState] = None

    async def on_state_change(self, state: GameState):
        self.state = state
        try:
            command = await asyncio.to_thread(self.lookahead.compute_best_move, state)
        except (IllegalStateError, GameRuleError) as e:
            logger.error(f"{self.name}: cannot search state {state.state_id}: {e}")
            return
        if command is None or state is not self.state:
            return
        logger.debug(f"{self.name}: {command.command.value} {command.action or ''}".rstrip())
        await send_command(self.proxy, command)

    def on_history_event(self, message: str, type: Optional[str] = None, group: Optional[int] = None):
        pass

    async def on_chat_message(self, player_idx: int, message: str):
        pass

    async def wait_idle(self):
        pass
