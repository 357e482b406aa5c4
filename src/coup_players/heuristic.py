"""
Heuristic bot player.

Reacts to state notifications after a human-like thinking delay. A newer
state always supersedes a pending reaction, so no stale command is sent.
"""
import asyncio
import html
import logging
import random
import re
from typing import Dict, List, Optional

import httpx

from ..coup_core.beliefs import BeliefTracker
from ..coup_core.config import PolicyOptions
from ..coup_core.errors import IllegalStateError
from ..coup_core.history import parse_history_event
from ..coup_core.models import GameState, PhaseName
from ..coup_core.policy import Decision, FriendOracle, PolicyMemory, decide
from .chat import ChatResponder
from .names import random_name
from .transport import GameProxy, send_command

logger = logging.getLogger(__name__)

# "<name>, <message>" addresses a message to one player
ADDRESSED_PATTERN = re.compile(r"(.+?),(.+)", re.DOTALL)


class HeuristicPlayer:
    """
    Rule-based player owning its beliefs, bluff memory and random source.
    """

    player_type = "heuristic"

    def __init__(
        self,
        proxy: GameProxy,
        options: Optional[PolicyOptions] = None,
        oracle: Optional[FriendOracle] = None,
        chat: Optional[ChatResponder] = None,
        name: Optional[str] = None
    ):
        self.proxy = proxy
        self.options = options or PolicyOptions()
        self.oracle = oracle
        self.chat = chat
        self.rng = random.Random(self.options.random_seed)
        self.name = name or random_name(self.rng)

        self.state: Optional[GameState] = None
        self.beliefs = BeliefTracker()
        self.memory = PolicyMemory()
        self.need_reset = True
        self._pending: Optional[asyncio.Task] = None

        self.chat_history: List[str] = []
        self.chat_partners: Dict[int, bool] = {}

    def reset(self):
        """Start of a match."""
        self.beliefs.reset(self.state.num_players if self.state else 0)
        self.memory.reroll_bluff(self.options, self.rng)
        logger.debug(f"{self.name}: new match, bluffing={self.memory.bluff_choice}")

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================

    async def on_state_change(self, state: GameState):
        self.state = state
        self._cancel_pending()

        if state.phase.name == PhaseName.WAITING_FOR_PLAYERS:
            self.need_reset = True
            return
        # Reset when the game actually starts: the first state after waiting
        if self.need_reset:
            self.reset()
            self.need_reset = False

        self.beliefs.observe_phase(state)
        spread = self.options.move_delay_spread
        delay = self.rng.randint(
            max(0, self.options.move_delay - spread), self.options.move_delay + spread
        )
        self._pending = asyncio.create_task(self._decide_later(state, delay))

    def on_history_event(self, message: str, type: Optional[str] = None, group: Optional[int] = None):
        for event in parse_history_event(message, type, group):
            self.beliefs.apply(event, self.state)

    async def on_chat_message(self, player_idx: int, message: str):
        state = self.state
        if state is None or not 0 <= player_idx < state.num_players:
            return
        if state.players[player_idx].ai:
            return

        match = ADDRESSED_PATTERN.match(message)
        if match:
            addressee = match.group(1).strip().lower()
            self.chat_partners[player_idx] = addressee == state.me.name.lower()
            message = match.group(2)
        if not self.chat_partners.get(player_idx) or self.chat is None:
            return

        text = html.unescape(message).strip()
        reply = await self.chat.respond(self.name, text, self.chat_history)
        if not reply:
            return
        try:
            await self.proxy.send_chat_message(reply)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to send chat message: {e}")
            return
        self.chat_history.extend([text, reply])

    # =========================================================================
    # DECISIONS
    # =========================================================================

    def _cancel_pending(self):
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait_idle(self):
        """Wait for the pending reaction, if any, to finish."""
        task = self._pending
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _decide_later(self, state: GameState, delay_ms: int):
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)
        if state is not self.state:
            return
        try:
            await self.act(state)
        except Exception as e:
            logger.error(f"{self.name}: failed to act on state {state.state_id}: {e}", exc_info=True)

    async def act(self, state: GameState):
        """
        Decide on the given snapshot and send the command, if any.

        The decision runs in a worker thread, since the friend oracle blocks on
        HTTP. Nothing is sent if a newer state arrived in the meantime.
        """
        decision = Decision(
            state=state,
            beliefs=self.beliefs,
            options=self.options,
            rng=self.rng,
            memory=self.memory,
            oracle=self.oracle,
        )
        try:
            command = await asyncio.to_thread(decide, decision)
        except IllegalStateError as e:
            logger.error(f"{self.name}: cannot decide in state {state.state_id}: {e}")
            return
        except httpx.HTTPError as e:
            logger.warning(f"{self.name}: friend oracle unavailable: {e}")
            return
        if command is None or state is not self.state:
            return
        await send_command(self.proxy, command)
