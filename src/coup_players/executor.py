"""
A2A executor for Coup bot players.

A bot server can sit at several tables at once. The game host opens one A2A
context per seat and sends every notification for that seat on it, so each
context gets its own CoupPlayerAgent with its own beliefs and bluff memory.
"""
import logging

from a2a.server.agent_execution import AgentExecutor, RequestContext
from a2a.server.events import EventQueue
from a2a.server.tasks import TaskUpdater
from a2a.types import (
    TaskState,
    UnsupportedOperationError,
    InvalidRequestError,
)
from a2a.utils.errors import ServerError
from a2a.utils import new_agent_text_message, new_task

from .agent import CoupPlayerAgent

logger = logging.getLogger(__name__)


TERMINAL_STATES = {
    TaskState.completed,
    TaskState.canceled,
    TaskState.failed,
    TaskState.rejected
}


class CoupPlayerExecutor(AgentExecutor):
    """
    Routes each notification to the seat its A2A context belongs to.

    New seats take the server-wide player type and game URL; a game_start
    message may still pick another player type for its match.
    """

    def __init__(self, agent_id: str = "coup-bot", player_type: str = "heuristic", game_url: str = None):
        self.agent_id = agent_id
        self.player_type = player_type
        self.game_url = game_url
        self.agents: dict[str, CoupPlayerAgent] = {}

    def seat_for(self, context_id: str) -> CoupPlayerAgent:
        """The agent playing the seat bound to `context_id`, created on first use."""
        agent = self.agents.get(context_id)
        if not agent:
            agent = CoupPlayerAgent(
                agent_id=f"{self.agent_id}-{len(self.agents) + 1}",
                player_type=self.player_type,
                game_url=self.game_url,
            )
            self.agents[context_id] = agent
            logger.info(f"New seat {agent.agent_id} for context {context_id}")
        return agent

    async def execute(self, context: RequestContext, event_queue: EventQueue) -> None:
        msg = context.message
        if not msg:
            raise ServerError(error=InvalidRequestError(message="Missing message"))

        task = context.current_task
        if task and task.status.state in TERMINAL_STATES:
            raise ServerError(error=InvalidRequestError(
                message=f"Task {task.id} already processed"
            ))

        if not task:
            task = new_task(msg)
            await event_queue.enqueue_event(task)

        context_id = task.context_id
        agent = self.seat_for(context_id)

        updater = TaskUpdater(event_queue, task.id, context_id)
        await updater.start_work()

        try:
            await agent.run(msg, updater)
            if not updater._terminal_state_reached:
                await updater.complete()
        except Exception as e:
            logger.error(f"Agent error: {e}", exc_info=True)
            await updater.failed(new_agent_text_message(
                f"Agent error: {e}",
                context_id=context_id,
                task_id=task.id
            ))

    async def cancel(self, context: RequestContext, event_queue: EventQueue) -> None:
        """Cancel operation not supported"""
        raise ServerError(error=UnsupportedOperationError())
