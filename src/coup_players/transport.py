"""
Boundary to the game host: command submission, chat, and the privileged
hand queries used by a bot that plays as someone's secret friend.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..coup_core.errors import CommandRejectedError
from ..coup_core.models import Command, Influence, Role
from ..coup_core.policy import FriendOracle

logger = logging.getLogger(__name__)


class GameProxy:
    """What a player shell needs from the game host."""

    async def command(self, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def send_chat_message(self, message: str) -> None:
        raise NotImplementedError


class HttpGameProxy(GameProxy):
    """
    Sends commands and chat to the game host over HTTP.

    A 409 response means the command was stale or illegal and is raised as
    CommandRejectedError; other failures surface as httpx errors.
    """

    def __init__(self, base_url: str, player_token: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.player_token = player_token
        self._client = client

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client

    def _headers(self) -> Dict[str, str]:
        if self.player_token:
            return {"Authorization": f"Bearer {self.player_token}"}
        return {}

    async def command(self, payload: Dict[str, Any]) -> None:
        client = self._ensure_client()
        response = await client.post(
            f"{self.base_url}/command", json=payload, headers=self._headers()
        )
        if response.status_code == 409:
            raise CommandRejectedError(
                response.text or "Command rejected", state_id=payload.get("state_id")
            )
        response.raise_for_status()

    async def send_chat_message(self, message: str) -> None:
        client = self._ensure_client()
        response = await client.post(
            f"{self.base_url}/chat", json={"message": message}, headers=self._headers()
        )
        response.raise_for_status()

    async def close(self):
        if self._client:
            await self._client.aclose()


class HttpFriendOracle(FriendOracle):
    """
    Privileged hand queries against the game host.

    Synchronous because the heuristic policy consults it mid-decision.
    """

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=10.0)

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = self._client.post(f"{self.base_url}/oracle/{path}", json=body)
        response.raise_for_status()
        return response.json()

    def has_role(self, player_idx: int, role: Role) -> bool:
        data = self._post("has-role", {"player_idx": player_idx, "role": role.value})
        return bool(data.get("has_role"))

    def change_influence(self, player_idx: int, roles: List[Role]) -> Optional[List[Influence]]:
        data = self._post("change-influence", {
            "player_idx": player_idx, "roles": [role.value for role in roles]
        })
        influence = data.get("influence")
        if not influence:
            return None
        return [Influence.model_validate(item) for item in influence]

    def discard_role(self, player_idx: int, role: Role) -> List[Influence]:
        data = self._post("discard-role", {"player_idx": player_idx, "role": role.value})
        return [Influence.model_validate(item) for item in data.get("influence", [])]

    def close(self):
        self._client.close()


async def send_command(proxy: GameProxy, command: Command) -> bool:
    """
    Submit a command. Rejections and transport failures are logged, not raised:
    the player just waits for the next state.

    Returns:
        True if the host accepted the command
    """
    try:
        await proxy.command(command.payload())
        return True
    except CommandRejectedError as e:
        logger.warning(f"Command {command.command.value} rejected (state {e.state_id}): {e}")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to send {command.command.value}: {e}")
    return False
