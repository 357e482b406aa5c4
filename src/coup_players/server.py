"""
A2A Server for Coup bot players.
"""
import argparse
import logging
import uvicorn

from a2a.server.apps import A2AStarletteApplication
from a2a.server.request_handlers import DefaultRequestHandler
from a2a.server.tasks import InMemoryTaskStore
from a2a.types import (
    AgentCapabilities,
    AgentCard,
    AgentSkill,
)

from .agent import PLAYER_TYPES
from .executor import CoupPlayerExecutor

DESCRIPTIONS = {
    "heuristic": "Rule-based Coup bot that bluffs, challenges and tracks claims",
    "minimax": "Search-based Coup bot using expectiminimax over hidden cards",
}


def create_app(agent_id: str, player_type: str, host: str, port: int, game_url: str = None, public_url: str = None):
    """
    Create A2A Starlette application.

    Args:
        agent_id: Unique identifier for this agent
        player_type: "heuristic" or "minimax"
        host: Host to bind the server
        port: Port to bind the server
        game_url: Base URL of the game host commands are sent to
        public_url: Public URL for the agent card (defaults to http://host:port)

    Returns:
        Starlette application instance
    """
    skill = AgentSkill(
        id=f"coup-{player_type}-player",
        name=f"Coup {player_type.title()} Player",
        description=DESCRIPTIONS[player_type],
        tags=["gaming", "social-deduction", "coup"],
    )

    card_url = public_url or f"http://{host}:{port}"
    card = AgentCard(
        name=agent_id,
        version="1.0.0",
        description=DESCRIPTIONS[player_type],
        url=card_url,
        protocol_version="0.3.0",
        skills=[skill],
        capabilities=AgentCapabilities(streaming=False),
        defaultInputModes=["text"],
        defaultOutputModes=["text"],
    )

    task_store = InMemoryTaskStore()
    executor = CoupPlayerExecutor(agent_id=agent_id, player_type=player_type, game_url=game_url)
    request_handler = DefaultRequestHandler(
        agent_executor=executor,
        task_store=task_store
    )

    a2a_app = A2AStarletteApplication(
        agent_card=card,
        http_handler=request_handler,
    )

    return a2a_app.build()


def main():
    """Main entry point for the Coup bot server."""
    parser = argparse.ArgumentParser(description="Coup Bot Player (A2A)")
    parser.add_argument("--player", type=str, choices=PLAYER_TYPES, default="heuristic", help="Bot type")
    parser.add_argument("--agent-id", type=str, default="coup-bot", help="Agent ID")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind")
    parser.add_argument("--port", type=int, default=8100, help="Port to bind")
    parser.add_argument("--game-url", type=str, default=None, help="Base URL of the game host")
    parser.add_argument("--public-url", type=str, default=None, help="Public URL for agent card")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    app = create_app(args.agent_id, args.player, args.host, args.port, args.game_url, args.public_url)

    card_url = args.public_url or f"http://{args.host}:{args.port}"
    print(f"🃏 Starting Coup {args.player} bot '{args.agent_id}' on {args.host}:{args.port}")
    print(f"📋 Agent Card: {card_url}/.well-known/agent-card.json")
    print(f"🔧 Protocol Version: 0.3.0")
    print("Ready to play Coup!")

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
