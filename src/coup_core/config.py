"""
Tunable options for the bot players.

Defaults can be overridden per process through COUP_* environment variables
(a .env file is honoured) and per match through the game_start message.
"""
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env(name: str, cast, default):
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return cast(value)


class PolicyOptions(BaseModel):
    """Options for the heuristic player"""
    move_delay: int = Field(default=0, ge=0)  # How long to "think" before moving (ms)
    move_delay_spread: int = Field(default=0, ge=0)  # Random spread around move_delay (ms)
    search_horizon: int = Field(default=7, ge=0)  # Steps simulated in an end-game
    chance_to_bluff: float = Field(default=0.5, ge=0.0, le=1.0)  # Fraction of games with bluffing
    chance_to_challenge: float = Field(default=0.1, ge=0.0, le=1.0)  # Fraction of turns with a random challenge
    random_seed: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "PolicyOptions":
        values: Dict[str, Any] = {
            "move_delay": _env("COUP_MOVE_DELAY", int, 0),
            "move_delay_spread": _env("COUP_MOVE_DELAY_SPREAD", int, 0),
            "search_horizon": _env("COUP_SEARCH_HORIZON", int, 7),
            "chance_to_bluff": _env("COUP_CHANCE_TO_BLUFF", float, 0.5),
            "chance_to_challenge": _env("COUP_CHANCE_TO_CHALLENGE", float, 0.1),
            "random_seed": _env("COUP_RANDOM_SEED", int, None),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class SearchOptions(BaseModel):
    """Options for the search player"""
    max_depth: int = Field(default=4, ge=1)  # Plies searched; an allow that leaves others to respond is free
    random_seed: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "SearchOptions":
        values: Dict[str, Any] = {
            "max_depth": _env("COUP_SEARCH_DEPTH", int, 4),
            "random_seed": _env("COUP_RANDOM_SEED", int, None),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
