"""
Typed history events.

The game host narrates what happened as text ("{2} revealed captain"). The
text is parsed once, here, so the decision logic only sees structured events.
"""
import logging
import re
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel

from .models import Role

logger = logging.getLogger(__name__)

REVEAL_PATTERN = re.compile(r"\{([0-9]+)\} revealed ([a-z]+)")
SAW_PATTERN = re.compile(r"\{([0-9]+)\} saw your ([a-z]+)")

INTERROGATE_TYPE = "interrogate"


class InterrogationOutcome(str, Enum):
    SAW = "saw"  # An inquisitor looked at one of our cards
    EXCHANGED = "exchanged"  # They made us exchange the card they saw
    KEPT = "kept"  # They let us keep it, so it stays exposed


class RevealEvent(BaseModel):
    player_idx: int
    role: Role


class ChallengeEvent(BaseModel):
    successful: bool


class InterrogationEvent(BaseModel):
    outcome: InterrogationOutcome
    role: Optional[Role] = None


HistoryEvent = Union[RevealEvent, ChallengeEvent, InterrogationEvent]


def _role(value: str) -> Optional[Role]:
    try:
        return Role(value)
    except ValueError:
        logger.debug(f"Ignoring unknown role in history: {value}")
        return None


def parse_history_event(message: str, type: Optional[str] = None, group: Optional[int] = None) -> List[HistoryEvent]:
    """
    Extract every event a history message describes.

    Args:
        message: Narrative text with player references like {3}
        type: Host-provided event type (only "interrogate" is used)
        group: Host-provided history group (unused by the decision logic)
    """
    events: List[HistoryEvent] = []

    match = REVEAL_PATTERN.search(message)
    if match:
        role = _role(match.group(2))
        if role is not None:
            events.append(RevealEvent(player_idx=int(match.group(1)), role=role))

    if " successfully challenged" in message:
        events.append(ChallengeEvent(successful=True))
    elif " challenged" in message:
        events.append(ChallengeEvent(successful=False))

    if type == INTERROGATE_TYPE:
        seen = SAW_PATTERN.search(message)
        if seen:
            events.append(InterrogationEvent(
                outcome=InterrogationOutcome.SAW, role=_role(seen.group(2))
            ))
        elif "exchange" in message:
            events.append(InterrogationEvent(outcome=InterrogationOutcome.EXCHANGED))
        else:
            events.append(InterrogationEvent(outcome=InterrogationOutcome.KEPT))

    return events
