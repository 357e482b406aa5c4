"""
Exceptions raised by the Coup decision core and its transport boundary.
"""


class CoupError(Exception):
    """Base class for all errors raised by the bots."""


class IllegalStateError(CoupError):
    """A snapshot reached logic that cannot handle its phase or hand size.

    This is a precondition violation: the decision is abandoned rather than
    guessing a command that might be illegal.
    """


class GameRuleError(CoupError):
    """The lookahead rules core refused to apply a command."""


class CommandRejectedError(CoupError):
    """The game host rejected a command (usually a stale state id)."""

    def __init__(self, message: str, state_id: int = None):
        super().__init__(message)
        self.state_id = state_id
