"""
Errors raised by the bracket engine.

The engine raises before touching any state, so a caller that catches
BracketError can report the message and keep the bracket as it was.
"""


class BracketError(Exception):
    """Base class for rejected bracket operations."""


class InsufficientParticipants(BracketError):
    """Too few (or the wrong number of) participants to build a bracket."""


class InvalidWinner(BracketError):
    """The declared winner is not playing in the addressed match."""


class StaleMatchReference(BracketError):
    """The addressed round/match does not exist in the bracket."""
