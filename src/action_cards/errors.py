"""Exceptions raised by the action card engine.

Only :class:`FatalPreconditionError` is allowed to abort a whole
resolution.  Everything that goes wrong for a single effect, target or
repetition is reported in the returned results instead.
"""


class ActionCardError(Exception):
    """Base exception for the action card engine."""


class FatalPreconditionError(ActionCardError):
    """The invocation cannot meaningfully continue (e.g. no acting actor)."""


class FormulaError(ActionCardError, ValueError):
    """A dice formula could not be parsed or evaluated."""


class DocumentNotFoundError(ActionCardError, KeyError):
    """A store operation referenced an actor or item that does not exist."""
