"""Exception types raised by the layout engine.

Schema and brush usage errors are precondition violations and propagate
unchanged. Generation failures carry a short, user-presentable message and are
caught once, by the caller that started the generation (see mapweave.tool).

Note that an incompatible generator is not an error: settings loading returns
None in that case.
"""

from __future__ import annotations


class MapweaveError(Exception):
    """Base class for all layout engine errors."""


class SchemaError(MapweaveError):
    """Raised when an option, choice or brush declaration is malformed."""


class InvalidChoiceError(MapweaveError):
    """Raised when a choice is not legal for its option.

    Attributes:
        option_label: Label of the offending option (its id when unlabelled).
    """

    def __init__(self, option_label: str, message: str | None = None) -> None:
        self.option_label = option_label
        super().__init__(message or f"Option `{option_label}` has illegal choice")


class NotRandomizableError(MapweaveError):
    """Raised when a random choice is requested for an option that has none."""


class BrushUsageError(MapweaveError):
    """Raised when a MultiBrush is built or painted in violation of its rules.

    This always indicates a bug in the calling generator.
    """


class GenerationFailure(MapweaveError):
    """Raised by a generator when its own semantic checks fail."""


class MismatchedPlayerActorError(GenerationFailure):
    """Raised when a generated actor is owned by a player that was not generated."""

    def __init__(self) -> None:
        super().__init__("Generator produced mismatching player and actor definitions.")
