"""
Error taxonomy for the engine.

- InvalidArgumentError: caller supplied a bad value (empty/mismatched
  sequences, out-of-range config, unaffordable action)
- LookupFailure: an id reference is not in the supplied data tables
- ConnectivityViolation: a map failed the reachability invariant (a defect,
  surfaced by tests)
"""

from typing import Iterable, List


class PrimordialError(Exception):
    """Base class for every error raised by the engine."""


class InvalidArgumentError(PrimordialError, ValueError):
    """Raised when a caller passes a malformed or out-of-range argument."""


class EmptyInputError(InvalidArgumentError):
    """Raised when a random pick is asked to choose from nothing."""


class LookupFailure(PrimordialError, KeyError):
    """Raised when an id is missing from a content table."""

    def __init__(self, kind: str, key: str, context: str = ""):
        self.kind = kind
        self.key = key
        self.context = context
        message = f"Unknown {kind} id: {key!r}"
        if context:
            message += f" (referenced by {context})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class ConnectivityViolation(PrimordialError):
    """Raised when a generated map has nodes unreachable from the start."""

    def __init__(self, unreachable: Iterable[str]):
        self.unreachable: List[str] = sorted(unreachable)
        super().__init__(
            f"{len(self.unreachable)} unreachable map node(s): {', '.join(self.unreachable)}"
        )
