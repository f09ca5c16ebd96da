"""Define a minimal dataclass to represent the outcome of a knowledge query or update."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

OutputT = TypeVar("OutputT")
"""Type variable representing output data associated with an outcome."""


@dataclass(frozen=True)
class Outcome(Iterable, Generic[OutputT]):
    """An outcome (and optional output value) from a request to the knowledge service.

    On success the message is empty; on failure it describes what went wrong.
    """

    success: bool
    message: str = ""
    output: OutputT | None = None
    """Optional output value resulting from the request (defaults to None)."""

    @classmethod
    def ok(cls, output: OutputT | None = None) -> Outcome[OutputT]:
        """Construct a successful outcome carrying the given output."""
        return cls(True, "", output)

    @classmethod
    def failure(cls, message: str) -> Outcome[OutputT]:
        """Construct a failed outcome with the given error message."""
        return cls(False, message)

    def __iter__(self) -> Iterator:
        """Return an iterator over the values of the outcome (skips its output if it's None)."""
        if self.output is not None:
            return iter((self.success, self.message, self.output))

        return iter((self.success, self.message))
