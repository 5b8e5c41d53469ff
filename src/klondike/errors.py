"""Errors raised by the rules engine."""

from __future__ import annotations

from typing import Optional


class RulesError(Exception):
    kind = "unknown"

    def __init__(self, reason: str, field: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.field = field

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RulesError):
            return NotImplemented
        return (self.kind, self.field, self.reason) == (other.kind, other.field, other.reason)

    def __hash__(self) -> int:
        return hash((self.kind, self.field, self.reason))

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.reason}"
        return self.reason

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class InvalidInput(RulesError):
    kind = "invalid_input"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason, field=field)


class InvalidMove(RulesError):
    kind = "invalid_move"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)


class UnknownError(RulesError):
    kind = "unknown"
