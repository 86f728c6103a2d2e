"""Error types raised by the question registry."""

from __future__ import annotations


class InterrogativeError(Exception):
    """Base class for errors raised by this package."""


class InvalidQuestionError(InterrogativeError, ValueError):
    """Raised when a question is constructed without a usable name or text."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"A question must have a non-empty {field}.")


__all__ = ["InterrogativeError", "InvalidQuestionError"]
