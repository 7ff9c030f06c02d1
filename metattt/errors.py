"""
metattt Error Hierarchy

Unified exception hierarchy for consistent error handling across the codebase.
All custom exceptions inherit from MetaTTTError for easy catching and filtering.

Usage:
    from metattt.errors import IllegalMoveError, InvalidPathError

    try:
        state = GameEngine.apply_move(state, path)
    except IllegalMoveError as e:
        logger.warning(f"Illegal move: {e.message}, reason: {e.reason}")
"""

from __future__ import annotations

from typing import Any

__all__ = [
    # AI errors
    "AIError",
    "AITimeoutError",
    "ConfigurationError",
    "IllegalMoveError",
    "InvalidPathError",
    "InvalidStateError",
    # Base error
    "MetaTTTError",
    "NoLegalMovesError",
    "ParseError",
    "PonderingError",
    # Game rules errors
    "RulesViolationError",
    # Validation errors
    "ValidationError",
]


class MetaTTTError(Exception):
    """Base exception for all metattt errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "METATTT_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(MetaTTTError):
    """Move rejected by the game rules."""
    code: str = "RULES_VIOLATION"


class IllegalMoveError(RulesViolationError):
    """Well-formed move that cannot be played in the current position.

    Raised when a path targets an occupied cell or a sub-board that is
    already decided. Recoverable for interactive players, who are asked
    again; search players only ever emit moves from ``legal_moves``.

    Attributes:
        path: The offending move path
        reason: Short machine-friendly reason (e.g. "occupied")
    """
    code: str = "ILLEGAL_MOVE"

    def __init__(
        self,
        message: str,
        path: tuple[int, ...] | None = None,
        reason: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.path = path
        self.reason = reason
        if path is not None:
            self.context["path"] = list(path)
        if reason:
            self.context["reason"] = reason


class NoLegalMovesError(RulesViolationError):
    """A player was asked to move in a finished game."""
    code: str = "NO_LEGAL_MOVES"


class InvalidStateError(MetaTTTError):
    """Corrupted or unexpected game state.

    Raised when the game state is in an invalid configuration that
    should not be possible through normal gameplay.
    """
    code: str = "INVALID_STATE"


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(MetaTTTError):
    """Base class for validation errors."""
    code: str = "VALIDATION_ERROR"


class InvalidPathError(ValidationError):
    """Malformed move path: wrong length or index outside 0..8.

    Always a caller bug. Fatal to the offending call, never to the process.
    """
    code: str = "INVALID_PATH"

    def __init__(
        self,
        message: str,
        path: Any | None = None,
        depth: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if path is not None:
            self.context["path"] = path
        if depth is not None:
            self.context["depth"] = depth


class ParseError(ValidationError):
    """Raw human input could not be turned into a move path."""
    code: str = "PARSE_ERROR"

    def __init__(
        self,
        message: str,
        raw_input: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if raw_input is not None:
            self.context["raw_input"] = raw_input


class ConfigurationError(ValidationError):
    """Invalid configuration."""
    code: str = "CONFIGURATION_ERROR"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(MetaTTTError):
    """Base class for AI-related errors."""
    code: str = "AI_ERROR"


class AITimeoutError(AIError):
    """AI search exceeded time limit.

    Raised when the background search does not hand over a move within
    the allowed latency after its deadline.
    """
    code: str = "AI_TIMEOUT"

    def __init__(
        self,
        message: str,
        time_limit_ms: int | None = None,
        actual_time_ms: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if time_limit_ms:
            self.context["time_limit_ms"] = time_limit_ms
        if actual_time_ms:
            self.context["actual_time_ms"] = actual_time_ms


class PonderingError(AIError):
    """The background search task cannot serve a request.

    Raised when the pondering thread has already shut down or died, so
    that callers never receive a stale move.

    Attributes:
        original_error: The exception that killed the worker, if any
    """
    code: str = "PONDERING_ERROR"

    def __init__(
        self,
        message: str,
        original_error: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.original_error = original_error
        if original_error:
            self.context["original_error"] = str(original_error)
