"""Feedback signals (haptics on the device) fired after user actions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional


class FeedbackKind(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    SUCCESS = "success"


FeedbackEmitter = Callable[[FeedbackKind, Dict[str, object]], None]

_emitter: Optional[FeedbackEmitter] = None
_logger = logging.getLogger("golfbrain.telemetry.feedback")


def set_feedback_emitter(candidate: FeedbackEmitter | None) -> None:
    """Register the callable that delivers feedback signals."""

    global _emitter
    _emitter = candidate if callable(candidate) else None


def reset_feedback_emitter() -> None:
    set_feedback_emitter(None)


def notify(kind: FeedbackKind | str, **context: object) -> None:
    kind = FeedbackKind(kind)
    if not _emitter:
        _logger.debug("feedback emitter not configured for %s", kind.value)
        return
    try:
        _emitter(kind, dict(context))
    except Exception:  # pragma: no cover - defensive logging only
        _logger.exception("failed to emit feedback %s", kind.value)


__all__ = [
    "FeedbackKind",
    "FeedbackEmitter",
    "set_feedback_emitter",
    "reset_feedback_emitter",
    "notify",
]
