"""Feedback signals for user actions."""

from .feedback import FeedbackKind, notify, set_feedback_emitter

__all__ = ["FeedbackKind", "notify", "set_feedback_emitter"]
