"""Exceptions raised by tweenline.

Construction errors (DefinitionError and subclasses) are raised while a
timeline, transition table or animator is being built, so a malformed
definition never reaches playback. Usage errors (TransitionError) are raised
by calls on a live animator and leave it unchanged.
"""

from __future__ import annotations

from typing import Any


class AnimationError(Exception):
    """Base class for all tweenline errors."""


class DefinitionError(AnimationError, ValueError):
    """Invalid timeline/animator definition."""


class TimelineError(DefinitionError):
    """Invalid keyframes, timing or endpoint coverage."""


class AnimatorError(DefinitionError):
    """Invalid states, nominal values or transition table."""


class InterpolationError(DefinitionError, TypeError):
    """A field value does not support interpolation."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            f"Field '{field}' has non-interpolatable value {value!r} "
            f"of type {type(value).__name__}"
        )
        self.field = field
        self.value = value


class TransitionError(AnimationError, LookupError):
    """No transition can take the animator from `source` to `target`."""

    def __init__(self, source: Any, target: Any, message: str | None = None):
        if message is None:
            message = f"No transition registered from {source!r} to {target!r}"
        super().__init__(message)
        self.source = source
        self.target = target
