"""
tweenline - keyframe timelines and state animators for any render loop.

Usage:
    from tweenline import Timeline, Ease, Repeat, Animator, ANY

    # Standalone timeline
    pulse = (
        Timeline.builder()
        .duration(1.0)
        .repeat(Repeat.infinite())
        .keyframe(0.0, scale=1.0)
        .keyframe(0.5, scale=1.2, easing=Ease.OUT_QUAD)
        .keyframe(1.0, scale=1.0, easing=Ease.IN_QUAD)
        .build()
    )
    pulse.value_at(0.25).scale

    # State animator
    animator = (
        Animator.builder()
        .state("closed", height=0.0)
        .state("open", height=200.0)
        .transition(ANY, "open", Timeline.builder().duration(0.3).keyframe(1.0, height=200.0))
        .transition(ANY, "closed", Timeline.builder().duration(0.2).keyframe(1.0, height=0.0))
        .build()
    )
    animator.set_state("open")
    animator.tick(dt)
    animator.value().height

The library never schedules anything: the host loop calls tick()/update()
with elapsed seconds.
"""

from tweenline.ease import Ease, CubicBezier, EasingCurve, evaluate
from tweenline.errors import (
    AnimationError,
    DefinitionError,
    TimelineError,
    AnimatorError,
    InterpolationError,
    TransitionError,
)
from tweenline.lerp import lerp, register_lerp, is_interpolatable, Quaternion, Color
from tweenline.values import Values, Field, FieldSet
from tweenline.timeline import (
    Keyframe,
    Repeat,
    Phase,
    TimePosition,
    Timeline,
    TimelineBuilder,
    MergedTimeline,
)
from tweenline.animator import (
    ANY,
    Idle,
    Transitioning,
    TransitionTable,
    Animator,
    AnimatorBuilder,
)
from tweenline.player import TimelinePlayer, PlayerState
from tweenline.manager import AnimationManager, AnimatorBinding

__all__ = [
    # Easing
    "Ease",
    "CubicBezier",
    "EasingCurve",
    "evaluate",
    # Errors
    "AnimationError",
    "DefinitionError",
    "TimelineError",
    "AnimatorError",
    "InterpolationError",
    "TransitionError",
    # Interpolation
    "lerp",
    "register_lerp",
    "is_interpolatable",
    "Quaternion",
    "Color",
    # Values
    "Values",
    "Field",
    "FieldSet",
    # Timelines
    "Keyframe",
    "Repeat",
    "Phase",
    "TimePosition",
    "Timeline",
    "TimelineBuilder",
    "MergedTimeline",
    # Animator
    "ANY",
    "Idle",
    "Transitioning",
    "TransitionTable",
    "Animator",
    "AnimatorBuilder",
    # Playback
    "TimelinePlayer",
    "PlayerState",
    "AnimationManager",
    "AnimatorBinding",
]
