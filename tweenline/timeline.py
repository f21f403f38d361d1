"""Keyframe timelines.

A Timeline maps elapsed time to a Values snapshot:

    timeline = (
        Timeline.builder()
        .duration(2.0)
        .repeat(Repeat.infinite())
        .keyframe(0.0, x=0.0, opacity=0.0)
        .keyframe(0.5, opacity=1.0, easing=Ease.OUT_QUAD)
        .keyframe(1.0, x=100.0, opacity=0.0)
        .build()
    )
    timeline.value_at(0.5).x   # -> 25.0

Keyframes sit at normalized offsets in [0, 1] of one cycle. A keyframe may
set only some fields; every field is interpolated between its own nearest
defined keyframes. The easing of a keyframe governs the segment leading into
it. Every animated field needs a value at offset 0 and at offset 1, either
from a keyframe or from the timeline's start/end fallback values.

Timelines are immutable once built and can be shared between players and
animators.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterable, Mapping

from tweenline.ease import Ease, EasingCurve, evaluate as ease_evaluate, is_easing
from tweenline.errors import TimelineError
from tweenline.lerp import lerp, require_interpolatable
from tweenline.values import Values

DEFAULT_DURATION = 1.0


@dataclass(frozen=True)
class Repeat:
    """
    Looping policy: number of cycles to play, None for infinite.

    Repeat.once() plays one cycle, Repeat.count(3) plays three cycles in
    total, Repeat.infinite() never ends.
    """

    cycles: int | None = 1

    def __post_init__(self):
        if self.cycles is None:
            return
        if isinstance(self.cycles, bool) or not isinstance(self.cycles, int) or self.cycles < 1:
            raise TimelineError(f"Repeat count must be a positive integer, got {self.cycles!r}")

    @classmethod
    def once(cls) -> "Repeat":
        return cls(1)

    @classmethod
    def count(cls, n: int) -> "Repeat":
        return cls(n)

    @classmethod
    def infinite(cls) -> "Repeat":
        return cls(None)

    @property
    def is_infinite(self) -> bool:
        return self.cycles is None

    def __repr__(self) -> str:
        if self.cycles is None:
            return "Repeat.infinite()"
        if self.cycles == 1:
            return "Repeat.once()"
        return f"Repeat.count({self.cycles})"


class Phase(Enum):
    """Where elapsed time falls relative to the timeline."""

    NOT_STARTED = auto()
    ACTIVE = auto()
    ENDED = auto()


@dataclass(frozen=True)
class TimePosition:
    """Elapsed time reduced to a normalized offset within one cycle."""

    phase: Phase
    offset: float
    cycle: int = 0
    reversing: bool = False

    @property
    def finished(self) -> bool:
        return self.phase is Phase.ENDED

    @property
    def first_pass(self) -> bool:
        """True during the forward half of the first cycle (and before it)."""
        return self.cycle == 0 and not self.reversing


@dataclass(frozen=True)
class Keyframe:
    """
    Field values anchored at a normalized offset of a timeline cycle.

    easing governs the segment leading into this keyframe; None means the
    timeline default.
    """

    offset: float
    values: Values
    easing: EasingCurve | None = None

    def __post_init__(self):
        if not isinstance(self.values, Values):
            object.__setattr__(self, "values", Values(self.values))
        if isinstance(self.offset, bool) or not isinstance(self.offset, (int, float)):
            raise TimelineError(f"Keyframe offset must be a number, got {self.offset!r}")
        if not 0.0 <= self.offset <= 1.0:
            raise TimelineError(f"Keyframe offset {self.offset} is outside [0, 1]")
        if self.easing is not None and not is_easing(self.easing):
            raise TimelineError(f"Unknown easing curve: {self.easing!r}")
        if not self.values:
            raise TimelineError(f"Keyframe at offset {self.offset} has no values")
        for name, value in self.values.items():
            require_interpolatable(name, value)

    @classmethod
    def at(cls, offset: float, easing: EasingCurve | None = None, **fields: Any) -> "Keyframe":
        return cls(float(offset), Values(fields), easing)


_MISSING = object()


class _Track:
    """Keyframes of a single field, always spanning offsets 0 and 1."""

    __slots__ = ("offsets", "values", "easings")

    def __init__(self, points: list[tuple[float, Any, EasingCurve | None]]):
        self.offsets = [p[0] for p in points]
        self.values = [p[1] for p in points]
        self.easings = [p[2] for p in points]

    def value_at(self, offset: float, default_easing: EasingCurve, first: Any = _MISSING) -> Any:
        last = len(self.offsets) - 1
        i = bisect_right(self.offsets, offset) - 1
        if i >= last:
            return self.values[last]

        i = max(i, 0)
        start = first if (i == 0 and first is not _MISSING) else self.values[i]
        end = self.values[i + 1]

        t = (offset - self.offsets[i]) / (self.offsets[i + 1] - self.offsets[i])
        easing = self.easings[i + 1] or default_easing
        eased = ease_evaluate(easing, t)
        if eased == 0.0:
            return start
        if eased == 1.0:
            return end
        return lerp(start, end, eased)


class Timeline:
    """
    Immutable keyframe sequence with timing.

    Args:
        keyframes: Keyframes ordered by strictly increasing offset.
        duration: Length of one cycle in seconds.
        delay: Time before the first cycle starts.
        repeat: Looping policy.
        reverse: Play each cycle forward in its first half and backward in
            its second half.
        easing: Default easing for keyframes that do not set their own.
        start_values: Fallback values at offset 0 for fields whose first
            keyframe is later than 0.
        end_values: Fallback values at offset 1 for fields whose last
            keyframe is earlier than 1.
    """

    def __init__(
        self,
        keyframes: Iterable[Keyframe],
        duration: float = DEFAULT_DURATION,
        delay: float = 0.0,
        repeat: Repeat = Repeat(),
        reverse: bool = False,
        easing: EasingCurve = Ease.LINEAR,
        start_values: Mapping[str, Any] | None = None,
        end_values: Mapping[str, Any] | None = None,
    ):
        self._keyframes = tuple(keyframes)
        self._duration = float(duration)
        self._delay = float(delay)
        self._repeat = repeat
        self._reverse = bool(reverse)
        self._easing = easing
        self._start_values = Values(start_values or {})
        self._end_values = Values(end_values or {})

        self._validate()
        self._tracks = self._build_tracks()

    @staticmethod
    def builder() -> "TimelineBuilder":
        return TimelineBuilder()

    def _validate(self) -> None:
        if not self._keyframes:
            raise TimelineError("Timeline needs at least one keyframe")
        for keyframe in self._keyframes:
            if not isinstance(keyframe, Keyframe):
                raise TimelineError(f"Expected Keyframe, got {keyframe!r}")
        for prev, curr in zip(self._keyframes, self._keyframes[1:]):
            if curr.offset == prev.offset:
                raise TimelineError(f"Duplicate keyframe offset {curr.offset} (zero-length segment)")
            if curr.offset < prev.offset:
                raise TimelineError(
                    f"Keyframe offsets must increase: {curr.offset} follows {prev.offset}"
                )
        if not (self._duration > 0 and math.isfinite(self._duration)):
            raise TimelineError(f"Duration must be a positive number of seconds, got {self._duration}")
        if not (self._delay >= 0 and math.isfinite(self._delay)):
            raise TimelineError(f"Delay must be non-negative, got {self._delay}")
        if not isinstance(self._repeat, Repeat):
            raise TimelineError(f"Expected Repeat, got {self._repeat!r}")
        if not is_easing(self._easing):
            raise TimelineError(f"Unknown easing curve: {self._easing!r}")

    def _build_tracks(self) -> dict[str, _Track]:
        names: dict[str, None] = {}
        for keyframe in self._keyframes:
            for name in keyframe.values:
                names[name] = None

        tracks = {}
        for name in names:
            points = [
                (k.offset, k.values[name], k.easing)
                for k in self._keyframes
                if name in k.values
            ]
            if points[0][0] > 0.0:
                if name not in self._start_values:
                    raise TimelineError(
                        f"Field '{name}' has no value at offset 0 "
                        f"(first keyframe at {points[0][0]}) and no start value"
                    )
                require_interpolatable(name, self._start_values[name])
                points.insert(0, (0.0, self._start_values[name], None))
            if points[-1][0] < 1.0:
                if name not in self._end_values:
                    raise TimelineError(
                        f"Field '{name}' has no value at offset 1 "
                        f"(last keyframe at {points[-1][0]}) and no end value"
                    )
                require_interpolatable(name, self._end_values[name])
                points.append((1.0, self._end_values[name], None))
            tracks[name] = _Track(points)
        return tracks

    # -- properties -------------------------------------------------------

    @property
    def keyframes(self) -> tuple[Keyframe, ...]:
        return self._keyframes

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def repeat(self) -> Repeat:
        return self._repeat

    @property
    def reverse(self) -> bool:
        return self._reverse

    @property
    def easing(self) -> EasingCurve:
        return self._easing

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(self._tracks)

    @property
    def total_duration(self) -> float:
        """Delay plus all cycles; math.inf for infinite timelines."""
        if self._repeat.cycles is None:
            return math.inf
        return self._delay + self._duration * self._repeat.cycles

    # -- playback -----------------------------------------------------------

    def position(self, elapsed: float) -> TimePosition:
        """Reduce elapsed seconds to a position within a cycle."""
        t = elapsed - self._delay
        if t < 0:
            return TimePosition(Phase.NOT_STARTED, 0.0)

        cycles = self._repeat.cycles
        if cycles is not None and t >= self._duration * cycles:
            return TimePosition(
                Phase.ENDED,
                0.0 if self._reverse else 1.0,
                cycles - 1,
                self._reverse,
            )

        cycle, rest = divmod(t, self._duration)
        ratio = rest / self._duration
        if not self._reverse:
            return TimePosition(Phase.ACTIVE, ratio, int(cycle))
        if ratio > 0.5:
            return TimePosition(Phase.ACTIVE, (1.0 - ratio) * 2.0, int(cycle), True)
        return TimePosition(Phase.ACTIVE, ratio * 2.0, int(cycle))

    def is_finished(self, elapsed: float) -> bool:
        return self.position(elapsed).finished

    def sample(self, position: TimePosition, start: Mapping[str, Any] | None = None) -> Values:
        """
        Values at a position.

        start replaces the offset-0 values of the fields it covers, but only
        on the first forward pass; later cycles and reverse halves use the
        authored values.
        """
        use_start = start is not None and position.first_pass
        result = {}
        for name, track in self._tracks.items():
            first = start.get(name, _MISSING) if use_start else _MISSING
            result[name] = track.value_at(position.offset, self._easing, first)
        return Values(result)

    def value_at(self, elapsed: float, start: Mapping[str, Any] | None = None) -> Values:
        """Values after elapsed seconds of playback."""
        return self.sample(self.position(elapsed), start)

    def __repr__(self) -> str:
        return (
            f"Timeline(keyframes={len(self._keyframes)}, duration={self._duration}, "
            f"delay={self._delay}, repeat={self._repeat!r}, reverse={self._reverse}, "
            f"fields={sorted(self._tracks)})"
        )


class TimelineBuilder:
    """
    Fluent builder for Timeline.

    Usage:
        timeline = (
            TimelineBuilder()
            .duration(0.3)
            .easing(Ease.OUT_CUBIC)
            .keyframe(0.0, x=0.0)
            .keyframe(1.0, x=10.0)
            .build()
        )
    """

    def __init__(self):
        self._keyframes: list[Keyframe] = []
        self._duration = DEFAULT_DURATION
        self._delay = 0.0
        self._repeat = Repeat.once()
        self._reverse = False
        self._easing: EasingCurve = Ease.LINEAR
        self._start_values: dict[str, Any] = {}
        self._end_values: dict[str, Any] = {}

    def duration(self, seconds: float) -> "TimelineBuilder":
        self._duration = seconds
        return self

    def delay(self, seconds: float) -> "TimelineBuilder":
        self._delay = seconds
        return self

    def repeat(self, repeat: Repeat) -> "TimelineBuilder":
        self._repeat = repeat
        return self

    def reverse(self, reverse: bool = True) -> "TimelineBuilder":
        self._reverse = reverse
        return self

    def easing(self, easing: EasingCurve) -> "TimelineBuilder":
        self._easing = easing
        return self

    def keyframe(
        self,
        offset: float,
        values: Mapping[str, Any] | None = None,
        easing: EasingCurve | None = None,
        **fields: Any,
    ) -> "TimelineBuilder":
        data = dict(values or {})
        data.update(fields)
        self._keyframes.append(Keyframe(float(offset), Values(data), easing))
        return self

    def start_values(self, values: Mapping[str, Any] | None = None, **fields: Any) -> "TimelineBuilder":
        self._start_values.update(values or {})
        self._start_values.update(fields)
        return self

    def end_values(self, values: Mapping[str, Any] | None = None, **fields: Any) -> "TimelineBuilder":
        self._end_values.update(values or {})
        self._end_values.update(fields)
        return self

    def defaults(self, values: Mapping[str, Any] | None = None, **fields: Any) -> "TimelineBuilder":
        """Fallback values for both offset 0 and offset 1."""
        self.start_values(values, **fields)
        return self.end_values(values, **fields)

    def with_fallbacks(
        self,
        start_values: Mapping[str, Any],
        end_values: Mapping[str, Any],
    ) -> "TimelineBuilder":
        """Copy of this builder; explicitly set fallbacks win over the given ones."""
        copy = TimelineBuilder()
        copy._keyframes = list(self._keyframes)
        copy._duration = self._duration
        copy._delay = self._delay
        copy._repeat = self._repeat
        copy._reverse = self._reverse
        copy._easing = self._easing
        copy._start_values = {**start_values, **self._start_values}
        copy._end_values = {**end_values, **self._end_values}
        return copy

    def build(self) -> Timeline:
        return Timeline(
            self._keyframes,
            duration=self._duration,
            delay=self._delay,
            repeat=self._repeat,
            reverse=self._reverse,
            easing=self._easing,
            start_values=self._start_values,
            end_values=self._end_values,
        )


class MergedTimeline:
    """
    Timeline composed of several timelines played side by side.

    Useful when parts of an animation need different timing, e.g. a spinner
    that fades in once but rotates forever. Components are queried in order;
    when two animate the same field, the later one wins. Values are never
    blended between components.
    """

    def __init__(self, timelines: Iterable[Timeline]):
        self._timelines = tuple(timelines)
        if not self._timelines:
            raise TimelineError("MergedTimeline needs at least one timeline")
        for timeline in self._timelines:
            if not isinstance(timeline, Timeline):
                raise TimelineError(f"Expected Timeline, got {timeline!r}")

    @classmethod
    def of(cls, *timelines: Timeline) -> "MergedTimeline":
        return cls(timelines)

    @property
    def timelines(self) -> tuple[Timeline, ...]:
        return self._timelines

    @property
    def fields(self) -> frozenset[str]:
        return frozenset().union(*(t.fields for t in self._timelines))

    @property
    def easing(self) -> EasingCurve:
        return self._timelines[0].easing

    @property
    def total_duration(self) -> float:
        return max(t.total_duration for t in self._timelines)

    def _longest(self) -> Timeline:
        return max(self._timelines, key=lambda t: t.total_duration)

    def position(self, elapsed: float) -> TimePosition:
        """Position of the longest component."""
        return self._longest().position(elapsed)

    def is_finished(self, elapsed: float) -> bool:
        return all(t.is_finished(elapsed) for t in self._timelines)

    def sample(self, position: TimePosition, start: Mapping[str, Any] | None = None) -> Values:
        """
        Values of every component at the same position.

        Components keep their own timing in value_at(); here they are all read
        at one normalized offset.
        """
        result: dict[str, Any] = {}
        for timeline in self._timelines:
            result.update(timeline.sample(position, start))
        return Values(result)

    def value_at(self, elapsed: float, start: Mapping[str, Any] | None = None) -> Values:
        result: dict[str, Any] = {}
        for timeline in self._timelines:
            result.update(timeline.value_at(elapsed, start))
        return Values(result)

    def __repr__(self) -> str:
        return f"MergedTimeline({list(self._timelines)!r})"
