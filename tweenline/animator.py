"""State animator: a state machine whose transitions are timelines.

Each state has nominal values (what the fields look like when the animator
rests in it). Moving between states plays the timeline registered for the
(source, target) pair, or for (ANY, target) when no exact pair exists.

A transition always starts from the values the animator is actually showing.
Redirecting a transition half way through captures the in-flight values as
the new start, so the output never jumps.

Usage:
    class Button(Enum):
        NORMAL = auto()
        HOVER = auto()
        PRESSED = auto()

    animator = (
        Animator.builder()
        .state(Button.NORMAL, scale=1.0, glow=0.0)
        .state(Button.HOVER, scale=1.1, glow=0.5)
        .state(Button.PRESSED, scale=0.95, glow=1.0)
        .transition(ANY, Button.HOVER, Timeline.builder().duration(0.2).keyframe(1.0, scale=1.1))
        .transition(ANY, Button.NORMAL, Timeline.builder().duration(0.3).keyframe(1.0, scale=1.0))
        .transition(Button.HOVER, Button.PRESSED, Timeline.builder().duration(0.05).keyframe(1.0, scale=0.95))
        .build()
    )

    animator.set_state(Button.HOVER)
    # each frame
    animator.tick(dt)
    fields.apply(widget, animator.value())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Hashable, Iterable, Iterator, Mapping, TypeVar, Union

from tweenline import log
from tweenline.ease import evaluate as ease_evaluate
from tweenline.errors import AnimatorError, TransitionError
from tweenline.lerp import lerp, require_interpolatable
from tweenline.timeline import MergedTimeline, Timeline, TimelineBuilder
from tweenline.values import Values

S = TypeVar("S", bound=Hashable)

TimelineLike = Union[Timeline, MergedTimeline]


class _AnyState:
    """Wildcard source state for transitions."""

    _instance: "_AnyState | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"

    def __reduce__(self):
        return (_AnyState, ())


ANY = _AnyState()


@dataclass(frozen=True)
class Idle(Generic[S]):
    """Animator rests in state; output equals its nominal values."""

    state: S


@dataclass(frozen=True)
class Transitioning(Generic[S]):
    """Animator plays the transition from source to target."""

    source: S
    target: S


AnimatorStatus = Union[Idle, Transitioning]


class TransitionTable(Generic[S]):
    """
    Immutable mapping (source, target) -> timeline.

    Use ANY as source for a transition that applies from every state without
    a more specific entry.
    """

    def __init__(
        self,
        transitions: Mapping[tuple[Any, S], TimelineLike] | Iterable[tuple[tuple[Any, S], TimelineLike]] = (),
    ):
        items = transitions.items() if isinstance(transitions, Mapping) else transitions
        self._table: dict[tuple[Any, S], TimelineLike] = {}
        for key, timeline in items:
            if not (isinstance(key, tuple) and len(key) == 2):
                raise AnimatorError(f"Transition key must be a (source, target) pair, got {key!r}")
            if key[1] is ANY:
                raise AnimatorError(f"Transition target cannot be ANY: {key!r}")
            if not isinstance(timeline, (Timeline, MergedTimeline)):
                raise AnimatorError(f"Transition {key!r} must map to a timeline, got {timeline!r}")
            if key in self._table:
                raise AnimatorError(f"Duplicate transition {key[0]!r} -> {key[1]!r}")
            self._table[key] = timeline

    def resolve(self, source: Any, target: S) -> TimelineLike:
        """Timeline for source -> target, falling back to ANY -> target."""
        timeline = self._table.get((source, target))
        if timeline is None:
            timeline = self._table.get((ANY, target))
        if timeline is None:
            raise TransitionError(source, target)
        return timeline

    def get(self, source: Any, target: S, default: TimelineLike | None = None) -> TimelineLike | None:
        return self._table.get((source, target), default)

    def states(self) -> set:
        """Every concrete state named by the table."""
        result = set()
        for source, target in self._table:
            if source is not ANY:
                result.add(source)
            result.add(target)
        return result

    def items(self):
        return self._table.items()

    def __contains__(self, key) -> bool:
        return key in self._table

    def __iter__(self) -> Iterator[tuple[Any, S]]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{s!r}->{t!r}" for s, t in self._table)
        return f"TransitionTable({pairs})"


class Animator(Generic[S]):
    """
    Runtime state animator.

    Args:
        states: Nominal values per state. All states must define the same
            fields.
        transitions: TransitionTable or a mapping accepted by it.
        initial: Starting state; the animator starts idle in it.
    """

    def __init__(
        self,
        states: Mapping[S, Mapping[str, Any]],
        transitions: TransitionTable[S] | Mapping[tuple[Any, S], TimelineLike],
        initial: S,
    ):
        if not states:
            raise AnimatorError("Animator needs at least one state")

        self._nominal: dict[S, Values] = {state: Values(values) for state, values in states.items()}
        self._transitions = (
            transitions if isinstance(transitions, TransitionTable) else TransitionTable(transitions)
        )
        self._field_order = tuple(next(iter(self._nominal.values())))
        self._fields = frozenset(self._field_order)
        self._validate(initial)

        self._state: S = initial
        self._target: S | None = None
        self._timeline: TimelineLike | None = None
        self._elapsed = 0.0
        self._start: Values = self._nominal[initial]
        self._output: Values = self._nominal[initial]

    @staticmethod
    def builder() -> "AnimatorBuilder":
        return AnimatorBuilder()

    def _validate(self, initial: S) -> None:
        if initial not in self._nominal:
            raise AnimatorError(f"Initial state {initial!r} has no nominal values")
        for state, values in self._nominal.items():
            if frozenset(values) != self._fields:
                raise AnimatorError(
                    f"State {state!r} defines fields {sorted(values)}, expected {sorted(self._fields)}"
                )
            for name, value in values.items():
                require_interpolatable(name, value)
        for state in self._transitions.states():
            if state not in self._nominal:
                raise AnimatorError(f"Transition references state {state!r} without nominal values")
        for (source, target), timeline in self._transitions.items():
            extra = timeline.fields - self._fields
            if extra:
                raise AnimatorError(
                    f"Transition {source!r} -> {target!r} animates unknown fields {sorted(extra)}"
                )

    # -- introspection --------------------------------------------------------

    @property
    def state(self) -> S:
        """Most recently requested state (the target while transitioning)."""
        return self._state if self._target is None else self._target

    @property
    def target(self) -> S | None:
        return self._target

    @property
    def is_idle(self) -> bool:
        return self._target is None

    @property
    def elapsed(self) -> float:
        """Seconds since the active transition started; 0 when idle."""
        return self._elapsed

    @property
    def start_values(self) -> Values:
        """Snapshot captured when the active transition started."""
        return self._start

    @property
    def fields(self) -> tuple[str, ...]:
        return self._field_order

    @property
    def states(self) -> tuple[S, ...]:
        return tuple(self._nominal)

    @property
    def transitions(self) -> TransitionTable[S]:
        return self._transitions

    def nominal(self, state: S) -> Values:
        return self._nominal[state]

    def current_state_hint(self) -> AnimatorStatus:
        if self._target is None:
            return Idle(self._state)
        return Transitioning(self._state, self._target)

    # -- control ----------------------------------------------------------------

    def set_state(self, state: S) -> None:
        """
        Request a state change.

        No-op when state is already the idle state or the current target.
        Raises TransitionError (leaving the animator untouched) when state is
        unknown or no transition leads to it.
        """
        source = self._state if self._target is None else self._target
        if state == source:
            return
        if state not in self._nominal:
            raise TransitionError(source, state, f"Unknown state {state!r}")

        timeline = self._transitions.resolve(source, state)

        if self._target is not None:
            log.debug(f"[Animator] Redirect {self._state!r} -> {self._target!r} to {state!r}")
        else:
            log.debug(f"[Animator] Transition {source!r} -> {state!r}")

        self._start = self._output
        self._state = source
        self._target = state
        self._timeline = timeline
        self._elapsed = 0.0
        self._output = self._compute()

    def tick(self, delta: float) -> None:
        """Advance the active transition by delta seconds."""
        if delta < 0:
            raise ValueError(f"Animator cannot tick backwards (delta={delta})")
        if self._target is None:
            return

        self._elapsed += delta
        if self._timeline.is_finished(self._elapsed):
            self._finish()
        else:
            self._output = self._compute()

    def value(self) -> Values:
        """Values to show right now."""
        return self._output

    # -- internals ----------------------------------------------------------------

    def _finish(self) -> None:
        target = self._target
        log.debug(f"[Animator] Reached {target!r} after {self._elapsed:.3f}s")
        self._state = target
        self._target = None
        self._timeline = None
        self._elapsed = 0.0
        self._output = self._nominal[target]
        self._start = self._output

    def _compute(self) -> Values:
        timeline = self._timeline
        animated = timeline.value_at(self._elapsed, self._start)

        missing = self._fields - timeline.fields
        if not missing:
            return Values((name, animated[name]) for name in self._field_order)

        # Fields the timeline does not touch glide to the target once
        target_values = self._nominal[self._target]
        position = timeline.position(self._elapsed)
        eased = ease_evaluate(timeline.easing, position.offset) if position.first_pass else 1.0

        result = {}
        for name in self._field_order:
            if name not in missing:
                result[name] = animated[name]
            elif eased == 0.0:
                result[name] = self._start[name]
            elif eased == 1.0:
                result[name] = target_values[name]
            else:
                result[name] = lerp(self._start[name], target_values[name], eased)
        return Values(result)

    def __repr__(self) -> str:
        return f"Animator({self.current_state_hint()!r}, elapsed={self._elapsed:.3f})"


class AnimatorBuilder(Generic[S]):
    """
    Fluent builder for Animator.

    The first declared state is the initial one unless initial() says
    otherwise. Transitions accept either a built Timeline/MergedTimeline or a
    TimelineBuilder; a builder gets endpoint fallbacks from the nominal values
    (start: source state, or target for ANY; end: target state).
    """

    def __init__(self):
        self._states: dict[S, Values] = {}
        self._initial: S | None = None
        self._has_initial = False
        self._transitions: list[tuple[Any, S, TimelineLike | TimelineBuilder]] = []

    def state(self, state: S, values: Mapping[str, Any] | None = None, **fields: Any) -> "AnimatorBuilder[S]":
        if state is ANY:
            raise AnimatorError("ANY cannot be declared as a state")
        if state in self._states:
            raise AnimatorError(f"State {state!r} declared twice")
        data = dict(values or {})
        data.update(fields)
        self._states[state] = Values(data)
        return self

    def initial(self, state: S) -> "AnimatorBuilder[S]":
        self._initial = state
        self._has_initial = True
        return self

    def transition(
        self,
        source: Any,
        target: S,
        timeline: TimelineLike | TimelineBuilder,
    ) -> "AnimatorBuilder[S]":
        self._transitions.append((source, target, timeline))
        return self

    def _nominal_for(self, state: Any, role: str) -> Values:
        try:
            return self._states[state]
        except KeyError:
            raise AnimatorError(f"Transition {role} {state!r} has no nominal values") from None

    def build(self) -> Animator[S]:
        if not self._states:
            raise AnimatorError("Animator needs at least one state")

        table = []
        for source, target, timeline in self._transitions:
            if isinstance(timeline, TimelineBuilder):
                end = self._nominal_for(target, "target")
                start = end if source is ANY else self._nominal_for(source, "source")
                timeline = timeline.with_fallbacks(start, end).build()
            table.append(((source, target), timeline))

        initial = self._initial if self._has_initial else next(iter(self._states))
        return Animator(self._states, TransitionTable(table), initial)
